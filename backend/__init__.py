"""Persistence and session logic for the live workout tracker."""
