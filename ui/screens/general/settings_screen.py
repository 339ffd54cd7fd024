from __future__ import annotations

"""Screen for modifying app settings."""

from kivymd.uix.screen import MDScreen
from kivymd.toast import toast
from kivy.properties import StringProperty
import logging

from core import REST_EXTEND_SECONDS, WARMUP_REST_SECONDS
from backend import settings as app_settings


class SettingsScreen(MDScreen):
    """Display and persist user-configurable settings."""

    return_to = StringProperty("programs")
    """Name of the screen to return to when leaving settings."""

    def on_pre_enter(self, *args) -> None:
        """Populate controls from stored settings."""
        self.ids.sound_level_slider.value = app_settings.get_value("sound_level") or 1.0
        sound_on = app_settings.get_value("sound_on")
        self.ids.sound_toggle.active = True if sound_on is None else bool(sound_on)
        self.ids.extend_field.text = str(
            app_settings.get_int("rest_extend_seconds", REST_EXTEND_SECONDS)
        )
        self.ids.warmup_field.text = str(
            app_settings.get_int("warmup_rest_seconds", WARMUP_REST_SECONDS)
        )
        self.ids.unit_toggle.active = app_settings.get_value("weight_unit", "kg") == "lb"
        return super().on_pre_enter(*args)

    def on_sound_level(self, slider, value: float) -> None:
        app_settings.set_value("sound_level", value)

    def on_sound_toggle(self, switch, value: bool) -> None:
        app_settings.set_value("sound_on", value)

    def on_unit_toggle(self, switch, value: bool) -> None:
        app_settings.set_value("weight_unit", "lb" if value else "kg")

    def save_seconds(self, key: str, text: str) -> None:
        """Store a whole number of seconds entered in a text field."""
        text = text.strip()
        if not text.isdigit():
            logging.info("Ignoring invalid %s value %r", key, text)
            toast("Enter a whole number of seconds")
            return
        app_settings.set_value(key, int(text))
