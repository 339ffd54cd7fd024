from __future__ import annotations

"""Loading and saving of user settings.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from pathlib import Path
import json
import logging
from typing import Any, List, Dict

from core import REST_EXTEND_SECONDS, WARMUP_REST_SECONDS

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"

# Default settings to initialize the file on first run.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "sound_level", "value": 1.0, "type": "slider"},
    {"key": "sound_on", "value": True, "type": "bool"},
    {"key": "rest_extend_seconds", "value": REST_EXTEND_SECONDS, "type": "int"},
    {"key": "warmup_rest_seconds", "value": WARMUP_REST_SECONDS, "type": "int"},
    {"key": "weight_unit", "value": "kg", "type": "choice"},
]

# Internal cache so settings are only read from disk once.
_settings_cache: List[Dict[str, Any]] | None = None


def _defaults() -> List[Dict[str, Any]]:
    return [dict(item) for item in DEFAULT_SETTINGS]


def load_settings() -> List[Dict[str, Any]]:
    """Load settings from :data:`SETTINGS_PATH` or create defaults.

    Keys added to :data:`DEFAULT_SETTINGS` after the file was written are
    appended with their default value.
    """
    if SETTINGS_PATH.exists():
        try:
            with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logging.warning("Could not read settings from %s", SETTINGS_PATH, exc_info=True)
            data = None
        if isinstance(data, list):
            known = {item.get("key") for item in data if isinstance(item, dict)}
            data.extend(item for item in _defaults() if item["key"] not in known)
            return data
    settings = _defaults()
    save_settings(settings)
    return settings


def save_settings(settings: List[Dict[str, Any]]) -> None:
    """Persist ``settings`` to :data:`SETTINGS_PATH`."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh)


def get_settings() -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def get_value(key: str, default: Any = None) -> Any:
    """Fetch the value associated with ``key``."""
    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    return default


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)


def get_int(key: str, default: int) -> int:
    """Return ``key`` as a non-negative int, or ``default`` if unusable."""
    value = get_value(key, default)
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else default
