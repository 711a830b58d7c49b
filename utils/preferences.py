"""Persistente Einstellungen für Clive.

Speichert User-Preferences in ~/.clive/preferences.json.
"""

import json
import logging

import config

logger = logging.getLogger("clive")


def load_preferences() -> dict:
    """Lädt Preferences aus JSON."""
    prefs_file = config.PREFS_FILE
    if not prefs_file.exists():
        return {}
    try:
        data = json.loads(prefs_file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Preferences nicht lesbar ({prefs_file}): {e}")
        return {}
    return data if isinstance(data, dict) else {}


def save_preferences(prefs: dict) -> None:
    """Speichert Preferences als JSON."""
    prefs_file = config.PREFS_FILE
    prefs_file.parent.mkdir(parents=True, exist_ok=True)
    prefs_file.write_text(json.dumps(prefs, indent=2))


def set_preference(key: str, value) -> bool:
    """Setzt einen einzelnen Key. Gibt False zurück, wenn Speichern scheitert."""
    prefs = load_preferences()
    prefs[key] = value
    try:
        save_preferences(prefs)
    except OSError as e:
        logger.error(f"Preference '{key}' konnte nicht gespeichert werden: {e}")
        return False
    return True
