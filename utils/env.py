"""Umgebungsvariablen und `.env`-Dateien für Clive.

Gelesen werden nur CLIVE_* Variablen (Pfade, Timeout, Debug). Werte aus
`.env`-Dateien (python-dotenv) füllen Lücken in `os.environ`:

1) Prozess-Umgebung
2) ~/.clive/.env
3) ./.env
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger("clive")

_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def parse_bool(value: str | None) -> bool | None:
    """'yes'/'0'/... → bool, sonst None."""
    if value is None:
        return None
    return _BOOL_WORDS.get(value.strip().lower())


def get_env_bool_default(name: str, default: bool) -> bool:
    """Bool aus der Umgebung; ungültige Werte werden mit Warnung ignoriert."""
    raw = os.getenv(name)
    if raw is None:
        return default
    parsed = parse_bool(raw)
    if parsed is None:
        logger.warning(f"Ungültiger {name}={raw!r}, nutze {default}")
        return default
    return parsed


def get_env_str(name: str) -> str | None:
    """Getrimmter String aus der Umgebung; leer zählt als nicht gesetzt."""
    value = (os.getenv(name) or "").strip()
    return value or None


def _read_env_file(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if value is not None
    }


def load_environment(*, override_existing: bool = False) -> None:
    """Übernimmt `.env`-Werte nach `os.environ`.

    Args:
        override_existing: Wenn True, überschreiben Datei-Werte auch bereits
            gesetzte Variablen (User-.env gewinnt weiterhin über lokale .env).
    """
    from config import USER_CONFIG_DIR

    merged = _read_env_file(Path(".env"))
    merged.update(_read_env_file(USER_CONFIG_DIR / ".env"))

    for key, value in merged.items():
        if override_existing or key not in os.environ:
            os.environ[key] = value
    if merged:
        logger.debug(f".env geladen: {', '.join(sorted(merged))}")


__all__ = [
    "get_env_bool_default",
    "get_env_str",
    "load_environment",
    "parse_bool",
]
