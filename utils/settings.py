"""Settings-Store für Clive.

Zwei persistente Werte (Display-Modus, Refresh-Intervall). Das Objekt wird
explizit erzeugt und an Scheduler und Menübar übergeben; Änderungen laufen
über subscribe() statt über globalen State.
"""

from __future__ import annotations

import logging
from typing import Callable

from cli.types import DisplayMode, RefreshInterval
from utils.preferences import load_preferences, set_preference

logger = logging.getLogger("clive")

DISPLAY_MODE_KEY = "displayMode"
REFRESH_INTERVAL_KEY = "refreshInterval"

DEFAULT_DISPLAY_MODE = DisplayMode.text
DEFAULT_REFRESH_INTERVAL = RefreshInterval.fiveMinutes

SettingsListener = Callable[[str, object], None]


class Settings:
    """Display-Modus und Refresh-Intervall mit Observer-Support."""

    def __init__(
        self,
        display_mode: DisplayMode = DEFAULT_DISPLAY_MODE,
        refresh_interval: RefreshInterval = DEFAULT_REFRESH_INTERVAL,
        *,
        persist: bool = True,
    ):
        self._display_mode = display_mode
        self._refresh_interval = refresh_interval
        self._persist = persist
        self._listeners: list[SettingsListener] = []

    @classmethod
    def load(cls) -> Settings:
        """Liest gespeicherte Werte; fehlende/ungültige → Defaults."""
        prefs = load_preferences()

        display_mode = DisplayMode.parse(prefs.get(DISPLAY_MODE_KEY))
        if display_mode is None:
            if DISPLAY_MODE_KEY in prefs:
                logger.warning(
                    f"Ungültiger {DISPLAY_MODE_KEY}={prefs[DISPLAY_MODE_KEY]!r}, "
                    f"nutze '{DEFAULT_DISPLAY_MODE.value}'"
                )
            display_mode = DEFAULT_DISPLAY_MODE

        refresh_interval = RefreshInterval.parse(prefs.get(REFRESH_INTERVAL_KEY))
        if refresh_interval is None:
            if REFRESH_INTERVAL_KEY in prefs:
                logger.warning(
                    f"Ungültiges {REFRESH_INTERVAL_KEY}={prefs[REFRESH_INTERVAL_KEY]!r}, "
                    f"nutze {DEFAULT_REFRESH_INTERVAL.value}s"
                )
            refresh_interval = DEFAULT_REFRESH_INTERVAL

        return cls(display_mode, refresh_interval)

    @property
    def display_mode(self) -> DisplayMode:
        return self._display_mode

    @display_mode.setter
    def display_mode(self, mode: DisplayMode) -> None:
        mode = DisplayMode(mode)
        if mode == self._display_mode:
            return
        self._display_mode = mode
        self._save(DISPLAY_MODE_KEY, mode.value)
        self._notify(DISPLAY_MODE_KEY, mode)

    @property
    def refresh_interval(self) -> RefreshInterval:
        return self._refresh_interval

    @refresh_interval.setter
    def refresh_interval(self, interval: RefreshInterval) -> None:
        interval = RefreshInterval(interval)
        if interval == self._refresh_interval:
            return
        self._refresh_interval = interval
        self._save(REFRESH_INTERVAL_KEY, interval.value)
        self._notify(REFRESH_INTERVAL_KEY, interval)

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Registriert listener(key, value). Gibt Unsubscribe-Funktion zurück."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _save(self, key: str, value) -> None:
        if self._persist:
            set_preference(key, value)

    def _notify(self, key: str, value) -> None:
        # Kopie: Listener dürfen sich während des Callbacks abmelden
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception:
                logger.exception(f"Settings-Listener für '{key}' fehlgeschlagen")
