"""Shared type definitions for Clive.

Enums used by the settings store, the menu bar and clive.py.
"""

from __future__ import annotations

from enum import Enum


class DisplayMode(str, Enum):
    """Darstellung in der Menübar."""

    text = "text"
    pieChart = "pieChart"
    barChart = "barChart"

    @property
    def display_name(self) -> str:
        return _DISPLAY_MODE_NAMES[self]

    @classmethod
    def parse(cls, value) -> DisplayMode | None:
        """Liefert den Modus zu einem gespeicherten Wert oder None."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


_DISPLAY_MODE_NAMES = {
    DisplayMode.text: "Text",
    DisplayMode.pieChart: "Pie Charts",
    DisplayMode.barChart: "Bar Chart",
}


class RefreshInterval(int, Enum):
    """Erlaubte Refresh-Intervalle in Sekunden."""

    oneMinute = 60
    twoMinutes = 120
    fiveMinutes = 300
    tenMinutes = 600
    fifteenMinutes = 900
    thirtyMinutes = 1800

    @property
    def display_name(self) -> str:
        minutes = self.value // 60
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"

    @classmethod
    def parse(cls, value) -> RefreshInterval | None:
        """Liefert das Intervall zu einem gespeicherten Wert oder None.

        bool wird abgelehnt, obwohl es in Python ein int ist.
        """
        if isinstance(value, bool):
            return None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None
