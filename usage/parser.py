"""Parser für die Ausgabe von `claude /usage`.

Die CLI kann ältere Blöcke (Trust-Dialog, wiederholte Prompts) vor dem
eigentlichen Report ausgeben. Deshalb zählt jeweils das LETZTE Vorkommen der
Marker, und innerhalb eines Abschnitts der ERSTE Prozentwert.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from config import PLACEHOLDER_VALUE

SESSION_MARKER = "Current session"
WEEKLY_MARKER = "Current week"

_PERCENT_RE = re.compile(r"\d+%")
# Label endet vor "(" bzw. Zeilenende; eine direkt folgende Zeitzone in
# Klammern gehört noch dazu: "Resets 3pm (Australia/Melbourne)"
_RESETS_RE = re.compile(r"Resets [^(\n]+(?:\([^)\n]*\))?")
_RESETS_PREFIX_LEN = len("Resets ")


@dataclass(frozen=True)
class UsageSnapshot:
    """Ein geparster Usage-Stand. Fehlende Werte bleiben None, nie 0."""

    session_percent: float | None = None
    weekly_percent: float | None = None
    session_reset_label: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.session_percent is not None and self.weekly_percent is not None

    @property
    def display_string(self) -> str:
        session = format_percent(self.session_percent)
        weekly = format_percent(self.weekly_percent)
        return f"{session} ({weekly} weekly)"


def format_percent(value: float | None) -> str:
    """45.0 → '45%', None → '--'."""
    if value is None:
        return PLACEHOLDER_VALUE
    return f"{value:g}%"


def _first_percent(section: str) -> float | None:
    match = _PERCENT_RE.search(section)
    if match is None:
        return None
    return float(match.group()[:-1])


def parse_usage_output(output: str) -> UsageSnapshot | None:
    """Extrahiert Session-/Weekly-Prozent und Reset-Zeit.

    Returns:
        UsageSnapshot, oder None wenn keiner der beiden Prozentwerte gefunden
        wurde (= noch keine verwertbaren Daten).
    """
    if not output:
        return None

    session_percent = None
    weekly_percent = None
    session_reset_label = None

    session_idx = output.rfind(SESSION_MARKER)
    if session_idx != -1:
        after_session = output[session_idx + len(SESSION_MARKER) :]
        end = after_session.find(WEEKLY_MARKER)
        section = after_session if end == -1 else after_session[:end]

        session_percent = _first_percent(section)

        reset_match = _RESETS_RE.search(section)
        if reset_match:
            session_reset_label = reset_match.group()[_RESETS_PREFIX_LEN:].strip()

    weekly_idx = output.rfind(WEEKLY_MARKER)
    if weekly_idx != -1:
        weekly_percent = _first_percent(output[weekly_idx + len(WEEKLY_MARKER) :])

    if session_percent is None and weekly_percent is None:
        return None

    return UsageSnapshot(
        session_percent=session_percent,
        weekly_percent=weekly_percent,
        session_reset_label=session_reset_label,
    )
