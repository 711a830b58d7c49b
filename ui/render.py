"""Darstellungslogik ohne AppKit: Farbstufen, Titel, Chart-Geometrie.

Die Farbstufen gelten für alle drei Modi (Text, Pie, Bar) identisch.
"""

from __future__ import annotations

from enum import Enum

from cli.types import DisplayMode
from config import PLACEHOLDER_VALUE, STATUS_PREFIX
from usage.parser import UsageSnapshot, format_percent

# =============================================================================
# Farbstufen
# =============================================================================

WARNING_THRESHOLD = 70.0  # inklusive Untergrenze
ALERT_THRESHOLD = 90.0  # inklusive Untergrenze


class UsageTier(Enum):
    NOMINAL = "nominal"
    WARNING = "warning"
    ALERT = "alert"


# RGB 0..1 für NSColor.colorWithSRGBRed_green_blue_alpha_
TIER_COLORS = {
    UsageTier.NOMINAL: (0.2, 0.9, 0.3),
    UsageTier.WARNING: (1.0, 0.6, 0.0),
    UsageTier.ALERT: (1.0, 0.2, 0.2),
}


def tier_for_percent(percent: float) -> UsageTier:
    """70 → WARNING, 90 → ALERT (Untergrenzen inklusive)."""
    if percent >= ALERT_THRESHOLD:
        return UsageTier.ALERT
    if percent >= WARNING_THRESHOLD:
        return UsageTier.WARNING
    return UsageTier.NOMINAL


def color_for_percent(percent: float) -> tuple[float, float, float]:
    return TIER_COLORS[tier_for_percent(percent)]


def title_tier(snapshot: UsageSnapshot | None) -> UsageTier | None:
    """Stufe des höheren Werts; None ohne Daten."""
    if snapshot is None:
        return None
    values = [
        v for v in (snapshot.session_percent, snapshot.weekly_percent) if v is not None
    ]
    if not values:
        return None
    return tier_for_percent(max(values))


# =============================================================================
# Texte
# =============================================================================


def format_status_title(snapshot: UsageSnapshot | None, mode: DisplayMode) -> str:
    """Titel des Status-Items. Chart-Modi zeigen nur das Präfix."""
    if mode is not DisplayMode.text:
        return STATUS_PREFIX
    if snapshot is None:
        return f"{STATUS_PREFIX} {PLACEHOLDER_VALUE}"
    return f"{STATUS_PREFIX} {snapshot.display_string}"


def format_session_item(snapshot: UsageSnapshot | None) -> str:
    session = format_percent(snapshot.session_percent if snapshot else None)
    if snapshot is not None and snapshot.session_reset_label:
        return f"Session: {session} (resets {snapshot.session_reset_label})"
    return f"Session: {session}"


def format_weekly_item(snapshot: UsageSnapshot | None) -> str:
    return f"Weekly: {format_percent(snapshot.weekly_percent if snapshot else None)}"


# =============================================================================
# Chart-Geometrie (Punkte, Ursprung unten links wie AppKit)
# =============================================================================

IMAGE_HEIGHT = 22

PIE_IMAGE_WIDTH = 42
PIE_SIZE = 14
PIE_SESSION_X = 4
PIE_WEEKLY_X = 24

BAR_IMAGE_WIDTH = 48
BAR_WIDTH = 40
BAR_HEIGHT = 6
BAR_SPACING = 2
BAR_X = 4
BAR_CORNER_RADIUS = 2


def clamp_percent(percent: float | None) -> float:
    """None → 0; Werte außerhalb 0..100 werden begrenzt."""
    if percent is None:
        return 0.0
    return max(0.0, min(float(percent), 100.0))


def pie_slice_angles(percent: float | None) -> tuple[float, float]:
    """Start/End-Winkel in Grad: ab 12 Uhr im Uhrzeigersinn."""
    start = 90.0
    return start, start - clamp_percent(percent) * 3.6


def pie_rects() -> list[tuple[tuple[float, float], tuple[float, float]]]:
    """Session links, Weekly rechts, vertikal zentriert."""
    y = (IMAGE_HEIGHT - PIE_SIZE) / 2
    return [
        ((PIE_SESSION_X, y), (PIE_SIZE, PIE_SIZE)),
        ((PIE_WEEKLY_X, y), (PIE_SIZE, PIE_SIZE)),
    ]


def bar_fill_width(percent: float | None, width: float = BAR_WIDTH) -> float:
    return width * clamp_percent(percent) / 100.0


def bar_rects() -> list[tuple[tuple[float, float], tuple[float, float]]]:
    """Session oben, Weekly unten."""
    session_y = IMAGE_HEIGHT / 2 + BAR_SPACING / 2
    weekly_y = IMAGE_HEIGHT / 2 - BAR_HEIGHT - BAR_SPACING / 2
    return [
        ((BAR_X, session_y), (BAR_WIDTH, BAR_HEIGHT)),
        ((BAR_X, weekly_y), (BAR_WIDTH, BAR_HEIGHT)),
    ]
