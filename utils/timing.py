"""Zeitangaben für Refresh-Dauern und Log-Auszüge.

Die Dauer eines Refreshs wird im Runner gemessen und als
RefreshResult.duration_ms weitergereicht; geloggt wird sie einmal pro
Zyklus im Scheduler.
"""

import time


def monotonic_ms() -> float:
    """Monotone Uhr in Millisekunden (nur für Differenzen)."""
    return time.monotonic() * 1000


def format_duration(milliseconds: float) -> str:
    """850 → '850ms', 5030 → '5.03s'."""
    if milliseconds < 1000:
        return f"{milliseconds:.0f}ms"
    return f"{milliseconds / 1000:.2f}s"


def log_preview(text: str, max_length: int = 100) -> str:
    """Ende der Prozess-Ausgabe für Logs; der Report steht am Schluss."""
    text = text.strip()
    if len(text) > max_length:
        return "..." + text[-max_length:]
    return text
