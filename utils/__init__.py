"""Utility-Module für Clive.

Gemeinsame Hilfsfunktionen für Logging und Zeitangaben.

Usage:
    from utils import setup_logging, error, format_duration

    setup_logging(debug=True)
"""

# NOTE:
# Keep this package-level re-export module small.
# Submodules like `utils.settings` import `cli` and `config`; importing them
# here would pull those into every `utils.*` import.

from .logging import setup_logging, log, error, get_logger, get_session_id
from .timing import format_duration, log_preview, monotonic_ms

__all__ = [
    "setup_logging",
    "log",
    "error",
    "get_logger",
    "get_session_id",
    "format_duration",
    "log_preview",
    "monotonic_ms",
]
