"""Logging-Setup für Clive.

Konfiguriert Datei-Logging mit Rotation und optionalem stderr-Output.
"""

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Logger-Singleton
logger = logging.getLogger("clive")

# Session-ID im Dateiformat: trennt Läufe in derselben (rotierten) Log-Datei
_FILE_FORMAT = "%(asctime)s [{session}] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%H:%M:%S"

# Session-ID für Korrelation (wird beim ersten Zugriff generiert)
_session_id: str = ""


def _generate_session_id() -> str:
    """Erzeugt kurze, lesbare Session-ID (8 Zeichen)."""
    return uuid.uuid4().hex[:8]


def get_session_id() -> str:
    """Gibt die aktuelle Session-ID zurück."""
    global _session_id
    if not _session_id:
        _session_id = _generate_session_id()
    return _session_id


def get_logger() -> logging.Logger:
    """Gibt den Clive Logger zurück."""
    return logger


def _rotating_handler(path: Path) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(_FILE_FORMAT.format(session=get_session_id()), _DATE_FORMAT)
    )
    return handler


def setup_logging(debug: bool = False) -> None:
    """Konfiguriert Logging: Datei mit Rotation + optional stderr.

    Args:
        debug: Wenn True, wird auch auf stderr geloggt
    """
    from config import FALLBACK_LOG_FILE, LOG_FILE

    # Verhindere doppelte Handler bei mehrfachem Aufruf
    if logger.handlers:
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        return

    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    handler_added = False
    for path in (LOG_FILE, FALLBACK_LOG_FILE):
        try:
            logger.addHandler(_rotating_handler(path))
            handler_added = True
            break
        except OSError:
            # z.B. Sandbox ohne Schreibrecht im Home → nächster Kandidat
            continue

    if not handler_added:
        # Minimaler Fallback, Logging darf App-Start nicht blockieren
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        stderr_handler.setFormatter(
            logging.Formatter(_FILE_FORMAT.format(session=get_session_id()), _DATE_FORMAT)
        )
        logger.addHandler(stderr_handler)

    # Stderr-Handler (nur im Debug-Modus)
    if debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(stderr_handler)


def log(message: str) -> None:
    """Status-Meldung auf stderr.

    stdout bleibt für `clive.py --once` reserviert.
    """
    print(message, file=sys.stderr)


def error(message: str) -> None:
    """Fehlermeldung auf stderr."""
    print(f"Fehler: {message}", file=sys.stderr)
