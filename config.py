"""Zentrale Konfiguration für Clive.

Gemeinsame Konstanten für CLI-Aufruf, Polling und Pfade.
Vermeidet Duplikation zwischen Modulen.
"""

import tempfile
from pathlib import Path

# =============================================================================
# Externe CLI
# =============================================================================

# `claude /usage` ist interaktiv – wir fahren es über ein expect-Skript
DEFAULT_CLAUDE_PATH = "/opt/homebrew/bin/claude"
DEFAULT_EXPECT_PATH = "/usr/bin/expect"
USAGE_SUBCOMMAND = "/usage"

# Fester PATH für den Kindprozess (kein ererbter Shell-State)
PROCESS_PATH = "/opt/homebrew/bin:/usr/local/bin:/usr/bin:/bin"

# Eigenes Arbeitsverzeichnis, damit claude keinen Projekt-Kontext findet
WORK_DIR = Path(tempfile.gettempdir()) / "claude-usage-bar"
EXPECT_SCRIPT_NAME = "claude_usage.exp"

# =============================================================================
# Polling
# =============================================================================

REFRESH_TIMEOUT = 30  # Wall-Clock-Budget pro Refresh (Sekunden)
EXPECT_TIMEOUT = 25  # Muss kleiner als REFRESH_TIMEOUT sein
EXPECT_SETTLE_SECONDS = 1  # Nachlauf, damit die Ausgabe vollständig ist

# Ab so vielen PARSE_MISS in Folge wird ein Format-Wechsel vermutet
PARSE_MISS_WARN_THRESHOLD = 3

# =============================================================================
# Menübar
# =============================================================================

STATUS_PREFIX = "CC:"
PLACEHOLDER_VALUE = "--"

# =============================================================================
# Lokale Pfade
# =============================================================================

# User-Verzeichnis für Preferences und Logs
USER_CONFIG_DIR = Path.home() / ".clive"

LOG_DIR = USER_CONFIG_DIR / "logs"
LOG_FILE = LOG_DIR / "clive.log"
FALLBACK_LOG_FILE = Path("/tmp/clive.log")

PREFS_FILE = USER_CONFIG_DIR / "preferences.json"


__all__ = [
    # CLI
    "DEFAULT_CLAUDE_PATH",
    "DEFAULT_EXPECT_PATH",
    "USAGE_SUBCOMMAND",
    "PROCESS_PATH",
    "WORK_DIR",
    "EXPECT_SCRIPT_NAME",
    # Polling
    "REFRESH_TIMEOUT",
    "EXPECT_TIMEOUT",
    "EXPECT_SETTLE_SECONDS",
    "PARSE_MISS_WARN_THRESHOLD",
    # Menübar
    "STATUS_PREFIX",
    "PLACEHOLDER_VALUE",
    # Paths
    "USER_CONFIG_DIR",
    "LOG_DIR",
    "LOG_FILE",
    "FALLBACK_LOG_FILE",
    "PREFS_FILE",
]
