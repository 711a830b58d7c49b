"""Aufbau des externen Usage-Kommandos.

`claude /usage` ist eine interaktive TUI. Wir starten sie über ein
expect-Skript in einem eigenen Arbeitsverzeichnis mit minimaler Umgebung,
damit weder Projekt-Kontext noch Shell-Konfiguration die Ausgabe verändern.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from config import (
    DEFAULT_CLAUDE_PATH,
    DEFAULT_EXPECT_PATH,
    EXPECT_SCRIPT_NAME,
    EXPECT_SETTLE_SECONDS,
    EXPECT_TIMEOUT,
    PROCESS_PATH,
    USAGE_SUBCOMMAND,
    WORK_DIR,
)
from utils.env import get_env_str

logger = logging.getLogger("clive")

EXPECT_SCRIPT_TEMPLATE = """\
#!/usr/bin/expect -f
log_user 1
set timeout {timeout}
spawn {claude_path} {subcommand}

# Trust-Dialog bestätigen, dann auf den Report warten
expect {{
    "trust" {{
        sleep 0.5
        send "\\r"
        exp_continue
    }}
    -re "Current week.*\\n.*\\d+%" {{
    }}
    timeout {{
        exit 1
    }}
    eof {{ }}
}}

sleep {settle}
"""


@dataclass(frozen=True)
class UsageCommand:
    """Fertig vorbereiteter Prozess-Aufruf."""

    argv: list[str]
    cwd: Path
    env: dict[str, str] = field(default_factory=dict)


def render_expect_script(claude_path: str) -> str:
    """Erzeugt das expect-Skript für `claude /usage`."""
    return EXPECT_SCRIPT_TEMPLATE.format(
        timeout=EXPECT_TIMEOUT,
        claude_path=claude_path,
        subcommand=USAGE_SUBCOMMAND,
        settle=EXPECT_SETTLE_SECONDS,
    )


def build_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Minimale, feste Umgebung: kein ererbter State, keine Farbcodes."""
    base = os.environ if base is None else base
    return {
        "PATH": PROCESS_PATH,
        "HOME": base.get("HOME", ""),
        "USER": base.get("USER", ""),
        "TERM": "dumb",
        "NO_COLOR": "1",
    }


def prepare_work_dir(work_dir: Path, claude_path: str) -> Path:
    """Legt das Arbeitsverzeichnis an und schreibt das Skript neu.

    Returns:
        Pfad zum ausführbaren expect-Skript.
    """
    work_dir.mkdir(parents=True, exist_ok=True)
    script_path = work_dir / EXPECT_SCRIPT_NAME
    script_path.unlink(missing_ok=True)
    script_path.write_text(render_expect_script(claude_path), encoding="utf-8")
    script_path.chmod(0o755)
    return script_path


def resolve_claude_path(override: str | None = None) -> str:
    """CLI-Argument > CLIVE_CLAUDE_PATH > Default."""
    return override or get_env_str("CLIVE_CLAUDE_PATH") or DEFAULT_CLAUDE_PATH


def resolve_expect_path(override: str | None = None) -> str:
    """CLI-Argument > CLIVE_EXPECT_PATH > Default."""
    return override or get_env_str("CLIVE_EXPECT_PATH") or DEFAULT_EXPECT_PATH


def build_usage_command(
    *,
    claude_path: str | None = None,
    expect_path: str | None = None,
    work_dir: Path | None = None,
) -> UsageCommand:
    """Bereitet einen Refresh-Zyklus vor (Skript, Verzeichnis, Umgebung)."""
    work_dir = WORK_DIR if work_dir is None else work_dir
    claude = resolve_claude_path(claude_path)
    script_path = prepare_work_dir(work_dir, claude)
    logger.debug(f"Usage-Kommando: {claude} {USAGE_SUBCOMMAND} via {script_path}")
    return UsageCommand(
        argv=[resolve_expect_path(expect_path), "-f", str(script_path)],
        cwd=work_dir,
        env=build_environment(),
    )
