#!/usr/bin/env python3
"""
clive.py – Claude-Usage in der macOS-Menüleiste.

Fragt periodisch `claude /usage` ab und zeigt Session- und Weekly-Auslastung
als Text, Pie- oder Bar-Chart in der Menübar.

Architektur:
- Main Thread: NSApplication Event-Loop (Menübar, Timer, RefreshState)
- Worker Thread: ein Usage-Prozess pro Refresh (usage.runner)

Usage:
    python clive.py              # Menübar-App
    python clive.py --once       # Einmal abfragen, Ergebnis auf stdout
    python clive.py --debug      # Mit Debug-Logging auf stderr
"""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer

from config import REFRESH_TIMEOUT
from usage.command import build_usage_command
from usage.runner import ProcessRunner
from usage.scheduler import PollScheduler
from utils.env import get_env_bool_default, load_environment
from utils.logging import error, log, setup_logging
from utils.settings import Settings

logger = logging.getLogger("clive")

app = typer.Typer(
    help="Claude-Usage in der macOS-Menüleiste",
    add_completion=False,
)


# =============================================================================
# CliveApp: Menübar-Anwendung
# =============================================================================


class CliveApp:
    """
    Verdrahtet Settings, Runner, Scheduler und Menübar.

    State-Flow:
        start → sofortiger Refresh → Timer → Refresh → ... → Quit → stop
    """

    def __init__(
        self,
        settings: Settings,
        *,
        claude_path: str | None = None,
        timeout: float = REFRESH_TIMEOUT,
    ):
        self.settings = settings
        self.runner = ProcessRunner(timeout=timeout)
        self.claude_path = claude_path
        self._menubar = None
        self._scheduler: PollScheduler | None = None
        self._cleaned_up = False

    def _build_command(self):
        return build_usage_command(claude_path=self.claude_path)

    def _on_usage(self, snapshot) -> None:
        if self._menubar is not None:
            self._menubar.update(snapshot)

    def _refresh_now(self) -> None:
        if self._scheduler is not None and not self._scheduler.refresh_now():
            logger.debug("Refresh Now ignoriert (Refresh läuft)")

    def cleanup(self) -> None:
        """Polling stoppen, laufenden Prozess beenden (idempotent)."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        if self._scheduler is not None:
            self._scheduler.stop()
        if self._menubar is not None:
            self._menubar.close()
        logger.info("Clive beendet")

    def run(self) -> None:
        """Startet die App (blockiert)."""
        import atexit
        import signal

        from AppKit import NSApplication  # type: ignore[import-not-found]
        from Foundation import NSTimer  # type: ignore[import-not-found]

        from ui import MenuBarController

        app_instance = NSApplication.sharedApplication()
        # Accessory: kein Dock-Icon, nur Menübar
        app_instance.setActivationPolicy_(1)

        self._menubar = MenuBarController(self.settings, on_refresh=self._refresh_now)
        self._scheduler = PollScheduler(
            self.runner,
            self.settings,
            self._on_usage,
            command_factory=self._build_command,
        )
        self._scheduler.start()

        log("📊 clive läuft")
        log(
            f"   Modus: {self.settings.display_mode.display_name}, "
            f"Intervall: {self.settings.refresh_interval.display_name}"
        )
        log("   Beenden: Menubar-Icon → Quit oder Ctrl+C")

        # Dummy-Timer, damit der Python-Interpreter regelmäßig läuft und Signale prüft
        NSTimer.scheduledTimerWithTimeInterval_repeats_block_(0.1, True, lambda _: None)

        def signal_handler(sig, frame):
            self.cleanup()
            app_instance.terminate_(None)

        signal.signal(signal.SIGINT, signal_handler)

        # CMD+Q / Quit ruft terminate: direkt auf, ohne Python-Handler
        atexit.register(self.cleanup)

        app_instance.run()


def run_once(claude_path: str | None = None, timeout: float = REFRESH_TIMEOUT) -> int:
    """Ein einzelner Refresh ohne Menübar. Ausgabe auf stdout."""
    runner = ProcessRunner(timeout=timeout)
    try:
        command = build_usage_command(claude_path=claude_path)
    except OSError as e:
        error(f"Arbeitsverzeichnis nicht nutzbar: {e}")
        return 1

    result = runner.run(command)
    if not result.ok or result.snapshot is None:
        reason = result.failure.value if result.failure else result.outcome.value
        error(f"Keine Usage-Daten ({reason})")
        return 1

    snapshot = result.snapshot
    print(snapshot.display_string)
    if snapshot.session_reset_label:
        print(f"Session resets {snapshot.session_reset_label}")
    return 0


# =============================================================================
# Main
# =============================================================================


@app.command()
def main(
    once: Annotated[
        bool,
        typer.Option("--once", help="Einmal abfragen und Ergebnis ausgeben"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(help="Debug-Logging aktivieren"),
    ] = False,
    claude_path: Annotated[
        str | None,
        typer.Option(
            help="Pfad zur claude-CLI",
            envvar="CLIVE_CLAUDE_PATH",
        ),
    ] = None,
    timeout: Annotated[
        int,
        typer.Option(
            min=1,
            help="Timeout pro Refresh in Sekunden",
            envvar="CLIVE_TIMEOUT",
        ),
    ] = REFRESH_TIMEOUT,
) -> None:
    """Claude-Usage in der macOS-Menüleiste.

    Beispiele:
        clive.py
        clive.py --once
        clive.py --claude-path /usr/local/bin/claude --timeout 45
    """
    load_environment()
    setup_logging(debug=debug or get_env_bool_default("CLIVE_DEBUG", False))

    if once:
        raise typer.Exit(run_once(claude_path=claude_path, timeout=timeout))

    if sys.platform != "darwin":
        error("Die Menübar-App läuft nur unter macOS (nutze --once)")
        raise typer.Exit(1)

    # Globaler Exception Handler für Crashes
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            f"Uncaught exception: {exc_type.__name__}: {exc_value}",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = handle_exception

    try:
        CliveApp(Settings.load(), claude_path=claude_path, timeout=timeout).run()
    except KeyboardInterrupt:
        log("\n👋 clive beendet")


if __name__ == "__main__":
    app()
