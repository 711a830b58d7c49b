"""Poll-Scheduler für Usage-Refreshes.

State-Flow:
    idle → [Timer / Refresh Now] → refreshing → [Ergebnis] → idle

Architektur:
    Main-Thread: Timer, RefreshState, Observer-Callbacks
    Worker-Thread: ProcessRunner.run() als Future (max. 1 gleichzeitig)

Ergebnisse werden vor jeder State-Änderung auf den Main-Thread gebracht,
RefreshState hat damit genau einen Schreiber und braucht keinen Lock.
"""

from __future__ import annotations

import logging
import threading
import weakref
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable

from config import PARSE_MISS_WARN_THRESHOLD
from usage.command import UsageCommand, build_usage_command
from usage.parser import UsageSnapshot
from usage.runner import FailureKind, ProcessRunner, RefreshResult
from utils.settings import REFRESH_INTERVAL_KEY, Settings
from utils.state import RefreshPhase, RefreshState
from utils.timing import format_duration

logger = logging.getLogger("clive")

TimerFactory = Callable[[float, Callable[[], None]], object]


def call_on_main(fn: Callable[[], None]) -> None:
    """Führt fn auf dem Main-Thread aus (AppKit thread-safe)."""
    try:
        from Foundation import NSThread  # type: ignore[import-not-found]

        if NSThread.isMainThread():
            fn()
            return
    except ImportError:
        fn()
        return

    try:
        from PyObjCTools import AppHelper  # type: ignore[import-not-found]

        AppHelper.callAfter(fn)
    except ImportError:  # pragma: no cover
        fn()


def ns_repeating_timer(interval: float, callback: Callable[[], None]):
    """Wiederholender NSTimer auf dem aktuellen Run-Loop. Handle hat invalidate()."""
    from Foundation import NSTimer  # type: ignore[import-not-found]

    return NSTimer.scheduledTimerWithTimeInterval_repeats_block_(
        interval, True, lambda _timer: callback()
    )


class PollScheduler:
    """Triggert Refreshes periodisch und hält den last-known-good Snapshot."""

    def __init__(
        self,
        runner: ProcessRunner,
        settings: Settings,
        on_update: Callable[[UsageSnapshot], None],
        *,
        command_factory: Callable[[], UsageCommand] = build_usage_command,
        call_on_main: Callable[[Callable[[], None]], None] = call_on_main,
        timer_factory: TimerFactory = ns_repeating_timer,
        executor: Executor | None = None,
    ):
        self._runner = runner
        self._settings = settings
        self._on_update = on_update
        self._command_factory = command_factory
        self._call_on_main = call_on_main
        self._timer_factory = timer_factory
        self._executor = executor
        self._owns_executor = executor is None

        self.state = RefreshState()
        self._timer = None
        self._future: Future | None = None
        self._cancel_event: threading.Event | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._stopped = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Sofortiger Refresh, danach Timer im eingestellten Intervall."""
        self._stopped = False
        if self._unsubscribe is None:
            self._unsubscribe = self._settings.subscribe(self._on_setting_changed)
        self.refresh_now()
        self._start_timer()

    def stop(self) -> None:
        """Timer stoppen und laufenden Prozess abbrechen."""
        self._stopped = True
        self._cancel_timer()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._cancel_event is not None:
            self._cancel_event.set()
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        logger.info("Polling gestoppt")

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    def refresh_now(self) -> bool:
        """Startet einen Refresh, falls keiner läuft.

        Returns:
            True wenn ein Refresh gestartet wurde, False wenn ignoriert.
        """
        if self._stopped:
            return False
        if self.state.is_refreshing:
            logger.debug("Refresh läuft bereits, Anfrage ignoriert")
            return False

        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="UsageRefresh"
            )

        cancel_event = threading.Event()
        self.state.phase = RefreshPhase.REFRESHING
        self._cancel_event = cancel_event
        future = self._executor.submit(self._refresh_task, cancel_event)
        self._future = future
        future.add_done_callback(
            lambda done: self._call_on_main(lambda: self._on_refresh_done(done))
        )
        return True

    def _refresh_task(self, cancel_event: threading.Event) -> RefreshResult:
        """Läuft im Worker-Thread. Die Dauer steckt in RefreshResult.duration_ms."""
        try:
            command = self._command_factory()
        except OSError as e:
            logger.warning(f"Usage-Kommando konnte nicht vorbereitet werden: {e}")
            return RefreshResult.no_data(FailureKind.SPAWN_FAILURE, str(e))
        return self._runner.run(command, cancel_event=cancel_event)

    def _on_refresh_done(self, future: Future) -> None:
        """Main-Thread: Ergebnis übernehmen, zurück nach idle."""
        if future is not self._future:
            return
        self._future = None
        self._cancel_event = None
        self.state.phase = RefreshPhase.IDLE

        if self._stopped or future.cancelled():
            return

        try:
            result = future.result()
        except Exception:
            logger.exception("Usage-Refresh fehlgeschlagen")
            return

        self._apply_result(result)

    def _apply_result(self, result: RefreshResult) -> None:
        state = self.state
        state.last_result = result

        if result.ok and result.snapshot is not None:
            state.last_snapshot = result.snapshot
            state.consecutive_failures = 0
            state.consecutive_parse_misses = 0
            logger.info(
                f"Usage: {result.snapshot.display_string} "
                f"({format_duration(result.duration_ms)})"
            )
            try:
                self._on_update(result.snapshot)
            except Exception:
                logger.exception("Usage-Observer fehlgeschlagen")
            return

        # Kein Publish: die Anzeige behält den letzten Stand
        state.consecutive_failures += 1
        logger.info(
            f"Refresh ohne Daten ({result.failure.value if result.failure else '?'}"
            f"{': ' + result.detail if result.detail else ''}) nach "
            f"{format_duration(result.duration_ms)}, behalte letzten Stand"
        )
        if result.failure is FailureKind.PARSE_MISS:
            state.consecutive_parse_misses += 1
            if state.consecutive_parse_misses == PARSE_MISS_WARN_THRESHOLD:
                logger.warning(
                    f"{PARSE_MISS_WARN_THRESHOLD} Refreshes in Folge ohne "
                    "'Current session'/'Current week' – hat sich das "
                    "Ausgabeformat von claude geändert?"
                )

    # -------------------------------------------------------------------------
    # Timer
    # -------------------------------------------------------------------------

    def _start_timer(self) -> None:
        self._cancel_timer()
        interval = float(self._settings.refresh_interval.value)

        # weakref: Timer → Block → self → Timer wäre ein Zyklus
        weak_self = weakref.ref(self)

        def fire() -> None:
            scheduler = weak_self()
            if scheduler is not None:
                scheduler.refresh_now()

        self._timer = self._timer_factory(interval, fire)
        logger.debug(f"Refresh-Timer: alle {interval:g}s")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.invalidate()
            self._timer = None

    def _on_setting_changed(self, key: str, value) -> None:
        if key != REFRESH_INTERVAL_KEY:
            return
        # Nur neu starten, wenn Polling aktiv ist; laufender Refresh bleibt
        if self._timer is not None and not self._stopped:
            logger.info(f"Refresh-Intervall geändert: {value.display_name}")
            self._start_timer()
