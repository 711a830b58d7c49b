"""Prozess-Runner für einen Usage-Refresh.

Ein Aufruf von ProcessRunner.run() entspricht genau einem Refresh-Zyklus:
ein Kindprozess, Ausgabe wird gestreamt und nach jedem Chunk geparst.

Auflösung (first wins, genau einmal):
    - EARLY:   Snapshot mit Session UND Weekly gefunden → sofort fertig
    - EXITED:  Prozess beendet (oder stdout-EOF) → Gesamtausgabe parsen
    - TIMEOUT: Wall-Clock-Budget überschritten → kill, nichts parsen
    - CANCEL:  Cancel-Event gesetzt (Shutdown) → kill

Egal welcher Pfad gewinnt: Prozess beenden, Reader joinen, Pipe schließen
passiert genau einmal in _OutputSession.close().

Hält ein Nachfahre die Pipe offen, kommt kein EOF. Das Prozessende wird
deshalb separat per poll() erkannt; der Reader schließt die Pipe dann selbst,
sobald er zurückkehrt.
"""

from __future__ import annotations

import codecs
import logging
import os
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from config import REFRESH_TIMEOUT
from usage.command import UsageCommand
from usage.parser import UsageSnapshot, parse_usage_output
from utils.timing import format_duration, log_preview, monotonic_ms

logger = logging.getLogger("clive")

READ_CHUNK_SIZE = 4096
WAIT_POLL_INTERVAL = 0.1  # Sekunden zwischen Timeout-/Cancel-Checks
TERMINATE_GRACE = 1.0  # Sekunden zwischen SIGTERM und SIGKILL
EXIT_DRAIN = 0.5  # Sekunden, die der Reader nach Prozessende noch bekommt


class RefreshOutcome(Enum):
    SUCCESS = "success"
    NO_DATA = "no_data"
    TIMED_OUT = "timed_out"


class FailureKind(Enum):
    SPAWN_FAILURE = "spawn_failure"
    PARSE_MISS = "parse_miss"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RefreshResult:
    """Ergebnis eines Refresh-Zyklus."""

    outcome: RefreshOutcome
    snapshot: UsageSnapshot | None = None
    failure: FailureKind | None = None
    detail: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is RefreshOutcome.SUCCESS

    @classmethod
    def success(cls, snapshot: UsageSnapshot, duration_ms: float = 0.0) -> RefreshResult:
        return cls(RefreshOutcome.SUCCESS, snapshot=snapshot, duration_ms=duration_ms)

    @classmethod
    def no_data(
        cls, failure: FailureKind, detail: str = "", duration_ms: float = 0.0
    ) -> RefreshResult:
        return cls(
            RefreshOutcome.NO_DATA,
            failure=failure,
            detail=detail,
            duration_ms=duration_ms,
        )

    @classmethod
    def timed_out(cls, detail: str = "", duration_ms: float = 0.0) -> RefreshResult:
        return cls(
            RefreshOutcome.TIMED_OUT,
            failure=FailureKind.TIMEOUT,
            detail=detail,
            duration_ms=duration_ms,
        )


class _Resolution(Enum):
    EARLY = "early"
    EXITED = "exited"
    TIMEOUT = "timeout"
    CANCEL = "cancel"


class _OutputSession:
    """Zustand eines laufenden Prozesses: Akkumulator + Resolution-Guard."""

    def __init__(
        self,
        process: subprocess.Popen,
        parser: Callable[[str], UsageSnapshot | None],
        on_chunk: Callable[[str], None] | None,
    ):
        self.process = process
        self._parser = parser
        self._on_chunk = on_chunk
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._lock = threading.Lock()
        self._chunks: list[str] = []
        self._resolution: _Resolution | None = None
        self._early_snapshot: UsageSnapshot | None = None
        self._closed = False
        self._reader_done = False
        self._pipe_closed = False
        self.resolved = threading.Event()
        self._reader = threading.Thread(
            target=self._pump, daemon=True, name="UsageOutputReader"
        )

    @property
    def text(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    @property
    def resolution(self) -> _Resolution | None:
        return self._resolution

    @property
    def early_snapshot(self) -> UsageSnapshot | None:
        return self._early_snapshot

    def start(self) -> None:
        self._reader.start()

    def resolve(
        self, resolution: _Resolution, snapshot: UsageSnapshot | None = None
    ) -> bool:
        """Setzt die Auflösung. Nur der erste Aufruf gewinnt."""
        with self._lock:
            if self._resolution is not None:
                return False
            self._resolution = resolution
            self._early_snapshot = snapshot
        self.resolved.set()
        return True

    def _pump(self) -> None:
        stream = self.process.stdout
        fd = stream.fileno()
        while True:
            try:
                data = os.read(fd, READ_CHUNK_SIZE)
            except OSError:
                break
            if not data:
                break
            self._feed(self._decoder.decode(data))
            if self._resolution is not None:
                break
        self._feed(self._decoder.decode(b"", final=True))
        self.resolve(_Resolution.EXITED)

        with self._lock:
            self._reader_done = True
            release = self._closed
        if release:
            self._close_pipe()

    def _feed(self, chunk: str) -> None:
        if not chunk:
            return
        with self._lock:
            self._chunks.append(chunk)
            accumulated = "".join(self._chunks)
        if self._on_chunk is not None:
            try:
                self._on_chunk(chunk)
            except Exception:
                logger.exception("on_chunk Callback fehlgeschlagen")

        snapshot = self._parser(accumulated)
        if snapshot is not None and snapshot.is_complete:
            self.resolve(_Resolution.EARLY, snapshot)

    def close(self) -> None:
        """Prozess beenden und Ressourcen freigeben (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        process = self.process
        if self._resolution is _Resolution.EXITED:
            # Prozess beendet sich selbst (oder ist schon weg)
            try:
                process.wait(timeout=TERMINATE_GRACE)
            except subprocess.TimeoutExpired:
                pass
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=TERMINATE_GRACE)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

        if self._reader.is_alive():
            self._reader.join(timeout=TERMINATE_GRACE)

        with self._lock:
            release = self._reader_done
        if release:
            self._close_pipe()
        else:
            # Nie unter einem blockierten os.read() schließen (fd-Wiederverwendung)
            logger.debug(
                "Reader blockiert noch (Pipe von Nachfahren gehalten), "
                "schließt die Pipe beim Rückkehren"
            )

    def _close_pipe(self) -> None:
        with self._lock:
            if self._pipe_closed:
                return
            self._pipe_closed = True
        if self.process.stdout is not None:
            self.process.stdout.close()


class ProcessRunner:
    """Führt genau einen Usage-Prozess pro Aufruf aus."""

    def __init__(
        self,
        *,
        timeout: float = REFRESH_TIMEOUT,
        parser: Callable[[str], UsageSnapshot | None] = parse_usage_output,
        poll_interval: float = WAIT_POLL_INTERVAL,
    ):
        self.timeout = timeout
        self._parser = parser
        self._poll_interval = poll_interval

    def run(
        self,
        command: UsageCommand,
        *,
        cancel_event: threading.Event | None = None,
        on_chunk: Callable[[str], None] | None = None,
    ) -> RefreshResult:
        """Startet den Prozess und blockiert bis zur Auflösung.

        Gedacht für einen Worker-Thread; der Aufrufer hält Timer und UI frei.
        """
        start_ms = monotonic_ms()

        def elapsed_ms() -> float:
            return monotonic_ms() - start_ms

        try:
            process = subprocess.Popen(
                command.argv,
                cwd=str(command.cwd),
                env=command.env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Usage-Prozess konnte nicht starten: {e}")
            return RefreshResult.no_data(
                FailureKind.SPAWN_FAILURE, str(e), elapsed_ms()
            )

        logger.debug(f"Usage-Prozess gestartet (pid={process.pid})")
        session = _OutputSession(process, self._parser, on_chunk)
        deadline_ms = start_ms + self.timeout * 1000
        try:
            session.start()
            while not session.resolved.wait(self._poll_interval):
                if cancel_event is not None and cancel_event.is_set():
                    session.resolve(_Resolution.CANCEL)
                elif process.poll() is not None:
                    # Reste aus der Pipe lesen lassen, dann ohne EOF auflösen
                    session.resolved.wait(EXIT_DRAIN)
                    session.resolve(_Resolution.EXITED)
                elif monotonic_ms() >= deadline_ms:
                    session.resolve(_Resolution.TIMEOUT)
        finally:
            session.close()

        return self._build_result(session, elapsed_ms())

    def _build_result(self, session: _OutputSession, duration_ms: float) -> RefreshResult:
        resolution = session.resolution

        if resolution is _Resolution.TIMEOUT:
            logger.warning(
                f"Usage-Refresh Timeout nach {format_duration(duration_ms)}, Prozess beendet"
            )
            return RefreshResult.timed_out(
                f"kein Ergebnis nach {self.timeout:g}s", duration_ms
            )

        if resolution is _Resolution.CANCEL:
            logger.info("Usage-Refresh abgebrochen")
            return RefreshResult.no_data(FailureKind.CANCELLED, "", duration_ms)

        if resolution is _Resolution.EARLY and session.early_snapshot is not None:
            logger.debug(f"Usage früh vollständig nach {format_duration(duration_ms)}")
            return RefreshResult.success(session.early_snapshot, duration_ms)

        output = session.text
        snapshot = self._parser(output)
        if snapshot is None:
            returncode = session.process.returncode
            logger.info(
                f"Keine Usage-Daten in Ausgabe (exit={returncode}, "
                f"{len(output)} Zeichen): {log_preview(output)!r}"
            )
            return RefreshResult.no_data(
                FailureKind.PARSE_MISS, f"exit={returncode}", duration_ms
            )
        return RefreshResult.success(snapshot, duration_ms)
