"""Usage-Abfrage: Parser, Prozess-Runner und Poll-Scheduler.

Usage:
    from usage import ProcessRunner, build_usage_command

    result = ProcessRunner().run(build_usage_command())
    if result.ok:
        print(result.snapshot.display_string)
"""

from .command import UsageCommand, build_usage_command
from .parser import UsageSnapshot, parse_usage_output
from .runner import FailureKind, ProcessRunner, RefreshOutcome, RefreshResult
from .scheduler import PollScheduler

__all__ = [
    "UsageCommand",
    "build_usage_command",
    "UsageSnapshot",
    "parse_usage_output",
    "FailureKind",
    "ProcessRunner",
    "RefreshOutcome",
    "RefreshResult",
    "PollScheduler",
]
