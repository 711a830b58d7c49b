from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from usage.parser import UsageSnapshot
    from usage.runner import RefreshResult


class RefreshPhase(Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class RefreshState:
    """Vom Scheduler besessen; nur auf dem Main-Thread verändert."""

    phase: RefreshPhase = RefreshPhase.IDLE
    last_snapshot: UsageSnapshot | None = None  # last-known-good, nie gelöscht
    last_result: RefreshResult | None = None
    consecutive_failures: int = 0
    consecutive_parse_misses: int = 0

    @property
    def is_refreshing(self) -> bool:
        return self.phase is RefreshPhase.REFRESHING
