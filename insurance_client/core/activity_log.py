"""
In-memory activity feed for the current session.

Entries are kept most-recent-first for the lifetime of the process and
mirrored to the standard logger. Nothing is persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List


logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class ActivityEntry:
    message: str
    severity: Severity
    timestamp: datetime

    def render(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.message}"


@dataclass
class ActivityLog:
    """Append-only, most-recent-first feed of human-readable outcomes."""

    clock: Callable[[], datetime] = datetime.now
    _entries: List[ActivityEntry] = field(default_factory=list)

    def record(self, message: str, severity: Severity | str = Severity.INFO) -> ActivityEntry:
        entry = ActivityEntry(
            message=message,
            severity=Severity(severity),
            timestamp=self.clock(),
        )
        self._entries.insert(0, entry)
        logger.log(_LOG_LEVELS[entry.severity], message, extra={"severity": entry.severity.value})
        return entry

    def success(self, message: str) -> ActivityEntry:
        return self.record(message, Severity.SUCCESS)

    def error(self, message: str) -> ActivityEntry:
        return self.record(message, Severity.ERROR)

    @property
    def entries(self) -> List[ActivityEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["Severity", "ActivityEntry", "ActivityLog"]
