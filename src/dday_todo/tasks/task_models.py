# src/dday_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(dt: datetime) -> str:
    """Local, human-readable timestamp used for LogEntry.date."""
    return dt.strftime(TIMESTAMP_FORMAT)


class TaskStatus(StrEnum):
    """
    Task completion status.

    Notes:
    - only two values are reachable; toggling flips between them
    - legacy files stored Korean labels ("진행중" / "완료"), see from_raw()
    """

    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus | None:
        if raw is None:
            return None
        s = str(raw).strip()
        if not s:
            return None
        legacy = _LEGACY_STATUS.get(s)
        if legacy is not None:
            return legacy
        try:
            return cls(s.lower())
        except ValueError:
            return None

    def toggled(self) -> TaskStatus:
        return TaskStatus.IN_PROGRESS if self is TaskStatus.DONE else TaskStatus.DONE


_LEGACY_STATUS: dict[str, TaskStatus] = {
    "진행중": TaskStatus.IN_PROGRESS,
    "완료": TaskStatus.DONE,
}


class LogAction(StrEnum):
    """Action tags written by the store. Any other token read from disk is kept as-is."""

    CREATE = "create"
    COMPLETE = "complete"
    REOPEN = "reopen"
    UPDATE = "update"
    RESCHEDULE = "reschedule"
    RECOVER = "recover"


@dataclass(frozen=True, slots=True)
class LogEntry:
    date: str
    action: str
    note: str | None = None
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "action": str(self.action),
            "note": self.note,
            "image": self.image,
        }


@dataclass(slots=True)
class Task:
    id: int
    title: str
    status: TaskStatus
    due_date: str | None
    logs: list[LogEntry] = field(default_factory=list)

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE

    @property
    def created_at(self) -> str:
        # logs[0] is the creation entry and is never removed.
        return self.logs[0].date if self.logs else ""

    def to_dict(self) -> dict[str, Any]:
        """Wire form used for persistence, backups and imports."""
        return {
            "id": self.id,
            "title": self.title,
            "status": str(self.status),
            "dueDate": self.due_date,
            "logs": [entry.to_dict() for entry in self.logs],
        }
