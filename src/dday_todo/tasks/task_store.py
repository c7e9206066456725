# src/dday_todo/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..errors import ValidationError
from .date_parser import parse_smart_date
from .records import (
    Accepted,
    normalize_import_record,
    timestamp_id,
    upgrade_legacy_record,
)
from .task_models import LogAction, LogEntry, Task, TaskStatus, format_timestamp

logger = logging.getLogger(__name__)

ChangeListener = Callable[["TaskStore"], None]


@dataclass(frozen=True, slots=True)
class MergeResult:
    added: int = 0
    updated: int = 0
    skipped: int = 0


class TaskStore:
    """
    In-memory task collection with an append-only log per task.

    Storage order is most-recent-first (new and imported tasks go to the
    front); display order is computed separately (see ordering.py).

    Every successful mutation calls on_change(store) exactly once, after the
    collection is updated. The persistence layer hooks in there; if it raises,
    the error reaches the caller but the in-memory change stays.
    """

    def __init__(
        self,
        tasks: Iterable[Task] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        self._tasks: list[Task] = list(tasks or [])
        self._clock = clock or datetime.now
        self.on_change = on_change
        self._last_id = max((t.id for t in self._tasks), default=0)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        *,
        clock: Callable[[], datetime] | None = None,
        on_change: ChangeListener | None = None,
    ) -> TaskStore:
        """Load path: upgrade legacy records and make ids unique."""
        store = cls(clock=clock, on_change=on_change)
        now = store._now()
        seen: set[int] = set()
        upgraded = 0
        for raw in records:
            if not isinstance(raw, Mapping):
                logger.warning("Skipping non-object record in stored collection: %r", raw)
                continue
            task = upgrade_legacy_record(raw, now=now)
            if task.id in seen:
                old_id = task.id
                task.id = store._issue_id(now)
                logger.warning("Duplicate task id %s on load; reassigned to %s", old_id, task.id)
            seen.add(task.id)
            store._last_id = max(store._last_id, task.id)
            store._tasks.append(task)
            if "status" not in raw or not isinstance(raw.get("logs"), list):
                upgraded += 1
        logger.info("TaskStore loaded total=%d upgraded=%d", len(store._tasks), upgraded)
        return store

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        return self._clock()

    def _issue_id(self, now: datetime) -> int:
        candidate = timestamp_id(now)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def _index_of(self, task_id: int) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _append_log(
        self,
        task: Task,
        action: str,
        note: str | None = None,
        image: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(date=format_timestamp(self._now()), action=action, note=note, image=image)
        task.logs.append(entry)
        return entry

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    # ---- read API ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    def __contains__(self, task_id: object) -> bool:
        return isinstance(task_id, int) and self._index_of(task_id) is not None

    def get(self, task_id: int) -> Task | None:
        idx = self._index_of(task_id)
        return self._tasks[idx] if idx is not None else None

    def today(self) -> date:
        return self._now().date()

    def to_records(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._tasks]

    def backup_records(self, task_id: int) -> list[dict[str, Any]] | None:
        """One-element list so a single-task backup can be merge-imported later."""
        task = self.get(task_id)
        return [task.to_dict()] if task is not None else None

    # ---- mutations ----

    def create(self, raw_text: str) -> Task:
        text = (raw_text or "").strip()
        if not text:
            raise ValidationError("task text is required")

        now = self._now()
        parsed = parse_smart_date(text, now.date())
        note = f"due date set: {parsed.due_date}" if parsed.due_date else "new task"

        task = Task(
            id=self._issue_id(now),
            title=parsed.title or text,
            status=TaskStatus.IN_PROGRESS,
            due_date=parsed.due_date,
            logs=[LogEntry(date=format_timestamp(now), action=LogAction.CREATE, note=note)],
        )
        self._tasks.insert(0, task)
        logger.debug("Task created id=%s due=%s", task.id, task.due_date)
        self._changed()
        return task

    def toggle_status(self, task_id: int) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None

        was_done = task.is_done
        task.status = task.status.toggled()
        if was_done:
            self._append_log(task, LogAction.REOPEN, "reopened")
        else:
            self._append_log(task, LogAction.COMPLETE, "marked as done")
        logger.debug("Task %s status -> %s", task.id, task.status)
        self._changed()
        return task

    def append_note(
        self,
        task_id: int,
        note: str | None,
        attachment: str | None = None,
    ) -> Task | None:
        """
        Append a note and/or attachment token.

        A date phrase inside the note is stripped from the stored text; if it
        points at a different day than the current due date the task is
        rescheduled and the entry is tagged "reschedule".
        """
        text = (note or "").strip()
        if not text and not attachment:
            raise ValidationError("a note or an attachment is required")

        task = self.get(task_id)
        if task is None:
            return None

        action: str = LogAction.UPDATE
        final_note: str | None = text or None
        if text:
            parsed = parse_smart_date(text, self.today())
            if parsed.due_date:
                final_note = parsed.title or None
                if parsed.due_date != task.due_date:
                    logger.debug(
                        "Task %s rescheduled %s -> %s", task.id, task.due_date, parsed.due_date
                    )
                    task.due_date = parsed.due_date
                    action = LogAction.RESCHEDULE
                    final_note = final_note or f"due date changed: {parsed.due_date}"

        self._append_log(task, action, final_note, attachment or None)
        self._changed()
        return task

    def delete(self, task_id: int) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        del self._tasks[idx]
        logger.debug("Task deleted id=%s", task_id)
        self._changed()
        return True

    def clear_completed(self) -> int:
        remaining = [t for t in self._tasks if not t.is_done]
        removed = len(self._tasks) - len(remaining)
        if removed == 0:
            return 0
        self._tasks = remaining
        logger.info("Cleared %d completed task(s)", removed)
        self._changed()
        return removed

    def merge_import(self, incoming: Iterable[Any]) -> MergeResult:
        """
        Merge external records by id (last write wins).

        An id match replaces the existing task wholesale, logs included.
        Unknown ids are inserted at the front. Malformed records are skipped.
        """
        now = self._now()
        added = updated = skipped = 0

        for raw in incoming:
            result = normalize_import_record(raw, now=now)
            if not isinstance(result, Accepted):
                skipped += 1
                logger.warning("Import record skipped: %s", result.reason)
                continue

            task = result.task
            idx = self._index_of(task.id)
            if idx is not None:
                self._tasks[idx] = task
                updated += 1
            else:
                self._tasks.insert(0, task)
                added += 1
            self._last_id = max(self._last_id, task.id)

        logger.info("Import merged added=%d updated=%d skipped=%d", added, updated, skipped)
        if added or updated:
            self._changed()
        return MergeResult(added=added, updated=updated, skipped=skipped)
