# src/dday_todo/tasks/records.py

"""
Conversion between wire records (JSON dicts) and Task values.

Two entry points:
- upgrade_legacy_record(): load path. Never rejects a mapping; old files
  missing status/dueDate/logs are upgraded in place.
- normalize_import_record(): import path. Returns Accepted(task) or
  Rejected(reason); the external shape is never trusted directly.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any

from ..errors import ImportParseError, MalformedRecordError
from .task_models import LogAction, LogEntry, Task, TaskStatus, format_timestamp

DEFAULT_TITLE = "Untitled"
RECOVERY_NOTE = "data recovered"

_CANONICAL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_UNSAFE_FILENAME_RE = re.compile(r'[/\\?%*:|"<>]')


@dataclass(frozen=True, slots=True)
class Accepted:
    task: Task


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: MalformedRecordError


ImportResult = Accepted | Rejected


def timestamp_id(now: datetime) -> int:
    """Millisecond timestamp used as a task id."""
    return int(now.timestamp() * 1000)


def _canonical_due_date(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    if not _CANONICAL_DATE_RE.match(s):
        return None
    try:
        date.fromisoformat(s)
    except ValueError:
        return None
    return s


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


def _coerce_log(raw: Any) -> LogEntry | None:
    if not isinstance(raw, Mapping):
        return None
    return LogEntry(
        date=str(raw.get("date") or ""),
        action=str(raw.get("action") or LogAction.UPDATE),
        note=_opt_str(raw.get("note")),
        image=_opt_str(raw.get("image")) or None,
    )


def _recovery_log(now: datetime) -> LogEntry:
    return LogEntry(date=format_timestamp(now), action=LogAction.RECOVER, note=RECOVERY_NOTE)


def _coerce_status(raw: Mapping[str, Any]) -> TaskStatus:
    status = TaskStatus.from_raw(raw.get("status"))
    if status is not None:
        return status
    if raw.get("completed"):
        return TaskStatus.DONE
    return TaskStatus.IN_PROGRESS


def _coerce_id(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def upgrade_legacy_record(raw: Mapping[str, Any], *, now: datetime) -> Task:
    """
    Build a Task from a persisted record, filling whatever old versions lacked.

    - id: kept if integer-like, else derived from `now`
    - title: title, then legacy "text", then DEFAULT_TITLE
    - status: status (incl. legacy labels), then legacy "completed" flag
    - logs: malformed entries are dropped; an empty/missing list gets one recovery entry
    """
    task_id = _coerce_id(raw.get("id"))
    if task_id is None:
        task_id = timestamp_id(now)

    title_raw = raw.get("title") or raw.get("text")
    title = str(title_raw).strip() if title_raw else ""

    logs_raw = raw.get("logs")
    logs: list[LogEntry] = []
    if isinstance(logs_raw, list):
        logs = [entry for entry in (_coerce_log(x) for x in logs_raw) if entry is not None]
    if not logs:
        logs = [_recovery_log(now)]

    return Task(
        id=task_id,
        title=title or DEFAULT_TITLE,
        status=_coerce_status(raw),
        due_date=_canonical_due_date(raw.get("dueDate")),
        logs=logs,
    )


def normalize_import_record(raw: Any, *, now: datetime) -> ImportResult:
    if isinstance(raw, Task):
        return Accepted(replace(raw, logs=list(raw.logs)))
    if not isinstance(raw, Mapping):
        return Rejected(MalformedRecordError(f"record is not an object: {type(raw).__name__}"))

    if raw.get("id") is None or not raw.get("title"):
        return Rejected(MalformedRecordError("record is missing id or title"))

    task_id = _coerce_id(raw.get("id"))
    if task_id is None:
        return Rejected(MalformedRecordError(f"record id is not an integer: {raw.get('id')!r}"))

    if not str(raw.get("title")).strip():
        return Rejected(MalformedRecordError(f"record {task_id} has a blank title"))

    return Accepted(upgrade_legacy_record(raw, now=now))


def parse_import_payload(text: str | bytes) -> list[Any]:
    """
    Decode an import/backup file. A single object is wrapped into a list.

    Raises ImportParseError for invalid JSON or any other top-level shape.
    """
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as e:
        raise ImportParseError(f"import file is not valid JSON: {e}") from e

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    raise ImportParseError(f"import file must hold an object or a list, got {type(data).__name__}")


def dump_records(records: list[dict[str, Any]]) -> str:
    return json.dumps(records, ensure_ascii=False, indent=2)


def backup_filename(task: Task, today: date) -> str:
    stem = _UNSAFE_FILENAME_RE.sub("_", task.title[:10])
    return f"todo_{stem}_{today.isoformat()}.json"


def full_backup_filename(today: date) -> str:
    return f"todos_backup_{today.isoformat()}.json"
