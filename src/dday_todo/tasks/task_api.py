# src/dday_todo/tasks/task_api.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from ..core.state import AppState
from ..errors import AttachmentProcessingError, ImportParseError, ValidationError
from .deadline import DeadlineLabel, classify_deadline
from .export import export_filename, render_csv, to_rows
from .ordering import order_tasks
from .records import backup_filename, dump_records, full_backup_filename, parse_import_payload
from .task_models import Task
from .task_store import MergeResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListItem:
    task: Task
    label: DeadlineLabel | None


def build_list_view(state: AppState) -> list[ListItem]:
    """Ordered tasks with their D-Day label (done tasks get no label)."""
    today = state.store.today()
    ordered = order_tasks(state.store, sort_done_by_date=state.sort_done_by_date)
    return [
        ListItem(task=t, label=None if t.is_done else classify_deadline(t.due_date, today))
        for t in ordered
    ]


def add_todo(state: AppState, raw_text: str) -> Task:
    return state.store.create(raw_text)


async def submit_log(
    state: AppState,
    task_id: int,
    note: str | None,
    attachment_source: str | Path | None = None,
) -> Task | None:
    """
    Append a note and/or photo to a task.

    The attachment is encoded before the store is touched, so a failing
    encoder leaves the task unchanged.
    """
    if not (note or "").strip() and not attachment_source:
        raise ValidationError("a note or a photo is required")
    if task_id not in state.store:
        return None

    token: str | None = None
    if attachment_source:
        try:
            token = await state.attachments.encode(attachment_source)
        except AttachmentProcessingError:
            raise
        except Exception as e:
            raise AttachmentProcessingError(f"attachment processing failed: {e}") from e

    return state.store.append_note(task_id, note, token)


def _target_dir(state: AppState, directory: str | Path | None) -> Path:
    if directory is not None:
        return Path(directory)
    return Path(getattr(state.settings, "export_dir", "."))


def export_csv(state: AppState, directory: str | Path | None = None) -> Path:
    if not len(state.store):
        raise ValidationError("nothing to export")

    out_dir = _target_dir(state, directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(state.store.today())
    rows = to_rows(state.store)
    path.write_text(render_csv(rows), encoding="utf-8")
    logger.info("Exported %d row(s) to %s", len(rows), path)
    return path


def backup_task(state: AppState, task_id: int, directory: str | Path | None = None) -> Path | None:
    records = state.store.backup_records(task_id)
    task = state.store.get(task_id)
    if records is None or task is None:
        return None

    out_dir = _target_dir(state, directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / backup_filename(task, state.store.today())
    path.write_text(dump_records(records), encoding="utf-8")
    logger.info("Backed up task %s to %s", task_id, path)
    return path


def backup_all(state: AppState, directory: str | Path | None = None) -> Path:
    if not len(state.store):
        raise ValidationError("nothing to back up")

    out_dir = _target_dir(state, directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / full_backup_filename(state.store.today())
    path.write_text(dump_records(state.store.to_records()), encoding="utf-8")
    logger.info("Backed up %d task(s) to %s", len(state.store), path)
    return path


async def import_file(state: AppState, source: str | Path) -> MergeResult:
    """Read a backup file and merge it. Unreadable content leaves the store untouched."""
    path = Path(source).expanduser()
    try:
        text = await asyncio.to_thread(path.read_text, "utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportParseError(f"cannot read {path}: {e}") from e

    records = parse_import_payload(text)
    return state.store.merge_import(records)
