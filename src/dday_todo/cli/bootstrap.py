# src/dday_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads the stored collection into a TaskStore,
- wires the store's change signal to the JSON file.
"""

from __future__ import annotations

import logging

from ..attachments import FileAttachmentEncoder
from ..config import get_settings
from ..core.ports import TaskPersistence
from ..core.state import AppState
from ..errors import PersistenceCapacityError
from ..storage.json_file import JsonTaskFile
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)


def _persist_on_change(storage: TaskPersistence):
    def on_change(store: TaskStore) -> None:
        storage.save(store.to_records())

    return on_change


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = JsonTaskFile(settings.tasks_path, quota_bytes=settings.storage_quota_bytes)
    store = TaskStore.from_records(storage.load(), on_change=_persist_on_change(storage))

    return AppState(
        settings=settings,
        store=store,
        storage=storage,
        attachments=FileAttachmentEncoder(max_bytes=settings.attachment_max_bytes),
        sort_done_by_date=bool(getattr(settings, "sort_done_by_date", False)),
    )


def save_state(state: AppState) -> bool:
    """Serialize-on-teardown. Returns False (and logs) if the write failed."""
    try:
        state.persist()
    except PersistenceCapacityError:
        logger.exception("Failed to save tasks on shutdown.")
        return False
    logger.info("Saved %d task(s).", len(state.store))
    return True
