# src/dday_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore
from .ports import AttachmentEncoder, TaskPersistence


@dataclass
class AppState:
    # Settings object (config.Settings or a test SimpleNamespace).
    settings: object

    store: TaskStore
    storage: TaskPersistence
    attachments: AttachmentEncoder

    sort_done_by_date: bool = False

    def persist(self) -> None:
        """Write the whole collection. Raises PersistenceCapacityError on failure."""
        self.storage.save(self.store.to_records())
