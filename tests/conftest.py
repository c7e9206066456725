# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from dday_todo.core.state import AppState
from dday_todo.tasks.task_models import LogEntry, Task, TaskStatus
from dday_todo.tasks.task_store import TaskStore

from .fakes import FakeAttachmentEncoder, FixedClock, RecordingPersistence

NOW = datetime(2024, 6, 1, 9, 30, 0)


def make_task(
    task_id: int,
    *,
    title: str | None = None,
    status: TaskStatus = TaskStatus.IN_PROGRESS,
    due_date: str | None = None,
) -> Task:
    return Task(
        id=task_id,
        title=title or f"task {task_id}",
        status=status,
        due_date=due_date,
        logs=[LogEntry(date="2024-05-01 10:00:00", action="create", note="new task")],
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def persistence() -> RecordingPersistence:
    return RecordingPersistence()


@pytest.fixture()
def store(clock: FixedClock, persistence: RecordingPersistence) -> TaskStore:
    return TaskStore(clock=clock, on_change=lambda s: persistence.save(s.to_records()))


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="dday-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_path=tmp_path / "todos.json",
        export_dir=tmp_path / "exports",
        storage_quota_bytes=0,
        attachment_max_bytes=1024,
        sort_done_by_date=False,
    )


@pytest.fixture()
def encoder() -> FakeAttachmentEncoder:
    return FakeAttachmentEncoder()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    persistence: RecordingPersistence,
    encoder: FakeAttachmentEncoder,
) -> AppState:
    """AppState wired with deterministic fakes around a real TaskStore."""
    return AppState(
        settings=settings,
        store=store,
        storage=persistence,
        attachments=encoder,
    )
