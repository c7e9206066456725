# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dday_todo.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    "name, level, shown",
    [
        ("dday_todo.tasks.task_store", logging.DEBUG, False),
        ("dday_todo.tasks.task_store", logging.INFO, True),
        ("dday_todo.storage.json_file", logging.INFO, False),
        ("dday_todo.storage.json_file", logging.WARNING, True),
        ("dday_todo.attachments", logging.DEBUG, False),
        ("dday_todo.cli.main", logging.DEBUG, True),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_debug_to_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("dday_todo.tasks.task_store").debug("Task created id=%s", 42)
        for h in root.handlers:
            h.flush()

        text = (tmp_path / "logs" / "dday.log").read_text("utf-8")
        assert "Task created id=42" in text
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
