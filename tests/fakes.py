# tests/fakes.py

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from dday_todo.errors import AttachmentProcessingError, PersistenceCapacityError


class FixedClock:
    """Deterministic clock for TaskStore; advance() moves it forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeAttachmentEncoder:
    """
    Deterministic attachment encoder.

    - Captures calls for assertions
    - Returns a fixed token, or raises when fail=True
    """

    def __init__(self, token: str = "data:image/png;base64,AAAA", fail: bool = False) -> None:
        self.token = token
        self.fail = fail
        self.calls: list[str | Path] = []

    async def encode(self, source: str | Path) -> str:
        self.calls.append(source)
        if self.fail:
            raise AttachmentProcessingError(f"cannot encode {source}")
        return self.token


class RecordingPersistence:
    """In-memory TaskPersistence; keeps every saved snapshot."""

    def __init__(self, records: list[Any] | None = None, fail: bool = False) -> None:
        self.records = list(records or [])
        self.fail = fail
        self.saves: list[list[dict[str, Any]]] = []

    def load(self) -> list[Any]:
        return list(self.records)

    def save(self, records: list[dict[str, Any]]) -> None:
        if self.fail:
            raise PersistenceCapacityError("quota exceeded")
        self.saves.append(records)
        self.records = list(records)
