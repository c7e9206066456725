# src/dday_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the application layer.

The task engine itself is pure; these Protocols describe the collaborators
around it (attachment encoding, persistence) so they stay swappable in tests.
"""

from pathlib import Path
from typing import Any, Awaitable, Protocol


class AttachmentEncoder(Protocol):
    """Produces the opaque attachment token. Raises AttachmentProcessingError on failure."""

    def encode(self, source: str | Path) -> Awaitable[str]: ...


class TaskPersistence(Protocol):
    def load(self) -> list[Any]: ...

    # Raises PersistenceCapacityError when the write did not happen.
    def save(self, records: list[dict[str, Any]]) -> None: ...
