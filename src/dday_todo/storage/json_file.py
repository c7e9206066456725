# src/dday_todo/storage/json_file.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..errors import PersistenceCapacityError

logger = logging.getLogger(__name__)


class JsonTaskFile:
    """
    JSON file holding the serialized task collection.

    - load(): missing file -> [], unreadable file -> [] (logged)
    - save(): atomic write via tmp file + os.replace; raises
      PersistenceCapacityError on OS errors or when the payload exceeds quota
    """

    def __init__(self, path: str | Path, *, quota_bytes: int = 0) -> None:
        self._path = Path(path)
        self._quota_bytes = max(0, int(quota_bytes))

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Any]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to load tasks from %s", self._path)
            return []
        if not isinstance(data, list):
            logger.error("Tasks file %s does not hold a list; starting empty.", self._path)
            return []
        logger.info("Loaded %d task record(s) from %s", len(data), self._path)
        return data

    def save(self, records: list[dict[str, Any]]) -> None:
        payload = json.dumps(records, ensure_ascii=False, indent=2)
        size = len(payload.encode("utf-8"))
        if self._quota_bytes and size > self._quota_bytes:
            raise PersistenceCapacityError(
                f"storage quota exceeded ({size} > {self._quota_bytes} bytes); "
                "remove photos or old tasks"
            )

        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise PersistenceCapacityError(f"could not write {self._path}: {e}") from e

        logger.debug("Saved %d task record(s) to %s (%d bytes)", len(records), self._path, size)
