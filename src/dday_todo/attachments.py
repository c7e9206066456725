# src/dday_todo/attachments.py

"""
Attachment encoder: turns an image file into the opaque token stored on a LogEntry.

The token is a data URI. No resizing/re-encoding happens here; the store
never looks inside the token.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path

from .errors import AttachmentProcessingError

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 2 * 1024 * 1024


class FileAttachmentEncoder:
    def __init__(self, *, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self._max_bytes = max_bytes

    async def encode(self, source: str | Path) -> str:
        path = Path(source).expanduser()
        mime, _ = mimetypes.guess_type(path.name)
        if not mime or not mime.startswith("image/"):
            raise AttachmentProcessingError(f"not an image file: {path.name}")

        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise AttachmentProcessingError(f"cannot read {path}: {e}") from e

        if self._max_bytes and len(data) > self._max_bytes:
            raise AttachmentProcessingError(
                f"image too large ({len(data)} bytes, max {self._max_bytes})"
            )

        logger.debug("Encoded attachment %s (%d bytes)", path, len(data))
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
