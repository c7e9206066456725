# src/dday_todo/errors.py

"""
Error taxonomy for the todo engine.

All of these are recoverable at the command boundary: the console prints a
message and keeps running.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class for every error raised by dday_todo."""


class ValidationError(TodoError, ValueError):
    """Rejected user input (blank title, blank note without attachment). Nothing was mutated."""


class MalformedRecordError(TodoError, ValueError):
    """An import record is missing id/title or has the wrong shape."""


class AttachmentProcessingError(TodoError):
    """The attachment token could not be produced; the log entry was not appended."""


class PersistenceCapacityError(TodoError):
    """
    Writing the collection to storage failed (disk error or quota exceeded).

    The in-memory store is already mutated when this is raised, only the
    durable copy is stale.
    """


class ImportParseError(TodoError, ValueError):
    """Import payload is not a JSON object or list. The store was not touched."""
