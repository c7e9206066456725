# src/dday_todo/tasks/export.py

"""
Flatten tasks + logs into tabular rows (one row per log entry) and render CSV.

The CSV is meant to be opened in spreadsheet apps, so it carries a UTF-8 BOM
and text fields have commas / line breaks replaced by a space.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .task_models import Task

CSV_HEADER = ("date", "D-Day", "title", "status", "log-date", "content")
BOM = "\ufeff"
PHOTO_MARKER = "(photo)"

_LINE_BREAKS_RE = re.compile(r"[\r\n]+")


def sanitize_field(text: str | None) -> str:
    if not text:
        return ""
    return _LINE_BREAKS_RE.sub(" ", text.replace(",", " "))


@dataclass(frozen=True, slots=True)
class ExportRow:
    created_at: str
    deadline: str
    title: str
    status: str
    log_date: str
    note: str
    has_attachment: bool = False

    @property
    def content(self) -> str:
        if not self.has_attachment:
            return self.note
        return f"{self.note} {PHOTO_MARKER}" if self.note else PHOTO_MARKER

    def as_tuple(self) -> tuple[str, ...]:
        return (self.created_at, self.deadline, self.title, self.status, self.log_date, self.content)


def to_rows(tasks: Iterable[Task]) -> list[ExportRow]:
    rows: list[ExportRow] = []
    for t in tasks:
        deadline = f"deadline:{t.due_date}" if t.due_date else "-"
        title = sanitize_field(t.title)
        created_at = sanitize_field(t.created_at)
        for entry in t.logs:
            rows.append(
                ExportRow(
                    created_at=created_at,
                    deadline=deadline,
                    title=title,
                    status=str(t.status),
                    log_date=sanitize_field(entry.date),
                    note=sanitize_field(entry.note),
                    has_attachment=bool(entry.image),
                )
            )
    return rows


def render_csv(rows: Iterable[ExportRow]) -> str:
    """CSV text with leading BOM; write it out with encoding='utf-8'."""
    buf = io.StringIO()
    buf.write(BOM)
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(row.as_tuple())
    return buf.getvalue()


def export_filename(today: date) -> str:
    return f"tasklog_{today.isoformat()}.csv"
