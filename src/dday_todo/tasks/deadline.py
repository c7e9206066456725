# src/dday_todo/tasks/deadline.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

logger = logging.getLogger(__name__)


class Urgency(StrEnum):
    URGENT = "urgent"
    WARNING = "warning"
    NORMAL = "normal"
    PAST = "past"


@dataclass(frozen=True, slots=True)
class DeadlineLabel:
    text: str
    urgency: Urgency


def _as_date(value: str | date) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        logger.debug("Unparseable due date %r", value)
        return None


def classify_deadline(due_date: str | date | None, today: date) -> DeadlineLabel | None:
    """
    D-Day label for a due date relative to `today` (day granularity).

    0 -> D-Day (urgent), 1 -> D-1 (urgent), 2..3 -> D-n (warning),
    >3 -> D-n (normal), <0 -> D+n (past). No due date -> None.
    """
    if due_date is None:
        return None
    due = _as_date(due_date)
    if due is None:
        return None

    diff = (due - today).days

    if diff == 0:
        return DeadlineLabel("D-Day", Urgency.URGENT)
    if diff == 1:
        return DeadlineLabel("D-1", Urgency.URGENT)
    if 1 < diff <= 3:
        return DeadlineLabel(f"D-{diff}", Urgency.WARNING)
    if diff > 3:
        return DeadlineLabel(f"D-{diff}", Urgency.NORMAL)
    return DeadlineLabel(f"D+{abs(diff)}", Urgency.PAST)
