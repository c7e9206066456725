# src/dday_todo/tasks/ordering.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import Task


def order_tasks(tasks: Iterable[Task], *, sort_done_by_date: bool = False) -> list[Task]:
    """
    Display order (a new list; the input is never reordered).

    - in_progress before done
    - within in_progress: dated before undated, then ascending due date
    - done tasks keep their relative order unless sort_done_by_date is set,
      in which case the date tiers apply to them too

    Python's sort is stable, so ties keep insertion order.
    """

    def key(t: Task) -> tuple[bool, bool, str]:
        if t.is_done and not sort_done_by_date:
            return (True, False, "")
        return (t.is_done, t.due_date is None, t.due_date or "")

    return sorted(tasks, key=key)
