# src/dday_todo/tasks/date_parser.py

"""
Smart due-date extraction from free text.

Recognized phrases, in priority order (first match wins):
- "오늘" / "금일"                -> reference date
- "<M>월 <D>일" (+ optional "까지") -> that month/day in the reference year
- "<N>일 후" / "<N>일 뒤"         -> reference + N days
- "내일"                         -> reference + 1 day
- "모레"                         -> reference + 2 days

A month/day phrase that lands before the reference date is kept as-is
(no rollover into next year); it shows up as overdue downstream.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

logger = logging.getLogger(__name__)

TODAY_RE = re.compile(r"오늘|금일")
MONTH_DAY_RE = re.compile(r"(\d+)\s*월\s*(\d+)\s*일\s*(?:까지)?")
DAYS_LATER_RE = re.compile(r"(\d+)\s*일\s*(?:후|뒤)")
TOMORROW_RE = re.compile(r"내일")
DAY_AFTER_TOMORROW_RE = re.compile(r"모레")


@dataclass(frozen=True, slots=True)
class ParsedDate:
    title: str
    due_date: str | None


def format_date(d: date) -> str:
    """Canonical YYYY-MM-DD form."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def _strip_span(text: str, start: int, end: int) -> str:
    return (text[:start] + text[end:]).strip()


def _match_today(text: str, reference: date) -> tuple[re.Match[str], date] | None:
    m = TODAY_RE.search(text)
    return (m, reference) if m else None


def _match_month_day(text: str, reference: date) -> tuple[re.Match[str], date] | None:
    m = MONTH_DAY_RE.search(text)
    if not m:
        return None
    try:
        target = reference.replace(month=int(m.group(1)), day=int(m.group(2)))
    except (ValueError, OverflowError):
        logger.debug("Ignoring impossible month/day phrase %r", m.group(0))
        return None
    return m, target


def _match_days_later(text: str, reference: date) -> tuple[re.Match[str], date] | None:
    m = DAYS_LATER_RE.search(text)
    if not m:
        return None
    try:
        target = reference + timedelta(days=int(m.group(1)))
    except (ValueError, OverflowError):
        logger.debug("Ignoring out-of-range day offset %r", m.group(0))
        return None
    return m, target


def _match_tomorrow(text: str, reference: date) -> tuple[re.Match[str], date] | None:
    m = TOMORROW_RE.search(text)
    return (m, reference + timedelta(days=1)) if m else None


def _match_day_after_tomorrow(text: str, reference: date) -> tuple[re.Match[str], date] | None:
    m = DAY_AFTER_TOMORROW_RE.search(text)
    return (m, reference + timedelta(days=2)) if m else None


_MATCHERS: tuple[Callable[[str, date], tuple[re.Match[str], date] | None], ...] = (
    _match_today,
    _match_month_day,
    _match_days_later,
    _match_tomorrow,
    _match_day_after_tomorrow,
)


def parse_smart_date(text: str, reference: date) -> ParsedDate:
    """
    Extract an optional due date from `text`.

    Only the matched span is removed; the residual is trimmed. The residual
    may be empty (e.g. text was just "내일"); callers decide the fallback.
    """
    for matcher in _MATCHERS:
        hit = matcher(text, reference)
        if hit is None:
            continue
        m, target = hit
        return ParsedDate(title=_strip_span(text, m.start(), m.end()), due_date=format_date(target))

    return ParsedDate(title=text.strip(), due_date=None)
