# src/cadence/dates/periods.py

from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import StrEnum


class NoteType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(index, 12)
    month = month0 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def _next_period_start(note_type: NoteType, d: date) -> date:
    if note_type is NoteType.DAILY:
        return d + timedelta(days=1)
    if note_type is NoteType.WEEKLY:
        return d + timedelta(days=7)
    if note_type is NoteType.MONTHLY:
        return add_months(d.replace(day=1), 1)
    if note_type is NoteType.QUARTERLY:
        first_month = (quarter_of(d) - 1) * 3 + 1
        return add_months(date(d.year, first_month, 1), 3)
    return date(d.year + 1, 1, 1)


def period_dates(note_type: NoteType | str, start: date, end: date) -> list[date]:
    """
    Candidate dates for one note type inside [start, end], both inclusive.

    The first candidate is `start` itself. Daily and weekly step by a fixed
    number of days; monthly, quarterly and yearly jump to the next period's
    first day.
    """
    kind = NoteType(note_type)
    out: list[date] = []
    current = start
    while current <= end:
        out.append(current)
        current = _next_period_start(kind, current)
    return out
