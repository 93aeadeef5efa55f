# src/cadence/dates/date_parser.py

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from .periods import add_months

_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_UNIT_RE = r"(day|days|week|weeks|month|months)"
_IN_N_RE = re.compile(rf"^in\s+(\d+)\s+{_UNIT_RE}$")
_N_AGO_RE = re.compile(rf"^(\d+)\s+{_UNIT_RE}\s+ago$")
_RELATIVE_RE = re.compile(r"^(next|last|this)\s+([a-z]+)$")


def _shift(reference: date, amount: int, unit: str) -> date:
    if unit.startswith("day"):
        return reference + timedelta(days=amount)
    if unit.startswith("week"):
        return reference + timedelta(weeks=amount)
    return add_months(reference, amount)


class DateParser:
    """
    Resolves the date strings found in task metadata and CLI arguments.

    Accepts ISO dates and datetimes plus a small relative vocabulary:
    today/tomorrow/yesterday, weekday names, "next|last|this <weekday|week|month|year>",
    "in N days|weeks|months" and "N days|weeks|months ago".
    Anything else raises ValueError.
    """

    def parse(self, value: str, reference: date | None = None) -> date:
        text = value.strip()
        if not text:
            raise ValueError("Cannot parse empty string as date")

        iso = self._parse_iso(text)
        if iso is not None:
            return iso

        ref = reference or date.today()
        relative = self._parse_relative(text.lower(), ref)
        if relative is not None:
            return relative

        raise ValueError(f'Unable to parse date: "{value}"')

    @staticmethod
    def _parse_iso(text: str) -> date | None:
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None

    @staticmethod
    def _parse_relative(text: str, ref: date) -> date | None:
        text = " ".join(text.split())

        if text == "today":
            return ref
        if text == "tomorrow":
            return ref + timedelta(days=1)
        if text == "yesterday":
            return ref - timedelta(days=1)

        if text in _WEEKDAYS:
            # Next occurrence on or after the reference day.
            return ref + timedelta(days=(_WEEKDAYS[text] - ref.weekday()) % 7)

        m = _IN_N_RE.match(text)
        if m:
            return _shift(ref, int(m.group(1)), m.group(2))

        m = _N_AGO_RE.match(text)
        if m:
            return _shift(ref, -int(m.group(1)), m.group(2))

        m = _RELATIVE_RE.match(text)
        if not m:
            return None
        direction, unit = m.group(1), m.group(2)

        if unit in _WEEKDAYS:
            target = _WEEKDAYS[unit]
            if direction == "next":
                return ref + timedelta(days=(target - ref.weekday() - 1) % 7 + 1)
            if direction == "last":
                return ref - timedelta(days=(ref.weekday() - target - 1) % 7 + 1)
            # "this <weekday>" stays inside the current Monday-based week.
            return ref + timedelta(days=target - ref.weekday())

        sign = {"next": 1, "last": -1, "this": 0}[direction]
        if unit == "week":
            return ref + timedelta(weeks=sign)
        if unit == "month":
            return add_months(ref, sign)
        if unit == "year":
            return add_months(ref, 12 * sign)
        return None
