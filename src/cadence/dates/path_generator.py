# src/cadence/dates/path_generator.py

from __future__ import annotations

from datetime import date

from .periods import quarter_of

# Fixed English names so generated paths do not depend on the process locale.
_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

TEMPLATE_VARIABLES = ("year", "month", "date", "week", "quarter", "day")


class PathGenerator:
    """
    Substitutes date variables into vault-relative path templates.

    - {year}    4-digit year
    - {month}   2-digit month
    - {date}    2-digit day of month
    - {week}    2-digit ISO week number
    - {quarter} quarter number 1-4
    - {day}     weekday name, e.g. "Monday"
    """

    def generate_path(self, template: str, d: date) -> str:
        values = {
            "year": f"{d.year:04d}",
            "month": f"{d.month:02d}",
            "date": f"{d.day:02d}",
            "week": f"{d.isocalendar().week:02d}",
            "quarter": str(quarter_of(d)),
            "day": _DAY_NAMES[d.weekday()],
        }
        result = template
        for name, value in values.items():
            result = result.replace("{" + name + "}", value)
        return result

    def available_variables(self) -> list[str]:
        return list(TEMPLATE_VARIABLES)
