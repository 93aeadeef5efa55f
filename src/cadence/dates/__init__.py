"""
Date handling.

- date_parser.py: ISO + relative date strings -> datetime.date
- path_generator.py: date -> vault-relative note path from a template
- periods.py: note types and period stepping
"""

from .date_parser import DateParser
from .path_generator import PathGenerator
from .periods import NoteType, add_months, period_dates

__all__ = ["DateParser", "NoteType", "PathGenerator", "add_months", "period_dates"]
