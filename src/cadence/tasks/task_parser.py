# src/cadence/tasks/task_parser.py

from __future__ import annotations

import re
from datetime import date

from ..core.ports import DateResolver
from ..dates.date_parser import DateParser
from .task_models import Task
from .task_tokens import TASK_LINE_RE, remove_spans, scan_metadata

LINE_SPLIT_RE = re.compile(r"\r?\n")


def split_lines(content: str) -> list[str]:
    return LINE_SPLIT_RE.split(content)


class TaskParser:
    """
    Extracts checkbox tasks from note content.

    Only list items of the form `<indent><-|*|+> [ |x|X] <content>` are tasks;
    every other line is ignored. Line numbers are 1-indexed and count blank lines.

    Relative date values (`due:tomorrow`) resolve against `reference`; callers
    with an injected clock pass its date, otherwise the resolver's default applies.
    """

    def __init__(self, date_parser: DateResolver | None = None) -> None:
        self._dates: DateResolver = date_parser or DateParser()

    def parse(self, content: str, reference: date | None = None) -> list[Task]:
        tasks: list[Task] = []
        for number, line in enumerate(split_lines(content), start=1):
            task = self.parse_line(line, number, reference)
            if task is not None:
                tasks.append(task)
        return tasks

    def parse_line(self, line: str, number: int, reference: date | None = None) -> Task | None:
        m = TASK_LINE_RE.match(line)
        if m is None:
            return None

        content = m.group("content")
        metadata, spans = scan_metadata(content, lambda value: self._dates.parse(value, reference))
        return Task(
            line=number,
            text=remove_spans(content, spans),
            completed=m.group("state") in ("x", "X"),
            metadata=metadata,
            raw=line,
        )
