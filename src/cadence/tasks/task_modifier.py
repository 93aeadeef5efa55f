# src/cadence/tasks/task_modifier.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date

from ..core.ports import FileSystem
from ..errors import LineOutOfRangeError, NotATaskError, NoteNotFoundError
from ..fs.paths import parent_dir
from .note_sections import detect_line_ending, insert_under_heading
from .task_models import MetadataUpdate, NewTask, Task
from .task_parser import TaskParser, split_lines
from .task_tokens import TASK_LINE_RE, rewrite_token, serialize_metadata

logger = logging.getLogger(__name__)


class TaskModifier:
    """
    Read-modify-write operations on a single task line.

    Every call re-reads the note; a Task returned earlier is never trusted for
    its line number. Missing notes and bad line numbers raise CadenceError
    subclasses; OSError from the filesystem propagates unchanged.
    """

    def __init__(
        self,
        fs: FileSystem,
        *,
        parser: TaskParser | None = None,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        self._fs = fs
        self._parser = parser or TaskParser()
        self._today = today_provider

    async def _read_lines(self, path: str) -> tuple[list[str], str]:
        if not await self._fs.exists(path):
            raise NoteNotFoundError(path)
        content = await self._fs.read_file(path)
        return split_lines(content), detect_line_ending(content)

    def _parse(self, line: str, line_number: int) -> Task:
        task = self._parser.parse_line(line, line_number, self._today())
        if task is None:
            raise NotATaskError(line_number, line)
        return task

    def _locate(self, lines: list[str], line_number: int) -> Task:
        if line_number < 1 or line_number > len(lines):
            raise LineOutOfRangeError(line_number, len(lines))
        return self._parse(lines[line_number - 1], line_number)

    async def _write_line(self, path: str, lines: list[str], nl: str, line_number: int, new_line: str) -> Task:
        # Validate first so a bad rewrite never reaches the file.
        task = self._parse(new_line, line_number)
        lines[line_number - 1] = new_line
        await self._fs.write_file(path, nl.join(lines))
        return task

    async def toggle_task(self, path: str, line_number: int) -> Task:
        lines, nl = await self._read_lines(path)
        task = self._locate(lines, line_number)

        m = TASK_LINE_RE.match(task.raw)
        if m is None:
            raise NotATaskError(line_number, task.raw)
        state_at = m.start("state")
        new_state = " " if task.completed else "x"
        new_line = task.raw[:state_at] + new_state + task.raw[state_at + 1 :]

        updated = await self._write_line(path, lines, nl, line_number, new_line)
        logger.info("Toggled task %s:%d -> %s", path, line_number, "done" if updated.completed else "open")
        return updated

    async def update_metadata(self, path: str, line_number: int, update: MetadataUpdate) -> Task:
        lines, nl = await self._read_lines(path)
        task = self._locate(lines, line_number)

        new_line = task.raw
        for key, value in update.changes().items():
            new_line = rewrite_token(new_line, key, value)

        updated = await self._write_line(path, lines, nl, line_number, new_line)
        logger.info("Updated metadata %s:%d fields=%s", path, line_number, sorted(update.changes()))
        return updated

    def build_task_line(self, new_task: NewTask) -> str:
        meta = new_task.metadata
        if meta.created is None:
            meta = replace(meta, created=self._today())
        check = "x" if new_task.completed else " "
        tokens = serialize_metadata(meta)
        body = f"{new_task.text.strip()} {tokens}".strip()
        return f"{new_task.marker} [{check}] {body}"

    async def add_task(self, path: str, section_heading: str, new_task: NewTask) -> Task:
        if await self._fs.exists(path):
            content = await self._fs.read_file(path)
        else:
            await self._fs.mkdir(parent_dir(path), recursive=True)
            content = ""

        line = self.build_task_line(new_task)
        insertion = insert_under_heading(content, section_heading, [line])
        task = self._parse(line, insertion.first_line)
        await self._fs.write_file(path, insertion.content)

        logger.info("Added task to %s at line %d", path, insertion.first_line)
        return task
