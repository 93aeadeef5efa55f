# src/cadence/tasks/task_rollover.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date, timedelta

from ..core.ports import FileSystem, VaultConfigSource
from ..dates.path_generator import PathGenerator
from ..dates.periods import NoteType, period_dates
from ..fs.paths import join_path, parent_dir
from ..vault_config import VaultConfigCache
from .note_sections import insert_under_heading
from .task_aggregator import collect_tasks
from .task_models import RolloverResult, SkippedTask, TaskWithSource
from .task_parser import TaskParser
from .task_tokens import rewrite_token

logger = logging.getLogger(__name__)

DEFAULT_TASKS_SECTION = "## Tasks"
DUPLICATE_REASON = "Task already exists in target note"


def normalize_text(text: str) -> str:
    return text.strip().lower()


def carry_forward(item: TaskWithSource) -> TaskWithSource:
    """Bump age by one and pin `created` to the first day the task was seen."""
    meta = item.metadata
    new_age = (meta.age or 0) + 1
    created = meta.created or item.source_date

    raw = rewrite_token(item.task.raw, "age", new_age)
    raw = rewrite_token(raw, "created", created)

    task = replace(item.task, raw=raw, metadata=replace(meta, age=new_age, created=created))
    return replace(item, task=task)


class TaskRollover:
    """
    Moves incomplete tasks from recent daily notes into the target day's note.

    Tasks whose normalized text already appears in the target note (or earlier
    in the same batch) are reported as skipped. Nothing is written when no task
    is accepted.
    """

    def __init__(
        self,
        fs: FileSystem,
        config_source: VaultConfigSource,
        *,
        parser: TaskParser | None = None,
        path_generator: PathGenerator | None = None,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        self._fs = fs
        self._config = VaultConfigCache(config_source)
        self._parser = parser or TaskParser()
        self._paths = path_generator or PathGenerator()
        self._today = today_provider

    def clear_config_cache(self) -> None:
        self._config.clear()

    async def rollover(
        self,
        vault_path: str,
        target_date: date | None = None,
        source_days_back: int | None = None,
    ) -> RolloverResult:
        config = await self._config.get(vault_path)
        target = target_date or self._today()
        days_back = config.tasks.scan_days_back if source_days_back is None else source_days_back

        template = config.paths[NoteType.DAILY.value]
        target_path = join_path(vault_path, self._paths.generate_path(template, target))

        sources: list[TaskWithSource] = []
        if days_back > 0:
            window = period_dates(
                NoteType.DAILY,
                target - timedelta(days=days_back),
                target - timedelta(days=1),
            )
            found = await collect_tasks(
                self._fs, self._parser, self._paths, vault_path, template, window, reference=target
            )
            sources = [item for item in found if not item.task.completed]

        content = ""
        try:
            if await self._fs.exists(target_path):
                content = await self._fs.read_file(target_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Target note %s unreadable, nothing to dedup against: %s", target_path, e)
        seen = {normalize_text(t.text) for t in self._parser.parse(content, target)} if content else set()

        rolled: list[TaskWithSource] = []
        skipped: list[SkippedTask] = []
        for item in sources:
            key = normalize_text(item.text)
            if key in seen:
                skipped.append(SkippedTask(task=item, reason=DUPLICATE_REASON))
                continue
            seen.add(key)
            rolled.append(carry_forward(item))

        if rolled:
            # Re-read before writing; a failure here propagates so the note is never
            # rebuilt from an empty snapshot.
            if await self._fs.exists(target_path):
                content = await self._fs.read_file(target_path)
            else:
                content = ""
                await self._fs.mkdir(parent_dir(target_path), recursive=True)
            heading = config.sections.get("tasks", DEFAULT_TASKS_SECTION)
            insertion = insert_under_heading(content, heading, [item.task.raw for item in rolled])
            await self._fs.write_file(target_path, insertion.content)
            logger.info("Rolled over %d task(s) into %s (%d skipped)", len(rolled), target_path, len(skipped))
        else:
            logger.info("Nothing to roll over into %s (%d skipped)", target_path, len(skipped))

        return RolloverResult(rolled_over=rolled, target_note_path=target_path, skipped=skipped)
