# src/cadence/tasks/task_aggregator.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from ..core.ports import FileSystem, VaultConfigSource
from ..dates.path_generator import PathGenerator
from ..dates.periods import NoteType, period_dates
from ..fs.paths import join_path
from ..vault_config import VaultConfig, VaultConfigCache
from .task_models import PRIORITY_RANK, AggregatedTasks, TaskWithSource
from .task_parser import TaskParser

logger = logging.getLogger(__name__)


def task_sort_key(item: TaskWithSource) -> tuple[int, bool, date]:
    """Priority rank first (high..none), then due date ascending with undated last."""
    due = item.metadata.due
    return (PRIORITY_RANK[item.metadata.priority], due is None, due or date.min)


def sort_tasks(items: list[TaskWithSource]) -> None:
    items.sort(key=task_sort_key)


def task_age(item: TaskWithSource, today: date) -> int:
    """Explicit age:N wins; otherwise days since created, otherwise days since the source note."""
    meta = item.metadata
    if meta.age is not None:
        return meta.age
    if meta.created is not None:
        return (today - meta.created).days
    return (today - item.source_date).days


async def collect_tasks(
    fs: FileSystem,
    parser: TaskParser,
    paths: PathGenerator,
    vault_path: str,
    template: str,
    dates: Iterable[date],
    *,
    reference: date | None = None,
) -> list[TaskWithSource]:
    """
    Read and parse every existing note for `dates`.

    Missing notes are skipped silently and unreadable ones are logged at DEBUG;
    neither aborts the scan.
    """
    out: list[TaskWithSource] = []
    for d in dates:
        full_path = join_path(vault_path, paths.generate_path(template, d))
        try:
            if not await fs.exists(full_path):
                continue
            content = await fs.read_file(full_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable note %s: %s", full_path, e)
            continue

        for task in parser.parse(content, reference):
            out.append(TaskWithSource(task=task, source_path=full_path, source_date=d))
    return out


class TaskAggregator:
    """
    Collects and classifies tasks across a window of periodic notes.

    Vault config is cached per instance; call clear_config_cache() after
    editing .cadence/config.json.
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

    async def aggregate(
        self,
        vault_path: str,
        days_back: int = 7,
        include_completed: bool = False,
        note_types: Iterable[NoteType | str] = (NoteType.DAILY,),
    ) -> AggregatedTasks:
        config = await self._config.get(vault_path)
        today = self._today()
        start = today - timedelta(days=days_back)

        found: list[TaskWithSource] = []
        for raw_type in note_types:
            note_type = NoteType(raw_type)
            template = config.paths.get(note_type.value)
            if not template:
                logger.debug("No path template for note type %s; skipping", note_type)
                continue
            found.extend(
                await collect_tasks(
                    self._fs,
                    self._parser,
                    self._paths,
                    vault_path,
                    template,
                    period_dates(note_type, start, today),
                    reference=today,
                )
            )

        result = self._classify(found, config, today, include_completed)
        logger.debug(
            "Aggregated %s: open=%d overdue=%d stale=%d completed=%d",
            vault_path,
            len(result.open),
            len(result.overdue),
            len(result.stale),
            len(result.completed),
        )
        return result

    @staticmethod
    def _classify(
        items: list[TaskWithSource],
        config: VaultConfig,
        today: date,
        include_completed: bool,
    ) -> AggregatedTasks:
        result = AggregatedTasks()
        stale_after = config.tasks.stale_after_days

        for item in items:
            if item.task.completed:
                if include_completed:
                    result.completed.append(item)
                continue

            result.open.append(item)
            due = item.metadata.due
            if due is not None and due < today:
                result.overdue.append(item)
            if task_age(item, today) > stale_after:
                result.stale.append(item)

            priority = item.metadata.priority
            result.by_priority[priority.value if priority else "none"].append(item)

        for bucket in (result.open, result.completed, result.overdue, result.stale):
            sort_tasks(bucket)
        for bucket in result.by_priority.values():
            sort_tasks(bucket)
        return result
