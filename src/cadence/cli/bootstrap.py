# src/cadence/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the composition root:
- loads settings once,
- picks the filesystem (local disk unless one is injected),
- wires the config loader and the four task engine components into EngineState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from ..config import Settings, get_settings
from ..core.ports import FileSystem
from ..dates.date_parser import DateParser
from ..dates.path_generator import PathGenerator
from ..fs.local import LocalFileSystem
from ..tasks.task_aggregator import TaskAggregator
from ..tasks.task_modifier import TaskModifier
from ..tasks.task_parser import TaskParser
from ..tasks.task_rollover import TaskRollover
from ..vault_config import ConfigLoader

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EngineState:
    settings: Settings
    fs: FileSystem
    config_loader: ConfigLoader
    dates: DateParser
    paths: PathGenerator
    parser: TaskParser
    modifier: TaskModifier
    aggregator: TaskAggregator
    rollover: TaskRollover

    @property
    def vault_path(self) -> str:
        return str(self.settings.vault_path)


def build_engine(
    *,
    settings: Settings | None = None,
    fs: FileSystem | None = None,
    today_provider: Callable[[], date] = date.today,
) -> EngineState:
    """
    Build EngineState from the provided settings.

    Settings and filesystem are injectable so tests can run against an in-memory vault.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if fs is None:
        fs = LocalFileSystem()

    dates = DateParser()
    paths = PathGenerator()
    parser = TaskParser(dates)
    loader = ConfigLoader(fs)

    state = EngineState(
        settings=settings,
        fs=fs,
        config_loader=loader,
        dates=dates,
        paths=paths,
        parser=parser,
        modifier=TaskModifier(fs, parser=parser, today_provider=today_provider),
        aggregator=TaskAggregator(
            fs, loader, parser=parser, path_generator=paths, today_provider=today_provider
        ),
        rollover=TaskRollover(
            fs, loader, parser=parser, path_generator=paths, today_provider=today_provider
        ),
    )
    logger.debug("Engine ready vault=%s", state.vault_path)
    return state
