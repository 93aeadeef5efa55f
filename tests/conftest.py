# tests/conftest.py

from __future__ import annotations

import json
from datetime import date

import pytest

from cadence.vault_config import ConfigLoader, default_vault_config

from .fakes import FixedClock, RecordingFileSystem

VAULT = "/vault"
CONFIG_PATH = f"{VAULT}/.cadence/config.json"


def daily_path(d: date) -> str:
    """Where the default config puts the daily note for `d`."""
    return f"{VAULT}/Journal/{d.year:04d}/Daily/{d.month:02d}/{d.day:02d}.md"


@pytest.fixture()
def today() -> date:
    # A Monday, so weekday arithmetic in tests stays readable.
    return date(2024, 1, 15)


@pytest.fixture()
def clock(today: date) -> FixedClock:
    return FixedClock(today)


@pytest.fixture()
def fs() -> RecordingFileSystem:
    """
    In-memory vault with the default .cadence/config.json already written.

    The config write is part of the constructor seed, so `fs.writes` starts empty.
    """
    return RecordingFileSystem({CONFIG_PATH: json.dumps(default_vault_config().to_dict())})


@pytest.fixture()
def loader(fs: RecordingFileSystem) -> ConfigLoader:
    return ConfigLoader(fs)
