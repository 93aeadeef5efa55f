# tests/test_task_aggregator.py

from __future__ import annotations

import json
from datetime import date, timedelta

import pytest

from cadence.dates.periods import NoteType, period_dates
from cadence.errors import ConfigNotFoundError
from cadence.tasks.task_aggregator import TaskAggregator, task_sort_key
from cadence.vault_config import ConfigLoader, default_vault_config

from .conftest import CONFIG_PATH, VAULT, daily_path
from .fakes import CountingConfigSource, FixedClock, RecordingFileSystem


def _aggregator(fs: RecordingFileSystem, loader, clock: FixedClock) -> TaskAggregator:
    return TaskAggregator(fs, loader, today_provider=clock)


@pytest.mark.asyncio
async def test_collects_open_tasks_from_window(fs, loader, clock, today) -> None:
    await fs.write_file(daily_path(today), "## Tasks\n- [ ] today task\n- [x] done today")
    await fs.write_file(daily_path(today - timedelta(days=3)), "- [ ] older task")
    # Outside a 7 day window.
    await fs.write_file(daily_path(today - timedelta(days=8)), "- [ ] ancient task")

    result = await _aggregator(fs, loader, clock).aggregate(VAULT)

    assert sorted(t.text for t in result.open) == ["older task", "today task"]
    assert result.completed == []
    by_text = {t.text: t for t in result.open}
    assert by_text["today task"].source_path == daily_path(today)
    assert by_text["today task"].source_date == today
    assert by_text["today task"].task.line == 2
    assert by_text["older task"].source_date == today - timedelta(days=3)


@pytest.mark.asyncio
async def test_completed_only_when_requested(fs, loader, clock, today) -> None:
    await fs.write_file(daily_path(today), "- [x] done\n- [ ] open")
    agg = _aggregator(fs, loader, clock)

    result = await agg.aggregate(VAULT, include_completed=True)
    assert [t.text for t in result.completed] == ["done"]
    assert [t.text for t in result.open] == ["open"]
    assert all(t.text != "done" for bucket in result.by_priority.values() for t in bucket)


@pytest.mark.asyncio
async def test_overdue_and_stale(fs, loader, clock, today) -> None:
    content = "\n".join(
        [
            "- [ ] late due:2024-01-14",
            "- [ ] due today due:2024-01-15",
            "- [ ] explicit age age:15",
            "- [ ] young age:14",
            "- [ ] created long ago created:2023-12-01",
            "- [ ] created recently created:2024-01-10",
        ]
    )
    await fs.write_file(daily_path(today), content)

    result = await _aggregator(fs, loader, clock).aggregate(VAULT)

    assert [t.text for t in result.overdue] == ["late"]
    assert sorted(t.text for t in result.stale) == ["created long ago", "explicit age"]


@pytest.mark.asyncio
async def test_stale_falls_back_to_source_date(fs, loader, clock, today) -> None:
    await fs.write_file(daily_path(today - timedelta(days=20)), "- [ ] forgotten")

    result = await _aggregator(fs, loader, clock).aggregate(VAULT, days_back=30)
    assert [t.text for t in result.stale] == ["forgotten"]


@pytest.mark.asyncio
async def test_sorting_and_priority_buckets(fs, loader, clock, today) -> None:
    content = "\n".join(
        [
            "- [ ] none undated",
            "- [ ] low late due:2024-02-01 priority:low",
            "- [ ] high undated !!!",
            "- [ ] high early due:2024-01-20 !!!",
            "- [ ] none dated due:2024-01-16",
            "- [ ] medium !!",
            "- [ ] low early due:2024-01-16 !",
        ]
    )
    await fs.write_file(daily_path(today), content)

    result = await _aggregator(fs, loader, clock).aggregate(VAULT)

    assert [t.text for t in result.open] == [
        "high early",
        "high undated",
        "medium",
        "low early",
        "low late",
        "none dated",
        "none undated",
    ]
    assert set(result.by_priority) == {"high", "medium", "low", "none"}
    assert [t.text for t in result.by_priority["low"]] == ["low early", "low late"]
    assert [t.text for t in result.by_priority["none"]] == ["none dated", "none undated"]
    keys = [task_sort_key(t) for t in result.open]
    assert keys == sorted(keys)


@pytest.mark.asyncio
async def test_empty_vault_has_all_buckets(fs, loader, clock) -> None:
    result = await _aggregator(fs, loader, clock).aggregate(VAULT)
    assert result.open == []
    assert result.by_priority == {"high": [], "medium": [], "low": [], "none": []}


@pytest.mark.asyncio
async def test_unreadable_note_is_skipped(fs, loader, clock, today) -> None:
    broken = daily_path(today - timedelta(days=1))

    class FlakyFs(RecordingFileSystem):
        async def read_file(self, path: str) -> str:
            if path == broken:
                raise PermissionError(13, "denied", path)
            return await super().read_file(path)

    flaky = FlakyFs(
        {
            CONFIG_PATH: json.dumps(default_vault_config().to_dict()),
            daily_path(today): "- [ ] fine",
            broken: "- [ ] hidden",
        }
    )
    result = await TaskAggregator(flaky, ConfigLoader(flaky), today_provider=clock).aggregate(VAULT)
    assert [t.text for t in result.open] == ["fine"]


@pytest.mark.asyncio
async def test_weekly_and_monthly_notes(fs, loader, clock, today) -> None:
    # today is 2024-01-15 (ISO week 03); window start 2024-01-08 is week 02.
    await fs.write_file(f"{VAULT}/Journal/2024/Weekly/W02.md", "- [ ] weekly two")
    await fs.write_file(f"{VAULT}/Journal/2024/Weekly/W03.md", "- [ ] weekly three")
    await fs.write_file(f"{VAULT}/Journal/2024/Monthly/01.md", "- [ ] monthly")

    result = await _aggregator(fs, loader, clock).aggregate(
        VAULT, note_types=[NoteType.WEEKLY, "monthly"]
    )
    assert sorted(t.text for t in result.open) == ["monthly", "weekly three", "weekly two"]


@pytest.mark.asyncio
async def test_uses_stale_after_days_from_config(fs, clock, today) -> None:
    cfg = default_vault_config().to_dict()
    cfg["tasks"]["staleAfterDays"] = 2
    await fs.write_file(CONFIG_PATH, json.dumps(cfg))
    await fs.write_file(daily_path(today), "- [ ] three days age:3")

    result = await TaskAggregator(fs, ConfigLoader(fs), today_provider=clock).aggregate(VAULT)
    assert [t.text for t in result.stale] == ["three days"]


@pytest.mark.asyncio
async def test_config_cached_until_cleared(fs, loader, clock) -> None:
    source = CountingConfigSource(loader)
    agg = TaskAggregator(fs, source, today_provider=clock)

    await agg.aggregate(VAULT)
    await agg.aggregate(VAULT)
    assert source.calls == [VAULT]

    agg.clear_config_cache()
    await agg.aggregate(VAULT)
    assert source.calls == [VAULT, VAULT]


@pytest.mark.asyncio
async def test_missing_config_raises(clock) -> None:
    fs = RecordingFileSystem()
    with pytest.raises(ConfigNotFoundError):
        await TaskAggregator(fs, ConfigLoader(fs), today_provider=clock).aggregate(VAULT)


def test_window_dates_are_inclusive(today) -> None:
    days = period_dates(NoteType.DAILY, today - timedelta(days=7), today)
    assert days[0] == date(2024, 1, 8)
    assert days[-1] == today
    assert len(days) == 8


@pytest.mark.asyncio
async def test_relative_due_dates_follow_the_clock(fs, loader, clock, today) -> None:
    await fs.write_file(daily_path(today), "- [ ] pay rent due:yesterday\n- [ ] file taxes due:tomorrow")

    result = await _aggregator(fs, loader, clock).aggregate(VAULT)

    assert [(t.text, t.metadata.due) for t in result.overdue] == [("pay rent", date(2024, 1, 14))]
