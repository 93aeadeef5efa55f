# src/cadence/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_text(cls, raw: str | None) -> Priority | None:
        if not raw:
            return None
        try:
            return cls(raw.lower())
        except ValueError:
            return None


# Sort rank; tasks without a priority sort after LOW.
PRIORITY_RANK: dict[Priority | None, int] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
    None: 3,
}

PRIORITY_BUCKETS = ("high", "medium", "low", "none")


@dataclass(slots=True)
class TaskMetadata:
    due: date | None = None
    scheduled: date | None = None
    created: date | None = None
    age: int | None = None
    priority: Priority | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Task:
    """
    One checkbox line as parsed from a note.

    `line` is 1-indexed and only meaningful for the content snapshot it was
    parsed from. `raw` is the exact line text without its line terminator.
    """

    line: int
    text: str
    completed: bool
    metadata: TaskMetadata
    raw: str


@dataclass(slots=True)
class TaskWithSource:
    task: Task
    source_path: str
    source_date: date

    # Convenience passthroughs used by sorting and the CLI.
    @property
    def text(self) -> str:
        return self.task.text

    @property
    def metadata(self) -> TaskMetadata:
        return self.task.metadata


@dataclass(slots=True)
class AggregatedTasks:
    open: list[TaskWithSource] = field(default_factory=list)
    completed: list[TaskWithSource] = field(default_factory=list)
    overdue: list[TaskWithSource] = field(default_factory=list)
    stale: list[TaskWithSource] = field(default_factory=list)
    by_priority: dict[str, list[TaskWithSource]] = field(
        default_factory=lambda: {bucket: [] for bucket in PRIORITY_BUCKETS}
    )


@dataclass(slots=True)
class SkippedTask:
    task: TaskWithSource
    reason: str


@dataclass(slots=True)
class RolloverResult:
    rolled_over: list[TaskWithSource]
    target_note_path: str
    skipped: list[SkippedTask]


@dataclass(slots=True)
class NewTask:
    text: str
    completed: bool = False
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    marker: str = "-"


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


# UNSET leaves a field untouched; REMOVE strips its token(s) from the line.
UNSET: Any = _Sentinel("UNSET")
REMOVE: Any = _Sentinel("REMOVE")


@dataclass(slots=True)
class MetadataUpdate:
    due: date | None | Any = UNSET
    scheduled: date | None | Any = UNSET
    created: date | None | Any = UNSET
    age: int | None | Any = UNSET
    priority: Priority | str | None | Any = UNSET
    tags: list[str] | Any = UNSET

    def changes(self) -> dict[str, Any]:
        """Fields that are not UNSET, in canonical token order."""
        out: dict[str, Any] = {}
        for name in ("due", "scheduled", "priority", "age", "created", "tags"):
            value = getattr(self, name)
            if value is not UNSET:
                out[name] = value
        return out
