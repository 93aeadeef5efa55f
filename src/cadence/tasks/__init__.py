"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskMetadata, AggregatedTasks, ...)
- task_tokens.py: inline metadata grammar + single-field line rewriting
- task_parser.py: checkbox line recognition
- note_sections.py: inserting lines under a section heading
- task_modifier.py: toggle / update metadata / add task on one note
- task_aggregator.py: scan and classify tasks across a date window
- task_rollover.py: carry incomplete tasks into the target day's note
"""

from .task_aggregator import TaskAggregator
from .task_models import (
    REMOVE,
    UNSET,
    AggregatedTasks,
    MetadataUpdate,
    NewTask,
    Priority,
    RolloverResult,
    SkippedTask,
    Task,
    TaskMetadata,
    TaskWithSource,
)
from .task_modifier import TaskModifier
from .task_parser import TaskParser
from .task_rollover import TaskRollover
from .task_tokens import rewrite_token, serialize_metadata

__all__ = [
    "REMOVE",
    "UNSET",
    "AggregatedTasks",
    "MetadataUpdate",
    "NewTask",
    "Priority",
    "RolloverResult",
    "SkippedTask",
    "Task",
    "TaskAggregator",
    "TaskMetadata",
    "TaskModifier",
    "TaskParser",
    "TaskRollover",
    "TaskWithSource",
    "rewrite_token",
    "serialize_metadata",
]
