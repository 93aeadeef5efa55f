# src/cadence/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds EngineState, then runs one subcommand:
init, list, rollover, toggle, add.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from ..cli.bootstrap import EngineState, build_engine
from ..config import get_settings
from ..dates.periods import NoteType
from ..errors import CadenceError, error_kind
from ..fs.paths import join_path
from ..logging_setup import setup_logging
from ..tasks.task_models import AggregatedTasks, NewTask, Priority, TaskMetadata, TaskWithSource
from ..tasks.task_tokens import serialize_metadata

logger = logging.getLogger(__name__)

VIEWS = ("open", "overdue", "stale", "completed", "priority")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="cadence", description="Tasks in markdown periodic notes")
    ap.add_argument("--vault", default=None, help="Vault root (default: $CADENCE_VAULT_PATH or cwd)")
    sub = ap.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Write a default .cadence/config.json")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing config")

    p_list = sub.add_parser("list", help="List tasks from recent notes")
    p_list.add_argument("--days", type=int, default=None, help="Days back to scan (default: $CADENCE_DAYS_BACK)")
    p_list.add_argument("--completed", action="store_true", help="Include completed tasks")
    p_list.add_argument(
        "--type",
        dest="note_types",
        action="append",
        choices=[t.value for t in NoteType],
        help="Note type to scan (repeatable, default: daily)",
    )
    p_list.add_argument("--view", choices=VIEWS, default="open", help="Which group to print (default: open)")

    p_roll = sub.add_parser("rollover", help="Carry incomplete tasks into a day's note")
    p_roll.add_argument("--date", default=None, help="Target date, ISO or relative (default: today)")
    p_roll.add_argument("--days-back", type=int, default=None, help="Source window (default: vault config)")

    p_toggle = sub.add_parser("toggle", help="Toggle a task's checkbox")
    p_toggle.add_argument("note", help="Note path, relative to the vault or absolute")
    p_toggle.add_argument("line", type=int, help="1-indexed line number")

    p_add = sub.add_parser("add", help="Add a task to a note")
    p_add.add_argument("text", help="Task text")
    p_add.add_argument("--note", default=None, help="Note path (default: the daily note for --date)")
    p_add.add_argument("--date", default=None, help="Daily note date, ISO or relative (default: today)")
    p_add.add_argument("--section", default=None, help="Section heading (default: vault tasks section)")
    p_add.add_argument("--due", default=None, help="Due date, ISO or relative")
    p_add.add_argument("--scheduled", default=None, help="Scheduled date, ISO or relative")
    p_add.add_argument("--priority", choices=[p.value for p in Priority], default=None)
    p_add.add_argument("--tag", dest="tags", action="append", default=[], help="Tag (repeatable)")
    return ap


def _note_path(state: EngineState, raw: str) -> str:
    if os.path.isabs(raw):
        return raw
    return join_path(state.vault_path, raw)


def format_task(item: TaskWithSource, vault_path: str) -> str:
    task = item.task
    check = "x" if task.completed else " "
    source = item.source_path
    if source.startswith(vault_path):
        source = source[len(vault_path):].lstrip("/\\")
    tokens = serialize_metadata(task.metadata)
    body = f"{task.text} {tokens}".strip()
    return f"[{check}] {body}  ({source}:{task.line})"


def _print_group(title: str, items: list[TaskWithSource], vault_path: str) -> None:
    print(f"{title} ({len(items)})")
    for item in items:
        print(f"  {format_task(item, vault_path)}")


def print_aggregated(result: AggregatedTasks, view: str, vault_path: str) -> None:
    if view == "priority":
        for bucket, items in result.by_priority.items():
            _print_group(bucket, items, vault_path)
        return
    _print_group(view, getattr(result, view), vault_path)


async def run_command(state: EngineState, args: argparse.Namespace) -> int:
    vault = state.vault_path

    if args.command == "init":
        path = await state.config_loader.generate_default_config_file(vault, force=args.force)
        print(f"Wrote {path}")
        return 0

    if args.command == "list":
        days = state.settings.days_back if args.days is None else args.days
        result = await state.aggregator.aggregate(
            vault,
            days_back=days,
            include_completed=args.completed or args.view == "completed",
            note_types=args.note_types or [NoteType.DAILY],
        )
        print_aggregated(result, args.view, vault)
        return 0

    if args.command == "rollover":
        config = await state.config_loader.load_config(vault)
        if not config.tasks.rollover_enabled:
            print("Rollover is disabled in the vault config.")
            return 0
        target = state.dates.parse(args.date) if args.date else None
        result = await state.rollover.rollover(vault, target_date=target, source_days_back=args.days_back)
        print(f"Rolled over {len(result.rolled_over)} task(s) into {result.target_note_path}")
        for skipped in result.skipped:
            print(f"  skipped: {skipped.task.text} ({skipped.reason})")
        return 0

    if args.command == "toggle":
        task = await state.modifier.toggle_task(_note_path(state, args.note), args.line)
        print(task.raw)
        return 0

    if args.command == "add":
        config = await state.config_loader.load_config(vault)
        if args.note:
            note = _note_path(state, args.note)
        else:
            day = state.dates.parse(args.date) if args.date else date.today()
            note = join_path(vault, state.paths.generate_path(config.paths[NoteType.DAILY.value], day))
        section = args.section or config.sections.get("tasks", "## Tasks")
        meta = TaskMetadata(
            due=state.dates.parse(args.due) if args.due else None,
            scheduled=state.dates.parse(args.scheduled) if args.scheduled else None,
            priority=Priority.from_text(args.priority),
            tags=list(args.tags),
        )
        task = await state.modifier.add_task(note, section, NewTask(text=args.text, metadata=meta))
        print(f"{note}:{task.line}: {task.raw}")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.vault:
        settings = replace(settings, vault_path=Path(args.vault).expanduser())

    # choose console log level from settings.log_level
    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    state = build_engine(settings=settings)
    logger.debug("Running %s command=%s vault=%s", settings.app_name, args.command, state.vault_path)

    try:
        return asyncio.run(run_command(state, args))
    except CadenceError as e:
        logger.debug("Command failed: %s", e.to_dict())
        print(f"error ({e.kind}): {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        # Date strings from the command line that DateParser rejects.
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        logger.debug("Filesystem error", exc_info=True)
        print(f"error ({error_kind(e)}): {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
