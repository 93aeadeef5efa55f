# src/cadence/tasks/note_sections.py

from __future__ import annotations

from dataclasses import dataclass

from .task_parser import split_lines


def detect_line_ending(content: str) -> str:
    return "\r\n" if "\r\n" in content else "\n"


@dataclass(frozen=True, slots=True)
class Insertion:
    content: str
    first_line: int  # 1-indexed line number of the first inserted line


def find_heading(lines: list[str], heading: str) -> int | None:
    """0-based index of the first line equal to `heading` (trimmed, case-insensitive)."""
    wanted = heading.strip().lower()
    for i, line in enumerate(lines):
        if line.strip().lower() == wanted:
            return i
    return None


def insert_under_heading(content: str, heading: str, block: list[str]) -> Insertion:
    """
    Insert `block` lines directly below `heading`, newest first.

    One blank line separates the block from whatever followed the heading,
    unless that content is empty or already starts with a blank line. A missing
    heading is appended at the end of the note (after a blank line when the
    note is non-empty). The note's line ending style is kept.
    """
    nl = detect_line_ending(content)
    lines = split_lines(content)
    idx = find_heading(lines, heading) if content else None
    text = nl.join(block)

    if idx is None:
        if content:
            prefix = content if content.endswith(("\n", "\r\n")) else content + nl
            prefix += nl
        else:
            prefix = ""
        new_content = f"{prefix}{heading}{nl}{text}{nl}"
        return Insertion(new_content, len(split_lines(prefix)) + 1)

    head = nl.join(lines[: idx + 1])
    if idx == len(lines) - 1:
        # Heading is the last line and has no terminator.
        return Insertion(f"{head}{nl}{text}{nl}", idx + 2)

    rest = nl.join(lines[idx + 1 :])
    if rest.strip() == "" or rest.startswith(("\n", "\r\n")) or lines[idx + 1] == "":
        new_content = f"{head}{nl}{text}{nl}{rest}"
    else:
        new_content = f"{head}{nl}{text}{nl}{nl}{rest}"
    return Insertion(new_content, idx + 2)
