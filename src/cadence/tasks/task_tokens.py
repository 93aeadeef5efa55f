# src/cadence/tasks/task_tokens.py

"""
Inline metadata grammar for checkbox tasks.

Reading: each matcher scans the task content independently and reports the
field value (or None) plus every span it recognized. The parser removes all
collected spans in one pass afterwards, so matchers never see each other's
edits.

Writing: rewrite_token() changes a single field on a raw line and leaves every
other byte alone; serialize_metadata() renders metadata in canonical order.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from .task_models import REMOVE, Priority, TaskMetadata

TASK_LINE_RE = re.compile(
    r"^(?P<indent>\s*)(?P<marker>[-*+]) \[(?P<state>[ xX])\] (?P<content>.+)$"
)

_KEY_BOUNDARY = r"(?<![A-Za-z0-9_])"

DATE_KEYS = ("due", "scheduled", "created")
TOKEN_KEYS = ("due", "scheduled", "priority", "age", "created", "tags")


def _key_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"{_KEY_BOUNDARY}{key}:(\S+)", re.IGNORECASE)


_DATE_RES = {key: _key_re(key) for key in DATE_KEYS}
_AGE_RE = _key_re("age")
_PRIORITY_RE = re.compile(rf"{_KEY_BOUNDARY}priority:(high|medium|low)(?!\S)", re.IGNORECASE)
_EXCLAIM_RE = re.compile(r"(?<!\S)(!{1,3})(?!\S)")
_TAG_RE = re.compile(r"#([A-Za-z0-9_-]+)")
_WS_RE = re.compile(r"\s+")

_EXCLAIM_PRIORITY = {3: Priority.HIGH, 2: Priority.MEDIUM, 1: Priority.LOW}

Span = tuple[int, int]


@dataclass(frozen=True, slots=True)
class TokenMatch:
    field: str
    value: Any
    spans: tuple[Span, ...]


DateParse = Callable[[str], date]
Matcher = Callable[[str, DateParse], TokenMatch | None]


# ---- matchers ----


def _date_matcher(key: str) -> Matcher:
    pattern = _DATE_RES[key]

    def match(content: str, parse_date: DateParse) -> TokenMatch | None:
        found = list(pattern.finditer(content))
        if not found:
            return None
        try:
            value: date | None = parse_date(found[0].group(1))
        except ValueError:
            value = None
        return TokenMatch(key, value, tuple(m.span() for m in found))

    return match


def _match_age(content: str, _parse_date: DateParse) -> TokenMatch | None:
    found = list(_AGE_RE.finditer(content))
    if not found:
        return None
    raw = found[0].group(1)
    value = int(raw) if raw.isascii() and raw.isdigit() else None
    return TokenMatch("age", value, tuple(m.span() for m in found))


def _match_priority_key(content: str, _parse_date: DateParse) -> TokenMatch | None:
    found = list(_PRIORITY_RE.finditer(content))
    if not found:
        return None
    return TokenMatch("priority", Priority(found[0].group(1).lower()), tuple(m.span() for m in found))


def _match_priority_exclaim(content: str, _parse_date: DateParse) -> TokenMatch | None:
    found = list(_EXCLAIM_RE.finditer(content))
    if not found:
        return None
    return TokenMatch(
        "priority",
        _EXCLAIM_PRIORITY[len(found[0].group(1))],
        tuple(m.span() for m in found),
    )


def _match_tags(content: str, _parse_date: DateParse) -> TokenMatch | None:
    found = list(_TAG_RE.finditer(content))
    if not found:
        return None
    return TokenMatch("tags", [m.group(1) for m in found], tuple(m.span() for m in found))


# Order matters only for priority: a `priority:` key beats exclamation runs
# wherever they sit in the line. Standalone runs are stripped either way.
MATCHERS: tuple[Matcher, ...] = (
    _date_matcher("due"),
    _date_matcher("scheduled"),
    _date_matcher("created"),
    _match_age,
    _match_priority_key,
    _match_priority_exclaim,
    _match_tags,
)


def scan_metadata(content: str, parse_date: DateParse) -> tuple[TaskMetadata, list[Span]]:
    """Run every matcher over `content`; return metadata and all spans to strip."""
    meta = TaskMetadata()
    spans: list[Span] = []
    has_priority_key = False

    for matcher in MATCHERS:
        result = matcher(content, parse_date)
        if result is None:
            continue
        if matcher is _match_priority_key:
            has_priority_key = True

        spans.extend(result.spans)
        if result.value is None:
            continue
        if matcher is _match_priority_exclaim and has_priority_key:
            continue
        if result.field == "tags":
            meta.tags = list(result.value)
        elif getattr(meta, result.field) is None:
            setattr(meta, result.field, result.value)

    return meta, spans


def remove_spans(content: str, spans: Iterable[Span]) -> str:
    """Drop the given spans, then collapse whitespace runs and trim."""
    merged: list[list[int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    pieces: list[str] = []
    pos = 0
    for start, end in merged:
        pieces.append(content[pos:start])
        pos = end
    pieces.append(content[pos:])
    return _WS_RE.sub(" ", " ".join(pieces)).strip()


# ---- writing ----


def format_value(key: str, value: Any) -> str:
    if key in DATE_KEYS:
        return value.isoformat() if isinstance(value, date) else str(value)
    if key == "priority":
        return str(value).lower()
    return str(value)


def serialize_metadata(meta: TaskMetadata) -> str:
    """Render metadata as tokens in canonical order: due, scheduled, priority, age, created, #tags."""
    tokens: list[str] = []
    for key in ("due", "scheduled", "priority", "age", "created"):
        value = getattr(meta, key)
        if value is not None:
            tokens.append(f"{key}:{format_value(key, value)}")
    tokens.extend(f"#{tag}" for tag in meta.tags)
    return " ".join(tokens)


def _strip_pattern(content: str, pattern: re.Pattern[str]) -> str:
    out: list[str] = []
    pos = 0
    for m in pattern.finditer(content):
        start = m.start()
        # Take the whitespace before the token with it.
        while start > pos and content[start - 1] in " \t":
            start -= 1
        out.append(content[pos:start])
        pos = m.end()
    out.append(content[pos:])
    return "".join(out)


def _append(content: str, token: str) -> str:
    base = content.rstrip()
    return f"{base} {token}" if base else token


def _rewrite_content(content: str, key: str, value: Any) -> str:
    remove = value is REMOVE or value is None

    if key == "tags":
        stripped = _strip_pattern(content, _TAG_RE).rstrip()
        if remove or not value:
            return stripped
        return _append(stripped, " ".join(f"#{tag}" for tag in value))

    if key == "priority":
        content = _strip_pattern(content, _EXCLAIM_RE)
        pattern = _PRIORITY_RE
    elif key == "age":
        pattern = _AGE_RE
    elif key in DATE_KEYS:
        pattern = _DATE_RES[key]
    else:
        raise ValueError(f"Unknown metadata key: {key}")

    if remove:
        return _strip_pattern(content, pattern).rstrip()

    token = f"{key}:{format_value(key, value)}"
    m = pattern.search(content)
    if m is None:
        return _append(content, token)
    return content[: m.start()] + token + content[m.end():]


def rewrite_token(line: str, key: str, value: Any) -> str:
    """
    Set or remove one metadata field on a raw line.

    Indentation, list marker and checkbox are kept as is. An existing token is
    rewritten in place; otherwise ` key:value` is appended. REMOVE (or None)
    strips every token for the key. Priority always ends up in `priority:`
    form and tags are replaced as a whole.
    """
    m = TASK_LINE_RE.match(line)
    if m is None:
        return _rewrite_content(line, key, value)

    prefix = line[: m.start("content")]
    original = m.group("content")
    content = _rewrite_content(original, key, value)
    if not original[:1].isspace():
        content = content.lstrip(" \t")
    if not content:
        # Keep the line recognizable as a task with empty text.
        content = " "
    return prefix + content
