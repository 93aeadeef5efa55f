# src/cadence/fs/paths.py

from __future__ import annotations

import re

_LEADING_SEP_RE = re.compile(r"^[/\\]+")
_TRAILING_SEP_RE = re.compile(r"[/\\]+$")


def join_path(*segments: str) -> str:
    """
    Join path segments using the separator style of the first segment.

    Vault roots may be Windows paths ("C:\\vault") while templates always use "/".
    """
    if not segments:
        return ""
    first = segments[0]
    sep = "\\" if "\\" in first or re.match(r"^[A-Za-z]:", first) else "/"

    parts: list[str] = []
    last = len(segments) - 1
    for i, seg in enumerate(segments):
        if i > 0:
            seg = _LEADING_SEP_RE.sub("", seg)
        if i < last:
            seg = _TRAILING_SEP_RE.sub("", seg)
        parts.append(seg)
    return sep.join(parts)


def parent_dir(path: str) -> str:
    idx = max(path.rfind("/"), path.rfind("\\"))
    if idx == -1:
        return "."
    if idx == 0:
        return path[0]
    return path[:idx]
