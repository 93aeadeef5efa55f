# src/cadence/fs/memory.py

from __future__ import annotations

import errno
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import FileStat


@dataclass(slots=True)
class _Entry:
    is_dir: bool
    content: str
    mtime: datetime
    ctime: datetime


class MemoryFileSystem:
    """
    Dict-backed FileSystem for tests and dry runs.

    - paths are normalized to forward slashes without a trailing slash
    - write_file creates missing parent directories
    - simulate_error()/simulate_error_once() make a method raise on demand
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._entries: dict[str, _Entry] = {}
        self._errors: dict[str, BaseException] = {}
        self._errors_once: dict[str, BaseException] = {}
        for path, content in (files or {}).items():
            self._put_file(self._norm(path), content)

    # ---- error simulation ----

    def simulate_error(self, method: str, error: BaseException) -> None:
        self._errors[method] = error

    def simulate_error_once(self, method: str, error: BaseException) -> None:
        self._errors_once[method] = error

    def clear_simulated_errors(self) -> None:
        self._errors.clear()
        self._errors_once.clear()

    def _check(self, method: str) -> None:
        once = self._errors_once.pop(method, None)
        if once is not None:
            raise once
        err = self._errors.get(method)
        if err is not None:
            raise err

    # ---- helpers ----

    @staticmethod
    def _norm(path: str) -> str:
        p = str(path).replace("\\", "/")
        if len(p) > 1 and p.endswith("/"):
            p = p[:-1]
        return p

    @staticmethod
    def _parent(norm: str) -> str | None:
        idx = norm.rfind("/")
        if idx <= 0:
            return "/" if norm.startswith("/") else None
        return norm[:idx]

    def _ensure_dirs(self, norm: str) -> None:
        parent = self._parent(norm)
        if parent and parent != "/" and parent not in self._entries:
            self._ensure_dirs(parent)
            now = datetime.now()
            self._entries[parent] = _Entry(is_dir=True, content="", mtime=now, ctime=now)

    def _put_file(self, norm: str, content: str) -> None:
        self._ensure_dirs(norm)
        now = datetime.now()
        existing = self._entries.get(norm)
        self._entries[norm] = _Entry(
            is_dir=False,
            content=content,
            mtime=now,
            ctime=existing.ctime if existing else now,
        )

    @staticmethod
    def _enoent(op: str, path: str) -> FileNotFoundError:
        return FileNotFoundError(errno.ENOENT, f"no such file or directory, {op}", path)

    # ---- FileSystem ----

    async def read_file(self, path: str) -> str:
        self._check("read_file")
        entry = self._entries.get(self._norm(path))
        if entry is None or entry.is_dir:
            raise self._enoent("open", path)
        return entry.content

    async def write_file(self, path: str, content: str) -> None:
        self._check("write_file")
        norm = self._norm(path)
        entry = self._entries.get(norm)
        if entry is not None and entry.is_dir:
            raise IsADirectoryError(errno.EISDIR, "illegal operation on a directory, open", path)
        self._put_file(norm, content)

    async def exists(self, path: str) -> bool:
        self._check("exists")
        return self._norm(path) in self._entries

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        self._check("mkdir")
        norm = self._norm(path)
        if norm in self._entries:
            if recursive:
                return
            raise FileExistsError(errno.EEXIST, "file already exists, mkdir", path)

        parent = self._parent(norm)
        if parent and parent != "/" and parent not in self._entries:
            if not recursive:
                raise self._enoent("mkdir", path)
            self._ensure_dirs(norm)

        now = datetime.now()
        self._entries[norm] = _Entry(is_dir=True, content="", mtime=now, ctime=now)

    async def readdir(self, path: str) -> list[str]:
        self._check("readdir")
        norm = self._norm(path)
        entry = self._entries.get(norm)
        if entry is None or not entry.is_dir:
            raise self._enoent("scandir", path)
        prefix = "/" if norm == "/" else f"{norm}/"
        out: list[str] = []
        for key in self._entries:
            if key != norm and key.startswith(prefix):
                rel = key[len(prefix):]
                if "/" not in rel:
                    out.append(rel)
        return out

    async def stat(self, path: str) -> FileStat:
        self._check("stat")
        entry = self._entries.get(self._norm(path))
        if entry is None:
            raise self._enoent("stat", path)
        return FileStat(
            is_file=not entry.is_dir,
            is_directory=entry.is_dir,
            size=0 if entry.is_dir else len(entry.content.encode("utf-8")),
            mtime=entry.mtime,
            ctime=entry.ctime,
        )

    async def unlink(self, path: str) -> None:
        self._check("unlink")
        norm = self._norm(path)
        entry = self._entries.get(norm)
        if entry is None:
            raise self._enoent("unlink", path)
        if entry.is_dir:
            raise IsADirectoryError(errno.EISDIR, "illegal operation on a directory, unlink", path)
        del self._entries[norm]

    async def rename(self, old_path: str, new_path: str) -> None:
        self._check("rename")
        old = self._norm(old_path)
        new = self._norm(new_path)
        entry = self._entries.get(old)
        if entry is None:
            raise self._enoent("rename", old_path)

        if not entry.is_dir:
            del self._entries[old]
            self._ensure_dirs(new)
            self._entries[new] = entry
            return

        old_prefix = f"{old}/"
        moved = {
            (new if key == old else f"{new}/{key[len(old_prefix):]}"): value
            for key, value in self._entries.items()
            if key == old or key.startswith(old_prefix)
        }
        for key in [k for k in self._entries if k == old or k.startswith(old_prefix)]:
            del self._entries[key]
        self._entries.update(moved)
