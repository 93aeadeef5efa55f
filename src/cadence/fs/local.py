# src/cadence/fs/local.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import secrets
from datetime import datetime
from pathlib import Path

from ..core.ports import FileStat

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """
    FileSystem backed by the local disk.

    Blocking pathlib calls run in a worker thread so callers stay on the event loop.
    Writes are atomic: content goes to a sibling .tmp file which then replaces the target.
    """

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(self._read, Path(path))

    @staticmethod
    def _read(path: Path) -> str:
        # newline="" disables newline translation so CRLF notes stay CRLF.
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()

    async def write_file(self, path: str, content: str) -> None:
        await asyncio.to_thread(self._write_atomic, Path(path), content)

    @staticmethod
    def _write_atomic(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.{secrets.token_hex(8)}.tmp")
        try:
            with open(tmp, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
            os.replace(tmp, path)
        except Exception:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        logger.debug("Wrote %s (%d chars)", path, len(content))

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=recursive, exist_ok=recursive)

    async def readdir(self, path: str) -> list[str]:
        return await asyncio.to_thread(os.listdir, path)

    async def stat(self, path: str) -> FileStat:
        st = await asyncio.to_thread(os.stat, path)
        p = Path(path)
        return FileStat(
            is_file=p.is_file(),
            is_directory=p.is_dir(),
            size=0 if p.is_dir() else int(st.st_size),
            mtime=datetime.fromtimestamp(st.st_mtime),
            ctime=datetime.fromtimestamp(st.st_ctime),
        )

    async def unlink(self, path: str) -> None:
        await asyncio.to_thread(os.unlink, path)

    async def rename(self, old_path: str, new_path: str) -> None:
        await asyncio.to_thread(os.replace, old_path, new_path)
