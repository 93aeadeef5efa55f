# src/cadence/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task engine.

The engine depends on Protocols instead of concrete implementations.
This keeps the filesystem, date resolution and vault config swappable
and lets tests run against an in-memory vault.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..vault_config import VaultConfig


@dataclass(frozen=True, slots=True)
class FileStat:
    is_file: bool
    is_directory: bool
    size: int
    mtime: datetime
    ctime: datetime


class FileSystem(Protocol):
    """
    Async filesystem used by every engine component.

    All methods may raise OSError; engines never wrap it.
    """

    async def read_file(self, path: str) -> str: ...
    async def write_file(self, path: str, content: str) -> None: ...
    async def exists(self, path: str) -> bool: ...
    async def mkdir(self, path: str, recursive: bool = False) -> None: ...
    async def readdir(self, path: str) -> list[str]: ...
    async def stat(self, path: str) -> FileStat: ...
    async def unlink(self, path: str) -> None: ...
    async def rename(self, old_path: str, new_path: str) -> None: ...


class DateResolver(Protocol):
    """Turns ISO or natural-language date strings into dates; raises ValueError on failure."""

    def parse(self, value: str, reference: date | None = None) -> date: ...


class VaultConfigSource(Protocol):
    async def load_config(self, vault_path: str) -> VaultConfig: ...
