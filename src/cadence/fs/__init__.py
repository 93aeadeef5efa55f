"""
Filesystem adapters.

- local.py: LocalFileSystem (disk, atomic writes)
- memory.py: MemoryFileSystem (dict-backed, error simulation for tests)
- paths.py: separator-preserving path helpers
"""

from .local import LocalFileSystem
from .memory import MemoryFileSystem
from .paths import join_path, parent_dir

__all__ = ["LocalFileSystem", "MemoryFileSystem", "join_path", "parent_dir"]
