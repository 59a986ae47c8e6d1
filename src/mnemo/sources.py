"""File byte sources.

The index never touches the file system directly; it reads through a
``FileSource`` so tests (and other hosts) can supply their own.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol


class FileSource(Protocol):
    """Reads file bytes and lists candidate files."""

    async def read_bytes(self, path: str) -> bytes:
        """Return the file's bytes. Raises OSError if missing or unreadable."""
        ...

    async def exists(self, path: str) -> bool:
        """Return True if ``path`` is an existing file."""
        ...

    def list_files(self, root: str, pattern: str) -> list[str]:
        """Return paths under ``root`` matching the glob ``pattern``."""
        ...


class LocalFileSource:
    """FileSource backed by the local file system.

    Reads run in a worker thread so the event loop is never blocked.
    """

    async def read_bytes(self, path: str) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    def list_files(self, root: str, pattern: str) -> list[str]:
        root_path = Path(root)
        if not root_path.is_dir():
            return []
        return sorted(str(p) for p in root_path.glob(pattern) if p.is_file())
