"""Shared test fixtures for the mnemo test suite.

Design:
- memory_root: empty memory folder in a temp directory
- create_memory: helper that writes a memory file with frontmatter
- FakeNotifier: change notifier driven by the test instead of the file system
- Async tests use pytest-asyncio (@pytest.mark.asyncio)
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mnemo.diagnostics import ErrorReporter
from mnemo.index import DocumentCache, TagTrie
from mnemo.manager import MemoryManager
from mnemo.sources import LocalFileSource
from mnemo.sync import SynchronizationService


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def memory_text(title: str, tags: list[str], body: str = "Content", **extra: str) -> str:
    """Render a memory file with YAML frontmatter."""
    lines = ["---", f'title: "{title}"', "tags:"]
    lines.extend(f'  - "{tag}"' for tag in tags)
    lines.extend(f"{key}: {value}" for key, value in extra.items())
    lines.append("---")
    lines.append("")
    lines.append(body)
    return "\n".join(lines) + "\n"


def create_memory(
    root: Path,
    rel_path: str,
    title: str,
    tags: list[str],
    body: str = "Content",
    **extra: str,
) -> Path:
    """Write a memory file under root and return its path.

    Usage in tests:
        from conftest import create_memory
        path = create_memory(memory_root, "db.md", "DB", ["backend.database"])
    """
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(memory_text(title, tags, body, **extra), encoding="utf-8")
    return path


class FakeNotifier:
    """ChangeNotifier whose events are fired by the test."""

    def __init__(self) -> None:
        self.created: list = []
        self.changed: list = []
        self.deleted: list = []
        self.started_with: tuple[Path, str] | None = None
        self.stopped = False
        self.disposed = False

    def on_created(self, handler) -> None:
        self.created.append(handler)

    def on_changed(self, handler) -> None:
        self.changed.append(handler)

    def on_deleted(self, handler) -> None:
        self.deleted.append(handler)

    def start(self, root: Path, pattern: str) -> None:
        self.started_with = (root, pattern)

    def stop(self) -> None:
        self.stopped = True

    def dispose(self) -> None:
        self.stopped = True
        self.disposed = True
        self.created.clear()
        self.changed.clear()
        self.deleted.clear()

    def fire_created(self, path: Path) -> None:
        for handler in self.created:
            handler(str(path))

    def fire_changed(self, path: Path) -> None:
        for handler in self.changed:
            handler(str(path))

    def fire_deleted(self, path: Path) -> None:
        for handler in self.deleted:
            handler(str(path))


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def memory_root(tmp_path: Path) -> Path:
    """Empty memory folder."""
    root = tmp_path / "Memory"
    root.mkdir()
    return root


@pytest.fixture
def reporter() -> ErrorReporter:
    return ErrorReporter()


@pytest.fixture
def cache() -> DocumentCache:
    return DocumentCache()


@pytest.fixture
def trie() -> TagTrie:
    return TagTrie()


@pytest.fixture
def sync_service(cache, trie, reporter) -> SynchronizationService:
    """SynchronizationService over the local file system."""
    return SynchronizationService(cache, trie, LocalFileSource(), reporter)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def manager(notifier, reporter) -> MemoryManager:
    """MemoryManager driven by FakeNotifier."""
    return MemoryManager(notifier=notifier, reporter=reporter)


class MemorySource:
    """FileSource over an in-memory dict of path to text."""

    def __init__(self, files: dict[str, str]) -> None:
        self.files = files

    async def read_bytes(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path].encode("utf-8")

    async def exists(self, path: str) -> bool:
        return path in self.files

    def list_files(self, root: str, pattern: str) -> list[str]:
        return sorted(path for path in self.files if path.startswith(root.rstrip("/") + "/"))
