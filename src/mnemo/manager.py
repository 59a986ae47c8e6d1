"""Top-level service wiring the memory index together.

MemoryManager owns the document cache and tag trie, feeds file-system
notifications through the sequential event queue into the synchronization
service, and answers queries. Everything it needs from the outside (file
source, change notifier, error reporter) is passed in.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .assembly import assemble_clean_content, expand_document
from .commands import parse_tag_command
from .completion import TagCompleter
from .config import DEFAULT_MEMORY_PATTERN
from .diagnostics import ErrorReporter
from .event_queue import SequentialEventQueue
from .index import DocumentCache, TagTrie
from .models import (
    DocumentRecord,
    ExpandedDocument,
    MatchSummary,
    SyncSummary,
    TagCommand,
    TagCompletion,
)
from .parser.links import extract_links, is_anchor, is_url
from .resolver import LinkResolver, resolve_target
from .sources import FileSource, LocalFileSource
from .sync import SynchronizationService, normalize_path
from .watcher import ChangeNotifier, FileWatcher

log = logging.getLogger(__name__)


def is_wildcard(pattern: str) -> bool:
    return "*" in pattern


class MemoryManager:
    """Index of memory files kept in sync with a folder.

    Args:
        source: File byte source. Defaults to the local file system.
        notifier: Change notifier. Defaults to a watchdog FileWatcher.
        reporter: Error reporter shared by synchronization and link resolution.
    """

    def __init__(
        self,
        source: FileSource | None = None,
        notifier: ChangeNotifier | None = None,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self.source = source or LocalFileSource()
        self.notifier = notifier or FileWatcher()
        self.reporter = reporter or ErrorReporter()

        self.cache = DocumentCache()
        self.trie = TagTrie()
        self.queue = SequentialEventQueue()
        self.sync = SynchronizationService(self.cache, self.trie, self.source, self.reporter)
        self.resolver = LinkResolver(self.source, self.reporter)
        self.completer = TagCompleter(self.trie)

        self._root: Path | None = None
        self._pattern = DEFAULT_MEMORY_PATTERN
        self._subscribed = False

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    async def start(self, root: str | os.PathLike[str], pattern: str = DEFAULT_MEMORY_PATTERN) -> SyncSummary:
        """Index every file under ``root`` and start following changes.

        The initial batch runs to completion before live events are handled.
        """
        self._root = Path(root).resolve()
        self._pattern = pattern

        summary = await self.synchronize_batch(self._list_files())

        if not self._subscribed:
            # Created files may be brand new; changed files may have become
            # valid or invalid, or vanished; refresh covers both.
            self.notifier.on_created(self._enqueue_change)
            self.notifier.on_changed(self._enqueue_refresh)
            self.notifier.on_deleted(self._enqueue_delete)
            self._subscribed = True

        self.notifier.start(self._root, pattern)
        return summary

    def stop(self) -> None:
        """Stop following changes. The index keeps its current contents."""
        self.notifier.stop()

    def dispose(self) -> None:
        """Stop, drop pending work and empty the index."""
        self.notifier.dispose()
        self._subscribed = False
        self.queue.clear()
        self.sync.clear()

    async def wait_idle(self) -> None:
        """Wait until every queued file event has been applied."""
        await self.queue.join()

    def _list_files(self) -> list[str]:
        if self._root is None:
            return []
        return self.source.list_files(str(self._root), self._pattern)

    # Event handlers (called on the loop by the notifier)

    def _enqueue_change(self, path: str) -> None:
        self.queue.enqueue(lambda: self.sync.on_create_or_change(path))

    def _enqueue_refresh(self, path: str) -> None:
        self.queue.enqueue(lambda: self.sync.refresh(path))

    def _enqueue_delete(self, path: str) -> None:
        async def delete() -> None:
            self.sync.on_delete(path)

        self.queue.enqueue(delete)

    # ─────────────────────────────────────────────────────────────────────
    # Explicit synchronization
    # ─────────────────────────────────────────────────────────────────────

    async def refresh_one(self, path: str | os.PathLike[str]) -> bool:
        """Re-read one file now; a missing file is removed from the index."""
        return await self.sync.refresh(path)

    async def synchronize_batch(self, paths: Iterable[str | os.PathLike[str]]) -> SyncSummary:
        return await self.sync.synchronize_batch(paths)

    async def rebuild(self) -> SyncSummary:
        """Empty the index and re-read every file under the root."""
        self.sync.clear()
        self.reporter.clear_all_problems()
        summary = await self.synchronize_batch(self._list_files())
        log.info("Rebuilt memory index: %d of %d files indexed", len(summary.indexed), summary.total)
        return summary

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    def query_exact(self, tag: str) -> list[str]:
        return sorted(self.trie.query_exact(tag))

    def query_wildcard(self, pattern: str) -> list[str]:
        return sorted(self.trie.query_wildcard(pattern))

    def query(self, pattern: str) -> list[str]:
        """Wildcard query if ``pattern`` contains ``*``, exact otherwise."""
        if is_wildcard(pattern):
            return self.query_wildcard(pattern)
        return self.query_exact(pattern)

    def query_many(self, patterns: Iterable[str]) -> list[str]:
        """Union of ``query`` over several patterns."""
        matched: set[str] = set()
        for pattern in patterns:
            matched.update(self.query(pattern))
        return sorted(matched)

    def get_document(self, path: str | os.PathLike[str]) -> DocumentRecord | None:
        return self.cache.get(normalize_path(path))

    def get_all_documents(self) -> list[DocumentRecord]:
        return self.cache.get_all()

    def get_all_tags(self) -> list[str]:
        return sorted(self.trie.get_all_tags())

    def match_summary(self, patterns: list[str]) -> MatchSummary:
        paths = self.query_many(patterns)
        return MatchSummary(count=len(paths), paths=paths, patterns=list(patterns))

    async def match_summary_with_references(self, patterns: list[str]) -> MatchSummary:
        """Like match_summary, plus local files linked directly from the matches.

        Only links in the matched documents themselves are followed.
        """
        matched = self.query_many(patterns)
        paths = list(matched)
        seen = set(paths)

        for path in matched:
            record = self.cache.get(path)
            if record is None:
                continue
            for link in extract_links(record.body):
                if is_url(link.target) or is_anchor(link.target):
                    continue
                target = resolve_target(path, link.target)
                if target in seen or not await self.source.exists(target):
                    continue
                seen.add(target)
                paths.append(target)

        return MatchSummary(count=len(paths), paths=paths, patterns=list(patterns))

    # ─────────────────────────────────────────────────────────────────────
    # Content
    # ─────────────────────────────────────────────────────────────────────

    async def resolve_and_assemble(self, paths: Iterable[str | os.PathLike[str]]) -> list[ExpandedDocument]:
        """Expanded content for each indexed path; unknown paths are skipped."""
        expanded = []
        for path in paths:
            record = self.get_document(path)
            if record is None:
                log.debug("Skipping unindexed document: %s", path)
                continue
            expanded.append(await expand_document(record, self.resolver))
        return expanded

    async def get_assembled_content(self, patterns: list[str]) -> str:
        """Expanded content of every match, joined into one block of text."""
        documents = await self.resolve_and_assemble(self.query_many(patterns))
        return assemble_clean_content(documents)

    # ─────────────────────────────────────────────────────────────────────
    # Tag commands and completion
    # ─────────────────────────────────────────────────────────────────────

    def complete_tags(self, tag_input: str) -> list[TagCompletion]:
        return self.completer.complete(tag_input)

    async def run_tag_command(self, prompt: str) -> tuple[TagCommand, MatchSummary]:
        """Parse a tag command and find the memories it asks for.

        Tags on the first line are remembered for completion. The summary
        includes files linked directly from the matches.
        """
        command = parse_tag_command(prompt)
        if not command.tags:
            return command, MatchSummary(count=0)

        for tag in command.tags:
            self.completer.add_recent_tag(tag)
        return command, await self.match_summary_with_references(command.tags)
