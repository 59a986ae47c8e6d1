"""Keeps the document cache and tag trie in step with the memory folder.

Each path is either absent from the index or present with a valid record;
there is no "known broken" state. Every create/change runs the same
transition: read, parse, validate, then install on success or evict on
failure. A file that was invalid is therefore picked up again the moment a
later change makes it valid, with nothing to reset.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .diagnostics import DiagnosticSink
from .index import DocumentCache, TagTrie
from .models import DocumentRecord, SyncSummary
from .parser import DocumentError, load_document
from .sources import FileSource

log = logging.getLogger(__name__)


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Stable cache key for a file path."""
    return str(Path(path))


class SynchronizationService:
    """Reconciles the index against file-system events.

    Args:
        cache: Document cache to maintain.
        trie: Tag trie to maintain.
        source: Where file bytes come from.
        reporter: Where failures are reported.
    """

    def __init__(
        self,
        cache: DocumentCache,
        trie: TagTrie,
        source: FileSource,
        reporter: DiagnosticSink,
    ) -> None:
        self._cache = cache
        self._trie = trie
        self._source = source
        self._reporter = reporter

    async def on_create_or_change(self, path: str | os.PathLike[str]) -> bool:
        """Re-read and re-index one file.

        Returns:
            True if the file is indexed afterwards, False if it was left out.
        """
        key = normalize_path(path)
        try:
            raw = await self._source.read_bytes(key)
        except OSError as e:
            self._fail(key, "Failed to read memory file", str(e))
            return False

        return self._reconcile(key, raw)

    def on_delete(self, path: str | os.PathLike[str]) -> bool:
        """Drop a file from the index.

        Returns:
            True if the file was indexed before, False if it was already absent.
        """
        key = normalize_path(path)
        self._reporter.clear_file_problem(key)
        removed = self._evict(key)
        if removed:
            log.debug("Removed from index: %s", key)
        return removed

    async def refresh(self, path: str | os.PathLike[str]) -> bool:
        """Re-index a file, treating a missing file as a delete."""
        key = normalize_path(path)
        try:
            raw = await self._source.read_bytes(key)
        except FileNotFoundError:
            self.on_delete(key)
            return False
        except OSError as e:
            self._fail(key, "Failed to refresh memory file", str(e))
            return False

        return self._reconcile(key, raw)

    async def synchronize_batch(self, paths: Iterable[str | os.PathLike[str]]) -> SyncSummary:
        """Index many files; each one succeeds or fails on its own."""
        paths = list(paths)
        summary = SyncSummary(total=len(paths))
        for path in paths:
            key = normalize_path(path)
            try:
                indexed = await self.on_create_or_change(key)
            except Exception as e:
                # on_create_or_change reports its own failures; this only
                # catches bugs so the rest of the batch still runs
                log.exception("Unexpected error synchronizing %s", key)
                self._fail(key, "Failed to process memory file", str(e))
                indexed = False

            if indexed:
                summary.indexed.append(key)
            else:
                summary.failed.append(key)

        log.info("Synchronized %d files (%d failed)", summary.total, len(summary.failed))
        return summary

    def clear(self) -> None:
        """Empty both the document cache and the tag trie."""
        self._cache.clear()
        self._trie.clear()

    # ─────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────

    def _reconcile(self, key: str, raw: bytes) -> bool:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self._fail(key, "Failed to read memory file", f"Not valid UTF-8: {e}")
            return False

        try:
            record = load_document(text, key)
        except DocumentError as e:
            self._fail(key, "Failed to process memory file", e.message)
            return False

        self._install(record)
        return True

    def _install(self, record: DocumentRecord) -> None:
        previous = self._cache.get(record.path)
        if previous is not None:
            # Old tags may differ from the new ones
            self._trie.remove(record.path, previous.tags)

        self._cache.add(record)
        self._trie.add(record.path, record.tags)
        self._reporter.clear_file_problem(record.path)
        log.debug("Indexed %s with tags %s", record.path, record.tags)

    def _evict(self, key: str) -> bool:
        previous = self._cache.get(key)
        if previous is None:
            return False
        self._trie.remove(key, previous.tags)
        self._cache.remove(key)
        return True

    def _fail(self, key: str, message: str, details: str) -> None:
        self._reporter.report_error(message, key, details)
        self._reporter.set_file_problem(key, details)
        if self._evict(key):
            log.debug("Evicted previously valid document: %s", key)
