"""File watcher that turns file-system events into created/changed/deleted calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path, PurePath
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

log = logging.getLogger(__name__)

PathHandler = Callable[[str], None]


class ChangeNotifier(Protocol):
    """Source of created/changed/deleted notifications for one folder."""

    def on_created(self, handler: PathHandler) -> None: ...

    def on_changed(self, handler: PathHandler) -> None: ...

    def on_deleted(self, handler: PathHandler) -> None: ...

    def start(self, root: Path, pattern: str) -> None: ...

    def stop(self) -> None: ...

    def dispose(self) -> None: ...


def matches_pattern(path: Path, root: Path, pattern: str) -> bool:
    """Check a path against a glob relative to ``root``.

    Agrees with Path.glob: a pattern without ``**`` only matches at its own
    depth, and ``**/`` also matches files directly in the root.
    """
    try:
        relative = PurePath(path.relative_to(root))
    except ValueError:
        return False

    if "**" not in pattern:
        # PurePath.match anchors on the right only
        return len(relative.parts) == len(PurePath(pattern).parts) and relative.match(pattern)

    if relative.match(pattern):
        return True
    if pattern.startswith("**/"):
        return relative.match(pattern[3:]) and len(relative.parts) == 1
    return False


class _ForwardingHandler(FileSystemEventHandler):
    """Hands watchdog events (observer thread) to a callback on the event loop."""

    def __init__(
        self,
        dispatch: Callable[[str, str], None],
        loop: asyncio.AbstractEventLoop,
        root: Path,
        pattern: str,
    ) -> None:
        super().__init__()
        self._dispatch = dispatch
        self._loop = loop
        self._root = root
        self._pattern = pattern

    def _forward(self, kind: str, raw_path: str | bytes) -> None:
        path = Path(raw_path.decode() if isinstance(raw_path, bytes) else raw_path)
        if not matches_pattern(path, self._root, self._pattern):
            return
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._dispatch, kind, str(path))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward("created", event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward("changed", event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward("deleted", event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """A rename is a delete of the old path and a create of the new one."""
        if event.is_directory:
            return
        self._forward("deleted", event.src_path)
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            self._forward("created", dest_path)


class FileWatcher:
    """Watch a memory folder and notify registered handlers.

    Handlers are called on the asyncio loop that was running when
    ``start()`` was called, never on watchdog's observer thread.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[PathHandler]] = {
            "created": [],
            "changed": [],
            "deleted": [],
        }
        self._observer: Observer | None = None
        self._root: Path | None = None

    def on_created(self, handler: PathHandler) -> None:
        self._handlers["created"].append(handler)

    def on_changed(self, handler: PathHandler) -> None:
        self._handlers["changed"].append(handler)

    def on_deleted(self, handler: PathHandler) -> None:
        self._handlers["deleted"].append(handler)

    def _notify(self, kind: str, path: str) -> None:
        for handler in self._handlers[kind]:
            try:
                handler(path)
            except Exception:
                log.exception("Error in file %s handler for %s", kind, path)

    def start(self, root: Path, pattern: str) -> None:
        """Start watching ``root`` for files matching ``pattern``.

        Must be called from within a running event loop. Restarts the
        watcher if it is already running.
        """
        self.stop()

        root = Path(root).resolve()
        if not root.is_dir():
            log.warning("Memory folder does not exist: %s", root)
            return

        handler = _ForwardingHandler(
            dispatch=self._notify,
            loop=asyncio.get_running_loop(),
            root=root,
            pattern=pattern,
        )
        self._observer = Observer()
        self._observer.schedule(handler, str(root), recursive=True)
        self._observer.start()
        self._root = root
        log.info("Started watching: %s (%s)", root, pattern)

    def stop(self) -> None:
        """Stop watching. Registered handlers are kept."""
        if self._observer is None:
            return

        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        log.info("Stopped watching: %s", self._root)
        self._root = None

    def dispose(self) -> None:
        """Stop watching and forget every handler."""
        self.stop()
        for handlers in self._handlers.values():
            handlers.clear()

    @property
    def is_running(self) -> bool:
        return self._observer is not None
