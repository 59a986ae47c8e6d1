"""Sequential processing of file-system events.

File notifications arrive independently and can overlap. Each one becomes a
deferred action on this queue, and a single worker task runs the actions one
at a time in arrival order, so two reconciliations never interleave around
their file reads.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable

log = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class SequentialEventQueue:
    """FIFO of async actions drained by at most one worker task."""

    def __init__(self) -> None:
        self._pending: deque[Action] = deque()
        self._worker: asyncio.Task[None] | None = None
        self._processing = False
        self._idle = asyncio.Event()
        self._idle.set()

    def enqueue(self, action: Action) -> None:
        """Append an action and make sure a worker is draining the queue.

        Must be called from within the running event loop.
        """
        self._pending.append(action)
        if self._processing:
            return

        self._processing = True
        self._idle.clear()
        self._worker = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._pending:
                action = self._pending.popleft()
                try:
                    await action()
                except Exception:
                    log.exception("Error processing queued action")
        finally:
            self._processing = False
            self._worker = None
            self._idle.set()

    async def join(self) -> None:
        """Wait until every queued action has run."""
        await self._idle.wait()

    def size(self) -> int:
        """Number of actions waiting to start."""
        return len(self._pending)

    def is_processing(self) -> bool:
        return self._processing

    def clear(self) -> None:
        """Drop pending actions. The action currently running is unaffected."""
        dropped = len(self._pending)
        self._pending.clear()
        if dropped:
            log.debug("Dropped %d pending actions", dropped)

    def __len__(self) -> int:
        return len(self._pending)
