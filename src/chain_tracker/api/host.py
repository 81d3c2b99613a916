"""
Display host: fans published view states out to connected displays.

The session publishes synchronously and must never wait on a display. The
host keeps the latest snapshot for late joiners and pushes every snapshot
into one unbounded queue per subscriber, so publishing is a few
`put_nowait` calls. Each subscriber sees every snapshot, in order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from chain_tracker.tracker import ViewState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DisplayHost:
    """`ViewStatePublisher` backed by per-subscriber queues."""

    _latest: ViewState | None = field(default=None)
    """Most recent snapshot, if any was published."""

    _subscribers: set[asyncio.Queue[ViewState]] = field(default_factory=set)
    """Queues of connected displays."""

    @property
    def latest(self) -> ViewState | None:
        """Most recent snapshot, or None before the first publish."""
        return self._latest

    @property
    def subscriber_count(self) -> int:
        """Number of connected displays."""
        return len(self._subscribers)

    def publish(self, state: ViewState) -> None:
        """Record a snapshot and queue it for every subscriber."""
        self._latest = state
        for queue in self._subscribers:
            queue.put_nowait(state)

    def subscribe(self) -> asyncio.Queue[ViewState]:
        """
        Register a display.

        The latest snapshot, if any, is queued immediately so the display can
        render without waiting for the next change.
        """
        queue: asyncio.Queue[ViewState] = asyncio.Queue()
        if self._latest is not None:
            queue.put_nowait(self._latest)
        self._subscribers.add(queue)
        logger.debug("Display subscribed (%d connected)", len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ViewState]) -> None:
        """Forget a display."""
        self._subscribers.discard(queue)
