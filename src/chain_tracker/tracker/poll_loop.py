"""
Periodic chain height polling.

How It Works
------------
1. Run one cycle immediately after start
2. Run the session's check (fetch the chain height, refresh on growth)
3. Sleep for the poll period, or until the loop is closed
4. Repeat until CLOSED

A failing cycle is logged and the next one is scheduled anyway. Fetch errors
therefore never stop the loop.

Closing
-------
`close()` is the only way to stop the loop. The state flag is checked before
each cycle and the sleep between cycles is cut short. A cycle already in
flight is not aborted: it completes, and nothing is scheduled after it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from chain_tracker import metrics

from .config import REFRESH_INTERVAL
from .states import PollState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PollLoop:
    """Cancellable periodic task driving chain height checks."""

    check: Callable[[], Awaitable[None]]
    """One poll cycle. Usually `TrackerSession.check_for_new_blocks`."""

    interval: float = REFRESH_INTERVAL
    """Seconds between the end of one cycle and the start of the next."""

    _state: PollState = field(default=PollState.ACTIVE)
    """Current loop state."""

    _closed: asyncio.Event = field(default_factory=asyncio.Event)
    """Set on close. Interrupts the sleep between cycles."""

    _task: asyncio.Task[None] | None = field(default=None)
    """Background task running the loop, once started."""

    @property
    def state(self) -> PollState:
        """Current loop state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the background task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        Start the loop in the background.

        Must be called from a running event loop. Calling it twice is a no-op.
        """
        if self._task is not None or not self._state.is_active:
            return
        self._task = asyncio.create_task(self._run(), name="tracker-poll-loop")

    def close(self) -> None:
        """Move to CLOSED. No cycle starts after this returns."""
        if self._state.can_transition_to(PollState.CLOSED):
            self._state = PollState.CLOSED
            self._closed.set()
            logger.debug("Poll loop closed")

    async def wait_closed(self) -> None:
        """Wait for the background task to finish after `close()`."""
        if self._task is not None:
            await self._task

    async def run_once(self) -> bool:
        """
        Run a single cycle unless the loop is closed.

        Returns:
            True if a cycle ran, False if the loop was already closed.
        """
        if not self._state.is_active:
            return False

        metrics.poll_cycles.inc()
        try:
            await self.check()
        except Exception as e:
            logger.error(f"Poll cycle failed: {e}")
        return True

    async def _run(self) -> None:
        while await self.run_once():
            # Sleep for one period, waking early on close.
            try:
                await asyncio.wait_for(self._closed.wait(), timeout=self.interval)
            except TimeoutError:
                pass
