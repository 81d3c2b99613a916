"""
Tracker session: one live view of one ledger endpoint.

A session owns everything needed to keep a display in sync with a node:

- the block and transaction caches,
- the resilient fetcher,
- the request projector,
- the poll loop,
- the live `ViewState`.

Nothing is shared between sessions.

Serialization
-------------
The poll loop and display requests both update the live snapshot. A per-session
lock makes sure only one of them does so at a time. Block fetches within one
window still run concurrently.

Publishing
----------
Every new snapshot is handed to a `ViewStatePublisher`. Publishing must not
block: the host is expected to queue the snapshot and return. Snapshots reach
the publisher in the order they are produced. Once the session is closed,
results of in-flight work are discarded instead of published.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from chain_tracker import metrics
from chain_tracker.errors import FetchExhaustedError
from chain_tracker.ledger import JsonRpcLedgerClient, LedgerClient

from .cache import BlockCache, TransactionCache
from .config import TrackerConfig
from .fetcher import ResilientFetcher
from .pagination import TRACK_HEAD
from .poll_loop import PollLoop
from .projector import ViewStateProjector
from .view_state import TrackerRequest, ViewState

logger = logging.getLogger(__name__)


class ViewStatePublisher(Protocol):
    """Receives every new view-state snapshot. Must not block."""

    def publish(self, state: ViewState) -> None:
        """Hand a snapshot to the display."""
        ...


@dataclass(slots=True)
class TrackerSession:
    """
    Keeps one view state in sync with one ledger endpoint.

    Use `TrackerSession.open()` to create a session and start polling.
    """

    rpc_url: str
    """Endpoint this session tracks."""

    client: LedgerClient
    """Ledger RPC client."""

    publisher: ViewStatePublisher
    """Display host receiving snapshots."""

    config: TrackerConfig = field(default_factory=TrackerConfig)
    """Tracker parameters."""

    fetcher: ResilientFetcher = field(init=False)
    """Cache-aware reader shared by polling and requests."""

    projector: ViewStateProjector = field(init=False)
    """Request handler."""

    poll_loop: PollLoop = field(init=False)
    """Chain height poller."""

    _view_state: ViewState = field(init=False)
    """The live snapshot."""

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    """Serializes state updates from polling and requests."""

    _owned_client: JsonRpcLedgerClient | None = field(default=None)
    """Client created by `open()`, closed with the session."""

    def __post_init__(self) -> None:
        """Wire the session components."""
        self.fetcher = ResilientFetcher(
            client=self.client,
            block_cache=BlockCache(capacity=self.config.block_cache_size),
            transaction_cache=TransactionCache(capacity=self.config.transaction_cache_size),
            max_retries=self.config.max_retries,
            slow_call_threshold=self.config.slow_call_threshold,
        )
        self.projector = ViewStateProjector(fetcher=self.fetcher)
        self.poll_loop = PollLoop(
            check=self.check_for_new_blocks,
            interval=self.config.refresh_interval,
        )
        self._view_state = ViewState.initial(self.rpc_url, self.config)

    @classmethod
    async def open(
        cls,
        rpc_url: str,
        publisher: ViewStatePublisher,
        *,
        config: TrackerConfig | None = None,
        client: LedgerClient | None = None,
    ) -> TrackerSession:
        """
        Create a session, publish its initial snapshot and start polling.

        Args:
            rpc_url: Ledger endpoint to track.
            publisher: Display host receiving snapshots.
            config: Tracker parameters. Defaults apply when omitted.
            client: Ledger client. A JSON-RPC client for `rpc_url` is created
                (and closed with the session) when omitted.
        """
        owned_client: JsonRpcLedgerClient | None = None
        if client is None:
            owned_client = JsonRpcLedgerClient(rpc_url)
            client = owned_client

        session = cls(
            rpc_url=rpc_url,
            client=client,
            publisher=publisher,
            config=config or TrackerConfig(),
            _owned_client=owned_client,
        )
        logger.info(f"Tracking {rpc_url}")
        session.publisher.publish(session.view_state)
        session.poll_loop.start()
        return session

    @property
    def view_state(self) -> ViewState:
        """The live snapshot."""
        return self._view_state

    @property
    def closed(self) -> bool:
        """Whether the session has ended."""
        return not self.poll_loop.state.is_active

    async def on_request(self, request: TrackerRequest) -> ViewState:
        """
        Resolve a display request and publish the resulting snapshot.

        Returns:
            The live snapshot after the request.

        Raises:
            FetchExhaustedError: If any part of the request could not be
                resolved. Nothing is published in that case.
        """
        async with self._lock:
            next_state = await self.projector.apply(self._view_state, request)
            if next_state is not self._view_state:
                self._commit(next_state)
            return self._view_state

    async def check_for_new_blocks(self) -> None:
        """
        One poll cycle: refresh the snapshot if the chain grew.

        An exhausted height check skips the cycle.
        """
        async with self._lock:
            try:
                block_height = await self.fetcher.get_block_count()
            except FetchExhaustedError as e:
                logger.warning(f"Skipping refresh: {e}")
                return

            if block_height > self._view_state.block_height:
                logger.info("New block available: %d", block_height)
                await self.on_new_block_available(block_height)

    async def on_new_block_available(self, block_height: int) -> None:
        """
        Apply a chain height increase.

        When the user is looking at history, only the height moves so the
        window stays put. When the window tracks the head, it is rebuilt to
        include the new head.
        """
        state = self._view_state

        if not state.is_tracking_head:
            self._commit(state.replace(block_height=block_height))
            return

        blocks = await self.projector.window(TRACK_HEAD, block_height, state.blocks_per_page)
        self._commit(state.replace(block_height=block_height, blocks=blocks))

    def on_close(self) -> None:
        """End the session. The poll loop stops scheduling cycles."""
        self.poll_loop.close()

    async def aclose(self) -> None:
        """End the session and release its resources."""
        self.on_close()
        await self.poll_loop.wait_closed()
        if self._owned_client is not None:
            await self._owned_client.aclose()

    def _commit(self, state: ViewState) -> None:
        """Make `state` live and publish it."""
        if self.closed:
            logger.debug("Session closed, discarding view state")
            return
        self._view_state = state
        metrics.block_height.set(state.block_height)
        metrics.view_states_published.inc()
        self.publisher.publish(state)
