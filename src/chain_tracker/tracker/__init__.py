"""
View-state synchronization for a ledger explorer.

What Is Tracked?
----------------
A display shows a page of recent blocks from a remote ledger, plus whatever
block, transaction or account the user selected. The tracker keeps that
display-ready state in sync with the node.

How It Works
------------
- A poll loop checks the chain height every few seconds
- When the chain grows, the window is rebuilt if it tracks the head
- Display requests select entities or move the window
- Every remote read is retried and cached where safe
- Each change produces a new immutable `ViewState` that is published
"""

from __future__ import annotations

__all__ = [
    # Session
    "TrackerSession",
    "ViewStatePublisher",
    # View state
    "ViewState",
    "TrackerRequest",
    # Components
    "BlockCache",
    "TransactionCache",
    "ResilientFetcher",
    "ViewStateProjector",
    "PollLoop",
    "PollState",
    # Pagination
    "TRACK_HEAD",
    "compute_window",
    "reanchor_for_selection",
    # Configuration
    "TrackerConfig",
    "REFRESH_INTERVAL",
    "BLOCKS_PER_PAGE",
    "PAGINATION_DISTANCE",
    "BLOCK_CACHE_SIZE",
    "TRANSACTION_CACHE_SIZE",
    "MAX_RETRIES",
]

from .cache import BlockCache, TransactionCache
from .config import (
    BLOCK_CACHE_SIZE,
    BLOCKS_PER_PAGE,
    MAX_RETRIES,
    PAGINATION_DISTANCE,
    REFRESH_INTERVAL,
    TRANSACTION_CACHE_SIZE,
    TrackerConfig,
)
from .fetcher import ResilientFetcher
from .pagination import TRACK_HEAD, compute_window, reanchor_for_selection
from .poll_loop import PollLoop
from .projector import ViewStateProjector
from .session import TrackerSession, ViewStatePublisher
from .states import PollState
from .view_state import TrackerRequest, ViewState
