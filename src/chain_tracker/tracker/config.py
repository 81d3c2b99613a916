"""
Tracker configuration constants.

Operational parameters for the poll loop, pagination, caches and retries.
Every constant is a default; `TrackerConfig` lets callers override them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

REFRESH_INTERVAL: Final[float] = 3.0
"""Seconds between two chain height checks."""

BLOCKS_PER_PAGE: Final[int] = 50
"""Maximum number of blocks in one displayed window."""

PAGINATION_DISTANCE: Final[int] = 15
"""Blocks of lookahead kept above a selected block."""

BLOCK_CACHE_SIZE: Final[int] = 1024
"""Maximum blocks held in the block cache."""

TRANSACTION_CACHE_SIZE: Final[int] = 1024
"""Maximum transactions held in the transaction cache."""

MAX_RETRIES: Final[int] = 5
"""Attempts made for every remote read before giving up."""

SLOW_CALL_THRESHOLD: Final[float] = 1.0
"""Successful remote reads slower than this (seconds) are logged."""


@dataclass(frozen=True, slots=True)
class TrackerConfig:
    """Overridable tracker parameters."""

    refresh_interval: float = REFRESH_INTERVAL
    """Poll period in seconds."""

    blocks_per_page: int = BLOCKS_PER_PAGE
    """Page size of the displayed window."""

    pagination_distance: int = PAGINATION_DISTANCE
    """Lookahead kept above a selected block."""

    block_cache_size: int = BLOCK_CACHE_SIZE
    """Block cache capacity."""

    transaction_cache_size: int = TRANSACTION_CACHE_SIZE
    """Transaction cache capacity."""

    max_retries: int = MAX_RETRIES
    """Retry ceiling for remote reads."""

    slow_call_threshold: float = SLOW_CALL_THRESHOLD
    """Slow-call logging threshold in seconds."""

    def __post_init__(self) -> None:
        if self.refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive")
        if self.blocks_per_page < 1:
            raise ValueError("blocks_per_page must be at least 1")
        if self.pagination_distance < 0:
            raise ValueError("pagination_distance must not be negative")
        if self.block_cache_size < 1 or self.transaction_cache_size < 1:
            raise ValueError("cache sizes must be at least 1")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
