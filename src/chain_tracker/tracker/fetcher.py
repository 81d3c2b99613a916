"""
Resilient remote reads.

Every read the tracker makes against the node goes through `ResilientFetcher`.

Retry Policy
------------
A read is attempted up to `max_retries` times, back to back, with no delay
between attempts. Any exception raised by the client counts as a transient
failure. When the last attempt fails, `FetchExhaustedError` names the entity
kind and key that could not be retrieved. It is not retried further upstream:
the caller decides whether to degrade or to fail.

Cancellation is never treated as a failure. `asyncio.CancelledError` is not an
`Exception` subclass and propagates untouched.

Caching
-------
Blocks and transactions are looked up in their caches before any remote call.
A fetched transaction is always cached. A fetched block is cached only when it
sits strictly below the head, since the head may still be replaced. Accounts
are never cached. A failed read never touches a cache.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from chain_tracker import metrics
from chain_tracker.errors import FetchExhaustedError
from chain_tracker.ledger import Account, Block, LedgerClient, Transaction

from .cache import BlockCache, TransactionCache
from .config import MAX_RETRIES, SLOW_CALL_THRESHOLD

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class ResilientFetcher:
    """Cache-aware ledger reader with bounded retries."""

    client: LedgerClient
    """Ledger RPC client."""

    block_cache: BlockCache = field(default_factory=BlockCache)
    """Cache consulted and populated by block reads."""

    transaction_cache: TransactionCache = field(default_factory=TransactionCache)
    """Cache consulted and populated by transaction reads."""

    max_retries: int = MAX_RETRIES
    """Attempts per read."""

    slow_call_threshold: float = SLOW_CALL_THRESHOLD
    """Successful reads slower than this many seconds are logged."""

    time_fn: Callable[[], float] = field(default=time.monotonic)
    """Clock used to time reads (injectable for testing)."""

    async def fetch(
        self,
        kind: str,
        key: object,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        """
        Run a remote read with retries.

        Args:
            kind: Entity kind, used in logs, metrics and the final error.
            key: The height, hash or address being read.
            operation: Coroutine function performing one attempt.
            *args: Arguments passed to `operation` on every attempt.

        Returns:
            The result of the first successful attempt.

        Raises:
            FetchExhaustedError: If every attempt failed.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            logger.debug("Retrieving %s %s - attempt %d", kind, key, attempt)
            metrics.rpc_attempts.labels(kind=kind).inc()

            started_at = self.time_fn()
            try:
                result = await operation(*args)
            except Exception as exc:
                metrics.rpc_failures.labels(kind=kind).inc()
                logger.warning("Error retrieving %s %s: %s", kind, key, exc)
                last_error = exc
                continue

            duration = self.time_fn() - started_at
            metrics.rpc_time.observe(duration)
            if duration > self.slow_call_threshold:
                logger.info("Retrieving %s %s took %dms", kind, key, int(duration * 1000))
            return result

        metrics.rpc_exhausted.labels(kind=kind).inc()
        raise FetchExhaustedError(kind, key, self.max_retries) from last_error

    async def get_block_count(self) -> int:
        """Read the current chain height."""
        return await self.fetch("block count", "", self.client.get_block_count)

    async def get_block(self, index_or_hash: int | str, block_height: int) -> Block:
        """
        Read a block by height or hash, consulting the cache first.

        Args:
            index_or_hash: Block height or block hash.
            block_height: Current chain height. Decides whether the fetched
                block is final enough to cache.
        """
        cached = self.block_cache.get(index_or_hash)
        if cached is not None:
            metrics.cache_hits.labels(kind="block").inc()
            return cached
        metrics.cache_misses.labels(kind="block").inc()

        block = await self.fetch("block", index_or_hash, self.client.get_block, index_or_hash)

        # Never cache the head block.
        if block.index < block_height - 1:
            self.block_cache.add(block)
        return block

    async def get_blocks(self, heights: Iterable[int], block_height: int) -> list[Block]:
        """
        Read several blocks concurrently.

        Returns:
            Blocks in the same order as `heights`.

        Raises:
            FetchExhaustedError: If any of the reads is exhausted.
        """
        return list(
            await asyncio.gather(*(self.get_block(height, block_height) for height in heights))
        )

    async def get_transaction(self, tx_hash: str) -> Transaction:
        """Read a transaction by hash, consulting the cache first."""
        cached = self.transaction_cache.get(tx_hash)
        if cached is not None:
            metrics.cache_hits.labels(kind="tx").inc()
            return cached
        metrics.cache_misses.labels(kind="tx").inc()

        transaction = await self.fetch("tx", tx_hash, self.client.get_raw_transaction, tx_hash)
        self.transaction_cache.add(transaction)
        return transaction

    async def get_account(self, address: str) -> Account:
        """Read the current state of an account. Never cached."""
        return await self.fetch("address", address, self.client.get_account_state, address)
