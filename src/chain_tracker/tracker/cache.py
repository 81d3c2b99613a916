"""
Bounded caches for decoded blocks and transactions.

Why Cache Entities?
-------------------
The displayed window is rebuilt every time the chain grows or the user moves
around. Without caching, each rebuild would fetch up to a full page of blocks
from the node again, even though a block never changes once it is final.

How It Works
------------
Each cache is an insertion-ordered map keyed by hash:

1. **Entity storage**: Maps hash to the decoded entity, oldest first
2. **Height index** (blocks only): Maps block height to block hash

A block can therefore be looked up by height or by hash and both keys reach
the same entry.

Memory Safety
-------------
Each cache is bounded by its capacity (1024 by default). When full, FIFO
eviction removes the oldest insertion. Lookups do not refresh an entry's
position: insertion order is the only eviction signal.

The head block is never handed to the cache. That rule lives in the fetcher,
which is the only component that knows the chain height.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field

from chain_tracker.ledger import Block, Transaction

from .config import BLOCK_CACHE_SIZE, TRANSACTION_CACHE_SIZE


@dataclass(slots=True)
class BlockCache:
    """Cache of final blocks, reachable by height or by hash."""

    capacity: int = BLOCK_CACHE_SIZE
    """Maximum number of blocks retained."""

    _blocks: OrderedDict[str, Block] = field(default_factory=OrderedDict)
    """Block storage ordered by insertion time for FIFO eviction."""

    _by_index: dict[int, str] = field(default_factory=dict)
    """Height-to-hash index."""

    def __len__(self) -> int:
        """Return the number of cached blocks."""
        return len(self._blocks)

    def __contains__(self, key: int | str) -> bool:
        """Check if a block height or hash is in the cache."""
        return self.get(key) is not None

    def get(self, key: int | str) -> Block | None:
        """
        Look up a block by height or by hash.

        Args:
            key: Block height (int) or block hash (str).

        Returns:
            The cached block, or None if it is not cached.
        """
        if isinstance(key, int) and not isinstance(key, bool):
            block_hash = self._by_index.get(key)
            if block_hash is None:
                return None
            return self._blocks.get(block_hash)
        return self._blocks.get(key)

    def add(self, block: Block) -> Block:
        """
        Add a block to the cache.

        Adding a block that is already cached is a no-op. The existing entry
        keeps its place in the eviction order.

        Args:
            block: The block to cache.

        Returns:
            The cached block, either the existing entry or the new one.
        """
        existing = self._blocks.get(block.hash)
        if existing is not None:
            return existing

        # Evict before adding to stay within bounds.
        if len(self._blocks) >= self.capacity:
            self._evict_oldest()

        self._blocks[block.hash] = block
        self._by_index[block.index] = block.hash
        return block

    def blocks(self) -> list[Block]:
        """Return the cached blocks, oldest insertion first."""
        return list(self._blocks.values())

    def clear(self) -> None:
        """Remove all blocks from the cache."""
        self._blocks.clear()
        self._by_index.clear()

    def _evict_oldest(self) -> None:
        """Evict the oldest block to make room for a new entry."""
        if not self._blocks:
            return

        # popitem(last=False) removes the first (oldest) entry in O(1).
        oldest_hash, oldest = self._blocks.popitem(last=False)

        # Only drop the index entry if it still points at the evicted block.
        if self._by_index.get(oldest.index) == oldest_hash:
            del self._by_index[oldest.index]


@dataclass(slots=True)
class TransactionCache:
    """Cache of transactions, reachable by hash."""

    capacity: int = TRANSACTION_CACHE_SIZE
    """Maximum number of transactions retained."""

    _transactions: OrderedDict[str, Transaction] = field(default_factory=OrderedDict)
    """Transaction storage ordered by insertion time for FIFO eviction."""

    def __len__(self) -> int:
        """Return the number of cached transactions."""
        return len(self._transactions)

    def __contains__(self, tx_hash: str) -> bool:
        """Check if a transaction hash is in the cache."""
        return tx_hash in self._transactions

    def get(self, tx_hash: str) -> Transaction | None:
        """Look up a transaction by hash."""
        return self._transactions.get(tx_hash)

    def add(self, transaction: Transaction) -> Transaction:
        """Add a transaction, evicting the oldest one when full."""
        existing = self._transactions.get(transaction.hash)
        if existing is not None:
            return existing

        if len(self._transactions) >= self.capacity:
            self._transactions.popitem(last=False)

        self._transactions[transaction.hash] = transaction
        return transaction

    def transactions(self) -> list[Transaction]:
        """Return the cached transactions, oldest insertion first."""
        return list(self._transactions.values())

    def clear(self) -> None:
        """Remove all transactions from the cache."""
        self._transactions.clear()
