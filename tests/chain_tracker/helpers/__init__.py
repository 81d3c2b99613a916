"""Test helpers for chain tracker unit tests."""

from __future__ import annotations

from .builders import (
    make_account,
    make_block,
    make_block_hash,
    make_chain,
    make_transaction,
    make_tx_hash,
)
from .mocks import BLOCK_COUNT, RPC_URL, MockLedgerClient, RecordingPublisher

__all__ = [
    # Builders
    "make_account",
    "make_block",
    "make_block_hash",
    "make_chain",
    "make_transaction",
    "make_tx_hash",
    # Mocks
    "BLOCK_COUNT",
    "RPC_URL",
    "MockLedgerClient",
    "RecordingPublisher",
]
