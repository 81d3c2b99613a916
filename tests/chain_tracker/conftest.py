"""Shared fixtures for chain tracker tests."""

from __future__ import annotations

import pytest

from chain_tracker.tracker import (
    BlockCache,
    ResilientFetcher,
    TrackerConfig,
    TrackerSession,
    TransactionCache,
)
from tests.chain_tracker.helpers import RPC_URL, MockLedgerClient, RecordingPublisher, make_chain


@pytest.fixture
def ledger() -> MockLedgerClient:
    """A 100-block in-memory ledger."""
    return MockLedgerClient(chain=make_chain(100))


@pytest.fixture
def publisher() -> RecordingPublisher:
    """Publisher recording every snapshot."""
    return RecordingPublisher()


@pytest.fixture
def fetcher(ledger: MockLedgerClient) -> ResilientFetcher:
    """Fetcher over the in-memory ledger with empty caches."""
    return ResilientFetcher(
        client=ledger,
        block_cache=BlockCache(),
        transaction_cache=TransactionCache(),
    )


@pytest.fixture
def session(ledger: MockLedgerClient, publisher: RecordingPublisher) -> TrackerSession:
    """
    Session over the in-memory ledger.

    The poll loop is not started: tests drive cycles explicitly.
    """
    return TrackerSession(
        rpc_url=RPC_URL,
        client=ledger,
        publisher=publisher,
        config=TrackerConfig(),
    )
