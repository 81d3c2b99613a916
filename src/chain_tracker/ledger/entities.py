"""Decoded ledger entities."""

from __future__ import annotations

from pydantic import Field

from chain_tracker.types import LedgerEntity


class Block(LedgerEntity):
    """
    A block as returned by the node.

    A block at a given height never changes once fetched. Reorganizations are
    not reconciled.
    """

    index: int = Field(ge=0)
    """Height of the block. Unique and monotonically assigned."""

    hash: str
    """Block hash. Unique and stable."""


class Transaction(LedgerEntity):
    """A transaction as returned by the node."""

    hash: str
    """Transaction hash."""

    blockhash: str
    """Hash of the block that contains this transaction."""


class Account(LedgerEntity):
    """
    Account state for an address.

    Balances change from block to block, so accounts are always fetched fresh.
    """

    address: str
    """The address this state belongs to."""
