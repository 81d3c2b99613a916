"""
Ledger entities and the RPC client used to read them.

The tracker never writes to the ledger. It reads four things:

- the current block count (the chain height),
- blocks, by height or by hash,
- transactions, by hash,
- account state, by address.
"""

from .client import JsonRpcLedgerClient, LedgerClient
from .entities import Account, Block, Transaction

__all__ = [
    "Account",
    "Block",
    "JsonRpcLedgerClient",
    "LedgerClient",
    "Transaction",
]
