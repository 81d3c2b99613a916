"""
JSON-RPC client for reading the ledger.

The tracker depends only on the `LedgerClient` protocol. The concrete client
speaks JSON-RPC 2.0 over HTTP, which is what a Neo node exposes:

- ``getblockcount`` returns the chain height,
- ``getblock [key, 1]`` returns a verbose block,
- ``getrawtransaction [hash, 1]`` returns a verbose transaction,
- ``getaccountstate [address]`` returns account state.

Failures are not retried here. Any exception raised by this module is a
transient failure from the fetcher's point of view.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from chain_tracker.errors import LedgerRpcError

from .entities import Account, Block, Transaction

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
"""HTTP request timeout in seconds."""


class LedgerClient(Protocol):
    """
    Protocol for ledger reads.

    Each call may fail with a transport or decoding error. Callers treat every
    such failure the same way.
    """

    async def get_block_count(self) -> int:
        """Return the number of blocks in the chain."""
        ...

    async def get_block(self, index_or_hash: int | str) -> Block:
        """Return the block at a height or with a hash."""
        ...

    async def get_raw_transaction(self, tx_hash: str) -> Transaction:
        """Return the transaction with a hash."""
        ...

    async def get_account_state(self, address: str) -> Account:
        """Return the current state of an account."""
        ...


class JsonRpcLedgerClient:
    """
    Ledger client over JSON-RPC 2.0.

    Holds one `httpx.AsyncClient` for its whole lifetime. Call `aclose()` when
    the session ends.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._ids = itertools.count(1)
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._http.aclose()

    async def get_block_count(self) -> int:
        result = await self._call("getblockcount")
        if isinstance(result, bool) or not isinstance(result, int):
            raise LedgerRpcError("getblockcount", f"expected an integer, got {result!r}")
        return result

    async def get_block(self, index_or_hash: int | str) -> Block:
        result = await self._call("getblock", index_or_hash, 1)
        return self._decode("getblock", Block, result)

    async def get_raw_transaction(self, tx_hash: str) -> Transaction:
        result = await self._call("getrawtransaction", tx_hash, 1)
        return self._decode("getrawtransaction", Transaction, result)

    async def get_account_state(self, address: str) -> Account:
        result = await self._call("getaccountstate", address)
        # Older nodes omit the address from the payload.
        if isinstance(result, dict):
            result = {"address": address, **result}
        return self._decode("getaccountstate", Account, result)

    async def _call(self, method: str, *params: Any) -> Any:
        """
        Send one JSON-RPC request and return its ``result`` member.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses.
            LedgerRpcError: When the node returns an error object or a
                malformed envelope.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        response = await self._http.post(self.url, json=payload)
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as exc:
            raise LedgerRpcError(method, "response is not valid JSON") from exc

        if not isinstance(body, dict):
            raise LedgerRpcError(method, "response is not a JSON-RPC envelope")

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise LedgerRpcError(
                    method,
                    str(error.get("message", "unknown error")),
                    code=error.get("code"),
                )
            raise LedgerRpcError(method, str(error))

        if "result" not in body:
            raise LedgerRpcError(method, "response has no result")

        return body["result"]

    @staticmethod
    def _decode(method: str, model: type[Any], result: Any) -> Any:
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise LedgerRpcError(method, f"cannot decode {model.__name__}: {exc}") from exc
