"""Tests for the tracker exception hierarchy."""

from __future__ import annotations

from chain_tracker.errors import (
    ExpressEnvironmentError,
    ExpressError,
    ExpressTimeoutError,
    FetchExhaustedError,
    LedgerRpcError,
    TrackerError,
)


class TestMessages:
    """Tests for error messages shown to users."""

    def test_fetch_exhausted_names_kind_and_key(self) -> None:
        """The message names what could not be retrieved."""
        error = FetchExhaustedError("block", 42, 5)

        assert error.message == "Maximum retries exceeded while trying to retrieve block 42"
        assert error.attempts == 5

    def test_ledger_rpc_error_with_code(self) -> None:
        """The JSON-RPC code is part of the message when present."""
        assert str(LedgerRpcError("getblock", "Unknown block", code=-100)) == (
            "getblock failed (-100): Unknown block"
        )
        assert str(LedgerRpcError("getblock", "bad")) == "getblock failed: bad"

    def test_timeout_message(self) -> None:
        """Timeouts name the command and the budget."""
        error = ExpressTimeoutError("show balance", 5.0)

        assert error.message == "Operation timed out after 5s: show balance"

    def test_repr(self) -> None:
        """repr shows the class and message."""
        assert repr(TrackerError("boom")) == "TrackerError('boom')"


class TestHierarchy:
    """Tests for exception subclassing."""

    def test_all_errors_are_tracker_errors(self) -> None:
        """Callers can catch every tracker failure at once."""
        for error in (
            LedgerRpcError("m", "x"),
            FetchExhaustedError("tx", "0x", 1),
            ExpressTimeoutError("run", 1),
            ExpressEnvironmentError("missing", "https://example.invalid"),
        ):
            assert isinstance(error, TrackerError)

    def test_express_errors(self) -> None:
        """Tool failures share a base class."""
        assert issubclass(ExpressTimeoutError, ExpressError)
        assert issubclass(ExpressEnvironmentError, ExpressError)
