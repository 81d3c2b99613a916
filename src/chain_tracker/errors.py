"""Exception hierarchy for the tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """
    Base exception for all tracker errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class LedgerRpcError(TrackerError):
    """
    Raised when the node answers with an error or an undecodable payload.

    Treated like any transport failure: the fetcher retries it.

    Attributes:
        method: The JSON-RPC method that failed.
        code: The JSON-RPC error code, if the node sent one.
    """

    def __init__(self, method: str, message: str, *, code: int | None = None) -> None:
        self.method = method
        self.code = code
        prefix = f"{method} failed" if code is None else f"{method} failed ({code})"
        super().__init__(f"{prefix}: {message}")


class FetchExhaustedError(TrackerError):
    """
    Raised when every retry of a remote read has failed.

    Attributes:
        kind: Entity kind that could not be retrieved ("block", "tx", ...).
        key: The height, hash or address that was requested.
        attempts: How many attempts were made.
    """

    def __init__(self, kind: str, key: object, attempts: int) -> None:
        self.kind = kind
        self.key = key
        self.attempts = attempts
        super().__init__(f"Maximum retries exceeded while trying to retrieve {kind} {key}")


class ExpressError(TrackerError):
    """Base class for failures of the local developer-network tool."""


class ExpressEnvironmentError(ExpressError):
    """
    Raised when a prerequisite of the developer-network tool is missing.

    Not retried. The remediation URL tells the user where to get it.

    Attributes:
        remediation_url: Where the missing prerequisite can be downloaded.
    """

    def __init__(self, message: str, remediation_url: str) -> None:
        self.remediation_url = remediation_url
        super().__init__(message)


class ExpressTimeoutError(ExpressError):
    """
    Raised when a command exceeds its wall-clock budget.

    Attributes:
        command: The command line that timed out.
        timeout: The budget in seconds.
    """

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"Operation timed out after {timeout:g}s: {command}")
