"""
Serialized, time-boxed execution of the developer-network tool.

The tool is a .NET assembly launched as ``dotnet <binary> <command> ...``.

Resilience
----------
Commands differ from ledger reads in two ways:

1. **No retries**: a command may have side effects (reset, transfer), so a
   failure is reported as-is.
2. **Hard timeout**: a watchdog checks the elapsed time every
   `watchdog_interval` seconds. Past `timeout`, the process is killed and the
   call fails with `ExpressTimeoutError`, whether or not the process was
   about to exit.

Serialization
-------------
The tool does not tolerate concurrent invocations. `run()` holds a
process-wide lock for the duration of each command. `asyncio.Lock` wakes
waiters in FIFO order, so callers are served in the order they arrived.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
import time
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from chain_tracker import metrics
from chain_tracker.errors import ExpressEnvironmentError, ExpressTimeoutError

from .config import DOTNET_DOWNLOAD_URL, ExpressConfig

logger = logging.getLogger(__name__)

Command = Literal[
    "checkpoint",
    "contract",
    "create",
    "reset",
    "run",
    "show",
    "transfer",
    "wallet",
    "-v",
]
"""Top-level commands accepted by the tool."""

_RUN_LOCKS: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = (
    weakref.WeakKeyDictionary()
)
"""One command lock per event loop. In practice, one per process."""


def _run_lock() -> asyncio.Lock:
    """Return the command lock of the running event loop."""
    loop = asyncio.get_running_loop()
    lock = _RUN_LOCKS.get(loop)
    if lock is None:
        lock = _RUN_LOCKS[loop] = asyncio.Lock()
    return lock


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one command."""

    message: str
    """Combined stdout and stderr of the command."""

    is_error: bool = False
    """Whether the command failed (non-zero exit, or could not start)."""


@dataclass(slots=True)
class ExpressRunner:
    """Launches developer-network commands through the .NET host."""

    binary_path: Path
    """Path to the tool's assembly."""

    dotnet_path: str = field(default_factory=lambda: shutil.which("dotnet") or "dotnet")
    """The ``dotnet`` executable."""

    config: ExpressConfig = field(default_factory=ExpressConfig)
    """Timeouts and thresholds."""

    time_fn: Callable[[], float] = field(default=time.monotonic)
    """Clock used by the watchdog (injectable for testing)."""

    async def run(self, command: Command, *options: str) -> CommandResult:
        """
        Run a command while holding the process-wide command lock.

        Raises:
            ExpressEnvironmentError: If .NET is missing or too old.
            ExpressTimeoutError: If the command exceeded its budget.
        """
        async with _run_lock():
            started_at = self.time_fn()
            try:
                return await self.run_unsafe(command, *options)
            finally:
                duration = self.time_fn() - started_at
                metrics.express_command_time.observe(duration)
                if duration > self.config.slow_command_threshold:
                    logger.info(
                        "`neoxp %s %s` took %dms",
                        command,
                        " ".join(options),
                        int(duration * 1000),
                    )

    async def run_unsafe(self, command: str, *options: str) -> CommandResult:
        """
        Run a command without taking the command lock.

        Args:
            command: Command line; split on whitespace.
            *options: Extra arguments appended verbatim.

        Returns:
            The combined output. ``is_error`` is set on a non-zero exit code
            or when the process could not be started.

        Raises:
            ExpressEnvironmentError: If .NET is missing or too old.
            ExpressTimeoutError: If the command exceeded its budget.
        """
        await self.check_for_dotnet()

        arguments = [str(self.binary_path), *command.split(), *options]
        command_line = " ".join([command, *options])

        try:
            process = await asyncio.create_subprocess_exec(
                self.dotnet_path,
                *arguments,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logger.error(f"Could not launch `{command_line}`: {e}")
            return CommandResult(message=str(e) or "Unknown failure", is_error=True)

        output = await self._watch(process, command_line)
        return CommandResult(
            message=output.decode(errors="replace"),
            is_error=process.returncode != 0,
        )

    async def check_for_dotnet(self) -> None:
        """
        Verify that a recent enough .NET runtime is installed.

        Raises:
            ExpressEnvironmentError: With a download link, when the check fails.
        """
        major = 0
        try:
            process = await asyncio.create_subprocess_exec(
                self.dotnet_path,
                "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
            stdout, _ = await process.communicate()
            major = int(stdout.decode().strip().split(".")[0])
        except (OSError, ValueError) as e:
            logger.error(f"checkForDotNet error: {e}")

        if major < self.config.min_dotnet_major:
            raise ExpressEnvironmentError(
                f".NET {self.config.min_dotnet_major} or higher is required "
                "to use this functionality.",
                DOTNET_DOWNLOAD_URL,
            )

    async def _watch(self, process: asyncio.subprocess.Process, command_line: str) -> bytes:
        """Wait for the process, killing it once the budget is exceeded."""
        started_at = self.time_fn()
        communicate = asyncio.ensure_future(process.communicate())

        while True:
            done, _ = await asyncio.wait({communicate}, timeout=self.config.watchdog_interval)
            if communicate in done:
                stdout, _ = communicate.result()
                return stdout or b""

            if self.time_fn() - started_at > self.config.timeout:
                # The process may have exited between checks.
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                communicate.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await communicate
                await process.wait()
                raise ExpressTimeoutError(command_line, self.config.timeout)
