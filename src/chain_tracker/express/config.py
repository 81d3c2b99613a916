"""Developer network tool configuration constants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

COMMAND_TIMEOUT: Final[float] = 5.0
"""Wall-clock budget of one command in seconds."""

WATCHDOG_INTERVAL: Final[float] = 0.25
"""How often the watchdog checks the elapsed time, in seconds."""

SLOW_COMMAND_THRESHOLD: Final[float] = 1.0
"""Commands slower than this many seconds are logged."""

MIN_DOTNET_MAJOR: Final[int] = 5
"""Oldest .NET major version able to host the tool."""

DOTNET_DOWNLOAD_URL: Final[str] = "https://dotnet.microsoft.com/download"
"""Where users are sent when .NET is missing."""


@dataclass(frozen=True, slots=True)
class ExpressConfig:
    """Overridable runner parameters."""

    timeout: float = COMMAND_TIMEOUT
    """Wall-clock budget of one command in seconds."""

    watchdog_interval: float = WATCHDOG_INTERVAL
    """Watchdog granularity in seconds."""

    slow_command_threshold: float = SLOW_COMMAND_THRESHOLD
    """Slow-command logging threshold in seconds."""

    min_dotnet_major: int = MIN_DOTNET_MAJOR
    """Oldest accepted .NET major version."""
