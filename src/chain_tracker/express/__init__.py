"""
Runner for the local developer-network command line tool.

Unlike ledger reads, commands are never retried. Each one gets a hard
wall-clock budget, and only one command runs at a time in the process.
"""

from .config import ExpressConfig
from .runner import Command, CommandResult, ExpressRunner

__all__ = [
    "Command",
    "CommandResult",
    "ExpressConfig",
    "ExpressRunner",
]
