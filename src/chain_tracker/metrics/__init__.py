"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking tracker behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    block_height,
    cache_hits,
    cache_misses,
    express_command_time,
    generate_metrics,
    poll_cycles,
    rpc_attempts,
    rpc_exhausted,
    rpc_failures,
    rpc_time,
    view_states_published,
)

__all__ = [
    "REGISTRY",
    "block_height",
    "cache_hits",
    "cache_misses",
    "express_command_time",
    "generate_metrics",
    "poll_cycles",
    "rpc_attempts",
    "rpc_exhausted",
    "rpc_failures",
    "rpc_time",
    "view_states_published",
]
