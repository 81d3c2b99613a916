"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the tracker.
Exposes metrics in Prometheus text format via the /metrics endpoint.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Dedicated registry, so default Python process metrics stay out.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Chain
# -----------------------------------------------------------------------------

block_height = Gauge(
    "tracker_block_height",
    "Highest chain height seen by the poll loop",
    registry=REGISTRY,
)

poll_cycles = Counter(
    "tracker_poll_cycles_total",
    "Poll loop cycles run",
    registry=REGISTRY,
)

view_states_published = Counter(
    "tracker_view_states_published_total",
    "View-state snapshots handed to the display host",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# RPC
# -----------------------------------------------------------------------------

rpc_attempts = Counter(
    "tracker_rpc_attempts_total",
    "Remote read attempts",
    ["kind"],
    registry=REGISTRY,
)

rpc_failures = Counter(
    "tracker_rpc_failures_total",
    "Remote read attempts that failed",
    ["kind"],
    registry=REGISTRY,
)

rpc_exhausted = Counter(
    "tracker_rpc_exhausted_total",
    "Remote reads that failed on every retry",
    ["kind"],
    registry=REGISTRY,
)

rpc_time = Histogram(
    "tracker_rpc_seconds",
    "Successful remote read duration",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Caches
# -----------------------------------------------------------------------------

cache_hits = Counter(
    "tracker_cache_hits_total",
    "Entity cache hits",
    ["kind"],
    registry=REGISTRY,
)

cache_misses = Counter(
    "tracker_cache_misses_total",
    "Entity cache misses",
    ["kind"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Developer network tool
# -----------------------------------------------------------------------------

express_command_time = Histogram(
    "tracker_express_command_seconds",
    "Developer network command duration",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
