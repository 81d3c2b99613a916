"""
Display host API.

Provides HTTP endpoints for:
- /tracker/v0/health - Health check endpoint
- /tracker/v0/view-state - Latest view-state snapshot
- /tracker/v0/requests - Apply a display request
- /tracker/v0/events - Websocket stream of snapshots (and requests)
- /metrics - Prometheus metrics endpoint
"""

from .host import DisplayHost
from .server import ApiServer, ApiServerConfig

__all__ = [
    "ApiServer",
    "ApiServerConfig",
    "DisplayHost",
]
