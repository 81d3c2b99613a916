"""Liveness and metrics handlers."""

from __future__ import annotations

from typing import Final

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST

from chain_tracker.metrics import generate_metrics

from ..app_keys import HOST_KEY

SERVICE_NAME: Final = "chain-tracker"
"""Identifier reported by the health endpoint."""


async def handle_health(request: web.Request) -> web.Response:
    """
    Report that the tracker is up.

    Response: JSON object with fields:
        - status (string): Always "healthy" when the endpoint answers.
        - service (string): Fixed identifier "chain-tracker".
        - blockHeight (int | null): Height of the latest published snapshot.
        - displays (int): Number of connected websocket displays.
    """
    host = request.app[HOST_KEY]
    latest = host.latest
    return web.json_response(
        {
            "status": "healthy",
            "service": SERVICE_NAME,
            "blockHeight": None if latest is None else latest.block_height,
            "displays": host.subscriber_count,
        }
    )


async def handle_metrics(_request: web.Request) -> web.Response:
    """Expose the tracker registry in Prometheus text format."""
    return web.Response(body=generate_metrics(), headers={"Content-Type": CONTENT_TYPE_LATEST})
