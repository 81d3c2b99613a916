"""API route definitions."""

from collections.abc import Awaitable, Callable

from aiohttp import web

from .endpoints import status, view_state

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

ROUTES: dict[str, Handler] = {
    "/tracker/v0/health": status.handle_health,
    "/tracker/v0/view-state": view_state.handle_get,
    "/tracker/v0/events": view_state.handle_events,
    "/metrics": status.handle_metrics,
}
"""GET routes mapped to their handlers."""

POST_ROUTES: dict[str, Handler] = {
    "/tracker/v0/requests": view_state.handle_post,
}
"""Routes accepting display requests."""
