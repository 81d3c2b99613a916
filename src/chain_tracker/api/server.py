"""
Display API server.

Displays talk to the tracker over HTTP and websockets:

- ``GET /tracker/v0/health`` reports liveness
- ``GET /tracker/v0/view-state`` returns the latest published snapshot
- ``POST /tracker/v0/requests`` applies a display request
- ``GET /tracker/v0/events`` streams snapshots over a websocket
- ``GET /metrics`` exposes Prometheus metrics

The server never owns the session. It asks a getter for the current one on
every request, so it can start before the session exists and outlive it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from aiohttp import web

from chain_tracker.tracker import TrackerSession

from .app_keys import HOST_KEY, SESSION_GETTER_KEY
from .host import DisplayHost
from .routes import POST_ROUTES, ROUTES

logger = logging.getLogger(__name__)


def _no_session() -> TrackerSession | None:
    return None


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Bind address of the display API."""

    host: str = "127.0.0.1"
    """Interface to listen on. Local only by default."""

    port: int = 5060
    """TCP port to listen on."""

    enabled: bool = True
    """When False, `start()` does nothing."""


@dataclass(slots=True)
class ApiServer:
    """aiohttp application serving one display host."""

    config: ApiServerConfig
    """Bind address."""

    host: DisplayHost = field(default_factory=DisplayHost)
    """Display host the session publishes to."""

    session_getter: Callable[[], TrackerSession | None] = _no_session
    """Returns the session requests are applied to, if any."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """Application runner while the server is listening."""

    @property
    def session(self) -> TrackerSession | None:
        """The session requests would be applied to right now."""
        return self.session_getter()

    @property
    def is_running(self) -> bool:
        """Whether the server is listening."""
        return self._runner is not None

    def create_app(self) -> web.Application:
        """Build the application with its routes and shared state."""
        app = web.Application()
        app[HOST_KEY] = self.host
        app[SESSION_GETTER_KEY] = self.session_getter
        app.add_routes([web.get(path, handler) for path, handler in ROUTES.items()])
        app.add_routes([web.post(path, handler) for path, handler in POST_ROUTES.items()])
        return app

    async def start(self) -> None:
        """Start listening. Returns once the socket is bound."""
        if not self.config.enabled:
            logger.info("Display API disabled")
            return

        runner = web.AppRunner(self.create_app())
        await runner.setup()
        await web.TCPSite(runner, self.config.host, self.config.port).start()
        self._runner = runner

        logger.info(f"Display API listening on {self.config.host}:{self.config.port}")

    async def aclose(self) -> None:
        """Stop listening and close open connections. Safe to call twice."""
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()
            logger.info("Display API stopped")
