"""Typed keys for state stored on the aiohttp application."""

from __future__ import annotations

from collections.abc import Callable

from aiohttp import web

from chain_tracker.tracker import TrackerSession

from .host import DisplayHost

HOST_KEY: web.AppKey[DisplayHost] = web.AppKey("host", DisplayHost)
"""Display host holding the latest snapshot."""

SESSION_GETTER_KEY: web.AppKey[Callable[[], TrackerSession | None]] = web.AppKey(
    "session_getter"
)
"""Returns the session requests are applied to, if one is attached."""
