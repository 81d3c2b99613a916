"""View-state endpoint handlers."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

from aiohttp import WSMsgType, web
from pydantic import ValidationError

from chain_tracker.errors import FetchExhaustedError
from chain_tracker.tracker import TrackerRequest, TrackerSession, ViewState

from ..app_keys import HOST_KEY, SESSION_GETTER_KEY

logger = logging.getLogger(__name__)


def _session(request: web.Request) -> TrackerSession | None:
    return request.app[SESSION_GETTER_KEY]()


async def _apply(session: TrackerSession, payload: Any) -> ViewState:
    """
    Validate and apply one request payload.

    Raises:
        web.HTTPBadRequest: The payload is not a valid request.
        web.HTTPBadGateway: The node could not be read after all retries.
    """
    try:
        tracker_request = TrackerRequest.model_validate(payload)
    except ValidationError as e:
        raise web.HTTPBadRequest(reason="Invalid tracker request") from e

    try:
        return await session.on_request(tracker_request)
    except FetchExhaustedError as e:
        logger.warning(f"Request failed: {e}")
        raise web.HTTPBadGateway(reason=e.message) from e


async def handle_get(request: web.Request) -> web.Response:
    """
    Handle view-state request.

    Response: The latest snapshot as camelCase JSON.

    Status Codes:
        200 OK: Snapshot returned.
        503 Service Unavailable: Nothing published yet.
    """
    state = request.app[HOST_KEY].latest
    if state is None:
        raise web.HTTPServiceUnavailable(reason="No view state published yet")
    return web.json_response(state.to_json_dict())


async def handle_post(request: web.Request) -> web.Response:
    """
    Handle a tracker request from a display.

    Request: JSON object with any of selectAddress, setStartAtBlock,
    selectBlock, selectTransaction. Absent keys leave their facet unchanged.

    Status Codes:
        200 OK: Request applied, new snapshot returned.
        400 Bad Request: Body is not a valid tracker request.
        502 Bad Gateway: The node could not be read after all retries.
        503 Service Unavailable: No session attached.
    """
    session = _session(request)
    if session is None:
        raise web.HTTPServiceUnavailable(reason="No tracker session")

    try:
        payload = await request.json()
    except ValueError as e:
        raise web.HTTPBadRequest(reason="Body is not JSON") from e

    state = await _apply(session, payload)
    return web.json_response(state.to_json_dict())


async def handle_events(request: web.Request) -> web.WebSocketResponse:
    """
    Stream snapshots to a display over a websocket.

    Every published snapshot is sent as a JSON text message, starting with
    the latest one. Text messages received from the display are treated as
    tracker requests and applied one at a time; failures are answered with
    ``{"error": ...}`` and do not close the socket.
    """
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    host = request.app[HOST_KEY]
    queue = host.subscribe()
    forwarder = asyncio.create_task(_forward(queue, ws))

    try:
        async for message in ws:
            if message.type != WSMsgType.TEXT:
                continue
            await _handle_ws_request(request, ws, message.data)
    finally:
        host.unsubscribe(queue)
        await _stop_forwarder(forwarder)

    return ws


async def _forward(queue: asyncio.Queue[ViewState], ws: web.WebSocketResponse) -> None:
    while not ws.closed:
        state = await queue.get()
        await ws.send_json(state.to_json_dict())


async def _stop_forwarder(forwarder: asyncio.Task[None]) -> None:
    """Cancel the forwarder and collect its outcome. A dropped peer is not an error."""
    forwarder.cancel()
    with contextlib.suppress(asyncio.CancelledError, ConnectionResetError):
        await forwarder


async def _handle_ws_request(request: web.Request, ws: web.WebSocketResponse, data: str) -> None:
    session = _session(request)
    if session is None:
        await ws.send_json({"error": "No tracker session"})
        return

    try:
        payload = json.loads(data)
    except ValueError:
        await ws.send_json({"error": "Message is not JSON"})
        return

    # The new snapshot reaches this display through the forwarder.
    try:
        await _apply(session, payload)
    except web.HTTPException as e:
        await ws.send_json({"error": e.reason})
