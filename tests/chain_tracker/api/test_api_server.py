"""Tests for the display API server."""

from __future__ import annotations

import asyncio
import socket
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import aiohttp
import httpx
import pytest

from chain_tracker.api import ApiServer, ApiServerConfig, DisplayHost
from chain_tracker.api.endpoints.view_state import _stop_forwarder
from chain_tracker.tracker import TrackerSession, ViewState
from tests.chain_tracker.helpers import MockLedgerClient, make_block_hash


@pytest.fixture
def port() -> int:
    """A free local port."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def host() -> DisplayHost:
    """An empty display host."""
    return DisplayHost()


@pytest.fixture
async def live_session(ledger: MockLedgerClient, host: DisplayHost) -> TrackerSession:
    """Session publishing to `host`, with the first page already loaded."""
    session = TrackerSession(rpc_url="http://node.test", client=ledger, publisher=host)
    await session.check_for_new_blocks()
    return session


@asynccontextmanager
async def running(
    port: int,
    host: DisplayHost,
    session_getter: Callable[[], TrackerSession | None] = lambda: None,
) -> AsyncIterator[str]:
    """Run a server on `port` and yield its base URL."""
    server = ApiServer(
        config=ApiServerConfig(port=port),
        host=host,
        session_getter=session_getter,
    )
    await server.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await server.aclose()


class TestApiServerConfiguration:
    """Tests for API server configuration behavior."""

    def test_default_config(self) -> None:
        """Default configuration binds to localhost on port 5060."""
        config = ApiServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 5060
        assert config.enabled is True

    def test_server_created_without_session(self) -> None:
        """A server can exist before any session is attached."""
        server = ApiServer(config=ApiServerConfig())

        assert server.session is None

    async def test_disabled_server_does_not_listen(self, port: int) -> None:
        """A disabled server starts nothing."""
        server = ApiServer(config=ApiServerConfig(port=port, enabled=False))

        await server.start()

        async with httpx.AsyncClient() as client:
            with pytest.raises(httpx.ConnectError):
                await client.get(f"http://127.0.0.1:{port}/tracker/v0/health")


class TestHealthEndpoint:
    """Tests for the /tracker/v0/health endpoint."""

    async def test_returns_healthy_status_json(self, port: int, host: DisplayHost) -> None:
        """Health endpoint returns JSON with healthy status."""
        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.get(f"{url}/tracker/v0/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "chain-tracker",
            "blockHeight": None,
            "displays": 0,
        }

    async def test_reports_published_height(
        self, port: int, host: DisplayHost, live_session: TrackerSession
    ) -> None:
        """Once a snapshot is published, its height is reported."""
        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.get(f"{url}/tracker/v0/health")

        assert response.json()["blockHeight"] == 100


class TestViewStateEndpoint:
    """Tests for the /tracker/v0/view-state endpoint."""

    async def test_503_before_first_publish(self, port: int, host: DisplayHost) -> None:
        """Nothing to show until a snapshot is published."""
        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.get(f"{url}/tracker/v0/view-state")

        assert response.status_code == 503

    async def test_returns_latest_snapshot(self, port: int, host: DisplayHost) -> None:
        """The latest published snapshot is returned as camelCase JSON."""
        host.publish(ViewState.initial("http://node.test"))

        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.get(f"{url}/tracker/v0/view-state")

        assert response.status_code == 200
        data = response.json()
        assert data["panelTitle"] == "Block Explorer: http://node.test"
        assert data["startAtBlock"] == -1


class TestRequestEndpoint:
    """Tests for POST /tracker/v0/requests."""

    async def test_503_without_session(self, port: int, host: DisplayHost) -> None:
        """Requests need an attached session."""
        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.post(f"{url}/tracker/v0/requests", json={"selectBlock": 1})

        assert response.status_code == 503

    async def test_applies_request(
        self, port: int, host: DisplayHost, live_session: TrackerSession
    ) -> None:
        """A valid request returns and publishes the new snapshot."""
        async with (
            running(port, host, lambda: live_session) as url,
            httpx.AsyncClient() as client,
        ):
            response = await client.post(f"{url}/tracker/v0/requests", json={"selectBlock": 10})

        assert response.status_code == 200
        data = response.json()
        assert data["selectedBlock"] == make_block_hash(10)
        assert data["startAtBlock"] == 25
        assert host.latest is live_session.view_state

    async def test_negative_anchor_tracks_head(
        self, port: int, host: DisplayHost, live_session: TrackerSession
    ) -> None:
        """An anchor below -1 is accepted and goes back to the head."""
        async with (
            running(port, host, lambda: live_session) as url,
            httpx.AsyncClient() as client,
        ):
            response = await client.post(
                f"{url}/tracker/v0/requests", json={"setStartAtBlock": -5}
            )

        assert response.status_code == 200
        assert response.json()["startAtBlock"] == -1

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b'{"selectPlanet": "mars"}',
            b'{"setStartAtBlock": "ten"}',
        ],
    )
    async def test_400_on_invalid_request(
        self, port: int, host: DisplayHost, live_session: TrackerSession, body: bytes
    ) -> None:
        """Malformed requests are rejected without touching the snapshot."""
        before = live_session.view_state

        async with (
            running(port, host, lambda: live_session) as url,
            httpx.AsyncClient() as client,
        ):
            response = await client.post(
                f"{url}/tracker/v0/requests",
                content=body,
                headers={"content-type": "application/json"},
            )

        assert response.status_code == 400
        assert live_session.view_state is before

    async def test_502_when_node_unreachable(
        self,
        port: int,
        host: DisplayHost,
        live_session: TrackerSession,
        ledger: MockLedgerClient,
    ) -> None:
        """An exhausted read maps to Bad Gateway and publishes nothing."""
        before = host.latest
        ledger.failing.add("NAddr")

        async with (
            running(port, host, lambda: live_session) as url,
            httpx.AsyncClient() as client,
        ):
            response = await client.post(
                f"{url}/tracker/v0/requests", json={"selectAddress": "NAddr"}
            )

        assert response.status_code == 502
        assert host.latest is before


class TestEventsEndpoint:
    """Tests for the /tracker/v0/events websocket."""

    async def test_streams_snapshots_and_accepts_requests(
        self, port: int, host: DisplayHost, live_session: TrackerSession
    ) -> None:
        """A display receives the latest snapshot, then every new one."""
        async with (
            running(port, host, lambda: live_session) as url,
            aiohttp.ClientSession() as client,
            client.ws_connect(f"{url}/tracker/v0/events") as ws,
        ):
            first = await asyncio.wait_for(ws.receive_json(), timeout=2)
            assert first["blockHeight"] == 100

            await ws.send_json({"selectBlock": 40})
            second = await asyncio.wait_for(ws.receive_json(), timeout=2)
            assert second["selectedBlock"] == make_block_hash(40)

            await ws.send_json({"selectPlanet": "mars"})
            error = await asyncio.wait_for(ws.receive_json(), timeout=2)
            assert error == {"error": "Invalid tracker request"}

    async def test_subscriber_removed_on_disconnect(
        self, port: int, host: DisplayHost
    ) -> None:
        """A closed websocket stops receiving snapshots."""
        async with running(port, host) as url, aiohttp.ClientSession() as client:
            async with client.ws_connect(f"{url}/tracker/v0/events"):
                for _ in range(100):
                    if host.subscriber_count == 1:
                        break
                    await asyncio.sleep(0.01)
                assert host.subscriber_count == 1

            for _ in range(100):
                if host.subscriber_count == 0:
                    break
                await asyncio.sleep(0.01)

        assert host.subscriber_count == 0


class TestForwarderShutdown:
    """Tests for stopping a websocket's snapshot forwarder."""

    async def test_dropped_peer_failure_is_collected(self) -> None:
        """A send that failed on a dropped peer does not escape."""

        async def send_to_dropped_peer() -> None:
            raise ConnectionResetError("Cannot write to closing transport")

        forwarder = asyncio.create_task(send_to_dropped_peer())
        await asyncio.sleep(0)
        assert forwarder.done()

        await _stop_forwarder(forwarder)

        assert isinstance(forwarder.exception(), ConnectionResetError)

    async def test_waiting_forwarder_is_cancelled(self) -> None:
        """A forwarder still waiting for a snapshot is cancelled and awaited."""
        queue: asyncio.Queue[ViewState] = asyncio.Queue()
        forwarder = asyncio.create_task(queue.get())
        await asyncio.sleep(0)

        await _stop_forwarder(forwarder)

        assert forwarder.cancelled()


class TestMetricsEndpoint:
    """Tests for the /metrics endpoint."""

    async def test_exposes_tracker_metrics(
        self, port: int, host: DisplayHost, live_session: TrackerSession
    ) -> None:
        """Prometheus text output includes the tracker's metrics."""
        async with running(port, host) as url, httpx.AsyncClient() as client:
            response = await client.get(f"{url}/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "tracker_block_height 100.0" in response.text
        assert "tracker_rpc_attempts_total" in response.text
