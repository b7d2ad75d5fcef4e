"""
Test the WebSocket transports over a loopback connection.
"""

import asyncio

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidStatus

from ocppj.errors import ConnectionLostError
from ocppj.metrics import CHARGE_POINTS_CONNECTED, MESSAGE_RATE

from ocppj.transport.websocket import (
    WebSocketClient,
    WebSocketServer,
    basic_auth_header,
    parse_basic_auth,
    path_prefix,
    peer_id_from_path,
)
from ocppj.v16 import CentralSystem, ChargePoint, core
from ocppj.utils import utc_now

HOST = "127.0.0.1"


class CoreHandler:
    def on_boot_notification(self, charge_point_id, request):
        return core.BootNotificationConfirmation(
            current_time=utc_now(), interval=300, status=core.RegistrationStatus.ACCEPTED,
        )

    def on_heartbeat(self, charge_point_id, request):
        return core.HeartbeatConfirmation(current_time=utc_now())


async def _central_system(transport=None, port=0):
    cs = CentralSystem(transport or WebSocketServer())
    cs.set_core_handler(CoreHandler())
    await cs.start(port, "/ocpp/{ws}", HOST)
    return cs


def _fast_reconnecting_client():
    return WebSocketClient(reconnect_min_delay=0.05, reconnect_random_range=0, reconnect_repeat=1)


async def _eventually(predicate, timeout=5):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.02)


def _points(reader, name):
    data = reader.get_metrics_data()
    if data is None:
        return []
    points = []
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name == name:
                    points.extend(metric.data.data_points)
    return points


def _url(cs):
    return f"ws://{HOST}:{cs.transport.port}/ocpp"


def test_peer_id_from_path():
    assert peer_id_from_path("/ocpp/CP001") == "CP001"
    assert peer_id_from_path("/ocpp/CP001/?token=1") == "CP001"
    assert peer_id_from_path("/") == ""


def test_path_prefix():
    assert path_prefix("/ocpp/{ws}") == "/ocpp/"
    assert path_prefix("/{ws}") == "/"
    assert path_prefix("/ocpp") == "/ocpp/"


def test_basic_auth_round_trip():
    assert parse_basic_auth(basic_auth_header("cp1", "s3cr:et")) == ("cp1", "s3cr:et")
    assert parse_basic_auth("Bearer abc") is None
    assert parse_basic_auth("Basic !!!") is None
    assert parse_basic_auth(None) is None


async def test_boot_notification_over_websocket():
    """Test a full BootNotification exchange between real endpoints."""
    print("🔌 Testing BootNotification over a loopback WebSocket...")
    cs = await _central_system()
    connected = asyncio.Event()
    cs.set_new_peer_handler(lambda peer_id: connected.set())

    cp = ChargePoint("CP001", WebSocketClient())
    await cp.start(_url(cs))
    try:
        confirmation = await asyncio.wait_for(cp.boot_notification("Model X", "Voltaro"), 5)
        print(f"  Received: {confirmation}")

        assert confirmation.status == core.RegistrationStatus.ACCEPTED
        assert confirmation.interval == 300
        await asyncio.wait_for(connected.wait(), 5)
        assert cs.connected_peers == ["CP001"]
        assert cp.transport.is_connected
    finally:
        await cp.stop()
        await cs.stop()
    print("  ✅ BootNotification exchanged")


async def test_server_initiated_request_over_websocket():
    cs = await _central_system()
    connected = asyncio.Event()
    cs.set_new_peer_handler(lambda peer_id: connected.set())

    class ChargePointCore:
        def on_reset(self, request):
            return core.ResetConfirmation(status=core.ResetStatus.ACCEPTED)

    cp = ChargePoint("CP002", WebSocketClient())
    cp.set_core_handler(ChargePointCore())
    await cp.start(_url(cs))
    try:
        await asyncio.wait_for(connected.wait(), 5)
        confirmation = await asyncio.wait_for(cs.reset("CP002", "Hard"), 5)
        assert confirmation.status == core.ResetStatus.ACCEPTED
    finally:
        await cp.stop()
        await cs.stop()


async def test_unsupported_subprotocol_is_closed():
    cs = await _central_system()
    try:
        async with connect(f"{_url(cs)}/CP003", subprotocols=["ocpp2.0.1"]) as ws:
            with pytest.raises(ConnectionClosed) as exc:
                await asyncio.wait_for(ws.recv(), 5)
        assert exc.value.rcvd.code == 1002
        assert exc.value.rcvd.reason == "Unsupported protocol"
        assert cs.connected_peers == []
    finally:
        await cs.stop()


async def test_basic_auth_required():
    transport = WebSocketServer(basic_auth_handler=lambda user, password: password == "secret")
    cs = await _central_system(transport)
    try:
        with pytest.raises(InvalidStatus) as exc:
            await connect(f"{_url(cs)}/CP004", subprotocols=["ocpp1.6"])
        assert exc.value.response.status_code == 401

        cp = ChargePoint("CP004", WebSocketClient(basic_auth=("CP004", "secret")))
        await cp.start(_url(cs))
        assert cp.is_connected
        await cp.stop()
    finally:
        await cs.stop()


async def test_check_peer_handler_refuses_peer():
    cs = await _central_system()
    cs.set_check_peer_handler(lambda peer_id, request: peer_id != "BLOCKED")
    try:
        with pytest.raises(InvalidStatus) as exc:
            await connect(f"{_url(cs)}/BLOCKED", subprotocols=["ocpp1.6"])
        assert exc.value.response.status_code == 401
    finally:
        await cs.stop()


async def test_unknown_path_not_found():
    cs = await _central_system()
    try:
        with pytest.raises(InvalidStatus) as exc:
            await connect(f"ws://{HOST}:{cs.transport.port}/other/CP005", subprotocols=["ocpp1.6"])
        assert exc.value.response.status_code == 404
    finally:
        await cs.stop()


async def test_client_notified_when_server_goes_away():
    cs = await _central_system()
    disconnected = asyncio.Event()
    cp = ChargePoint("CP006", WebSocketClient())
    cp.set_disconnected_handler(lambda error: disconnected.set())
    await cp.start(_url(cs))

    await cs.stop()
    await asyncio.wait_for(disconnected.wait(), 5)

    assert not cp.transport.is_connected
    await cp.stop()


async def test_client_keeps_reconnecting_until_server_returns():
    """Test that a request accepted while the server is down completes once it is back."""
    print("🔁 Testing reconnection after a server restart...")
    cs = await _central_system()
    port = cs.transport.port
    disconnected = asyncio.Event()
    reconnected = asyncio.Event()
    cp = ChargePoint("CP007", _fast_reconnecting_client())
    cp.set_disconnected_handler(lambda error: disconnected.set())
    cp.set_reconnected_handler(lambda: reconnected.set())
    await cp.start(_url(cs))

    await cs.stop()
    await asyncio.wait_for(disconnected.wait(), 5)
    results = []
    cp.send_request(core.HeartbeatRequest(), lambda response, error: results.append((response, error)))

    # Several attempts fail while nothing is listening
    await asyncio.sleep(0.3)
    assert not reconnected.is_set()
    assert results == []

    cs = await _central_system(port=port)
    try:
        await asyncio.wait_for(reconnected.wait(), 5)
        await _eventually(lambda: results)
        response, error = results[0]
        assert error is None
        assert isinstance(response, core.HeartbeatConfirmation)
        assert cp.is_connected
    finally:
        await cp.stop()
        await cs.stop()
    print("  ✅ Queued request delivered after reconnecting")


async def test_stop_while_reconnecting_fails_queued_requests():
    cs = await _central_system()
    disconnected = asyncio.Event()
    cp = ChargePoint("CP008", _fast_reconnecting_client())
    cp.set_disconnected_handler(lambda error: disconnected.set())
    await cp.start(_url(cs))
    await cs.stop()
    await asyncio.wait_for(disconnected.wait(), 5)

    results = []
    cp.send_request(core.HeartbeatRequest(), lambda response, error: results.append((response, error)))
    await cp.stop()

    assert len(results) == 1
    assert results[0][0] is None
    assert isinstance(results[0][1], ConnectionLostError)
    assert not cp.transport.is_connected


async def test_server_records_connection_metrics():
    reader = InMemoryMetricReader()
    cs = await _central_system(WebSocketServer(meter_provider=MeterProvider(metric_readers=[reader])))
    gone = asyncio.Event()
    cs.set_peer_disconnected_handler(lambda peer_id: gone.set())
    cp = ChargePoint("CP009", WebSocketClient())
    await cp.start(_url(cs))
    try:
        await asyncio.wait_for(cp.heartbeat(), 5)

        def rates():
            return {
                point.attributes["direction"]: point.count
                for point in _points(reader, MESSAGE_RATE)
                if point.attributes["charge_point_id"] == "CP009"
            }

        await _eventually(lambda: rates() == {"inbound": 1, "outbound": 1})
        assert [point.value for point in _points(reader, CHARGE_POINTS_CONNECTED)] == [1]

        await cp.stop()
        await asyncio.wait_for(gone.wait(), 5)
        assert [point.value for point in _points(reader, CHARGE_POINTS_CONNECTED)] == [0]
    finally:
        await cp.stop()
        await cs.stop()
