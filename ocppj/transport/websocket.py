"""
WebSocket transports built on the websockets asyncio API.
"""

import asyncio
import base64
import binascii
import contextlib
import random
from typing import Callable, List, Optional, Tuple
from dataclasses import dataclass
from http import HTTPStatus

from loguru import logger
from websockets.asyncio.client import connect
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed
from websockets.frames import CloseCode
from websockets.protocol import State

from ocppj import config
from ocppj.errors import ConnectionLostError
from ocppj.metrics import DIRECTION_INBOUND, DIRECTION_OUTBOUND, WebSocketMetrics
from ocppj.transport.base import ClientTransport, ServerTransport


@dataclass
class ClientTimeoutConfig:
    """Timeouts of a WebSocket connection, in seconds."""

    write_wait: float = config.WRITE_WAIT
    pong_wait: float = config.PONG_WAIT
    ping_period: float = config.PING_PERIOD
    handshake_timeout: float = config.HANDSHAKE_TIMEOUT


def peer_id_from_path(path):
    """The last path segment identifies the peer: /ocpp/CP001?x=1 -> CP001"""
    return path.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


def path_prefix(listen_path):
    """/ocpp/{ws} -> /ocpp/"""
    return listen_path.split("{", 1)[0] if "{" in listen_path else listen_path.rstrip("/") + "/"


def parse_basic_auth(header):
    """Return (username, password) from a Basic Authorization header, or None."""
    if not header:
        return None
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def basic_auth_header(username, password):
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class WebSocketServer(ServerTransport):
    """Accepts many peers; each connection is identified by its URL path."""

    def __init__(
        self,
        timeout_config: Optional[ClientTimeoutConfig] = None,
        basic_auth_handler: Optional[Callable[[str, str], bool]] = None,
        ssl=None,
        meter_provider=None,
    ):
        """
        Args:
            timeout_config: ClientTimeoutConfig applied to every connection
            basic_auth_handler: callable(username, password) -> bool; when set,
                peers without valid Basic credentials are refused with 401
            ssl: optional ssl.SSLContext for wss
            meter_provider: OpenTelemetry MeterProvider for connection and
                message metrics, the global one by default
        """
        super().__init__()
        self.metrics = WebSocketMetrics(meter_provider)
        self.timeout_config = timeout_config or ClientTimeoutConfig()
        self.basic_auth_handler = basic_auth_handler
        self.ssl = ssl
        self._server = None
        self._prefix = "/"
        self._connections = {}

    @property
    def port(self) -> Optional[int]:
        """Port actually bound, useful when started on port 0."""
        if self._server is None:
            return None
        return self._server.sockets[0].getsockname()[1]

    @property
    def connected_peers(self) -> List[str]:
        return list(self._connections)

    async def start(self, port: int, path: str = config.LISTEN_PATH, host: Optional[str] = None):
        self._prefix = path_prefix(path)
        self._server = await serve(
            self._on_connect,
            host or config.HOST,
            port,
            subprotocols=self.subprotocols or None,
            select_subprotocol=self._select_subprotocol,
            process_request=self._process_request,
            open_timeout=self.timeout_config.handshake_timeout,
            ping_interval=self.timeout_config.ping_period,
            ping_timeout=self.timeout_config.pong_wait,
            ssl=self.ssl,
        )
        logger.info(f"OCPP WebSocket server listening on port {self.port}, path {path}")

    async def stop(self):
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("OCPP WebSocket server stopped")

    async def write(self, peer_id: str, data: str):
        connection = self._connections.get(peer_id)
        if connection is None:
            raise ConnectionLostError(f"no open connection for peer {peer_id}")
        await asyncio.wait_for(connection.send(data), timeout=self.timeout_config.write_wait)
        self.metrics.record_message(peer_id, DIRECTION_OUTBOUND)

    def _select_subprotocol(self, connection, subprotocols):
        # No match still completes the handshake, _on_connect then closes with 1002
        for subprotocol in subprotocols:
            if subprotocol in self.subprotocols:
                return subprotocol
        return None

    async def _process_request(self, connection, request):
        if not request.path.startswith(self._prefix):
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
        peer_id = peer_id_from_path(request.path)
        if not peer_id:
            return connection.respond(HTTPStatus.NOT_FOUND, "Missing charging station id\n")

        if self.basic_auth_handler is not None:
            credentials = parse_basic_auth(request.headers.get("Authorization"))
            if credentials is None or not self.basic_auth_handler(*credentials):
                logger.warning(f"Rejected {peer_id}: invalid basic auth credentials")
                response = connection.respond(HTTPStatus.UNAUTHORIZED, "Unauthorized\n")
                response.headers["WWW-Authenticate"] = 'Basic realm="ocppj"'
                return response

        if self._check_peer_handler is not None and not self._check_peer_handler(peer_id, request):
            logger.warning(f"Rejected {peer_id}: check peer handler refused the connection")
            return connection.respond(HTTPStatus.UNAUTHORIZED, "Unauthorized\n")
        return None

    async def _on_connect(self, connection):
        peer_id = peer_id_from_path(connection.request.path)
        if self.subprotocols and connection.subprotocol not in self.subprotocols:
            requested = connection.request.headers.get("Sec-WebSocket-Protocol")
            logger.warning(
                f"Unsupported subprotocol requested by {peer_id}: {requested}, "
                f"expected one of {self.subprotocols}"
            )
            await connection.close(CloseCode.PROTOCOL_ERROR, "Unsupported protocol")
            return
        if peer_id in self._connections:
            logger.warning(f"Peer {peer_id} is already connected, refusing second connection")
            await connection.close(CloseCode.POLICY_VIOLATION, "Peer already connected")
            return

        self._connections[peer_id] = connection
        self.metrics.peer_connected()
        logger.info(f"Peer {peer_id} connected using {connection.subprotocol}")
        try:
            await self._notify_new_peer(peer_id)
            async for message in connection:
                self.metrics.record_message(peer_id, DIRECTION_INBOUND)
                try:
                    await self._deliver(peer_id, message)
                except Exception as e:
                    logger.exception(f"Error handling message from {peer_id}")
                    self._report_error(e)
        except ConnectionClosed as e:
            logger.info(f"Connection to {peer_id} closed: {e}")
            self._report_error(e)
        finally:
            self._connections.pop(peer_id, None)
            self.metrics.peer_disconnected()
            logger.info(f"Peer {peer_id} disconnected")
            await self._notify_peer_disconnected(peer_id)


class WebSocketClient(ClientTransport):
    """Single connection to a server, reconnecting after unexpected drops."""

    def __init__(
        self,
        timeout_config: Optional[ClientTimeoutConfig] = None,
        basic_auth: Optional[Tuple[str, str]] = None,
        additional_headers: Optional[dict] = None,
        ssl=None,
        reconnect_min_delay: float = config.RECONNECT_MIN_DELAY,
        reconnect_random_range: float = config.RECONNECT_RANDOM_RANGE,
        reconnect_repeat: int = config.RECONNECT_REPEAT,
    ):
        """
        Args:
            timeout_config: ClientTimeoutConfig for the connection
            basic_auth: optional (username, password) sent as Basic auth
            additional_headers: extra HTTP headers for the handshake
            ssl: optional ssl.SSLContext for wss
            reconnect_min_delay: minimum wait before a reconnection attempt
            reconnect_random_range: random extra wait added to each attempt
            reconnect_repeat: failed attempts after which the wait stops doubling
        """
        super().__init__()
        self.timeout_config = timeout_config or ClientTimeoutConfig()
        self.basic_auth = basic_auth
        self.additional_headers = dict(additional_headers or {})
        self.ssl = ssl
        self.reconnect_min_delay = reconnect_min_delay
        self.reconnect_random_range = reconnect_random_range
        self.reconnect_repeat = reconnect_repeat
        self.url = None
        self._connection = None
        self._reader = None
        self._stopping = False

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._connection.state is State.OPEN

    async def start(self, url: str):
        self.url = url
        self._stopping = False
        self._connection = await self._connect()
        logger.info(f"Connected to {url} using {self._connection.subprotocol}")
        self._reader = asyncio.create_task(self._read_loop())

    async def stop(self):
        self._stopping = True
        if self._connection is not None:
            await self._connection.close()
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
            self._reader = None
        logger.info(f"Disconnected from {self.url}")

    async def write(self, data: str):
        if not self.is_connected:
            raise ConnectionLostError("client is not connected")
        await asyncio.wait_for(self._connection.send(data), timeout=self.timeout_config.write_wait)

    async def _connect(self):
        headers = dict(self.additional_headers)
        if self.basic_auth is not None:
            headers["Authorization"] = basic_auth_header(*self.basic_auth)
        connection = await connect(
            self.url,
            subprotocols=self.subprotocols or None,
            additional_headers=headers,
            open_timeout=self.timeout_config.handshake_timeout,
            ping_interval=self.timeout_config.ping_period,
            ping_timeout=self.timeout_config.pong_wait,
            ssl=self.ssl,
        )
        if self.subprotocols and connection.subprotocol not in self.subprotocols:
            await connection.close()
            raise ConnectionError(
                f"server selected unsupported subprotocol {connection.subprotocol}"
            )
        return connection

    async def _read_loop(self):
        while True:
            error = None
            try:
                async for message in self._connection:
                    try:
                        await self._deliver(message)
                    except Exception as e:
                        logger.exception("Error handling message")
                        self._report_error(e)
            except ConnectionClosed as e:
                error = e
                self._report_error(e)
            if self._stopping:
                return
            logger.warning(f"Connection to {self.url} lost: {error}")
            await self._notify_disconnected(error)
            if not await self._reconnect():
                return
            await self._notify_reconnected()

    async def _reconnect(self) -> bool:
        """
        Reconnect until it succeeds or the client is stopped.

        The wait before each attempt is reconnect_min_delay plus a random
        share of reconnect_random_range. After a failed attempt the wait
        doubles, plus a new random share, for the first reconnect_repeat
        attempts; later attempts keep the last wait.
        """
        delay = self.reconnect_min_delay + random.uniform(0, self.reconnect_random_range)
        attempt = 1
        while True:
            logger.info(f"Reconnecting to {self.url} in {delay:.1f}s (attempt {attempt})")
            await asyncio.sleep(delay)
            if self._stopping:
                return False
            try:
                self._connection = await self._connect()
            except Exception as e:
                logger.error(f"Reconnection to {self.url} failed: {e}")
                self._report_error(e)
                if attempt < self.reconnect_repeat:
                    delay = delay * 2 + random.uniform(0, self.reconnect_random_range)
                attempt += 1
                continue
            logger.info(f"Reconnected to {self.url}")
            return True
