"""
Server endpoint, run by a central system / CSMS.
"""

import asyncio
from typing import Callable, Iterable, List, Optional

from loguru import logger

from ocppj import config
from ocppj.dispatcher import RequestDispatcher
from ocppj.endpoint import Endpoint, ResponseCallback, call_handler
from ocppj.errors import ConnectionLostError, NotStartedError
from ocppj.feature import Profile, Role
from ocppj.messages import Dialect
from ocppj.queue import RequestQueue
from ocppj.state import ServerState
from ocppj.transport.base import ServerTransport


class Server(Endpoint):
    role = Role.CSMS

    def __init__(
        self,
        transport: ServerTransport,
        dialect: Dialect,
        profiles: Iterable[Profile],
        queue_factory: Optional[Callable[[], RequestQueue]] = None,
        **kwargs,
    ):
        """
        Args:
            transport: ServerTransport
            dialect: protocol Dialect (V16 or V201)
            profiles: iterable of Profile supported by this server
            queue_factory: optional callable returning a RequestQueue per peer
            **kwargs: queue_capacity, response_timeout, retain_queue,
                meter_provider
        """
        super().__init__(dialect, profiles, **kwargs)
        self.transport = transport
        self.state = ServerState()
        self._queue_factory = queue_factory
        self._dispatchers = {}
        self._started = False
        self._new_peer_handler = None
        self._peer_disconnected_handler = None
        transport.add_subprotocol(dialect.subprotocol)
        transport.set_message_handler(self._handle_message)
        transport.set_new_peer_handler(self._on_new_peer)
        transport.set_peer_disconnected_handler(self._on_peer_disconnected)

    @property
    def name(self) -> str:
        return self.dialect.server_name

    @property
    def connected_peers(self) -> List[str]:
        return [peer_id for peer_id, dispatcher in self._dispatchers.items() if dispatcher.connected]

    def set_new_peer_handler(self, handler):
        """handler(peer_id), sync or async, runs after a peer connected."""
        self._new_peer_handler = handler

    def set_peer_disconnected_handler(self, handler):
        """handler(peer_id), sync or async, runs after a peer disconnected."""
        self._peer_disconnected_handler = handler

    def set_check_peer_handler(self, handler):
        """handler(peer_id, request) -> bool, called before accepting a peer."""
        self.transport.set_check_peer_handler(handler)

    async def start(
        self,
        port: int = config.PORT,
        listen_path: str = config.LISTEN_PATH,
        host: Optional[str] = None,
    ):
        await self.transport.start(port, listen_path, host)
        self._started = True
        logger.info(f"{self.name.capitalize()} started on port {port}")

    async def stop(self):
        """Close every peer connection and fail their outstanding requests."""
        self._started = False
        await self.transport.stop()
        for peer_id in list(self._dispatchers):
            self._drop_peer(peer_id, force=True)
        logger.info(f"{self.name.capitalize()} stopped")

    def send_request(
        self,
        peer_id: str,
        request,
        callback: Optional[ResponseCallback] = None,
        message_id: Optional[str] = None,
    ) -> str:
        """
        Send a request to a connected peer.

        The outcome is delivered as callback(response, error).

        Returns:
            str: message id of the request

        Raises:
            NotStartedError, ConnectionLostError, UnsupportedActionError,
            QueueFullError, ValidationError: the request was rejected;
                callback has already been invoked with the same error
        """
        error = None
        if not self._started:
            error = NotStartedError(f"{self.name} is not started, couldn't send request")
        elif peer_id not in self._dispatchers:
            error = ConnectionLostError(f"peer {peer_id} is not connected, couldn't send request")
        if error is not None:
            self._reject(peer_id, request, callback, error)
            raise error
        return self._submit(self._dispatchers[peer_id], request, callback, message_id)

    async def call(self, peer_id: str, request):
        """
        Send a request to a peer and wait for its response.

        Raises:
            OcppError: the peer replied with a CallError
            LocalError: timeout, connection loss or rejection
        """
        future = asyncio.get_running_loop().create_future()

        def on_result(response, error):
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(response)

        try:
            self.send_request(peer_id, request, on_result)
        except Exception:
            # Rejections resolve the future through on_result and re-raise below
            if not future.done():
                raise
        return await future

    async def _on_new_peer(self, peer_id):
        dispatcher = self._dispatchers.get(peer_id)
        if dispatcher is None:
            dispatcher = RequestDispatcher(
                peer_id,
                self.state.for_peer(peer_id),
                lambda frame: self.transport.write(peer_id, frame),
                queue=self._queue_factory() if self._queue_factory else None,
                queue_capacity=self.queue_capacity,
                timeout=self.response_timeout,
                retain_queue=self.retain_queue,
            )
            self._dispatchers[peer_id] = dispatcher
        logger.info(f"New peer {peer_id} connected to {self.name}")
        dispatcher.connect()
        if self._new_peer_handler is not None:
            await call_handler(self._new_peer_handler, peer_id)

    async def _on_peer_disconnected(self, peer_id):
        logger.info(f"Peer {peer_id} disconnected from {self.name}")
        self._drop_peer(peer_id)
        if self._peer_disconnected_handler is not None:
            await call_handler(self._peer_disconnected_handler, peer_id)

    def _drop_peer(self, peer_id, force=False):
        dispatcher = self._dispatchers.get(peer_id)
        if dispatcher is None:
            return
        if force:
            dispatcher.close()
        else:
            dispatcher.connection_lost()
        if force or not dispatcher.retain_queue or dispatcher.queue.is_empty():
            del self._dispatchers[peer_id]
            self.state.remove_peer(peer_id)

    def _dispatcher_for(self, peer_id):
        return self._dispatchers.get(peer_id)

    def _handler_args(self, handler, peer_id, request):
        return handler, peer_id, request

    async def _write_to(self, peer_id, frame):
        await self.transport.write(peer_id, frame)
