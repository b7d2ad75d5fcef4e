"""
Client endpoint, run by a charging station.
"""

import asyncio
from typing import Iterable, Optional

from loguru import logger

from ocppj.dispatcher import RequestDispatcher
from ocppj.endpoint import Endpoint, ResponseCallback, call_handler
from ocppj.errors import NotStartedError
from ocppj.feature import Profile, Role
from ocppj.messages import Dialect
from ocppj.queue import RequestQueue
from ocppj.state import RequestState
from ocppj.transport.base import ClientTransport


class Client(Endpoint):
    role = Role.CHARGING_STATION

    def __init__(
        self,
        id: str,
        transport: ClientTransport,
        dialect: Dialect,
        profiles: Iterable[Profile],
        queue: Optional[RequestQueue] = None,
        **kwargs,
    ):
        """
        Args:
            id: charging station identity, appended to the server URL
            transport: ClientTransport
            dialect: protocol Dialect (V16 or V201)
            profiles: iterable of Profile supported by this client
            queue: optional RequestQueue replacing the default FIFO
            **kwargs: queue_capacity, response_timeout, retain_queue,
                meter_provider
        """
        super().__init__(dialect, profiles, **kwargs)
        self.id = id
        self.transport = transport
        self.state = RequestState()
        self.dispatcher = RequestDispatcher(
            id,
            self.state,
            transport.write,
            queue=queue,
            queue_capacity=self.queue_capacity,
            timeout=self.response_timeout,
            retain_queue=self.retain_queue,
        )
        self._started = False
        self._disconnected_handler = None
        self._reconnected_handler = None
        transport.add_subprotocol(dialect.subprotocol)
        transport.set_message_handler(self._on_transport_message)
        transport.set_disconnected_handler(self._on_disconnected)
        transport.set_reconnected_handler(self._on_reconnected)

    @property
    def name(self) -> str:
        return self.dialect.client_name

    @property
    def is_connected(self) -> bool:
        return self._started and self.transport.is_connected

    def set_disconnected_handler(self, handler):
        """handler(error), sync or async, runs when the connection drops."""
        self._disconnected_handler = handler

    def set_reconnected_handler(self, handler):
        """handler(), sync or async, runs after an automatic reconnection."""
        self._reconnected_handler = handler

    async def start(self, url: str):
        """
        Connect to the server at {url}/{id}.

        Raises:
            OSError, websockets.exceptions.WebSocketException: if the
                connection could not be established
        """
        full_url = f"{url.rstrip('/')}/{self.id}"
        await self.transport.start(full_url)
        self._started = True
        self.dispatcher.connect()
        logger.info(f"{self.name.capitalize()} {self.id} started on {full_url}")

    async def stop(self):
        """Close the connection and fail every outstanding request."""
        self._started = False
        await self.transport.stop()
        self.dispatcher.close()
        logger.info(f"{self.name.capitalize()} {self.id} stopped")

    def send_request(
        self,
        request,
        callback: Optional[ResponseCallback] = None,
        message_id: Optional[str] = None,
    ) -> str:
        """
        Send a request to the server.

        The outcome is delivered as callback(response, error) once the
        response, a CallError, a timeout or a connection loss arrives.

        Returns:
            str: message id of the request

        Raises:
            NotStartedError, UnsupportedActionError, QueueFullError,
            ValidationError: the request was rejected; callback has already
                been invoked with the same error
        """
        if not self._started:
            error = NotStartedError(f"{self.name} {self.id} is not started, couldn't send request")
            self._reject(self.id, request, callback, error)
            raise error
        return self._submit(self.dispatcher, request, callback, message_id)

    async def call(self, request):
        """
        Send a request and wait for its response.

        Raises:
            OcppError: the server replied with a CallError
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
            self.send_request(request, on_result)
        except Exception:
            # Rejections resolve the future through on_result and re-raise below
            if not future.done():
                raise
        return await future

    async def _on_transport_message(self, data):
        await self._handle_message(self.id, data)

    async def _on_disconnected(self, error):
        logger.warning(f"{self.name.capitalize()} {self.id} disconnected: {error}")
        self.dispatcher.connection_lost()
        if self._disconnected_handler is not None:
            await call_handler(self._disconnected_handler, error)

    async def _on_reconnected(self):
        logger.info(f"{self.name.capitalize()} {self.id} reconnected")
        self.dispatcher.connect()
        if self._reconnected_handler is not None:
            await call_handler(self._reconnected_handler)

    def _dispatcher_for(self, peer_id):
        return self.dispatcher

    def _handler_args(self, handler, peer_id, request):
        return handler, request

    async def _write_to(self, peer_id, frame):
        await self.transport.write(frame)
