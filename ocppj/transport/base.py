"""
Transport interfaces consumed by the endpoints.

Handlers registered on a transport are coroutine functions; the transport
awaits them in the order events happen on each connection.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger


class Transport(ABC):
    def __init__(self):
        self.subprotocols = []
        self._message_handler = None
        self._errors = None

    def add_subprotocol(self, subprotocol: str):
        if subprotocol not in self.subprotocols:
            self.subprotocols.append(subprotocol)

    def set_message_handler(self, handler):
        self._message_handler = handler

    def errors(self) -> asyncio.Queue:
        """Queue of asynchronous transport errors. Informational only."""
        if self._errors is None:
            self._errors = asyncio.Queue()
        return self._errors

    def _report_error(self, error):
        if self._errors is not None:
            self._errors.put_nowait(error)


class ServerTransport(Transport):
    def __init__(self):
        super().__init__()
        self._new_peer_handler = None
        self._peer_disconnected_handler = None
        self._check_peer_handler = None

    def set_new_peer_handler(self, handler):
        """handler(peer_id) is awaited once a peer has connected."""
        self._new_peer_handler = handler

    def set_peer_disconnected_handler(self, handler):
        """handler(peer_id) is awaited once a peer connection has closed."""
        self._peer_disconnected_handler = handler

    def set_check_peer_handler(self, handler):
        """handler(peer_id, request) -> bool decides whether to accept a peer."""
        self._check_peer_handler = handler

    async def _notify_new_peer(self, peer_id):
        if self._new_peer_handler is not None:
            await self._new_peer_handler(peer_id)

    async def _notify_peer_disconnected(self, peer_id):
        if self._peer_disconnected_handler is not None:
            await self._peer_disconnected_handler(peer_id)

    async def _deliver(self, peer_id, data):
        if self._message_handler is None:
            logger.warning(f"No message handler set, dropping message from {peer_id}")
            return
        await self._message_handler(peer_id, data)

    @abstractmethod
    async def start(self, port: int, path: str, host: Optional[str] = None):
        """Start accepting peers."""

    @abstractmethod
    async def stop(self):
        """Close every peer connection and stop listening."""

    @abstractmethod
    async def write(self, peer_id: str, data: str):
        """Send a frame to a connected peer."""


class ClientTransport(Transport):
    def __init__(self):
        super().__init__()
        self._disconnected_handler = None
        self._reconnected_handler = None

    def set_disconnected_handler(self, handler):
        """handler(error) is awaited when the connection drops unexpectedly."""
        self._disconnected_handler = handler

    def set_reconnected_handler(self, handler):
        """handler() is awaited after an automatic reconnection succeeded."""
        self._reconnected_handler = handler

    async def _notify_disconnected(self, error):
        if self._disconnected_handler is not None:
            await self._disconnected_handler(error)

    async def _notify_reconnected(self):
        if self._reconnected_handler is not None:
            await self._reconnected_handler()

    async def _deliver(self, data):
        if self._message_handler is None:
            logger.warning("No message handler set, dropping message")
            return
        await self._message_handler(data)

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True while the connection is open."""

    @abstractmethod
    async def start(self, url: str):
        """Connect to the server at url."""

    @abstractmethod
    async def stop(self):
        """Close the connection without reconnecting."""

    @abstractmethod
    async def write(self, data: str):
        """Send a frame to the server."""
