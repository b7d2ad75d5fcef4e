"""
In-memory transports for exercising endpoints without a network.

Frames written by an endpoint are recorded; tests inject inbound frames and
connection events directly.
"""

import asyncio

from ocppj.transport.base import ClientTransport, ServerTransport


async def settle(rounds=5):
    """Let pending write tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class MockServerTransport(ServerTransport):
    def __init__(self):
        super().__init__()
        self.started = False
        self.peers = set()
        self.written = []
        self.fail_writes = False

    async def start(self, port, path, host=None):
        self.started = True

    async def stop(self):
        self.started = False
        for peer_id in list(self.peers):
            await self.disconnect_peer(peer_id)

    async def write(self, peer_id, data):
        if self.fail_writes:
            raise ConnectionError(f"write to {peer_id} failed")
        if peer_id not in self.peers:
            raise ConnectionError(f"peer {peer_id} is not connected")
        self.written.append((peer_id, data))

    async def connect_peer(self, peer_id):
        self.peers.add(peer_id)
        await self._notify_new_peer(peer_id)

    async def disconnect_peer(self, peer_id):
        self.peers.discard(peer_id)
        await self._notify_peer_disconnected(peer_id)

    async def receive(self, peer_id, data):
        await self._deliver(peer_id, data)

    def frames_for(self, peer_id):
        return [data for target, data in self.written if target == peer_id]


class MockClientTransport(ClientTransport):
    def __init__(self):
        super().__init__()
        self.url = None
        self.connected = False
        self.written = []
        self.fail_writes = False

    @property
    def is_connected(self):
        return self.connected

    async def start(self, url):
        self.url = url
        self.connected = True

    async def stop(self):
        self.connected = False

    async def write(self, data):
        if self.fail_writes:
            raise ConnectionError("write failed")
        if not self.connected:
            raise ConnectionError("not connected")
        self.written.append(data)

    async def drop(self, error=None):
        """Simulate an unexpected connection loss."""
        self.connected = False
        await self._notify_disconnected(error or ConnectionError("connection reset"))

    async def reconnect(self):
        self.connected = True
        await self._notify_reconnected()

    async def receive(self, data):
        await self._deliver(data)
