"""
Bookkeeping of requests awaiting a response.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ocppj.errors import DuplicateMessageIdError
from ocppj.feature import Feature


@dataclass
class PendingRequest:
    message_id: str
    feature: Feature
    request: Any
    callback: Optional[Callable]
    frame: str
    timer: Optional[asyncio.TimerHandle] = None

    @property
    def action(self):
        return self.feature.action

    def cancel_timer(self):
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class RequestState:
    """Pending requests of a single peer, keyed by message id."""

    def __init__(self):
        self._pending = {}

    def add_pending(self, entry):
        if entry.message_id in self._pending:
            raise DuplicateMessageIdError(
                f"request with message id {entry.message_id} is already pending"
            )
        self._pending[entry.message_id] = entry

    def get_pending(self, message_id):
        return self._pending.get(message_id)

    def take_pending(self, message_id):
        return self._pending.pop(message_id, None)

    def clear_pending(self):
        """Remove every pending entry and return them."""
        entries = list(self._pending.values())
        self._pending.clear()
        return entries

    def has_pending(self, message_id=None):
        if message_id is None:
            return bool(self._pending)
        return message_id in self._pending

    @property
    def pending_ids(self):
        return list(self._pending)


class ServerState:
    """One RequestState per connected peer."""

    def __init__(self):
        self._peers = {}

    def for_peer(self, peer_id):
        if peer_id not in self._peers:
            self._peers[peer_id] = RequestState()
        return self._peers[peer_id]

    def get(self, peer_id):
        return self._peers.get(peer_id)

    def remove_peer(self, peer_id):
        return self._peers.pop(peer_id, None)

    def has_pending(self, peer_id):
        state = self._peers.get(peer_id)
        return state is not None and state.has_pending()

    def __contains__(self, peer_id):
        return peer_id in self._peers
