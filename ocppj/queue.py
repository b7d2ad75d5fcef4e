"""
Outbound request queues.

A queue buffers requests waiting behind the one currently in flight for a
peer. Capacity 0 means no buffering: a request can only be sent when the
peer is idle.
"""

from abc import ABC, abstractmethod
from collections import deque

from ocppj.errors import QueueFullError


class RequestQueue(ABC):
    def __init__(self, capacity):
        if capacity < 0:
            raise ValueError(f"invalid queue capacity {capacity}")
        self.capacity = capacity
        self._items = deque()

    def push(self, item):
        """
        Add a request to the queue.

        Raises:
            QueueFullError: if the queue already holds capacity items
        """
        if self.is_full():
            raise QueueFullError(f"request queue is full, max capacity {self.capacity} reached")
        self._items.append(item)

    @abstractmethod
    def peek(self):
        """Next request to send, or None."""

    @abstractmethod
    def pop(self):
        """Remove and return the next request to send, or None."""

    def clear(self):
        """Empty the queue, returning the removed requests in send order."""
        drained = []
        while not self.is_empty():
            drained.append(self.pop())
        return drained

    def is_empty(self):
        return not self._items

    def is_full(self):
        return len(self._items) >= self.capacity

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))


class FIFOQueue(RequestQueue):
    def peek(self):
        return self._items[0] if self._items else None

    def pop(self):
        return self._items.popleft() if self._items else None


class LIFOQueue(RequestQueue):
    def peek(self):
        return self._items[-1] if self._items else None

    def pop(self):
        return self._items.pop() if self._items else None
