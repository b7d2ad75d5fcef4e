"""
Per-peer request dispatcher.

A dispatcher keeps at most one request in flight towards its peer. Further
requests wait in the queue and are written, in order, once the in-flight
request completes with a response, an error, a timeout or a connection loss.

All methods run on the event loop thread; no locking is involved.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from ocppj import config
from ocppj.errors import ConnectionLostError, RequestTimeoutError
from ocppj.queue import FIFOQueue, RequestQueue
from ocppj.state import PendingRequest, RequestState


class RequestDispatcher:
    def __init__(
        self,
        peer_id: str,
        state: RequestState,
        write: Callable[[str], Awaitable[None]],
        queue: Optional[RequestQueue] = None,
        queue_capacity: int = config.QUEUE_CAPACITY,
        timeout: float = config.RESPONSE_TIMEOUT,
        retain_queue: bool = config.RETAIN_QUEUE_ON_DISCONNECT,
    ):
        """
        Args:
            peer_id: identity of the peer requests are sent to
            state: RequestState holding the in-flight entry
            write: coroutine function taking the frame text
            queue: RequestQueue for waiting requests, FIFO by default
            queue_capacity: capacity of the default queue
            timeout: response deadline in seconds
            retain_queue: keep waiting requests across a disconnect
        """
        self.peer_id = peer_id
        self.state = state
        self.queue = queue if queue is not None else FIFOQueue(queue_capacity)
        self.timeout = timeout
        self.retain_queue = retain_queue
        self._write = write
        self._in_flight = None
        self._connected = False
        self._tasks = set()

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def in_flight(self) -> Optional[PendingRequest]:
        return self._in_flight

    def is_idle(self) -> bool:
        return self._in_flight is None and self.queue.is_empty()

    def has_message_id(self, message_id: str) -> bool:
        if self.state.has_pending(message_id):
            return True
        return any(entry.message_id == message_id for entry in self.queue)

    def send(self, entry: PendingRequest):
        """
        Accept a request for delivery.

        The request is written immediately when the peer is connected and
        idle, otherwise it waits in the queue.

        Raises:
            QueueFullError: if it has to wait and the queue is full
        """
        if self._connected and self.is_idle():
            self._dispatch(entry)
            return
        self.queue.push(entry)
        logger.debug(
            f"Queued {entry.action} ({entry.message_id}) for {self.peer_id}, "
            f"{len(self.queue)} waiting"
        )

    def _dispatch(self, entry):
        loop = asyncio.get_running_loop()
        self.state.add_pending(entry)
        self._in_flight = entry
        entry.timer = loop.call_later(self.timeout, self._on_timeout, entry.message_id)
        task = loop.create_task(self._write_frame(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _write_frame(self, entry):
        logger.debug(f"Sending {entry.action} ({entry.message_id}) to {self.peer_id}: {entry.frame}")
        try:
            await self._write(entry.frame)
        except Exception as e:
            logger.error(f"Failed to send {entry.action} ({entry.message_id}) to {self.peer_id}: {e}")
            if self._in_flight is entry:
                error = ConnectionLostError(
                    f"couldn't send {entry.action} ({entry.message_id}) to {self.peer_id}: {e}"
                )
                error.__cause__ = e
                self.complete(entry.message_id, None, error)

    def complete(self, message_id: str, response=None, error: Optional[Exception] = None) -> bool:
        """
        Finish the in-flight request with a response or an error.

        Returns:
            bool: False if no request with this id was pending
        """
        entry = self.state.take_pending(message_id)
        if entry is None:
            logger.warning(f"No previous request {message_id} sent. Discarding response message")
            return False
        self._finish(entry, response, error)
        self._advance()
        return True

    def _on_timeout(self, message_id):
        entry = self.state.take_pending(message_id)
        if entry is None:
            return
        entry.timer = None
        logger.warning(
            f"Request {entry.action} ({message_id}) to {self.peer_id} timed out after {self.timeout}s"
        )
        error = RequestTimeoutError(
            f"request {message_id} ({entry.action}) timed out after {self.timeout}s"
        )
        self._finish(entry, None, error)
        self._advance()

    def _finish(self, entry, response, error):
        entry.cancel_timer()
        if self._in_flight is entry:
            self._in_flight = None
        _invoke_callback(entry, response, error)

    def _advance(self):
        if self._in_flight is not None or not self._connected:
            return
        entry = self.queue.pop()
        if entry is not None:
            self._dispatch(entry)

    def connect(self):
        """Mark the peer connected and resume sending any waiting requests."""
        self._connected = True
        if not self.queue.is_empty():
            logger.info(f"Resuming {len(self.queue)} queued request(s) for {self.peer_id}")
        self._advance()

    def connection_lost(self):
        """
        Fail the in-flight request with ConnectionLostError.

        Waiting requests fail as well, unless retain_queue is set, in which
        case they are sent after the next connect.
        """
        self._connected = False
        failed = self.state.clear_pending()
        if self._in_flight is not None and self._in_flight not in failed:
            failed.append(self._in_flight)
        self._in_flight = None
        if not self.retain_queue:
            failed.extend(self.queue.clear())
        for entry in failed:
            entry.cancel_timer()
            _invoke_callback(
                entry, None, ConnectionLostError(f"connection to {self.peer_id} lost")
            )

    def close(self):
        """Stop the dispatcher, failing everything outstanding."""
        self.retain_queue, retain = False, self.retain_queue
        try:
            self.connection_lost()
        finally:
            self.retain_queue = retain
        for task in list(self._tasks):
            task.cancel()


def _invoke_callback(entry, response, error):
    if entry.callback is None:
        return
    try:
        entry.callback(response, error)
    except Exception:
        logger.exception(f"Callback for {entry.action} ({entry.message_id}) raised")
