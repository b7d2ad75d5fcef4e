"""
Test the per-peer request dispatcher: one request in flight, queueing,
timeouts and connection loss.
"""

import asyncio

import pytest

from ocppj.dispatcher import RequestDispatcher
from ocppj.errors import ConnectionLostError, QueueFullError, RequestTimeoutError
from ocppj.state import PendingRequest, RequestState
from ocppj.v16 import core

from mock_transport import settle


class Recorder:
    """Write function recording frames, plus a callback log."""

    def __init__(self, fail=False):
        self.frames = []
        self.results = []
        self.fail = fail

    async def write(self, frame):
        if self.fail:
            raise ConnectionError("broken pipe")
        self.frames.append(frame)

    def callback_for(self, message_id):
        return lambda response, error: self.results.append((message_id, response, error))


def _entry(recorder, message_id):
    return PendingRequest(
        message_id,
        core.Heartbeat,
        core.HeartbeatRequest(),
        recorder.callback_for(message_id),
        f'[2,"{message_id}","Heartbeat",{{}}]',
    )


def _dispatcher(recorder, **kwargs):
    dispatcher = RequestDispatcher("cp1", RequestState(), recorder.write, **kwargs)
    dispatcher.connect()
    return dispatcher


async def test_one_request_in_flight():
    """Test that the next Call is written only after the previous one completed."""
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, queue_capacity=5)

    for message_id in ("1", "2", "3"):
        dispatcher.send(_entry(recorder, message_id))
    await settle()

    assert recorder.frames == ['[2,"1","Heartbeat",{}]']
    assert dispatcher.in_flight.message_id == "1"
    assert len(dispatcher.queue) == 2

    assert dispatcher.complete("1", "ok-1")
    await settle()
    assert len(recorder.frames) == 2
    assert recorder.frames[1] == '[2,"2","Heartbeat",{}]'

    dispatcher.complete("2", "ok-2")
    await settle()
    dispatcher.complete("3", "ok-3")
    await settle()

    assert [frame[4:5] for frame in recorder.frames] == ["1", "2", "3"]
    assert [result[:2] for result in recorder.results] == [("1", "ok-1"), ("2", "ok-2"), ("3", "ok-3")]
    assert dispatcher.is_idle()


async def test_zero_capacity_rejects_second_request():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, queue_capacity=0)

    dispatcher.send(_entry(recorder, "1"))
    with pytest.raises(QueueFullError):
        dispatcher.send(_entry(recorder, "2"))
    await settle()

    assert len(recorder.frames) == 1


async def test_timeout_completes_once():
    """Test that a timed out request fails with RequestTimeoutError exactly once."""
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, timeout=0.05)

    dispatcher.send(_entry(recorder, "1"))
    dispatcher.send(_entry(recorder, "2"))
    for _ in range(100):
        if recorder.results:
            break
        await asyncio.sleep(0.01)

    assert len(recorder.results) == 1
    message_id, response, error = recorder.results[0]
    assert message_id == "1"
    assert response is None
    assert isinstance(error, RequestTimeoutError)

    # Late response for the timed out request is dropped
    assert not dispatcher.complete("1", "late")
    assert len(recorder.results) == 1

    # The queued request went out after the timeout
    await settle()
    assert recorder.frames[-1] == '[2,"2","Heartbeat",{}]'
    dispatcher.close()


async def test_connection_lost_fails_pending_and_queued():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder)

    dispatcher.send(_entry(recorder, "1"))
    dispatcher.send(_entry(recorder, "2"))
    await settle()
    dispatcher.connection_lost()

    assert [result[0] for result in recorder.results] == ["1", "2"]
    assert all(isinstance(result[2], ConnectionLostError) for result in recorder.results)
    assert dispatcher.is_idle()
    assert not dispatcher.state.has_pending()

    # A late response after the disconnect is discarded
    assert not dispatcher.complete("1", "late")
    assert len(recorder.results) == 2


async def test_retained_queue_resumes_on_connect():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, retain_queue=True)

    dispatcher.send(_entry(recorder, "1"))
    dispatcher.send(_entry(recorder, "2"))
    await settle()
    dispatcher.connection_lost()

    assert [result[0] for result in recorder.results] == ["1"]
    assert len(dispatcher.queue) == 1

    dispatcher.connect()
    await settle()
    assert recorder.frames[-1] == '[2,"2","Heartbeat",{}]'
    dispatcher.close()


async def test_requests_wait_until_connected():
    recorder = Recorder()
    dispatcher = RequestDispatcher("cp1", RequestState(), recorder.write)

    dispatcher.send(_entry(recorder, "1"))
    await settle()
    assert recorder.frames == []

    dispatcher.connect()
    await settle()
    assert recorder.frames == ['[2,"1","Heartbeat",{}]']
    dispatcher.close()


async def test_write_failure_completes_with_connection_lost():
    """Test that a failed write ends the request with ConnectionLostError, keeping the cause."""
    recorder = Recorder(fail=True)
    dispatcher = _dispatcher(recorder)

    dispatcher.send(_entry(recorder, "1"))
    await settle()

    assert len(recorder.results) == 1
    message_id, response, error = recorder.results[0]
    assert message_id == "1"
    assert response is None
    assert isinstance(error, ConnectionLostError)
    assert isinstance(error.__cause__, ConnectionError)
    assert "broken pipe" in str(error)
    assert dispatcher.is_idle()


async def test_write_failure_sends_next_request():
    recorder = Recorder()
    failures = [ConnectionError("broken pipe")]

    async def write(frame):
        if failures:
            raise failures.pop()
        await recorder.write(frame)

    dispatcher = RequestDispatcher("cp1", RequestState(), write)
    dispatcher.connect()
    dispatcher.send(_entry(recorder, "1"))
    dispatcher.send(_entry(recorder, "2"))
    await settle()

    assert [result[0] for result in recorder.results] == ["1"]
    assert isinstance(recorder.results[0][2], ConnectionLostError)
    assert recorder.frames == ['[2,"2","Heartbeat",{}]']
    dispatcher.close()


async def test_has_message_id_covers_queue():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder)

    dispatcher.send(_entry(recorder, "1"))
    dispatcher.send(_entry(recorder, "2"))

    assert dispatcher.has_message_id("1")
    assert dispatcher.has_message_id("2")
    assert not dispatcher.has_message_id("3")
    dispatcher.close()


async def test_callback_exceptions_do_not_break_dispatch():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder)

    def broken(response, error):
        raise RuntimeError("boom")

    entry = _entry(recorder, "1")
    entry.callback = broken
    dispatcher.send(entry)
    dispatcher.send(_entry(recorder, "2"))
    await settle()

    dispatcher.complete("1", "ok")
    await settle()
    assert recorder.frames[-1] == '[2,"2","Heartbeat",{}]'
    dispatcher.close()
