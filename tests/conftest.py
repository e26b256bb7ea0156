"""Pytest fixtures for presence_ipc tests."""
import errno

import pytest
import trio

from presence_ipc.packet import IPCOpcode, IPCPacket

READY = {
    "cmd": "DISPATCH",
    "evt": "READY",
    "data": {"v": 1, "config": {"api_endpoint": "//discord.com/api"}},
}


class FakeStream(trio.abc.Stream):
    """An in-memory stream that replays scripted reads and records writes."""

    def __init__(self, incoming=(), fail_send=None, close_error=None):
        self.incoming = list(incoming)
        self.sent = []
        self.closed = False
        self._fail_send = fail_send
        self._close_error = close_error

    @property
    def packets(self):
        return [IPCPacket.deserialize(data) for data in self.sent]

    async def send_all(self, data):
        await trio.lowlevel.checkpoint()
        if self._fail_send is not None:
            error = self._fail_send(len(self.sent))
            if error is not None:
                raise error

        self.sent.append(bytes(data))

    async def wait_send_all_might_not_block(self):
        await trio.lowlevel.checkpoint()

    async def receive_some(self, max_bytes=None):
        await trio.lowlevel.checkpoint()
        if not self.incoming:
            return b""

        return self.incoming.pop(0)

    async def aclose(self):
        self.closed = True
        if self._close_error is not None:
            raise self._close_error

        await trio.lowlevel.checkpoint()


class FakeLocator:
    """Hands out the given streams (or raises the given errors) one per call."""

    def __init__(self, *streams):
        self.streams = list(streams)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await trio.lowlevel.checkpoint()
        stream = self.streams.pop(0)
        if isinstance(stream, BaseException):
            raise stream

        return stream


def _frame(opcode, data) -> bytes:
    return IPCPacket.from_json(opcode, data).serialize()


def _broken_pipe() -> trio.BrokenResourceError:
    error = trio.BrokenResourceError("socket connection broken")
    error.__cause__ = BrokenPipeError(errno.EPIPE, "Broken pipe")
    return error


@pytest.fixture
def ready_frame():
    return _frame(IPCOpcode.FRAME, READY)


@pytest.fixture
def make_stream(ready_frame):
    """Creates a FakeStream that answers the handshake, followed by ``incoming``."""
    def factory(*incoming, **kwargs):
        return FakeStream([ready_frame, *incoming], **kwargs)

    return factory


@pytest.fixture
def fake_locator():
    return FakeLocator


@pytest.fixture
def fake_stream():
    return FakeStream


@pytest.fixture
def make_frame():
    return _frame


@pytest.fixture
def broken_pipe():
    return _broken_pipe
