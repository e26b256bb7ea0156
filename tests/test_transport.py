import io
import os

import pytest
import trio

from presence_ipc.transport import NamedPipeStream, _PipeOpener, open_endpoint, open_named_pipe


class BrokenPipeFile(io.RawIOBase):
    def writable(self):
        return True

    def write(self, data):
        raise BrokenPipeError(32, "The pipe is being closed")


@pytest.mark.trio
async def test_pipe_send_and_receive():
    fileobj = io.BytesIO()
    stream = NamedPipeStream(fileobj)

    await stream.send_all(b"hello")
    fileobj.seek(0)

    assert await stream.receive_some(3) == b"hel"
    assert await stream.receive_some() == b"lo"
    assert await stream.receive_some() == b""


@pytest.mark.trio
async def test_pipe_closed():
    stream = NamedPipeStream(io.BytesIO())
    await stream.aclose()

    with pytest.raises(trio.ClosedResourceError):
        await stream.send_all(b"hello")

    with pytest.raises(trio.ClosedResourceError):
        await stream.receive_some(10)


@pytest.mark.trio
async def test_pipe_broken():
    stream = NamedPipeStream(BrokenPipeFile())

    with pytest.raises(trio.BrokenResourceError) as e:
        await stream.send_all(b"hello")

    assert isinstance(e.value.__cause__, BrokenPipeError)


@pytest.mark.trio
async def test_open_named_pipe(tmp_path):
    path = tmp_path / "discord-ipc-0"
    path.write_bytes(b"\x01\x00\x00\x00\x02\x00\x00\x00{}")

    stream = await open_endpoint(os.fspath(path), "win32")
    try:
        assert isinstance(stream, NamedPipeStream)
        assert await stream.receive_some(64) == b"\x01\x00\x00\x00\x02\x00\x00\x00{}"
    finally:
        await stream.aclose()


@pytest.mark.trio
async def test_open_missing_named_pipe(tmp_path):
    with pytest.raises(FileNotFoundError):
        await open_named_pipe(os.fspath(tmp_path / "discord-ipc-9"))


def test_pipe_opened_after_abandon_is_closed(tmp_path):
    path = tmp_path / "discord-ipc-0"
    path.write_bytes(b"")
    opener = _PipeOpener(os.fspath(path))

    opener.abandon()

    assert opener.open() is None
    assert opener.fileobj is None


def test_abandon_closes_opened_pipe(tmp_path):
    path = tmp_path / "discord-ipc-0"
    path.write_bytes(b"")
    opener = _PipeOpener(os.fspath(path))

    fileobj = opener.open()
    opener.abandon()

    assert fileobj.closed


@pytest.mark.trio
async def test_open_named_pipe_cancelled(tmp_path, monkeypatch):
    path = tmp_path / "discord-ipc-0"
    path.write_bytes(b"")
    openers = []

    async def slow_open(fn, *args, **kwargs):
        openers.append(fn.__self__)
        fn(*args)
        await trio.sleep_forever()

    monkeypatch.setattr(trio.to_thread, "run_sync", slow_open)

    with trio.move_on_after(0.01) as scope:
        await open_named_pipe(os.fspath(path))

    assert scope.cancelled_caught
    assert openers[0].abandoned
    assert openers[0].fileobj.closed
