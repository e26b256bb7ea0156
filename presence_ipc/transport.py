# This file is part of presence_ipc.
#
# presence_ipc is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# presence_ipc is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with presence_ipc.  If not, see <http://www.gnu.org/licenses/>.

"""
Local duplex byte streams used to talk to the Discord client.

On POSIX systems this is a Unix domain socket, wrapped in a :class:`trio.SocketStream`. On Windows
it is a named pipe, wrapped in a :class:`.NamedPipeStream`.

.. currentmodule:: presence_ipc.transport
"""
import io
import sys
import threading

import trio


def _translate_errors(fn, *args):
    try:
        return fn(*args)
    except ValueError as e:
        # raised by the file object once it has been closed
        raise trio.ClosedResourceError("pipe was already closed") from e
    except OSError as e:
        raise trio.BrokenResourceError("pipe connection broken: {}".format(e)) from e


class NamedPipeStream(trio.abc.Stream):
    """
    A :class:`trio.abc.Stream` over a Windows named pipe.

    The pipe is opened as a plain unbuffered file; every read and write runs in a worker thread.
    """

    def __init__(self, fileobj: io.RawIOBase):
        self._file = fileobj

    async def send_all(self, data: bytes) -> None:
        if self._file.closed:
            raise trio.ClosedResourceError("pipe was already closed")

        view = memoryview(data)
        while view:
            written = await trio.to_thread.run_sync(_translate_errors, self._file.write, view)
            view = view[written:]

    async def wait_send_all_might_not_block(self) -> None:
        await trio.lowlevel.checkpoint()

    async def receive_some(self, max_bytes: int = None) -> bytes:
        if self._file.closed:
            raise trio.ClosedResourceError("pipe was already closed")

        if max_bytes is None:
            max_bytes = 65536

        data = await trio.to_thread.run_sync(_translate_errors, self._file.read, max_bytes)
        return data or b""

    async def aclose(self) -> None:
        self._file.close()
        await trio.lowlevel.checkpoint()


class _PipeOpener(object):
    """
    Opens a pipe in a worker thread that may be abandoned by a timeout.

    A pipe that finishes opening after the caller gave up is closed instead of leaked.
    """

    def __init__(self, name: str):
        self.name = name
        self.fileobj = None
        self.abandoned = False
        self._lock = threading.Lock()

    def open(self) -> io.RawIOBase:
        fileobj = open(self.name, "r+b", 0)
        with self._lock:
            if self.abandoned:
                fileobj.close()
                return None

            self.fileobj = fileobj

        return fileobj

    def abandon(self) -> None:
        with self._lock:
            self.abandoned = True
            if self.fileobj is not None:
                self.fileobj.close()


async def open_named_pipe(name: str) -> NamedPipeStream:
    """
    Opens a Windows named pipe.

    :param name: The full pipe name, e.g. ``\\\\.\\pipe\\discord-ipc-0``.
    """
    opener = _PipeOpener(name)
    try:
        fileobj = await trio.to_thread.run_sync(opener.open, abandon_on_cancel=True)
    except trio.Cancelled:
        opener.abandon()
        raise

    return NamedPipeStream(fileobj)


async def open_endpoint(address: str, platform: str = None) -> trio.abc.Stream:
    """
    Opens a connection to the local endpoint at ``address``.

    :param address: The socket path or pipe name.
    :param platform: The platform to open for. Defaults to ``sys.platform``.
    :raises FileNotFoundError: If the endpoint does not exist.
    """
    if platform is None:
        platform = sys.platform

    if platform == "win32":
        return await open_named_pipe(address)

    return await trio.open_unix_socket(address)
