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
The client for an IPC connection.

.. currentmodule:: presence_ipc.client
"""
import enum
import functools
import logging
import os
import uuid
from typing import Any, Awaitable, Callable, Optional, Union

import trio

from presence_ipc.activity import Activity
from presence_ipc.exc import HandshakeRejected, ProtocolViolation, RPCError, TransportError
from presence_ipc.locator import DEFAULT_CONNECT_TIMEOUT, locate_endpoint
from presence_ipc.packet import IPCOpcode, IPCPacket

logger = logging.getLogger("presence_ipc.client")

#: The maximum number of bytes read for a single packet.
DEFAULT_MAX_READ_SIZE = 65536

#: Errors raised by a :class:`trio.abc.Stream` when I/O fails.
_STREAM_ERRORS = (trio.BrokenResourceError, trio.ClosedResourceError, OSError)


def get_nonce() -> str:
    """
    Gets a random nonce.
    """
    return str(uuid.uuid4())


def _is_broken_pipe(error: BaseException) -> bool:
    # trio wraps the OSError of a dead socket in BrokenResourceError, so walk the whole chain
    while error is not None:
        if isinstance(error, (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)):
            return True

        error = error.__cause__

    return False


class SessionState(enum.Enum):
    """
    Represents the state of an :class:`.IPCClient`.
    """
    #: There is no open connection.
    DISCONNECTED = "disconnected"

    #: The connection is open and the handshake has completed.
    CONNECTED = "connected"


class IPCClient(object):
    """
    Represents an IPC (interprocess communication) client. This connects to the Discord client on
    the IPC socket.

    To use, create a new instance with your app's client ID:

    .. code-block:: python3

        ipc = IPCClient("323578534763298816")

    The connection is opened lazily, so you can start sending right away:

    .. code-block:: python3

        await ipc.publish_activity(Activity(details="Hello!"))

    If the connection breaks while writing, the client reconnects once and retries the write.

    This class is not safe to use from more than one task at a time.
    """
    VERSION = "1"

    def __init__(self, client_id: Union[str, int], *,
                 connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
                 max_read_size: int = DEFAULT_MAX_READ_SIZE,
                 locator: Callable[[], Awaitable[trio.abc.Stream]] = None):
        """
        :param client_id: The application ID to authenticate with. Must not be empty.
        :param connect_timeout: The timeout for connecting to each IPC endpoint, in seconds.
        :param max_read_size: The maximum size of a packet that can be received.
        :param locator: A coroutine function that returns a connected stream. Defaults to
            :func:`.locate_endpoint`.
        """
        if client_id is None or str(client_id) == "":
            raise ValueError("client_id must not be empty")

        #: The application ID used in the handshake.
        self.client_id = str(client_id)

        #: The maximum size of a packet that can be received.
        self.max_read_size = max_read_size

        #: The current :class:`.SessionState` of this client.
        self.state = SessionState.DISCONNECTED

        if locator is None:
            locator = functools.partial(locate_endpoint, timeout=connect_timeout)

        self._locator = locator
        self._stream = None  # type: Optional[trio.abc.Stream]

    def __repr__(self) -> str:
        return "<IPCClient client_id={} state={}>".format(self.client_id, self.state.value)

    async def __aenter__(self) -> 'IPCClient':
        await self.ensure_connected()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        """
        :return: If this client has completed the handshake and is connected.
        """
        return self.state is SessionState.CONNECTED

    async def ensure_connected(self) -> None:
        """
        Opens the connection to the Discord client and performs the handshake, if this client is not
        already connected.

        :raises PeerNotRunning: If Discord could not be found.
        :raises HandshakeRejected: If Discord refused the handshake.
        """
        if self.connected:
            return

        self._stream = await self._locator()
        try:
            await self._write_handshake()
            response = await self._read_packet()
        except BaseException:
            await self._discard()
            raise

        if response.opcode == IPCOpcode.CLOSE:
            # the stream was already released when the CLOSE packet was read
            body = response.json
            raise HandshakeRejected(body.get("code"), body.get("message"))

        self.state = SessionState.CONNECTED
        logger.info("Connected to Discord IPC with client ID {}".format(self.client_id))

    async def close(self) -> None:
        """
        Closes this client. Does nothing if the client is already closed.
        """
        if self._stream is None:
            return

        stream, self._stream = self._stream, None
        self.state = SessionState.DISCONNECTED
        logger.debug("Closing IPC connection")

        try:
            await stream.aclose()
        except _STREAM_ERRORS as e:
            raise TransportError("Failed to close IPC connection: {}".format(e)) from e

    async def _discard(self) -> None:
        """
        Closes this client, ignoring any errors from the underlying stream.
        """
        stream, self._stream = self._stream, None
        self.state = SessionState.DISCONNECTED
        if stream is None:
            return

        try:
            await trio.aclose_forcefully(stream)
        except _STREAM_ERRORS as e:
            logger.debug("Ignoring error while closing stale connection: {}".format(e))

    # Writer methods
    async def _write_packet(self, packet: IPCPacket) -> None:
        """
        Writes an IPC packet.

        :param packet: The :class:`.IPCPacket` to write.
        """
        try:
            await self._stream.send_all(packet.serialize())
        except _STREAM_ERRORS as e:
            raise TransportError("Failed to write IPC packet: {}".format(e)) from e

    def _write_handshake(self) -> Awaitable[None]:
        """
        Writes an IPC handshake.
        """
        data = {
            "v": IPCClient.VERSION,
            "client_id": self.client_id
        }

        return self._write_packet(IPCPacket.from_json(IPCOpcode.HANDSHAKE, data))

    async def send(self, opcode: IPCOpcode, payload: Any) -> None:
        """
        Sends a packet to the Discord client, connecting first if needed.

        If the connection turns out to be broken, this reconnects and retries the write once.

        :param opcode: The :class:`.IPCOpcode` of the packet.
        :param payload: The JSON-serializable payload of the packet.
        :raises SerializationError: If the payload cannot be encoded as JSON.
        :raises TransportError: If the write fails.
        """
        await self.ensure_connected()
        packet = IPCPacket.from_json(opcode, payload)

        try:
            await self._write_packet(packet)
        except TransportError as e:
            if not _is_broken_pipe(e):
                # a partial write leaves the framing unusable
                await self._discard()
                raise

            logger.warning("IPC connection is broken, reconnecting")
        else:
            return

        await self._discard()
        await self.ensure_connected()

        try:
            await self._write_packet(packet)
        except TransportError:
            await self._discard()
            raise

    # Reader methods
    async def _read_packet(self) -> IPCPacket:
        """
        Reads a packet from the connection.
        """
        try:
            data = await self._stream.receive_some(self.max_read_size)
        except _STREAM_ERRORS as e:
            await self._discard()
            raise TransportError("Failed to read IPC packet: {}".format(e)) from e

        if not data:
            await self._discard()
            raise TransportError("IPC connection was closed by the peer")

        packet = IPCPacket.deserialize(data)
        if packet.opcode == IPCOpcode.CLOSE:
            logger.debug("Received CLOSE from the peer")
            await self._discard()

        return packet

    async def receive(self) -> IPCPacket:
        """
        Receives a packet from the Discord client, connecting first if needed.

        A CLOSE packet closes this client before it is returned.

        :return: The :class:`.IPCPacket` that was received.
        :raises TransportError: If the read fails or the connection was closed.
        :raises ProtocolViolation: If the data received is not a valid packet.
        """
        await self.ensure_connected()
        return await self._read_packet()

    # Convenience methods
    async def _set_activity(self, activity: Optional[dict]) -> IPCPacket:
        data = {
            "cmd": "SET_ACTIVITY",
            "evt": "",
            "nonce": get_nonce(),
            "args": {
                "pid": os.getpid(),
                "activity": activity
            }
        }
        await self.send(IPCOpcode.FRAME, data)
        response = await self.receive()

        if response.opcode == IPCOpcode.FRAME and response.event == "ERROR":
            error = response.data
            if not isinstance(error, dict):
                raise ProtocolViolation("ERROR event has no error object")

            raise RPCError(error.get("code"), error.get("message"))

        return response

    def publish_activity(self, activity: Union[Activity, dict]) -> Awaitable[IPCPacket]:
        """
        Sets the Rich Presence activity shown on the user's profile.

        :param activity: The :class:`.Activity` to use, or a raw activity dict.
        :return: The acknowledgement sent by Discord.
        :raises RPCError: If Discord rejected the activity.
        """
        if isinstance(activity, Activity):
            activity = activity.to_dict()

        return self._set_activity(activity)

    def clear_activity(self) -> Awaitable[IPCPacket]:
        """
        Clears the Rich Presence activity shown on the user's profile.

        :return: The acknowledgement sent by Discord.
        """
        return self._set_activity(None)
