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
Exceptions raised from within the library.

.. currentmodule:: presence_ipc.exc
"""
from typing import Optional


class PresenceIPCError(Exception):
    """
    The base class for all presence_ipc exceptions.
    """


class PeerNotRunning(PresenceIPCError, ConnectionError):
    """
    Raised when no IPC endpoint could be found. This usually means that Discord is not running;
    it is safe to try again later.
    """

    def __str__(self) -> str:
        return "Discord is not running (no IPC endpoint found)"


class ConnectionFailed(PresenceIPCError, ConnectionError):
    """
    Raised when an IPC endpoint exists, but connecting to it failed.

    :ivar address: The path or pipe name of the endpoint that failed.
    """

    def __init__(self, address: str, reason: str = None):
        self.address = address
        self.reason = reason

    def __str__(self) -> str:
        if self.reason is None:
            return "Connection to {} failed".format(self.address)

        return "Connection to {} failed: {}".format(self.address, self.reason)

    __repr__ = __str__


class TransportError(PresenceIPCError, ConnectionError):
    """
    Raised when reading from, writing to, or closing the IPC connection fails.

    The original error is available as ``__cause__``.
    """


class ProtocolViolation(PresenceIPCError, ValueError):
    """
    Raised when the peer sends data that is not a valid IPC frame.
    """


class SerializationError(PresenceIPCError, TypeError):
    """
    Raised when a payload cannot be encoded as JSON.
    """


class _PeerError(PresenceIPCError):
    def __init__(self, code: Optional[int], message: Optional[str]):
        #: The error code sent by the peer.
        self.code = code
        #: The error message sent by the peer.
        self.message = message

    def __str__(self) -> str:
        return "{}: {}".format(self.code, self.message)

    __repr__ = __str__


class HandshakeRejected(_PeerError):
    """
    Raised when the peer closes the connection in response to a handshake, e.g. because the
    client ID is invalid.
    """


class RPCError(_PeerError):
    """
    Raised when the peer responds to a command with an ``ERROR`` event.
    """
