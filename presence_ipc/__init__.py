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
presence_ipc - An async Python library for Discord Rich Presence over local IPC.

.. currentmodule:: presence_ipc

.. autosummary::
    :toctree:

    activity
    client
    locator
    packet
    transport

    exc
"""
__version__ = "0.1.0"

from presence_ipc.activity import Activity, Assets, Button, Party, Secrets, Timestamps
from presence_ipc.client import IPCClient, SessionState
from presence_ipc.exc import ConnectionFailed, HandshakeRejected, PeerNotRunning, \
    PresenceIPCError, ProtocolViolation, RPCError, SerializationError, TransportError
from presence_ipc.locator import locate_endpoint
from presence_ipc.packet import IPCOpcode, IPCPacket
