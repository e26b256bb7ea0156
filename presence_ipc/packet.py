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
Represents a Discord IPC packet.

.. currentmodule:: presence_ipc.packet
"""
import enum
import json
import struct
import uuid
from typing import Any

from presence_ipc.exc import ProtocolViolation, SerializationError

#: The packet header: opcode and payload length, both unsigned 32-bit little endian.
HEADER = struct.Struct("<II")


class IPCOpcode(enum.IntEnum):
    """
    Represents an IPC opcode.
    """
    HANDSHAKE = 0
    FRAME = 1
    CLOSE = 2
    PING = 3
    PONG = 4


def pack_json(data: Any) -> bytes:
    """
    Packs JSON in a compact representation.

    :param data: The data to pack.
    :return: The UTF-8 encoded JSON.
    """
    try:
        return json.dumps(data, indent=None, separators=(',', ':')).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError("Cannot serialize payload: {}".format(e)) from e


class IPCPacket(object):
    """
    Represents an IPC packet.
    """

    __slots__ = "opcode", "payload", "_json_data"

    def __init__(self, opcode: IPCOpcode, payload: bytes):
        """
        :param opcode: The :class:`.IPCOpcode` for this packet.
        :param payload: The raw payload of this packet.
        """
        self.opcode = opcode
        self.payload = payload
        self._json_data = None

    @classmethod
    def from_json(cls, opcode: IPCOpcode, data: Any) -> 'IPCPacket':
        """
        Creates a new packet with a JSON payload.

        :param opcode: The :class:`.IPCOpcode` for this packet.
        :param data: The JSON-serializable data enclosed in this packet.
        """
        packet = cls(opcode, pack_json(data))
        packet._json_data = data
        return packet

    def __repr__(self) -> str:
        return "<IPCPacket opcode={!r} length={}>".format(self.opcode, self.length)

    # properties
    @property
    def length(self) -> int:
        """
        Gets the length of the payload of this packet, in bytes.
        """
        return len(self.payload)

    @property
    def json(self) -> Any:
        """
        Gets the decoded JSON payload of this packet. Payloads are always JSON objects.
        """
        if self._json_data is None:
            try:
                self._json_data = json.loads(self.payload.decode("utf-8"))
            except ValueError as e:
                raise ProtocolViolation("Packet payload is not valid JSON") from e

        if not isinstance(self._json_data, dict):
            raise ProtocolViolation("Packet payload is not a JSON object")

        return self._json_data

    @property
    def event(self) -> str:
        """
        Gets the event for this packet. Received packets only.
        """
        return self.json.get("evt")

    @property
    def cmd(self) -> str:
        """
        Gets the command for this packet.
        """
        return self.json.get("cmd")

    @property
    def data(self) -> Any:
        """
        Gets the inner data for this packet.
        """
        return self.json.get("data")

    @property
    def nonce(self) -> uuid.UUID:
        """
        Gets the nonce for this packet.
        """
        nonce = self.json.get("nonce")
        if nonce is None:
            return None

        return uuid.UUID(nonce)

    def serialize(self) -> bytes:
        """
        Serializes this packet into a series of bytes.
        """
        return HEADER.pack(self.opcode, len(self.payload)) + self.payload

    @classmethod
    def deserialize(cls, data: bytes) -> 'IPCPacket':
        """
        Deserializes a packet from the bytes of a single read.

        The payload is everything after the header; the declared length is not checked against it.
        """
        if len(data) <= HEADER.size:
            raise ProtocolViolation("Got short IPC read ({} bytes)".format(len(data)))

        opcode, _ = HEADER.unpack_from(data)
        try:
            opcode = IPCOpcode(opcode)
        except ValueError:
            raise ProtocolViolation("Got unknown IPC opcode {}".format(opcode)) from None

        return cls(opcode, bytes(data[HEADER.size:]))
