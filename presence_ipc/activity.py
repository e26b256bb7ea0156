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
Wrappers for Rich Presence activities.

Every field is optional. Empty fields are left out of the serialized activity.

.. currentmodule:: presence_ipc.activity
"""
import datetime
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

TimestampType = Union[datetime.datetime, int, float, None]


def _to_epoch(value: TimestampType) -> int:
    if value is None:
        return 0

    if isinstance(value, datetime.datetime):
        return int(value.timestamp())

    return int(value)


def _compact(d: dict) -> dict:
    return {k: v for (k, v) in d.items() if v}


@dataclass
class Timestamps:
    """
    Represents the start and end times of an activity.

    Sending ``end`` will always show the time as "remaining" until the given time. Sending
    ``start`` will show the time as "elapsed" as long as there is no ``end``.
    """

    #: The start of the activity, as a datetime or Unix epoch seconds.
    start: TimestampType = None

    #: The end of the activity, as a datetime or Unix epoch seconds.
    end: TimestampType = None

    def to_dict(self) -> dict:
        """
        :return: The dict representation of this object, in epoch seconds.
        """
        return _compact({
            "start": _to_epoch(self.start),
            "end": _to_epoch(self.end),
        })


@dataclass
class Assets:
    """
    Represents the profile artwork of an activity.
    """

    #: The name of the uploaded image for the large artwork.
    large_image: str = None

    #: The tooltip for the large artwork.
    large_text: str = None

    #: The name of the uploaded image for the small artwork.
    small_image: str = None

    #: The tooltip for the small artwork.
    small_text: str = None

    def to_dict(self) -> dict:
        return _compact({
            "large_image": self.large_image,
            "large_text": self.large_text,
            "small_image": self.small_image,
            "small_text": self.small_text,
        })


@dataclass
class Party:
    """
    Represents the party the player is in.
    """

    #: The ID of the player's party, lobby or group.
    id: str = None

    #: A pair of (current size, max size).
    size: Optional[Tuple[int, int]] = None

    def to_dict(self) -> dict:
        return _compact({
            "id": self.id,
            "size": list(self.size) if self.size else None,
        })


@dataclass
class Secrets:
    """
    Represents the secrets used for joining and spectating. Cannot be used with buttons.
    """

    #: The secret for chat invitations and Ask to Join.
    join: str = None

    #: The secret for the Spectate button.
    spectate: str = None

    #: The secret for the player's match.
    match: str = None

    def to_dict(self) -> dict:
        return _compact({
            "join": self.join,
            "spectate": self.spectate,
            "match": self.match,
        })


@dataclass
class Button:
    """
    Represents a button shown under an activity. Both fields are required by Discord.
    """

    #: The text of the button.
    label: str

    #: The URL opened when the button is clicked.
    url: str

    def to_dict(self) -> dict:
        return _compact({
            "label": self.label,
            "url": self.url,
        })


@dataclass
class Activity:
    """
    Represents a Rich Presence activity. This class can be created safely for usage with
    :class:`.IPCClient`.

    .. code-block:: python3

        activity = Activity(details="Editing a file", state="Idle",
                            timestamps=Timestamps(start=time.time()))

    """

    #: What the player is currently doing.
    details: str = None

    #: The player's current state.
    state: str = None

    #: The :class:`.Timestamps` for this activity.
    timestamps: Timestamps = None

    #: The :class:`.Assets` for this activity.
    assets: Assets = None

    #: The :class:`.Party` for this activity.
    party: Party = None

    #: The :class:`.Secrets` for this activity.
    secrets: Secrets = None

    #: A list of up to two :class:`.Button`.
    buttons: List[Button] = field(default_factory=list)

    def to_dict(self) -> dict:
        """
        :return: The dict representation of this activity, as sent to Discord.
        """
        d = {
            "details": self.details,
            "state": self.state,
        }

        for name in ("timestamps", "assets", "party", "secrets"):
            value = getattr(self, name)
            if value is not None:
                d[name] = value.to_dict()

        d["buttons"] = [button.to_dict() for button in self.buttons or ()]
        return _compact(d)
