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
Finds the IPC endpoint of a running Discord client.

Discord binds the first free slot of ``discord-ipc-0`` to ``discord-ipc-9``, either as a Unix
socket in the runtime directory (or a sandbox subdirectory of it) or as a Windows named pipe.

.. currentmodule:: presence_ipc.locator
"""
import logging
import os
import sys
from typing import Awaitable, Callable, Iterator, Mapping

import trio

from presence_ipc.exc import ConnectionFailed, PeerNotRunning
from presence_ipc.transport import open_endpoint

logger = logging.getLogger("presence_ipc.locator")

#: The number of IPC slots that are scanned.
MAX_SLOTS = 10

#: The default timeout for a single connection attempt, in seconds.
DEFAULT_CONNECT_TIMEOUT = 5.0

#: Environment variables that may hold the runtime directory, in order of priority.
ENV_VARS = ("XDG_RUNTIME_DIR", "TMPDIR", "TMP", "TEMP")

#: The runtime directory used when none of :data:`ENV_VARS` are set.
DEFAULT_BASE_DIRECTORY = "/tmp"

#: Subdirectories of the runtime directory for each known install of Discord.
SUBDIRECTORIES = (
    "",
    "app/com.discordapp.Discord",  # flatpak
    "snap.discord",  # snap
)

#: The name prefix of every socket or pipe.
SOCKET_PREFIX = "discord-ipc-"

#: The named pipe namespace on Windows.
PIPE_PREFIX = "\\\\.\\pipe\\"

Opener = Callable[[str, str], Awaitable[trio.abc.Stream]]


def get_base_directory(environ: Mapping[str, str] = None) -> str:
    """
    Gets the directory the IPC sockets live in.

    :param environ: The environment to read. Defaults to ``os.environ``.
    """
    if environ is None:
        environ = os.environ

    for name in ENV_VARS:
        value = environ.get(name)
        if value:
            return value

    return DEFAULT_BASE_DIRECTORY


def iter_candidates(platform: str = None, environ: Mapping[str, str] = None) -> Iterator[str]:
    """
    Iterates over every possible endpoint address, in the order they should be tried.

    :param platform: The platform to generate addresses for. Defaults to ``sys.platform``.
    :param environ: The environment to read. Defaults to ``os.environ``.
    """
    if platform is None:
        platform = sys.platform

    if platform == "win32":
        for slot in range(MAX_SLOTS):
            yield "{}{}{}".format(PIPE_PREFIX, SOCKET_PREFIX, slot)
        return

    base = get_base_directory(environ)
    for subdirectory in SUBDIRECTORIES:
        for slot in range(MAX_SLOTS):
            yield os.path.join(base, subdirectory, "{}{}".format(SOCKET_PREFIX, slot))


async def locate_endpoint(*, timeout: float = DEFAULT_CONNECT_TIMEOUT, platform: str = None,
                          environ: Mapping[str, str] = None,
                          opener: Opener = None) -> trio.abc.Stream:
    """
    Connects to the first IPC endpoint that accepts a connection.

    Endpoints that do not exist are skipped. Any other failure stops the scan.

    :param timeout: The timeout for each connection attempt, in seconds.
    :param platform: The platform to connect on. Defaults to ``sys.platform``.
    :param environ: The environment to read. Defaults to ``os.environ``.
    :param opener: The coroutine function used to open an address.
    :return: The connected stream.
    :raises PeerNotRunning: If no endpoint exists.
    :raises ConnectionFailed: If an endpoint exists but could not be connected to.
    """
    if platform is None:
        platform = sys.platform

    if opener is None:
        opener = open_endpoint

    for address in iter_candidates(platform, environ):
        logger.debug("Trying IPC endpoint {}".format(address))
        try:
            with trio.fail_after(timeout):
                stream = await opener(address, platform)
        except FileNotFoundError:
            continue
        except trio.TooSlowError as e:
            raise ConnectionFailed(address, "timed out after {}s".format(timeout)) from e
        except OSError as e:
            raise ConnectionFailed(address, str(e)) from e

        logger.debug("Connected to IPC endpoint {}".format(address))
        return stream

    raise PeerNotRunning()
