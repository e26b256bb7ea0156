"""
An example that sets a Rich Presence activity.
"""

# Rich Presence is set over a local connection to the Discord client, so Discord has to be running
# on the same machine.

import datetime
import logging

import trio

from presence_ipc import Activity, Assets, Button, IPCClient, Party, PeerNotRunning, Timestamps

logging.basicConfig(level=logging.DEBUG)


async def main():
    # Create the client with your application's ID. Nothing is connected yet; the connection is
    # opened by the first request.
    ipc = IPCClient("975346661540909056")

    # Build the activity. Every field is optional.
    activity = Activity(
        details="Details",
        state="State",
        # An end time shows the time remaining.
        timestamps=Timestamps(end=datetime.datetime.now() + datetime.timedelta(minutes=5)),
        assets=Assets(large_image="music", large_text="Large Image Text"),
        party=Party(id="12345", size=(1, 6)),
        buttons=[
            Button(label="Google", url="https://google.com"),
            Button(label="Discord", url="https://discord.com"),
        ],
    )

    try:
        async with ipc:
            await ipc.publish_activity(activity)
            # Discord keeps the activity as long as the client is connected.
            await trio.sleep(30)
    except PeerNotRunning:
        print("Discord is not running.")


trio.run(main)
