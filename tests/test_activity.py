import datetime

from presence_ipc.activity import Activity, Assets, Button, Party, Secrets, Timestamps


def test_empty_activity():
    assert Activity().to_dict() == {}


def test_end_timestamp_only():
    activity = Activity(timestamps=Timestamps(end=1700000000))

    assert activity.to_dict() == {"timestamps": {"end": 1700000000}}


def test_datetime_timestamps():
    start = datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=datetime.timezone.utc)

    assert Timestamps(start=start).to_dict() == {"start": 1700000000}
    assert Timestamps(start=1700000000.75).to_dict() == {"start": 1700000000}


def test_empty_sub_objects_are_omitted():
    activity = Activity(details="Details", assets=Assets(), party=Party(), secrets=Secrets(),
                        timestamps=Timestamps(start=0))

    assert activity.to_dict() == {"details": "Details"}


def test_full_activity():
    activity = Activity(
        details="Details",
        state="State",
        timestamps=Timestamps(start=1600000000, end=1700000000),
        assets=Assets(large_image="music", large_text="Large Image Text"),
        party=Party(id="12345", size=(1, 6)),
        buttons=[
            Button(label="Google", url="https://google.com"),
            Button(label="Discord", url="https://discord.com"),
        ],
    )

    assert activity.to_dict() == {
        "details": "Details",
        "state": "State",
        "timestamps": {"start": 1600000000, "end": 1700000000},
        "assets": {"large_image": "music", "large_text": "Large Image Text"},
        "party": {"id": "12345", "size": [1, 6]},
        "buttons": [
            {"label": "Google", "url": "https://google.com"},
            {"label": "Discord", "url": "https://discord.com"},
        ],
    }


def test_secrets():
    activity = Activity(secrets=Secrets(join="j", spectate="s"))

    assert activity.to_dict() == {"secrets": {"join": "j", "spectate": "s"}}
