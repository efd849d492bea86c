from datetime import datetime, timezone

import pytest

from timber.types import LogEntry, LogLevel


@pytest.mark.parametrize(
    "label,expected",
    [
        ("debug", LogLevel.DEBUG),
        ("info", LogLevel.INFO),
        ("warn", LogLevel.WARN),
        ("WARNING", LogLevel.WARN),
        ("error", LogLevel.ERROR),
        ("critical", LogLevel.ERROR),
        ("silly", LogLevel.INFO),
        ("", LogLevel.INFO),
        (None, LogLevel.INFO),
        (40, LogLevel.INFO),
        (LogLevel.DEBUG, LogLevel.DEBUG),
    ],
)
def test_from_label(label, expected):
    assert LogLevel.from_label(label) is expected


def test_entry_defaults():
    entry = LogEntry(message="hi")
    assert entry.level == LogLevel.INFO
    assert entry.dt.tzinfo == timezone.utc
    assert entry.metadata == {}


def test_entry_metadata_is_flattened():
    entry = LogEntry(message="a test message", level="info", request_id=123, component="server")

    assert entry.request_id == 123
    assert entry["component"] == "server"
    assert entry["message"] == "a test message"
    assert entry.metadata == {"request_id": 123, "component": "server"}
    assert entry.get("missing") is None
    with pytest.raises(KeyError):
        entry["missing"]


def test_to_payload():
    dt = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    entry = LogEntry(message="m", level=LogLevel.WARN, dt=dt, nested={"a": 1})

    assert entry.to_payload() == {
        "dt": "2024-01-02T03:04:05+00:00",
        "level": "warn",
        "message": "m",
        "nested": {"a": 1},
    }
