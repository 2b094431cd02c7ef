"""Tests for session and delta models."""

import pytest

from session_timeline.core import Delta, DisplaySession, Session, delta_map_from_dict


class TestSession:
    """Tests for Session parsing."""

    def test_from_meta_shape(self):
        """Stores that nest timing under ``meta`` use camelCase keys."""
        session = Session.from_dict(
            {
                "id": "abc",
                "meta": {
                    "startTimestampMs": 1000,
                    "lastTimestampMs": 5000,
                    "branch": "main",
                    "commit": "deadbeef",
                },
            }
        )

        assert session == Session("abc", 1000, 5000, "main", "deadbeef")

    def test_from_flat_shape(self):
        session = Session.from_dict({"id": 7, "start_timestamp_ms": "42"})

        assert session.id == "7"
        assert session.start_timestamp_ms == 42
        assert session.last_timestamp_ms is None

    def test_missing_start_rejected(self):
        with pytest.raises(ValueError, match="no start timestamp"):
            Session.from_dict({"id": "x", "meta": {}})

    def test_is_immutable(self):
        session = Session("a", 1)
        with pytest.raises(AttributeError):
            session.id = "b"  # type: ignore[misc]


class TestDelta:
    """Tests for Delta parsing."""

    def test_operations_become_payload(self):
        delta = Delta.from_dict({"timestampMs": 10, "operations": [{"insert": [0, "hi"]}]})

        assert delta.timestamp_ms == 10
        assert delta.payload == [{"insert": [0, "hi"]}]

    def test_missing_timestamp_rejected(self):
        with pytest.raises(ValueError):
            Delta.from_dict({"payload": "x"})

    def test_delta_map_from_dict(self):
        delta_map = delta_map_from_dict(
            {
                "src/a.py": [{"timestampMs": 2}, {"timestampMs": 1}],
                "README.md": [],
            }
        )

        assert delta_map == {"src/a.py": [Delta(2), Delta(1)], "README.md": []}


class TestDisplaySession:
    """Tests for DisplaySession helpers."""

    def test_to_dict(self):
        display = DisplaySession(
            session=Session("s", 100),
            deltas={"a.py": (Delta(3, "x"),)},
            earliest_delta_ms=3,
            latest_delta_ms=3,
        )

        data = display.to_dict()

        assert data["session"]["id"] == "s"
        assert data["deltas"] == {"a.py": [{"timestamp_ms": 3, "payload": "x"}]}
        assert data["earliest_delta_ms"] == 3
