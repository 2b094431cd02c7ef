"""Pytest configuration and shared fixtures."""

import pytest

from session_timeline.core import Delta, InMemoryDeltaStore, InMemorySessionSource, Session, TimelineConfig

from .fixtures import DAY1_MS, DAY_MS, HOUR_MS, PROJECT_ID


@pytest.fixture
def utc_config():
    """Config that buckets days in UTC regardless of the host zone."""
    return TimelineConfig(timezone="UTC")


@pytest.fixture
def make_session():
    """Factory for sessions starting at an epoch-ms timestamp."""

    def _make(session_id: str, start_ms: int, **kwargs) -> Session:
        return Session(id=session_id, start_timestamp_ms=start_ms, **kwargs)

    return _make


@pytest.fixture
def make_deltas():
    """Factory for delta lists; payloads record each delta's position in the call."""

    def _make(*timestamps: int, prefix: str = "d") -> list[Delta]:
        return [Delta(timestamp_ms=ts, payload=f"{prefix}{i}") for i, ts in enumerate(timestamps)]

    return _make


@pytest.fixture
def session_source():
    return InMemorySessionSource()


@pytest.fixture
def delta_store():
    return InMemoryDeltaStore()


@pytest.fixture
def populated(make_session, make_deltas, session_source, delta_store):
    """Two sessions on day one (one without files) and one on day two."""
    s1 = make_session("s1", DAY1_MS + 9 * HOUR_MS)
    s2 = make_session("s2", DAY1_MS + 11 * HOUR_MS)
    s3 = make_session("s3", DAY1_MS + DAY_MS + 8 * HOUR_MS)
    delta_store.set_deltas(PROJECT_ID, "s1", {"src/app.py": make_deltas(100, 50, 100)})
    delta_store.set_deltas(PROJECT_ID, "s3", {
        "README.md": make_deltas(DAY1_MS + DAY_MS + 8 * HOUR_MS + 10),
        "src/app.py": make_deltas(DAY1_MS + DAY_MS + 8 * HOUR_MS + 20),
    })
    session_source.set_sessions(PROJECT_ID, [s1, s2, s3])
    return [s1, s2, s3]
