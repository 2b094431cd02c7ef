"""Session, delta and timeline data structures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# file path -> deltas recorded for that file within one session
DeltaMap = dict[str, list["Delta"]]


@dataclass(frozen=True)
class Session:
    """A recorded working interval, owned by the session source."""

    id: str
    start_timestamp_ms: int
    last_timestamp_ms: int | None = None
    branch: str | None = None
    commit: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Session:
        """Build a session from either a flat dict or the ``{"id", "meta"}`` shape."""
        meta = data.get("meta") or data
        start = meta.get("startTimestampMs", meta.get("start_timestamp_ms"))
        if start is None:
            raise ValueError(f"Session {data.get('id')!r} has no start timestamp")
        last = meta.get("lastTimestampMs", meta.get("last_timestamp_ms"))
        return cls(
            id=str(data["id"]),
            start_timestamp_ms=int(start),
            last_timestamp_ms=int(last) if last is not None else None,
            branch=meta.get("branch"),
            commit=meta.get("commit"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_timestamp_ms": self.start_timestamp_ms,
            "last_timestamp_ms": self.last_timestamp_ms,
            "branch": self.branch,
            "commit": self.commit,
        }


@dataclass(frozen=True)
class Delta:
    """One timestamped change to a file."""

    timestamp_ms: int
    payload: Any = None

    @classmethod
    def from_dict(cls, data: dict) -> Delta:
        timestamp = data.get("timestampMs", data.get("timestamp_ms"))
        if timestamp is None:
            raise ValueError("Delta has no timestamp")
        payload = data.get("operations", data.get("payload"))
        return cls(timestamp_ms=int(timestamp), payload=payload)

    def to_dict(self) -> dict:
        return {"timestamp_ms": self.timestamp_ms, "payload": self.payload}


def delta_map_from_dict(data: Mapping[str, list[dict]]) -> DeltaMap:
    """Parse a ``{path: [delta, ...]}`` payload as returned by a delta store."""
    return {str(path): [Delta.from_dict(item) for item in items] for path, items in data.items()}


@dataclass(frozen=True)
class DisplaySession:
    """A session enriched with its sorted deltas and delta timestamp bounds.

    Both bounds are ``None`` when the session has files but none of them
    recorded a delta.
    """

    session: Session
    deltas: Mapping[str, tuple[Delta, ...]] = field(default_factory=dict)
    earliest_delta_ms: int | None = None
    latest_delta_ms: int | None = None

    @property
    def session_id(self) -> str:
        return self.session.id

    @property
    def file_paths(self) -> list[str]:
        return sorted(self.deltas)

    @property
    def delta_count(self) -> int:
        return sum(len(items) for items in self.deltas.values())

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(),
            "deltas": {
                path: [delta.to_dict() for delta in items]
                for path, items in self.deltas.items()
            },
            "earliest_delta_ms": self.earliest_delta_ms,
            "latest_delta_ms": self.latest_delta_ms,
        }


# local-midnight epoch ms -> sessions started that day, in input order
DayBuckets = Mapping[int, tuple[DisplaySession, ...]]
