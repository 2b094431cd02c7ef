"""Earliest/latest delta timestamps for a session."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .errors import EmptyBoundsError
from .models import Delta


def compute_bounds(
    delta_map: Mapping[str, Iterable[Delta]],
    session_id: str | None = None,
) -> tuple[int, int]:
    """Return ``(earliest, latest)`` delta timestamps across all files.

    Order independent, so sorted and unsorted maps give the same result.

    Raises:
        EmptyBoundsError: if no file in the map holds a delta.
    """
    earliest: int | None = None
    latest: int | None = None
    for deltas in delta_map.values():
        for delta in deltas:
            ts = delta.timestamp_ms
            if earliest is None or ts < earliest:
                earliest = ts
            if latest is None or ts > latest:
                latest = ts

    if earliest is None or latest is None:
        raise EmptyBoundsError(session_id)
    return earliest, latest
