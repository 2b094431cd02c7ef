"""Display ordering for sessions and per-file delta lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import Delta, Session


def sort_deltas(deltas: Iterable[Delta]) -> list[Delta]:
    """Return deltas most recent first.

    Sorted ascending (stable) and then reversed, so deltas sharing a
    timestamp come out in reverse of the order they were received.
    """
    ordered = sorted(deltas, key=lambda delta: delta.timestamp_ms)
    ordered.reverse()
    return ordered


def sort_delta_map(delta_map: Mapping[str, Iterable[Delta]]) -> dict[str, tuple[Delta, ...]]:
    """Apply ``sort_deltas`` to every file, leaving the input untouched."""
    return {path: tuple(sort_deltas(deltas)) for path, deltas in delta_map.items()}


def order_sessions(sessions: Iterable[Session]) -> list[Session]:
    """Order sessions by start time ascending; ties keep their source order."""
    return sorted(sessions, key=lambda session: session.start_timestamp_ms)
