"""Eligibility rules for sessions shown on the timeline."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, TypeVar

from .models import Session

T = TypeVar("T")


def has_recorded_deltas(delta_map: Mapping[str, Any]) -> bool:
    """Return whether a session's delta map lists at least one file.

    Only the number of files counts: a file listed with an empty delta
    sequence still keeps the session on the timeline.
    """
    return len(delta_map) > 0


def filter_displayable(
    candidates: Iterable[tuple[Session, Mapping[str, T]]],
) -> Iterator[tuple[Session, Mapping[str, T]]]:
    """Yield the (session, delta map) pairs that belong on the timeline, in order."""
    for session, delta_map in candidates:
        if has_recorded_deltas(delta_map):
            yield session, delta_map
