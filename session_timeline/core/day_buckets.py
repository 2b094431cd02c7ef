"""Calendar-day grouping of display sessions."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, tzinfo
from types import MappingProxyType

from ..utils import datetime_to_ms, ms_to_datetime
from .models import DayBuckets, DisplaySession


def day_key(timestamp_ms: int, tz: tzinfo | None = None) -> int:
    """Return epoch ms of midnight starting the day that contains ``timestamp_ms``.

    ``tz=None`` uses the host's local zone.
    """
    moment = ms_to_datetime(timestamp_ms, tz)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime_to_ms(midnight)


def day_of_key(key: int, tz: tzinfo | None = None) -> date:
    """Return the calendar date a day key stands for."""
    return ms_to_datetime(key, tz).date()


def bucket_by_day(sessions: Iterable[DisplaySession], tz: tzinfo | None = None) -> DayBuckets:
    """Group sessions under the local midnight of their start day.

    Sessions keep their input order inside each bucket. The returned mapping
    is a fresh read-only structure.
    """
    grouped: dict[int, list[DisplaySession]] = {}
    for display in sessions:
        key = day_key(display.session.start_timestamp_ms, tz)
        if key in grouped:
            grouped[key].append(display)
        else:
            grouped[key] = [display]
    return MappingProxyType({key: tuple(items) for key, items in grouped.items()})
