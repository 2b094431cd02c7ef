"""Shared datetime utilities."""

from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return the zone for an IANA name, or None for the host's local zone."""
    if not name or name.lower() == "local":
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {name!r}") from exc


def ms_to_datetime(timestamp_ms: int, tz: tzinfo | None = None) -> datetime:
    """Convert epoch milliseconds to a datetime.

    With ``tz=None`` the result is a naive datetime in the host's local zone.
    """
    seconds, millis = divmod(int(timestamp_ms), 1000)
    return datetime.fromtimestamp(seconds, tz).replace(microsecond=millis * 1000)


def datetime_to_ms(value: datetime) -> int:
    """Convert a datetime (naive means host-local) to epoch milliseconds."""
    return round(value.timestamp() * 1000)

