"""Shared utilities for session-timeline."""

from .datetime_utils import datetime_to_ms, ms_to_datetime, resolve_timezone


# Lazy import for FileWatcher to avoid watchdog dependency at import time
def __getattr__(name):
    if name in ("FileWatcher", "SessionStoreWatcher"):
        from . import file_watcher
        return getattr(file_watcher, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "FileWatcher",
    "SessionStoreWatcher",
    "datetime_to_ms",
    "ms_to_datetime",
    "resolve_timezone",
]
