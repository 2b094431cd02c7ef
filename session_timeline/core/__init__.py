"""Core timeline aggregation for session-timeline."""

from .aggregator import (
    AggregatorState,
    TimelineAggregator,
    aggregate,
    build_display_session,
    build_timeline,
    fetch_delta_maps,
)
from .bounds import compute_bounds
from .config import TimelineConfig
from .day_buckets import bucket_by_day, day_key, day_of_key
from .errors import EmptyBoundsError, FetchFailure, TimelineError
from .filters import filter_displayable, has_recorded_deltas
from .models import DayBuckets, Delta, DeltaMap, DisplaySession, Session, delta_map_from_dict
from .observable import Observable
from .ordering import order_sessions, sort_delta_map, sort_deltas
from .registry import TimelineRegistry
from .sources import DeltaFetcher, InMemoryDeltaStore, InMemorySessionSource, SessionSource, load_snapshot

__all__ = [
    "AggregatorState",
    "TimelineAggregator",
    "TimelineRegistry",
    "TimelineConfig",
    "aggregate",
    "build_display_session",
    "build_timeline",
    "fetch_delta_maps",
    "compute_bounds",
    "bucket_by_day",
    "day_key",
    "day_of_key",
    "EmptyBoundsError",
    "FetchFailure",
    "TimelineError",
    "filter_displayable",
    "has_recorded_deltas",
    "DayBuckets",
    "Delta",
    "DeltaMap",
    "DisplaySession",
    "Session",
    "delta_map_from_dict",
    "Observable",
    "order_sessions",
    "sort_delta_map",
    "sort_deltas",
    "DeltaFetcher",
    "InMemoryDeltaStore",
    "InMemorySessionSource",
    "SessionSource",
    "load_snapshot",
]
