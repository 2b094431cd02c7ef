"""Live day-grouped timeline built from a project's sessions and deltas."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import tzinfo
from enum import Enum
from types import MappingProxyType

from .bounds import compute_bounds
from .config import TimelineConfig
from .day_buckets import bucket_by_day
from .errors import EmptyBoundsError, FetchFailure, TimelineError
from .filters import filter_displayable
from .models import DayBuckets, Delta, DeltaMap, DisplaySession, Session
from .observable import Observable
from .ordering import order_sessions, sort_delta_map
from .sources import DeltaFetcher, SessionSource

logger = logging.getLogger(__name__)


class AggregatorState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    PUBLISHED = "published"
    FAILED = "failed"


async def fetch_delta_maps(
    project_id: str,
    sessions: Sequence[Session],
    list_deltas: DeltaFetcher,
) -> list[DeltaMap]:
    """Fetch every session's deltas concurrently.

    Results line up with ``sessions`` whatever order the fetches finish in.
    The first failure is raised as ``FetchFailure``; fetches still in flight
    are left to finish and their results dropped.
    """

    async def fetch(session: Session) -> DeltaMap:
        try:
            return await list_deltas(project_id, session.id)
        except Exception as exc:
            raise FetchFailure(session.id, exc) from exc

    return list(await asyncio.gather(*(fetch(session) for session in sessions)))


def build_display_session(session: Session, delta_map: Mapping[str, Iterable[Delta]]) -> DisplaySession:
    """Sort a session's deltas and attach their timestamp bounds."""
    deltas = sort_delta_map(delta_map)
    try:
        earliest, latest = compute_bounds(deltas, session.id)
    except EmptyBoundsError:
        logger.debug("Session %s lists files without deltas; bounds left unset", session.id)
        earliest = latest = None
    return DisplaySession(
        session=session,
        deltas=MappingProxyType(deltas),
        earliest_delta_ms=earliest,
        latest_delta_ms=latest,
    )


def aggregate(
    sessions: Sequence[Session],
    delta_maps: Sequence[Mapping[str, Iterable[Delta]]],
    tz: tzinfo | None = None,
) -> DayBuckets:
    """Turn sessions and their fetched deltas into day buckets.

    Sessions whose delta map lists no files are dropped.
    """
    displayable = filter_displayable(zip(sessions, delta_maps, strict=True))
    return bucket_by_day(
        (build_display_session(session, delta_map) for session, delta_map in displayable),
        tz,
    )


async def build_timeline(
    project_id: str,
    sessions: Iterable[Session],
    list_deltas: DeltaFetcher,
    tz: tzinfo | None = None,
) -> DayBuckets:
    """Run a single, non-reactive aggregation pass."""
    ordered = order_sessions(sessions)
    delta_maps = await fetch_delta_maps(project_id, ordered, list_deltas)
    return aggregate(ordered, delta_maps, tz)


class TimelineAggregator:
    """Keeps a project's day buckets in step with its session source.

    Every session list change, or ``refresh()``, starts a new pass. A pass
    that is overtaken by a newer one still runs its fetches to completion,
    but its result (or failure) is dropped, so ``buckets`` only ever holds
    the result of the most recent input.

    Usage:
        aggregator = TimelineAggregator("project", source, store.list_deltas)
        aggregator.start()  # inside a running event loop
        await aggregator.settle()
        aggregator.buckets.value
        aggregator.close()
    """

    def __init__(
        self,
        project_id: str,
        session_source: SessionSource,
        list_deltas: DeltaFetcher,
        config: TimelineConfig | None = None,
    ):
        self.project_id = project_id
        self.config = config or TimelineConfig()
        self.buckets: Observable[DayBuckets] = Observable()
        self._source = session_source
        self._list_deltas = list_deltas
        self._state = AggregatorState.IDLE
        self._error: TimelineError | None = None
        self._input: tuple[Session, ...] = ()
        self._sessions: tuple[Session, ...] = ()
        self._generation = 0
        self._current: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribe = None
        self._closed = False

    @property
    def state(self) -> AggregatorState:
        return self._state

    @property
    def error(self) -> TimelineError | None:
        """Failure of the latest pass, cleared once a pass publishes."""
        return self._error

    @property
    def available(self) -> bool:
        return self._error is None

    @property
    def sessions(self) -> tuple[Session, ...]:
        """Ordered sessions of the currently published pass."""
        return self._sessions

    @property
    def generation(self) -> int:
        return self._generation

    def start(self) -> None:
        """Subscribe to the session source and run the first pass."""
        if self._closed:
            raise RuntimeError("Aggregator is closed")
        if self._unsubscribe is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._source.subscribe(self.project_id, self._on_sessions_changed)
        self.update_sessions(self._source.list_sessions(self.project_id))

    def close(self) -> None:
        """Unsubscribe, cancel outstanding passes and end ``buckets.updates()`` streams."""
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._tasks):
            task.cancel()
        self.buckets.close()

    async def __aenter__(self) -> TimelineAggregator:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def update_sessions(self, sessions: Iterable[Session]) -> None:
        """Start a pass for a new session list."""
        if self._closed:
            return
        ordered = tuple(order_sessions(sessions))
        if not (self._state is AggregatorState.IDLE and not ordered):
            self._schedule_pass(ordered)
        self._input = ordered

    def update_sessions_threadsafe(self, sessions: Iterable[Session]) -> None:
        """Deliver a new session list from a thread other than the event loop's."""
        if self._loop is None or self._closed:
            return
        self._loop.call_soon_threadsafe(self.update_sessions, tuple(sessions))

    def _on_sessions_changed(self, sessions: list[Session]) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self.update_sessions(sessions)
        else:
            self.update_sessions_threadsafe(sessions)

    def refresh(self) -> None:
        """Re-fetch deltas for the current session list."""
        if self._closed:
            return
        if self._state is AggregatorState.IDLE and not self._input:
            return
        self._schedule_pass(self._input)

    def refresh_threadsafe(self) -> None:
        """Request a refresh from a thread other than the event loop's."""
        if self._loop is None or self._closed:
            return
        self._loop.call_soon_threadsafe(self.refresh)

    async def settle(self) -> None:
        """Wait until the most recently scheduled pass has finished."""
        while self._current is not None and not self._current.done():
            await asyncio.wait({self._current})

    def _schedule_pass(self, sessions: tuple[Session, ...]) -> None:
        # Raises off the loop thread before any state changes
        loop = asyncio.get_running_loop()
        generation = self._generation + 1
        task = loop.create_task(
            self._run_pass(generation, sessions),
            name=f"timeline-pass-{self.project_id}-{generation}",
        )
        if self._current is not None and not self._current.done():
            logger.debug(
                "Timeline pass %d for %s superseded by pass %d",
                self._generation,
                self.project_id,
                generation,
            )
        self._generation = generation
        self._state = AggregatorState.FETCHING
        self._current = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation or self._closed

    async def _run_pass(self, generation: int, sessions: tuple[Session, ...]) -> None:
        tz = self.config.tzinfo
        try:
            delta_maps = await fetch_delta_maps(self.project_id, sessions, self._list_deltas)
        except TimelineError as exc:
            if self._is_stale(generation):
                logger.debug("Dropping failure of superseded pass %d: %s", generation, exc)
                return
            self._fail(generation, exc)
            return

        if self._is_stale(generation):
            logger.debug("Dropping result of superseded pass %d for %s", generation, self.project_id)
            return

        self._state = AggregatorState.AGGREGATING
        try:
            buckets = aggregate(sessions, delta_maps, tz)
        except Exception as exc:
            failure = TimelineError(f"Failed to aggregate timeline for {self.project_id}: {exc}")
            failure.__cause__ = exc
            self._fail(generation, failure)
            return

        self._sessions = sessions
        self._error = None
        self._state = AggregatorState.PUBLISHED
        self.buckets.set(buckets)
        logger.debug(
            "Published timeline pass %d for %s: %d sessions across %d days",
            generation,
            self.project_id,
            sum(len(items) for items in buckets.values()),
            len(buckets),
        )

    def _fail(self, generation: int, exc: TimelineError) -> None:
        self._error = exc
        self._state = AggregatorState.FAILED
        logger.warning("Timeline pass %d for %s failed: %s", generation, self.project_id, exc)
