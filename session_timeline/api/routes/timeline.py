"""
Timeline API routes
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ...core import DayBuckets, DisplaySession, TimelineAggregator, TimelineRegistry, day_of_key

router = APIRouter()
logger = logging.getLogger(__name__)


class DeltaResponse(BaseModel):
    """A single file change."""

    timestampMs: int
    payload: Any = None


class TimelineSessionResponse(BaseModel):
    """A session with its deltas, most recent first per file."""

    sessionId: str
    startTimestampMs: int
    lastTimestampMs: Optional[int] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    earliestDeltaTimestampMs: Optional[int] = None
    latestDeltaTimestampMs: Optional[int] = None
    files: dict[str, list[DeltaResponse]]


class TimelineDayResponse(BaseModel):
    """Sessions started on one calendar day."""

    dayTimestampMs: int
    date: str
    sessions: list[TimelineSessionResponse]


class TimelineResponse(BaseModel):
    """Day-grouped timeline for a project."""

    projectId: str
    state: str
    available: bool
    error: Optional[str] = None
    days: list[TimelineDayResponse]
    totalSessions: int


def _get_registry(request: Request) -> TimelineRegistry:
    return request.app.state.registry


def _get_aggregator(request: Request, project_id: str) -> TimelineAggregator:
    registry = _get_registry(request)
    if not registry.has_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return registry.get(project_id)


def _session_response(display: DisplaySession) -> TimelineSessionResponse:
    session = display.session
    return TimelineSessionResponse(
        sessionId=session.id,
        startTimestampMs=session.start_timestamp_ms,
        lastTimestampMs=session.last_timestamp_ms,
        branch=session.branch,
        commit=session.commit,
        earliestDeltaTimestampMs=display.earliest_delta_ms,
        latestDeltaTimestampMs=display.latest_delta_ms,
        files={
            path: [DeltaResponse(timestampMs=d.timestamp_ms, payload=d.payload) for d in deltas]
            for path, deltas in display.deltas.items()
        },
    )


def build_timeline_response(aggregator: TimelineAggregator, buckets: DayBuckets | None = None) -> TimelineResponse:
    """Serialize an aggregator's published buckets, oldest day first."""
    if buckets is None:
        buckets = aggregator.buckets.value or {}
    tz = aggregator.config.tzinfo
    days = [
        TimelineDayResponse(
            dayTimestampMs=key,
            date=day_of_key(key, tz).isoformat(),
            sessions=[_session_response(display) for display in buckets[key]],
        )
        for key in sorted(buckets)
    ]
    return TimelineResponse(
        projectId=aggregator.project_id,
        state=aggregator.state.value,
        available=aggregator.available,
        error=str(aggregator.error) if aggregator.error else None,
        days=days,
        totalSessions=sum(len(day.sessions) for day in days),
    )


def _respond(aggregator: TimelineAggregator) -> TimelineResponse:
    if aggregator.error is not None and aggregator.buckets.value is None:
        # Nothing was ever published, so there is no previous timeline to fall back on
        raise HTTPException(
            status_code=503,
            detail=f"Timeline unavailable: {aggregator.error}",
        )
    return build_timeline_response(aggregator)


@router.get("/{project_id}")
async def get_timeline(project_id: str, request: Request) -> TimelineResponse:
    """Get a project's sessions grouped by day"""
    aggregator = _get_aggregator(request, project_id)
    await aggregator.settle()
    return _respond(aggregator)


@router.post("/{project_id}/refresh")
async def refresh_timeline(project_id: str, request: Request) -> TimelineResponse:
    """Re-fetch deltas and rebuild the timeline"""
    aggregator = _get_aggregator(request, project_id)
    aggregator.refresh()
    await aggregator.settle()
    return _respond(aggregator)


async def timeline_events(aggregator: TimelineAggregator) -> AsyncGenerator[str, None]:
    """Yield one SSE ``timeline`` event per published result."""
    async for buckets in aggregator.buckets.updates():
        payload = build_timeline_response(aggregator, buckets).model_dump_json()
        yield f"event: timeline\ndata: {payload}\n\n"


@router.get("/{project_id}/stream")
async def stream_timeline(project_id: str, request: Request) -> StreamingResponse:
    """Stream timeline updates as Server-Sent Events"""
    aggregator = _get_aggregator(request, project_id)
    logger.debug("Opening timeline stream for %s", project_id)
    return StreamingResponse(
        timeline_events(aggregator),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
