"""Interfaces to the external session and delta stores."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol

from .models import DeltaMap, Session, delta_map_from_dict
from .observable import Observable

SessionCallback = Callable[[list[Session]], None]

# (project_id, session_id) -> that session's deltas; may raise on storage errors
DeltaFetcher = Callable[[str, str], Awaitable[DeltaMap]]


class SessionSource(Protocol):
    """Observable list of a project's sessions, ascending by start time."""

    def has_project(self, project_id: str) -> bool: ...

    def list_sessions(self, project_id: str) -> list[Session]: ...

    def subscribe(self, project_id: str, callback: SessionCallback) -> Callable[[], None]: ...


class InMemorySessionSource:
    """Session source backed by per-project observable slots."""

    def __init__(self, sessions: dict[str, Iterable[Session]] | None = None):
        self._projects: dict[str, Observable[tuple[Session, ...]]] = {}
        for project_id, items in (sessions or {}).items():
            self.set_sessions(project_id, items)

    def _slot(self, project_id: str) -> Observable[tuple[Session, ...]]:
        if project_id not in self._projects:
            self._projects[project_id] = Observable(())
        return self._projects[project_id]

    def has_project(self, project_id: str) -> bool:
        return project_id in self._projects

    def list_projects(self) -> list[str]:
        return sorted(self._projects)

    def list_sessions(self, project_id: str) -> list[Session]:
        slot = self._projects.get(project_id)
        if slot is None:
            return []
        return list(slot.value or ())

    def set_sessions(self, project_id: str, sessions: Iterable[Session]) -> None:
        """Replace a project's sessions and notify subscribers."""
        self._slot(project_id).set(tuple(sessions))

    def add_session(self, project_id: str, session: Session) -> None:
        self.set_sessions(project_id, [*self.list_sessions(project_id), session])

    def subscribe(self, project_id: str, callback: SessionCallback) -> Callable[[], None]:
        return self._slot(project_id).subscribe(lambda sessions: callback(list(sessions)))


class InMemoryDeltaStore:
    """Delta fetcher serving deltas held in memory.

    Each fetch returns a deep copy, so callers may reorder what they get.
    Sessions without recorded deltas yield an empty map.
    """

    def __init__(self):
        self._deltas: dict[tuple[str, str], DeltaMap] = {}

    def set_deltas(self, project_id: str, session_id: str, delta_map: DeltaMap) -> None:
        self._deltas[(project_id, session_id)] = copy.deepcopy(delta_map)

    async def list_deltas(self, project_id: str, session_id: str) -> DeltaMap:
        return copy.deepcopy(self._deltas.get((project_id, session_id), {}))

    async def __call__(self, project_id: str, session_id: str) -> DeltaMap:
        return await self.list_deltas(project_id, session_id)


def load_snapshot(path: Path | str) -> tuple[InMemorySessionSource, InMemoryDeltaStore]:
    """Load sessions and deltas from a JSON snapshot file.

    Expected shape::

        {"projects": {"<project id>": [
            {"id": "...", "meta": {"startTimestampMs": ...},
             "deltas": {"<file path>": [{"timestampMs": ..., "operations": [...]}]}}
        ]}}

    Raises ValueError for unreadable JSON or malformed records.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid session snapshot {path}: {exc}") from exc

    source = InMemorySessionSource()
    store = InMemoryDeltaStore()
    for project_id, records in (raw.get("projects") or {}).items():
        sessions = []
        for record in records:
            session = Session.from_dict(record)
            sessions.append(session)
            store.set_deltas(project_id, session.id, delta_map_from_dict(record.get("deltas") or {}))
        source.set_sessions(project_id, sessions)
    return source, store
