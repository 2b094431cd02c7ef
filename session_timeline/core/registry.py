"""Per-project aggregator registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .aggregator import TimelineAggregator
from .config import TimelineConfig
from .sources import DeltaFetcher, SessionSource

if TYPE_CHECKING:
    from ..utils.file_watcher import SessionStoreWatcher

logger = logging.getLogger(__name__)


class TimelineRegistry:
    """Creates one started ``TimelineAggregator`` per project on first use."""

    def __init__(
        self,
        session_source: SessionSource,
        list_deltas: DeltaFetcher,
        config: TimelineConfig | None = None,
    ):
        self.session_source = session_source
        self.list_deltas = list_deltas
        self.config = config or TimelineConfig()
        self._aggregators: dict[str, TimelineAggregator] = {}
        self._watchers: dict[str, SessionStoreWatcher] = {}

    def has_project(self, project_id: str) -> bool:
        return self.session_source.has_project(project_id)

    def get(self, project_id: str) -> TimelineAggregator:
        """Return the project's aggregator, starting it if needed.

        Must be called from within the running event loop.
        """
        aggregator = self._aggregators.get(project_id)
        if aggregator is None:
            aggregator = TimelineAggregator(
                project_id,
                self.session_source,
                self.list_deltas,
                config=self.config,
            )
            aggregator.start()
            self._aggregators[project_id] = aggregator
            logger.debug("Started timeline aggregator for %s", project_id)
        return aggregator

    def active_projects(self) -> list[str]:
        return sorted(self._aggregators)

    def watch(self, project_id: str, store_path: Path) -> None:
        """Refresh a project's timeline whenever files under ``store_path`` change."""
        from ..utils.file_watcher import SessionStoreWatcher

        if project_id in self._watchers:
            return
        aggregator = self.get(project_id)
        watcher = SessionStoreWatcher(
            store_path,
            on_change=aggregator.refresh_threadsafe,
            debounce_ms=self.config.watch_debounce_ms,
        )
        watcher.start()
        self._watchers[project_id] = watcher

    def close(self) -> None:
        """Stop all watchers and aggregators."""
        for watcher in self._watchers.values():
            watcher.stop()
        self._watchers.clear()
        for aggregator in self._aggregators.values():
            aggregator.close()
        self._aggregators.clear()
