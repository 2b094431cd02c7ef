"""File system monitoring for live timeline refreshes."""

import fnmatch
import logging
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class FileChangeHandler(FileSystemEventHandler):
    """Collects matching file events and flushes them after a quiet period."""

    def __init__(
        self,
        callback: Callable[[dict[Path, str]], None],
        patterns: list[str],
        debounce_ms: int = 500,
    ):
        super().__init__()
        self.callback = callback
        self.patterns = patterns
        self.debounce_ms = debounce_ms
        self._debounce_timer: threading.Timer | None = None
        self._pending_events: dict[Path, str] = {}
        self._lock = threading.Lock()

    def _matches_pattern(self, path: Path) -> bool:
        """Check if path matches any of the watched patterns."""
        return any(fnmatch.fnmatch(path.name, pattern) for pattern in self.patterns)

    def _handle_event(self, event: FileSystemEvent, event_type: str) -> None:
        """Handle a file system event with debouncing."""
        if event.is_directory:
            return

        path = Path(event.src_path)
        if not self._matches_pattern(path):
            return

        with self._lock:
            self._pending_events[path] = event_type

            if self._debounce_timer:
                self._debounce_timer.cancel()

            self._debounce_timer = threading.Timer(
                self.debounce_ms / 1000.0,
                self.flush,
            )
            self._debounce_timer.daemon = True
            self._debounce_timer.start()

    def flush(self) -> None:
        """Deliver pending events as one batch."""
        with self._lock:
            events = self._pending_events.copy()
            self._pending_events.clear()
            self._debounce_timer = None

        if not events:
            return
        try:
            self.callback(events)
        except Exception:
            logger.exception("File change callback failed for %d path(s)", len(events))

    def cancel(self) -> None:
        with self._lock:
            if self._debounce_timer:
                self._debounce_timer.cancel()
                self._debounce_timer = None
            self._pending_events.clear()

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event, "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event, "modified")

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event, "deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event(event, "moved")


class FileWatcher:
    """Watches directories and reports debounced batches of changes.

    Usage:
        watcher = FileWatcher()
        watcher.watch(
            path=Path("/store"),
            patterns=["*.json"],
            callback=lambda events: print(events),
        )
        watcher.start()
        # ... later
        watcher.stop()
    """

    def __init__(self):
        self._observer: Observer | None = None
        self._handlers: list[FileChangeHandler] = []
        self._running = False

    def watch(
        self,
        path: Path,
        patterns: list[str],
        callback: Callable[[dict[Path, str]], None],
        recursive: bool = False,
        debounce_ms: int = 500,
    ) -> FileChangeHandler:
        """Add a watch for files matching patterns.

        Args:
            path: Directory to watch
            patterns: File patterns to match (e.g., ["*.json"])
            callback: Called with ``{path: event_type}`` once changes settle
            recursive: Whether to watch subdirectories
            debounce_ms: Quiet period before a batch is delivered
        """
        if not self._observer:
            self._observer = Observer()

        handler = FileChangeHandler(
            callback=callback,
            patterns=patterns,
            debounce_ms=debounce_ms,
        )
        self._handlers.append(handler)

        self._observer.schedule(
            handler,
            str(path),
            recursive=recursive,
        )
        return handler

    def start(self) -> None:
        """Start watching for changes."""
        if self._observer and not self._running:
            self._observer.start()
            self._running = True

    def stop(self) -> None:
        """Stop watching and drop undelivered changes."""
        for handler in self._handlers:
            handler.cancel()
        if self._observer and self._running:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._running = False

    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def __enter__(self) -> "FileWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


class SessionStoreWatcher(FileWatcher):
    """Calls ``on_change`` once per burst of changes under a session store directory."""

    def __init__(
        self,
        store_path: Path,
        on_change: Callable[[], None],
        patterns: list[str] | None = None,
        debounce_ms: int = 500,
    ):
        super().__init__()
        self.store_path = store_path
        self.watch(
            path=store_path,
            patterns=patterns or ["*"],
            callback=lambda events: self._notify(on_change, events),
            recursive=True,
            debounce_ms=debounce_ms,
        )

    def _notify(self, on_change: Callable[[], None], events: dict[Path, str]) -> None:
        logger.debug("Session store %s changed (%d path(s))", self.store_path, len(events))
        on_change()
