"""Timeline error types."""


class TimelineError(Exception):
    """Base class for timeline aggregation failures."""


class FetchFailure(TimelineError):
    """Fetching the deltas of one session failed, failing the whole pass."""

    def __init__(self, session_id: str, cause: BaseException | None = None):
        self.session_id = session_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch deltas for session {session_id}{detail}")


class EmptyBoundsError(TimelineError):
    """Delta timestamp bounds were requested for a session without deltas."""

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id
        target = f"session {session_id}" if session_id else "delta map"
        super().__init__(f"Cannot compute delta bounds: {target} has no deltas")
