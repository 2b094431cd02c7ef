"""Timeline configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import tzinfo

from ..utils import resolve_timezone

ENV_PREFIX = "SESSION_TIMELINE_"


@dataclass
class TimelineConfig:
    """Aggregation and runtime settings.

    ``timezone`` is an IANA zone name used to decide calendar days; ``None``
    means the host's local zone.
    """

    timezone: str | None = None
    watch_debounce_ms: int = 500
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        resolve_timezone(self.timezone)
        if self.watch_debounce_ms < 0:
            raise ValueError("watch_debounce_ms must be >= 0")
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        self.log_level = level

    @property
    def tzinfo(self) -> tzinfo | None:
        return resolve_timezone(self.timezone)

    @classmethod
    def from_dict(cls, data: Mapping) -> TimelineConfig:
        debounce = data.get("watch_debounce_ms")
        return cls(
            timezone=data.get("timezone") or None,
            watch_debounce_ms=500 if debounce in (None, "") else int(debounce),
            log_level=str(data.get("log_level") or "INFO"),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TimelineConfig:
        """Load settings from ``SESSION_TIMELINE_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls.from_dict(
            {
                "timezone": env.get(f"{ENV_PREFIX}TZ"),
                "watch_debounce_ms": env.get(f"{ENV_PREFIX}WATCH_DEBOUNCE_MS"),
                "log_level": env.get(f"{ENV_PREFIX}LOG_LEVEL"),
            }
        )

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "watch_debounce_ms": self.watch_debounce_ms,
            "log_level": self.log_level,
        }
