"""Tests for timeline configuration."""

from zoneinfo import ZoneInfo

import pytest

from session_timeline.core import TimelineConfig


class TestTimelineConfig:
    """Tests for TimelineConfig."""

    def test_defaults(self):
        config = TimelineConfig()

        assert config.timezone is None
        assert config.tzinfo is None
        assert config.watch_debounce_ms == 500
        assert config.log_level == "INFO"

    def test_named_zone(self):
        config = TimelineConfig(timezone="Europe/Berlin")
        assert config.tzinfo == ZoneInfo("Europe/Berlin")

    def test_local_keyword_means_host_zone(self):
        assert TimelineConfig(timezone="local").tzinfo is None

    def test_unknown_zone_rejected(self):
        with pytest.raises(ValueError, match="Unknown time zone"):
            TimelineConfig(timezone="Mars/Olympus_Mons")

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError):
            TimelineConfig(log_level="chatty")

    def test_negative_debounce_rejected(self):
        with pytest.raises(ValueError):
            TimelineConfig(watch_debounce_ms=-1)

    def test_log_level_normalized(self):
        assert TimelineConfig(log_level="debug").log_level == "DEBUG"

    def test_from_dict(self):
        config = TimelineConfig.from_dict({"timezone": "UTC", "watch_debounce_ms": "250"})

        assert config.timezone == "UTC"
        assert config.watch_debounce_ms == 250
        assert TimelineConfig.from_dict(config.to_dict()) == config

    def test_from_env(self):
        config = TimelineConfig.from_env(
            {
                "SESSION_TIMELINE_TZ": "Asia/Tokyo",
                "SESSION_TIMELINE_WATCH_DEBOUNCE_MS": "0",
                "SESSION_TIMELINE_LOG_LEVEL": "warning",
            }
        )

        assert config.timezone == "Asia/Tokyo"
        assert config.watch_debounce_ms == 0
        assert config.log_level == "WARNING"

    def test_from_env_empty(self):
        assert TimelineConfig.from_env({}) == TimelineConfig()
