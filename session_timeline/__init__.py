"""Day-grouped session timelines built from recorded file deltas."""

__version__ = "0.1.0"
