"""Shared timestamps and identifiers for the test suite."""

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS
# 2024-02-10T00:00:00Z
DAY1_MS = 1_707_523_200_000
PROJECT_ID = "proj-1"
