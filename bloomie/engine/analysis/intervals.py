"""Interval statistics — how often each care action happens, and how long ago.

For every action category seen in the trailing window, computes the mean gap
between consecutive occurrences (needs 2+) and the time since the most recent
one. Input order never matters: timestamps are sorted before any arithmetic.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import numpy as np

from bloomie.engine.analysis.categorize import ActionCategory, categorize
from bloomie.engine.schema import ActivityLog

SECONDS_PER_DAY = 86400.0


@dataclass
class IntervalStats:
    """Per-category interval summary."""

    category: ActionCategory
    days_since_last: float
    last_occurrence: datetime
    mean_interval_days: float | None = None
    timestamps: list[datetime] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.timestamps)

    @property
    def days_since_last_display(self) -> int:
        return math.floor(self.days_since_last)


def recent_window(logs: list[ActivityLog], now: datetime, window_days: int = 30) -> list[ActivityLog]:
    """Logs created within ``window_days`` of ``now``, oldest first."""
    cutoff = now - timedelta(days=window_days)
    return sorted((log for log in logs if log.created_at >= cutoff), key=lambda log: log.created_at)


def mean_gap_days(timestamps: list[datetime]) -> float | None:
    """Arithmetic mean of consecutive gaps in days, or None for fewer than 2."""
    if len(timestamps) < 2:
        return None
    seconds = np.array(sorted(ts.timestamp() for ts in timestamps))
    return float(np.mean(np.diff(seconds))) / SECONDS_PER_DAY


def build_interval_stats(
    logs: list[ActivityLog],
    now: datetime,
    window_days: int = 30,
) -> dict[ActionCategory, IntervalStats]:
    """Group windowed logs by category and summarize their intervals."""
    by_category: dict[ActionCategory, list[datetime]] = defaultdict(list)
    for log in recent_window(logs, now, window_days):
        by_category[categorize(log)].append(log.created_at)

    stats = {}
    for category, timestamps in by_category.items():
        timestamps.sort()
        last = timestamps[-1]
        stats[category] = IntervalStats(
            category=category,
            days_since_last=(now - last).total_seconds() / SECONDS_PER_DAY,
            last_occurrence=last,
            mean_interval_days=mean_gap_days(timestamps),
            timestamps=timestamps,
        )
    return stats
