"""Interval and trend analysis over per-nurture activity logs."""

from bloomie.engine.analysis.categorize import ActionCategory, categorize
from bloomie.engine.analysis.context import CareContext, build_care_context
from bloomie.engine.analysis.intervals import IntervalStats, build_interval_stats, recent_window
from bloomie.engine.analysis.trends import (
    HealthScoreTrend,
    MoodTrend,
    analyze_activity_trends,
    analyze_health_scores,
    analyze_moods,
)

__all__ = [
    "ActionCategory",
    "categorize",
    "CareContext",
    "build_care_context",
    "IntervalStats",
    "build_interval_stats",
    "recent_window",
    "HealthScoreTrend",
    "MoodTrend",
    "analyze_health_scores",
    "analyze_moods",
    "analyze_activity_trends",
]
