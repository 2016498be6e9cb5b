"""Per-nurture analysis bundle consumed by both alert paths."""

from dataclasses import dataclass, field
from datetime import datetime

from bloomie.engine.analysis.categorize import ActionCategory
from bloomie.engine.analysis.intervals import IntervalStats, build_interval_stats, recent_window
from bloomie.engine.analysis.trends import (
    HealthScoreTrend,
    MoodTrend,
    analyze_activity_trends,
    analyze_health_scores,
    analyze_moods,
)
from bloomie.engine.config import DetectorConfig
from bloomie.engine.schema import ActivityLog, Nurture


@dataclass
class CareContext:
    """Everything the alert synthesizers know about one nurture at ``now``."""

    nurture: Nurture
    now: datetime
    logs: list[ActivityLog]  # windowed, oldest first
    intervals: dict[ActionCategory, IntervalStats]
    health: HealthScoreTrend
    mood: MoodTrend
    activity_trends: dict[ActionCategory, str] = field(default_factory=dict)

    def interval(self, category: ActionCategory) -> IntervalStats | None:
        return self.intervals.get(category)

    def recent_logs(self, limit: int) -> list[ActivityLog]:
        """The ``limit`` most recent windowed logs, newest first."""
        return list(reversed(self.logs))[:limit]


def build_care_context(
    nurture: Nurture,
    logs: list[ActivityLog],
    now: datetime,
    config: DetectorConfig = None,
) -> CareContext:
    """Run interval statistics and all trend analyses for one nurture."""
    if config is None:
        config = DetectorConfig()

    window = recent_window(logs, now, config.window_days)
    intervals = build_interval_stats(window, now, config.window_days)
    return CareContext(
        nurture=nurture,
        now=now,
        logs=window,
        intervals=intervals,
        health=analyze_health_scores(window, config),
        mood=analyze_moods(window, config),
        activity_trends=analyze_activity_trends(intervals, now, config),
    )
