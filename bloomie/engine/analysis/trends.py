"""Trend analysis for health scores, moods, and activity frequency.

All three compare a recent window against an older one:
- health score: mean of the last N scores vs the first N before them
- mood: share of negative moods among the last few mood labels
- activity frequency: occurrences per day in the last N vs the older N
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from bloomie.engine.analysis.categorize import ActionCategory
from bloomie.engine.analysis.intervals import SECONDS_PER_DAY, IntervalStats
from bloomie.engine.config import DetectorConfig
from bloomie.engine.schema import ActivityLog

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"
INCREASING = "increasing"
DECREASING = "decreasing"
CONCERNING = "concerning"
NORMAL = "normal"
INSUFFICIENT_DATA = "insufficient_data"

# Floor for a frequency window's span, so same-instant bursts stay finite
_MIN_SPAN_DAYS = 1 / 24


@dataclass
class HealthScoreTrend:
    current_score: float | None
    trend: str
    previous_score: float | None = None
    history: list[tuple[datetime, float]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current": round(self.current_score, 2) if self.current_score is not None else None,
            "trend": self.trend,
            "history": [{"date": ts.isoformat(), "score": score} for ts, score in self.history],
        }


@dataclass
class MoodTrend:
    dominant_mood: str | None
    recent_trend: str
    distribution: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "dominant": self.dominant_mood,
            "trend": self.recent_trend,
            "distribution": dict(self.distribution),
        }


def split_windows(series: list, window: int) -> tuple[list, list]:
    """Split into (older, recent): recent is the last ``window`` items,
    older is up to ``window`` items from the head that do not overlap it."""
    recent = series[-window:]
    older = series[: max(0, min(window, len(series) - window))]
    return older, recent


def analyze_health_scores(logs: list[ActivityLog], config: DetectorConfig = None) -> HealthScoreTrend:
    """Classify the health-score direction over the windowed logs."""
    if config is None:
        config = DetectorConfig()

    scored = sorted(
        ((log.created_at, log.health_score) for log in logs if log.health_score is not None),
        key=lambda pair: pair[0],
    )
    history = scored[-10:]
    scores = [score for _, score in scored]

    if len(scores) < 3:
        current = float(np.mean(scores)) if scores else None
        return HealthScoreTrend(current_score=current, trend=INSUFFICIENT_DATA, history=history)

    older, recent = split_windows(scores, config.trend_window)
    recent_avg = float(np.mean(recent))
    if not older:
        return HealthScoreTrend(current_score=recent_avg, trend=STABLE, history=history)

    older_avg = float(np.mean(older))
    if recent_avg > older_avg + config.score_delta:
        trend = IMPROVING
    elif recent_avg < older_avg - config.score_delta:
        trend = DECLINING
    else:
        trend = STABLE
    return HealthScoreTrend(current_score=recent_avg, trend=trend, previous_score=older_avg, history=history)


def analyze_moods(logs: list[ActivityLog], config: DetectorConfig = None) -> MoodTrend:
    """Dominant mood plus whether recent moods skew negative."""
    if config is None:
        config = DetectorConfig()

    moods = [log.mood for log in sorted(logs, key=lambda log: log.created_at) if log.mood]
    distribution = Counter(moods)
    dominant = distribution.most_common(1)[0][0] if distribution else None

    if len(moods) < 3:
        trend = INSUFFICIENT_DATA
    else:
        negative = sum(1 for mood in moods[-config.mood_window :] if mood in config.negative_moods)
        trend = CONCERNING if negative > config.mood_negative_limit else NORMAL

    return MoodTrend(dominant_mood=dominant, recent_trend=trend, distribution=dict(distribution))


def _rate_per_day(count: int, start: datetime, end: datetime) -> float:
    span = max((end - start).total_seconds() / SECONDS_PER_DAY, _MIN_SPAN_DAYS)
    return count / span


def activity_frequency_trend(timestamps: list[datetime], now: datetime, config: DetectorConfig = None) -> str | None:
    """Compare occurrences/day of the recent window with the older window.

    Each window's span runs from its first timestamp to the start of whatever
    follows it (the next timestamp, or ``now`` for the recent window).
    Returns None when there is not enough data for both windows.
    """
    if config is None:
        config = DetectorConfig()

    series = sorted(timestamps)
    if len(series) < config.min_frequency_points:
        return None
    older, recent = split_windows(series, config.trend_window)
    if not older or not recent:
        return None

    recent_rate = _rate_per_day(len(recent), recent[0], now)
    older_rate = _rate_per_day(len(older), older[0], series[len(older)])

    if recent_rate > older_rate * config.frequency_increase_ratio:
        return INCREASING
    if recent_rate < older_rate * config.frequency_decrease_ratio:
        return DECREASING
    return STABLE


def analyze_activity_trends(
    stats: dict[ActionCategory, IntervalStats],
    now: datetime,
    config: DetectorConfig = None,
) -> dict[ActionCategory, str]:
    """Frequency trend per category, for categories with enough history."""
    trends = {}
    for category, entry in stats.items():
        trend = activity_frequency_trend(entry.timestamps, now, config)
        if trend is not None:
            trends[category] = trend
    return trends
