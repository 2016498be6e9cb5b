"""Tests for per-category interval statistics."""

import random
from datetime import timedelta

import pytest

from bloomie.engine.analysis.categorize import ActionCategory
from bloomie.engine.analysis.intervals import build_interval_stats, mean_gap_days, recent_window


class TestMeanGap:
    def test_fewer_than_two(self, now):
        assert mean_gap_days([]) is None
        assert mean_gap_days([now]) is None

    def test_arithmetic_mean_of_gaps(self, now):
        stamps = [now - timedelta(days=d) for d in (10, 7, 1)]
        # gaps 3 and 6
        assert mean_gap_days(stamps) == pytest.approx(4.5)


class TestRecentWindow:
    def test_drops_old_logs_and_sorts(self, make_log, now):
        logs = [make_log(action="water", days_ago=d) for d in (2, 40, 10)]
        window = recent_window(logs, now, window_days=30)
        assert [log.created_at for log in window] == [now - timedelta(days=10), now - timedelta(days=2)]


class TestBuildIntervalStats:
    def test_mean_and_days_since_last(self, make_log, now):
        logs = [make_log(action="watered", days_ago=d) for d in (9, 6, 3)]
        stats = build_interval_stats(logs, now)

        water = stats[ActionCategory.WATERING]
        assert water.mean_interval_days == pytest.approx(3.0)
        assert water.days_since_last == pytest.approx(3.0)
        assert water.last_occurrence == now - timedelta(days=3)
        assert water.count == 3

    def test_single_occurrence_has_no_mean(self, make_log, now):
        stats = build_interval_stats([make_log(action="fed", hours_ago=5)], now)
        feeding = stats[ActionCategory.FEEDING]
        assert feeding.mean_interval_days is None
        assert feeding.days_since_last == pytest.approx(5 / 24)

    def test_groups_by_category(self, make_log, now):
        logs = [
            make_log(action="fed", hours_ago=2),
            make_log(action="walk", hours_ago=3),
            make_log(action="repotted", hours_ago=4),
        ]
        stats = build_interval_stats(logs, now)
        assert set(stats) == {ActionCategory.FEEDING, ActionCategory.WALK, ActionCategory.OTHER}

    def test_sort_independence(self, make_log, now):
        logs = [make_log(action="feed", hours_ago=h) for h in (50, 41, 30, 22, 9, 1)]
        baseline = build_interval_stats(logs, now)[ActionCategory.FEEDING]

        shuffled = list(logs)
        random.Random(7).shuffle(shuffled)
        reordered = build_interval_stats(shuffled, now)[ActionCategory.FEEDING]

        assert reordered.mean_interval_days == pytest.approx(baseline.mean_interval_days)
        assert reordered.last_occurrence == baseline.last_occurrence
        assert reordered.days_since_last == pytest.approx(baseline.days_since_last)

    def test_display_value_is_floored(self, make_log, now):
        stats = build_interval_stats([make_log(action="water", days_ago=12.8)], now)
        assert stats[ActionCategory.WATERING].days_since_last_display == 12
