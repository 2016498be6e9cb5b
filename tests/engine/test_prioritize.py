"""Tests for per-nurture prioritization and cross-nurture ordering."""

from datetime import UTC, datetime

from bloomie.engine.alerts.prioritize import prioritize, sort_alerts
from bloomie.engine.schema import AlertCategory, AlertType, HealthAlert, Urgency

DETECTED_AT = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


def _alert(alert_type, urgency=Urgency.MEDIUM, name="a", nurture_id="n1"):
    return HealthAlert(
        id=f"alert-{nurture_id}-{name}",
        nurture_id=nurture_id,
        nurture_name="Fern",
        type=AlertType(alert_type),
        category=AlertCategory.HEALTH,
        title=name,
        message="",
        details="",
        suggested_actions=[],
        urgency=Urgency(urgency),
        detected_at=DETECTED_AT,
    )


class TestPrioritize:
    def test_urgent_crowds_out_info(self):
        alerts = [
            _alert("info", name="i1"),
            _alert("warning", name="w1"),
            _alert("urgent", Urgency.HIGH, name="u1"),
            _alert("warning", name="w2"),
            _alert("warning", name="w3"),
        ]
        selected = prioritize(alerts)

        types = [a.type for a in selected]
        assert AlertType.INFO not in types
        assert types.count(AlertType.WARNING) <= 2
        assert "u1" in [a.title for a in selected]
        assert len(selected) == 3

    def test_all_urgent_kept(self):
        alerts = [_alert("urgent", name="u1"), _alert("urgent", name="u2"), _alert("warning", name="w1")]
        assert [a.title for a in prioritize(alerts)] == ["u1", "u2", "w1"]

    def test_warnings_keep_one_info(self):
        alerts = [
            _alert("warning", name="w1"),
            _alert("info", name="i1"),
            _alert("warning", name="w2"),
            _alert("warning", name="w3"),
            _alert("info", name="i2"),
        ]
        assert [a.title for a in prioritize(alerts)] == ["w1", "w2", "i1"]

    def test_info_only_keeps_two(self):
        alerts = [_alert("info", Urgency.LOW, name=f"i{n}") for n in range(4)]
        assert [a.title for a in prioritize(alerts)] == ["i0", "i1"]

    def test_empty(self):
        assert prioritize([]) == []


class TestSortAlerts:
    def test_type_then_urgency(self):
        alerts = [
            _alert("info", Urgency.LOW, name="i"),
            _alert("warning", Urgency.LOW, name="w-low"),
            _alert("urgent", Urgency.HIGH, name="u"),
            _alert("warning", Urgency.HIGH, name="w-high"),
        ]
        assert [a.title for a in sort_alerts(alerts)] == ["u", "w-high", "w-low", "i"]

    def test_stable_for_ties(self):
        alerts = [_alert("warning", name=n, nurture_id=n) for n in ("a", "b", "c")]
        assert [a.title for a in sort_alerts(alerts)] == ["a", "b", "c"]
