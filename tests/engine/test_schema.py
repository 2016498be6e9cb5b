"""Tests for the data model and its wire format."""

from datetime import UTC, datetime

import pytest

from bloomie.engine.schema import (
    AckAction,
    AcknowledgementRecord,
    ActivityLog,
    AlertCategory,
    AlertData,
    AlertType,
    HealthAlert,
    Nurture,
    NurtureType,
    Urgency,
    parse_ts,
)


class TestParseTs:
    def test_trailing_z(self):
        assert parse_ts("2026-03-01T08:00:00Z") == datetime(2026, 3, 1, 8, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert parse_ts("2026-03-01T08:00:00").tzinfo == UTC

    def test_garbage(self):
        assert parse_ts("yesterday") is None
        assert parse_ts(None) is None


class TestActivityLog:
    def test_from_dict(self):
        log = ActivityLog.from_dict(
            {
                "id": 42,
                "nurture_id": "n1",
                "created_at": "2026-03-01T08:00:00.000Z",
                "raw_input": "fed 100g kibble",
                "parsed_action": "fed",
                "parsed_amount": "100g",
                "health_score": 4,
                "photo_urls": ["a.jpg"],
            }
        )
        assert log.id == "42"
        assert log.health_score == 4.0
        assert log.photo_urls == ("a.jpg",)
        assert log.parsed_notes is None

    def test_mood_normalized(self):
        base = {"id": "1", "nurture_id": "n1", "created_at": "2026-03-01T08:00:00Z"}
        assert ActivityLog.from_dict({**base, "mood": "Sad"}).mood == "sad"
        assert ActivityLog.from_dict({**base, "mood": "grumpy"}).mood is None

    def test_missing_timestamp_rejected(self):
        with pytest.raises(ValueError):
            ActivityLog.from_dict({"id": "1", "nurture_id": "n1"})


class TestNurture:
    def test_from_dict(self):
        nurture = Nurture.from_dict(
            {"id": "p1", "name": "Rex", "type": "pet", "user_id": "u1", "metadata": {"breed": "dog"}}
        )
        assert nurture.type == NurtureType.PET
        assert nurture.species == "dog"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Nurture.from_dict({"id": "x", "name": "X", "type": "robot"})

    def test_age_months(self, now):
        baby = Nurture(id="b1", name="Ada", type=NurtureType.BABY, metadata={"birth_date": "2025-12-15"})
        assert baby.age_months(now) == 3

    def test_age_unknown(self, now, make_nurture):
        assert make_nurture().age_months(now) is None


class TestAlertWireFormat:
    def test_camel_case_keys(self, now):
        alert = HealthAlert(
            id="alert-n1-abc",
            nurture_id="n1",
            nurture_name="Fern",
            type=AlertType.WARNING,
            category=AlertCategory.WATERING,
            title="Fern May Need Water",
            message="m",
            details="d",
            suggested_actions=["Water"],
            urgency=Urgency.MEDIUM,
            detected_at=now,
            data=AlertData(expected_interval=7, actual_interval=12),
        )
        out = alert.to_dict()
        assert out["nurtureId"] == "n1"
        assert out["suggestedActions"] == ["Water"]
        assert out["type"] == "warning"
        assert out["data"] == {"expectedInterval": 7, "actualInterval": 12}

    def test_alert_data_accepts_either_case(self):
        data = AlertData.from_dict({"expectedInterval": 5, "health_score": 2.5, "bogus": 1})
        assert data.expected_interval == 5
        assert data.health_score == 2.5


class TestAcknowledgementRecord:
    def test_round_trip(self, now):
        record = AcknowledgementRecord("alert-1", AckAction.ACTION_TAKEN, now)
        assert record.to_dict()["action"] == "action_taken"
        assert AcknowledgementRecord.from_dict(record.to_dict()) == record
