"""End-to-end tests for the care-pattern anomaly detector."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bloomie.engine.alerts import detector
from bloomie.engine.alerts.detector import detect_alerts, detect_nurture_alerts
from bloomie.engine.config import AppConfig, LLMConfig
from bloomie.engine.schema import AlertCategory, AlertType, NurtureType, Urgency


@pytest.fixture
def online_config():
    return AppConfig(llm=LLMConfig(api_key="sk-test"))


@pytest.fixture
def pothos(make_nurture):
    return make_nurture("plant-1", NurtureType.PLANT, name="Goldie", species="pothos")


@pytest.fixture
def dog(make_nurture):
    return make_nurture("pet-1", NurtureType.PET, name="Rex", species="dog")


@pytest.fixture
def pothos_logs(make_log):
    return [make_log("plant-1", action="watered", days_ago=d) for d in (20, 16, 12)]


@pytest.fixture
def dog_logs(make_log):
    return [make_log("pet-1", action="fed", hours_ago=h) for h in (59, 49, 39, 29, 19)]


class TestInsufficientData:
    async def test_fewer_than_three_logs(self, pothos, make_log, now, offline_config):
        logs = [make_log("plant-1", action="watered", days_ago=d) for d in (30, 20)]
        assert await detect_nurture_alerts(pothos, logs, now, offline_config) == []

    async def test_other_nurtures_logs_do_not_count(self, pothos, make_log, now, offline_config):
        logs = [make_log("plant-1", action="watered", days_ago=20)]
        logs += [make_log("pet-1", action="fed", hours_ago=h) for h in (30, 20, 10)]
        assert await detect_nurture_alerts(pothos, logs, now, offline_config) == []

    async def test_no_nurtures(self, pothos_logs, now, offline_config):
        assert await detect_alerts([], pothos_logs, now, offline_config) == []


class TestFallbackPath:
    async def test_pothos_overdue(self, pothos, pothos_logs, now, offline_config):
        alerts = await detect_nurture_alerts(pothos, pothos_logs, now, offline_config)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.WARNING
        assert alert.category == AlertCategory.WATERING
        assert alert.data.to_dict()["expectedInterval"] == 7
        assert alert.data.to_dict()["actualInterval"] == 12

    async def test_dog_feeding_overdue(self, dog, dog_logs, now, offline_config):
        alerts = await detect_nurture_alerts(dog, dog_logs, now, offline_config)

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.URGENT
        assert alerts[0].urgency == Urgency.HIGH
        assert alerts[0].category == AlertCategory.FEEDING

    async def test_recomputed_alert_keeps_its_id(self, pothos, pothos_logs, now, offline_config):
        first = await detect_nurture_alerts(pothos, pothos_logs, now, offline_config)
        second = await detect_nurture_alerts(pothos, list(reversed(pothos_logs)), now, offline_config)
        assert [a.id for a in first] == [a.id for a in second]


class TestLLMPath:
    async def test_llm_failure_falls_back(self, pothos, pothos_logs, now, online_config):
        with patch.object(detector, "request_llm_alerts", new=AsyncMock(return_value=None)) as mock_llm:
            alerts = await detect_nurture_alerts(pothos, pothos_logs, now, online_config)

        mock_llm.assert_awaited_once()
        assert [a.category for a in alerts] == [AlertCategory.WATERING]

    async def test_llm_all_clear_is_respected(self, pothos, pothos_logs, now, online_config):
        with patch.object(detector, "request_llm_alerts", new=AsyncMock(return_value=[])):
            assert await detect_nurture_alerts(pothos, pothos_logs, now, online_config) == []

    async def test_llm_disabled_skips_call(self, pothos, pothos_logs, now, offline_config):
        with patch.object(detector, "request_llm_alerts", new=AsyncMock()) as mock_llm:
            await detect_nurture_alerts(pothos, pothos_logs, now, offline_config)
        mock_llm.assert_not_awaited()

    async def test_transport_failure_falls_back(self, pothos, pothos_logs, now, online_config):
        with patch("bloomie.engine.llm.health_alerts.chat_completion", new=AsyncMock(return_value="")):
            alerts = await detect_nurture_alerts(pothos, pothos_logs, now, online_config)
        assert len(alerts) == 1
        assert alerts[0].category == AlertCategory.WATERING

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": [{"message": {"content": {"alerts": []}}}]},
            {"choices": [{"message": {"content": ["not", "text"]}}]},
        ],
    )
    async def test_non_text_reply_falls_back(self, pothos, pothos_logs, now, online_config, body):
        resp = MagicMock()
        resp.status = 200
        resp.json = AsyncMock(return_value=body)
        session = MagicMock()
        session.post.return_value.__aenter__.return_value = resp

        alerts = await detect_nurture_alerts(pothos, pothos_logs, now, online_config, session=session)

        assert [a.category for a in alerts] == [AlertCategory.WATERING]

    async def test_undecodable_reply_falls_back(self, pothos, pothos_logs, now, online_config):
        resp = MagicMock()
        resp.status = 200
        resp.json = AsyncMock(side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"))
        session = MagicMock()
        session.post.return_value.__aenter__.return_value = resp

        alerts = await detect_nurture_alerts(pothos, pothos_logs, now, online_config, session=session)

        assert [a.category for a in alerts] == [AlertCategory.WATERING]


class TestDetectAlerts:
    async def test_merged_in_display_order(self, pothos, dog, pothos_logs, dog_logs, now, offline_config):
        alerts = await detect_alerts([pothos, dog], pothos_logs + dog_logs, now, offline_config)

        assert [a.nurture_id for a in alerts] == ["pet-1", "plant-1"]
        assert [a.type for a in alerts] == [AlertType.URGENT, AlertType.WARNING]

    async def test_one_failing_nurture_does_not_sink_the_rest(
        self, pothos, dog, pothos_logs, dog_logs, now, offline_config
    ):
        real = detector.detect_nurture_alerts

        async def flaky(nurture, *args, **kwargs):
            if nurture.id == "pet-1":
                raise RuntimeError("boom")
            return await real(nurture, *args, **kwargs)

        with patch.object(detector, "detect_nurture_alerts", new=flaky):
            alerts = await detect_alerts([pothos, dog], pothos_logs + dog_logs, now, offline_config)

        assert [a.nurture_id for a in alerts] == ["plant-1"]

    async def test_per_nurture_cap(self, make_nurture, make_log, now, offline_config):
        dog = make_nurture("pet-1", NurtureType.PET, name="Rex", species="dog")
        logs = [make_log("pet-1", action="fed", hours_ago=h) for h in (59, 49, 39, 29, 19)]
        logs += [make_log("pet-1", action="walk", days_ago=d) for d in (6, 5, 4)]
        logs += [
            make_log("pet-1", action="check", hours_ago=h, notes=n)
            for h, n in ((3, "vomiting"), (2, "fever at night"), (1, "diarrhea again"))
        ]
        alerts = await detect_alerts([dog], logs, now, offline_config)

        assert len(alerts) == 3
        assert all(a.type == AlertType.URGENT for a in alerts)
