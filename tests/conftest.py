"""Shared fixtures for the Bloomie test suite."""

from datetime import UTC, datetime, timedelta
from itertools import count

import pytest

from bloomie.engine.config import AppConfig, LLMConfig
from bloomie.engine.schema import ActivityLog, Nurture, NurtureType

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def offline_config():
    """AppConfig with the LLM path disabled (no API key)."""
    return AppConfig(llm=LLMConfig(api_key=""))


@pytest.fixture
def make_log():
    """Factory for ActivityLog records, placed relative to NOW."""
    ids = count(1)

    def _make(  # noqa: PLR0913
        nurture_id="n1",
        action=None,
        days_ago=0.0,
        hours_ago=0.0,
        notes=None,
        mood=None,
        health_score=None,
        raw_input="",
    ):
        return ActivityLog(
            id=f"log-{next(ids)}",
            nurture_id=nurture_id,
            created_at=NOW - timedelta(days=days_ago, hours=hours_ago),
            raw_input=raw_input,
            parsed_action=action,
            parsed_notes=notes,
            mood=mood,
            health_score=health_score,
        )

    return _make


@pytest.fixture
def make_nurture():
    def _make(nurture_id="n1", nurture_type=NurtureType.PLANT, name="Fern", **metadata):
        return Nurture(id=nurture_id, name=name, type=NurtureType(nurture_type), user_id="u1", metadata=metadata)

    return _make
