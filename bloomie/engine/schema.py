"""Data model shared by the engine and hub layers.

Nurtures and activity logs come in from the app's state store as JSON-like
dicts; alerts go back out the same way. ``from_dict``/``to_dict`` keep the
wire keys the app already uses (snake_case for records, camelCase for alerts).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class NurtureType(StrEnum):
    BABY = "baby"
    PET = "pet"
    PLANT = "plant"


class AlertType(StrEnum):
    URGENT = "urgent"
    WARNING = "warning"
    INFO = "info"


class AlertCategory(StrEnum):
    WATERING = "watering"
    FEEDING = "feeding"
    HEALTH = "health"
    SCHEDULE = "schedule"
    VETERINARY = "veterinary"
    MEDICAL = "medical"


class Urgency(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AckAction(StrEnum):
    DISMISSED = "dismissed"
    RESOLVED = "resolved"
    ACTION_TAKEN = "action_taken"


MOODS = frozenset({"happy", "neutral", "sad", "tired", "energetic"})


def parse_ts(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except (ValueError, TypeError, AttributeError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


@dataclass(frozen=True)
class ActivityLog:
    """One recorded care event. Never mutated after creation."""

    id: str
    nurture_id: str
    created_at: datetime
    raw_input: str = ""
    parsed_action: str | None = None
    parsed_amount: str | None = None
    parsed_notes: str | None = None
    mood: str | None = None
    health_score: float | None = None
    photo_urls: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityLog:
        created_at = parse_ts(data.get("created_at"))
        if created_at is None:
            raise ValueError(f"log {data.get('id')!r} has no valid created_at")
        score = data.get("health_score")
        photos = data.get("photo_urls")
        mood = (data.get("mood") or "").lower()
        return cls(
            id=str(data.get("id", "")),
            nurture_id=str(data.get("nurture_id", "")),
            created_at=created_at,
            raw_input=data.get("raw_input") or "",
            parsed_action=data.get("parsed_action") or None,
            parsed_amount=data.get("parsed_amount"),
            parsed_notes=data.get("parsed_notes") or None,
            mood=mood if mood in MOODS else None,
            health_score=float(score) if score is not None else None,
            photo_urls=tuple(photos) if photos else None,
        )


@dataclass
class Nurture:
    """A tracked baby, pet, or plant."""

    id: str
    name: str
    type: NurtureType
    user_id: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    avatar_url: str | None = None
    created_at: datetime | None = None

    @property
    def species(self) -> str | None:
        return self.metadata.get("species") or self.metadata.get("breed") or None

    def age_months(self, now: datetime) -> int | None:
        """Age in 30-day months, from ``metadata.birth_date``."""
        birth = parse_ts(self.metadata.get("birth_date"))
        if birth is None:
            return None
        return int((now - birth).total_seconds() // (86400 * 30))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Nurture:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=NurtureType(data["type"]),
            user_id=data.get("user_id", ""),
            metadata=dict(data.get("metadata") or {}),
            avatar_url=data.get("avatar_url"),
            created_at=parse_ts(data.get("created_at")),
        )


# snake_case attribute -> camelCase wire key
_ALERT_DATA_KEYS = {
    "expected_interval": "expectedInterval",
    "actual_interval": "actualInterval",
    "last_activity": "lastActivity",
    "trend": "trend",
    "health_score": "healthScore",
    "health_score_trend": "healthScoreTrend",
    "mood_trend": "moodTrend",
    "dominant_mood": "dominantMood",
    "next_due_date": "nextDueDate",
    "symptom": "symptom",
    "log_date": "logDate",
}


@dataclass
class AlertData:
    """Structured numbers behind an alert."""

    expected_interval: float | None = None
    actual_interval: float | None = None
    last_activity: str | None = None
    trend: str | None = None
    health_score: float | None = None
    health_score_trend: str | None = None
    mood_trend: str | None = None
    dominant_mood: str | None = None
    next_due_date: str | None = None
    symptom: str | None = None
    log_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = {}
        for attr, key in _ALERT_DATA_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AlertData:
        """Accept camelCase or snake_case keys; unknown keys are dropped."""
        kwargs = {}
        for attr, key in _ALERT_DATA_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        return cls(**kwargs)


@dataclass
class HealthAlert:
    """An ephemeral advisory derived from one nurture's care pattern."""

    id: str
    nurture_id: str
    nurture_name: str
    type: AlertType
    category: AlertCategory
    title: str
    message: str
    details: str
    suggested_actions: list[str]
    urgency: Urgency
    detected_at: datetime
    data: AlertData | None = None

    def to_dict(self) -> dict[str, Any]:
        out = {
            "id": self.id,
            "nurtureId": self.nurture_id,
            "nurtureName": self.nurture_name,
            "type": str(self.type),
            "category": str(self.category),
            "title": self.title,
            "message": self.message,
            "details": self.details,
            "suggestedActions": list(self.suggested_actions),
            "urgency": str(self.urgency),
            "detectedAt": self.detected_at.isoformat(),
        }
        if self.data is not None:
            out["data"] = self.data.to_dict()
        return out


@dataclass(frozen=True)
class AcknowledgementRecord:
    """A user action recorded against an alert id."""

    alert_id: str
    action: AckAction
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "alertId": self.alert_id,
            "action": str(self.action),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AcknowledgementRecord:
        return cls(
            alert_id=data["alertId"],
            action=AckAction(data["action"]),
            timestamp=parse_ts(data["timestamp"]),
        )
