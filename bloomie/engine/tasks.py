"""Upcoming care tasks — what needs doing next, predicted from the care log.

Reads the same interval statistics the detector uses and the static care
tables: next watering from the species table, next feeding from the default
feeding interval for pets and babies, and a walk reminder for dogs. Pending
user reminders are merged in. Returns the soonest few tasks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from bloomie.engine.analysis.categorize import ActionCategory, categorize_text
from bloomie.engine.analysis.intervals import IntervalStats, build_interval_stats
from bloomie.engine.care_profiles import DEFAULT_FEEDING_HOURS, expected_watering_days, get_pet_care, get_plant_care
from bloomie.engine.config import DetectorConfig, TaskConfig
from bloomie.engine.schema import ActivityLog, Nurture, NurtureType, Urgency, parse_ts

logger = logging.getLogger(__name__)

# Reminders due sooner than this are high urgency
REMINDER_URGENT_HOURS = 2.0
MAX_REMINDERS = 5


class TaskType(StrEnum):
    FEEDING = "feeding"
    WATERING = "watering"
    WALK = "walk"
    MEDICINE = "medicine"
    GROOMING = "grooming"
    OTHER = "other"


TASK_TYPES = {
    ActionCategory.FEEDING: TaskType.FEEDING,
    ActionCategory.WATERING: TaskType.WATERING,
    ActionCategory.WALK: TaskType.WALK,
    ActionCategory.MEDICINE: TaskType.MEDICINE,
    ActionCategory.GROOMING: TaskType.GROOMING,
}


@dataclass
class Reminder:
    """A user-scheduled reminder."""

    id: str
    nurture_id: str
    title: str
    scheduled_at: datetime
    is_completed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reminder:
        scheduled_at = parse_ts(data.get("scheduled_at"))
        if scheduled_at is None:
            raise ValueError(f"reminder {data.get('id')!r} has no valid scheduled_at")
        return cls(
            id=str(data["id"]),
            nurture_id=str(data["nurture_id"]),
            title=data.get("title") or "",
            scheduled_at=scheduled_at,
            is_completed=bool(data.get("is_completed")),
        )


@dataclass
class UpcomingTask:
    id: str
    nurture_id: str
    nurture_name: str
    task: str
    scheduled_time: datetime
    urgency: Urgency
    type: TaskType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nurtureId": self.nurture_id,
            "nurtureName": self.nurture_name,
            "task": self.task,
            "scheduledTime": self.scheduled_time.isoformat(),
            "urgency": str(self.urgency),
            "type": str(self.type),
        }


def task_type(title: str) -> TaskType:
    return TASK_TYPES.get(categorize_text(title), TaskType.OTHER)


def _task(nurture: Nurture, kind: TaskType, text: str, when: datetime, urgent: bool) -> UpcomingTask:
    return UpcomingTask(
        id=f"{kind}-{nurture.id}",
        nurture_id=nurture.id,
        nurture_name=nurture.name,
        task=text,
        scheduled_time=when,
        urgency=Urgency.HIGH if urgent else Urgency.MEDIUM,
        type=kind,
    )


def _hours_since(stats: IntervalStats) -> float:
    return stats.days_since_last * 24


def reminder_tasks(nurtures: list[Nurture], reminders: list[Reminder], now: datetime) -> list[UpcomingTask]:
    """Pending future reminders for known nurtures, in the order given."""
    by_id = {n.id: n for n in nurtures}
    pending = [r for r in reminders if not r.is_completed and r.scheduled_at > now][:MAX_REMINDERS]
    tasks = []
    for reminder in pending:
        nurture = by_id.get(reminder.nurture_id)
        if nurture is None:
            continue
        tasks.append(
            UpcomingTask(
                id=reminder.id,
                nurture_id=nurture.id,
                nurture_name=nurture.name,
                task=reminder.title,
                scheduled_time=reminder.scheduled_at,
                urgency=(
                    Urgency.HIGH
                    if reminder.scheduled_at - now < timedelta(hours=REMINDER_URGENT_HOURS)
                    else Urgency.MEDIUM
                ),
                type=task_type(reminder.title),
            )
        )
    return tasks


def plant_tasks(
    nurture: Nurture, intervals: dict[ActionCategory, IntervalStats], now: datetime, config: TaskConfig
) -> list[UpcomingTask]:
    """Next watering for plants of a known species, if due within the horizon."""
    if get_plant_care(nurture.species) is None:
        return []
    watering = intervals.get(ActionCategory.WATERING)
    if watering is None:
        # Never watered: suggest doing it today
        due = now + timedelta(hours=config.unwatered_due_hours)
    else:
        due = watering.last_occurrence + timedelta(days=expected_watering_days(nurture))
    if due > now + timedelta(hours=config.watering_horizon_hours):
        return []
    return [_task(nurture, TaskType.WATERING, f"Water {nurture.name}", due, urgent=due <= now)]


def feeding_tasks(
    nurture: Nurture, intervals: dict[ActionCategory, IntervalStats], config: TaskConfig
) -> list[UpcomingTask]:
    """Next feeding once the default feeding interval is nearly up."""
    feeding = intervals.get(ActionCategory.FEEDING)
    if feeding is None:
        return []
    interval_hours = DEFAULT_FEEDING_HOURS[nurture.type]
    lead_hours = config.baby_feeding_lead_hours if nurture.type == NurtureType.BABY else config.pet_feeding_lead_hours
    hours_since = _hours_since(feeding)
    if hours_since < interval_hours - lead_hours:
        return []
    due = feeding.last_occurrence + timedelta(hours=interval_hours)
    return [_task(nurture, TaskType.FEEDING, f"Feed {nurture.name}", due, urgent=hours_since >= interval_hours)]


def walk_tasks(
    nurture: Nurture, intervals: dict[ActionCategory, IntervalStats], now: datetime, config: TaskConfig
) -> list[UpcomingTask]:
    """Walk reminder for walking species once the last walk is a while ago."""
    care = get_pet_care(nurture.species)
    walk = intervals.get(ActionCategory.WALK)
    if care is None or not care.walk_minutes or walk is None:
        return []
    hours_since = _hours_since(walk)
    if hours_since < config.walk_due_hours:
        return []
    due = now + timedelta(hours=config.walk_reminder_hours)
    return [_task(nurture, TaskType.WALK, f"Walk {nurture.name}", due, urgent=hours_since >= config.walk_urgent_hours)]


def nurture_tasks(
    nurture: Nurture,
    logs: list[ActivityLog],
    now: datetime,
    config: TaskConfig = None,
    detector_config: DetectorConfig = None,
) -> list[UpcomingTask]:
    """Predicted tasks for one nurture, unsorted."""
    if config is None:
        config = TaskConfig()
    if detector_config is None:
        detector_config = DetectorConfig()

    own_logs = [log for log in logs if log.nurture_id == nurture.id and log.created_at <= now]
    intervals = build_interval_stats(own_logs, now, detector_config.window_days)

    if nurture.type == NurtureType.PLANT:
        return plant_tasks(nurture, intervals, now, config)
    if nurture.type == NurtureType.BABY:
        return feeding_tasks(nurture, intervals, config)
    # Pets of an unknown species get no predictions
    if get_pet_care(nurture.species) is None:
        return []
    return feeding_tasks(nurture, intervals, config) + walk_tasks(nurture, intervals, now, config)


def upcoming_tasks(
    nurtures: list[Nurture],
    logs: list[ActivityLog],
    now: datetime = None,
    reminders: list[Reminder] = None,
    config: TaskConfig = None,
    detector_config: DetectorConfig = None,
) -> list[UpcomingTask]:
    """The soonest upcoming tasks across all nurtures."""
    if config is None:
        config = TaskConfig()
    if now is None:
        now = datetime.now(UTC)

    tasks = reminder_tasks(nurtures, reminders or [], now)
    for nurture in nurtures:
        tasks.extend(nurture_tasks(nurture, logs, now, config, detector_config))

    tasks.sort(key=lambda t: t.scheduled_time)
    logger.debug("%d upcoming tasks predicted, %d kept", len(tasks), min(len(tasks), config.max_tasks))
    return tasks[: config.max_tasks]
