"""Deterministic rule-based alert generator.

Used when the LLM path is disabled, errors, or returns something that does not
parse. Produces the same alert shape as the LLM path from the computed care
context alone:

1. Health-score decline: declining trend with a low current score
2. Mood concern: recent moods mostly sad/tired
3. Watering (plants): overdue, or due within a couple of days
4. Feeding (pets, babies): overdue by hours
5. Walks (pets that walk about daily): overdue by days
6. Symptom keywords in recent notes
"""

import logging
import math
from datetime import timedelta

from bloomie.engine.alerts.builder import make_alert
from bloomie.engine.analysis.categorize import ActionCategory
from bloomie.engine.analysis.context import CareContext
from bloomie.engine.analysis.trends import CONCERNING, DECLINING
from bloomie.engine.care_profiles import expected_feeding_hours, expected_walk_days, expected_watering_days
from bloomie.engine.config import DetectorConfig
from bloomie.engine.schema import AlertCategory, AlertData, AlertType, HealthAlert, NurtureType, Urgency

logger = logging.getLogger(__name__)

# Scanned in this order; the first keyword found in a note wins.
SYMPTOM_KEYWORDS: list[tuple[AlertType, tuple[str, ...]]] = [
    (AlertType.URGENT, ("vomiting", "diarrhea", "fever", "bleeding", "seizure", "unconscious", "choking")),
    (AlertType.WARNING, ("lethargy", "not eating", "not drinking", "crying", "whining", "limping", "rash")),
    (AlertType.INFO, ("unusual", "different", "change", "concern")),
]

URGENCY_FOR_TYPE = {
    AlertType.URGENT: Urgency.HIGH,
    AlertType.WARNING: Urgency.MEDIUM,
    AlertType.INFO: Urgency.LOW,
}


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def _num(value: float) -> float | int:
    """Whole numbers as int, everything else to one decimal."""
    return int(value) if float(value).is_integer() else round(value, 1)


def health_decline_alert(ctx: CareContext, config: DetectorConfig) -> HealthAlert | None:
    health = ctx.health
    score = health.current_score
    if health.trend != DECLINING or score is None or score >= config.declining_score_ceiling:
        return None

    severe = score < config.urgent_score_ceiling
    name = ctx.nurture.name
    previous = f" from {health.previous_score:.1f}" if health.previous_score is not None else ""
    return make_alert(
        ctx,
        AlertType.URGENT if severe else AlertType.WARNING,
        AlertCategory.HEALTH,
        title=f"{name}'s Health Declining",
        message=f"Health score has been declining. Current: {score:.1f}/5",
        details=(
            f"{name}'s average health score dropped{previous} to {score:.1f}/5 over the most recent logs. "
            "This could indicate an underlying issue. Monitor closely and consider professional care "
            "if symptoms persist."
        ),
        suggested_actions=[
            "Monitor for symptoms",
            "Check for any visible issues",
            "Consider professional consultation if concerned",
        ],
        urgency=Urgency.HIGH if severe else Urgency.MEDIUM,
        data=AlertData(health_score=round(score, 2), health_score_trend=DECLINING),
    )


def mood_concern_alert(ctx: CareContext, config: DetectorConfig) -> HealthAlert | None:
    if ctx.mood.recent_trend != CONCERNING:
        return None

    name = ctx.nurture.name
    return make_alert(
        ctx,
        AlertType.WARNING,
        AlertCategory.HEALTH,
        title=f"{name} May Need Attention",
        message="Recent mood patterns show concern. Monitor behavior closely.",
        details=(
            f"More than {config.mood_negative_limit} of the last {config.mood_window} mood logs for {name} "
            "were sad or tired. This could indicate health issues, stress, or unmet care needs."
        ),
        suggested_actions=[
            "Observe behavior closely",
            "Check for any physical symptoms",
            "Ensure basic needs are met",
            "Consider professional consultation if persists",
        ],
        urgency=Urgency.MEDIUM,
        data=AlertData(mood_trend=CONCERNING, dominant_mood=ctx.mood.dominant_mood),
    )


def watering_alert(ctx: CareContext, config: DetectorConfig) -> HealthAlert | None:
    if ctx.nurture.type != NurtureType.PLANT:
        return None
    stats = ctx.interval(ActionCategory.WATERING)
    if stats is None:
        return None

    name = ctx.nurture.name
    expected = expected_watering_days(ctx.nurture, stats.mean_interval_days)
    actual = stats.days_since_last
    shown_expected = _num(expected)
    shown_actual = stats.days_since_last_display

    if actual > expected * config.overdue_ratio:
        severe = actual > expected * config.watering_urgent_ratio
        due = stats.last_occurrence + timedelta(days=expected)
        return make_alert(
            ctx,
            AlertType.URGENT if severe else AlertType.WARNING,
            AlertCategory.WATERING,
            title=f"{name} May Need Water",
            message=f"Usually watered every {_plural(shown_expected, 'day')}, but it's been {_plural(shown_actual, 'day')}.",
            details=(
                f"{name} needs water about every {_plural(shown_expected, 'day')}. "
                f"It's been {_plural(shown_actual, 'day')} since the last watering. Check the soil moisture now!"
            ),
            suggested_actions=[
                "Check soil moisture (stick finger 2-3cm deep)",
                "Water if soil is dry",
                "Look for wilting or yellowing leaves",
                "Adjust schedule if needed",
            ],
            urgency=Urgency.HIGH if severe else Urgency.MEDIUM,
            data=AlertData(
                expected_interval=shown_expected,
                actual_interval=shown_actual,
                last_activity=stats.last_occurrence.isoformat(),
                trend=DECLINING,
                next_due_date=due.isoformat(),
            ),
        )

    if 0 < actual < expected * config.predictive_ratio:
        days_until = math.ceil(expected - actual)
        if days_until > config.predictive_horizon_days:
            return None
        return make_alert(
            ctx,
            AlertType.INFO,
            AlertCategory.WATERING,
            title=f"{name} Watering Soon",
            message=f"Based on your pattern, watering will be needed in {_plural(days_until, 'day')}.",
            details=(
                f"{name} is typically watered every {_plural(shown_expected, 'day')}. "
                f"Plan to check and water in {_plural(days_until, 'day')}."
            ),
            suggested_actions=["Plan to check soil moisture", "Prepare for watering"],
            urgency=Urgency.LOW,
            data=AlertData(
                expected_interval=shown_expected,
                actual_interval=shown_actual,
                next_due_date=(ctx.now + timedelta(days=days_until)).isoformat(),
            ),
        )
    return None


def feeding_alert(ctx: CareContext, config: DetectorConfig) -> HealthAlert | None:
    if ctx.nurture.type not in (NurtureType.PET, NurtureType.BABY):
        return None
    stats = ctx.interval(ActionCategory.FEEDING)
    if stats is None:
        return None
    expected_hours = expected_feeding_hours(ctx.nurture, stats.mean_interval_days)
    if not expected_hours:
        return None

    actual_hours = stats.days_since_last * 24
    if actual_hours <= expected_hours * config.overdue_ratio:
        return None

    name = ctx.nurture.name
    severe = actual_hours > expected_hours * config.feeding_urgent_ratio
    shown_expected = round(expected_hours)
    shown_actual = round(actual_hours)
    return make_alert(
        ctx,
        AlertType.URGENT if severe else AlertType.WARNING,
        AlertCategory.FEEDING,
        title=f"{name} Feeding Time",
        message=f"Usually fed every {_plural(shown_expected, 'hour')}, but it's been {_plural(shown_actual, 'hour')}.",
        details=(
            f"Based on the feeding pattern, {name} eats about every {_plural(shown_expected, 'hour')}. "
            f"It's been {_plural(shown_actual, 'hour')} since the last feeding. Check if feeding is needed!"
        ),
        suggested_actions=[
            "Check if feeding is needed now",
            "Verify last feeding time",
            "Monitor for hunger signs",
            "Adjust schedule if needed",
        ],
        urgency=Urgency.HIGH if severe else Urgency.MEDIUM,
        data=AlertData(
            expected_interval=round(expected_hours, 1),
            actual_interval=round(actual_hours, 1),
            last_activity=stats.last_occurrence.isoformat(),
            trend=DECLINING,
        ),
    )


def walk_alert(ctx: CareContext, config: DetectorConfig) -> HealthAlert | None:
    if ctx.nurture.type != NurtureType.PET:
        return None
    stats = ctx.interval(ActionCategory.WALK)
    if stats is None:
        return None
    expected = expected_walk_days(ctx.nurture, stats.mean_interval_days)
    # Only for animals that are walked roughly daily
    if expected is None or expected >= config.walk_max_interval_days:
        return None

    actual = stats.days_since_last
    if actual <= expected * config.walk_overdue_ratio:
        return None

    name = ctx.nurture.name
    overdue = actual > expected * config.walk_warning_ratio
    shown_expected = _num(expected)
    shown_actual = _num(actual)
    return make_alert(
        ctx,
        AlertType.WARNING if overdue else AlertType.INFO,
        AlertCategory.SCHEDULE,
        title=f"{name} Needs Exercise",
        message=f"Usually walked every {_plural(shown_expected, 'day')}, but it's been {_plural(shown_actual, 'day')}.",
        details=(
            f"{name} is usually walked every {_plural(shown_expected, 'day')} and the last walk was "
            f"{_plural(shown_actual, 'day')} ago. Exercise is important for health and happiness!"
        ),
        suggested_actions=[
            "Plan a walk soon",
            "Check if exercise is needed",
            "Consider indoor play if weather is bad",
        ],
        urgency=Urgency.MEDIUM if overdue else Urgency.LOW,
        data=AlertData(
            expected_interval=shown_expected,
            actual_interval=shown_actual,
            last_activity=stats.last_occurrence.isoformat(),
        ),
    )


def match_symptom(notes: str) -> tuple[AlertType, str] | None:
    """First (tier, keyword) found in ``notes``, scanning tiers in order."""
    lowered = notes.lower()
    for tier, keywords in SYMPTOM_KEYWORDS:
        for keyword in keywords:
            if keyword in lowered:
                return tier, keyword
    return None


def symptom_alerts(ctx: CareContext, config: DetectorConfig) -> list[HealthAlert]:
    """At most one alert per log, from the most recent logs with notes."""
    with_notes = [log for log in ctx.recent_logs(len(ctx.logs)) if log.parsed_notes and log.parsed_notes.strip()]
    category = AlertCategory.MEDICAL if ctx.nurture.type == NurtureType.BABY else AlertCategory.HEALTH

    alerts = []
    for log in with_notes[: config.symptom_scan_logs]:
        match = match_symptom(log.parsed_notes)
        if match is None:
            continue
        tier, keyword = match
        if tier == AlertType.URGENT:
            advice = "This may require immediate attention. Consider professional care."
            actions = ["Seek immediate professional care", "Monitor closely", "Document symptoms"]
        else:
            advice = "Monitor for changes and consider professional consultation if it persists."
            actions = ["Monitor for changes", "Consider professional consultation if persists", "Document symptoms"]
        alerts.append(
            make_alert(
                ctx,
                tier,
                category,
                title=f"Symptom Detected: {keyword}",
                message=f'Recent log mentions "{keyword}". Monitor closely.',
                details=f'A care log from {log.created_at.date().isoformat()} mentioned "{keyword}". {advice}',
                suggested_actions=actions,
                urgency=URGENCY_FOR_TYPE[tier],
                data=AlertData(symptom=keyword, log_date=log.created_at.isoformat()),
                key=log.id,
            )
        )
    return alerts


def generate_fallback_alerts(ctx: CareContext, config: DetectorConfig = None) -> list[HealthAlert]:
    """Run every rule against the care context, unfiltered."""
    if config is None:
        config = DetectorConfig()

    alerts = []
    for rule in (health_decline_alert, mood_concern_alert, watering_alert, feeding_alert, walk_alert):
        alert = rule(ctx, config)
        if alert is not None:
            logger.debug("Rule %s fired for %s: %s", rule.__name__, ctx.nurture.id, alert.title)
            alerts.append(alert)
    alerts.extend(symptom_alerts(ctx, config))
    return alerts
