"""LLM-backed health alert synthesis.

Packages the computed care context as JSON, asks the model for alerts in a
fixed taxonomy, and normalizes whatever comes back into HealthAlert objects.
Returns None whenever the reply cannot be used, which sends the detector to
the rule-based fallback.
"""

import json
import logging
import re

import aiohttp

from bloomie.engine.alerts.builder import make_alert
from bloomie.engine.analysis.context import CareContext
from bloomie.engine.analysis.trends import CONCERNING, DECLINING, IMPROVING
from bloomie.engine.config import DetectorConfig, LLMConfig
from bloomie.engine.llm.client import chat_completion, strip_think_tags
from bloomie.engine.schema import AlertCategory, AlertData, AlertType, HealthAlert, Urgency

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Bloomie, a health monitoring assistant for babies, pets, and plants.
Analyze the care pattern data and flag potential problems before they become serious:
overdue or irregular activities, declining health scores, concerning moods,
symptoms mentioned in notes, and activities that will be due soon.

Rules:
- Only flag real concerns, not minor variations
- Be specific with numbers: "Usually fed every 4 hours, but it's been 6 hours"
- Give actionable, warm, non-alarming advice
- Recommend professional care when symptoms suggest it

Respond with JSON only:
{
  "alerts": [
    {
      "type": "urgent" | "warning" | "info",
      "category": "watering" | "feeding" | "health" | "schedule" | "veterinary" | "medical",
      "title": "Short alert title",
      "message": "User-friendly explanation",
      "details": "Detailed explanation with numbers and context",
      "suggestedActions": ["action 1", "action 2"],
      "urgency": "high" | "medium" | "low",
      "data": {
        "expectedInterval": 5,
        "actualInterval": 8,
        "lastActivity": "2024-01-15",
        "trend": "declining",
        "healthScore": 3.5,
        "healthScoreTrend": "declining",
        "moodTrend": "concerning",
        "nextDueDate": "2024-01-20"
      }
    }
  ]
}
Return {"alerts": []} when nothing needs attention."""


def build_context(ctx: CareContext, config: DetectorConfig = None) -> dict:
    """JSON-serializable summary of the nurture, its statistics, and recent logs."""
    if config is None:
        config = DetectorConfig()

    nurture = ctx.nurture
    return {
        "nurture": {
            "name": nurture.name,
            "type": str(nurture.type),
            "species": nurture.species or "unknown",
            "ageMonths": nurture.age_months(ctx.now),
        },
        "patterns": {
            str(cat): round(s.mean_interval_days, 2)
            for cat, s in ctx.intervals.items()
            if s.mean_interval_days is not None
        },
        "lastActivities": {str(cat): s.days_since_last_display for cat, s in ctx.intervals.items()},
        "healthScore": ctx.health.to_dict(),
        "mood": ctx.mood.to_dict(),
        "activityTrends": {str(cat): trend for cat, trend in ctx.activity_trends.items()},
        "recentLogs": [
            {
                "date": log.created_at.isoformat(),
                "action": log.parsed_action,
                "notes": log.parsed_notes,
                "mood": log.mood,
                "health_score": log.health_score,
            }
            for log in ctx.recent_logs(config.max_context_logs)
        ],
        "currentTime": ctx.now.isoformat(),
    }


def build_user_message(ctx: CareContext, context: dict) -> str:
    nurture = ctx.nurture
    species = f" - {nurture.species}" if nurture.species else ""
    if ctx.health.trend == DECLINING:
        health_line = "Health score is DECLINING - treat as critical."
    elif ctx.health.trend == IMPROVING:
        health_line = "Health score is improving."
    else:
        health_line = "Health score is stable or not tracked."
    mood_line = (
        "Recent mood trend is CONCERNING - investigate."
        if ctx.mood.recent_trend == CONCERNING
        else "Mood patterns look normal."
    )
    return f"""Analyze health patterns for {nurture.name} ({nurture.type}{species}).

Pattern analysis:
{json.dumps(context, indent=2)}

Checks:
1. Activity anomalies: compare expected vs actual intervals (urgent if >2x expected)
2. {health_line}
3. {mood_line}
4. Activity frequency: flag critical activities that are decreasing
5. Symptoms in notes: vomiting, diarrhea, fever, lethargy, yellowing, wilting
6. Predictive: when will the next activity be needed? (info level)
"""


def parse_alerts_response(text):
    """Extract the ``alerts`` list from a model reply, or None if unusable."""
    if not text:
        return None
    text = strip_think_tags(text)
    match = re.search(r"\{.*\}", text, flags=re.DOTALL)
    if not match:
        return None
    try:
        payload = json.loads(match.group())
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("alerts"), list):
        return None
    return [a for a in payload["alerts"] if isinstance(a, dict)]


def _coerce(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def normalize_alert(raw: dict, ctx: CareContext) -> HealthAlert:
    """Fill defaults and clamp taxonomy fields on one model-produced alert."""
    actions = raw.get("suggestedActions") or []
    if not isinstance(actions, list):
        actions = [str(actions)]
    data = raw.get("data")
    return make_alert(
        ctx,
        _coerce(AlertType, raw.get("type"), AlertType.INFO),
        _coerce(AlertCategory, raw.get("category"), AlertCategory.HEALTH),
        title=str(raw.get("title") or "Health Check"),
        message=str(raw.get("message") or ""),
        details=str(raw.get("details") or ""),
        suggested_actions=[str(a) for a in actions],
        urgency=_coerce(Urgency, raw.get("urgency"), Urgency.LOW),
        data=AlertData.from_dict(data) if isinstance(data, dict) else None,
    )


async def request_llm_alerts(
    ctx: CareContext,
    config: LLMConfig = None,
    detector_config: DetectorConfig = None,
    session: aiohttp.ClientSession = None,
) -> list[HealthAlert] | None:
    """Ask the model for alerts. None means: use the fallback generator."""
    if config is None:
        config = LLMConfig()

    context = build_context(ctx, detector_config)
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_message(ctx, context)},
    ]
    reply = await chat_completion(messages, config=config, session=session)
    raw_alerts = parse_alerts_response(reply)
    if raw_alerts is None:
        if reply:
            logger.warning("Unparseable alert response for %s: %.200s", ctx.nurture.id, reply)
        return None
    return [normalize_alert(raw, ctx) for raw in raw_alerts]
