"""HealthAlert construction shared by the LLM path and the fallback rules."""

import hashlib

from bloomie.engine.analysis.context import CareContext
from bloomie.engine.schema import AlertCategory, AlertData, AlertType, HealthAlert, Urgency


def alert_id(nurture_id: str, alert_type: str, category: str, title: str, key: str = "") -> str:
    """Content-derived id: the same condition on a later run gets the same id.

    Type is part of the digest, so an escalation from warning to urgent shows
    up again even if the warning was acknowledged.
    """
    digest = hashlib.sha1(f"{alert_type}|{category}|{title}|{key}".encode()).hexdigest()[:12]
    return f"alert-{nurture_id}-{digest}"


def make_alert(  # noqa: PLR0913
    ctx: CareContext,
    alert_type: AlertType,
    category: AlertCategory,
    title: str,
    message: str,
    details: str,
    suggested_actions: list[str],
    urgency: Urgency,
    data: AlertData | None = None,
    key: str = "",
) -> HealthAlert:
    nurture = ctx.nurture
    return HealthAlert(
        id=alert_id(nurture.id, alert_type, category, title, key),
        nurture_id=nurture.id,
        nurture_name=nurture.name,
        type=alert_type,
        category=category,
        title=title,
        message=message,
        details=details,
        suggested_actions=list(suggested_actions),
        urgency=urgency,
        detected_at=ctx.now,
        data=data,
    )
