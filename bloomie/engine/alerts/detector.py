"""Care-pattern anomaly detector.

Pure function of (nurture, logs, now) -> alerts. Each nurture is analyzed
independently; ``detect_alerts`` fans out one coroutine per nurture and merges
the results only after all of them finish. The LLM call is the only suspension
point, and any failure there lands in the rule-based fallback instead of
reaching the caller.
"""

import asyncio
import logging
from datetime import UTC, datetime

import aiohttp

from bloomie.engine.alerts.fallback import generate_fallback_alerts
from bloomie.engine.alerts.prioritize import prioritize, sort_alerts
from bloomie.engine.analysis.context import build_care_context
from bloomie.engine.config import AppConfig
from bloomie.engine.llm.health_alerts import request_llm_alerts
from bloomie.engine.schema import ActivityLog, HealthAlert, Nurture

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_MESSAGE = "Keep logging activities to enable health monitoring!"


async def detect_nurture_alerts(
    nurture: Nurture,
    logs: list[ActivityLog],
    now: datetime = None,
    config: AppConfig = None,
    session: aiohttp.ClientSession = None,
) -> list[HealthAlert]:
    """Prioritized alerts (at most 3) for a single nurture."""
    if config is None:
        config = AppConfig()
    if now is None:
        now = datetime.now(UTC)

    own_logs = [log for log in logs if log.nurture_id == nurture.id]
    if len(own_logs) < config.detector.min_logs:
        logger.info("%s: %d logs. %s", nurture.id, len(own_logs), INSUFFICIENT_DATA_MESSAGE)
        return []

    ctx = build_care_context(nurture, own_logs, now, config.detector)

    alerts = None
    if config.llm.enabled:
        alerts = await request_llm_alerts(ctx, config.llm, config.detector, session=session)
    if alerts is None:
        alerts = generate_fallback_alerts(ctx, config.detector)
        source = "fallback"
    else:
        source = "llm"

    selected = prioritize(alerts, config.detector)
    logger.info("%s: %d alerts from %s, %d kept", nurture.id, len(alerts), source, len(selected))
    return selected


async def detect_alerts(
    nurtures: list[Nurture],
    logs: list[ActivityLog],
    now: datetime = None,
    config: AppConfig = None,
) -> list[HealthAlert]:
    """Run detection for every nurture concurrently and merge in display order."""
    if config is None:
        config = AppConfig()
    if now is None:
        now = datetime.now(UTC)
    if not nurtures or len(logs) < config.detector.min_logs:
        return []

    if config.llm.enabled:
        async with aiohttp.ClientSession() as session:
            results = await _gather(nurtures, logs, now, config, session)
    else:
        results = await _gather(nurtures, logs, now, config, None)

    merged = []
    for nurture, result in zip(nurtures, results, strict=True):
        if isinstance(result, BaseException):
            logger.error("Health alert detection failed for %s: %s", nurture.id, result)
            continue
        merged.extend(result)
    return sort_alerts(merged)


async def _gather(nurtures, logs, now, config, session):
    return await asyncio.gather(
        *(detect_nurture_alerts(n, logs, now, config, session) for n in nurtures),
        return_exceptions=True,
    )
