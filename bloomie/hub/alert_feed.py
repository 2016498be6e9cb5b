"""Alert feed — what the home screen shows.

Runs the detector, filters out acknowledged alerts, and keeps the latest
rendered list. Refreshes can overlap (initial load plus a periodic timer);
each one takes a sequence number and a result is only applied if no newer
refresh started while it was in flight.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from bloomie.engine.alerts.detector import detect_alerts
from bloomie.engine.config import AppConfig
from bloomie.engine.schema import AckAction, ActivityLog, HealthAlert, Nurture
from bloomie.hub.acknowledgements import AcknowledgementStore

logger = logging.getLogger(__name__)

Detector = Callable[..., Awaitable[list[HealthAlert]]]


class AlertFeed:
    """Presentation-side holder of the current alert list."""

    def __init__(
        self,
        acknowledgements: AcknowledgementStore,
        config: AppConfig = None,
        detector: Detector = detect_alerts,
    ):
        self.acknowledgements = acknowledgements
        self.config = config or AppConfig()
        self.detector = detector
        self.alerts: list[HealthAlert] = []
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    async def refresh(
        self,
        nurtures: list[Nurture],
        logs: list[ActivityLog],
        now: datetime = None,
    ) -> list[HealthAlert]:
        """Recompute alerts; stale completions leave the current list untouched."""
        if now is None:
            now = datetime.now(UTC)
        self._sequence += 1
        seq = self._sequence

        alerts = await self.detector(nurtures, logs, now=now, config=self.config)
        visible = await self.acknowledgements.filter_acknowledged(alerts, now)

        if seq != self._sequence:
            logger.debug("Discarding stale alert refresh %d (latest %d)", seq, self._sequence)
            return self.alerts

        self.alerts = visible[: self.config.detector.max_alerts]
        return self.alerts

    async def acknowledge(self, alert_id: str, action: AckAction | str = AckAction.DISMISSED) -> bool:
        """Record the user's action and hide the alert right away."""
        self.alerts = [a for a in self.alerts if a.id != alert_id]
        return await self.acknowledgements.acknowledge(alert_id, action)
