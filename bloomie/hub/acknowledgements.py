"""Acknowledgement store — which alerts the user has already handled.

Append-only. Records older than the validity window stop suppressing alerts
but are never rewritten. Storage failures are logged and swallowed: a lost
acknowledgement only means the alert can show up again on the next run.
"""

import logging
from datetime import datetime, timedelta

from bloomie.engine.config import AckConfig
from bloomie.engine.schema import AckAction, AcknowledgementRecord
from bloomie.hub.cache import KeyValueStore

logger = logging.getLogger(__name__)

ACKNOWLEDGED_KEY = "acknowledged_alerts"
HISTORY_KEY = "alert_history"


def _parse_records(raw) -> list[AcknowledgementRecord]:
    records = []
    for entry in raw:
        try:
            records.append(AcknowledgementRecord.from_dict(entry))
        except (KeyError, ValueError, TypeError):
            logger.debug("Skipping malformed acknowledgement: %r", entry)
    return records


class AcknowledgementStore:
    """Acknowledgement records kept in an injected key-value store."""

    def __init__(self, store: KeyValueStore, config: AckConfig = None):
        self.store = store
        self.config = config or AckConfig()

    async def acknowledge(self, alert_id: str, action: AckAction | str, now: datetime = None) -> bool:
        """Append a record for ``alert_id``. Returns False if the write failed."""
        record = AcknowledgementRecord(
            alert_id=alert_id,
            action=AckAction(action),
            timestamp=now or self.store.clock(),
        )
        try:
            history = await self.store.get(HISTORY_KEY) or []
            history.append(record.to_dict())
            await self.store.set(HISTORY_KEY, history[-self.config.history_limit :])

            acknowledged = await self.store.get(ACKNOWLEDGED_KEY) or []
            acknowledged.append(record.to_dict())
            await self.store.set(ACKNOWLEDGED_KEY, acknowledged)
        except Exception as e:
            logger.warning("Failed to acknowledge alert %s: %s", alert_id, e)
            return False
        logger.debug("Alert %s acknowledged (%s)", alert_id, record.action)
        return True

    async def records(self) -> list[AcknowledgementRecord]:
        """All acknowledgement records, oldest first."""
        try:
            raw = await self.store.get(ACKNOWLEDGED_KEY) or []
        except Exception as e:
            logger.warning("Failed to read acknowledgements: %s", e)
            return []
        return _parse_records(raw)

    async def history(self) -> list[AcknowledgementRecord]:
        """The most recent acknowledgements, capped at the history limit."""
        try:
            raw = await self.store.get(HISTORY_KEY) or []
        except Exception as e:
            logger.warning("Failed to read alert history: %s", e)
            return []
        return _parse_records(raw)

    async def acknowledged_ids(self, now: datetime = None) -> set[str]:
        """Ids acknowledged within the validity window."""
        cutoff = (now or self.store.clock()) - timedelta(days=self.config.validity_days)
        return {
            r.alert_id for r in await self.records() if r.timestamp is not None and r.timestamp > cutoff
        }

    async def filter_acknowledged(self, alerts: list, now: datetime = None) -> list:
        """Drop alerts whose id has an active acknowledgement."""
        acknowledged = await self.acknowledged_ids(now)
        return [a for a in alerts if a.id not in acknowledged]
