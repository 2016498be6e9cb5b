"""Per-nurture alert filtering and cross-nurture ordering."""

from bloomie.engine.config import DetectorConfig
from bloomie.engine.schema import AlertType, HealthAlert, Urgency

TYPE_ORDER = {AlertType.URGENT: 0, AlertType.WARNING: 1, AlertType.INFO: 2}
URGENCY_ORDER = {Urgency.HIGH: 0, Urgency.MEDIUM: 1, Urgency.LOW: 2}


def prioritize(alerts: list[HealthAlert], config: DetectorConfig = None) -> list[HealthAlert]:
    """Keep the alerts worth showing for one nurture.

    Urgent alerts crowd out info entirely; otherwise at most two warnings and
    one info, or two info when nothing is more pressing. Capped at three.
    """
    if config is None:
        config = DetectorConfig()

    urgent = [a for a in alerts if a.type == AlertType.URGENT]
    warning = [a for a in alerts if a.type == AlertType.WARNING]
    info = [a for a in alerts if a.type == AlertType.INFO]

    if urgent:
        selected = urgent + warning[: config.max_warnings]
    elif warning:
        selected = warning[: config.max_warnings] + info[: config.max_info_with_warnings]
    else:
        selected = info[: config.max_info_only]
    return selected[: config.max_alerts]


def sort_alerts(alerts: list[HealthAlert]) -> list[HealthAlert]:
    """Stable sort by type severity, then urgency."""
    return sorted(alerts, key=lambda a: (TYPE_ORDER[a.type], URGENCY_ORDER[a.urgency]))
