"""
KPI evaluation functions: pure functions with no side effects.

Provides data-completeness classification and threshold alerting for
office summaries.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .aggregation import OfficeSummary
from .config import ALERT_RULES, NO_DATA_ALERT
from .rankings import round_half_up

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class Completeness(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    NONE = "none"


@dataclass(frozen=True)
class Alert:
    severity: Severity
    message: str
    metric: str | None = None


def classify_completeness(summary: OfficeSummary) -> Completeness:
    """Return 'complete', 'partial', or 'none'.

    Counts the financial, operations and volume presence flags; notes
    do not count towards completeness.
    """
    present = sum([summary.has_financial, summary.has_operations, summary.has_volume])
    if present == 3:
        return Completeness.COMPLETE
    if present > 0:
        return Completeness.PARTIAL
    return Completeness.NONE


def _evaluate_rule(rule: dict, value: float) -> Alert | None:
    """Return the alert for one threshold rule, or None if within limits.

    Logic
    -----
    - critical if value > rule['critical']
    - warning  if value > rule['warning']
    - nothing  otherwise

    Critical takes precedence, so a rule yields at most one alert.
    """
    if value > rule["critical"]:
        severity, threshold = Severity.CRITICAL, rule["critical"]
    elif value > rule["warning"]:
        severity, threshold = Severity.WARNING, rule["warning"]
    else:
        return None

    message = rule["template"].format(
        value=round_half_up(value, rule.get("places", 0)),
        threshold=threshold,
        severity=severity.value,
    )
    return Alert(severity=severity, message=message, metric=rule["metric"])


def evaluate_alerts(summary: OfficeSummary, rules: list[dict] | None = None) -> list[Alert]:
    """Return the alerts for an office summary in rule order.

    An office with no financial, operations or volume data gets a single
    info alert and no threshold checks. Rules whose metric is absent from
    the summary are skipped.
    """
    if classify_completeness(summary) is Completeness.NONE:
        return [Alert(severity=Severity.INFO, message=NO_DATA_ALERT)]

    alerts = []
    for rule in ALERT_RULES if rules is None else rules:
        value = getattr(summary, rule["metric"], None)
        if value is None:
            continue
        alert = _evaluate_rule(rule, value)
        if alert is not None:
            alerts.append(alert)

    if alerts:
        logger.debug("Office %s raised %d alert(s)", summary.office_id, len(alerts))
    return alerts


def count_alerts(summaries: list[OfficeSummary]) -> dict[str, int]:
    """Total alerts and critical alerts across offices."""
    total = 0
    critical = 0
    for summary in summaries:
        alerts = evaluate_alerts(summary)
        total += len(alerts)
        critical += sum(1 for a in alerts if a.severity is Severity.CRITICAL)
    return {"total": total, "critical": critical}
