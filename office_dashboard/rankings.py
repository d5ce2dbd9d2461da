"""
Office rankings for one selected metric.

Direction and display format come from config.METRIC_REGISTRY. Offices
without a value are left out, the rest are stable-sorted best first and
numbered 1..N; equal values keep their input order.
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from .config import METRIC_REGISTRY, NO_DATA
from .errors import UnknownMetric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricValue:
    """A ranking candidate: office identity plus its value (None = no data)."""

    office_id: int
    office_name: str
    value: float | None
    dfo: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class RankingEntry:
    office_id: int
    office_name: str
    value: float
    rank: int
    dfo: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class RankingStats:
    best: str = NO_DATA
    average: str = NO_DATA
    worst: str = NO_DATA


@dataclass
class RankingResult:
    metric: str
    entries: list[RankingEntry] = field(default_factory=list)
    stats: RankingStats = field(default_factory=RankingStats)

    @property
    def is_empty(self) -> bool:
        return not self.entries


def metric_info(metric: str) -> dict:
    try:
        return METRIC_REGISTRY[metric]
    except KeyError:
        raise UnknownMetric(f"Unknown ranking metric: {metric!r}") from None


def lower_is_better(metric: str) -> bool:
    return metric_info(metric)["direction"] == "lower_is_better"


def round_half_up(value: float, places: int = 0) -> Decimal:
    """Round to `places` decimals with halves going up (12.25 -> 12.3).

    Goes through the shortest decimal repr of `value`, so a float that
    prints as 12.25 rounds as 12.25 rather than as its binary neighbour.
    """
    return Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_metric_value(metric: str, value: float | None) -> str:
    """Format a value the way the metric is displayed.

    currency -> "$12,346", percent -> "12.3%", whole_percent -> "85%",
    count -> "42". Missing values render as "--". Halves round up.
    """
    if value is None:
        return NO_DATA
    fmt = metric_info(metric)["format"]
    if fmt == "currency":
        return f"${int(round_half_up(value)):,}"
    if fmt == "percent":
        return f"{round_half_up(value, 1):f}%"
    if fmt == "whole_percent":
        return f"{round_half_up(value):f}%"
    return str(int(round_half_up(value)))


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    try:
        return not math.isnan(value)
    except TypeError:
        return False


def rank_offices(candidates: Iterable[MetricValue], metric: str) -> RankingResult:
    """Rank offices on one metric.

    Parameters
    ----------
    candidates : office values in directory order; None marks no data.
    metric : key into METRIC_REGISTRY.

    Returns
    -------
    RankingResult with entries best first and formatted best/average/worst.
    An empty candidate set yields no entries and "--" statistics.
    """
    descending = not lower_is_better(metric)
    with_data = [c for c in candidates if _has_value(c.value)]
    ordered = sorted(with_data, key=lambda c: c.value, reverse=descending)

    entries = [
        RankingEntry(
            office_id=c.office_id,
            office_name=c.office_name,
            value=c.value,
            rank=position,
            dfo=c.dfo,
            address=c.address,
        )
        for position, c in enumerate(ordered, start=1)
    ]

    if not entries:
        logger.info("No offices with %s data to rank", metric)
        return RankingResult(metric=metric)

    values = [e.value for e in entries]
    stats = RankingStats(
        best=format_metric_value(metric, values[0]),
        average=format_metric_value(metric, sum(values) / len(values)),
        worst=format_metric_value(metric, values[-1]),
    )
    logger.info("Ranked %d offices on %s", len(entries), metric)
    return RankingResult(metric=metric, entries=entries, stats=stats)


def metric_values(items: Iterable[Any], metric: str) -> list[MetricValue]:
    """Extract ranking candidates from summaries or compliance records.

    Any object with office_id, office_name and the metric's registry
    field works; dfo and address are picked up when present.
    """
    attr = metric_info(metric)["field"]
    return [
        MetricValue(
            office_id=item.office_id,
            office_name=item.office_name,
            value=getattr(item, attr, None),
            dfo=getattr(item, "dfo", None),
            address=getattr(item, "address", None),
        )
        for item in items
    ]
