"""
Period resolution: turn a period selector into an inclusive month range
and a display label.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterator

from .config import MAX_CUSTOM_YEAR, MIN_CUSTOM_YEAR, MONTH_ABBR
from .errors import InvalidPeriodSelector

logger = logging.getLogger(__name__)


class PeriodKind(str, Enum):
    CURRENT_MONTH = "current_month"
    LAST_MONTH = "last_month"
    QTD = "qtd"
    YTD = "ytd"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PeriodRange:
    """Inclusive, month-granular date range."""

    start_year: int
    start_month: int
    end_year: int
    end_month: int

    def __post_init__(self):
        if (self.start_year, self.start_month) > (self.end_year, self.end_month):
            raise InvalidPeriodSelector(
                f"Period start {self.start_year}-{self.start_month:02d} is after "
                f"end {self.end_year}-{self.end_month:02d}"
            )

    @property
    def month_count(self) -> int:
        return (self.end_year - self.start_year) * 12 + (self.end_month - self.start_month) + 1

    def contains(self, year: int, month: int) -> bool:
        return (self.start_year, self.start_month) <= (year, month) <= (self.end_year, self.end_month)

    def months(self) -> Iterator[tuple[int, int]]:
        """Yield (year, month) pairs from start to end, inclusive."""
        year, month = self.start_year, self.start_month
        while (year, month) <= (self.end_year, self.end_month):
            yield year, month
            month += 1
            if month > 12:
                month = 1
                year += 1


@dataclass(frozen=True)
class ResolvedPeriod:
    kind: PeriodKind
    range: PeriodRange
    label: str


def month_abbr(month: int) -> str:
    return MONTH_ABBR[month - 1]


def quarter_of(month: int) -> int:
    """Return the calendar quarter (1-4) containing `month`."""
    return (month + 2) // 3


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _validate_custom(year: int | None, month: int | None) -> tuple[int, int]:
    if year is None or month is None:
        raise InvalidPeriodSelector("Custom period requires both a year and a month")
    if not 1 <= month <= 12:
        raise InvalidPeriodSelector(f"Custom month {month} is outside 1-12")
    if not MIN_CUSTOM_YEAR <= year <= MAX_CUSTOM_YEAR:
        raise InvalidPeriodSelector(
            f"Custom year {year} is outside {MIN_CUSTOM_YEAR}-{MAX_CUSTOM_YEAR}"
        )
    return year, month


def period_range(
    kind: PeriodKind | str,
    today: date,
    custom_year: int | None = None,
    custom_month: int | None = None,
) -> PeriodRange:
    """Resolve a period selector to a concrete PeriodRange.

    Rules
    -----
    - current_month: start = end = today's month
    - last_month:    one month before today, rolling January back to December
    - qtd:           first month of today's quarter through today's month
    - ytd:           January through today's month
    - custom:        start = end = the chosen month (validated)
    """
    kind = parse_period_kind(kind)
    year, month = today.year, today.month

    if kind is PeriodKind.CURRENT_MONTH:
        return PeriodRange(year, month, year, month)
    if kind is PeriodKind.LAST_MONTH:
        prev_year, prev_month = _previous_month(year, month)
        return PeriodRange(prev_year, prev_month, prev_year, prev_month)
    if kind is PeriodKind.QTD:
        start_month = (quarter_of(month) - 1) * 3 + 1
        return PeriodRange(year, start_month, year, month)
    if kind is PeriodKind.YTD:
        return PeriodRange(year, 1, year, month)

    custom_year, custom_month = _validate_custom(custom_year, custom_month)
    return PeriodRange(custom_year, custom_month, custom_year, custom_month)


def period_label(kind: PeriodKind | str, rng: PeriodRange) -> str:
    """Format the display label for a resolved range.

    e.g. "Apr 2026", "Q2 2026 (Apr - May)", "YTD 2026"
    """
    kind = parse_period_kind(kind)
    if kind is PeriodKind.QTD:
        return (
            f"Q{quarter_of(rng.start_month)} {rng.start_year} "
            f"({month_abbr(rng.start_month)} - {month_abbr(rng.end_month)})"
        )
    if kind is PeriodKind.YTD:
        return f"YTD {rng.start_year}"
    return f"{month_abbr(rng.start_month)} {rng.start_year}"


def resolve_period(
    kind: PeriodKind | str,
    today: date,
    custom_year: int | None = None,
    custom_month: int | None = None,
) -> ResolvedPeriod:
    """Resolve a selector to its range and label in one call."""
    kind = parse_period_kind(kind)
    rng = period_range(kind, today, custom_year, custom_month)
    label = period_label(kind, rng)
    logger.debug("Resolved period %s to %s (%s)", kind.value, rng, label)
    return ResolvedPeriod(kind=kind, range=rng, label=label)


def parse_period_kind(kind: PeriodKind | str) -> PeriodKind:
    if isinstance(kind, PeriodKind):
        return kind
    try:
        return PeriodKind(kind)
    except ValueError:
        raise InvalidPeriodSelector(f"Unknown period kind: {kind!r}") from None
