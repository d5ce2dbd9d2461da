"""
Metric aggregation: roll each office's monthly records within a period
into a single OfficeSummary.

Flow figures (revenue, expenses, units) are summed across the range;
point-in-time figures (backlogs) take the most recent month in range.
Expense percentages are derived from the aggregated numerator and
revenue, never averaged month by month.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import pandas as pd

from .config import (
    AGGREGATION_MAX_WORKERS,
    AGGREGATION_RULES,
    EXPENSE_PERCENT_FIELDS,
    FINANCIAL,
    NOTES,
    OPERATIONS,
    PRIMARY_DOMAINS,
    VOLUME,
)
from .errors import RepositoryUnavailable
from .periods import PeriodRange
from .repository import MonthlyRecord, Office, Repository, extract_state

logger = logging.getLogger(__name__)


@dataclass
class OfficeSummary:
    """One office's figures for one period. Absent values are None."""

    office_id: int
    office_name: str
    model: str
    dfo: str | None = None
    address: str | None = None
    latest_year: int | None = None
    latest_month: int | None = None
    revenue: float | None = None
    lab_exp_percent: float | None = None
    personnel_percent: float | None = None
    overtime_percent: float | None = None
    backlog_count: int | None = None
    backlog_in_lab: int | None = None
    backlog_in_clinic: int | None = None
    total_weekly_units: float | None = None
    data_completeness: float | None = None
    has_financial: bool = False
    has_operations: bool = False
    has_volume: bool = False
    has_notes: bool = False

    @property
    def state(self) -> str:
        return extract_state(self.office_name)


@dataclass
class AggregationResult:
    """Summaries for every office that aggregated, plus the ones that failed."""

    summaries: list[OfficeSummary] = field(default_factory=list)
    failures: dict[int, RepositoryUnavailable] = field(default_factory=dict)

    @property
    def failed_office_ids(self) -> list[int]:
        return sorted(self.failures)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    def raise_for_failures(self) -> None:
        """Raise a single RepositoryUnavailable if any office failed."""
        if not self.failures:
            return
        ids = ", ".join(str(i) for i in self.failed_office_ids)
        raise RepositoryUnavailable(
            f"Repository unavailable for {len(self.failures)} office(s): {ids}"
        )


def _records_frame(records: list[MonthlyRecord]) -> pd.DataFrame:
    rows = [{"year": r.year, "month": r.month, **r.values} for r in records]
    return pd.DataFrame(rows).sort_values(["year", "month"], kind="stable")


def _aggregate_field(df: pd.DataFrame, column: str, rule: str) -> float | None:
    if column not in df.columns:
        return None
    values = pd.to_numeric(df[column], errors="coerce")
    if rule == "sum":
        total = values.sum(min_count=1)
        return float(total) if pd.notna(total) else None
    if rule == "latest":
        present = values.dropna()
        return float(present.iloc[-1]) if not present.empty else None
    raise ValueError(f"Unknown aggregation rule: {rule!r}")


def aggregate_domain(records: list[MonthlyRecord], domain: str) -> dict[str, float | None]:
    """Apply the domain's aggregation rules to its records in range.

    Returns an empty dict when there are no records.
    """
    if not records:
        return {}
    df = _records_frame(records)
    return {
        column: _aggregate_field(df, column, rule)
        for column, rule in AGGREGATION_RULES.get(domain, {}).items()
    }


def expense_percent(expense: float | None, revenue: float | None) -> float | None:
    """Expense as a percentage of revenue; None without a positive revenue."""
    if expense is None or revenue is None or revenue <= 0:
        return None
    return expense / revenue * 100


def _as_int(val: float | None) -> int | None:
    return None if val is None else int(round(val))


def _latest_period(records_by_domain: dict[str, list[MonthlyRecord]]) -> tuple[int, int] | None:
    keys = [
        r.period_key
        for domain in PRIMARY_DOMAINS
        for r in records_by_domain.get(domain, [])
    ]
    return max(keys) if keys else None


def data_completeness(
    records_by_domain: dict[str, list[MonthlyRecord]],
    period_range: PeriodRange,
) -> float:
    """Share of expected monthly financial + volume submissions present.

    Each month in the range expects one financial and one volume record;
    records outside the range do not count.
    """
    expected_months = set(period_range.months())
    financial_months = {r.period_key for r in records_by_domain.get(FINANCIAL, [])}
    volume_months = {r.period_key for r in records_by_domain.get(VOLUME, [])}
    present = len(financial_months & expected_months) + len(volume_months & expected_months)
    return present / (period_range.month_count * 2) * 100


def summarize_office(
    office: Office,
    period_range: PeriodRange,
    repository: Repository,
) -> OfficeSummary:
    """Aggregate one office's records within `period_range`.

    Raises RepositoryUnavailable if the repository cannot be read.
    """
    records_by_domain = {
        domain: repository.fetch_records(office.office_id, domain, period_range)
        for domain in PRIMARY_DOMAINS + (NOTES,)
    }

    financial = aggregate_domain(records_by_domain[FINANCIAL], FINANCIAL)
    operations = aggregate_domain(records_by_domain[OPERATIONS], OPERATIONS)
    volume = aggregate_domain(records_by_domain[VOLUME], VOLUME)

    revenue = financial.get("revenue")
    percents = {
        name: expense_percent(financial.get(numerator), revenue)
        for name, numerator in EXPENSE_PERCENT_FIELDS.items()
    }

    latest = _latest_period(records_by_domain)

    summary = OfficeSummary(
        office_id=office.office_id,
        office_name=office.office_name,
        model=office.model,
        dfo=office.dfo,
        address=office.address,
        latest_year=latest[0] if latest else None,
        latest_month=latest[1] if latest else None,
        revenue=revenue,
        backlog_count=_as_int(operations.get("backlog_case_count")),
        backlog_in_lab=_as_int(volume.get("backlog_in_lab")),
        backlog_in_clinic=_as_int(volume.get("backlog_in_clinic")),
        total_weekly_units=volume.get("total_weekly_units"),
        data_completeness=data_completeness(records_by_domain, period_range),
        has_financial=bool(records_by_domain[FINANCIAL]),
        has_operations=bool(records_by_domain[OPERATIONS]),
        has_volume=bool(records_by_domain[VOLUME]),
        has_notes=bool(records_by_domain[NOTES]),
        **percents,
    )
    logger.debug("Summarised office %s: %s", office.office_id, summary)
    return summary


def aggregate_offices(
    offices: list[Office],
    period_range: PeriodRange,
    repository: Repository,
    max_workers: int | None = None,
) -> AggregationResult:
    """Summarise every office for one period.

    A RepositoryUnavailable for one office does not stop the others; the
    failure is recorded on the result and logged once for the batch.
    Summaries keep the order of `offices` whatever order they complete in.

    Parameters
    ----------
    offices : aggregation targets, usually Directory.list_offices().
    period_range : resolved period.
    repository : record source.
    max_workers : thread pool size; 1 runs sequentially. Defaults to
        AGGREGATION_MAX_WORKERS.
    """
    workers = max_workers or AGGREGATION_MAX_WORKERS

    def _run(office: Office) -> OfficeSummary | RepositoryUnavailable:
        try:
            return summarize_office(office, period_range, repository)
        except RepositoryUnavailable as exc:
            if exc.office_id is None:
                exc.office_id = office.office_id
            return exc

    if workers > 1 and len(offices) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(_run, offices))
    else:
        outcomes = [_run(office) for office in offices]

    result = AggregationResult()
    for office, outcome in zip(offices, outcomes):
        if isinstance(outcome, RepositoryUnavailable):
            result.failures[office.office_id] = outcome
        else:
            result.summaries.append(outcome)

    if result.failures:
        logger.warning(
            "Aggregation incomplete: repository unavailable for offices %s",
            result.failed_office_ids,
        )
    logger.info(
        "Aggregated %d of %d offices for %s",
        len(result.summaries), len(offices), period_range,
    )
    return result
