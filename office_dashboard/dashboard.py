"""
Dashboard-ready output functions.

These are the primary entry points for a front end. Each takes an
immutable DashboardRequest describing the current selection and returns
plain dicts, dataclasses or DataFrames suitable for rendering cards and
tables.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date

import pandas as pd

from .aggregation import AggregationResult, OfficeSummary, aggregate_offices
from .compliance import (
    ComplianceRecord,
    build_compliance_board,
    compliance_overview,
    compliance_tier,
)
from .config import COMPLIANCE_WINDOW_WEEKS
from .kpis import Completeness, classify_completeness, count_alerts, evaluate_alerts
from .periods import PeriodKind, ResolvedPeriod, resolve_period
from .rankings import RankingResult, format_metric_value, metric_values, rank_offices
from .repository import Directory, Office, Repository

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("office_id_asc", "name_asc", "revenue_desc", "lab_exp_desc", "latest_first")
DATA_STATUS_OPTIONS = ("all", "complete", "partial", "none")


@dataclass(frozen=True)
class DashboardFilters:
    state: str | None = None
    dfo: str | None = None
    model: str | None = None
    search_term: str | None = None
    data_status: str = "all"

    @property
    def is_active(self) -> bool:
        return bool(
            self.state or self.dfo or self.model or self.search_term
            or self.data_status != "all"
        )


@dataclass(frozen=True)
class DashboardRequest:
    """The user's current selection, passed once per recomputation."""

    today: date
    period: PeriodKind | str = PeriodKind.CURRENT_MONTH
    custom_year: int | None = None
    custom_month: int | None = None
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    sort_by: str = "office_id_asc"
    metric: str = "revenue"

    def resolve(self) -> ResolvedPeriod:
        return resolve_period(self.period, self.today, self.custom_year, self.custom_month)


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------
def _matches(summary: OfficeSummary, filters: DashboardFilters) -> bool:
    if filters.state and summary.state != filters.state:
        return False
    if filters.dfo and summary.dfo != filters.dfo:
        return False
    if filters.model and summary.model != filters.model:
        return False
    if filters.search_term:
        term = filters.search_term.lower()
        if term not in summary.office_name.lower() and term not in str(summary.office_id):
            return False
    if filters.data_status != "all":
        if classify_completeness(summary) is not Completeness(filters.data_status):
            return False
    return True


def filter_offices(summaries: list[OfficeSummary], filters: DashboardFilters) -> list[OfficeSummary]:
    """Apply state, DFO, model, search and data-status filters."""
    if filters.data_status not in DATA_STATUS_OPTIONS:
        raise ValueError(f"Unknown data status filter: {filters.data_status!r}")
    return [s for s in summaries if _matches(s, filters)]


def filter_options(summaries: list[OfficeSummary]) -> dict[str, list[str]]:
    """Sorted distinct states, DFOs and models for filter dropdowns."""
    return {
        "states": sorted({s.state for s in summaries}),
        "dfos": sorted({s.dfo for s in summaries if s.dfo}),
        "models": sorted({s.model for s in summaries if s.model}),
    }


def sort_offices(summaries: list[OfficeSummary], sort_by: str) -> list[OfficeSummary]:
    """Order summaries for the card grid. Missing values sort last."""
    if sort_by == "office_id_asc":
        return sorted(summaries, key=lambda s: s.office_id)
    if sort_by == "name_asc":
        return sorted(summaries, key=lambda s: s.office_name.lower())
    if sort_by == "revenue_desc":
        return sorted(summaries, key=lambda s: (s.revenue is None, -(s.revenue or 0)))
    if sort_by == "lab_exp_desc":
        return sorted(
            summaries, key=lambda s: (s.lab_exp_percent is None, -(s.lab_exp_percent or 0))
        )
    if sort_by == "latest_first":
        return sorted(
            summaries,
            key=lambda s: (
                s.latest_year is None,
                -(s.latest_year or 0),
                -(s.latest_month or 0),
            ),
        )
    raise ValueError(f"Unknown sort option: {sort_by!r}")


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------
def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def offices_with_data(summaries: list[OfficeSummary]) -> set[int]:
    """Ids of offices with any financial, operations or volume record."""
    return {
        s.office_id for s in summaries
        if classify_completeness(s) is not Completeness.NONE
    }


def current_month_office_ids(
    offices: list[Office],
    today: date,
    repository: Repository,
    selected: ResolvedPeriod | None = None,
    selected_result: AggregationResult | None = None,
) -> set[int]:
    """Ids of offices that have entered data for the calendar month of `today`.

    Independent of the selected period: looking at last month still
    reports who has started on this month. When the selection already
    is the current month its aggregation result is reused.
    """
    current = resolve_period(PeriodKind.CURRENT_MONTH, today)
    if selected is not None and selected_result is not None and selected.range == current.range:
        return offices_with_data(selected_result.summaries)
    return offices_with_data(aggregate_offices(offices, current.range, repository).summaries)


def get_dashboard_statistics(
    summaries: list[OfficeSummary], current_month_ids: set[int]
) -> dict:
    """Top-of-page summary figures.

    `current_month_ids` comes from current_month_office_ids(); only
    offices present in `summaries` are counted.

    Returns
    -------
    Dict with structure:
    {
        "total_offices": 40,
        "current_month_data": 31,
        "complete_offices": 25,
        "total_alerts": 12,
        "critical_alerts": 3,
        "avg_revenue": 187_250.0,
        "avg_lab_exp_percent": 18.4,
    }
    """
    alerts = count_alerts(summaries)
    revenues = [s.revenue for s in summaries if s.revenue is not None]
    lab_pcts = [s.lab_exp_percent for s in summaries if s.lab_exp_percent is not None]

    return {
        "total_offices": len(summaries),
        "current_month_data": sum(1 for s in summaries if s.office_id in current_month_ids),
        "complete_offices": sum(
            1 for s in summaries if classify_completeness(s) is Completeness.COMPLETE
        ),
        "total_alerts": alerts["total"],
        "critical_alerts": alerts["critical"],
        "avg_revenue": _mean(revenues),
        "avg_lab_exp_percent": _mean(lab_pcts),
    }


def office_card(summary: OfficeSummary) -> dict:
    """Everything one office card needs: figures, status and alerts."""
    card = asdict(summary)
    card["state"] = summary.state
    card["data_status"] = classify_completeness(summary).value
    card["alerts"] = [
        {"severity": a.severity.value, "message": a.message}
        for a in evaluate_alerts(summary)
    ]
    return card


def get_dashboard_overview(
    request: DashboardRequest,
    directory: Directory,
    repository: Repository,
) -> dict:
    """Single entry point to populate the overview page.

    Returns
    -------
    Dict with keys: period (label), range, statistics, filter_options,
    cards (filtered and sorted), failed_office_ids.
    """
    resolved = request.resolve()
    offices = directory.list_offices()
    result = aggregate_offices(offices, resolved.range, repository)
    current_ids = current_month_office_ids(
        offices, request.today, repository, selected=resolved, selected_result=result
    )

    visible = sort_offices(filter_offices(result.summaries, request.filters), request.sort_by)
    if not visible:
        logger.warning("No offices match the current filters for %s", resolved.label)

    return {
        "period": resolved.label,
        "range": resolved.range,
        "statistics": get_dashboard_statistics(result.summaries, current_ids),
        "filter_options": filter_options(result.summaries),
        "cards": [office_card(s) for s in visible],
        "failed_office_ids": result.failed_office_ids,
    }


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------
def get_rankings(
    request: DashboardRequest,
    directory: Directory,
    repository: Repository,
) -> tuple[ResolvedPeriod, RankingResult, AggregationResult]:
    """Rank all offices on request.metric for the requested period."""
    resolved = request.resolve()
    result = aggregate_offices(directory.list_offices(), resolved.range, repository)
    ranking = rank_offices(metric_values(result.summaries, request.metric), request.metric)
    return resolved, ranking, result


def rankings_frame(ranking: RankingResult) -> pd.DataFrame:
    """Ranking table for display.

    Returns
    -------
    DataFrame with columns:
        rank, office_id, office_name, dfo, address, value, display_value
    """
    columns = ["rank", "office_id", "office_name", "dfo", "address", "value", "display_value"]
    if ranking.is_empty:
        return pd.DataFrame(columns=columns)

    rows = []
    for entry in ranking.entries:
        row = asdict(entry)
        row["display_value"] = format_metric_value(ranking.metric, entry.value)
        rows.append(row)
    return pd.DataFrame(rows)[columns]


# ---------------------------------------------------------------------------
# Compliance
# ---------------------------------------------------------------------------
def get_compliance_board(
    directory: Directory,
    repository: Repository,
    dfo: str | None = None,
    window: int = COMPLIANCE_WINDOW_WEEKS,
) -> dict:
    """Compliance records (optionally for one DFO) plus overall statistics.

    Overall statistics always cover every tracked office.
    """
    records = build_compliance_board(directory.list_offices(), repository, window)
    visible = [r for r in records if dfo is None or r.dfo == dfo]
    return {
        "overview": compliance_overview(records),
        "records": visible,
    }


def compliance_frame(records: list[ComplianceRecord]) -> pd.DataFrame:
    """Compliance table for display, best compliance rate first.

    Returns
    -------
    DataFrame with columns:
        office_id, office_name, dfo, total_weeks, submitted_weeks,
        compliance_rate, current_streak, longest_streak,
        recent_submissions, tier
    """
    columns = [
        "office_id", "office_name", "dfo", "total_weeks", "submitted_weeks",
        "compliance_rate", "current_streak", "longest_streak",
        "recent_submissions", "tier",
    ]
    if not records:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame([asdict(r) for r in records])
    df["tier"] = df["compliance_rate"].map(compliance_tier)
    df = df.sort_values("compliance_rate", ascending=False, kind="stable")
    return df[columns].reset_index(drop=True)
