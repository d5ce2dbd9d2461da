"""
Office Dashboard: end-to-end analytics pipeline.

Runs the full pipeline on simulated data, from raw tables to
dashboard-ready outputs, and prints smoke-test summaries.

Usage:
    python main.py
"""

import logging
from datetime import date

from office_dashboard.compliance import rank_compliance
from office_dashboard.config import FINANCIAL, NOTES, OPERATIONS, VOLUME
from office_dashboard.dashboard import (
    DashboardRequest,
    compliance_frame,
    get_compliance_board,
    get_dashboard_overview,
    get_rankings,
    rankings_frame,
)
from office_dashboard.periods import PeriodKind
from office_dashboard.repository import FrameRepository
from office_dashboard.simulator import (
    generate_monthly_financials,
    generate_monthly_operations,
    generate_notes,
    generate_offices,
    generate_submissions,
    generate_weekly_volume,
)
from office_dashboard.transforms import (
    aggregate_weekly_volume,
    build_dim_office,
    build_fact_monthly,
    build_fact_submissions,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_repository() -> FrameRepository:
    """Simulate source tables and load them into a FrameRepository."""
    weekly_volume = generate_weekly_volume()

    return FrameRepository(
        offices=build_dim_office(generate_offices()),
        domain_frames={
            FINANCIAL: build_fact_monthly(generate_monthly_financials(), FINANCIAL),
            OPERATIONS: build_fact_monthly(generate_monthly_operations(), OPERATIONS),
            VOLUME: aggregate_weekly_volume(weekly_volume),
            NOTES: build_fact_monthly(generate_notes(), NOTES),
        },
        submissions=build_fact_submissions(generate_submissions(weekly_volume)),
    )


def main() -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  OFFICE DASHBOARD - Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    today = date(2026, 10, 19)

    # ------------------------------------------------------------------
    # 1. Build repository
    # ------------------------------------------------------------------
    print("[ 1 ] BUILDING REPOSITORY")
    print("-" * 40)
    repo = build_repository()
    offices = repo.list_offices()
    print(f"\nOffices: {len(offices)}")

    # ------------------------------------------------------------------
    # 2. Overview for each period kind
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD OVERVIEW")
    print("-" * 40)

    for kind in (PeriodKind.CURRENT_MONTH, PeriodKind.LAST_MONTH, PeriodKind.QTD, PeriodKind.YTD):
        request = DashboardRequest(today=today, period=kind, sort_by="revenue_desc")
        overview = get_dashboard_overview(request, repo, repo)
        print(f"\n{overview['period']}")
        for key, value in overview["statistics"].items():
            print(f"  {key:22s} | {value}")
        for card in overview["cards"][:3]:
            alerts = "; ".join(a["message"] for a in card["alerts"]) or "no alerts"
            print(f"  {card['office_name']:18s} | {card['data_status']:8s} | {alerts}")

    # ------------------------------------------------------------------
    # 3. Rankings
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] RANKINGS")
    print("-" * 40)

    for metric in ("revenue", "lab_expense_percent", "backlog_in_lab", "data_completeness"):
        request = DashboardRequest(today=today, period=PeriodKind.QTD, metric=metric)
        resolved, ranking, _ = get_rankings(request, repo, repo)
        print(f"\n{metric} | {resolved.label}")
        print(f"  best={ranking.stats.best} average={ranking.stats.average} worst={ranking.stats.worst}")
        table = rankings_frame(ranking)
        if not table.empty:
            print(table[["rank", "office_name", "display_value"]].head(5).to_string(index=False))

    # ------------------------------------------------------------------
    # 4. Compliance
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] SUBMISSION COMPLIANCE")
    print("-" * 40)

    board = get_compliance_board(repo, repo)
    print(f"\nOverview: {board['overview']}")
    print(compliance_frame(board["records"]).to_string(index=False))

    streaks = rank_compliance(board["records"], "current_streak")
    print(f"\nLongest current streak: {streaks.stats.best} weeks")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
