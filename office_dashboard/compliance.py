"""
Weekly submission compliance: streaks, submission rate and recent
history per office.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .config import COMPLIANCE_TIERS, COMPLIANCE_WINDOW_WEEKS
from .rankings import RankingResult, metric_values, rank_offices
from .repository import Office, Repository

logger = logging.getLogger(__name__)


@dataclass
class ComplianceRecord:
    office_id: int
    office_name: str
    dfo: str | None = None
    total_weeks: int = 0
    submitted_weeks: int = 0
    compliance_rate: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    recent_submissions: list[int] = field(default_factory=list)


def longest_run(history: Sequence[bool]) -> int:
    """Length of the longest run of consecutive submitted weeks."""
    longest = 0
    run = 0
    for submitted in history:
        run = run + 1 if submitted else 0
        longest = max(longest, run)
    return longest


def trailing_run(history: Sequence[bool]) -> int:
    """Length of the run of submitted weeks ending at the latest week."""
    run = 0
    for submitted in reversed(history):
        if not submitted:
            break
        run += 1
    return run


def compute_compliance(
    history: Sequence[bool],
    window: int = COMPLIANCE_WINDOW_WEEKS,
    office: Office | None = None,
) -> ComplianceRecord:
    """Compute compliance figures from a chronological submission history.

    Parameters
    ----------
    history : one bool per tracked week, oldest first.
    window : number of most recent weeks returned in recent_submissions.
        Histories shorter than the window are returned as-is, unpadded.
    office : identity copied onto the record, if given.
    """
    history = [bool(v) for v in history]
    total = len(history)
    submitted = sum(history)

    record = ComplianceRecord(
        office_id=office.office_id if office else 0,
        office_name=office.office_name if office else "",
        dfo=office.dfo if office else None,
        total_weeks=total,
        submitted_weeks=submitted,
        compliance_rate=(submitted / total * 100) if total else 0.0,
        current_streak=trailing_run(history),
        longest_streak=longest_run(history),
        recent_submissions=[int(v) for v in history[-window:]] if window > 0 else [],
    )
    return record


def compliance_tier(rate: float) -> str:
    """Return 'good', 'fair', 'poor', or 'critical' for a compliance rate."""
    for lower_bound, tier in COMPLIANCE_TIERS:
        if rate >= lower_bound:
            return tier
    return "critical"


def build_compliance_board(
    offices: list[Office],
    repository: Repository,
    window: int = COMPLIANCE_WINDOW_WEEKS,
) -> list[ComplianceRecord]:
    """Compliance record per office, in directory order.

    Offices with no tracked weeks are left off the board.
    """
    records = []
    for office in offices:
        history = repository.fetch_submission_history(office.office_id)
        if not history:
            logger.debug("Office %s has no tracked weeks; skipping", office.office_id)
            continue
        records.append(compute_compliance(history, window, office))

    logger.info("Built compliance board for %d of %d offices", len(records), len(offices))
    return records


def compliance_overview(records: list[ComplianceRecord]) -> dict:
    """Return a dict suitable for the compliance summary cards.

    {
        "total_offices": 42,
        "avg_compliance": 83.5,
        "highest_compliance": 100.0,
        "lowest_compliance": 40.0,
    }
    """
    if not records:
        return {
            "total_offices": 0,
            "avg_compliance": 0.0,
            "highest_compliance": 0.0,
            "lowest_compliance": 0.0,
        }

    rates = [r.compliance_rate for r in records]
    return {
        "total_offices": len(records),
        "avg_compliance": sum(rates) / len(rates),
        "highest_compliance": max(rates),
        "lowest_compliance": min(rates),
    }


def rank_compliance(records: list[ComplianceRecord], metric: str = "compliance_rate") -> RankingResult:
    """Rank offices by compliance_rate or current_streak."""
    if metric not in ("compliance_rate", "current_streak"):
        raise ValueError(f"Compliance ranking supports compliance_rate or current_streak, not {metric!r}")
    return rank_offices(metric_values(records, metric), metric)
