"""
Simulated data generator for the office dashboard.

Generates realistic office directory, monthly financial/operations data,
weekly volume counts and submission histories. All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import CLINIC_BACKLOG_FIELDS, LAB_BACKLOG_FIELDS, UNIT_FIELDS

# Seed for reproducibility
_RNG = np.random.default_rng(42)

# ---------------------------------------------------------------------------
# Typical office parameters (realistic ranges)
# ---------------------------------------------------------------------------
_OFFICES = [
    (101, "Albertville, AL", "PO", "R. Hayes", "1201 Main St"),
    (102, "Birmingham, AL", "PLLC", "R. Hayes", "88 Vulcan Ave"),
    (103, "Mobile, AL", "PO", "R. Hayes", "410 Bay Rd"),
    (201, "Macon, GA", "PLLC", "K. Ortiz", "77 Cherry St"),
    (202, "Savannah, GA", "PO", "K. Ortiz", "5 River Walk"),
    (203, "Augusta, GA", "PO", "K. Ortiz", "19 Broad St"),
    (301, "Knoxville, TN", "PLLC", "D. Patel", "600 Gay St"),
    (302, "Chattanooga, TN", "PO", "D. Patel", "23 Market St"),
    (303, "Jackson, TN", "PO", None, "310 Highland Ave"),
    (401, "Tupelo, MS", "PLLC", "D. Patel", "45 Gloster St"),
]

_FINANCIAL_PARAMS = {
    "revenue": {"mean": 185_000, "std": 35_000},
    "lab_share": {"mean": 0.19, "std": 0.04},
    "outside_share": {"mean": 0.03, "std": 0.01},
    "personnel_share": {"mean": 0.15, "std": 0.03},
    "overtime_share": {"mean": 0.02, "std": 0.008},
    "bonus_share": {"mean": 0.01, "std": 0.004},
}

# (mean, std) per weekly component
_WEEKLY_COMPONENT_PARAMS = {
    **{col: (6, 3) for col in LAB_BACKLOG_FIELDS},
    **{col: (4, 2) for col in CLINIC_BACKLOG_FIELDS},
    **{col: (3, 2) for col in UNIT_FIELDS},
}

_NOTES = [
    "Lab hub turnaround slow this month",
    "New associate started; backlog expected to fall",
    "Outside lab spend up due to remakes",
    "Staffing short two assistants",
]


def generate_offices() -> pd.DataFrame:
    """Generate the simulated office directory."""
    return pd.DataFrame(
        _OFFICES, columns=["office_id", "office_name", "model", "dfo", "address"]
    )


def generate_monthly_financials(
    start_month: str = "2026-01-01",
    n_months: int = 10,
    coverage: float = 0.85,
) -> pd.DataFrame:
    """Generate simulated monthly financial records.

    Each office-month is present with probability `coverage` so that
    completeness and no-data alerts have something to show.
    """
    months = pd.date_range(start_month, periods=n_months, freq="MS")
    p = _FINANCIAL_PARAMS
    rows = []

    for office_id, *_ in _OFFICES:
        for month in months:
            if _RNG.uniform() > coverage:
                continue
            revenue = max(_RNG.normal(p["revenue"]["mean"], p["revenue"]["std"]), 40_000)

            def share(key: str) -> float:
                return max(_RNG.normal(p[key]["mean"], p[key]["std"]), 0.0) * revenue

            lab_no_outside = share("lab_share")
            rows.append({
                "office_id": office_id,
                "year": month.year,
                "month": month.month,
                "revenue": round(revenue, 2),
                "lab_exp_no_outside": round(lab_no_outside, 2),
                "lab_exp_with_outside": round(lab_no_outside + share("outside_share"), 2),
                "personnel_exp": round(share("personnel_share"), 2),
                "overtime_exp": round(share("overtime_share"), 2),
                "bonus_exp": round(share("bonus_share"), 2),
            })

    return pd.DataFrame(rows)


def generate_monthly_operations(
    start_month: str = "2026-01-01",
    n_months: int = 10,
    coverage: float = 0.8,
) -> pd.DataFrame:
    """Generate simulated monthly operations records (backlog, overtime, labor model)."""
    months = pd.date_range(start_month, periods=n_months, freq="MS")
    rows = []

    for office_id, *_ in _OFFICES:
        base_backlog = _RNG.uniform(20, 110)
        for month in months:
            if _RNG.uniform() > coverage:
                continue
            rows.append({
                "office_id": office_id,
                "year": month.year,
                "month": month.month,
                "backlog_case_count": int(max(base_backlog + _RNG.normal(0, 12), 0)),
                "overtime_value": round(max(_RNG.normal(3.5, 1.5), 0), 1),
                "labor_model_value": round(_RNG.normal(1.0, 0.08), 2),
            })

    return pd.DataFrame(rows)


def generate_weekly_volume(
    year: int = 2026,
    n_weeks: int = 42,
    coverage: float = 0.9,
) -> pd.DataFrame:
    """Generate simulated weekly volume submissions for weeks 1..n_weeks."""
    rows = []

    for office_id, *_ in _OFFICES:
        for week in range(1, n_weeks + 1):
            if _RNG.uniform() > coverage:
                continue
            row = {"office_id": office_id, "year": year, "week_number": week}
            for col, (mean, std) in _WEEKLY_COMPONENT_PARAMS.items():
                row[col] = int(max(round(_RNG.normal(mean, std)), 0))
            rows.append(row)

    return pd.DataFrame(rows)


def generate_submissions(weekly_volume: pd.DataFrame, n_weeks: int = 42, year: int = 2026) -> pd.DataFrame:
    """Derive the submission table from which weeks have volume data.

    Every office is tracked for weeks 1..n_weeks; a week counts as
    submitted when the office has a weekly volume row for it.
    """
    submitted = set(
        zip(weekly_volume["office_id"], weekly_volume["year"], weekly_volume["week_number"])
    ) if not weekly_volume.empty else set()

    rows = []
    for office_id, *_ in _OFFICES:
        for week in range(1, n_weeks + 1):
            rows.append({
                "office_id": office_id,
                "year": year,
                "week_number": week,
                "submitted": (office_id, year, week) in submitted,
            })

    return pd.DataFrame(rows)


def generate_notes(
    start_month: str = "2026-01-01",
    n_months: int = 10,
    probability: float = 0.25,
) -> pd.DataFrame:
    """Generate occasional notes/actions per office-month."""
    months = pd.date_range(start_month, periods=n_months, freq="MS")
    rows = []

    for office_id, *_ in _OFFICES:
        for month in months:
            if _RNG.uniform() > probability:
                continue
            rows.append({
                "office_id": office_id,
                "year": month.year,
                "month": month.month,
                "note_text": _NOTES[int(_RNG.integers(len(_NOTES)))],
            })

    return pd.DataFrame(rows)
