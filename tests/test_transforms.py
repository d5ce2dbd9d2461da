"""
Tests for fact-table builders and the weekly volume roll-up.
"""
import pandas as pd
import pytest

from office_dashboard.config import CLINIC_BACKLOG_FIELDS, LAB_BACKLOG_FIELDS, UNIT_FIELDS
from office_dashboard.transforms import (
    aggregate_weekly_volume,
    build_dim_office,
    build_fact_monthly,
    build_fact_submissions,
    week_to_month,
)


class TestWeekToMonth:

    @pytest.mark.parametrize("week, month", [
        (1, 1), (4, 1), (5, 2), (8, 2), (9, 3), (13, 3), (14, 4), (17, 4),
        (22, 5), (26, 6), (30, 7), (35, 8), (39, 9), (43, 10), (48, 11),
        (49, 12), (53, 12),
    ])
    def test_boundaries(self, week, month):
        assert week_to_month(week) == month


class TestAggregateWeeklyVolume:

    def make_weekly(self) -> pd.DataFrame:
        rows = []
        for week, lab, clinic, units in [(1, 2, 1, 3), (2, 3, 2, 4), (5, 10, 0, 1)]:
            row = {"office_id": 9, "year": 2026, "week_number": week}
            row.update({col: lab for col in LAB_BACKLOG_FIELDS})
            row.update({col: clinic for col in CLINIC_BACKLOG_FIELDS})
            row.update({col: units for col in UNIT_FIELDS})
            rows.append(row)
        return pd.DataFrame(rows)

    def test_one_row_per_office_month(self):
        monthly = aggregate_weekly_volume(self.make_weekly())
        assert list(zip(monthly["year"], monthly["month"])) == [(2026, 1), (2026, 2)]

    def test_components_averaged_and_rounded_half_up(self):
        monthly = aggregate_weekly_volume(self.make_weekly())
        january = monthly[monthly["month"] == 1].iloc[0]

        # mean(2, 3) = 2.5 -> 3 per lab stage; mean(1, 2) = 1.5 -> 2; mean(3, 4) = 3.5 -> 4
        assert january["lab_setups"] == 3
        assert january["backlog_in_lab"] == 3 * len(LAB_BACKLOG_FIELDS)
        assert january["backlog_in_clinic"] == 2 * len(CLINIC_BACKLOG_FIELDS)
        assert january["total_weekly_units"] == 4 * len(UNIT_FIELDS)

    def test_missing_components_count_as_zero(self):
        weekly = pd.DataFrame({
            "office_id": [1],
            "year": [2026],
            "week_number": [14],
            "lab_setups": [5],
        })
        monthly = aggregate_weekly_volume(weekly)

        assert monthly.iloc[0]["month"] == 4
        assert monthly.iloc[0]["backlog_in_lab"] == 5
        assert monthly.iloc[0]["total_weekly_units"] == 0

    def test_empty_input(self):
        monthly = aggregate_weekly_volume(pd.DataFrame())
        assert monthly.empty
        assert "backlog_in_lab" in monthly.columns


class TestBuildFactMonthly:

    def test_drops_invalid_months_and_keeps_last_duplicate(self):
        raw = pd.DataFrame({
            "office_id": [1, 1, 1, 2],
            "year": [2026, 2026, 2026, 2026],
            "month": [4, 4, 13, 5],
            "backlog_case_count": [10, 12, 99, 7],
        })
        fact = build_fact_monthly(raw, "operations")

        assert len(fact) == 2
        assert fact.iloc[0]["backlog_case_count"] == 12
        assert "labor_model_value" in fact.columns

    def test_empty_input(self):
        fact = build_fact_monthly(pd.DataFrame(), "financial")
        assert fact.empty
        assert "revenue" in fact.columns


class TestDimensionAndSubmissions:

    def test_dim_office_derives_state(self):
        dim = build_dim_office(pd.DataFrame({
            "office_id": [2, 1],
            "office_name": ["Macon, GA", "Head Office"],
            "model": ["PO", "PLLC"],
        }))

        assert list(dim["office_id"]) == [1, 2]
        assert list(dim["state"]) == ["Unknown", "GA"]
        assert dim["dfo"].isna().all()

    def test_submissions_sorted_chronologically(self):
        fact = build_fact_submissions(pd.DataFrame({
            "office_id": [1, 1, 1],
            "year": [2026, 2025, 2026],
            "week_number": [2, 52, 1],
            "submitted": [1, 0, None],
        }))

        assert list(zip(fact["year"], fact["week_number"])) == [(2025, 52), (2026, 1), (2026, 2)]
        assert list(fact["submitted"]) == [False, False, True]
