"""
Tests for per-office metric aggregation.
"""
import pytest

from office_dashboard.aggregation import (
    aggregate_domain,
    aggregate_offices,
    expense_percent,
    summarize_office,
)
from office_dashboard.errors import RepositoryUnavailable
from office_dashboard.periods import PeriodRange
from office_dashboard.repository import MonthlyRecord

from conftest import FailingRepository

APRIL = PeriodRange(2026, 4, 2026, 4)
APRIL_MAY = PeriodRange(2026, 4, 2026, 5)


class TestSingleMonth:
    """A one-month range reports that month's figures."""

    def test_complete_office(self, repo, offices):
        summary = summarize_office(offices[1], APRIL, repo)

        assert summary.revenue == 100_000
        assert summary.lab_exp_percent == pytest.approx(26.0)
        assert summary.personnel_percent == pytest.approx(10.0)
        assert summary.overtime_percent == pytest.approx(2.0)
        assert summary.backlog_count == 120
        assert summary.backlog_in_lab == 30
        assert summary.backlog_in_clinic == 10
        assert summary.total_weekly_units == 50
        assert summary.data_completeness == pytest.approx(100.0)
        assert (summary.latest_year, summary.latest_month) == (2026, 4)
        assert summary.has_financial and summary.has_operations and summary.has_volume
        assert not summary.has_notes

    def test_missing_domain_leaves_values_absent(self, repo, offices):
        summary = summarize_office(offices[2], APRIL, repo)

        assert summary.has_financial and summary.has_operations
        assert not summary.has_volume
        assert summary.backlog_in_lab is None
        assert summary.total_weekly_units is None
        assert summary.data_completeness == pytest.approx(50.0)

    def test_notes_only_office(self, repo, offices):
        summary = summarize_office(offices[3], APRIL, repo)

        assert summary.has_notes
        assert not (summary.has_financial or summary.has_operations or summary.has_volume)
        assert summary.revenue is None
        assert summary.latest_year is None
        assert summary.data_completeness == 0.0

    def test_zero_revenue_has_no_percentages(self, repo, offices):
        summary = summarize_office(offices[4], APRIL, repo)

        assert summary.has_financial
        assert summary.revenue == 0
        assert summary.lab_exp_percent is None
        assert summary.personnel_percent is None

    def test_categorical_fields_carried(self, repo, offices):
        summary = summarize_office(offices[1], APRIL, repo)
        assert summary.office_name == "Albertville, AL"
        assert summary.state == "AL"
        assert summary.model == "PO"
        assert summary.dfo == "Hayes"


class TestMultiMonth:
    """Flow figures sum, point-in-time figures take the latest month."""

    def test_flow_metrics_sum(self, repo, offices):
        summary = summarize_office(offices[1], APRIL_MAY, repo)
        assert summary.revenue == 300_000
        assert summary.total_weekly_units == 120

    def test_percentages_from_aggregated_totals(self, repo, offices):
        summary = summarize_office(offices[1], APRIL_MAY, repo)
        # (26k + 30k) / (100k + 200k), not the mean of 26% and 15%
        assert summary.lab_exp_percent == pytest.approx(56_000 / 300_000 * 100)
        assert summary.personnel_percent == pytest.approx(50_000 / 300_000 * 100)

    def test_point_in_time_metrics_take_latest(self, repo, offices):
        summary = summarize_office(offices[1], APRIL_MAY, repo)
        assert summary.backlog_count == 40
        assert summary.backlog_in_lab == 20
        assert summary.backlog_in_clinic == 12
        assert (summary.latest_year, summary.latest_month) == (2026, 5)

    def test_completeness_counts_expected_months(self, repo, offices):
        summary = summarize_office(offices[2], APRIL_MAY, repo)
        # one financial month + one volume month out of 2 x 2 expected
        assert summary.data_completeness == pytest.approx(50.0)

    def test_range_outside_data(self, repo, offices):
        summary = summarize_office(offices[1], PeriodRange(2025, 1, 2025, 12), repo)
        assert not summary.has_financial
        assert summary.revenue is None
        assert summary.backlog_count is None


class TestAggregateDomain:
    """Tests for the rule table applied to raw records."""

    def test_no_records(self):
        assert aggregate_domain([], "financial") == {}

    def test_latest_skips_missing_values(self):
        records = [
            MonthlyRecord(1, "operations", 2026, 4, {"backlog_case_count": 75}),
            MonthlyRecord(1, "operations", 2026, 5, {"backlog_case_count": None}),
        ]
        assert aggregate_domain(records, "operations") == {"backlog_case_count": 75.0}

    def test_sum_ignores_missing_values(self):
        records = [
            MonthlyRecord(1, "financial", 2026, 4, {"revenue": 10.0}),
            MonthlyRecord(1, "financial", 2026, 5, {"revenue": None}),
        ]
        assert aggregate_domain(records, "financial")["revenue"] == 10.0

    def test_expense_percent_guards(self):
        assert expense_percent(10.0, None) is None
        assert expense_percent(None, 100.0) is None
        assert expense_percent(10.0, 0.0) is None
        assert expense_percent(10.0, 200.0) == pytest.approx(5.0)


class TestBatchAggregation:
    """Tests for aggregating every office with partial failures."""

    def test_preserves_directory_order(self, repo):
        result = aggregate_offices(repo.list_offices(), APRIL, repo)
        assert [s.office_id for s in result.summaries] == [1, 2, 3, 4]
        assert not result.is_partial
        result.raise_for_failures()

    def test_failure_does_not_abort_batch(self, repo):
        failing = FailingRepository(repo, failing_ids={2})
        result = aggregate_offices(repo.list_offices(), APRIL, failing)

        assert [s.office_id for s in result.summaries] == [1, 3, 4]
        assert result.failed_office_ids == [2]
        assert result.failures[2].office_id == 2

    def test_failures_surface_once(self, repo):
        failing = FailingRepository(repo, failing_ids={1, 4})
        result = aggregate_offices(repo.list_offices(), APRIL, failing)

        with pytest.raises(RepositoryUnavailable, match="2 office"):
            result.raise_for_failures()

    def test_parallel_matches_sequential(self, repo):
        offices = repo.list_offices()
        sequential = aggregate_offices(offices, APRIL_MAY, repo, max_workers=1)
        parallel = aggregate_offices(offices, APRIL_MAY, repo, max_workers=4)
        assert parallel.summaries == sequential.summaries
