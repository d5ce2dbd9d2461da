"""
Tests for completeness classification and threshold alerts.
"""
import pytest

from office_dashboard.aggregation import OfficeSummary
from office_dashboard.kpis import (
    Completeness,
    Severity,
    classify_completeness,
    count_alerts,
    evaluate_alerts,
)


def make_summary(**overrides) -> OfficeSummary:
    values = {
        "office_id": 7,
        "office_name": "Tupelo, MS",
        "model": "PO",
        "has_financial": True,
        "has_operations": True,
        "has_volume": True,
    }
    values.update(overrides)
    return OfficeSummary(**values)


class TestClassifyCompleteness:

    def test_all_domains_present(self):
        assert classify_completeness(make_summary()) is Completeness.COMPLETE

    @pytest.mark.parametrize("flags", [
        (True, False, False),
        (False, True, False),
        (True, True, False),
        (False, True, True),
    ])
    def test_some_domains_present(self, flags):
        fin, ops, vol = flags
        summary = make_summary(has_financial=fin, has_operations=ops, has_volume=vol)
        assert classify_completeness(summary) is Completeness.PARTIAL

    def test_no_domains_present(self):
        summary = make_summary(has_financial=False, has_operations=False, has_volume=False)
        assert classify_completeness(summary) is Completeness.NONE

    def test_notes_do_not_count(self):
        summary = make_summary(
            has_financial=False, has_operations=False, has_volume=False, has_notes=True
        )
        assert classify_completeness(summary) is Completeness.NONE


class TestEvaluateAlerts:

    def test_lab_critical_only(self):
        alerts = evaluate_alerts(make_summary(lab_exp_percent=26, personnel_percent=10))

        assert len(alerts) == 1
        assert alerts[0].severity is Severity.CRITICAL
        assert alerts[0].message == "Lab expenses at 26.0% (>25% critical)"

    def test_warning_thresholds(self):
        alerts = evaluate_alerts(
            make_summary(lab_exp_percent=21.3, personnel_percent=16, backlog_count=60)
        )
        assert [a.severity for a in alerts] == [Severity.WARNING] * 3
        assert [a.message for a in alerts] == [
            "Lab expenses at 21.3% (>20% warning)",
            "Personnel at 16.0% (>15% warning)",
            "Backlog: 60 cases (>50 warning)",
        ]

    def test_rule_order_not_severity_order(self):
        alerts = evaluate_alerts(
            make_summary(lab_exp_percent=22, personnel_percent=30, backlog_count=150)
        )
        assert [a.metric for a in alerts] == ["lab_exp_percent", "personnel_percent", "backlog_count"]
        assert [a.severity for a in alerts] == [
            Severity.WARNING, Severity.CRITICAL, Severity.CRITICAL,
        ]
        assert alerts[2].message == "Backlog: 150 cases (>100 critical)"

    def test_thresholds_are_strict(self):
        alerts = evaluate_alerts(
            make_summary(lab_exp_percent=20, personnel_percent=15, backlog_count=50)
        )
        assert alerts == []

    def test_exactly_critical_threshold_is_warning(self):
        alerts = evaluate_alerts(make_summary(lab_exp_percent=25))
        assert [a.severity for a in alerts] == [Severity.WARNING]

    @pytest.mark.parametrize("lab_pct, shown", [
        (25.25, "25.3"),
        (22.45, "22.5"),
        (21.04, "21.0"),
    ])
    def test_message_rounds_half_up(self, lab_pct, shown):
        """Alert percentages use the same half-up rounding as the ranking table."""
        alerts = evaluate_alerts(make_summary(lab_exp_percent=lab_pct))
        assert alerts[0].message.startswith(f"Lab expenses at {shown}%")

    def test_absent_values_skip_rules(self):
        assert evaluate_alerts(make_summary()) == []

    def test_no_data_short_circuits(self):
        summary = make_summary(
            has_financial=False,
            has_operations=False,
            has_volume=False,
            lab_exp_percent=40,
            backlog_count=500,
        )
        alerts = evaluate_alerts(summary)

        assert len(alerts) == 1
        assert alerts[0].severity is Severity.INFO
        assert alerts[0].metric is None
        assert alerts[0].message == "No data entered for this period"

    def test_partial_data_still_evaluates(self):
        alerts = evaluate_alerts(make_summary(has_volume=False, backlog_count=101))
        assert [a.severity for a in alerts] == [Severity.CRITICAL]


def test_count_alerts():
    summaries = [
        make_summary(lab_exp_percent=26, backlog_count=60),
        make_summary(has_financial=False, has_operations=False, has_volume=False),
        make_summary(),
    ]
    assert count_alerts(summaries) == {"total": 3, "critical": 1}
