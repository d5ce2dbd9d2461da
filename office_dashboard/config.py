"""
Configuration: metric registry, alert rules, aggregation rules, constants.

METRIC_REGISTRY maps each rankable metric to its ranking direction, display
format, and label. ALERT_RULES and AGGREGATION_RULES are evaluated in the
order they are declared.
"""

import os

# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------
COMPLIANCE_WINDOW_WEEKS = int(os.getenv("COMPLIANCE_WINDOW_WEEKS", "10"))
AGGREGATION_MAX_WORKERS = int(os.getenv("AGGREGATION_MAX_WORKERS", "1"))

# Accepted bounds for a custom period selector
MIN_CUSTOM_YEAR = int(os.getenv("MIN_CUSTOM_YEAR", "1900"))
MAX_CUSTOM_YEAR = int(os.getenv("MAX_CUSTOM_YEAR", "2100"))

# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------
MONTH_ABBR = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# Last week number belonging to each month (weeks past 48 fall in December)
WEEK_TO_MONTH: list[tuple[int, int]] = [
    (4, 1), (8, 2), (13, 3), (17, 4), (22, 5), (26, 6),
    (30, 7), (35, 8), (39, 9), (43, 10), (48, 11),
]

# ---------------------------------------------------------------------------
# Data domains
# ---------------------------------------------------------------------------
FINANCIAL = "financial"
OPERATIONS = "operations"
VOLUME = "volume"
NOTES = "notes"

# Domains scored for completeness (notes are informational only)
PRIMARY_DOMAINS = (FINANCIAL, OPERATIONS, VOLUME)
ALL_DOMAINS = PRIMARY_DOMAINS + (NOTES,)

DOMAIN_FIELDS: dict[str, list[str]] = {
    FINANCIAL: [
        "revenue",
        "lab_exp_no_outside",
        "lab_exp_with_outside",
        "personnel_exp",
        "overtime_exp",
        "bonus_exp",
    ],
    OPERATIONS: [
        "backlog_case_count",
        "overtime_value",
        "labor_model_value",
    ],
    VOLUME: [
        "backlog_in_lab",
        "backlog_in_clinic",
        "total_weekly_units",
    ],
    NOTES: [
        "note_text",
    ],
}

# Weekly volume components rolled up into the monthly volume totals
LAB_BACKLOG_FIELDS = [
    "lab_setups",
    "lab_fixed_cases",
    "lab_over_denture",
    "lab_processes",
    "lab_finishes",
]
CLINIC_BACKLOG_FIELDS = [
    "clinic_wax_tryin",
    "clinic_delivery",
    "clinic_outside_lab",
    "clinic_on_hold",
]
UNIT_FIELDS = [
    "immediate_units",
    "economy_units",
    "economy_plus_units",
    "premium_units",
    "ultimate_units",
    "repair_units",
    "reline_units",
    "partial_units",
    "retry_units",
    "remake_units",
    "bite_block_units",
]
WEEKLY_VOLUME_FIELDS = LAB_BACKLOG_FIELDS + CLINIC_BACKLOG_FIELDS + UNIT_FIELDS

# ---------------------------------------------------------------------------
# Aggregation rules
# ---------------------------------------------------------------------------
# rule: "sum" accumulates flow figures across the range,
#       "latest" keeps the most recent month's point-in-time value.
AGGREGATION_RULES: dict[str, dict[str, str]] = {
    FINANCIAL: {
        "revenue": "sum",
        "lab_exp_with_outside": "sum",
        "personnel_exp": "sum",
        "overtime_exp": "sum",
    },
    OPERATIONS: {
        "backlog_case_count": "latest",
    },
    VOLUME: {
        "backlog_in_lab": "latest",
        "backlog_in_clinic": "latest",
        "total_weekly_units": "sum",
    },
}

# Expense share of revenue: summary field -> aggregated numerator
EXPENSE_PERCENT_FIELDS: dict[str, str] = {
    "lab_exp_percent": "lab_exp_with_outside",
    "personnel_percent": "personnel_exp",
    "overtime_percent": "overtime_exp",
}

# ---------------------------------------------------------------------------
# Metric registry
# ---------------------------------------------------------------------------
# direction: "higher_is_better" or "lower_is_better"
# format: "currency", "percent", "whole_percent" or "count"
# field: OfficeSummary / ComplianceRecord attribute holding the value
METRIC_REGISTRY: dict[str, dict] = {
    "revenue": {
        "direction": "higher_is_better",
        "format": "currency",
        "label": "Revenue",
        "field": "revenue",
    },
    "lab_expense_percent": {
        "direction": "lower_is_better",
        "format": "percent",
        "label": "Lab Expense %",
        "field": "lab_exp_percent",
    },
    "personnel_expense_percent": {
        "direction": "lower_is_better",
        "format": "percent",
        "label": "Personnel Expense %",
        "field": "personnel_percent",
    },
    "total_weekly_units": {
        "direction": "higher_is_better",
        "format": "count",
        "label": "Total Weekly Units",
        "field": "total_weekly_units",
    },
    "backlog_in_lab": {
        "direction": "lower_is_better",
        "format": "count",
        "label": "Backlog in Lab",
        "field": "backlog_in_lab",
    },
    "backlog_in_clinic": {
        "direction": "lower_is_better",
        "format": "count",
        "label": "Backlog in Clinic",
        "field": "backlog_in_clinic",
    },
    "data_completeness": {
        "direction": "higher_is_better",
        "format": "whole_percent",
        "label": "Data Completeness",
        "field": "data_completeness",
    },
    "current_streak": {
        "direction": "higher_is_better",
        "format": "count",
        "label": "Current Streak",
        "field": "current_streak",
    },
    "compliance_rate": {
        "direction": "higher_is_better",
        "format": "percent",
        "label": "Compliance Rate",
        "field": "compliance_rate",
    },
}

NO_DATA = "--"

# ---------------------------------------------------------------------------
# Alert rules
# ---------------------------------------------------------------------------
# Evaluated top to bottom; values strictly above a threshold trigger it.
# "places" is the number of decimals shown in the message, rounded half-up.
ALERT_RULES: list[dict] = [
    {
        "metric": "lab_exp_percent",
        "warning": 20.0,
        "critical": 25.0,
        "places": 1,
        "template": "Lab expenses at {value}% (>{threshold:g}% {severity})",
    },
    {
        "metric": "personnel_percent",
        "warning": 15.0,
        "critical": 20.0,
        "places": 1,
        "template": "Personnel at {value}% (>{threshold:g}% {severity})",
    },
    {
        "metric": "backlog_count",
        "warning": 50,
        "critical": 100,
        "places": 0,
        "template": "Backlog: {value} cases (>{threshold:g} {severity})",
    },
]

NO_DATA_ALERT = "No data entered for this period"

# Compliance rate tiers (lower bound, tier), highest first
COMPLIANCE_TIERS: list[tuple[float, str]] = [
    (80.0, "good"),
    (60.0, "fair"),
    (40.0, "poor"),
]
