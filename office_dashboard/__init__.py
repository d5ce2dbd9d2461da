"""
Office Dashboard: multi-office operations engine

Resolves period selectors to month ranges, rolls per-office monthly records
into period summaries, flags threshold breaches, ranks offices on a chosen
metric, and tracks weekly submission compliance.

To swap the in-memory tables for a database feed:
    Implement the Repository and Directory protocols in
    office_dashboard.repository (fetch_records, fetch_submission_history,
    list_offices) against the database. Nothing else changes.

To connect to a front end:
    Build a dashboard.DashboardRequest from the user's selection and call
    get_dashboard_overview, get_rankings or get_compliance_board.

To add new ranking metrics or alerts:
    Add an entry to config.METRIC_REGISTRY (direction, format, field) or
    config.ALERT_RULES (metric, warning, critical, template).
"""
