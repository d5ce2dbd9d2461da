"""
Shared fixtures: a small FrameRepository covering complete, partial and
empty offices across April-May 2026.
"""
from __future__ import annotations

import pandas as pd
import pytest

from office_dashboard.config import FINANCIAL, NOTES, OPERATIONS, VOLUME
from office_dashboard.errors import RepositoryUnavailable
from office_dashboard.repository import FrameRepository


def make_offices() -> pd.DataFrame:
    return pd.DataFrame({
        "office_id": [1, 2, 3, 4],
        "office_name": ["Albertville, AL", "Macon, GA", "Knoxville, TN", "Remote Office"],
        "model": ["PO", "PLLC", "PO", "PLLC"],
        "dfo": ["Hayes", "Ortiz", "Hayes", None],
        "address": ["1 Main St", "2 Cherry St", "3 Gay St", None],
    })


def make_financials() -> pd.DataFrame:
    return pd.DataFrame({
        "office_id": [1, 1, 2, 4],
        "year": [2026, 2026, 2026, 2026],
        "month": [4, 5, 4, 4],
        "revenue": [100_000.0, 200_000.0, 150_000.0, 0.0],
        "lab_exp_with_outside": [26_000.0, 30_000.0, 15_000.0, 500.0],
        "personnel_exp": [10_000.0, 40_000.0, 24_000.0, 0.0],
        "overtime_exp": [2_000.0, 4_000.0, 0.0, 0.0],
    })


def make_operations() -> pd.DataFrame:
    return pd.DataFrame({
        "office_id": [1, 1, 2],
        "year": [2026, 2026, 2026],
        "month": [4, 5, 4],
        "backlog_case_count": [120, 40, 60],
    })


def make_volume() -> pd.DataFrame:
    return pd.DataFrame({
        "office_id": [1, 1, 2],
        "year": [2026, 2026, 2026],
        "month": [4, 5, 5],
        "backlog_in_lab": [30, 20, 40],
        "backlog_in_clinic": [10, 12, 5],
        "total_weekly_units": [50, 70, 80],
    })


def make_notes() -> pd.DataFrame:
    return pd.DataFrame({
        "office_id": [3],
        "year": [2026],
        "month": [4],
        "note_text": ["Waiting on lab hub"],
    })


def make_submissions() -> pd.DataFrame:
    histories = {
        1: [1, 1, 0, 1, 1, 1, 1, 1, 1, 1],
        2: [1, 1, 1, 0],
        4: [0, 1, 1],
    }
    rows = []
    for office_id, history in histories.items():
        for week, submitted in enumerate(history, start=1):
            rows.append({
                "office_id": office_id,
                "year": 2026,
                "week_number": week,
                "submitted": submitted,
            })
    return pd.DataFrame(rows)


class FailingRepository:
    """Wraps a repository and fails reads for selected offices."""

    def __init__(self, inner, failing_ids):
        self.inner = inner
        self.failing_ids = set(failing_ids)

    def fetch_records(self, office_id, domain, period_range):
        if office_id in self.failing_ids:
            raise RepositoryUnavailable("connection reset")
        return self.inner.fetch_records(office_id, domain, period_range)

    def fetch_submission_history(self, office_id):
        return self.inner.fetch_submission_history(office_id)

    def list_offices(self):
        return self.inner.list_offices()


@pytest.fixture
def repo() -> FrameRepository:
    return FrameRepository(
        offices=make_offices(),
        domain_frames={
            FINANCIAL: make_financials(),
            OPERATIONS: make_operations(),
            VOLUME: make_volume(),
            NOTES: make_notes(),
        },
        submissions=make_submissions(),
    )


@pytest.fixture
def offices(repo):
    return {office.office_id: office for office in repo.list_offices()}
