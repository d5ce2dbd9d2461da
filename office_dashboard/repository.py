"""
Office directory and monthly record repository.

The engine only depends on the Repository and Directory protocols.
FrameRepository implements both over the pandas fact tables built by
office_dashboard.transforms; swap it for a database-backed class with the
same methods to read from live storage.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

import pandas as pd

from .config import ALL_DOMAINS, DOMAIN_FIELDS
from .errors import RepositoryUnavailable
from .periods import PeriodRange

logger = logging.getLogger(__name__)

_STATE_SUFFIX = re.compile(r",\s*([A-Z]{2})\s*$")


def extract_state(office_name: str) -> str:
    """Return the two-letter state suffix of an office name.

    "Albertville, AL" -> "AL"; names without a suffix map to "Unknown".
    """
    match = _STATE_SUFFIX.search(office_name or "")
    return match.group(1) if match else "Unknown"


@dataclass(frozen=True)
class Office:
    office_id: int
    office_name: str
    model: str
    dfo: str | None = None
    address: str | None = None

    @property
    def state(self) -> str:
        return extract_state(self.office_name)


@dataclass(frozen=True)
class MonthlyRecord:
    """One office's figures for one month in one data domain."""

    office_id: int
    domain: str
    year: int
    month: int
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def period_key(self) -> tuple[int, int]:
        return self.year, self.month


class Repository(Protocol):
    def fetch_records(
        self, office_id: int, domain: str, period_range: PeriodRange
    ) -> list[MonthlyRecord]:
        ...

    def fetch_submission_history(self, office_id: int) -> list[bool]:
        ...


class Directory(Protocol):
    def list_offices(self) -> list[Office]:
        ...


# ---------------------------------------------------------------------------
# DataFrame-backed implementation
# ---------------------------------------------------------------------------
OFFICE_COLUMNS = ["office_id", "office_name", "model", "dfo", "address"]
SUBMISSION_COLUMNS = ["office_id", "year", "week_number", "submitted"]


def _clean(val: Any) -> Any:
    """Map pandas missing markers to None and numpy scalars to Python."""
    if val is None:
        return None
    if isinstance(val, str):
        return val
    if pd.isna(val):
        return None
    return val.item() if hasattr(val, "item") else val


class FrameRepository:
    """Repository and Directory over in-memory fact tables.

    Parameters
    ----------
    offices : dim_office DataFrame (office_id, office_name, model, dfo, address).
    domain_frames : mapping of domain name -> monthly fact DataFrame with
        office_id, year, month and the domain's value columns.
    submissions : weekly submission table (office_id, year, week_number, submitted).
    """

    def __init__(
        self,
        offices: pd.DataFrame,
        domain_frames: dict[str, pd.DataFrame] | None = None,
        submissions: pd.DataFrame | None = None,
    ):
        self._offices = offices.copy() if offices is not None else pd.DataFrame(columns=OFFICE_COLUMNS)
        self._frames: dict[str, pd.DataFrame] = {}
        for domain, df in (domain_frames or {}).items():
            if domain not in ALL_DOMAINS:
                raise ValueError(f"Unknown data domain: {domain!r}")
            self._frames[domain] = df.copy()
        self._submissions = (
            submissions.copy() if submissions is not None
            else pd.DataFrame(columns=SUBMISSION_COLUMNS)
        )
        logger.info(
            "FrameRepository loaded %d offices, domains=%s, %d submission rows",
            len(self._offices), sorted(self._frames), len(self._submissions),
        )

    def list_offices(self) -> list[Office]:
        offices = []
        for _, row in self._offices.sort_values("office_id").iterrows():
            offices.append(Office(
                office_id=int(row["office_id"]),
                office_name=str(row["office_name"]),
                model=_clean(row.get("model")) or "",
                dfo=_clean(row.get("dfo")),
                address=_clean(row.get("address")),
            ))
        return offices

    def fetch_records(
        self, office_id: int, domain: str, period_range: PeriodRange
    ) -> list[MonthlyRecord]:
        if domain not in ALL_DOMAINS:
            raise ValueError(f"Unknown data domain: {domain!r}")

        df = self._frames.get(domain)
        if df is None or df.empty:
            return []

        try:
            rows = df[df["office_id"] == office_id]
            in_range = pd.Series(
                [
                    period_range.contains(int(year), int(month))
                    for year, month in zip(rows["year"], rows["month"])
                ],
                index=rows.index,
                dtype=bool,
            )
            rows = rows[in_range].sort_values(["year", "month"])
        except KeyError as exc:
            raise RepositoryUnavailable(
                f"{domain} table is missing column {exc}", office_id=office_id
            ) from exc

        value_cols = [c for c in DOMAIN_FIELDS[domain] if c in rows.columns]
        records = []
        for _, row in rows.iterrows():
            records.append(MonthlyRecord(
                office_id=office_id,
                domain=domain,
                year=int(row["year"]),
                month=int(row["month"]),
                values={col: _clean(row[col]) for col in value_cols},
            ))
        return records

    def fetch_submission_history(self, office_id: int) -> list[bool]:
        df = self._submissions
        if df.empty:
            return []
        rows = df[df["office_id"] == office_id].sort_values(["year", "week_number"])
        return [bool(v) for v in rows["submitted"]]
