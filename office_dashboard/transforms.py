"""
Data transforms: normalise importer outputs into the office dimension and
monthly fact tables consumed by FrameRepository, and roll weekly volume
counts up to monthly grain.
"""

import logging

import numpy as np
import pandas as pd

from .config import (
    CLINIC_BACKLOG_FIELDS,
    DOMAIN_FIELDS,
    LAB_BACKLOG_FIELDS,
    UNIT_FIELDS,
    WEEK_TO_MONTH,
    WEEKLY_VOLUME_FIELDS,
)
from .repository import OFFICE_COLUMNS, SUBMISSION_COLUMNS, extract_state

logger = logging.getLogger(__name__)

_KEY_COLUMNS = ["office_id", "year", "month"]


def week_to_month(week_number: int) -> int:
    """Map an ISO-style week number (1-53) to its reporting month.

    Weeks 1-4 are January, 5-8 February, 9-13 March and so on; anything
    past week 48 belongs to December.
    """
    for last_week, month in WEEK_TO_MONTH:
        if week_number <= last_week:
            return month
    return 12


def _round_half_up(series: pd.Series) -> pd.Series:
    return np.floor(series.astype(float) + 0.5).astype(int)


def aggregate_weekly_volume(weekly_df: pd.DataFrame) -> pd.DataFrame:
    """Roll weekly volume submissions up to one row per office-month.

    Rules
    -----
    - Component counts (lab stages, clinic stages, unit types): mean of the
      weeks falling in the month, rounded half-up
    - backlog_in_lab:     sum of the five lab-stage components
    - backlog_in_clinic:  sum of the four clinic-stage components
    - total_weekly_units: sum of the eleven unit-type components

    Parameters
    ----------
    weekly_df : weekly volume DataFrame with office_id, year, week_number and
        the component columns. Missing components count as 0.

    Returns
    -------
    fact_monthly_volume DataFrame with columns:
        office_id, year, month, backlog_in_lab, backlog_in_clinic,
        total_weekly_units, <component columns>
    """
    out_cols = _KEY_COLUMNS + DOMAIN_FIELDS["volume"] + WEEKLY_VOLUME_FIELDS

    if weekly_df is None or weekly_df.empty:
        logger.warning("Empty weekly volume DataFrame; returning empty monthly volume")
        return pd.DataFrame(columns=out_cols)

    df = weekly_df.copy()
    for col in WEEKLY_VOLUME_FIELDS:
        if col not in df.columns:
            df[col] = 0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)

    df["month"] = df["week_number"].astype(int).map(week_to_month)

    monthly = df.groupby(_KEY_COLUMNS)[WEEKLY_VOLUME_FIELDS].mean().reset_index()
    for col in WEEKLY_VOLUME_FIELDS:
        monthly[col] = _round_half_up(monthly[col])

    monthly["backlog_in_lab"] = monthly[LAB_BACKLOG_FIELDS].sum(axis=1)
    monthly["backlog_in_clinic"] = monthly[CLINIC_BACKLOG_FIELDS].sum(axis=1)
    monthly["total_weekly_units"] = monthly[UNIT_FIELDS].sum(axis=1)

    logger.info(
        "Rolled %d weekly volume rows up to %d office-months", len(df), len(monthly)
    )
    return monthly[out_cols]


def build_dim_office(offices_df: pd.DataFrame) -> pd.DataFrame:
    """Build the office dimension table.

    Returns
    -------
    dim_office DataFrame with columns:
        office_id, office_name, model, dfo, address, state
    """
    if offices_df is None or offices_df.empty:
        return pd.DataFrame(columns=OFFICE_COLUMNS + ["state"])

    dim = offices_df.copy()
    for col in OFFICE_COLUMNS:
        if col not in dim.columns:
            dim[col] = None

    dim = dim[OFFICE_COLUMNS].drop_duplicates(subset="office_id", keep="last")
    dim["office_id"] = dim["office_id"].astype(int)
    dim["state"] = dim["office_name"].map(extract_state)
    dim = dim.sort_values("office_id").reset_index(drop=True)

    logger.info("Built dim_office with %d rows", len(dim))
    return dim


def build_fact_monthly(records_df: pd.DataFrame, domain: str) -> pd.DataFrame:
    """Normalise one domain's monthly records into a fact table.

    Rows with a month outside 1-12 are dropped. When an office-month
    appears more than once the last row wins, matching the upsert
    behaviour of the data-entry forms.

    Returns
    -------
    fact_monthly_<domain> DataFrame with columns:
        office_id, year, month, <domain value columns>
    """
    value_cols = DOMAIN_FIELDS[domain]
    out_cols = _KEY_COLUMNS + value_cols

    if records_df is None or records_df.empty:
        return pd.DataFrame(columns=out_cols)

    df = records_df.copy()
    for col in value_cols:
        if col not in df.columns:
            df[col] = None

    for col in _KEY_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    invalid = df[_KEY_COLUMNS].isna().any(axis=1) | ~df["month"].between(1, 12)
    if invalid.any():
        logger.warning(
            "Dropping %d %s rows with missing keys or invalid months",
            int(invalid.sum()), domain,
        )
        df = df[~invalid].copy()

    for col in _KEY_COLUMNS:
        df[col] = df[col].astype(int)

    fact = (
        df[out_cols]
        .drop_duplicates(subset=_KEY_COLUMNS, keep="last")
        .sort_values(_KEY_COLUMNS)
        .reset_index(drop=True)
    )

    logger.info("Built fact_monthly_%s with %d rows", domain, len(fact))
    return fact


def build_fact_submissions(submissions_df: pd.DataFrame) -> pd.DataFrame:
    """Build the weekly submission fact table, oldest week first per office.

    Returns
    -------
    fact_submissions DataFrame with columns:
        office_id, year, week_number, submitted (bool)
    """
    if submissions_df is None or submissions_df.empty:
        return pd.DataFrame(columns=SUBMISSION_COLUMNS)

    fact = submissions_df[SUBMISSION_COLUMNS].copy()
    fact["submitted"] = fact["submitted"].fillna(0).astype(bool)
    fact = (
        fact.drop_duplicates(subset=["office_id", "year", "week_number"], keep="last")
        .sort_values(["office_id", "year", "week_number"])
        .reset_index(drop=True)
    )

    logger.info("Built fact_submissions with %d rows", len(fact))
    return fact
