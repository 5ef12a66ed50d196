"""
===========================================================
covariates.py
Author: Veronica Scerra
Last Updated: 2026-03-06
===========================================================

Description:
    Daily climate and mobility covariates for the admissions
    regression analysis, and a merge onto the observed series.

    - Climate: any daily weather CSV with a date column and
      numeric columns (temperature, humidity, precipitation...).
      Several stations per day are averaged.
    - Mobility: Google COVID-19 Community Mobility Report,
      one country at national level, the six percent-change
      columns renamed to short names.

Notes:
    - merge_covariates(lag=k) pairs admissions on day d with
      covariates from day d - k.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .sources import filter_window, find_col, read_csv_source

logger = logging.getLogger(__name__)

GOOGLE_MOBILITY_CSV = "https://www.gstatic.com/covid19/mobility/Global_Mobility_Report.csv"

MOBILITY_COLUMNS = {
    "retail_and_recreation_percent_change_from_baseline": "retail_recreation",
    "grocery_and_pharmacy_percent_change_from_baseline": "grocery_pharmacy",
    "parks_percent_change_from_baseline": "parks",
    "transit_stations_percent_change_from_baseline": "transit",
    "workplaces_percent_change_from_baseline": "workplaces",
    "residential_percent_change_from_baseline": "residential",
}


@dataclass
class ClimateConfig:
    date_col: str = "date"
    # None keeps every numeric column
    columns: Optional[Sequence[str]] = None
    start: Optional[str] = None
    end: Optional[str] = None
    timeout_s: int = 30


@dataclass
class MobilityConfig:
    country_code: str = "BE"
    # None selects the national rows (empty sub_region_1)
    sub_region: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    timeout_s: int = 60


def load_climate(source: str | Path, config: Optional[ClimateConfig] = None) -> pd.DataFrame:
    """
    Load a daily climate table.

    Returns a DataFrame with 'date' and one float column per
    selected variable, one row per day.
    """
    cfg = config or ClimateConfig()
    raw = read_csv_source(source, timeout_s=cfg.timeout_s)
    date_col = find_col(raw.columns, cfg.date_col)

    if cfg.columns is None:
        value_cols = [c for c in raw.columns if c != date_col and pd.api.types.is_numeric_dtype(raw[c])]
    else:
        value_cols = [find_col(raw.columns, c) for c in cfg.columns]
    if not value_cols:
        raise ValueError("climate source has no numeric columns")

    df = raw[[date_col] + value_cols].rename(columns={date_col: "date"})
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    for c in value_cols:
        df[c] = pd.to_numeric(df[c], errors="coerce")
    df = df.dropna(subset=["date"])

    df = df.groupby("date", as_index=False)[value_cols].mean()
    df = filter_window(df, cfg.start, cfg.end)
    logger.info("loaded %d days of climate data (%s)", len(df), ", ".join(value_cols))
    return df.sort_values("date").reset_index(drop=True)


def load_mobility(source: str | Path = GOOGLE_MOBILITY_CSV, config: Optional[MobilityConfig] = None) -> pd.DataFrame:
    """
    Load Google mobility percent changes for one country.

    Returns a DataFrame with 'date' and the short-named columns of
    MOBILITY_COLUMNS that are present in the source.
    """
    cfg = config or MobilityConfig()
    raw = read_csv_source(source, timeout_s=cfg.timeout_s, low_memory=False)
    code_col = find_col(raw.columns, "country_region_code")
    region_col = find_col(raw.columns, "sub_region_1")
    date_col = find_col(raw.columns, "date")

    sub = raw.loc[raw[code_col].astype(str).str.strip().eq(cfg.country_code)]
    if cfg.sub_region is None:
        sub = sub.loc[sub[region_col].isna()]
        if "sub_region_2" in sub.columns:
            sub = sub.loc[sub["sub_region_2"].isna()]
    else:
        sub = sub.loc[sub[region_col].astype(str).str.strip().eq(cfg.sub_region)]
    if sub.empty:
        raise ValueError(f"No mobility rows for {cfg.country_code} / {cfg.sub_region or 'national'}")

    present = {src: short for src, short in MOBILITY_COLUMNS.items() if src in sub.columns}
    if not present:
        raise KeyError(f"None of the mobility columns found. Available: {list(sub.columns)}")

    df = sub[[date_col] + list(present)].rename(columns={date_col: "date", **present})
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df = df.dropna(subset=["date"])
    df = df.groupby("date", as_index=False)[list(present.values())].mean()
    df = filter_window(df, cfg.start, cfg.end)
    logger.info("loaded %d days of mobility data for %s", len(df), cfg.country_code)
    return df.sort_values("date").reset_index(drop=True)


def merge_covariates(observed: pd.DataFrame, *covariates: pd.DataFrame, lag: int = 0) -> pd.DataFrame:
    """
    Join covariate tables onto the observed admissions by date.

    Parameters:
    observed: DataFrame with a 'date' column (e.g. from load_hospitalizations)
    covariates: DataFrames with a 'date' column and value columns
    lag: int. Days between covariate and response (covariate at d - lag)

    Returns:
    merged: DataFrame. Rows with any missing covariate are dropped
    """
    if lag < 0:
        raise ValueError("lag must be non-negative")

    merged = observed.copy()
    for cov in covariates:
        shifted = cov.copy()
        shifted["date"] = shifted["date"] + pd.Timedelta(days=lag)
        overlap = (set(shifted.columns) & set(merged.columns)) - {"date"}
        if overlap:
            raise ValueError(f"covariate columns clash with existing columns: {sorted(overlap)}")
        merged = merged.merge(shifted, on="date", how="left")

    before = len(merged)
    merged = merged.dropna().reset_index(drop=True)
    if len(merged) < before:
        logger.warning("dropped %d of %d rows with missing covariates (lag=%d)", before - len(merged), before, lag)
    return merged
