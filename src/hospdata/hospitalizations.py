"""
===========================================================
hospitalizations.py
Author: Veronica Scerra
Last Updated: 2026-03-05
===========================================================

Description:
    Loader for Sciensano's Belgian COVID-19 hospitalization
    file (COVID19BE_HOSP.csv). Selects one region, sums the
    provinces per day, restricts to the study window and
    returns a tidy daily series of new admissions.

Notes:
    - Source columns: DATE, PROVINCE, REGION, NR_REPORTING,
      TOTAL_IN, TOTAL_IN_ICU, TOTAL_IN_RESP, TOTAL_IN_ECMO,
      NEW_IN, NEW_OUT.
    - region="Belgium" sums every row; otherwise one of
      Brussels, Flanders, Wallonia.
    - `t` is the integer day offset from the first date in the
      window; the model is aligned on it.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import datetime as dt
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .sources import filter_window, find_col, read_csv_source

logger = logging.getLogger(__name__)

SCIENSANO_HOSP_CSV = "https://epistat.sciensano.be/Data/COVID19BE_HOSP.csv"

NATIONAL = "Belgium"
REGIONS = ("Brussels", "Flanders", "Wallonia")


@dataclass
class HospitalizationConfig:
    """
    Configuration for the hospitalization loader
    """
    region: str = NATIONAL
    start: Optional[str] = "2020-03-15"
    end: Optional[str] = "2020-06-29"
    date_col: str = "DATE"
    region_col: str = "REGION"
    new_col: str = "NEW_IN"
    total_col: str = "TOTAL_IN"
    # reindex to every day of the window, missing days count as 0 admissions
    fill_missing_days: bool = True
    timeout_s: int = 30


@dataclass(frozen=True)
class ObservedCount:
    """One day of observed new hospital admissions"""
    date: dt.date
    count: int


def load_hospitalizations(
    source: str | Path = SCIENSANO_HOSP_CSV,
    config: Optional[HospitalizationConfig] = None,
) -> pd.DataFrame:
    """
    Load daily new hospital admissions for one region.

    Returns
    -------
    pd.DataFrame
        - 'date' (datetime64[ns])
        - 't' (int)         days since the first date in the window
        - 'new_in' (int)    new admissions, >= 0
        - 'total_in' (int)  patients in hospital
    """
    cfg = config or HospitalizationConfig()
    if cfg.region != NATIONAL and cfg.region not in REGIONS:
        raise ValueError(f"Unknown region '{cfg.region}', expected '{NATIONAL}' or one of {REGIONS}")

    raw = read_csv_source(source, timeout_s=cfg.timeout_s)
    date_col = find_col(raw.columns, cfg.date_col)
    new_col = find_col(raw.columns, cfg.new_col)
    total_col = find_col(raw.columns, cfg.total_col)

    if cfg.region != NATIONAL:
        region_col = find_col(raw.columns, cfg.region_col)
        raw = raw.loc[raw[region_col].astype(str).str.strip().eq(cfg.region)]

    sub = pd.DataFrame({
        "date": pd.to_datetime(raw[date_col], errors="coerce"),
        "new_in": pd.to_numeric(raw[new_col], errors="coerce"),
        "total_in": pd.to_numeric(raw[total_col], errors="coerce"),
    }).dropna(subset=["date"])

    daily = sub.groupby("date", as_index=False)[["new_in", "total_in"]].sum(min_count=1)
    daily = filter_window(daily, cfg.start, cfg.end).sort_values("date")
    if daily.empty:
        raise ValueError(f"No hospitalization rows for {cfg.region} in {cfg.start}..{cfg.end}")

    if cfg.fill_missing_days:
        first = pd.to_datetime(cfg.start) if cfg.start else daily["date"].min()
        last = pd.to_datetime(cfg.end) if cfg.end else daily["date"].max()
        full = pd.DataFrame({"date": pd.date_range(first, last, freq="D")})
        missing = len(full) - daily["date"].isin(full["date"]).sum()
        if missing:
            logger.warning("%d day(s) without hospitalization data for %s; counting as 0", missing, cfg.region)
        daily = full.merge(daily, on="date", how="left")

    daily["new_in"] = daily["new_in"].fillna(0).clip(lower=0).round().astype(int)
    daily["total_in"] = daily["total_in"].fillna(0).clip(lower=0).round().astype(int)
    daily = daily.reset_index(drop=True)
    daily["t"] = (daily["date"] - daily["date"].iloc[0]).dt.days.astype(int)

    logger.info(
        "loaded %d days of admissions for %s (%s .. %s), %d total",
        len(daily), cfg.region, daily["date"].iloc[0].date(), daily["date"].iloc[-1].date(),
        int(daily["new_in"].sum()),
    )
    return daily[["date", "t", "new_in", "total_in"]]


def observed_records(df: pd.DataFrame, value_col: str = "new_in") -> List[ObservedCount]:
    """Convert a loaded series to typed (date, count) records"""
    return [
        ObservedCount(date=pd.Timestamp(d).date(), count=int(c))
        for d, c in zip(df["date"], df[value_col])
    ]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    out = load_hospitalizations()
    print(out.head())
    print(f"\nRows: {len(out):,}")
