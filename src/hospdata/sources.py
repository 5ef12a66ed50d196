"""
===========================================================
sources.py
Author: Veronica Scerra
Last Updated: 2026-03-05
===========================================================

Description:
    Shared CSV reading for the hospitalization and covariate
    loaders: local path or URL, tolerant column lookup.

Notes:
    - URLs are fetched with requests (real User-Agent, timeout)
      and parsed from memory.
    - Column names are stripped of surrounding whitespace.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import io
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd
import requests

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (seihrd-report)"


def read_csv_source(source: str | Path, timeout_s: int = 30, **read_kwargs) -> pd.DataFrame:
    """
    Read a CSV from a local file or a URL.

    Raises RuntimeError when the file is empty, the download fails,
    or the response holds no CSV data.
    """
    src = str(source)

    p = Path(src)
    if p.exists():
        logger.info("reading %s", p)
        try:
            df = pd.read_csv(p, **read_kwargs)
        except pd.errors.EmptyDataError as e:
            raise RuntimeError(f"File exists but is empty: {p}") from e
        return standardize_columns(df)

    if not src.startswith(("http://", "https://")):
        raise RuntimeError(f"No such file: {src}")

    logger.info("downloading %s", src)
    try:
        resp = requests.get(src, headers={"User-Agent": USER_AGENT}, timeout=timeout_s)
    except requests.RequestException as e:
        raise RuntimeError(f"Failed to fetch URL: {src}\n{e}") from e

    if resp.status_code != 200:
        raise RuntimeError(f"HTTP {resp.status_code} fetching {src}")

    content = resp.content or b""
    if len(content) < 10:
        raise RuntimeError(f"Downloaded 0/very few bytes from {src}")

    try:
        df = pd.read_csv(io.BytesIO(content), **read_kwargs)
    except pd.errors.EmptyDataError as e:
        raise RuntimeError("Response contained no CSV data.") from e
    return standardize_columns(df)


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = pd.Index([str(c).strip() for c in df.columns])
    return df


def find_col(columns: Iterable, expected_name: str) -> str:
    """Exact match first, then case/space-insensitive"""
    names = [str(c) for c in columns]
    if expected_name in names:
        return expected_name
    exp = expected_name.strip().lower()
    for name in names:
        if name.strip().lower() == exp:
            return name
    raise KeyError(f"Expected column '{expected_name}' not found. Available: {names}")


def filter_window(df: pd.DataFrame, start: Optional[str], end: Optional[str], date_col: str = "date") -> pd.DataFrame:
    if start:
        df = df[df[date_col] >= pd.to_datetime(start)]
    if end:
        df = df[df[date_col] <= pd.to_datetime(end)]
    return df
