"""
===========================================================
comparison.py
Author: Veronica Scerra
Last Updated: 2026-03-06
===========================================================

Description:
    Lines up the modelled new hospitalizations (sigma * I)
    with observed daily admissions and scores the agreement.

Notes:
    - Alignment is by integer day offset: model time t is
      matched to the observed row with the same `t`.
    - No fitting happens here; the scores describe a fixed
      parameter set.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from typing import Dict

import numpy as np
import pandas as pd

from .model import Trajectory


def align_to_observed(trajectory: Trajectory, observed: pd.DataFrame, value_col: str = "new_in") -> pd.DataFrame:
    """
    Match model output to the observed series on day offset.

    Returns DataFrame with columns date, t, observed, modelled.
    Observed days outside the simulated grid are dropped.
    """
    for col in ("t", value_col):
        if col not in observed.columns:
            raise KeyError(f"observed data needs a '{col}' column")

    times = np.asarray(trajectory.times)
    on_grid = np.isclose(times, np.round(times))
    model = pd.DataFrame({
        "t": np.round(times[on_grid]).astype(int),
        "modelled": trajectory.new_hospitalizations()[on_grid],
    })

    cols = ["t", value_col] + (["date"] if "date" in observed.columns else [])
    obs = observed[cols].rename(columns={value_col: "observed"})
    aligned = obs.merge(model, on="t", how="inner").sort_values("t").reset_index(drop=True)
    order = [c for c in ("date", "t", "observed", "modelled") if c in aligned.columns]
    return aligned[order]


def _poisson_deviance(y: np.ndarray, mu: np.ndarray) -> float:
    mu = np.maximum(mu, 1e-12)
    with np.errstate(divide="ignore", invalid="ignore"):
        term = np.where(y > 0, y * np.log(y / mu), 0.0)
    return float(2.0 * np.sum(term - (y - mu)))


def comparison_metrics(aligned: pd.DataFrame) -> Dict[str, float]:
    """RMSE, MAE, Poisson deviance, correlation and peak timing of an aligned frame"""
    if aligned.empty:
        raise ValueError("nothing to compare: aligned frame is empty")

    y = aligned["observed"].to_numpy(dtype=float)
    y_hat = aligned["modelled"].to_numpy(dtype=float)
    t = aligned["t"].to_numpy()
    resid = y_hat - y

    if len(y) > 1 and np.std(y) > 0 and np.std(y_hat) > 0:
        corr = float(np.corrcoef(y, y_hat)[0, 1])
    else:
        corr = float("nan")

    obs_peak = int(np.argmax(y))
    mod_peak = int(np.argmax(y_hat))
    return {
        "n_days": int(len(y)),
        "rmse": float(np.sqrt(np.mean(resid ** 2))),
        "mae": float(np.mean(np.abs(resid))),
        "poisson_deviance": _poisson_deviance(y, y_hat),
        "correlation": corr,
        "observed_total": float(np.sum(y)),
        "modelled_total": float(np.sum(y_hat)),
        "observed_peak_day": int(t[obs_peak]),
        "observed_peak": float(y[obs_peak]),
        "modelled_peak_day": int(t[mod_peak]),
        "modelled_peak": float(y_hat[mod_peak]),
    }
