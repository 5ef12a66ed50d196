"""
===========================================================
experiments.py
Author: Veronica Scerra
Last Updated: 2026-03-07
===========================================================

Description:
    Parameter sweeps for the SEIHRD model: grid search over
    any subset of the rate parameters, tidy results as a
    DataFrame, and a heatmap helper.

Example Usage:
    from seihrd.experiments import grid_sweep, heatmap
    df = grid_sweep(state, BELGIUM_RATES, times,
                    beta=np.linspace(0.05, 0.3, 6),
                    sigma=[0.1, 0.25])
    heatmap(df, x="beta", y="sigma", value="peak_new_hospitalizations")

Notes:
    - Runs are independent and share no state; the sweep is
      serial.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import itertools
import logging
from typing import Iterable, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .model import EpidemicSimulator
from .parameters import RATES, CompartmentState, RateParameters

logger = logging.getLogger(__name__)


def _summarize_one(simulator: EpidemicSimulator, initial_state: CompartmentState,
                   params: RateParameters, times: np.ndarray) -> dict:
    """Run one simulation and return a dict of summary statistics"""
    traj = simulator.simulate(initial_state, params, times)
    record = params.to_dict()
    record["R0"] = params.R0
    record.update(traj.summary())
    return record


def grid_sweep(
    initial_state: CompartmentState,
    base_params: RateParameters,
    times: Sequence[float],
    simulator: Optional[EpidemicSimulator] = None,
    **grids: Iterable[float],
) -> pd.DataFrame:
    """
    Evaluate the model over the Cartesian product of the given
    rate grids (keyword = rate name). Rates not swept keep their
    base value. Returns one row per combination.
    """
    if not grids:
        raise ValueError("at least one rate grid is required")
    unknown = set(grids) - set(RATES)
    if unknown:
        raise ValueError(f"unknown rate parameter(s): {sorted(unknown)}")

    simulator = simulator or EpidemicSimulator()
    times = np.asarray(times, dtype=float)
    names = list(grids)
    values = [np.asarray(list(grids[n]), dtype=float) for n in names]

    records = []
    for combo in itertools.product(*values):
        params = base_params.with_updates(**dict(zip(names, combo)))
        records.append(_summarize_one(simulator, initial_state, params, times))
    logger.info("swept %d parameter combinations over %s", len(records), ", ".join(names))

    df = pd.DataFrame.from_records(records)
    return df.sort_values(names).reset_index(drop=True)


def pivot_for_plot(df: pd.DataFrame, x: str, y: str, value: str):
    """Pivot a DataFrame to 2D arrays for plotting (heatmaps/contour)
    Return X_grid, Y_grid, Z_values
    """
    table = df.pivot_table(index=y, columns=x, values=value, aggfunc="mean").sort_index().sort_index(axis=1)
    X, Y = np.meshgrid(table.columns.to_numpy(dtype=float), table.index.to_numpy(dtype=float))
    return X, Y, table.to_numpy(dtype=float)


def heatmap(df: pd.DataFrame, x: str, y: str, value: str, ax=None, xlabel=None, ylabel=None, title=None):
    """Plot a heatmap of a summary metric (e.g., peak_new_hospitalizations, final_deceased)"""
    X, Y, Z = pivot_for_plot(df, x=x, y=y, value=value)
    if ax is None:
        fig, ax = plt.subplots(figsize=(7, 5))
    # imshow expects [rows, cols] -> (y, x)
    extent = [X.min(), X.max(), Y.min(), Y.max()]
    im = ax.imshow(Z, origin="lower", aspect="auto", extent=extent)
    cbar = ax.figure.colorbar(im, ax=ax)
    cbar.set_label(value.replace("_", " ").title())
    ax.set_xlabel(xlabel if xlabel else x)
    ax.set_ylabel(ylabel if ylabel else y)
    if title:
        ax.set_title(title)
    return ax
