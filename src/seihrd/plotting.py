"""
===========================================================
plotting.py
Author: Veronica Scerra
Last Updated: 2026-03-09
===========================================================
Visualization functions for the SEIHRD hospitalization report.

Time series of the compartments, modelled versus observed
admissions, the covariates, and the PCA variance explained.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .model import Trajectory
from .regression import PCAResult

COLORS = {
    "S": "blue",
    "E": "orange",
    "I": "red",
    "H": "purple",
    "R": "green",
    "D": "black",
}
LABELS = {
    "S": "Susceptible",
    "E": "Exposed",
    "I": "Infected",
    "H": "Hospitalized",
    "R": "Recovered",
    "D": "Deceased",
}


def _finish(fig: Figure, save_path: Optional[str | Path], show: bool):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()


def plot_compartments(
    trajectory: Trajectory,
    compartments: Sequence[str] = ("E", "I", "H", "R", "D"),
    log_scale: bool = False,
    save_path: Optional[str | Path] = None,
    show: bool = False,
) -> Figure:
    """
    Plot compartment sizes over time, with the daily new
    hospitalizations (sigma * I) in a second panel.

    S is left out by default since it dwarfs the others.
    """
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 9), sharex=True)
    t = trajectory.times

    for name in compartments:
        ax1.plot(t, trajectory.compartment(name), label=LABELS[name], color=COLORS[name], linewidth=2)
    if log_scale:
        ax1.set_yscale("log")
    ax1.set_ylabel("Number of individuals", fontsize=12)
    ax1.set_title(f"SEIHRD Compartment Dynamics ($R_0$ = {trajectory.params.R0:.2f})",
                  fontsize=14, fontweight="bold")
    ax1.legend(loc="best", fontsize=10)
    ax1.grid(True, alpha=0.3)

    ax2.plot(t, trajectory.new_hospitalizations(), color="darkred", linewidth=2)
    ax2.set_xlabel("Days", fontsize=12)
    ax2.set_ylabel("New hospitalizations / day", fontsize=12)
    ax2.grid(True, alpha=0.3)

    _finish(fig, save_path, show)
    return fig


def plot_new_hospitalizations(
    aligned: pd.DataFrame,
    ax: Optional[Axes] = None,
    title: Optional[str] = None,
    save_path: Optional[str | Path] = None,
    show: bool = False,
) -> Axes:
    """Observed admissions (bars) against modelled sigma * I (line)"""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    x = aligned["date"] if "date" in aligned.columns else aligned["t"]

    ax.bar(x, aligned["observed"], color="grey", alpha=0.6, label="Observed admissions")
    ax.plot(x, aligned["modelled"], color="darkred", linewidth=2, label=r"Model $\sigma \cdot I(t)$")
    ax.set_ylabel("New hospitalizations / day", fontsize=12)
    ax.set_title(title or "Observed vs modelled new hospitalizations", fontsize=14)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    if "date" in aligned.columns:
        ax.figure.autofmt_xdate()

    _finish(ax.figure, save_path, show)
    return ax


def plot_covariates(
    df: pd.DataFrame,
    columns: Sequence[str],
    response: Optional[str] = None,
    save_path: Optional[str | Path] = None,
    show: bool = False,
) -> Figure:
    """One small panel per covariate, optionally with the response on a twin axis"""
    n = len(columns)
    fig, axes = plt.subplots(n, 1, figsize=(10, 2.4 * n), sharex=True, squeeze=False)
    x = df["date"] if "date" in df.columns else df.index

    for ax, col in zip(axes[:, 0], columns):
        ax.plot(x, df[col], color="steelblue", linewidth=1.5)
        ax.set_ylabel(col, fontsize=10)
        ax.grid(True, alpha=0.3)
        if response:
            twin = ax.twinx()
            twin.plot(x, df[response], color="darkred", linewidth=1, alpha=0.6)
            twin.set_ylabel(response, fontsize=9, color="darkred")
    fig.autofmt_xdate()

    _finish(fig, save_path, show)
    return fig


def plot_pca_variance(
    result: PCAResult,
    ax: Optional[Axes] = None,
    save_path: Optional[str | Path] = None,
    show: bool = False,
) -> Axes:
    """Scree plot: variance explained per component and cumulative"""
    if ax is None:
        fig, ax = plt.subplots(figsize=(7, 4.5))
    ratio = np.asarray(result.explained_variance_ratio)
    idx = np.arange(1, len(ratio) + 1)

    ax.bar(idx, ratio, color="steelblue", label="Per component")
    ax.plot(idx, np.cumsum(ratio), "o-", color="black", label="Cumulative")
    ax.set_xticks(idx)
    ax.set_xticklabels(result.components)
    ax.set_ylim(0, 1.05)
    ax.set_ylabel("Explained variance ratio")
    ax.set_title("Covariate PCA")
    ax.legend()
    ax.grid(alpha=0.25)

    _finish(ax.figure, save_path, show)
    return ax
