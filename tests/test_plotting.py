import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from seihrd.comparison import align_to_observed
from seihrd.model import simulate
from seihrd.plotting import (
    plot_compartments,
    plot_covariates,
    plot_new_hospitalizations,
    plot_pca_variance,
)
from seihrd.regression import covariate_pca


def test_plot_compartments(tmp_path, small_state, fast_params):
    traj = simulate(small_state, fast_params, np.arange(0, 50, dtype=float))
    path = tmp_path / "compartments.png"
    fig = plot_compartments(traj, log_scale=True, save_path=path)
    top = fig.axes[0]
    assert [line.get_label() for line in top.get_lines()] == [
        "Exposed", "Infected", "Hospitalized", "Recovered", "Deceased",
    ]
    assert path.exists()
    plt.close(fig)


def test_plot_new_hospitalizations(small_state, fast_params):
    traj = simulate(small_state, fast_params, np.arange(0, 20, dtype=float))
    observed = pd.DataFrame({
        "date": pd.date_range("2020-03-15", periods=20, freq="D"),
        "t": np.arange(20),
        "new_in": np.arange(20),
    })
    ax = plot_new_hospitalizations(align_to_observed(traj, observed))
    assert len(ax.patches) == 20
    assert len(ax.get_lines()) == 1
    plt.close(ax.figure)


def test_plot_covariates_and_pca(tmp_path):
    rng = np.random.default_rng(1)
    df = pd.DataFrame({
        "date": pd.date_range("2020-03-15", periods=30, freq="D"),
        "new_in": rng.poisson(50, 30),
        "temperature": rng.normal(12, 3, 30),
        "residential": rng.normal(20, 5, 30),
    })
    fig = plot_covariates(df, ["temperature", "residential"], response="new_in")
    assert len(fig.axes) == 4
    plt.close(fig)

    result = covariate_pca(df, ["temperature", "residential"])
    ax = plot_pca_variance(result, save_path=tmp_path / "pca.png")
    assert len(ax.patches) == 2
    assert (tmp_path / "pca.png").exists()
    plt.close(ax.figure)
