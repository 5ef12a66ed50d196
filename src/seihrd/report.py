"""
===========================================================
report.py
Author: Veronica Scerra
Last Updated: 2026-03-10
===========================================================

Description:
    End-to-end hospitalization report:
      1) simulate the SEIHRD scenario over its daily grid
      2) load observed Belgian admissions for the study window
      3) align sigma * I(t) with the observations and score it
      4) optionally merge climate/mobility covariates and run
         the Poisson regressions and the covariate PCA
      5) optionally write the figures to a directory

Example Usage:
    from seihrd.report import ReportConfig, run_report
    result = run_report(ReportConfig(hospitalization_source="data/COVID19BE_HOSP.csv"))
    print(result.metrics)

    python -m seihrd.report
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import pandas as pd

from hospdata.covariates import ClimateConfig, MobilityConfig, load_climate, load_mobility, merge_covariates
from hospdata.hospitalizations import SCIENSANO_HOSP_CSV, HospitalizationConfig, load_hospitalizations

from .comparison import align_to_observed, comparison_metrics
from .model import EpidemicSimulator, Trajectory
from .parameters import BELGIUM_SPRING_2020, Scenario
from .plotting import plot_compartments, plot_covariates, plot_new_hospitalizations, plot_pca_variance
from .regression import PCAResult, PoissonFit, pca_poisson_regression, poisson_regression, univariate_screen
from .solver import SolverType

logger = logging.getLogger(__name__)

RESPONSE = "new_in"


@dataclass
class ReportConfig:
    """Everything the report needs; defaults reproduce the Belgian spring-2020 analysis"""
    scenario: Scenario = field(default_factory=lambda: BELGIUM_SPRING_2020)
    method: str = SolverType.SOLVE_IVP
    solver_args: dict = field(default_factory=dict)
    hospitalization_source: str | Path = SCIENSANO_HOSP_CSV
    hospitalization: HospitalizationConfig = field(default_factory=HospitalizationConfig)
    climate_source: Optional[str | Path] = None
    climate: ClimateConfig = field(default_factory=ClimateConfig)
    mobility_source: Optional[str | Path] = None
    mobility: MobilityConfig = field(default_factory=MobilityConfig)
    # days between covariate and admissions
    lag: int = 0
    n_components: int = 2
    # figures are written here when set
    output_dir: Optional[Path] = None


@dataclass
class ReportResult:
    trajectory: Trajectory
    observed: pd.DataFrame
    aligned: pd.DataFrame
    metrics: Dict[str, float]
    covariates: Optional[pd.DataFrame] = None
    screen: Optional[pd.DataFrame] = None
    full_fit: Optional[PoissonFit] = None
    pca_fit: Optional[PoissonFit] = None
    pca: Optional[PCAResult] = None
    figures: Dict[str, Path] = field(default_factory=dict)


def _covariate_analysis(observed: pd.DataFrame, config: ReportConfig, result: ReportResult):
    frames = []
    if config.climate_source is not None:
        frames.append(load_climate(config.climate_source, config.climate))
    if config.mobility_source is not None:
        frames.append(load_mobility(config.mobility_source, config.mobility))
    if not frames:
        logger.info("no covariate sources configured; skipping regressions")
        return

    merged = merge_covariates(observed, *frames, lag=config.lag)
    predictors = [c for c in merged.columns if c not in observed.columns]
    # a single-covariate fit has two coefficients
    if len(merged) <= 2:
        logger.warning("only %d days with covariates after merging (lag=%d); skipping regressions",
                       len(merged), config.lag)
        return
    logger.info("regressing %s on %d covariates over %d days", RESPONSE, len(predictors), len(merged))

    result.covariates = merged
    result.screen = univariate_screen(merged, RESPONSE, predictors)
    if len(merged) > len(predictors) + 1:
        result.full_fit = poisson_regression(merged, RESPONSE, predictors)
    else:
        logger.warning("only %d days for %d covariates; skipping the joint regression", len(merged), len(predictors))
    if len(predictors) >= 2 and len(merged) > config.n_components + 1:
        k = min(config.n_components, len(predictors), len(merged))
        result.pca_fit, result.pca = pca_poisson_regression(merged, RESPONSE, predictors, k)


def _write_figures(config: ReportConfig, result: ReportResult):
    out = Path(config.output_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = {
        "compartments": out / "compartments.png",
        "new_hospitalizations": out / "new_hospitalizations.png",
    }
    figs = [
        plot_compartments(result.trajectory, save_path=paths["compartments"]),
        plot_new_hospitalizations(result.aligned, save_path=paths["new_hospitalizations"]).figure,
    ]
    if result.covariates is not None:
        predictors = [c for c in result.covariates.columns if c not in result.observed.columns]
        paths["covariates"] = out / "covariates.png"
        figs.append(plot_covariates(result.covariates, predictors, response=RESPONSE,
                                    save_path=paths["covariates"]))
    if result.pca is not None:
        paths["pca_variance"] = out / "pca_variance.png"
        figs.append(plot_pca_variance(result.pca, save_path=paths["pca_variance"]).figure)

    for fig in figs:
        plt.close(fig)
    result.figures = paths
    logger.info("wrote %d figures to %s", len(paths), out)


def run_report(config: Optional[ReportConfig] = None) -> ReportResult:
    """Run every stage of the report and return the results in memory"""
    config = config or ReportConfig()
    scenario = config.scenario

    simulator = EpidemicSimulator(method=config.method, **config.solver_args)
    trajectory = simulator.simulate(scenario.initial_state(), scenario.params, scenario.times())
    logger.info("simulated %d days (R0 = %.3f)", len(trajectory), scenario.params.R0)

    observed = load_hospitalizations(config.hospitalization_source, config.hospitalization)
    first_day = observed["date"].iloc[0]
    if first_day != pd.to_datetime(scenario.start_date):
        logger.warning("observed series starts %s but scenario day 0 is %s",
                       first_day.date(), scenario.start_date)

    aligned = align_to_observed(trajectory, observed, value_col=RESPONSE)
    metrics = comparison_metrics(aligned)
    logger.info("model vs observed: rmse=%.1f, correlation=%.3f", metrics["rmse"], metrics["correlation"])

    result = ReportResult(trajectory=trajectory, observed=observed, aligned=aligned, metrics=metrics)
    _covariate_analysis(observed, config, result)

    if config.output_dir is not None:
        _write_figures(config, result)
    return result


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    res = run_report(ReportConfig(output_dir=Path("figures")))
    res.trajectory.print_summary()
    print("\n--- MODEL VS OBSERVED ---")
    for key, value in res.metrics.items():
        print(f"{key}: {value}")
