"""
===========================================================
regression.py
Author: Veronica Scerra
Last Updated: 2026-03-09
===========================================================
Covariate analysis of hospital admissions
==========================================

Exploratory Poisson regressions of daily admission counts on
climate and mobility covariates, and a PCA reduction of the
(correlated) covariates followed by a regression on the
principal-component scores.

    - poisson_regression: GLM, Poisson family, log link
    - univariate_screen: one regression per covariate
    - covariate_pca: standardize + PCA
    - pca_poisson_regression: regression on PC scores

License: MIT
===========================================================
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler


@dataclass
class PoissonFit:
    """
    Result of one Poisson regression.

    Attributes:
    response: str. Name of the count column
    predictors: list of str
    params, bse, pvalues: pd.Series indexed by 'const' and predictor names
    aic, deviance, null_deviance: float
    nobs: int
    """
    response: str
    predictors: List[str]
    params: pd.Series
    bse: pd.Series
    pvalues: pd.Series
    aic: float
    deviance: float
    null_deviance: float
    nobs: int

    @property
    def pseudo_r2(self) -> float:
        """Deviance explained, 1 - D / D_null"""
        if self.null_deviance <= 0:
            return float("nan")
        return 1.0 - self.deviance / self.null_deviance

    @property
    def irr(self) -> pd.Series:
        """Incidence-rate ratios exp(coef)"""
        return np.exp(self.params)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "coef": self.params,
            "std_err": self.bse,
            "p_value": self.pvalues,
            "irr": self.irr,
        })


def _check_columns(df: pd.DataFrame, response: str, predictors: Sequence[str]):
    missing = [c for c in [response, *predictors] if c not in df.columns]
    if missing:
        raise ValueError(f"missing column(s): {missing}")
    if not predictors:
        raise ValueError("at least one predictor is required")
    y = df[response].to_numpy(dtype=float)
    if np.any(~np.isfinite(y)) or np.any(y < 0):
        raise ValueError(f"response '{response}' must be finite and non-negative")
    if not np.allclose(y, np.round(y)):
        raise ValueError(f"response '{response}' must hold integer counts")


def poisson_regression(df: pd.DataFrame, response: str, predictors: Sequence[str]) -> PoissonFit:
    """Fit response ~ const + predictors with a Poisson GLM"""
    predictors = list(predictors)
    _check_columns(df, response, predictors)

    X = sm.add_constant(df[predictors].astype(float), has_constant="add")
    if len(df) <= X.shape[1]:
        raise ValueError(f"need more than {X.shape[1]} rows to fit {X.shape[1]} coefficients, got {len(df)}")
    y = df[response].astype(float)

    res = sm.GLM(y, X, family=sm.families.Poisson()).fit()
    return PoissonFit(
        response=response,
        predictors=predictors,
        params=res.params,
        bse=res.bse,
        pvalues=res.pvalues,
        aic=float(res.aic),
        deviance=float(res.deviance),
        null_deviance=float(res.null_deviance),
        nobs=int(res.nobs),
    )


def univariate_screen(df: pd.DataFrame, response: str, predictors: Sequence[str]) -> pd.DataFrame:
    """One Poisson regression per predictor, sorted by AIC"""
    rows = []
    for p in predictors:
        fit = poisson_regression(df, response, [p])
        rows.append({
            "predictor": p,
            "coef": float(fit.params[p]),
            "std_err": float(fit.bse[p]),
            "p_value": float(fit.pvalues[p]),
            "irr": float(fit.irr[p]),
            "aic": fit.aic,
            "deviance": fit.deviance,
            "pseudo_r2": fit.pseudo_r2,
        })
    return pd.DataFrame(rows).sort_values("aic").reset_index(drop=True)


@dataclass
class PCAResult:
    """Scores, loadings and variance explained of a covariate PCA"""
    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance_ratio: np.ndarray
    scaler: StandardScaler
    pca: PCA

    @property
    def components(self) -> List[str]:
        return list(self.scores.columns)


def covariate_pca(df: pd.DataFrame, predictors: Sequence[str], n_components: Optional[int] = None) -> PCAResult:
    """Standardize the predictors and project them on their principal components"""
    predictors = list(predictors)
    missing = [c for c in predictors if c not in df.columns]
    if missing:
        raise ValueError(f"missing column(s): {missing}")

    X = df[predictors].to_numpy(dtype=float)
    max_k = min(X.shape)
    k = max_k if n_components is None else int(n_components)
    if not 1 <= k <= max_k:
        raise ValueError(f"n_components must be in [1, {max_k}], got {k}")

    scaler = StandardScaler()
    X_scaled = scaler.fit_transform(X)
    pca = PCA(n_components=k)
    Z = pca.fit_transform(X_scaled)

    names = [f"PC{i + 1}" for i in range(k)]
    return PCAResult(
        scores=pd.DataFrame(Z, columns=names, index=df.index),
        loadings=pd.DataFrame(pca.components_.T, index=predictors, columns=names),
        explained_variance_ratio=pca.explained_variance_ratio_,
        scaler=scaler,
        pca=pca,
    )


def pca_poisson_regression(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str],
    n_components: int = 2,
) -> Tuple[PoissonFit, PCAResult]:
    """Poisson regression of the response on the first n_components PC scores"""
    reduced = covariate_pca(df, predictors, n_components)
    data = reduced.scores.copy()
    data[response] = df[response].to_numpy()
    fit = poisson_regression(data, response, reduced.components)
    return fit, reduced
