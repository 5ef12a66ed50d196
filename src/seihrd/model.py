"""
===========================================================
model.py
Author: Veronica Scerra
Last Updated: 2026-03-04
===========================================================

Description:
    Deterministic SEIHRD (Susceptible-Exposed-Infected-
    Hospitalized-Recovered-Deceased) model with constant rates.

        S -> E -> I -> H -> D
                  |    |
                  +--> R <-+

API:
    seihrd_rhs(y, t, params) -> dy/dt (length-6 vector)
    EpidemicSimulator(method="solve_ivp", **solver_args)
      - simulate(initial_state, params, times) -> Trajectory
    simulate(initial_state, params, times, method=...) -> Trajectory
    Trajectory
      - S, E, I, H, R, D, total_population
      - new_hospitalizations()  (sigma * I)
      - to_dataframe(), summary(), print_summary()

Notes:
    - N = S+E+I+H+R+D is recomputed from the current state on
      every evaluation of the right-hand side.
    - The initial state applies at times[0]; the trajectory has
      exactly one state per requested time.
    - Invalid inputs raise InvalidInput before integration; NaN/Inf
      in the output raises NonFiniteResult.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import InvalidInput, NonFiniteResult
from .parameters import COMPARTMENTS, CompartmentState, RateParameters
from .solver import SolverType, check_solver_args, solve_ode

logger = logging.getLogger(__name__)


def seihrd_rhs(y: np.ndarray, t: float, params: RateParameters) -> np.ndarray:
    """Right-hand side of the SEIHRD equations"""
    S, E, I, H, R, D = y
    N = S + E + I + H + R + D

    lam = params.beta * I / N   # force of infection

    dS = -lam * S
    dE = lam * S - params.epsilon * E
    dI = params.epsilon * E - params.mu * I - params.sigma * I
    dH = params.sigma * I - params.tau * H - params.theta * H
    dR = params.mu * I + params.tau * H
    dD = params.theta * H
    return np.array([dS, dE, dI, dH, dR, dD])


@dataclass(frozen=True, eq=False)
class Trajectory:
    """
    Compartment values at each requested time. Read-only.

    Attributes:
    times: np.ndarray. Shape (n,)
    values: np.ndarray. Shape (n, 6), columns S, E, I, H, R, D
    params: RateParameters. Rates the trajectory was integrated with
    """
    times: np.ndarray
    values: np.ndarray
    params: RateParameters

    def __post_init__(self):
        times = np.array(self.times, dtype=float)
        values = np.array(self.values, dtype=float)
        if values.shape != (len(times), len(COMPARTMENTS)):
            raise ValueError(f"values must have shape ({len(times)}, {len(COMPARTMENTS)}), got {values.shape}")
        times.flags.writeable = False
        values.flags.writeable = False
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.times)

    def __iter__(self) -> Iterator[Tuple[float, CompartmentState]]:
        for k in range(len(self.times)):
            yield float(self.times[k]), self.state_at(k)

    def state_at(self, index: int) -> CompartmentState:
        return CompartmentState.from_array(self.values[index])

    def compartment(self, name: str) -> np.ndarray:
        return self.values[:, COMPARTMENTS.index(name)]

    @property
    def S(self) -> np.ndarray:
        return self.values[:, 0]

    @property
    def E(self) -> np.ndarray:
        return self.values[:, 1]

    @property
    def I(self) -> np.ndarray:
        return self.values[:, 2]

    @property
    def H(self) -> np.ndarray:
        return self.values[:, 3]

    @property
    def R(self) -> np.ndarray:
        return self.values[:, 4]

    @property
    def D(self) -> np.ndarray:
        return self.values[:, 5]

    @property
    def total_population(self) -> np.ndarray:
        return self.values.sum(axis=1)

    def new_hospitalizations(self) -> np.ndarray:
        """New hospitalized patients per day: sigma * I(t)"""
        return self.params.sigma * self.I

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(np.asarray(self.values), columns=list(COMPARTMENTS))
        df.insert(0, "t", np.asarray(self.times))
        df["N"] = df[list(COMPARTMENTS)].sum(axis=1)
        df["new_hospitalizations"] = self.new_hospitalizations()
        return df

    def summary(self) -> Dict[str, float]:
        t, I = self.times, self.I
        new_h = self.new_hospitalizations()
        N = self.total_population
        peak_idx = int(np.argmax(I))
        peak_h_idx = int(np.argmax(new_h))
        return {
            "peak_day": float(t[peak_idx]),
            "peak_infected": float(I[peak_idx]),
            "peak_new_hospitalizations_day": float(t[peak_h_idx]),
            "peak_new_hospitalizations": float(new_h[peak_h_idx]),
            "peak_hospitalized": float(np.max(self.H)),
            "final_recovered": float(self.R[-1]),
            "final_deceased": float(self.D[-1]),
            "attack_rate": float((N[0] - self.S[-1]) / N[0]),
            "max_conservation_drift": float(np.max(np.abs(N - N[0])) / N[0]),
        }

    def print_summary(self):
        """Print a short report of the trajectory"""
        out = self.summary()
        print("SEIHRD SIMULATION RESULTS:")
        print(f"Horizon: day {self.times[0]:g} to day {self.times[-1]:g}")
        print(f"Population size: {self.total_population[0]:,.0f}")
        print(f"R0 (beta / (mu + sigma)): {self.params.R0:.3f}")
        print(f"\n--- EPIDEMIC OUTCOMES ---")
        print(f"Peak infected: {out['peak_infected']:,.0f} (day {out['peak_day']:g})")
        print(f"Peak new hospitalizations: {out['peak_new_hospitalizations']:,.0f}/day "
              f"(day {out['peak_new_hospitalizations_day']:g})")
        print(f"Peak hospitalized: {out['peak_hospitalized']:,.0f}")
        print(f"Final recovered: {out['final_recovered']:,.0f}")
        print(f"Final deceased: {out['final_deceased']:,.0f}")
        print(f"Attack rate: {out['attack_rate'] * 100:.2f}%")


def _validate_times(times: Sequence[float]) -> np.ndarray:
    t = np.asarray(times, dtype=float)
    if t.ndim != 1:
        raise InvalidInput(f"times must be one-dimensional, got shape {t.shape}")
    if len(t) == 0:
        raise InvalidInput("times must not be empty")
    if not np.all(np.isfinite(t)):
        raise InvalidInput("times must be finite")
    if np.any(np.diff(t) <= 0):
        raise InvalidInput("times must be strictly increasing")
    return t


class EpidemicSimulator:
    """
    Integrates the SEIHRD system over a time grid.

    Parameters:
    method: str. One of SolverType.ALL ("solve_ivp", "odeint", "rk4")
    solver_args: keyword options read by that solver (see solver.SOLVER_ARGS).
        Options the solver would ignore raise ValueError
    """

    def __init__(self, method: str = SolverType.SOLVE_IVP, **solver_args):
        if method not in SolverType.ALL:
            raise ValueError(f"Unknown solver type '{method}', expected one of {SolverType.ALL}")
        check_solver_args(method, solver_args)
        self.method = method
        self.solver_args = solver_args

    def simulate(
        self,
        initial_state: CompartmentState,
        params: RateParameters,
        times: Sequence[float],
    ) -> Trajectory:
        """
        Run one simulation.

        Parameters:
        initial_state: CompartmentState. Populations at times[0]
        params: RateParameters. Constant transition rates
        times: sequence of float. Strictly increasing output times

        Returns:
        Trajectory with one state per element of times
        """
        t = _validate_times(times)
        initial_state.validate()
        params.validate()

        def deriv(y, time):
            return seihrd_rhs(y, time, params)

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            values = solve_ode(self.method, deriv, initial_state.as_array(), t, self.solver_args)

        bad_rows = ~np.all(np.isfinite(values), axis=1)
        if np.any(bad_rows):
            idx = int(np.argmax(bad_rows))
            last_valid = CompartmentState.from_array(values[idx - 1]) if idx > 0 else None
            raise NonFiniteResult(idx, t[idx], last_valid)

        logger.debug("simulated %d time points with %s", len(t), self.method)
        return Trajectory(times=t, values=values, params=params)

    def __repr__(self) -> str:
        return f"EpidemicSimulator(method={self.method!r}, solver_args={self.solver_args!r})"


def simulate(
    initial_state: CompartmentState,
    params: RateParameters,
    times: Sequence[float],
    method: str = SolverType.SOLVE_IVP,
    **solver_args,
) -> Trajectory:
    """Integrate the SEIHRD model with a one-off simulator"""
    return EpidemicSimulator(method=method, **solver_args).simulate(initial_state, params, times)
