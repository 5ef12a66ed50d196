"""
===========================================================
solver.py
Author: Veronica Scerra
Last Updated: 2026-03-02
===========================================================

Description:
    Generic ODE solvers shared by the compartmental models.
    A solver takes a right-hand side f(y, t) -> dy/dt, initial
    values and the requested output times, and returns an array
    of shape (len(times), len(values)). Solvers know nothing
    about the epidemic model.

API:
    solve_ode(solver_type, ode_func, values, times, solver_args)
    solve_with_ivp   - SciPy RK45 with local error control (default)
    solve_with_odeint - SciPy LSODA
    solve_with_rk4   - fixed-step classical Runge-Kutta

Notes:
    - rk4 splits every output interval into equal substeps no
      longer than `step_size`, so the step never exceeds the
      spacing of the requested times.
    - If solve_ivp gives up before the last requested time, the
      unreached rows are NaN; callers check for finiteness.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
import logging
import math
from typing import Callable, Optional

import numpy as np
from scipy.integrate import odeint, solve_ivp

logger = logging.getLogger(__name__)

OdeFunction = Callable[[np.ndarray, float], np.ndarray]


class SolverType:
    """Names of the available ODE solvers"""
    SOLVE_IVP = "solve_ivp"
    ODE_INT = "odeint"
    RUNGE_KUTTA = "rk4"

    ALL = (SOLVE_IVP, ODE_INT, RUNGE_KUTTA)


# solver_args keys each solver reads
SOLVER_ARGS = {
    SolverType.SOLVE_IVP: ("method", "rtol", "atol", "max_step"),
    SolverType.ODE_INT: ("rtol", "atol"),
    SolverType.RUNGE_KUTTA: ("step_size",),
}


def check_solver_args(solver_type: str, solver_args: dict):
    """Raise ValueError for options the chosen solver would ignore"""
    unknown = sorted(set(solver_args) - set(SOLVER_ARGS[solver_type]))
    if unknown:
        raise ValueError(
            f"{solver_type} does not accept solver argument(s) {unknown}, expected {SOLVER_ARGS[solver_type]}"
        )


def solve_ode(
    solver_type: str,
    ode_func: OdeFunction,
    values: np.ndarray,
    times: np.ndarray,
    solver_args: Optional[dict] = None,
) -> np.ndarray:
    """Solve ode_func from `values` at times[0], reporting the state at every element of `times`"""
    solver_args = solver_args or {}
    if solver_type == SolverType.SOLVE_IVP:
        return solve_with_ivp(ode_func, values, times, solver_args)
    elif solver_type == SolverType.ODE_INT:
        return solve_with_odeint(ode_func, values, times, solver_args)
    elif solver_type == SolverType.RUNGE_KUTTA:
        return solve_with_rk4(ode_func, values, times, solver_args)
    else:
        raise ValueError(f"Unknown solver type '{solver_type}', expected one of {SolverType.ALL}")


def solve_with_ivp(ode_func: OdeFunction, values: np.ndarray, times: np.ndarray, solver_args: dict) -> np.ndarray:
    """
    SciPy solve_ivp (explicit Runge-Kutta 4(5) by default).

    solver_args: method, rtol, atol, max_step
    """
    values = np.asarray(values, dtype=float)
    times = np.asarray(times, dtype=float)
    if len(times) == 1:
        return values[np.newaxis, :].copy()

    sol = solve_ivp(
        lambda t, y: ode_func(y, t),
        (times[0], times[-1]),
        values,
        method=solver_args.get("method", "RK45"),
        t_eval=times,
        rtol=solver_args.get("rtol", 1e-6),
        atol=solver_args.get("atol", 1e-8),
        max_step=solver_args.get("max_step", 1.0),
    )
    out = np.full((len(times), len(values)), np.nan)
    # sol.y is an empty list when the first step already fails
    ys = np.asarray(sol.y, dtype=float).reshape(len(values), -1)
    reached = ys.shape[1]
    out[:reached] = ys.T
    if reached == 0:
        out[0] = values
    if not sol.success:
        logger.warning("solve_ivp stopped after %d of %d output times: %s", reached, len(times), sol.message)
    return out


def solve_with_odeint(ode_func: OdeFunction, values: np.ndarray, times: np.ndarray, solver_args: dict) -> np.ndarray:
    """SciPy odeint (LSODA). solver_args: rtol, atol"""
    values = np.asarray(values, dtype=float)
    times = np.asarray(times, dtype=float)
    if len(times) == 1:
        return values[np.newaxis, :].copy()
    return odeint(
        ode_func,
        values,
        times,
        rtol=solver_args.get("rtol", 1e-6),
        atol=solver_args.get("atol", 1e-8),
    )


def _rk4_step(ode_func: OdeFunction, y: np.ndarray, t: float, h: float) -> np.ndarray:
    """single RK4 step"""
    k1 = ode_func(y, t)
    k2 = ode_func(y + 0.5 * h * k1, t + 0.5 * h)
    k3 = ode_func(y + 0.5 * h * k2, t + 0.5 * h)
    k4 = ode_func(y + h * k3, t + h)
    return y + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


def solve_with_rk4(ode_func: OdeFunction, values: np.ndarray, times: np.ndarray, solver_args: dict) -> np.ndarray:
    """
    Fixed-step Runge-Kutta 4.

    solver_args: step_size (default 0.25). Each interval between
    consecutive output times is covered by ceil(dt / step_size)
    equal steps. Integration stops at the first non-finite state;
    the remaining rows are NaN.
    """
    step_size = float(solver_args.get("step_size", 0.25))
    if step_size <= 0:
        raise ValueError("step_size must be positive")

    times = np.asarray(times, dtype=float)
    out = np.full((len(times), len(values)), np.nan)
    y = np.asarray(values, dtype=float).copy()
    out[0] = y

    for k in range(1, len(times)):
        dt = times[k] - times[k - 1]
        n_sub = max(1, math.ceil(dt / step_size - 1e-9))
        h = dt / n_sub
        t = times[k - 1]
        for _ in range(n_sub):
            y = _rk4_step(ode_func, y, t, h)
            t += h
        out[k] = y
        if not np.all(np.isfinite(y)):
            break
    return out
