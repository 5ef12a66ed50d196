import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from seihrd.errors import InvalidInput, NonFiniteResult, SimulationError
from seihrd.model import EpidemicSimulator, Trajectory, seihrd_rhs, simulate
from seihrd.parameters import CompartmentState, RateParameters
from seihrd.solver import SolverType

METHODS = [
    (SolverType.SOLVE_IVP, {}),
    (SolverType.ODE_INT, {}),
    (SolverType.RUNGE_KUTTA, {"step_size": 0.25}),
]


def test_rhs_matches_equations():
    params = RateParameters(beta=0.5, epsilon=0.2, sigma=0.1, mu=0.3, tau=0.05, theta=0.02)
    y = np.array([700.0, 100.0, 100.0, 50.0, 40.0, 10.0])
    N = y.sum()
    lam = 0.5 * 100.0 / N

    d = seihrd_rhs(y, 0.0, params)

    expected = np.array([
        -lam * 700.0,
        lam * 700.0 - 0.2 * 100.0,
        0.2 * 100.0 - 0.3 * 100.0 - 0.1 * 100.0,
        0.1 * 100.0 - 0.05 * 50.0 - 0.02 * 50.0,
        0.3 * 100.0 + 0.05 * 50.0,
        0.02 * 50.0,
    ])
    assert_allclose(d, expected)
    assert d.sum() == pytest.approx(0.0, abs=1e-9)


def test_rhs_uses_population_of_current_state():
    params = RateParameters(beta=1.0, epsilon=0.0, sigma=0.0, mu=0.0, tau=0.0, theta=0.0)
    small = seihrd_rhs(np.array([50.0, 0, 50.0, 0, 0, 0]), 0.0, params)
    large = seihrd_rhs(np.array([50.0, 0, 50.0, 0, 900.0, 0]), 0.0, params)
    assert small[0] == pytest.approx(-25.0)
    assert large[0] == pytest.approx(-2.5)


@pytest.mark.parametrize("method, args", METHODS)
def test_population_is_conserved(method, args, belgium_state, belgium_params):
    times = np.arange(0, 122, dtype=float)
    traj = simulate(belgium_state, belgium_params, times, method=method, **args)
    assert_allclose(traj.total_population, belgium_state.total, rtol=1e-6)


@pytest.mark.parametrize("seed", range(5))
def test_non_negative_for_valid_rates(seed):
    rng = np.random.default_rng(seed)
    params = RateParameters(*rng.uniform(0, 2, size=6))
    state = CompartmentState(S=1e6, E=rng.uniform(0, 1e4), I=rng.uniform(1, 1e4))
    traj = simulate(state, params, np.arange(0, 101, dtype=float))
    assert np.all(traj.values >= -1e-3)
    assert_allclose(traj.total_population, state.total, rtol=1e-6)


def test_output_times_equal_input_times(small_state, fast_params):
    times = [0, 0.5, 1, 2, 3.25, 7, 30]
    traj = simulate(small_state, fast_params, times)
    assert_array_equal(traj.times, np.array(times, dtype=float))
    assert len(traj) == len(times)
    assert [t for t, _ in traj] == [float(t) for t in times]


def test_initial_state_is_first_row(small_state, fast_params):
    traj = simulate(small_state, fast_params, np.arange(10, dtype=float))
    assert traj.state_at(0) == small_state


@pytest.mark.parametrize("method, args", METHODS)
def test_no_transmission_keeps_susceptibles(method, args):
    params = RateParameters(beta=0.0, epsilon=0.5, sigma=0.2, mu=0.3, tau=0.1, theta=0.05)
    state = CompartmentState(S=10_000, E=0, I=500)
    traj = simulate(state, params, np.arange(0, 60, dtype=float), method=method, **args)
    assert_allclose(traj.S, 10_000, rtol=0, atol=1e-9)
    assert_allclose(traj.E, 0.0, rtol=0, atol=1e-9)


def test_deterministic(belgium_state, belgium_params):
    times = np.arange(0, 122, dtype=float)
    first = simulate(belgium_state, belgium_params, times)
    second = simulate(belgium_state, belgium_params, times)
    assert_array_equal(first.values, second.values)


def test_belgium_scenario_end_to_end(belgium_state, belgium_params):
    times = np.arange(0, 122, dtype=float)
    traj = EpidemicSimulator().simulate(belgium_state, belgium_params, times)

    assert len(traj) == 122
    assert_allclose(traj.total_population, 11_455_519, rtol=1e-6)

    # infections rise from the exposed seed, then decline within the window
    peak = int(np.argmax(traj.I))
    assert 0 < peak < 121
    assert traj.I[peak] > traj.I[0]
    assert traj.I[-1] < 0.01 * traj.I[peak]

    new_h = traj.new_hospitalizations()
    assert_allclose(new_h, 0.25 * traj.I)
    h_peak = int(np.argmax(new_h))
    steps = np.diff(new_h)
    assert np.all(steps[:h_peak] > 0)
    assert np.all(steps[h_peak:] < 1e-6)

    assert traj.D[-1] > 0
    assert np.all(np.diff(traj.D) >= -1e-6)


def test_trajectory_is_read_only(small_state, fast_params):
    traj = simulate(small_state, fast_params, np.arange(5, dtype=float))
    with pytest.raises(ValueError):
        traj.values[0, 0] = -1.0
    with pytest.raises(ValueError):
        traj.times[0] = 3.0


def test_trajectory_shape_is_checked(fast_params):
    with pytest.raises(ValueError):
        Trajectory(times=np.arange(3.0), values=np.zeros((3, 5)), params=fast_params)


def test_to_dataframe_and_summary(small_state, fast_params):
    traj = simulate(small_state, fast_params, np.arange(0, 200, dtype=float))
    df = traj.to_dataframe()
    assert list(df.columns) == ["t", "S", "E", "I", "H", "R", "D", "N", "new_hospitalizations"]
    assert len(df) == 200
    assert_allclose(df["new_hospitalizations"], fast_params.sigma * df["I"])

    out = traj.summary()
    assert out["peak_day"] == float(df["t"][df["I"].idxmax()])
    assert out["peak_new_hospitalizations"] == pytest.approx(fast_params.sigma * out["peak_infected"])
    assert 0 < out["attack_rate"] <= 1
    assert out["max_conservation_drift"] < 1e-6


def test_print_summary(small_state, fast_params, capsys):
    simulate(small_state, fast_params, np.arange(0, 50, dtype=float)).print_summary()
    assert "SEIHRD SIMULATION RESULTS" in capsys.readouterr().out


@pytest.mark.parametrize("times", [[], [5, 3, 8], [0, 1, 1, 2], [0, np.nan, 2], [[0, 1], [2, 3]]])
def test_invalid_time_grid(times, small_state, fast_params):
    with pytest.raises(InvalidInput):
        simulate(small_state, fast_params, times)


def test_negative_initial_compartment(fast_params):
    state = CompartmentState(S=-1, E=0, I=10)
    with pytest.raises(InvalidInput):
        simulate(state, fast_params, [0, 1, 2])


def test_empty_population(fast_params):
    with pytest.raises(InvalidInput):
        simulate(CompartmentState(S=0), fast_params, [0, 1])


def test_negative_rate(small_state, fast_params):
    with pytest.raises(InvalidInput):
        simulate(small_state, fast_params.with_updates(theta=-0.1), [0, 1])


def test_invalid_input_is_a_value_error(small_state, fast_params):
    with pytest.raises(ValueError):
        simulate(small_state, fast_params, [])


@pytest.mark.parametrize("method, args", METHODS)
def test_overflow_reports_non_finite_result(method, args):
    params = RateParameters(beta=1e308, epsilon=0.5, sigma=0.1, mu=0.1, tau=0.1, theta=0.1)
    state = CompartmentState(S=1e6, E=0, I=100)
    with pytest.raises(NonFiniteResult) as excinfo:
        simulate(state, params, np.arange(0, 10, dtype=float), method=method, **args)

    err = excinfo.value
    assert isinstance(err, SimulationError)
    assert err.time_index == 1
    assert err.time == 1.0
    assert err.last_valid_state == state


def test_unknown_method():
    with pytest.raises(ValueError):
        EpidemicSimulator(method="euler")


def test_simulator_repr():
    assert "rk4" in repr(EpidemicSimulator(method="rk4", step_size=0.1))


def test_trajectories_compare_by_identity(small_state, fast_params):
    times = np.arange(5, dtype=float)
    first = simulate(small_state, fast_params, times)
    second = simulate(small_state, fast_params, times)
    assert first == first
    assert first != second
    assert len({first, second}) == 2


@pytest.mark.parametrize("method, args", [
    (SolverType.SOLVE_IVP, {"step_size": 0.1}),
    (SolverType.ODE_INT, {"max_step": 1.0}),
    (SolverType.RUNGE_KUTTA, {"stepsize": 0.1}),
])
def test_solver_args_the_method_ignores_are_rejected(method, args):
    with pytest.raises(ValueError, match=list(args)[0]):
        EpidemicSimulator(method=method, **args)


def test_solver_args_the_method_reads_are_accepted():
    sim = EpidemicSimulator(method=SolverType.SOLVE_IVP, rtol=1e-8, atol=1e-10, max_step=0.5)
    assert sim.solver_args == {"rtol": 1e-8, "atol": 1e-10, "max_step": 0.5}
