import dataclasses

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from seihrd.errors import InvalidInput
from seihrd.parameters import (
    BELGIUM_SPRING_2020,
    COMPARTMENTS,
    RATES,
    CompartmentState,
    RateParameters,
    Scenario,
)


def test_belgium_initial_state():
    state = BELGIUM_SPRING_2020.initial_state()
    assert state.E == 125_000
    assert state.I == 14_480
    assert state.S == 11_455_519 - 125_000 - 14_480
    assert state.H == state.R == state.D == 0
    assert state.total == 11_455_519


def test_belgium_rates():
    p = BELGIUM_SPRING_2020.params
    assert p.beta == 0.0999
    assert p.epsilon == 0.714
    assert p.sigma == 0.25
    assert p.mu == pytest.approx((1 / 2.4) ** 2)
    assert p.tau == 0.2
    assert p.theta == 0.25


def test_belgium_time_grid():
    times = BELGIUM_SPRING_2020.times()
    assert times[0] == 0 and times[-1] == 121
    assert len(times) == 122
    assert np.all(np.diff(times) == 1)


def test_exposed_seed_is_configurable():
    scenario = dataclasses.replace(BELGIUM_SPRING_2020, exposed_multiplier=2)
    state = scenario.initial_state()
    assert state.E == 50_000
    assert state.total == BELGIUM_SPRING_2020.population


def test_scenario_rejects_overfull_compartments():
    scenario = Scenario(population=100, initial_infected=80, exposed_seed=30, params=BELGIUM_SPRING_2020.params)
    with pytest.raises(InvalidInput):
        scenario.initial_state()


def test_state_array_round_trip_order():
    state = CompartmentState(S=1, E=2, I=3, H=4, R=5, D=6)
    assert_array_equal(state.as_array(), [1, 2, 3, 4, 5, 6])
    assert CompartmentState.from_array(state.as_array()) == state
    assert COMPARTMENTS == ("S", "E", "I", "H", "R", "D")


def test_state_from_wrong_length():
    with pytest.raises(InvalidInput):
        CompartmentState.from_array([1, 2, 3])


@pytest.mark.parametrize("field", COMPARTMENTS)
def test_state_validation(field):
    good = CompartmentState(S=10, E=1, I=1, H=1, R=1, D=1)
    with pytest.raises(InvalidInput, match=field):
        dataclasses.replace(good, **{field: -1.0}).validate()
    with pytest.raises(InvalidInput, match=field):
        dataclasses.replace(good, **{field: np.inf}).validate()


@pytest.mark.parametrize("field", RATES)
def test_rate_validation(field):
    with pytest.raises(InvalidInput, match=field):
        BELGIUM_SPRING_2020.params.with_updates(**{field: -0.5}).validate()


def test_states_and_rates_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        BELGIUM_SPRING_2020.params.beta = 1.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        CompartmentState(S=1).S = 2


def test_with_updates_returns_new_record():
    p = BELGIUM_SPRING_2020.params
    q = p.with_updates(beta=0.3)
    assert q.beta == 0.3 and p.beta == 0.0999
    assert q.sigma == p.sigma
    with pytest.raises(InvalidInput):
        p.with_updates(gamma=0.1)


def test_r0():
    p = RateParameters(beta=0.6, epsilon=0.3, sigma=0.1, mu=0.2, tau=0.1, theta=0.1)
    assert p.R0 == pytest.approx(2.0)
    assert p.with_updates(mu=0, sigma=0).R0 == np.inf
    assert list(p.to_dict()) == list(RATES)
