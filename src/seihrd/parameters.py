"""
===============================================================================
parameters.py
Author: Veronica Scerra
Last Updated: 2026-03-02
===============================================================================
State and parameter records for the SEIHRD model

Compartments (fixed order S, E, I, H, R, D):
    S - Susceptible
    E - Exposed (infected, not yet infectious)
    I - Infected (infectious)
    H - Hospitalized
    R - Recovered
    D - Deceased

Rates (all per day):
    beta    - transmission rate
    epsilon - E -> I progression rate (1/latent period)
    sigma   - I -> H hospitalization rate
    mu      - I -> R recovery rate
    tau     - H -> R recovery rate
    theta   - H -> D death rate

The Belgian spring-2020 scenario reproduces the hospitalization report's
initial conditions. The exposed seed (25000 x 5) has no documented
derivation, so both factors are kept as scenario inputs.
--------------------------------------------------------------------------------
License: MIT
================================================================================
"""
from __future__ import annotations
import numpy as np
from dataclasses import dataclass, fields, replace
from typing import Sequence

from .errors import InvalidInput

COMPARTMENTS = ("S", "E", "I", "H", "R", "D")
RATES = ("beta", "epsilon", "sigma", "mu", "tau", "theta")


@dataclass(frozen=True)
class CompartmentState:
    """Population count in each compartment at one instant"""
    S: float
    E: float = 0.0
    I: float = 0.0
    H: float = 0.0
    R: float = 0.0
    D: float = 0.0

    @property
    def total(self) -> float:
        return float(self.S + self.E + self.I + self.H + self.R + self.D)

    def as_array(self) -> np.ndarray:
        return np.array([self.S, self.E, self.I, self.H, self.R, self.D], dtype=float)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "CompartmentState":
        if len(values) != len(COMPARTMENTS):
            raise InvalidInput(f"expected {len(COMPARTMENTS)} compartment values, got {len(values)}")
        return cls(*(float(v) for v in values))

    def validate(self) -> "CompartmentState":
        """Raise InvalidInput on negative or non-finite counts or an empty population"""
        for name in COMPARTMENTS:
            value = getattr(self, name)
            if not np.isfinite(value):
                raise InvalidInput(f"initial {name} must be finite, got {value}")
            if value < 0:
                raise InvalidInput(f"initial {name} must be non-negative, got {value}")
        if self.total <= 0:
            raise InvalidInput("total population must be positive")
        return self


@dataclass(frozen=True)
class RateParameters:
    """Transition rates (per day), fixed for one simulation run"""
    beta: float      # transmission rate
    epsilon: float   # 1/latent period
    sigma: float     # I -> H
    mu: float        # I -> R
    tau: float       # H -> R
    theta: float     # H -> D

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in RATES], dtype=float)

    def validate(self) -> "RateParameters":
        for name in RATES:
            value = getattr(self, name)
            if not np.isfinite(value):
                raise InvalidInput(f"rate {name} must be finite, got {value}")
            if value < 0:
                raise InvalidInput(f"rate {name} must be non-negative, got {value}")
        return self

    @property
    def R0(self) -> float:
        """Basic reproduction number: beta times the mean time spent infectious"""
        removal = self.mu + self.sigma
        return self.beta / removal if removal > 0 else np.inf

    def with_updates(self, **changes: float) -> "RateParameters":
        unknown = set(changes) - set(RATES)
        if unknown:
            raise InvalidInput(f"unknown rate parameter(s): {sorted(unknown)}")
        return replace(self, **{k: float(v) for k, v in changes.items()})

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Scenario:
    """
    Initial conditions and rates for one simulation setting.

    Attributes:
    population: int. Total population N
    initial_infected: float. I0
    exposed_seed: float. Base count for E0
    exposed_multiplier: float. E0 = exposed_seed * exposed_multiplier
    initial_hospitalized, initial_recovered, initial_deceased: float. H0, R0, D0
    params: RateParameters
    horizon: int. Last day of the daily time grid (inclusive)
    start_date: str. Calendar date of day 0
    """
    population: int
    initial_infected: float
    params: RateParameters
    exposed_seed: float = 0.0
    exposed_multiplier: float = 1.0
    initial_hospitalized: float = 0.0
    initial_recovered: float = 0.0
    initial_deceased: float = 0.0
    horizon: int = 121
    start_date: str = "2020-03-15"

    @property
    def initial_exposed(self) -> float:
        return float(self.exposed_seed * self.exposed_multiplier)

    def initial_state(self) -> CompartmentState:
        """Susceptibles are whatever remains of the population"""
        E0 = self.initial_exposed
        S0 = (self.population - E0 - self.initial_infected - self.initial_hospitalized
              - self.initial_recovered - self.initial_deceased)
        return CompartmentState(
            S=float(S0),
            E=E0,
            I=float(self.initial_infected),
            H=float(self.initial_hospitalized),
            R=float(self.initial_recovered),
            D=float(self.initial_deceased),
        ).validate()

    def times(self) -> np.ndarray:
        return np.arange(0, self.horizon + 1, dtype=float)


BELGIUM_POPULATION = 11_455_519

BELGIUM_RATES = RateParameters(
    beta=0.0999,
    epsilon=0.714,
    sigma=0.25,
    mu=(1 / 2.4) ** 2,
    tau=0.2,
    theta=0.25,
)

BELGIUM_SPRING_2020 = Scenario(
    population=BELGIUM_POPULATION,
    initial_infected=14_480,
    params=BELGIUM_RATES,
    exposed_seed=25_000,
    exposed_multiplier=5,
    horizon=121,
    start_date="2020-03-15",
)
