"""
===========================================================
errors.py
Author: Veronica Scerra
Last Updated: 2026-03-02
===========================================================

Description:
    Exceptions raised by the SEIHRD simulator.

    - InvalidInput: malformed time grid, negative or non-finite
      initial state, invalid rate parameters. Raised before any
      integration happens.
    - NonFiniteResult: the integrator produced NaN/Inf. Carries the
      failing time index and the last valid compartment state.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations
from typing import Optional


class SimulationError(Exception):
    """Base class for simulator failures"""


class InvalidInput(SimulationError, ValueError):
    """Inputs rejected before integration"""


class NonFiniteResult(SimulationError, ArithmeticError):
    """
    Integration produced NaN or Inf.

    Attributes:
    time_index: int. Index into the requested times of the first non-finite state
    time: float. Requested time at that index
    last_valid_state: CompartmentState or None. State at time_index - 1
    """

    def __init__(self, time_index: int, time: float, last_valid_state: Optional[object] = None):
        self.time_index = int(time_index)
        self.time = float(time)
        self.last_valid_state = last_valid_state
        msg = f"non-finite compartment values at index {self.time_index} (t={self.time:g})"
        if last_valid_state is not None:
            msg += f"; last valid state: {last_valid_state}"
        super().__init__(msg)
