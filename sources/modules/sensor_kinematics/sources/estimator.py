"""
Dead reckoning from the filtered accelerometer history.

Integrates (trapezoidal rule, backwards in time) acceleration -> velocity ->
position once per tick:

    v += (a[t] + a[t-1]) * dt1 * 0.5              dt1 = ts[t] - ts[t-1]
    p += (v_before + v_after) * dt2 * 0.25        dt2 = ts[t] - ts[t-2]

Each update is skipped while the history is too short for it.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import KinematicState
from .series import FilteredSeries
from .store import AggregateStore


logger = logging.getLogger(__name__)

NS_TO_S = 1e-9


class StateEstimator:

    def __init__(self, accelerometer: FilteredSeries, state: Optional[KinematicState] = None):
        self.accelerometer = accelerometer
        self.state = state if state is not None else KinematicState()

    @classmethod
    def from_store(cls, store: AggregateStore, state: Optional[KinematicState] = None) -> "StateEstimator":
        return cls(store.accelerometer, state)

    def update(self) -> KinematicState:
        accel_t = self.accelerometer.t_minus(0)
        accel_t_minus_1 = self.accelerometer.t_minus(1) if self.accelerometer.capacity > 1 else None
        accel_t_minus_2 = self.accelerometer.t_minus(2) if self.accelerometer.capacity > 2 else None

        vel_t_zero = self.state.velocity.copy()

        if accel_t_minus_1 is not None:
            dt1 = (accel_t.timestamp - accel_t_minus_1.timestamp) * NS_TO_S
            self.state.velocity = self.state.velocity + (
                accel_t.values.vec3() + accel_t_minus_1.values.vec3()
            ) * dt1 * 0.5

        if accel_t_minus_2 is not None:
            vel_t_plus_1 = self.state.velocity.copy()
            dt2 = (accel_t.timestamp - accel_t_minus_2.timestamp) * NS_TO_S
            self.state.position = self.state.position + (vel_t_zero + vel_t_plus_1) * dt2 * 0.25

        self.integrate_orientation()
        return self.state

    def integrate_orientation(self) -> None:
        """Hook for a complementary filter (rotation vector + compass); does nothing."""
        return None
