#!/usr/bin/env python3
"""
Energy diagnostics for a double pendulum.

The model has no damping, so potential plus kinetic energy is conserved by the exact
dynamics. These helpers only read body state; the drift they report measures the
integration error and is never fed back into the simulation.
"""
import math
from typing import Optional

import numpy as np

from .data_models import Body


def potential_energy(a: Body, b: Body, gravity: float):
    """U = m1*g*y1 + m2*g*y2, with heights measured upward from the anchor."""
    y1 = -a.length * np.cos(a.angle)
    y2 = y1 - b.length * np.cos(b.angle)
    return a.mass * gravity * y1 + b.mass * gravity * y2


def kinetic_energy(a: Body, b: Body):
    """Kinetic energy of both point masses; the lower one moves with the upper one's end."""
    av2 = (a.length * a.angular_velocity) ** 2
    bv2 = (b.length * b.angular_velocity) ** 2
    cross = 2 * a.length * b.length * a.angular_velocity * b.angular_velocity * np.cos(a.angle - b.angle)

    k1 = 0.5 * a.mass * av2
    k2 = 0.5 * b.mass * (av2 + bv2 + cross)
    return k1 + k2


def total_energy(a: Body, b: Body, gravity: float):
    return potential_energy(a, b, gravity) + kinetic_energy(a, b)


class EnergyMonitor:
    """
    Tracks the energy drift of one pendulum relative to a reference value.

    The reference is captured on construction and again on every ``rebase``, e.g. after
    a reset or a gravity change.
    """

    def __init__(self, a: Body, b: Body, gravity: float):
        self.a = a
        self.b = b
        self.gravity = float(gravity)
        self.initial: float = float(total_energy(a, b, self.gravity))

    def rebase(self, gravity: Optional[float] = None) -> None:
        if gravity is not None:
            self.gravity = float(gravity)
        self.initial = float(total_energy(self.a, self.b, self.gravity))

    def current(self) -> float:
        return float(total_energy(self.a, self.b, self.gravity))

    def drift(self) -> float:
        """Absolute change of total energy since the reference."""
        return self.current() - self.initial

    def relative_drift(self) -> float:
        """
        Drift divided by the largest potential energy swing of the system.

        The total energy itself can sit near zero, so it makes a poor scale; the swing
        (m1 + m2) * g * L1 + m2 * g * L2 does not.
        """
        scale = ((self.a.mass + self.b.mass) * self.a.length + self.b.mass * self.b.length) * self.gravity
        if scale == 0 or not math.isfinite(scale):
            return math.nan
        return self.drift() / scale
