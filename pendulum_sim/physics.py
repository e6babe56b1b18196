#!/usr/bin/env python3
"""
Core Physics Engine for the Double Pendulum simulator

Responsibilities
- Derive the angular accelerations of a double pendulum from its Lagrangian.
- Advance a pair of coupled bodies using a fourth-order Runge–Kutta (RK4) time integrator.

Units and conventions
- Angles are in radians from the downward vertical, positive counter-clockwise seen from
  the viewer with screen y pointing down.
- Lengths are in meters [m], masses in kilograms [kg], time in seconds [s].
- The state vector is (theta1, theta2, omega1, omega2).

Numerical notes
- Precision: every simulation instance runs in a single numpy dtype. The default is
  numpy.longdouble (80-bit extended precision on x86 Linux); "double" and "single" are
  available for the lighter demos. Inputs are cast to that dtype before any arithmetic.
- Singularities: the 2x2 system solved for the accelerations degenerates when
  coeffA * coeffB approaches 1 (a vanishing upper mass with aligned arms). The literal
  IEEE result (huge, inf or nan) is returned and left to propagate; floating-point
  warnings are silenced for the duration of the computation.
- Energy: RK4 is not symplectic; total energy drifts slowly over long runs. At the fixed
  step used here the drift stays small over the lengths of run that matter for display.

Author: Double Pendulum Project
"""

from typing import Dict

import numpy as np

from .constants import DEFAULT_GRAVITY, DEFAULT_PRECISION
from .data_models import Body


PRECISIONS: Dict[str, type] = {
    "extended": np.longdouble,
    "double": np.float64,
    "single": np.float32,
}


def resolve_dtype(precision: str) -> type:
    """Map a precision name to its numpy scalar type."""
    try:
        return PRECISIONS[precision]
    except KeyError:
        raise ValueError(f"Unknown precision {precision!r}; expected one of {sorted(PRECISIONS)}") from None


def lagrange_derivative(a: Body, b: Body, state: np.ndarray, gravity: float) -> np.ndarray:
    """
    Compute the time derivative of a double pendulum state.

    Only the lengths and masses of the bodies are read; the angles and angular velocities
    come from ``state``, which the integrator perturbs between evaluations. Dividing the
    two Euler–Lagrange equations by their leading coefficients gives

        theta1'' + coeffA * theta2'' = forceA
        coeffB * theta1'' + theta2'' = forceB

    which is solved directly for both accelerations.

    Args:
        a: Upper body (pivots on the anchor)
        b: Lower body (pivots on the end of a)
        state: Array (theta1, theta2, omega1, omega2); its dtype sets the precision
        gravity: Gravitational acceleration in m/s^2

    Returns:
        Array (omega1, omega2, alpha1, alpha2) with the same dtype as ``state``.
    """
    dtype = state.dtype.type
    l1, l2 = dtype(a.length), dtype(b.length)
    m1, m2 = dtype(a.mass), dtype(b.mass)
    g = dtype(gravity)
    t1, t2, w1, w2 = state

    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        ratio_ba = l2 / l1
        ratio_ab = l1 / l2
        mass_ratio = m2 / (m1 + m2)
        cos_d = np.cos(t1 - t2)
        sin_d = np.sin(t1 - t2)

        coeff_a = ratio_ba * mass_ratio * cos_d
        coeff_b = ratio_ab * cos_d

        force_a = -ratio_ba * mass_ratio * (w2 * w2) * sin_d - (g / l1) * np.sin(t1)
        force_b = ratio_ab * (w1 * w1) * sin_d - (g / l2) * np.sin(t2)

        det = 1 - coeff_a * coeff_b
        alpha1 = (force_a - coeff_a * force_b) / det
        alpha2 = (force_b - coeff_b * force_a) / det

    return np.array([w1, w2, alpha1, alpha2], dtype=state.dtype)


class DoublePendulumPhysics:
    """
    Fixed-step RK4 integrator for a double pendulum with point masses.

    One engine can drive any number of independent pendulums; it holds only the
    gravitational acceleration and the floating-point precision.
    """

    def __init__(self, gravity: float = DEFAULT_GRAVITY, precision: str = DEFAULT_PRECISION):
        """
        Initialize the physics engine.

        Args:
            gravity: Gravitational acceleration in m/s^2
            precision: "extended", "double" or "single"
        """
        self.precision = precision
        self.dtype = resolve_dtype(precision)
        self.gravity = float(gravity)

    def set_gravity(self, gravity: float) -> None:
        self.gravity = float(gravity)

    def state_of(self, a: Body, b: Body) -> np.ndarray:
        """Pack the bodies' current angles and angular velocities into a state vector."""
        return np.array(
            [a.angle, b.angle, a.angular_velocity, b.angular_velocity], dtype=self.dtype
        )

    def derivatives(self, a: Body, b: Body, state: np.ndarray) -> np.ndarray:
        return lagrange_derivative(a, b, state, self.gravity)

    def rk4_integration_step(self, a: Body, b: Body, timestep: float) -> None:
        """
        Perform one Runge-Kutta 4th order integration step.

        Workflow:
        1) k1 at y
        2) k2 at y + dt/2 * k1
        3) k3 at y + dt/2 * k2
        4) k4 at y + dt * k3
        Combine y + dt/6 * (k1 + 2*k2 + 2*k3 + k4).

        Args:
            a: Upper body (modified in place).
            b: Lower body (modified in place).
            timestep: Time step size in seconds.
        """
        dt = self.dtype(timestep)
        y = self.state_of(a, b)

        with np.errstate(over="ignore", invalid="ignore"):
            k1 = self.derivatives(a, b, y)
            k2 = self.derivatives(a, b, y + dt * k1 / 2)
            k3 = self.derivatives(a, b, y + dt * k2 / 2)
            k4 = self.derivatives(a, b, y + dt * k3)

            y_next = y + dt / 6 * (k1 + 2 * k2 + 2 * k3 + k4)

        a.angle, b.angle, a.angular_velocity, b.angular_velocity = y_next


def rk4_step(a: Body, b: Body, timestep: float, gravity: float = DEFAULT_GRAVITY,
             precision: str = DEFAULT_PRECISION) -> None:
    """Advance one pendulum by a single RK4 step without keeping an engine around."""
    DoublePendulumPhysics(gravity, precision).rk4_integration_step(a, b, timestep)
