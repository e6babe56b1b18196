#!/usr/bin/env python3
"""
Data models for the Double Pendulum simulator.

This module defines the Body dataclass shared between physics and rendering, and the
SimulationConfig that carries the startup options of one simulation.

Units and usage
- length is in meters [m], mass in kilograms [kg].
- angle is in radians from the downward vertical and is never wrapped; only its sine and
  cosine are ever used.
- angle and angular_velocity are mutated in place by the integrator every step.
"""
from dataclasses import dataclass, field
from typing import Sequence, Tuple

from .constants import (
    DEFAULT_COLOR,
    DEFAULT_GRAVITY,
    DEFAULT_PRECISION,
    DT,
    TRAIL_SIZE,
)

Color = Tuple[int, int, int, int]

LAYOUTS = ("chained", "independent")
PRECISION_NAMES = ("extended", "double", "single")


def coerce_color(c: Sequence[int], default: Color = DEFAULT_COLOR) -> Color:
    """Clamp an RGB or RGBA sequence to four 0..255 channels; alpha defaults to 255."""
    try:
        channels = [int(v) for v in c]
    except (TypeError, ValueError):
        return default
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4:
        return default
    r, g, b, a = (max(0, min(255, v)) for v in channels)
    return (r, g, b, a)


@dataclass
class Body:
    """
    One rigid, massless rod with a point mass at its end.

    The first body of a pendulum pivots on the fixed anchor, the second one on the end
    of the first.

    Fields:
    - length: Rod length in meters (> 0)
    - mass: Point mass in kilograms (> 0)
    - angle: Angular displacement from the downward vertical, radians
    - angular_velocity: Time derivative of angle, radians per second
    - color: RGBA tuple used for rendering
    - name: Identifier used by the HUD and control panel
    """
    length: float
    mass: float
    angle: float = 0.0
    angular_velocity: float = 0.0
    color: Color = DEFAULT_COLOR
    name: str = "Arm"

    def __post_init__(self) -> None:
        if not self.length > 0:
            raise ValueError(f"Body length must be positive, got {self.length!r}")
        if not self.mass > 0:
            raise ValueError(f"Body mass must be positive, got {self.mass!r}")
        self.color = coerce_color(self.color)

    def copy(self) -> "Body":
        return Body(
            length=self.length,
            mass=self.mass,
            angle=self.angle,
            angular_velocity=self.angular_velocity,
            color=self.color,
            name=self.name,
        )


@dataclass
class SimulationConfig:
    """
    Startup options of one simulation instance.

    Fields:
    - gravitational_accel: g in m/s^2
    - time_step: Fixed RK4 step in seconds
    - trail_capacity: Number of tip positions kept per pendulum
    - dynamics_enabled: False freezes the arms at their initial angles
    - trail_enabled: False disables trail recording
    - layout: "chained" hangs the second arm from the first, "independent" from the anchor
    - precision: "extended" (numpy.longdouble), "double" or "single"
    - gravity_name: Display name of the gravity preset, if any
    """
    gravitational_accel: float = DEFAULT_GRAVITY
    time_step: float = DT
    trail_capacity: int = TRAIL_SIZE
    dynamics_enabled: bool = True
    trail_enabled: bool = True
    layout: str = "chained"
    precision: str = DEFAULT_PRECISION
    gravity_name: str = field(default="Earth")

    def __post_init__(self) -> None:
        if not self.time_step > 0:
            raise ValueError(f"time_step must be positive, got {self.time_step!r}")
        if int(self.trail_capacity) <= 0:
            raise ValueError(f"trail_capacity must be positive, got {self.trail_capacity!r}")
        self.trail_capacity = int(self.trail_capacity)
        if self.layout not in LAYOUTS:
            raise ValueError(f"layout must be one of {LAYOUTS}, got {self.layout!r}")
        if self.precision not in PRECISION_NAMES:
            raise ValueError(f"precision must be one of {PRECISION_NAMES}, got {self.precision!r}")
