#!/usr/bin/env python3
"""
Simulation controller for the Double Pendulum simulator.

The controller owns every pendulum and its trail for the lifetime of the scene. The host
loop calls ``step()`` once per frame, then ``sample_trails()`` to project the new
configuration and record the tips; the renderer only reads what it gets back.

Everything here runs on the host-loop thread; the control panel's callbacks are
dispatched from that loop between frames, never concurrently with a step.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .camera import PendulumProjection, ScreenPoint
from .constants import TRAIL_COLOR
from .data_models import Body, Color, SimulationConfig, coerce_color
from .energy import EnergyMonitor
from .physics import DoublePendulumPhysics
from .trail import TrailBuffer

logger = logging.getLogger(__name__)

Segments = Tuple[ScreenPoint, ScreenPoint, ScreenPoint]


@dataclass
class Pendulum:
    """
    Two coupled bodies plus their trail.

    ``trail_color`` is kept even while trails are off, so a trail created later
    gets the same colour. ``initial`` keeps copies of the starting bodies so the
    scene can be reset.
    """
    name: str
    upper: Body
    lower: Body
    trail: Optional[TrailBuffer] = None
    trail_color: Color = TRAIL_COLOR
    initial: Tuple[Body, Body] = field(init=False)
    energy: Optional[EnergyMonitor] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.trail is not None and self.trail_color == TRAIL_COLOR:
            self.trail_color = self.trail.color
        self.trail_color = coerce_color(self.trail_color, TRAIL_COLOR)
        self.initial = (self.upper.copy(), self.lower.copy())

    def restore(self) -> None:
        """Put both bodies back to their starting angles and velocities."""
        for body, start in zip((self.upper, self.lower), self.initial):
            body.angle = start.angle
            body.angular_velocity = start.angular_velocity
        if self.trail is not None:
            self.trail.clear()


class SimulationController:
    """
    Owns the pendulums of one scene and the engine that advances them.

    Pendulums never interact; they only share the integrator settings.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.physics = DoublePendulumPhysics(self.config.gravitational_accel, self.config.precision)
        self.pendulums: List[Pendulum] = []
        self.playing = True
        self.steps_taken = 0

    @property
    def gravity(self) -> float:
        return self.physics.gravity

    def add_pendulum(self, pendulum: Pendulum) -> None:
        if self.config.trail_enabled and pendulum.trail is None:
            pendulum.trail = TrailBuffer(self.config.trail_capacity, pendulum.trail_color)
        elif pendulum.trail is not None and pendulum.trail.capacity != self.config.trail_capacity:
            pendulum.trail = TrailBuffer(self.config.trail_capacity, pendulum.trail.color)
        pendulum.energy = EnergyMonitor(pendulum.upper, pendulum.lower, self.gravity)
        self.pendulums.append(pendulum)

    def replace_pendulums(self, pendulums: List[Pendulum], config: Optional[SimulationConfig] = None) -> None:
        """Swap in a new scene, optionally with its own configuration."""
        if config is not None:
            self.config = config
            self.physics = DoublePendulumPhysics(config.gravitational_accel, config.precision)
        self.pendulums = []
        self.steps_taken = 0
        for p in pendulums:
            self.add_pendulum(p)
        logger.info("Loaded %d pendulum(s): g=%.3f dt=%s precision=%s dynamics=%s layout=%s",
                    len(self.pendulums), self.gravity, self.config.time_step, self.config.precision,
                    self.config.dynamics_enabled, self.config.layout)

    def step(self, dt: Optional[float] = None) -> None:
        """
        Advance every pendulum by one fixed RK4 step.

        A no-op when dynamics are disabled, which is how the static two-segment demo runs.
        """
        if not self.config.dynamics_enabled:
            return
        timestep = self.config.time_step if dt is None else dt
        for p in self.pendulums:
            self.physics.rk4_integration_step(p.upper, p.lower, timestep)
        self.steps_taken += 1

    def advance(self) -> None:
        """Frame update: one step when playing."""
        if self.playing:
            self.step()

    def step_once(self) -> None:
        """Single step regardless of the play state, for stepping while paused."""
        self.step()

    def toggle_play(self) -> bool:
        self.playing = not self.playing
        return self.playing

    def sample_trails(self, projection: PendulumProjection) -> List[Segments]:
        """
        Project every pendulum and record its tip.

        Returns (anchor, elbow, tip) per pendulum, in pendulum order.
        """
        segments = []
        for p in self.pendulums:
            anchor, elbow, tip = projection.project(p.upper, p.lower)
            if self.config.trail_enabled and p.trail is not None:
                p.trail.append(tip)
            segments.append((anchor, elbow, tip))
        return segments

    def set_gravity(self, gravity: float, name: str = "Custom") -> None:
        """Change g for every pendulum; energy references are rebased to the new field."""
        self.physics.set_gravity(gravity)
        self.config.gravitational_accel = float(gravity)
        self.config.gravity_name = name
        for p in self.pendulums:
            if p.energy is not None:
                p.energy.rebase(self.gravity)
        logger.info("Gravity set to %.3f m/s^2 (%s)", self.gravity, name)

    def set_trail_enabled(self, enabled: bool) -> None:
        self.config.trail_enabled = bool(enabled)
        if enabled:
            for p in self.pendulums:
                if p.trail is None:
                    p.trail = TrailBuffer(self.config.trail_capacity, p.trail_color)
        else:
            self.clear_trails()

    def clear_trails(self) -> None:
        for p in self.pendulums:
            if p.trail is not None:
                p.trail.clear()

    def reset(self) -> None:
        """Restore every pendulum's initial conditions and empty the trails."""
        for p in self.pendulums:
            p.restore()
            if p.energy is not None:
                p.energy.rebase(self.gravity)
        self.steps_taken = 0
        logger.info("Scene reset")

    def energy_report(self) -> List[Dict[str, float]]:
        """Total energy and drift per pendulum."""
        report = []
        for p in self.pendulums:
            if p.energy is None:
                continue
            report.append({
                "name": p.name,
                "energy": p.energy.current(),
                "drift": p.energy.drift(),
                "relative_drift": p.energy.relative_drift(),
            })
        return report


class FrameStats:
    """
    Frame counter owned by the host loop.

    Accumulates frames and elapsed ticks and reports frames per second once per
    ``interval`` seconds.
    """

    def __init__(self, interval: float = 1.0, clock=time.perf_counter):
        self.interval = interval
        self._clock = clock
        self.frames = 0
        self.total_frames = 0
        self.fps = 0.0
        self._window_start = clock()

    def tick(self) -> Optional[float]:
        """Count one frame; returns the new FPS figure when an interval has elapsed."""
        self.frames += 1
        self.total_frames += 1
        now = self._clock()
        elapsed = now - self._window_start
        if elapsed < self.interval:
            return None
        self.fps = self.frames / elapsed
        self.frames = 0
        self._window_start = now
        logger.debug("FPS %.1f (%d frames total)", self.fps, self.total_frames)
        return self.fps
