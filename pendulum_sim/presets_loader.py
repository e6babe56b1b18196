#!/usr/bin/env python3
"""
Preset JSON loading utilities.

A preset describes the startup configuration of a scene: gravity, time step, trail
settings, precision and one or more pendulums (presets/*.json).

Schema
======
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "gravity": "Earth",                # name from GRAVITY_PRESETS or a number in m/s^2
  "time_step": 0.01,                 # optional, default DT
  "trail_capacity": 1024,            # optional, default TRAIL_SIZE
  "dynamics": true,                  # optional, false freezes the arms
  "trail": true,                     # optional
  "layout": "chained",               # or "independent"
  "precision": "extended",           # or "double" / "single"
  "pendulums": [
    {
      "name": "A",
      "trail_color": [203, 166, 247, 255],
      "arms": [
        {"length": 1.0, "mass": 1.0, "angle": 1.8, "angular_velocity": 0.0,
         "color": [243, 139, 168, 255]},
        {"length": 1.0, "mass": 1.0, "angle": 1.0, "angular_velocity": 0.0,
         "color": [166, 227, 161, 255]}
      ]
    }
  ]
}

Users can add their own JSON files into the presets folder and they'll be picked up by
the loader. Bad top-level values fall back to defaults and bad pendulum entries are
skipped; both are logged.
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_GRAVITY_BODY,
    DEFAULT_PRECISION,
    DT,
    GRAVITY_PRESETS,
    LOWER_ARM_COLOR,
    TRAIL_COLOR,
    TRAIL_SIZE,
    UPPER_ARM_COLOR,
)
from .data_models import Body, SimulationConfig, coerce_color
from .simulation import Pendulum
from .trail import TrailBuffer

logger = logging.getLogger(__name__)

PRESETS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "presets")

ARM_DEFAULT_COLORS = (UPPER_ARM_COLOR, LOWER_ARM_COLOR)


def _read_json(path: str) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read preset %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Preset %s is not a JSON object", path)
        return None
    return data


def resolve_gravity(value: Any) -> Tuple[float, str]:
    """
    Turn a gravity entry into (m/s^2, display name).

    Accepts a preset name (case-insensitive) or a number. Raises ValueError otherwise.
    """
    if isinstance(value, str):
        for name, g in GRAVITY_PRESETS.items():
            if name.lower() == value.strip().lower():
                return g, name
        try:
            return float(value), "Custom"
        except ValueError:
            raise ValueError(f"Unknown gravity preset {value!r}") from None
    if isinstance(value, bool):
        raise ValueError(f"Invalid gravity {value!r}")
    g = float(value)
    return g, "Custom"


def _read_flag(data: Dict[str, Any], key: str, default: bool, source: str) -> bool:
    """A JSON boolean from ``data``; anything else logs a warning and gives ``default``."""
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    logger.warning("%s: %r must be true or false, got %r; using %s", source, key, value,
                   "true" if default else "false")
    return default


def _build_config(data: Dict[str, Any], source: str) -> SimulationConfig:
    defaults = SimulationConfig()
    g, g_name = defaults.gravitational_accel, defaults.gravity_name
    if "gravity" in data:
        try:
            g, g_name = resolve_gravity(data["gravity"])
        except (TypeError, ValueError) as exc:
            logger.warning("%s: %s; using %s gravity", source, exc, DEFAULT_GRAVITY_BODY)
    try:
        return SimulationConfig(
            gravitational_accel=g,
            time_step=float(data.get("time_step", DT)),
            trail_capacity=int(data.get("trail_capacity", TRAIL_SIZE)),
            dynamics_enabled=_read_flag(data, "dynamics", True, source),
            trail_enabled=_read_flag(data, "trail", True, source),
            layout=str(data.get("layout", "chained")),
            precision=str(data.get("precision", DEFAULT_PRECISION)),
            gravity_name=g_name,
        )
    except (TypeError, ValueError) as exc:
        logger.warning("%s: invalid settings (%s); using defaults", source, exc)
        return SimulationConfig(gravitational_accel=g, gravity_name=g_name)


def _build_body(arm: Dict[str, Any], index: int, pendulum_name: str) -> Body:
    return Body(
        length=float(arm["length"]),
        mass=float(arm["mass"]),
        angle=float(arm.get("angle", 0.0)),
        angular_velocity=float(arm.get("angular_velocity", 0.0)),
        color=coerce_color(arm.get("color", ARM_DEFAULT_COLORS[index]), ARM_DEFAULT_COLORS[index]),
        name=arm.get("name", f"{pendulum_name}.{index + 1}"),
    )


def _build_pendulum(entry: Dict[str, Any], index: int, config: SimulationConfig) -> Pendulum:
    name = str(entry.get("name", f"Pendulum {index + 1}"))
    arms = entry["arms"]
    if len(arms) != 2:
        raise ValueError(f"expected 2 arms, got {len(arms)}")
    upper = _build_body(arms[0], 0, name)
    lower = _build_body(arms[1], 1, name)
    trail_color = coerce_color(entry.get("trail_color", TRAIL_COLOR), TRAIL_COLOR)
    trail = TrailBuffer(config.trail_capacity, trail_color) if config.trail_enabled else None
    return Pendulum(name=name, upper=upper, lower=lower, trail=trail, trail_color=trail_color)


def parse_preset(data: Dict[str, Any], source: str = "<preset>") -> Tuple[SimulationConfig, List[Pendulum]]:
    """Build the configuration and pendulums described by a decoded preset."""
    config = _build_config(data, source)
    pendulums: List[Pendulum] = []
    for i, entry in enumerate(data.get("pendulums", [])):
        try:
            pendulums.append(_build_pendulum(entry, i, config))
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("%s: skipping pendulum %d (%s)", source, i, exc)
    return config, pendulums


def list_presets(directory: str = PRESETS_DIR) -> List[Tuple[str, str]]:
    """Return list of (file_name, display_name) for available presets."""
    items: List[Tuple[str, str]] = []
    if not os.path.isdir(directory):
        return items
    for fn in sorted(os.listdir(directory)):
        if not fn.lower().endswith(".json"):
            continue
        data = _read_json(os.path.join(directory, fn)) or {}
        display = data.get("name") or os.path.splitext(fn)[0]
        items.append((fn, display))
    return items


def load_preset(file_name: str, directory: str = PRESETS_DIR) -> Tuple[SimulationConfig, List[Pendulum], str]:
    """
    Load a preset JSON by file name.
    Returns (config, pendulums, display_name)
    """
    path = os.path.join(directory, file_name)
    data = _read_json(path) or {}
    display_name = data.get("name") or os.path.splitext(file_name)[0]
    config, pendulums = parse_preset(data, file_name)
    logger.info("Preset '%s': %d pendulum(s)", display_name, len(pendulums))
    return config, pendulums, display_name


def find_preset(name: str, directory: str = PRESETS_DIR) -> Optional[str]:
    """Match a file name, file stem or display name to a preset file."""
    wanted = name.strip().lower()
    for fn, display in list_presets(directory):
        if wanted in (fn.lower(), os.path.splitext(fn)[0].lower(), display.lower()):
            return fn
    return None


def default_preset() -> Tuple[SimulationConfig, List[Pendulum], str]:
    """Built-in classic scene used when no preset files are available."""
    config = SimulationConfig()
    upper = Body(length=1.0, mass=1.0, angle=1.8, angular_velocity=0.0, color=UPPER_ARM_COLOR, name="A.1")
    lower = Body(length=1.0, mass=1.0, angle=1.0, angular_velocity=0.0, color=LOWER_ARM_COLOR, name="A.2")
    pendulum = Pendulum(name="A", upper=upper, lower=lower, trail=TrailBuffer(config.trail_capacity, TRAIL_COLOR))
    return config, [pendulum], "Classic (built-in)"
