"""
Tests for the host-loop helpers in double_pendulum.py that need no display:
drawing-coordinate guards, scene loading, CLI parsing and the control panel's
callback dispatch (Dear PyGui is replaced by a recorder).
"""
import contextlib
import json
import logging
import math

import numpy as np
import pytest

import double_pendulum
from double_pendulum import ControlPanel, PygameRenderer, _safe_point, load_scene, parse_args
from pendulum_sim.camera import PendulumProjection
from pendulum_sim.constants import GRAVITY_PRESETS, SAFE_COORD_LIMIT
from pendulum_sim.presets_loader import resolve_gravity
from pendulum_sim.simulation import SimulationController


ARM = {"length": 1.0, "mass": 1.0, "angle": 0.5}


class RecordingDearPyGui:
    """Stands in for the dearpygui module: records calls, returns null contexts."""

    def __init__(self):
        self.calls = []
        self.queue = None

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            if name == "get_callback_queue":
                return self.queue
            return contextlib.nullcontext()
        return record

    def run_callbacks(self, jobs):
        self.calls.append(("run_callbacks", (jobs,), {}))
        for callback, *_ in jobs or ():
            callback()

    def names(self):
        return [name for name, _, _ in self.calls]


@pytest.fixture
def fake_dpg(monkeypatch):
    fake = RecordingDearPyGui()
    monkeypatch.setattr(double_pendulum, "dpg", fake)
    return fake


def make_panel(precision=None):
    sim = SimulationController()
    projection = PendulumProjection()
    renderer = PygameRenderer(sim, projection, load_scene(sim, projection, "classic.json", precision))
    return ControlPanel(sim, renderer, precision)


# ------------------------------------------------------------
# Drawing coordinates
# ------------------------------------------------------------

@pytest.mark.parametrize("pt", [
    (math.nan, 1.0),
    (1.0, math.inf),
    (np.float64("nan"), np.float64("nan")),
    (1e9, 0.0),
    (0.0, -(SAFE_COORD_LIMIT + 1)),
    None,
])
def test_unusable_points_are_skipped(pt):
    assert _safe_point(pt) is None


def test_safe_point_truncates_to_pixels():
    assert _safe_point((3.7, 4.2)) == (3, 4)
    assert _safe_point((np.longdouble(500.9), np.float32(400.1))) == (500, 400)
    assert _safe_point((SAFE_COORD_LIMIT, -SAFE_COORD_LIMIT)) == (SAFE_COORD_LIMIT, -SAFE_COORD_LIMIT)


# ------------------------------------------------------------
# Scene loading
# ------------------------------------------------------------

def test_preset_without_usable_pendulums_falls_back(tmp_path, caplog):
    (tmp_path / "empty.json").write_text(
        json.dumps({"name": "Empty", "pendulums": [{"arms": [ARM]}]}), encoding="utf-8")
    sim = SimulationController()
    projection = PendulumProjection(layout="independent")
    with caplog.at_level(logging.WARNING):
        name = load_scene(sim, projection, "empty.json", directory=str(tmp_path))
    assert name == "Classic (built-in)"
    assert len(sim.pendulums) == 1
    assert (float(sim.pendulums[0].upper.angle), float(sim.pendulums[0].lower.angle)) == (1.8, 1.0)
    assert projection.layout == "chained"
    assert "no usable pendulums" in caplog.text


def test_missing_file_name_loads_the_built_in_scene():
    sim = SimulationController()
    assert load_scene(sim, PendulumProjection(), None) == "Classic (built-in)"


def test_scene_layout_reaches_the_projection():
    sim = SimulationController()
    projection = PendulumProjection()
    load_scene(sim, projection, "static_arms.json")
    assert projection.layout == "independent"
    assert sim.config.dynamics_enabled is False


def test_precision_override_applies_to_the_loaded_scene():
    sim = SimulationController()
    load_scene(sim, PendulumProjection(), "classic.json", precision="single")
    assert sim.config.precision == "single"
    assert sim.physics.dtype == np.float32
    sim.step()
    assert np.asarray(sim.pendulums[0].upper.angle).dtype == np.float32


def test_precision_override_is_validated():
    with pytest.raises(ValueError):
        load_scene(SimulationController(), PendulumProjection(), "classic.json", precision="quad")


# ------------------------------------------------------------
# Command line
# ------------------------------------------------------------

def test_parse_args_defaults():
    args = parse_args([])
    assert args.preset == "classic"
    assert args.gravity is None
    assert args.precision is None
    assert args.no_panel is False


@pytest.mark.parametrize("value", ["extended", "double", "single"])
def test_parse_args_precision(value):
    assert parse_args(["--precision", value]).precision == value


def test_parse_args_rejects_unknown_precision():
    with pytest.raises(SystemExit):
        parse_args(["--precision", "half"])


@pytest.mark.parametrize("value, expected", [
    ("Mars", (GRAVITY_PRESETS["Mars"], "Mars")),
    ("3.5", (3.5, "Custom")),
])
def test_parse_args_gravity(value, expected):
    args = parse_args(["--gravity", value, "--no-panel", "--width", "640"])
    assert args.no_panel is True
    assert args.width == 640
    assert resolve_gravity(args.gravity) == expected


# ------------------------------------------------------------
# Control panel dispatch
# ------------------------------------------------------------

def test_panel_queues_callbacks_for_the_host_thread(fake_dpg):
    make_panel()
    names = fake_dpg.names()
    configure = [kw for name, _, kw in fake_dpg.calls if name == "configure_app"]
    assert configure == [{"manual_callback_management": True}]
    assert names.index("configure_app") < names.index("setup_dearpygui")


def test_render_frame_runs_queued_callbacks_before_drawing(fake_dpg):
    panel = make_panel()
    fake_dpg.queue = [(panel._step_once, None, None, None), (panel._reset, None, None, None),
                      (panel._step_once, None, None, None)]
    fake_dpg.calls.clear()
    panel.render_frame()
    assert panel.sim.steps_taken == 1
    names = fake_dpg.names()
    assert names.index("run_callbacks") < names.index("render_dearpygui_frame")


def test_render_frame_with_an_empty_queue(fake_dpg):
    panel = make_panel()
    panel.render_frame()
    assert panel.sim.steps_taken == 0


def test_preset_reload_keeps_the_precision_override(fake_dpg):
    panel = make_panel(precision="single")
    assert panel.sim.config.precision == "single"
    panel.load_template("Butterfly effect")
    assert panel.sim.config.precision == "single"
    assert panel.sim.physics.dtype == np.float32
