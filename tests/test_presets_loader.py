"""
Tests for loading scene presets from JSON.
"""
import json
import logging

import pytest

from pendulum_sim.constants import GRAVITY_PRESETS, TRAIL_COLOR
from pendulum_sim.presets_loader import (
    default_preset,
    find_preset,
    list_presets,
    load_preset,
    parse_preset,
    resolve_gravity,
)
from pendulum_sim.simulation import SimulationController


def write_preset(directory, name, data):
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


ARM = {"length": 1.0, "mass": 1.0, "angle": 0.5, "angular_velocity": 0.1}


def test_shipped_presets_are_listed():
    names = dict(list_presets())
    assert names["classic.json"] == "Classic double pendulum"
    assert "butterfly.json" in names
    assert "static_arms.json" in names


def test_classic_preset():
    config, pendulums, name = load_preset("classic.json")
    assert name == "Classic double pendulum"
    assert config.gravitational_accel == GRAVITY_PRESETS["Earth"]
    assert config.time_step == 0.01
    assert config.precision == "extended"
    assert len(pendulums) == 1
    p = pendulums[0]
    assert (p.upper.angle, p.lower.angle) == (1.8, 1.0)
    assert p.trail.capacity == 1024


def test_butterfly_preset_starts_pendulums_apart():
    _, pendulums, _ = load_preset("butterfly.json")
    assert [p.upper.angle for p in pendulums] == [1.80, 1.81]
    assert pendulums[0].trail.color != pendulums[1].trail.color


def test_static_preset():
    config, pendulums, _ = load_preset("static_arms.json")
    assert config.dynamics_enabled is False
    assert config.trail_enabled is False
    assert config.layout == "independent"
    assert config.precision == "single"
    assert pendulums[0].trail is None


def test_custom_directory_and_defaults(tmp_path):
    write_preset(tmp_path, "mine.json", {"pendulums": [{"arms": [ARM, ARM]}]})
    assert list_presets(str(tmp_path)) == [("mine.json", "mine")]
    config, pendulums, name = load_preset("mine.json", str(tmp_path))
    assert name == "mine"
    assert config.layout == "chained"
    assert pendulums[0].name == "Pendulum 1"
    assert pendulums[0].upper.name == "Pendulum 1.1"
    assert pendulums[0].trail.color == TRAIL_COLOR


def test_non_json_files_are_ignored(tmp_path):
    (tmp_path / "notes.txt").write_text("hello")
    assert list_presets(str(tmp_path)) == []
    assert list_presets(str(tmp_path / "missing")) == []


def test_malformed_pendulums_are_skipped(caplog):
    data = {
        "pendulums": [
            {"name": "ok", "arms": [ARM, ARM]},
            {"name": "one arm", "arms": [ARM]},
            {"name": "no mass", "arms": [{"length": 1.0}, ARM]},
            {"name": "negative", "arms": [dict(ARM, length=-1.0), ARM]},
            "not an object",
        ]
    }
    with caplog.at_level(logging.WARNING):
        _, pendulums = parse_preset(data, "test")
    assert [p.name for p in pendulums] == ["ok"]
    assert caplog.text.count("skipping pendulum") == 4


def test_bad_settings_fall_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        config, _ = parse_preset({"gravity": "Vulcan", "time_step": -1})
    assert config.gravitational_accel == GRAVITY_PRESETS["Earth"]
    assert config.time_step == 0.01
    assert "Vulcan" in caplog.text


def test_flags_must_be_json_booleans(caplog):
    data = {"dynamics": "false", "trail": "no", "pendulums": [{"arms": [ARM, ARM]}]}
    with caplog.at_level(logging.WARNING):
        config, pendulums = parse_preset(data, "strings.json")
    assert config.dynamics_enabled is True
    assert config.trail_enabled is True
    assert "'dynamics' must be true or false" in caplog.text
    assert "'trail' must be true or false" in caplog.text
    assert pendulums[0].trail is not None


@pytest.mark.parametrize("flag", [0, 1, None, "true", [False]])
def test_non_boolean_flag_keeps_the_default(flag):
    config, _ = parse_preset({"dynamics": flag})
    assert config.dynamics_enabled is True


def test_real_booleans_are_honoured(caplog):
    with caplog.at_level(logging.WARNING):
        config, _ = parse_preset({"dynamics": False, "trail": False})
    assert config.dynamics_enabled is False
    assert config.trail_enabled is False
    assert caplog.text == ""


def test_trail_colour_kept_while_trails_are_off():
    data = {"trail": False, "pendulums": [{"trail_color": [10, 20, 30], "arms": [ARM, ARM]}]}
    config, pendulums = parse_preset(data)
    assert pendulums[0].trail is None
    assert pendulums[0].trail_color == (10, 20, 30, 255)

    sim = SimulationController(config)
    sim.replace_pendulums(pendulums)
    sim.set_trail_enabled(True)
    assert sim.pendulums[0].trail.color == (10, 20, 30, 255)


def test_unreadable_file_gives_empty_scene(tmp_path, caplog):
    (tmp_path / "broken.json").write_text("{not json")
    with caplog.at_level(logging.WARNING):
        config, pendulums, name = load_preset("broken.json", str(tmp_path))
    assert pendulums == []
    assert name == "broken"
    assert config.time_step == 0.01


@pytest.mark.parametrize("value, expected", [
    ("Mars", (3.73, "Mars")),
    ("  jupiter ", (23.12, "Jupiter")),
    (1.0, (1.0, "Custom")),
    ("12.5", (12.5, "Custom")),
    ("Vulcan", None),
])
def test_resolve_gravity(value, expected):
    if expected is None:
        with pytest.raises(ValueError):
            resolve_gravity(value)
    else:
        assert resolve_gravity(value) == expected


def test_resolve_gravity_rejects_booleans():
    with pytest.raises(ValueError):
        resolve_gravity(True)


def test_find_preset_by_stem_file_or_display_name():
    assert find_preset("classic") == "classic.json"
    assert find_preset("Butterfly.json") == "butterfly.json"
    assert find_preset("butterfly effect") == "butterfly.json"
    assert find_preset("nope") is None


def test_default_preset_matches_the_classic_scene():
    config, pendulums, name = default_preset()
    assert name == "Classic (built-in)"
    assert config.gravitational_accel == 9.78
    assert (pendulums[0].upper.angle, pendulums[0].lower.angle) == (1.8, 1.0)
