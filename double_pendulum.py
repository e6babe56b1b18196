#!/usr/bin/env python3
"""
Double Pendulum application entry point and renderer/control-panel coordination.

What this module does
- Runs a single host loop that polls events, advances the simulation by one fixed RK4
  step, records the tip of every pendulum in its trail and draws the frame with Pygame.
- Optionally shows a Dear PyGui control panel for switching presets and gravity, pausing,
  stepping, resetting, and watching the energy drift; the panel is pumped one frame at a
  time from the same loop.
- Loads the starting scene from a JSON preset (presets/*.json) or the built-in classic one.

Threading model
- Everything runs on the main thread. Dear PyGui would normally dispatch widget callbacks
  from its own worker thread; the panel turns that off (manual callback management) and
  drains the callback queue from the host loop once per frame, so a button press or a
  preset reload lands between steps and an integration step is never left half-applied.

Units and conventions
- Lengths in meters, angles in radians from the downward vertical, time in seconds of
  simulation time. One frame advances the simulation by the preset's time_step.
- Colors are RGBA tuples in 0..255.

Running
1) Install dependencies: `pip install pygame dearpygui numpy`
2) Run this module: `python double_pendulum.py [--preset butterfly] [--gravity Mars]`

Keys (viewport): Space pause/play, S step, R reset, C clear trails, T toggle trails, Esc quit.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from pendulum_sim.camera import PendulumProjection
from pendulum_sim.constants import (
    BACKGROUND_COLOR,
    BOB_RADIUS,
    GRAVITY_PRESETS,
    HUD_TEXT_COLOR,
    SAFE_COORD_LIMIT,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    TARGET_FPS,
)
from pendulum_sim.presets_loader import (
    PRESETS_DIR,
    default_preset,
    find_preset,
    list_presets,
    load_preset,
    resolve_gravity,
)
from pendulum_sim.simulation import FrameStats, SimulationController

logger = logging.getLogger("double_pendulum")


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


# ============================================================
# Scene loading
# ============================================================

def load_scene(sim: SimulationController, projection: PendulumProjection, file_name: Optional[str],
               precision: Optional[str] = None, directory: str = PRESETS_DIR) -> str:
    """
    Replace the running scene with a preset; falls back to the built-in one.

    ``precision`` overrides the preset's own setting and is validated like any other
    configuration value.
    """
    if file_name:
        config, pendulums, display_name = load_preset(file_name, directory)
        if not pendulums:
            logger.warning("Preset %s has no usable pendulums; using the built-in scene", file_name)
            config, pendulums, display_name = default_preset()
    else:
        config, pendulums, display_name = default_preset()
    if precision is not None:
        config = dataclasses.replace(config, precision=precision)
    sim.replace_pendulums(pendulums, config)
    projection.layout = config.layout
    return display_name


# ============================================================
# Pygame Renderer
# ============================================================

class PygameRenderer:
    """
    Pygame viewport: draws arms, bobs, trails and the HUD, and handles window input.
    It reads simulation state but never changes the bodies itself.
    """
    def __init__(self, sim: SimulationController, projection: PendulumProjection, scene_name: str):
        self.sim = sim
        self.projection = projection
        self.scene_name = scene_name
        self.surface = None
        self.clock = None
        self.running = True
        self.fps = 0.0

    def open(self):
        pygame.init()
        pygame.display.set_caption("Double Pendulum")
        w, h = self.projection.viewport_size
        self.surface = pygame.display.set_mode((w, h), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

    def close(self):
        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.projection.set_viewport_size(event.w, event.h)
                self.sim.clear_trails()

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.sim.toggle_play()
                elif event.key == pygame.K_s:
                    self.sim.step_once()
                elif event.key == pygame.K_r:
                    self.sim.reset()
                elif event.key == pygame.K_c:
                    self.sim.clear_trails()
                elif event.key == pygame.K_t:
                    self.sim.set_trail_enabled(not self.sim.config.trail_enabled)

    def draw(self, segments):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        # Trails first so the arms stay on top
        if self.sim.config.trail_enabled:
            for p in self.sim.pendulums:
                if p.trail is None:
                    continue
                for pt in p.trail:
                    sp = _safe_point(pt)
                    if sp:
                        surf.set_at(sp, p.trail.color)

        for p, (anchor, elbow, tip) in zip(self.sim.pendulums, segments):
            anchor_s = _safe_point(anchor)
            elbow_s = _safe_point(elbow)
            tip_s = _safe_point(tip)
            origin_b = elbow_s if self.projection.layout == "chained" else anchor_s
            if anchor_s and elbow_s:
                pygame.draw.aaline(surf, p.upper.color, anchor_s, elbow_s)
            if origin_b and tip_s:
                pygame.draw.aaline(surf, p.lower.color, origin_b, tip_s)
            for body, pos in ((p.upper, elbow_s), (p.lower, tip_s)):
                if pos:
                    gfxdraw.filled_circle(surf, pos[0], pos[1], BOB_RADIUS, body.color)
                    gfxdraw.aacircle(surf, pos[0], pos[1], BOB_RADIUS, body.color)

        # HUD text
        state = "Playing" if self.sim.playing else "Paused"
        draw_text(surf, "Space: Pause/Play | S: Step | R: Reset | C: Clear trails | T: Trails | Esc: Quit",
                  10, 10, HUD_TEXT_COLOR)
        draw_text(surf, f"{self.scene_name}  g={self.sim.gravity:.2f} m/s^2 ({self.sim.config.gravity_name})"
                        f"  [{state}]  FPS: {self.fps:.0f}", 10, 30, HUD_TEXT_COLOR)

        pygame.display.flip()


_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (OSError, pygame.error):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def _safe_point(pt):
    """Integer pixel for drawing, or None for non-finite or far off-screen coordinates."""
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


# ============================================================
# Dear PyGui Control Panel
# ============================================================

class ControlPanel:
    """
    Dear PyGui interface: presets, gravity, simulation controls and energy readout.
    """
    SYNC_EVERY = 6  # frames between readout refreshes

    def __init__(self, sim: SimulationController, renderer: PygameRenderer, precision: Optional[str] = None):
        self.sim = sim
        self.renderer = renderer
        self.precision = precision  # command-line override, reapplied on every preset load
        self.status_msg_id = None
        self.energy_text_id = None
        self.custom_gravity_id = None
        self._template_map = {}
        self._frames = 0
        self._build_ui()

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Double Pendulum - Controls', width=440, height=420)

        with dpg.window(label="Controls", width=420, height=400, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                self._template_map = {display: fn for fn, display in list_presets()}
                preset_items = list(self._template_map.keys()) or ["Classic (built-in)"]
                dpg.add_combo(preset_items, default_value=self.renderer.scene_name
                              if self.renderer.scene_name in preset_items else preset_items[0],
                              width=220, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_template(dpg.get_value("preset_combo")))

            dpg.add_separator()

            dpg.add_text("Gravity")
            with dpg.group(horizontal=True):
                dpg.add_combo(list(GRAVITY_PRESETS.keys()), default_value=self.sim.config.gravity_name
                              if self.sim.config.gravity_name in GRAVITY_PRESETS else "Earth",
                              width=150, callback=lambda s, a, u: self._set_gravity_preset(a), tag="gravity_combo")
                self.custom_gravity_id = dpg.add_input_text(label="m/s^2", default_value=f"{self.sim.gravity:.3f}",
                                                            width=100)
                dpg.add_button(label="Apply", callback=self._apply_custom_gravity)

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_button(label="Reset", callback=self._reset)
            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="Trails", default_value=self.sim.config.trail_enabled,
                                 callback=self._toggle_trails, tag="trail_checkbox")
                dpg.add_button(label="Clear Trails", callback=self._clear_trails)

            dpg.add_separator()

            dpg.add_text("Energy (U + K)")
            self.energy_text_id = dpg.add_text("")
            self.status_msg_id = dpg.add_text("")

        # Callbacks are queued and run from render_frame on the host thread
        dpg.configure_app(manual_callback_management=True)
        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    def is_running(self) -> bool:
        return dpg.is_dearpygui_running()

    def render_frame(self):
        dpg.run_callbacks(dpg.get_callback_queue())
        self._frames += 1
        if self._frames % self.SYNC_EVERY == 0:
            self._sync_ui_with_sim()
        dpg.render_dearpygui_frame()

    def close(self):
        dpg.destroy_context()

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _set_gravity_preset(self, name):
        try:
            g, display = resolve_gravity(name)
        except ValueError as exc:
            self._set_error(str(exc))
            return
        self.sim.set_gravity(g, display)
        dpg.set_value(self.custom_gravity_id, f"{g:.3f}")
        self._set_status(f"Gravity: {display} ({g:.3f} m/s^2)")

    def _apply_custom_gravity(self):
        g = try_float(dpg.get_value(self.custom_gravity_id))
        if g is None:
            self._set_error("Invalid gravity value.")
            return
        self.sim.set_gravity(g)
        self._set_status(f"Gravity: {g:.3f} m/s^2")

    def _toggle_play(self):
        state = "Playing" if self.sim.toggle_play() else "Paused"
        self._set_status(f"Simulation {state}.")

    def _step_once(self):
        self.sim.step_once()
        self._set_status("Stepped once.")

    def _reset(self):
        self.sim.reset()
        self._set_status("Scene reset.")

    def _toggle_trails(self, sender, value, user_data=None):
        self.sim.set_trail_enabled(bool(value))
        self._set_status(f"Trails {'ON' if value else 'OFF'}.")

    def _clear_trails(self):
        self.sim.clear_trails()
        self._set_status("Trails cleared.")

    def load_template(self, name: str):
        fn = self._template_map.get(name.strip())
        self.renderer.scene_name = load_scene(self.sim, self.renderer.projection, fn, self.precision)
        dpg.set_value("trail_checkbox", self.sim.config.trail_enabled)
        dpg.set_value(self.custom_gravity_id, f"{self.sim.gravity:.3f}")
        if self.sim.config.gravity_name in GRAVITY_PRESETS:
            dpg.set_value("gravity_combo", self.sim.config.gravity_name)
        self._set_status(f"Loaded preset: {self.renderer.scene_name}")

    def _sync_ui_with_sim(self):
        """Refresh the energy readout."""
        lines: List[str] = []
        for row in self.sim.energy_report():
            lines.append(f"{row['name']}: E={row['energy']:+.5f} J  drift={row['relative_drift']:+.2e}")
        lines.append(f"steps: {self.sim.steps_taken}")
        dpg.set_value(self.energy_text_id, "\n".join(lines))


# ============================================================
# Application Entry
# ============================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Double pendulum simulator")
    parser.add_argument("--preset", default="classic",
                        help="Preset file, file stem or display name from presets/")
    parser.add_argument("--gravity", default=None,
                        help="Override gravity: a body name (e.g. Mars) or a value in m/s^2")
    parser.add_argument("--precision", choices=("extended", "double", "single"), default=None,
                        help="Override the preset's floating-point precision")
    parser.add_argument("--width", type=int, default=SCREEN_WIDTH)
    parser.add_argument("--height", type=int, default=SCREEN_HEIGHT)
    parser.add_argument("--no-panel", action="store_true", help="Do not open the Dear PyGui control panel")
    parser.add_argument("--log-level", default="INFO",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    sim = SimulationController()
    projection = PendulumProjection(viewport_size=(args.width, args.height))

    file_name = find_preset(args.preset)
    if file_name is None:
        logger.warning("Preset %r not found; using the built-in scene", args.preset)
    scene_name = load_scene(sim, projection, file_name, args.precision)

    if args.gravity is not None:
        try:
            g, g_name = resolve_gravity(args.gravity)
        except ValueError as exc:
            logger.error("%s", exc)
            return 2
        sim.set_gravity(g, g_name)

    renderer = PygameRenderer(sim, projection, scene_name)
    renderer.open()
    panel = None if args.no_panel else ControlPanel(sim, renderer, args.precision)
    stats = FrameStats()

    try:
        while renderer.running:
            renderer.handle_events()
            if not renderer.running:
                break

            sim.advance()
            segments = sim.sample_trails(projection)
            renderer.draw(segments)

            fps = stats.tick()
            if fps is not None:
                renderer.fps = fps

            if panel is not None:
                if not panel.is_running():
                    break
                panel.render_frame()

            renderer.clock.tick(TARGET_FPS)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        if panel is not None:
            panel.close()
        renderer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
