#!/usr/bin/env python3
"""
Shared constants for the Double Pendulum simulator.

Lengths are in meters, masses in kilograms, angles in radians measured from the
downward vertical, and time in seconds of simulation time.
"""

# Surface gravity (m/s^2) per body, https://nssdc.gsfc.nasa.gov/planetary/
GRAVITY_PRESETS = {
    "Sun": 274.0,
    "Mercury": 3.70,
    "Venus": 8.87,
    "Earth": 9.78,
    "Moon": 1.625,
    "Mars": 3.73,
    "Jupiter": 23.12,
    "Saturn": 8.96,
    "Uranus": 8.69,
    "Neptune": 11.00,
    "Pluto": 0.62,
}
DEFAULT_GRAVITY_BODY = "Earth"
DEFAULT_GRAVITY = GRAVITY_PRESETS[DEFAULT_GRAVITY_BODY]

# Integration
DT = 0.01  # fixed simulation time per RK4 step
DEFAULT_PRECISION = "extended"

# Trails
TRAIL_SIZE = 1024

# Rendering (viewport)
SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 800
DISPLAY_FILL = 0.8  # fraction of the half-viewport the fully extended pendulum spans
TARGET_FPS = 100  # matches a 10 ms frame delay
BACKGROUND_COLOR = (17, 17, 27, 255)
HUD_TEXT_COLOR = (205, 214, 244)
BOB_RADIUS = 6

# Default arm and trail colours (RGBA)
UPPER_ARM_COLOR = (243, 139, 168, 255)
LOWER_ARM_COLOR = (166, 227, 161, 255)
TRAIL_COLOR = (203, 166, 247, 255)
DEFAULT_COLOR = (200, 200, 255, 255)

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
