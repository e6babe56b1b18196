#!/usr/bin/env python3
"""
Projection of pendulum angles onto screen pixels.
"""
from typing import Tuple

import numpy as np

from .constants import DISPLAY_FILL, SCREEN_HEIGHT, SCREEN_WIDTH
from .data_models import LAYOUTS, Body

ScreenPoint = Tuple[float, float]


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def polar_offset(origin: ScreenPoint, length: float, angle: float) -> ScreenPoint:
    """Point ``length`` pixels from ``origin`` at ``angle`` from straight down (screen y grows down)."""
    with np.errstate(invalid="ignore"):
        return (float(origin[0] + length * np.sin(angle)), float(origin[1] + length * np.cos(angle)))


class PendulumProjection:
    """
    Maps a pair of bodies to screen points.

    The anchor sits at the viewport centre. The fully extended pendulum spans
    ``fill`` of the smaller half-dimension, split between the arms in proportion to
    their physical lengths, so any pair of lengths fits the window.
    """

    def __init__(self, viewport_size=(SCREEN_WIDTH, SCREEN_HEIGHT), fill: float = DISPLAY_FILL,
                 layout: str = "chained"):
        if layout not in LAYOUTS:
            raise ValueError(f"layout must be one of {LAYOUTS}, got {layout!r}")
        self.viewport_size = (int(viewport_size[0]), int(viewport_size[1]))
        self.fill = clamp(fill, 0.05, 1.0)
        self.layout = layout

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (int(w), int(h))

    @property
    def anchor(self) -> ScreenPoint:
        w, h = self.viewport_size
        return (float(w // 2), float(h // 2))

    def display_size(self) -> int:
        w, h = self.viewport_size
        return int(self.fill * min(w // 2, h // 2))

    def arm_lengths(self, a: Body, b: Body) -> Tuple[float, float]:
        """Pixel lengths of both arms."""
        size = self.display_size()
        total_len = a.length + b.length
        return (float(size * (a.length / total_len)), float(size * (b.length / total_len)))

    def project(self, a: Body, b: Body) -> Tuple[ScreenPoint, ScreenPoint, ScreenPoint]:
        """
        Return (anchor, elbow, tip) screen points.

        With the "independent" layout the second arm starts at the anchor instead of at
        the end of the first; the elbow is still the end of the first arm.
        """
        length_a, length_b = self.arm_lengths(a, b)
        anchor = self.anchor
        elbow = polar_offset(anchor, length_a, a.angle)
        origin_b = elbow if self.layout == "chained" else anchor
        tip = polar_offset(origin_b, length_b, b.angle)
        return anchor, elbow, tip
