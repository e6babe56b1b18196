#!/usr/bin/env python3
"""
Fixed-capacity ring buffer of screen-space points for drawing pendulum trails.

The slots are allocated once; appends overwrite the oldest point after the ring fills,
so the renderer always sees at most ``capacity`` points in insertion order.
"""
from typing import Iterator, List, Optional, Tuple

from .constants import TRAIL_COLOR, TRAIL_SIZE
from .data_models import Color, coerce_color

Point = Tuple[float, float]


class TrailBuffer:
    """
    Ring of the most recent tip positions.

    Attributes:
    - capacity: Number of slots
    - write_index: Next slot to overwrite, in [0, capacity)
    - count: Number of valid points, saturating at capacity
    - color: RGBA colour used to draw the points
    """

    def __init__(self, capacity: int = TRAIL_SIZE, color: Color = TRAIL_COLOR):
        if int(capacity) <= 0:
            raise ValueError(f"Trail capacity must be positive, got {capacity!r}")
        self.capacity = int(capacity)
        self.color = coerce_color(color, TRAIL_COLOR)
        self.write_index = 0
        self.count = 0
        self._points: List[Optional[Point]] = [None] * self.capacity

    def append(self, point: Point) -> None:
        """Store ``point`` in the next slot, dropping the oldest point once full."""
        self._points[self.write_index] = (point[0], point[1])
        self.write_index = (self.write_index + 1) % self.capacity
        self.count = min(self.count + 1, self.capacity)

    def _start(self) -> int:
        return (self.write_index - self.count) % self.capacity

    def __iter__(self) -> Iterator[Point]:
        start = self._start()
        for i in range(self.count):
            yield self._points[(start + i) % self.capacity]

    def __len__(self) -> int:
        return self.count

    def snapshot(self) -> List[Point]:
        """Valid points from oldest to newest."""
        start = self._start()
        end = start + self.count
        if end <= self.capacity:
            return self._points[start:end]
        return self._points[start:] + self._points[:end - self.capacity]

    def clear(self) -> None:
        self.write_index = 0
        self.count = 0
        self._points = [None] * self.capacity
