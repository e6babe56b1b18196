"""
Tests for the fixed-capacity trail ring buffer.
"""
import pytest

from pendulum_sim.constants import TRAIL_COLOR, TRAIL_SIZE
from pendulum_sim.trail import TrailBuffer


def points(n, start=0):
    return [(float(i), float(-i)) for i in range(start, start + n)]


def test_new_buffer_is_empty():
    trail = TrailBuffer(8)
    assert len(trail) == 0
    assert trail.snapshot() == []
    assert list(trail) == []
    assert trail.write_index == 0


def test_defaults():
    trail = TrailBuffer()
    assert trail.capacity == TRAIL_SIZE
    assert trail.color == TRAIL_COLOR


@pytest.mark.parametrize("m", [1, 3, 7])
def test_below_capacity_keeps_every_point_in_order(m):
    trail = TrailBuffer(8)
    pts = points(m)
    for p in pts:
        trail.append(p)
    assert trail.snapshot() == pts
    assert len(trail) == m
    assert trail.write_index == m


@pytest.mark.parametrize("k", [0, 1, 5, 8, 13, 100])
def test_over_capacity_keeps_the_last_capacity_points(k):
    capacity = 8
    trail = TrailBuffer(capacity)
    pts = points(capacity + k)
    for p in pts:
        trail.append(p)
    assert trail.snapshot() == pts[-capacity:]
    assert list(trail) == pts[-capacity:]
    assert len(trail) == capacity
    assert trail.write_index == (capacity + k) % capacity


def test_each_append_after_saturation_drops_the_oldest():
    trail = TrailBuffer(3)
    for p in points(3):
        trail.append(p)
    trail.append((99.0, 99.0))
    assert trail.snapshot() == [(1.0, -1.0), (2.0, -2.0), (99.0, 99.0)]


def test_snapshot_does_not_mutate():
    trail = TrailBuffer(4)
    for p in points(6):
        trail.append(p)
    first = trail.snapshot()
    first.append((0.0, 0.0))
    assert trail.snapshot() == points(4, start=2)
    assert len(trail) == 4


def test_capacity_one():
    trail = TrailBuffer(1)
    for p in points(5):
        trail.append(p)
    assert trail.snapshot() == [(4.0, -4.0)]


def test_clear_empties_the_ring():
    trail = TrailBuffer(4)
    for p in points(6):
        trail.append(p)
    trail.clear()
    assert trail.snapshot() == []
    trail.append((1.0, 2.0))
    assert trail.snapshot() == [(1.0, 2.0)]


def test_points_are_stored_as_pairs():
    trail = TrailBuffer(2)
    trail.append([3.5, 4.5])
    assert trail.snapshot() == [(3.5, 4.5)]


@pytest.mark.parametrize("capacity", [0, -1])
def test_capacity_must_be_positive(capacity):
    with pytest.raises(ValueError):
        TrailBuffer(capacity)
