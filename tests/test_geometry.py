from __future__ import annotations

import math
import random

import pytest

from pfrs_sim.geometry_utils import Segment, Vec2, clamp, point_to_segment_distance


def test_normalize_gives_unit_length() -> None:
    rng = random.Random(3)
    for _ in range(50):
        v = Vec2(rng.uniform(-500, 500), rng.uniform(-500, 500))
        if v.magnitude() == 0.0:
            continue
        assert math.isclose(v.normalize().magnitude(), 1.0, rel_tol=1e-12)


def test_normalize_zero_is_zero() -> None:
    assert Vec2().normalize() == Vec2(0.0, 0.0)


def test_limit_caps_magnitude_and_keeps_short_vectors() -> None:
    long = Vec2(30.0, 40.0)
    limited = long.limit(1.5)
    assert limited.magnitude() == pytest.approx(1.5)
    assert limited.normalize().x == pytest.approx(0.6)

    short = Vec2(0.3, -0.4)
    assert short.limit(1.5) == short
    assert short.limit(0.5) == short
    assert Vec2().limit(0.0) == Vec2()


def test_operations_return_new_instances() -> None:
    a = Vec2(1.0, 2.0)
    b = Vec2(3.0, -1.0)
    assert a + b == Vec2(4.0, 1.0)
    assert a - b == Vec2(-2.0, 3.0)
    assert a * 2.0 == Vec2(2.0, 4.0)
    assert a.dot(b) == 1.0
    assert a == Vec2(1.0, 2.0)
    with pytest.raises(AttributeError):
        a.x = 5.0  # type: ignore[misc]


def test_segment_distance_projects_and_clamps() -> None:
    seg = Segment(Vec2(0.0, 0.0), Vec2(10.0, 0.0))
    assert seg.distance_to_point(Vec2(5.0, 3.0)) == pytest.approx(3.0)
    # beyond the end the distance is to the endpoint
    assert seg.distance_to_point(Vec2(13.0, 4.0)) == pytest.approx(5.0)
    assert seg.distance_to_point(Vec2(-3.0, -4.0)) == pytest.approx(5.0)
    assert seg.midpoint == Vec2(5.0, 0.0)
    assert seg.length == pytest.approx(10.0)


def test_degenerate_segment_falls_back_to_point_distance() -> None:
    seg = Segment(Vec2(2.0, 2.0), Vec2(2.0, 2.0))
    assert seg.distance_to_point(Vec2(5.0, 6.0)) == pytest.approx(5.0)
    dist, cx, cy = point_to_segment_distance(0.0, 0.0, 1.0, 1.0, 1.0, 1.0)
    assert dist == pytest.approx(math.sqrt(2.0))
    assert (cx, cy) == (1.0, 1.0)


def test_clamp() -> None:
    assert clamp(-1.0, 0.0, 5.0) == 0.0
    assert clamp(7.0, 0.0, 5.0) == 5.0
    assert clamp(2.5, 0.0, 5.0) == 2.5
