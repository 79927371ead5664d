"""
Geometry utilities for the potential-field rover simulator.

Provides the immutable 2D vector type, wall segments with point-segment
distance, and the scalar helpers used by sensing, force accumulation and
collision checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math


# ---------------------------------------------------------------------------
# Vector type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Vec2:
    """Immutable 2D vector. Every operation returns a new instance."""

    x: float = 0.0
    y: float = 0.0

    def add(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def subtract(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def scale(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> "Vec2":
        """Unit vector in the same direction; the zero vector maps to itself."""
        mag = self.magnitude()
        if mag == 0.0:
            return Vec2()
        return self.scale(1.0 / mag)

    def limit(self, max_length: float) -> "Vec2":
        """Return the vector rescaled to ``max_length`` if it is longer."""
        mag = self.magnitude()
        if mag > max_length:
            return self.normalize().scale(max_length)
        return Vec2(self.x, self.y)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def distance_to(self, other: "Vec2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __add__(self, other: "Vec2") -> "Vec2":
        return self.add(other)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return self.subtract(other)

    def __mul__(self, scalar: float) -> "Vec2":
        return self.scale(scalar)

    __rmul__ = __mul__


# ---------------------------------------------------------------------------
# Point-to-segment distance
# ---------------------------------------------------------------------------


def point_to_segment_distance(
    px: float,
    py: float,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
) -> Tuple[float, float, float]:
    """
    Distance from point to line segment, and closest point on segment.

    The projection parameter is clamped to [0, 1]. A zero-length segment
    degrades to point-to-point distance.

    Returns
    -------
    (distance, closest_x, closest_y)
    """
    dx = x2 - x1
    dy = y2 - y1
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(px - x1, py - y1), x1, y1
    t = ((px - x1) * dx + (py - y1) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    cx = x1 + t * dx
    cy = y1 + t * dy
    return math.hypot(px - cx, py - cy), cx, cy


@dataclass(frozen=True)
class Segment:
    """Line segment between two points."""

    start: Vec2
    end: Vec2

    def distance_to_point(self, point: Vec2) -> float:
        dist, _, _ = point_to_segment_distance(
            point.x, point.y, self.start.x, self.start.y, self.end.x, self.end.y
        )
        return dist

    @property
    def midpoint(self) -> Vec2:
        return Vec2(
            self.start.x + (self.end.x - self.start.x) / 2.0,
            self.start.y + (self.end.y - self.start.y) / 2.0,
        )

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    def translated(self, dx: float, dy: float) -> "Segment":
        offset = Vec2(dx, dy)
        return Segment(self.start + offset, self.end + offset)


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))
