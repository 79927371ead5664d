from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Union
import math

import numpy as np

from .geometry_utils import Vec2
from .world import Obstacle, Wall, World


@dataclass
class Detection:
    """One object seen by one sensor point during the current tick."""

    obj: Union[Wall, Obstacle]
    distance: float


@dataclass
class SensorPoint:
    """Proximity probe at a fixed offset from the rover center."""

    position: Vec2
    detections: List[Detection] = field(default_factory=list)

    def update(self, position: Vec2) -> None:
        """Move the probe and drop last tick's detections."""
        self.position = position
        self.detections = []

    def detect(self, obj: Union[Wall, Obstacle], sensor_range: float) -> bool:
        """Record ``obj`` if it lies strictly within ``sensor_range``."""
        dist = obj.distance_to_point(self.position)
        if dist < sensor_range:
            self.detections.append(Detection(obj=obj, distance=dist))
            return True
        return False


class SensorArray:
    """Ring of ``num_points`` sensors at angles 2*pi*i/N around the rover.

    The ring is fixed in the world frame: it follows the rover center but
    does not rotate with the heading.
    """

    def __init__(self, num_points: int, sensor_range: float, center: Vec2) -> None:
        self.num_points = int(num_points)
        self.sensor_range = float(sensor_range)
        angles = np.arange(self.num_points) * (2.0 * math.pi / max(self.num_points, 1))
        self._offsets = np.stack([np.cos(angles), np.sin(angles)], axis=1) * self.sensor_range
        self.points: List[SensorPoint] = [SensorPoint(position=p) for p in self._positions(center)]

    def _positions(self, center: Vec2) -> List[Vec2]:
        return [Vec2(center.x + float(dx), center.y + float(dy)) for dx, dy in self._offsets]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SensorPoint]:
        return iter(self.points)

    def reposition(self, center: Vec2) -> None:
        """Move every sensor to ``center`` + its offset and clear detections."""
        for point, position in zip(self.points, self._positions(center)):
            point.update(position)

    def follow(self, center: Vec2) -> None:
        """Move the ring to ``center`` keeping this tick's detections."""
        for point, position in zip(self.points, self._positions(center)):
            point.position = position

    def refresh(self, world: World, center: Vec2) -> None:
        """Reposition the ring and rebuild detections against ``world``."""
        self.reposition(center)
        for point in self.points:
            for obj in world.obstacles_for_sensing():
                point.detect(obj, self.sensor_range)

    def detections(self) -> Iterator[Detection]:
        for point in self.points:
            yield from point.detections

    def detection_lists(self) -> List[List[Detection]]:
        return [list(point.detections) for point in self.points]
