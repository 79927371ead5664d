from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
import math
import random

from .config import SimConfig
from .geometry_utils import Vec2, clamp
from .sensors import SensorArray
from .world import Obstacle, Wall, World

# Below this speed the heading is kept as is.
HEADING_SPEED_EPSILON = 0.01


@dataclass
class RoverState:
    """Snapshot of the rover pose for rendering and telemetry.

    Attributes
    ----------
    x, y : float
        Center position.
    angle : float
        Heading (radians), from atan2 of the last significant velocity.
    vx, vy : float
        Velocity components.
    target_number : int
        Number of the homebase currently sought.
    """

    x: float
    y: float
    angle: float
    vx: float
    vy: float
    target_number: int


class Rover:
    """Potential-field navigating rover.

    Forces are summed into ``acceleration`` by ``calculate_forces`` and
    integrated by ``update`` as a first-order force-to-velocity model: there
    is no mass and no time step, one call is one tick.
    """

    def __init__(
        self,
        x: float,
        y: float,
        config: SimConfig,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.position = Vec2(x, y)
        self.velocity = Vec2()
        self.acceleration = Vec2()
        self.angle = 0.0
        self.target_number = 1
        self.collision_radius = config.collision_radius
        self.sensors = SensorArray(config.num_sensor_points, config.sensor_range, self.position)

    # ------------------------------------------------------------------
    # State manipulation
    # ------------------------------------------------------------------
    def reset_to(self, x: float, y: float) -> None:
        """Move to (x, y) at rest and restart the homebase cycle."""
        self.position = Vec2(x, y)
        self.velocity = Vec2()
        self.acceleration = Vec2()
        self.target_number = 1
        self.sensors.reposition(self.position)

    def rebuild_sensors(self) -> None:
        """Re-derive the sensor ring from the current range and count."""
        self.sensors = SensorArray(
            self.config.num_sensor_points, self.config.sensor_range, self.position
        )

    def restore(self, position: Vec2) -> None:
        """Roll back to ``position`` and stop."""
        self.position = position
        self.velocity = Vec2()
        self.sensors.follow(position)

    def apply_force(self, force: Vec2) -> None:
        self.acceleration = self.acceleration + force

    def get_state(self) -> RoverState:
        return RoverState(
            x=self.position.x,
            y=self.position.y,
            angle=self.angle,
            vx=self.velocity.x,
            vy=self.velocity.y,
            target_number=self.target_number,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize current rover state to a dict for logging/telemetry."""
        s = self.get_state()
        return {
            "x": s.x,
            "y": s.y,
            "angle": s.angle,
            "vx": s.vx,
            "vy": s.vy,
            "target": s.target_number,
        }

    # ------------------------------------------------------------------
    # Forces
    # ------------------------------------------------------------------
    def calculate_forces(self, world: World) -> bool:
        """Accumulate this tick's forces into ``acceleration``.

        Returns True when the current homebase was reached this tick.
        """
        cfg = self.config
        self.acceleration = Vec2()

        if (
            len(self.sensors) != cfg.num_sensor_points
            or self.sensors.sensor_range != cfg.sensor_range
        ):
            self.rebuild_sensors()
        self.sensors.refresh(world, self.position)

        for detection in self.sensors.detections():
            self.apply_force(self._repulsion(detection.obj, detection.distance))

        reached = False
        target = world.find_homebase(self.target_number)
        if target is not None:
            target_pos = target.center
            if self.position.distance_to(target_pos) < target.radius + self.collision_radius:
                self.target_number = (self.target_number % world.homebase_count) + 1
                reached = True
            else:
                self.apply_force((target_pos - self.position).normalize() * cfg.attractive_force)

        self.apply_force(
            Vec2(
                self.rng.uniform(-cfg.noise_gain, cfg.noise_gain),
                self.rng.uniform(-cfg.noise_gain, cfg.noise_gain),
            )
        )

        if cfg.enable_boundary:
            self.apply_force(self._boundary_force())
        return reached

    def _repulsion(self, obj: Wall | Obstacle, dist: float) -> Vec2:
        cfg = self.config
        normalized = dist / cfg.sensor_range
        magnitude = (1.0 - normalized) * cfg.repulsive_force
        # Walls push from their midpoint, not from the nearest point.
        if isinstance(obj, Wall):
            reference = obj.segment.midpoint
        else:
            reference = obj.center
        return (self.position - reference).normalize() * magnitude

    def _boundary_force(self) -> Vec2:
        cfg = self.config
        margin = cfg.boundary_margin
        gain = cfg.boundary_force / margin
        x, y = self.position.x, self.position.y
        fx = 0.0
        fy = 0.0
        if x < margin:
            fx = (margin - x) * gain
        elif x > cfg.arena_width - margin:
            fx = (cfg.arena_width - margin - x) * gain
        if y < margin:
            fy = (margin - y) * gain
        elif y > cfg.arena_height - margin:
            fy = (cfg.arena_height - margin - y) * gain
        return Vec2(fx, fy)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------
    def update(self) -> None:
        """Integrate one tick and clear the accumulated acceleration."""
        cfg = self.config
        r = self.collision_radius
        self.velocity = (self.velocity + self.acceleration).limit(cfg.robot_speed)
        moved = self.position + self.velocity
        self.position = Vec2(
            clamp(moved.x, r, cfg.arena_width - r),
            clamp(moved.y, r, cfg.arena_height - r),
        )
        if self.velocity.magnitude() > HEADING_SPEED_EPSILON:
            self.angle = math.atan2(self.velocity.y, self.velocity.x)
        self.sensors.follow(self.position)
        self.acceleration = Vec2()

    # ------------------------------------------------------------------
    # Collision
    # ------------------------------------------------------------------
    def detect_collisions(self, world: World) -> bool:
        """True if the rover overlaps a wall or an obstacle. Does not mutate."""
        half_wall = self.config.wall_thickness / 2.0
        for obj in world:
            if isinstance(obj, Wall):
                if obj.distance_to_point(self.position) < self.collision_radius + half_wall:
                    return True
            elif isinstance(obj, Obstacle):
                if obj.distance_to_point(self.position) < self.collision_radius + obj.radius:
                    return True
        return False
