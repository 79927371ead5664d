from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml


# Persisted (camelCase) name -> SimConfig field. The homebase counter is
# derived from the world and deliberately absent.
DOCUMENT_FIELDS: Dict[str, str] = {
    "robotSpeed": "robot_speed",
    "repulsiveForce": "repulsive_force",
    "attractiveForce": "attractive_force",
    "noiseGain": "noise_gain",
    "sensorRange": "sensor_range",
    "boundaryForce": "boundary_force",
    "enableBoundary": "enable_boundary",
}

# Fields whose change invalidates the rover's sensor ring geometry.
SENSOR_FIELDS = frozenset({"sensor_range", "num_sensor_points"})


@dataclass
class SimConfig:
    """Tunable parameters shared by the rover, the sensors and the world.

    Attributes
    ----------
    robot_size : float
        Rover diameter; the collision radius is half of it.
    robot_speed : float
        Top speed, applied as a velocity magnitude limit each tick.
    repulsive_force : float
        Repulsion gain at zero distance from a detected object.
    attractive_force : float
        Attraction gain toward the current homebase.
    noise_gain : float
        Half-width of the uniform noise added to each force component.
    sensor_range : float
        Radial offset of the sensor points and their detection range.
    boundary_force : float
        Boundary avoidance gain at the arena edge.
    num_sensor_points : int
        Number of sensor points in the ring.
    enable_boundary : bool
        Whether the soft boundary avoidance force is applied.
    wall_thickness : float
        Thickness used for wall collisions.
    min_wall_length : float
        Shortest wall accepted by ``Simulation.place_wall``.
    arena_width, arena_height : float
        Arena extent; the rover is clamped to stay inside.
    boundary_margin : float
        Distance from an edge at which boundary avoidance starts.
    """

    robot_size: float = 20.0
    robot_speed: float = 1.5
    repulsive_force: float = 150.0
    attractive_force: float = 120.0
    noise_gain: float = 2.0
    sensor_range: float = 40.0
    boundary_force: float = 100.0
    num_sensor_points: int = 24
    enable_boundary: bool = True
    wall_thickness: float = 10.0
    min_wall_length: float = 40.0
    arena_width: float = 800.0
    arena_height: float = 600.0
    boundary_margin: float = 50.0

    @property
    def collision_radius(self) -> float:
        return self.robot_size / 2.0

    @staticmethod
    def from_yaml(path: Path | str) -> "SimConfig":
        """Read the ``sim`` section of a YAML config file."""
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        return load_config(data.get("sim", {}))

    def field_names(self) -> frozenset:
        return frozenset(f.name for f in fields(self))

    def to_document(self) -> Dict[str, Any]:
        """Persisted subset of the configuration, keyed by document names."""
        return {doc_name: getattr(self, name) for doc_name, name in DOCUMENT_FIELDS.items()}

    def apply_document(self, data: Dict[str, Any]) -> None:
        """Copy known document fields onto this config; others are ignored."""
        for doc_name, name in DOCUMENT_FIELDS.items():
            if doc_name in data:
                setattr(self, name, _coerce(name, data[doc_name]))


def _coerce(name: str, value: Any) -> Any:
    if name == "enable_boundary":
        return bool(value)
    if name == "num_sensor_points":
        return int(value)
    return float(value)


def load_config(raw: Dict[str, Any]) -> SimConfig:
    """Build a SimConfig from a plain dict. Unknown keys raise TypeError."""
    values = {k: _coerce(k, v) for k, v in raw.items()}
    return SimConfig(**values)
