"""
Top-level package for the potential-field rover simulator.

Components:
- geometry_utils: immutable Vec2, wall segments, point-segment distance
- sensors: ring of proximity sensor points and their detections
- rover: force accumulation, integration and collision test
- world: object registry (walls, obstacles, homebases, start marker)
- simulation: run state machine and the tick with collision rollback
- persistence: JSON world documents
- config: tunables and YAML loading
- render: pygame-based read-only visualization
"""

from .config import SimConfig
from .errors import EditingStateError, SchemaError, StructuralParseError, WorldLoadError
from .geometry_utils import Segment, Vec2
from .rover import Rover, RoverState
from .sensors import Detection, SensorArray, SensorPoint
from .simulation import SimState, Simulation, TickResult
from .world import Homebase, ObjectType, Obstacle, Start, Wall, World

__all__ = [
    "SimConfig",
    "EditingStateError",
    "SchemaError",
    "StructuralParseError",
    "WorldLoadError",
    "Segment",
    "Vec2",
    "Rover",
    "RoverState",
    "Detection",
    "SensorArray",
    "SensorPoint",
    "SimState",
    "Simulation",
    "TickResult",
    "Homebase",
    "ObjectType",
    "Obstacle",
    "Start",
    "Wall",
    "World",
]
