from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import random

from .config import SENSOR_FIELDS, SimConfig
from .errors import EditingStateError, WorldLoadError
from .geometry_utils import Vec2
from .persistence import Source, decode_document, dumps, load_document, save_world, serialize
from .rover import Rover, RoverState
from .sensors import Detection
from .world import START_RADIUS, Homebase, Obstacle, Start, Wall, World, WorldObject


class SimState(str, Enum):
    EDITING = "EDITING"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


@dataclass
class TickResult:
    """What a single ``Simulation.tick`` did."""

    advanced: bool = False
    collided: bool = False
    target_reached: bool = False


class Simulation:
    """Owns the world, the rover and the run state; advances one tick at a time.

    An external frame loop calls ``tick`` once per frame whatever the state
    and reads the rover pose, sensor detections and objects to draw them.
    Editing calls are only accepted in ``SimState.EDITING``.

    Parameters
    ----------
    config : SimConfig, optional
        Tunables; shared by reference with the rover so changes apply on the
        next tick.
    rng : random.Random, optional
        Source for the motion noise. Pass a seeded instance for reproducible
        trajectories.
    telemetry : TelemetryLogger, optional
        Receives one record per notable event (state change, collision, ...).
    """

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        rng: Optional[random.Random] = None,
        telemetry: Optional[Any] = None,
    ) -> None:
        self.config = config if config is not None else SimConfig()
        self.rng = rng if rng is not None else random.Random()
        self.telemetry = telemetry
        self.world = World()
        self.rover: Optional[Rover] = None
        self.state = SimState.EDITING
        self.tick_count = 0
        self.last_load_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def objects(self) -> Tuple[WorldObject, ...]:
        return tuple(self.world.objects)

    def rover_state(self) -> Optional[RoverState]:
        return self.rover.get_state() if self.rover is not None else None

    def sensor_detections(self) -> List[List[Detection]]:
        """Detections per sensor point from the last force calculation."""
        if self.rover is None:
            return []
        return self.rover.sensors.detection_lists()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def set_state(self, state: Union[SimState, str]) -> None:
        state = SimState(state)
        if state is not self.state:
            previous = self.state
            self.state = state
            self._log("state_changed", previous=previous.value, state=state.value)

    def play(self) -> None:
        self.set_state(SimState.RUNNING)

    def pause(self) -> None:
        self.set_state(SimState.PAUSED)

    def tick(self) -> TickResult:
        """Advance the physics by one step if running and a rover exists."""
        if self.state is not SimState.RUNNING or self.rover is None:
            return TickResult()

        rover = self.rover
        previous = rover.position
        reached = rover.calculate_forces(self.world)
        rover.update()
        self.tick_count += 1

        collided = rover.detect_collisions(self.world)
        if collided:
            rover.restore(previous)
            self._log("collision", **rover.to_dict())
        if reached:
            self._log("target_reached", **rover.to_dict())
        return TickResult(advanced=True, collided=collided, target_reached=reached)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def _require_editing(self) -> None:
        if self.state is not SimState.EDITING:
            raise EditingStateError(
                f"world can only be edited in EDITING state (current: {self.state.value})"
            )

    def _add(self, obj: WorldObject) -> None:
        result = self.world.add(obj)
        if result.start_added and self.rover is None:
            self.rover = Rover(obj.x, obj.y, self.config, self.rng)

    def add_object(self, obj: WorldObject) -> None:
        """Register an object. The first Start placed creates the rover."""
        self._require_editing()
        self._add(obj)

    def remove_object(self, obj: WorldObject) -> bool:
        self._require_editing()
        return self.world.remove(obj)

    def move_object(self, obj: WorldObject, dx: float, dy: float) -> None:
        self._require_editing()
        self.world.move_object(obj, dx, dy)

    def place_start(self, x: float, y: float, radius: float = START_RADIUS) -> Start:
        """Replace any existing Start and spawn a fresh rover on the new one."""
        self._require_editing()
        existing = self.world.find_start()
        if existing is not None:
            self.world.remove(existing)
        start = Start(x=x, y=y, radius=radius)
        self.world.add(start)
        self.rover = Rover(x, y, self.config, self.rng)
        return start

    def place_homebase(self, x: float, y: float, **kwargs: float) -> Homebase:
        homebase = Homebase(x=x, y=y, **kwargs)
        self.add_object(homebase)
        return homebase

    def place_obstacle(self, x: float, y: float, **kwargs: float) -> Obstacle:
        obstacle = Obstacle(x=x, y=y, **kwargs)
        self.add_object(obstacle)
        return obstacle

    def place_wall(self, start: Vec2, end: Vec2) -> Optional[Wall]:
        """Add a wall unless it is shorter than ``min_wall_length``."""
        self._require_editing()
        wall = Wall(start=start, end=end)
        if wall.segment.length < self.config.min_wall_length:
            return None
        self._add(wall)
        return wall

    def clear(self) -> None:
        """Drop every object and the rover and return to EDITING."""
        self.world.clear()
        self.rover = None
        self.tick_count = 0
        self.set_state(SimState.EDITING)
        self._log("cleared")

    def reset(self) -> None:
        """Put the rover back on the Start, at rest, seeking homebase 1."""
        start = self.world.find_start()
        if self.rover is not None and start is not None:
            self.rover.reset_to(start.x, start.y)
        self.set_state(SimState.EDITING)
        self._log("reset")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_config(self, **changes: Any) -> None:
        """Update configuration fields; sensor changes re-derive the ring."""
        known = self.config.field_names()
        unknown = set(changes) - known
        if unknown:
            raise KeyError(f"unknown config field(s): {', '.join(sorted(unknown))}")
        for name, value in changes.items():
            setattr(self.config, name, value)
        if self.rover is not None and SENSOR_FIELDS & set(changes):
            self.rover.rebuild_sensors()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def serialize(self) -> Dict[str, Any]:
        return serialize(self.world, self.config)

    def to_json(self) -> str:
        return dumps(self.world, self.config)

    def deserialize(self, document: Source) -> bool:
        """Replace the world with ``document``. On failure nothing changes."""
        try:
            decoded = decode_document(document)
        except WorldLoadError as exc:
            self.last_load_error = exc
            self._log("load_failed", error=str(exc))
            return False

        # applied in place; the load is logged as one world_loaded record
        self.world.clear()
        self.rover = None
        self.tick_count = 0
        self.state = SimState.EDITING
        self.config.apply_document(decoded.config)
        for obj in decoded.objects:
            self._add(obj)
        for homebase in decoded.homebases:
            self._add(homebase)
        self.last_load_error = None
        self._log("world_loaded", objects=len(self.world), homebases=self.world.homebase_count)
        return True

    def save(self, path: Union[str, Path]) -> Path:
        return save_world(path, self.world, self.config)

    def load(self, path: Union[str, Path]) -> bool:
        try:
            text = load_document(path)
        except OSError as exc:
            self.last_load_error = exc
            self._log("load_failed", error=str(exc))
            return False
        return self.deserialize(text)

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------
    def _log(self, event: str, **fields: Any) -> None:
        if self.telemetry is not None:
            self.telemetry.log_event(event, tick=self.tick_count, **fields)
