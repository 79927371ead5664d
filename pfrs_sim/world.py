from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, List, Optional, Union

from .geometry_utils import Segment, Vec2


class ObjectType(str, Enum):
    WALL = "WALL"
    HOMEBASE = "HOMEBASE"
    OBSTACLE = "OBSTACLE"
    START = "START"


# Default radii used when objects are placed from an editor.
HOMEBASE_RADIUS = 20.0
OBSTACLE_RADIUS = 15.0
START_RADIUS = 10.0


@dataclass(eq=False)
class Wall:
    """Line segment obstacle. Thickness is global, see ``SimConfig``."""

    type: ClassVar[ObjectType] = ObjectType.WALL

    start: Vec2
    end: Vec2

    @property
    def segment(self) -> Segment:
        return Segment(self.start, self.end)

    def distance_to_point(self, point: Vec2) -> float:
        return self.segment.distance_to_point(point)

    def translate(self, dx: float, dy: float) -> None:
        moved = self.segment.translated(dx, dy)
        self.start = moved.start
        self.end = moved.end


@dataclass(eq=False)
class _Circle:
    x: float
    y: float
    radius: float

    @property
    def center(self) -> Vec2:
        return Vec2(self.x, self.y)

    def distance_to_point(self, point: Vec2) -> float:
        return self.center.distance_to(point)

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy


@dataclass(eq=False)
class Homebase(_Circle):
    """Numbered goal. ``number`` is owned by the World and kept contiguous."""

    type: ClassVar[ObjectType] = ObjectType.HOMEBASE

    radius: float = HOMEBASE_RADIUS
    number: int = 0


@dataclass(eq=False)
class Obstacle(_Circle):
    type: ClassVar[ObjectType] = ObjectType.OBSTACLE

    radius: float = OBSTACLE_RADIUS


@dataclass(eq=False)
class Start(_Circle):
    """Spawn marker for the rover."""

    type: ClassVar[ObjectType] = ObjectType.START

    radius: float = START_RADIUS


WorldObject = Union[Wall, Homebase, Obstacle, Start]


@dataclass
class AddResult:
    """Outcome of ``World.add``; lets the owner react to a new Start."""

    obj: WorldObject
    start_added: bool = False


class World:
    """Ordered registry of the objects placed in the arena.

    The registry owns its objects and keeps homebase numbers equal to
    ``1..homebase_count`` at all times. It never creates the rover; callers
    inspect the ``AddResult`` of ``add`` for that.
    """

    def __init__(self, objects: Optional[List[WorldObject]] = None) -> None:
        self.objects: List[WorldObject] = []
        self._homebase_count = 0
        for obj in objects or []:
            self.add(obj)

    # ------------------------------------------------------------------
    # Registry mutation
    # ------------------------------------------------------------------
    def add(self, obj: WorldObject) -> AddResult:
        """Append an object. Homebases get the next sequential number."""
        if isinstance(obj, Homebase):
            self._homebase_count += 1
            obj.number = self._homebase_count
        self.objects.append(obj)
        return AddResult(obj=obj, start_added=isinstance(obj, Start))

    def remove(self, obj: WorldObject) -> bool:
        """Remove an object by identity. Returns False if it is not registered."""
        index = self._index_of(obj)
        if index is None:
            return False
        del self.objects[index]
        if isinstance(obj, Homebase):
            self._homebase_count -= 1
            self._renumber_homebases()
        return True

    def clear(self) -> None:
        self.objects = []
        self._homebase_count = 0

    def move_object(self, obj: WorldObject, dx: float, dy: float) -> None:
        """Translate a registered object in place."""
        if self._index_of(obj) is None:
            raise ValueError("object is not registered in this world")
        obj.translate(dx, dy)

    def _index_of(self, obj: WorldObject) -> Optional[int]:
        for i, existing in enumerate(self.objects):
            if existing is obj:
                return i
        return None

    def _renumber_homebases(self) -> None:
        number = 1
        for obj in self.objects:
            if isinstance(obj, Homebase):
                obj.number = number
                number += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def homebase_count(self) -> int:
        return self._homebase_count

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[WorldObject]:
        return iter(self.objects)

    def __contains__(self, obj: object) -> bool:
        return any(existing is obj for existing in self.objects)

    def homebases(self) -> List[Homebase]:
        return [obj for obj in self.objects if isinstance(obj, Homebase)]

    def find_homebase(self, number: int) -> Optional[Homebase]:
        for obj in self.objects:
            if isinstance(obj, Homebase) and obj.number == number:
                return obj
        return None

    def find_start(self) -> Optional[Start]:
        for obj in self.objects:
            if isinstance(obj, Start):
                return obj
        return None

    def obstacles_for_sensing(self) -> Iterator[Union[Wall, Obstacle]]:
        """Objects the sensors react to: everything except goals and markers."""
        for obj in self.objects:
            if isinstance(obj, (Wall, Obstacle)):
                yield obj

    def object_at(self, point: Vec2, wall_tolerance: float = 10.0) -> Optional[WorldObject]:
        """First object under ``point`` in registry order, if any."""
        for obj in self.objects:
            if isinstance(obj, Wall):
                if obj.distance_to_point(point) < wall_tolerance:
                    return obj
            elif obj.distance_to_point(point) < obj.radius:
                return obj
        return None
