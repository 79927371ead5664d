"""
JSON world documents.

A document has the shape::

    {
      "objects": [
        {"type": "WALL", "start": {"x": .., "y": ..}, "end": {"x": .., "y": ..}},
        {"type": "HOMEBASE", "x": .., "y": .., "radius": .., "number": 1},
        {"type": "OBSTACLE" | "START", "x": .., "y": .., "radius": ..}
      ],
      "config": {"robotSpeed": .., "repulsiveForce": .., ...}
    }

Decoding validates the whole document before anything is returned, so a
caller can apply it to a live world only once it is known to be good.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union
import json
import math

from .config import DOCUMENT_FIELDS, SimConfig
from .errors import SchemaError, StructuralParseError
from .geometry_utils import Vec2
from .world import Homebase, ObjectType, Obstacle, Start, Wall, World, WorldObject

DEFAULT_FILENAME = "PFRS-config.json"

Source = Union[str, bytes, Mapping[str, Any]]


@dataclass
class DecodedWorld:
    """A validated document, ready to be applied.

    ``objects`` holds the non-homebase objects in document order and
    ``homebases`` the homebases sorted by their serialized number.
    """

    objects: List[WorldObject] = field(default_factory=list)
    homebases: List[Homebase] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------
def encode_object(obj: WorldObject) -> Dict[str, Any]:
    if isinstance(obj, Wall):
        return {
            "type": obj.type.value,
            "start": {"x": obj.start.x, "y": obj.start.y},
            "end": {"x": obj.end.x, "y": obj.end.y},
        }
    record: Dict[str, Any] = {
        "type": obj.type.value,
        "x": obj.x,
        "y": obj.y,
        "radius": obj.radius,
    }
    if isinstance(obj, Homebase):
        record["number"] = obj.number
    return record


def serialize(world: World, config: SimConfig) -> Dict[str, Any]:
    """Document for ``world`` plus the persisted subset of ``config``."""
    return {
        "objects": [encode_object(obj) for obj in world],
        "config": config.to_document(),
    }


def dumps(world: World, config: SimConfig) -> str:
    return json.dumps(serialize(world, config), indent=2)


def save_world(path: Union[str, Path], world: World, config: SimConfig) -> Path:
    """Write the world document to ``path`` (a directory gets the default name)."""
    path = Path(path)
    if path.is_dir():
        path = path / DEFAULT_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(world, config), encoding="utf-8")
    return path


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------
def _finite(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # integer literal too large for a float
        return False


def _number(record: Mapping[str, Any], key: str, index: int) -> float:
    value = record.get(key)
    if not _finite(value):
        raise SchemaError(f"field '{key}' must be a finite number, got {value!r}", index)
    return float(value)


def _point(record: Mapping[str, Any], key: str, index: int) -> Vec2:
    value = record.get(key)
    if not isinstance(value, Mapping):
        raise SchemaError(f"field '{key}' must be an object with x and y", index)
    return Vec2(_number(value, "x", index), _number(value, "y", index))


def decode_object(record: Any, index: int) -> WorldObject:
    if not isinstance(record, Mapping):
        raise SchemaError("record must be an object", index)
    raw_type = record.get("type")
    try:
        obj_type = ObjectType(raw_type)
    except ValueError:
        raise SchemaError(f"unknown object type {raw_type!r}", index) from None

    if obj_type is ObjectType.WALL:
        return Wall(start=_point(record, "start", index), end=_point(record, "end", index))

    x = _number(record, "x", index)
    y = _number(record, "y", index)
    radius = _number(record, "radius", index)
    if obj_type is ObjectType.HOMEBASE:
        number = record.get("number")
        sort_key = 0 if number is None else int(_number(record, "number", index))
        return Homebase(x=x, y=y, radius=radius, number=sort_key)
    if obj_type is ObjectType.OBSTACLE:
        return Obstacle(x=x, y=y, radius=radius)
    return Start(x=x, y=y, radius=radius)


def _check_config(config: Mapping[str, Any]) -> None:
    for doc_name in DOCUMENT_FIELDS:
        if doc_name not in config:
            continue
        value = config[doc_name]
        if doc_name == "enableBoundary":
            if not isinstance(value, bool):
                raise SchemaError(f"'{doc_name}' must be a boolean, got {value!r}")
        elif not _finite(value):
            raise SchemaError(f"'{doc_name}' must be a finite number, got {value!r}")


def decode_document(source: Source) -> DecodedWorld:
    """Parse and validate a world document.

    Raises
    ------
    StructuralParseError
        Not JSON, or the top level / ``objects`` / ``config`` have the wrong shape.
    SchemaError
        An object record or a config value is invalid.
    """
    if isinstance(source, (str, bytes, bytearray)):
        try:
            data = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StructuralParseError(f"document is not valid JSON: {exc}") from exc
    else:
        data = source

    if not isinstance(data, Mapping):
        raise StructuralParseError("document must be a JSON object")
    records = data.get("objects")
    if not isinstance(records, list):
        raise StructuralParseError("'objects' must be a list")
    config = data.get("config")
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise StructuralParseError("'config' must be an object")
    _check_config(config)

    decoded = DecodedWorld(config=dict(config))
    for index, record in enumerate(records):
        obj = decode_object(record, index)
        if isinstance(obj, Homebase):
            decoded.homebases.append(obj)
        else:
            decoded.objects.append(obj)
    # stable: equal numbers keep document order
    decoded.homebases.sort(key=lambda hb: hb.number)
    return decoded


def load_document(path: Union[str, Path]) -> str:
    return Path(path).read_text(encoding="utf-8")
