from __future__ import annotations

import json
import random

import pytest

from pfrs_sim.config import SimConfig
from pfrs_sim.errors import SchemaError, StructuralParseError
from pfrs_sim.geometry_utils import Vec2
from pfrs_sim.persistence import DEFAULT_FILENAME, decode_document
from pfrs_sim.simulation import SimState, Simulation
from pfrs_sim.world import Homebase, Wall


def _populated() -> Simulation:
    sim = Simulation(rng=random.Random(1))
    sim.place_wall(Vec2(200.0, 0.0), Vec2(200.0, 100.0))
    sim.place_homebase(100.0, 500.0)
    sim.place_obstacle(300.0, 300.0, radius=12.0)
    sim.place_start(50.0, 50.0)
    sim.place_homebase(700.0, 100.0, radius=25.0)
    sim.place_homebase(400.0, 400.0)
    return sim


def _records(sim: Simulation) -> list:
    return sorted(
        sim.serialize()["objects"], key=lambda r: json.dumps(r, sort_keys=True)
    )


def test_serialized_shape() -> None:
    doc = _populated().serialize()
    wall, homebase, obstacle, start = doc["objects"][:4]
    assert wall == {"type": "WALL", "start": {"x": 200.0, "y": 0.0}, "end": {"x": 200.0, "y": 100.0}}
    assert homebase == {"type": "HOMEBASE", "x": 100.0, "y": 500.0, "radius": 20.0, "number": 1}
    assert obstacle == {"type": "OBSTACLE", "x": 300.0, "y": 300.0, "radius": 12.0}
    assert "number" not in start
    assert set(doc["config"]) == {
        "robotSpeed",
        "repulsiveForce",
        "attractiveForce",
        "noiseGain",
        "sensorRange",
        "boundaryForce",
        "enableBoundary",
    }


def test_round_trip_reproduces_objects_and_numbering() -> None:
    original = _populated()
    restored = Simulation()
    assert restored.deserialize(original.to_json())

    assert _records(restored) == _records(original)
    numbers = {(hb.x, hb.y): hb.number for hb in restored.world.homebases()}
    assert numbers == {(100.0, 500.0): 1, (700.0, 100.0): 2, (400.0, 400.0): 3}
    assert restored.rover is not None
    assert restored.rover.position == Vec2(50.0, 50.0)
    assert restored.state is SimState.EDITING


def test_homebases_added_in_serialized_number_order() -> None:
    doc = {
        "objects": [
            {"type": "HOMEBASE", "x": 3.0, "y": 0.0, "radius": 20, "number": 3},
            {"type": "HOMEBASE", "x": 1.0, "y": 0.0, "radius": 20, "number": 1},
            {"type": "OBSTACLE", "x": 9.0, "y": 9.0, "radius": 15},
            {"type": "HOMEBASE", "x": 2.0, "y": 0.0, "radius": 20, "number": 2},
        ]
    }
    sim = Simulation()
    assert sim.deserialize(doc)
    kinds = [obj.type.value for obj in sim.objects]
    assert kinds == ["OBSTACLE", "HOMEBASE", "HOMEBASE", "HOMEBASE"]
    assert [(hb.x, hb.number) for hb in sim.world.homebases()] == [(1.0, 1), (2.0, 2), (3.0, 3)]


def test_config_applied_and_counter_ignored() -> None:
    doc = {
        "objects": [{"type": "START", "x": 10, "y": 10, "radius": 10}],
        "config": {"homeBaseCounter": 7, "robotSpeed": 2.5, "sensorRange": 55, "enableBoundary": False},
    }
    sim = Simulation()
    assert sim.deserialize(json.dumps(doc))
    assert sim.config.robot_speed == 2.5
    assert sim.config.sensor_range == 55.0
    assert sim.config.enable_boundary is False
    assert sim.world.homebase_count == 0
    assert sim.rover.sensors.sensor_range == 55.0


@pytest.mark.parametrize(
    "document, error",
    [
        ("{not json", StructuralParseError),
        ("[]", StructuralParseError),
        ('{"config": {}}', StructuralParseError),
        ('{"objects": {"type": "WALL"}}', StructuralParseError),
        ('{"objects": [], "config": [1]}', StructuralParseError),
        ('{"objects": [{"type": "TREE", "x": 1, "y": 1, "radius": 1}]}', SchemaError),
        ('{"objects": [{"type": "WALL", "start": {"x": 1}, "end": {"x": 2, "y": 2}}]}', SchemaError),
        ('{"objects": [{"type": "OBSTACLE", "x": "1", "y": 1, "radius": 1}]}', SchemaError),
        ('{"objects": [{"type": "OBSTACLE", "x": 1, "y": 1}]}', SchemaError),
        ('{"objects": [], "config": {"robotSpeed": "fast"}}', SchemaError),
        ('{"objects": [{"type": "OBSTACLE", "x": NaN, "y": 1, "radius": 1}]}', SchemaError),
        ('{"objects": [{"type": "START", "x": 1, "y": -Infinity, "radius": 10}]}', SchemaError),
        ('{"objects": [{"type": "WALL", "start": {"x": 0, "y": 0}, "end": {"x": 1e400, "y": 0}}]}', SchemaError),
        ('{"objects": [], "config": {"sensorRange": Infinity}}', SchemaError),
    ],
)
def test_malformed_documents_are_rejected(document: str, error: type) -> None:
    with pytest.raises(error):
        decode_document(document)


def test_failed_load_leaves_world_untouched() -> None:
    sim = _populated()
    before = sim.serialize()
    rover = sim.rover
    sim.play()

    bad = '{"objects": [{"type": "START", "x": 1, "y": 1, "radius": 10}, {"type": "WALL"}]}'
    assert not sim.deserialize(bad)
    assert isinstance(sim.last_load_error, SchemaError)
    assert sim.last_load_error.index == 1
    assert sim.serialize() == before
    assert sim.rover is rover
    assert sim.state is SimState.RUNNING


def test_missing_homebase_number_sorts_first() -> None:
    decoded = decode_document(
        {
            "objects": [
                {"type": "HOMEBASE", "x": 2.0, "y": 0.0, "radius": 20, "number": 1},
                {"type": "HOMEBASE", "x": 1.0, "y": 0.0, "radius": 20},
            ]
        }
    )
    assert [hb.x for hb in decoded.homebases] == [1.0, 2.0]
    assert all(isinstance(hb, Homebase) for hb in decoded.homebases)


def test_save_and_load_file(tmp_path) -> None:
    sim = _populated()
    path = sim.save(tmp_path)
    assert path.name == DEFAULT_FILENAME

    other = Simulation()
    assert other.load(path)
    assert _records(other) == _records(sim)
    assert any(isinstance(obj, Wall) for obj in other.objects)

    assert not other.load(tmp_path / "missing.json")
    assert isinstance(other.last_load_error, OSError)
    assert _records(other) == _records(sim)


def test_config_document_names() -> None:
    cfg = SimConfig()
    doc = cfg.to_document()
    assert doc["repulsiveForce"] == cfg.repulsive_force
    other = SimConfig()
    other.apply_document({"repulsiveForce": 10, "numSensorPoints": 3})
    assert other.repulsive_force == 10.0
    assert other.num_sensor_points == 24


@pytest.mark.parametrize("number", ["NaN", "Infinity", "1e400", "1" + "0" * 400])
def test_non_finite_homebase_number_fails_the_load(number: str) -> None:
    sim = _populated()
    before = sim.serialize()
    doc = '{"objects": [{"type": "HOMEBASE", "x": 1, "y": 1, "radius": 20, "number": %s}]}' % number

    assert sim.deserialize(doc) is False
    assert isinstance(sim.last_load_error, SchemaError)
    assert sim.last_load_error.index == 0
    assert sim.serialize() == before
