from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from pfrs_sim.config import SimConfig, load_config

CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "sim.yaml"


def test_shipped_config_matches_defaults() -> None:
    assert SimConfig.from_yaml(CONFIG_PATH) == SimConfig()


def test_load_config_coerces_types() -> None:
    cfg = load_config({"robot_speed": 2, "num_sensor_points": 12.0, "enable_boundary": 0})
    assert isinstance(cfg.robot_speed, float)
    assert cfg.num_sensor_points == 12
    assert cfg.enable_boundary is False
    assert cfg.collision_radius == 10.0


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(TypeError):
        load_config({"warp_factor": 9})


def test_from_yaml_reads_sim_section(tmp_path) -> None:
    path = tmp_path / "sim.yaml"
    path.write_text(yaml.safe_dump({"sim": {"sensor_range": 70, "arena_width": 1024}}))
    cfg = SimConfig.from_yaml(path)
    assert cfg.sensor_range == 70.0
    assert cfg.arena_width == 1024.0
    assert cfg.robot_speed == SimConfig().robot_speed
