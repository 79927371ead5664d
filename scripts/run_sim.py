from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import Any, Dict

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pygame
import yaml

from pfrs_sim.config import load_config
from pfrs_sim.render import PygameRenderer
from pfrs_sim.simulation import SimState, Simulation
from telemetry.logger import TelemetryLogger


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def main() -> None:
    parser = argparse.ArgumentParser(description="Potential-field rover viewer.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument(
        "--world",
        type=str,
        default=None,
        help="World JSON to load (defaults to world.default_file in the config).",
    )
    parser.add_argument(
        "--save-to",
        type=str,
        default="PFRS-config.json",
        help="Where the S key saves the current world.",
    )
    args = parser.parse_args()

    cfg = load_yaml(args.config)
    render_cfg = cfg.get("render", {})
    logging_cfg = cfg.get("logging", {})
    seed = cfg.get("seed")

    telemetry = None
    if logging_cfg.get("telemetry_path"):
        telemetry = TelemetryLogger(logging_cfg["telemetry_path"])

    sim = Simulation(
        config=load_config(cfg.get("sim", {})),
        rng=random.Random(seed),
        telemetry=telemetry,
    )

    world_path = args.world or cfg.get("world", {}).get("default_file")
    if world_path:
        if sim.load(world_path):
            print(f"Loaded world from {world_path}")
        else:
            print(f"Could not load world {world_path}: {sim.last_load_error}", file=sys.stderr)

    renderer = PygameRenderer(
        sim,
        show_sensors=bool(render_cfg.get("show_sensors", True)),
        show_trail=bool(render_cfg.get("show_trail", True)),
        trail_max_length=int(render_cfg.get("trail_max_length", 500)),
    )

    print("Keys: SPACE play/pause, R reset, C clear, S save, L reload, ESC quit.")

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    if sim.state is SimState.RUNNING:
                        sim.pause()
                    else:
                        sim.play()
                elif event.key == pygame.K_r:
                    sim.reset()
                    renderer.trail = []
                elif event.key == pygame.K_c:
                    sim.clear()
                elif event.key == pygame.K_s:
                    saved = sim.save(args.save_to)
                    print(f"Saved world to {saved}")
                elif event.key == pygame.K_l and world_path:
                    if not sim.load(world_path):
                        print(f"Error loading world file: {sim.last_load_error}", file=sys.stderr)
                    renderer.trail = []

        sim.tick()
        fps = renderer.tick(int(render_cfg.get("fps", 60)))
        renderer.draw(fps=fps)

    renderer.close()
    if telemetry is not None:
        telemetry.close()


if __name__ == "__main__":
    main()
