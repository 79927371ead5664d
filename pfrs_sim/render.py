from __future__ import annotations

from typing import List, Tuple
import math

import pygame

from .simulation import Simulation
from .world import Homebase, Obstacle, Start, Wall


Color = Tuple[int, int, int]

THEME = {
    "bg": (18, 22, 32),
    "grid": (28, 34, 48),
    "wall": (120, 130, 150),
    "obstacle_fill": (220, 70, 70),
    "obstacle_edge": (65, 75, 98),
    "homebase_fill": (76, 175, 80),
    "homebase_target": (140, 240, 150),
    "homebase_text": (255, 255, 255),
    "start": (100, 160, 255),
    "rover_fill": (255, 215, 0),
    "rover_outline": (0, 0, 0),
    "rover_arrow": (255, 60, 60),
    "sensor_idle": (60, 200, 110),
    "sensor_hit": (255, 90, 90),
    "sensor_field": (40, 70, 50),
    "trail_start": (60, 160, 200),
    "trail_end": (100, 220, 255),
    "hud_bg": (28, 34, 48),
    "hud_border": (55, 65, 88),
    "hud_text": (200, 220, 255),
}

GRID_SIZE = 40


class PygameRenderer:
    """Top-down view of a ``Simulation``. Reads state only, never mutates it.

    Arena coordinates map 1:1 to pixels with y increasing downward, the
    same frame the world documents use.
    """

    def __init__(
        self,
        sim: Simulation,
        show_sensors: bool = True,
        show_trail: bool = True,
        trail_max_length: int = 500,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Potential Field Rover Simulator")
        self.sim = sim
        self.width = int(sim.config.arena_width)
        self.height = int(sim.config.arena_height)
        self.screen = pygame.display.set_mode((self.width, self.height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 13)
        self.number_font = pygame.font.SysFont("arial", 16)
        self.show_sensors = show_sensors
        self.show_trail = show_trail
        self.trail_max_length = trail_max_length
        self.trail: List[Tuple[float, float]] = []

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _draw_grid(self) -> None:
        for x in range(0, self.width, GRID_SIZE):
            pygame.draw.line(self.screen, THEME["grid"], (x, 0), (x, self.height), 1)
        for y in range(0, self.height, GRID_SIZE):
            pygame.draw.line(self.screen, THEME["grid"], (0, y), (self.width, y), 1)

    def draw(self, fps: float = 0.0) -> None:
        """Render one frame."""
        self.screen.fill(THEME["bg"])
        self._draw_grid()
        self._draw_objects()
        if self.sim.rover is not None:
            if self.show_trail:
                self._draw_trail()
            self._draw_rover()
        else:
            self.trail = []
        self._draw_hud(fps)
        pygame.display.flip()

    def _draw_objects(self) -> None:
        cfg = self.sim.config
        target = self.sim.rover.target_number if self.sim.rover is not None else None
        for obj in self.sim.objects:
            if isinstance(obj, Wall):
                pygame.draw.line(
                    self.screen,
                    THEME["wall"],
                    obj.start.as_tuple(),
                    obj.end.as_tuple(),
                    max(1, int(cfg.wall_thickness)),
                )
            elif isinstance(obj, Homebase):
                color = THEME["homebase_target"] if obj.number == target else THEME["homebase_fill"]
                center = (int(obj.x), int(obj.y))
                pygame.draw.circle(self.screen, color, center, int(obj.radius))
                label = self.number_font.render(str(obj.number), True, THEME["homebase_text"])
                self.screen.blit(label, label.get_rect(center=center))
            elif isinstance(obj, Obstacle):
                center = (int(obj.x), int(obj.y))
                pygame.draw.circle(self.screen, THEME["obstacle_fill"], center, int(obj.radius))
                pygame.draw.circle(self.screen, THEME["obstacle_edge"], center, int(obj.radius), 1)
            elif isinstance(obj, Start):
                pygame.draw.circle(
                    self.screen, THEME["start"], (int(obj.x), int(obj.y)), int(obj.radius), 2
                )

    def _draw_trail(self) -> None:
        state = self.sim.rover_state()
        self.trail.append((state.x, state.y))
        if len(self.trail) > self.trail_max_length:
            self.trail = self.trail[-self.trail_max_length :]
        n = len(self.trail) - 1
        for i in range(n):
            t = (i + 1) / max(n, 1)
            color = tuple(
                int(a + t * (b - a)) for a, b in zip(THEME["trail_start"], THEME["trail_end"])
            )
            pygame.draw.line(self.screen, color, self.trail[i], self.trail[i + 1], 1)

    def _draw_rover(self) -> None:
        rover = self.sim.rover
        cx, cy = rover.position.as_tuple()
        center = (int(cx), int(cy))

        if self.show_sensors:
            pygame.draw.circle(
                self.screen, THEME["sensor_field"], center, int(self.sim.config.sensor_range), 1
            )
            for point in rover.sensors:
                color = THEME["sensor_hit"] if point.detections else THEME["sensor_idle"]
                tip = (int(point.position.x), int(point.position.y))
                pygame.draw.line(self.screen, color, center, tip, 1)
                pygame.draw.circle(self.screen, color, tip, 2)

        radius_px = max(2, int(rover.collision_radius))
        pygame.draw.circle(self.screen, THEME["rover_fill"], center, radius_px)
        pygame.draw.circle(self.screen, THEME["rover_outline"], center, radius_px, 2)

        size = self.sim.config.robot_size
        head = (cx + math.cos(rover.angle) * size, cy + math.sin(rover.angle) * size)
        pygame.draw.line(self.screen, THEME["rover_arrow"], center, head, 2)

    def _draw_hud(self, fps: float) -> None:
        pad = 10
        target = self.sim.rover.target_number if self.sim.rover is not None else "-"
        text = (
            f"  {self.sim.state.value}   objects={len(self.sim.objects)}"
            f"   homebases={self.sim.world.homebase_count}   target={target}   FPS={fps:.1f}  "
        )
        surf = self.font.render(text, True, THEME["hud_text"])
        r = surf.get_rect(topleft=(pad, pad))
        panel = r.inflate(pad, pad)
        pygame.draw.rect(self.screen, THEME["hud_bg"], panel)
        pygame.draw.rect(self.screen, THEME["hud_border"], panel, 1)
        self.screen.blit(surf, (panel.x + 4, panel.y + 4))

    def tick(self, target_fps: int) -> float:
        """Cap frame rate and return achieved FPS."""
        fps = self.clock.get_fps()
        self.clock.tick(target_fps)
        return fps

    def close(self) -> None:
        pygame.quit()
