"""Pygame dashboard for the navigation simulator.

Renders side by side:
- Ground-truth world with range rays (hits only) and the robot
- Spatial memory (unknown grey, free white, occupied black) with the robot
- HUD with mode name, explored fraction and tick count

Supports windowed (interactive) and headless modes. Returns frames for recording.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import os

import numpy as np
import pygame

from amr_nav.types import Pose


@dataclass
class Colors:
    background: tuple[int, int, int] = (40, 40, 40)
    robot: tuple[int, int, int] = (0, 255, 0)
    robot_heading: tuple[int, int, int] = (0, 0, 0)
    lidar_ray: tuple[int, int, int] = (255, 0, 0)
    text: tuple[int, int, int] = (255, 255, 255)
    mode_manual: tuple[int, int, int] = (0, 200, 255)
    mode_auto: tuple[int, int, int] = (255, 165, 0)
    mode_idle: tuple[int, int, int] = (200, 200, 200)


@dataclass
class VizConfig:
    scale: int = 3
    gap_px: int = 10
    hud_px: int = 60
    show_lidar: bool = True
    fps: int = 30
    colors: Colors = field(default_factory=Colors)


class Renderer:
    def __init__(
        self,
        map_size: tuple[int, int],
        viz_cfg: Optional[VizConfig] = None,
        display: bool = True,
    ) -> None:
        self.viz = viz_cfg or VizConfig()
        self.colors = self.viz.colors
        self.map_w, self.map_h = int(map_size[0]), int(map_size[1])
        self.scale = int(self.viz.scale)
        self.panel_w = self.map_w * self.scale
        self.panel_h = self.map_h * self.scale
        self.width = 2 * self.panel_w + self.viz.gap_px
        self.height = self.panel_h + self.viz.hud_px
        self.display = bool(display)

        if not self.display:
            os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

        pygame.init()
        if self.display:
            self.screen = pygame.display.set_mode((self.width, self.height))
        else:
            self.screen = pygame.Surface((self.width, self.height))
        pygame.display.set_caption("Robot Dashboard")
        if self.display:
            # Held keys repeat every tick, like a polled keyboard
            pygame.key.set_repeat(30, 30)
        self.clock = pygame.time.Clock()
        pygame.font.init()
        self.font = pygame.font.SysFont("Arial", 16)

    def world_to_screen(self, x: float, y: float, x_offset: int = 0) -> tuple[int, int]:
        # Image coordinates, origin top-left; no flip
        sx = int(x * self.scale) + x_offset
        sy = int(y * self.scale)
        return sx, sy

    def _blit_gray(self, gray: np.ndarray, x_offset: int) -> None:
        rgb = np.repeat(gray[:, :, None], 3, axis=2)
        # surfarray wants (W, H, 3)
        surf = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.transpose(1, 0, 2)))
        surf = pygame.transform.scale(surf, (self.panel_w, self.panel_h))
        self.screen.blit(surf, (x_offset, 0))

    def draw_world(self, walls: np.ndarray) -> None:
        gray = np.where(walls, 0, 255).astype(np.uint8)
        self._blit_gray(gray, 0)

    def draw_memory(self, memory_image: np.ndarray) -> None:
        # Memory grid may be coarser than the world; stretch to the panel
        self._blit_gray(memory_image, self.panel_w + self.viz.gap_px)

    def draw_robot(self, pose: Pose, radius: int, x_offset: int = 0) -> None:
        sx, sy = self.world_to_screen(pose.x, pose.y, x_offset)
        r_px = max(1, int(radius * self.scale))
        pygame.draw.circle(self.screen, self.colors.robot, (sx, sy), r_px)
        hx = pose.x + radius * np.cos(pose.heading)
        hy = pose.y + radius * np.sin(pose.heading)
        hpx, hpy = self.world_to_screen(hx, hy, x_offset)
        pygame.draw.line(self.screen, self.colors.robot_heading, (sx, sy), (hpx, hpy), width=2)

    def draw_lidar(self, pose: Pose, hit_points: np.ndarray, distances: np.ndarray, max_range: float) -> None:
        if not self.viz.show_lidar:
            return
        sx, sy = self.world_to_screen(pose.x, pose.y)
        for (ex, ey), d in zip(hit_points, distances):
            if d >= max_range:
                continue
            ex_px, ey_px = self.world_to_screen(ex, ey)
            pygame.draw.line(self.screen, self.colors.lidar_ray, (sx, sy), (ex_px, ey_px), width=1)

    def mode_color(self, mode_name: str) -> tuple[int, int, int]:
        if mode_name == "MANUAL":
            return self.colors.mode_manual
        if mode_name == "WALL FOLLOWING":
            return self.colors.mode_auto
        return self.colors.mode_idle

    def draw_hud(self, mode_name: str, explored: float, tick: int) -> None:
        y = self.panel_h + 8
        surf = self.font.render(f"MODE: {mode_name}", True, self.mode_color(mode_name))
        self.screen.blit(surf, (10, y))
        info = self.font.render(
            f"explored: {explored * 100.0:.1f}%   tick: {tick}   [1] manual  [2] wall-follow  [esc] quit",
            True,
            self.colors.text,
        )
        self.screen.blit(info, (10, y + 22))

    def render_frame(
        self,
        walls: np.ndarray,
        memory_image: np.ndarray,
        pose: Pose,
        radius: int,
        scan: Optional[np.ndarray] = None,
        hit_points: Optional[np.ndarray] = None,
        max_range: float = float("inf"),
        mode_name: str = "IDLE",
        explored: float = 0.0,
        tick: int = 0,
    ) -> "pygame.Surface":
        self.screen.fill(self.colors.background)

        self.draw_world(walls)
        if scan is not None and hit_points is not None:
            self.draw_lidar(pose, hit_points, scan, max_range)
        self.draw_robot(pose, radius)

        self.draw_memory(memory_image)
        self.draw_robot(pose, radius, x_offset=self.panel_w + self.viz.gap_px)

        self.draw_hud(mode_name, explored, tick)

        if self.display:
            pygame.display.flip()
            self.clock.tick(self.viz.fps)
        return self.screen

    def poll_keys(self) -> tuple[bool, list[str]]:
        """Drain events. Returns (keep_running, typed characters)."""
        if not self.display:
            return True, []
        keys: list[str] = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False, keys
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False, keys
                if event.unicode:
                    keys.append(event.unicode)
        return True, keys

    def close(self) -> None:
        if self.display:
            pygame.display.quit()
        pygame.quit()
