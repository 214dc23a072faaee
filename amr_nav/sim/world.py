"""Ground-truth pixel world: wall lookup, disk collision and free-start sampling."""

from __future__ import annotations

import os
from typing import Optional

import numpy as np

from amr_nav.constants import SPAWN_MAX_ATTEMPTS


def _disk_offsets(radius: int) -> np.ndarray:
    r = int(radius)
    yy, xx = np.mgrid[-r : r + 1, -r : r + 1]
    mask = (xx * xx + yy * yy) <= (r * r)
    return np.stack([xx[mask], yy[mask]], axis=1)


class GridWorld:
    """Boolean wall grid, grid[y, x] True = wall. Anything outside the grid is a wall."""

    def __init__(self, walls: np.ndarray) -> None:
        assert walls.ndim == 2
        self.walls = np.asarray(walls, dtype=bool)
        self.height, self.width = self.walls.shape

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def is_obstacle(self, x: int, y: int) -> bool:
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return True
        return bool(self.walls[y, x])

    def collides(self, x: float, y: float, radius: int) -> bool:
        """True if any wall pixel lies within `radius` of (x, y)."""
        offsets = _disk_offsets(radius)
        xs = offsets[:, 0] + int(round(x))
        ys = offsets[:, 1] + int(round(y))
        outside = (xs < 0) | (xs >= self.width) | (ys < 0) | (ys >= self.height)
        if outside.any():
            return True
        return bool(self.walls[ys, xs].any())

    def sample_free_position(
        self,
        rng: np.random.Generator,
        radius: int,
        margin: Optional[int] = None,
        max_attempts: int = SPAWN_MAX_ATTEMPTS,
    ) -> tuple[int, int]:
        """Uniform random pixel whose robot disk is wall-free."""
        m = int(2 * radius if margin is None else margin)
        lo_x, hi_x = m, max(m, self.width - m)
        lo_y, hi_y = m, max(m, self.height - m)
        for _ in range(max_attempts):
            x = int(rng.integers(lo_x, hi_x + 1))
            y = int(rng.integers(lo_y, hi_y + 1))
            if not self.collides(x, y, radius):
                return x, y
        raise RuntimeError(f"No free start position found after {max_attempts} attempts")

    @classmethod
    def from_image(cls, path: str) -> "GridWorld":
        """Load a map image; pure black pixels are walls."""
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Map image not found: {path}")
        import pygame

        surface = pygame.image.load(path)
        # surfarray is (W, H, 3)
        rgb = pygame.surfarray.array3d(surface).transpose(1, 0, 2)
        return cls(np.all(rgb == 0, axis=2))

    @classmethod
    def rooms(
        cls,
        width: int,
        height: int,
        *,
        wall_thickness: int = 2,
        door_width: int = 24,
    ) -> "GridWorld":
        """Bordered map split by one vertical and one horizontal wall, each with a doorway."""
        assert width > 4 * wall_thickness and height > 4 * wall_thickness
        t = int(wall_thickness)
        walls = np.zeros((height, width), dtype=bool)
        walls[:t, :] = True
        walls[-t:, :] = True
        walls[:, :t] = True
        walls[:, -t:] = True

        mid_x = width // 2
        mid_y = height // 2
        walls[:, mid_x : mid_x + t] = True
        walls[mid_y : mid_y + t, :mid_x] = True

        door = int(door_width)
        # Doorways centred in each wall segment
        upper = mid_y // 2
        lower = mid_y + (height - mid_y) // 2
        walls[max(t, upper - door // 2) : upper + door // 2, mid_x : mid_x + t] = False
        walls[max(t, lower - door // 2) : lower + door // 2, mid_x : mid_x + t] = False
        left = mid_x // 2
        walls[mid_y : mid_y + t, max(t, left - door // 2) : left + door // 2] = False
        return cls(walls)
