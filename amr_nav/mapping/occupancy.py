"""Ternary occupancy memory built incrementally from range-sensor hit points.

Grid convention: grid[row, col] covers world [col*cs, (col+1)*cs) x [row*cs, (row+1)*cs).
Occupied cells are never downgraded: `integrate` and `smooth` only add obstacles.
"""

from __future__ import annotations

from math import ceil, floor, hypot
from typing import Iterable, Iterator, Sequence

import numpy as np
from scipy.ndimage import binary_dilation, binary_erosion

from amr_nav.constants import (
    MEMORY_CELL_SIZE,
    OCCUPIED_RANGE_FRACTION,
    SENSOR_MAX_RANGE,
    SMOOTH_KERNEL_SIZE,
    UNEXPLORED_RATIO_THRESHOLD,
)
from amr_nav.types import Cell

# Display intensities (grey / white / black)
_GRAY_LEVELS = np.array([127, 255, 0], dtype=np.uint8)


def bresenham(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    """8-connected cells from (x0, y0) to (x1, y1), both ends included."""
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield (x0, y0)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


class SpatialMemory:
    """Occupancy grid owning a tri-state `Cell` array.

    Args:
        width, height: world extent in world units.
        cell_size: world units per grid cell.
        max_range: sensor max range; end points at or beyond
            `occupied_range_fraction * max_range` are not marked as walls.
        unexplored_threshold: unknown fraction under which the map counts as explored.
    """

    def __init__(
        self,
        width: float,
        height: float,
        *,
        cell_size: float = MEMORY_CELL_SIZE,
        max_range: float = SENSOR_MAX_RANGE,
        occupied_range_fraction: float = OCCUPIED_RANGE_FRACTION,
        unexplored_threshold: float = UNEXPLORED_RATIO_THRESHOLD,
    ) -> None:
        assert width > 0 and height > 0
        assert cell_size > 0
        self.width = float(width)
        self.height = float(height)
        self.cell_size = float(cell_size)
        self.rows = int(ceil(self.height / self.cell_size))
        self.cols = int(ceil(self.width / self.cell_size))
        self.occupied_cutoff = float(occupied_range_fraction) * float(max_range)
        self.unexplored_threshold = float(unexplored_threshold)
        self._grid = np.full((self.rows, self.cols), Cell.UNKNOWN, dtype=np.uint8)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    def world_to_cell(self, x: float, y: float) -> tuple[int, int]:
        """(row, col) of the cell containing world point (x, y); may be out of grid."""
        return int(floor(y / self.cell_size)), int(floor(x / self.cell_size))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"cell ({row}, {col}) outside grid {self.shape}")
        return Cell(int(self._grid[row, col]))

    def cell_at(self, x: float, y: float) -> Cell:
        """Belief at a world point; anything outside the grid is unknown."""
        row, col = self.world_to_cell(x, y)
        if not self.in_bounds(row, col):
            return Cell.UNKNOWN
        return Cell(int(self._grid[row, col]))

    def integrate(
        self, hit_points: Iterable[Sequence[float]], robot_position: Sequence[float]
    ) -> None:
        """Fold one scan into the grid.

        Every cell on the line robot->hit becomes free unless already occupied; the last
        cell becomes occupied when the true hit distance is below the range cutoff and
        is otherwise left as it was.
        """
        pts = np.asarray(hit_points, dtype=np.float64).reshape(-1, 2)
        if pts.shape[0] == 0:
            return
        rx, ry = float(robot_position[0]), float(robot_position[1])
        r0, c0 = self.world_to_cell(rx, ry)

        free_rows: list[int] = []
        free_cols: list[int] = []
        occ_rows: list[int] = []
        occ_cols: list[int] = []
        for px, py in pts:
            r1, c1 = self.world_to_cell(px, py)
            if not self.in_bounds(r1, c1):
                continue
            # Line cells in (col, row) order; the last one is the hit cell
            cells = list(bresenham(c0, r0, c1, r1))
            for c, r in cells[:-1]:
                if self.in_bounds(r, c):
                    free_rows.append(r)
                    free_cols.append(c)
            if hypot(px - rx, py - ry) < self.occupied_cutoff:
                occ_rows.append(r1)
                occ_cols.append(c1)

        # Free never overwrites occupied, occupied always wins, so the batch
        # result is the same as applying rays one at a time.
        grid = self._grid
        if free_rows:
            fr = np.asarray(free_rows)
            fc = np.asarray(free_cols)
            keep = grid[fr, fc] != Cell.OCCUPIED
            grid[fr[keep], fc[keep]] = Cell.FREE
        if occ_rows:
            grid[np.asarray(occ_rows), np.asarray(occ_cols)] = Cell.OCCUPIED

    def smooth(self, iterations: int = 1) -> None:
        """Morphological closing of the obstacle mask; only ever adds obstacles."""
        if iterations < 1:
            return
        obstacles = self._grid == Cell.OCCUPIED
        if not obstacles.any():
            return
        kernel = np.ones((SMOOTH_KERNEL_SIZE, SMOOTH_KERNEL_SIZE), dtype=bool)
        n = int(iterations)
        dilated = binary_dilation(obstacles, structure=kernel, iterations=n)
        # Outside the grid counts as obstacle during erosion so edge gaps close too
        closed = binary_erosion(dilated, structure=kernel, iterations=n, border_value=1)
        self._grid[closed | obstacles] = Cell.OCCUPIED

    def unexplored_ratio(self) -> float:
        return float(np.count_nonzero(self._grid == Cell.UNKNOWN)) / float(self._grid.size)

    def explored_ratio(self) -> float:
        return 1.0 - self.unexplored_ratio()

    def is_fully_explored(self) -> bool:
        return self.unexplored_ratio() < self.unexplored_threshold

    def render(self) -> np.ndarray:
        """Read-only snapshot of the `Cell` grid, shape (rows, cols)."""
        snapshot = self._grid.copy()
        snapshot.setflags(write=False)
        return snapshot

    def to_image(self) -> np.ndarray:
        """Greyscale uint8 view: unknown 127, free 255, occupied 0."""
        return _GRAY_LEVELS[self._grid]

    def counts(self) -> dict[str, int]:
        values = np.bincount(self._grid.ravel(), minlength=len(Cell))
        return {c.name.lower(): int(values[c]) for c in Cell}
