"""Ring range sensor over a pixel-grid world using DDA raycasting.

Design decisions:
- Grid convention: cell (x, y) covers [x, x+1) x [y, y+1) in world units.
- Beam angles: ray i points at heading + (i - N/2) * 2pi/N, so index N/2 faces forward
  and index 3N/4 sits 90 degrees clockwise (robot's right with y pointing down).
- Traversal: DDA always entering the nearer of the next vertical/horizontal boundary;
  the reported distance is the boundary distance before the increment that entered the cell.
- Leaving the world counts as a hit at max range; the start cell is never tested.
"""

from __future__ import annotations

from math import cos, floor, pi, sin
from typing import Protocol

import numpy as np

from amr_nav.constants import DDA_LARGE_DELTA, SENSOR_MAX_RANGE, SENSOR_RAY_COUNT
from amr_nav.types import Pose


class ObstacleQuery(Protocol):
    """Read-only view of the environment needed for raycasting."""

    width: int
    height: int

    def is_obstacle(self, x: int, y: int) -> bool: ...


class RangeSensor:
    """Stateless 360-degree range finder.

    Args:
        ray_count: number of rays in the ring.
        max_range: maximum sensing distance; also the "no hit" sentinel.
    """

    def __init__(
        self,
        *,
        ray_count: int = SENSOR_RAY_COUNT,
        max_range: float = SENSOR_MAX_RANGE,
    ) -> None:
        assert ray_count >= 1
        assert max_range > 0.0
        self.ray_count = int(ray_count)
        self.max_range = float(max_range)
        self.angular_step = 2.0 * pi / self.ray_count

    @property
    def forward_index(self) -> int:
        return self.ray_count // 2

    @property
    def right_index(self) -> int:
        return self.ray_count // 2 + self.ray_count // 4

    def bearing(self, heading: float, ray_index: int) -> float:
        return heading + (ray_index - self.ray_count // 2) * self.angular_step

    def bearings(self, heading: float) -> np.ndarray:
        offsets = (np.arange(self.ray_count) - self.ray_count // 2) * self.angular_step
        return heading + offsets

    def cast_ray(self, pose: Pose, ray_index: int, world: ObstacleQuery) -> float:
        """Distance along one ray to the first obstacle, clipped to [0, max_range]."""
        if not 0 <= ray_index < self.ray_count:
            raise IndexError(f"ray index {ray_index} outside [0, {self.ray_count})")

        phi = self.bearing(pose.heading, ray_index)
        dirx = cos(phi)
        diry = sin(phi)

        delta_x = DDA_LARGE_DELTA if dirx == 0.0 else abs(1.0 / dirx)
        delta_y = DDA_LARGE_DELTA if diry == 0.0 else abs(1.0 / diry)

        x0, y0 = pose.x, pose.y
        map_x = int(floor(x0))
        map_y = int(floor(y0))

        if dirx < 0.0:
            step_x = -1
            side_x = (x0 - map_x) * delta_x
        else:
            step_x = 1
            side_x = (map_x + 1.0 - x0) * delta_x
        if diry < 0.0:
            step_y = -1
            side_y = (y0 - map_y) * delta_y
        else:
            step_y = 1
            side_y = (map_y + 1.0 - y0) * delta_y

        width, height = world.width, world.height
        max_range = self.max_range
        distance = 0.0

        while distance < max_range:
            if side_x < side_y:
                distance = side_x
                side_x += delta_x
                map_x += step_x
            else:
                distance = side_y
                side_y += delta_y
                map_y += step_y

            if not (0 <= map_x < width and 0 <= map_y < height):
                return max_range
            if world.is_obstacle(map_x, map_y):
                return min(distance, max_range)

        return max_range

    def scan(self, pose: Pose, world: ObstacleQuery) -> np.ndarray:
        """Cast every ray and return distances ordered by ray index."""
        distances = np.empty((self.ray_count,), dtype=np.float64)
        for k in range(self.ray_count):
            distances[k] = self.cast_ray(pose, k, world)
        return distances

    def hit_points(self, pose: Pose, world: ObstacleQuery) -> np.ndarray:
        """World-space end point of every ray, shape (ray_count, 2)."""
        return self.points_from_scan(pose, self.scan(pose, world))

    def points_from_scan(self, pose: Pose, distances: np.ndarray) -> np.ndarray:
        """Project a scan taken at `pose` back to world coordinates."""
        angles = self.bearings(pose.heading)
        pts = np.empty((self.ray_count, 2), dtype=np.float64)
        pts[:, 0] = pose.x + distances * np.cos(angles)
        pts[:, 1] = pose.y + distances * np.sin(angles)
        return pts
