"""Grid-robot state and motion bookkeeping.

Pure Python, self-contained model used by the tick loop.
Positions are whole pixels; heading snaps to the direction of the last applied move.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import pi

from amr_nav.constants import ROBOT_SIZE_PX, ROBOT_SPEED_PX
from amr_nav.types import Pose


def wrap_to_pi(theta: float) -> float:
    """Normalize angle to (-pi, pi]."""
    wrapped = (theta + pi) % (2.0 * pi) - pi
    if wrapped <= -pi:
        wrapped += 2.0 * pi
    return wrapped


@dataclass
class Robot:
    """Disk robot.

    - x, y: position (pixels)
    - heading: radians, wrapped to (-pi, pi]
    - size: diameter (pixels); radius is size // 2
    - speed: displacement per tick (pixels)
    """

    x: int = 0
    y: int = 0
    heading: float = 0.0
    size: int = ROBOT_SIZE_PX
    speed: float = ROBOT_SPEED_PX

    def __post_init__(self) -> None:
        self.heading = wrap_to_pi(self.heading)

    @property
    def radius(self) -> int:
        return self.size // 2

    @property
    def pose(self) -> Pose:
        return Pose(float(self.x), float(self.y), self.heading)

    def target(self, dx: float, dy: float) -> tuple[int, int]:
        """Pixel reached by a displacement, rounded to the grid."""
        return self.x + int(round(dx)), self.y + int(round(dy))

    def move_to(self, x: int, y: int) -> None:
        self.x = int(x)
        self.y = int(y)

    def update_heading(self, dx: float, dy: float, eps: float = 1e-9) -> None:
        """Face the applied displacement; x motion wins over y motion."""
        if dx > eps:
            self.heading = 0.0
        elif dx < -eps:
            self.heading = pi
        elif dy > eps:
            self.heading = pi / 2.0
        elif dy < -eps:
            self.heading = -pi / 2.0
