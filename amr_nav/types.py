from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


@dataclass(frozen=True)
class Pose:
    """Robot pose in world (pixel) coordinates.

    - x, y: continuous position, y grows downwards like image rows
    - heading: radians in (-pi, pi], 0 faces +x
    """

    x: float
    y: float
    heading: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.heading)


class Cell(IntEnum):
    """Tri-state occupancy belief stored in the memory grid."""

    UNKNOWN = 0
    FREE = 1
    OCCUPIED = 2
