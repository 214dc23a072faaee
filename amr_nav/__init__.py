"""2D mobile-robot navigation core: range sensor, occupancy memory, wall follower."""

from .types import Cell, Pose
from .sim.lidar import RangeSensor
from .mapping.occupancy import SpatialMemory
from .control.behavior import NavigationController, NavigationMode

__all__ = [
    "Cell",
    "Pose",
    "RangeSensor",
    "SpatialMemory",
    "NavigationController",
    "NavigationMode",
]
