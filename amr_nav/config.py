from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .constants import (
    CLEARING_TICKS,
    MEMORY_CELL_SIZE,
    OCCUPIED_RANGE_FRACTION,
    ROBOT_SIZE_PX,
    ROBOT_SPEED_PX,
    SAFE_STOP_DISTANCE,
    SENSOR_MAX_RANGE,
    SENSOR_RAY_COUNT,
    SMOOTH_EVERY_TICKS,
    SMOOTH_ITERATIONS,
    STABILIZING_TICKS,
    UNEXPLORED_RATIO_THRESHOLD,
    WALL_DETECTION_DISTANCE,
    WALL_LOST_DISTANCE,
)


@dataclass
class SensorConfig:
    ray_count: int = SENSOR_RAY_COUNT
    max_range: float = SENSOR_MAX_RANGE

    def __post_init__(self) -> None:
        assert self.ray_count > 0, "ray_count must be > 0"
        assert self.max_range > 0.0, "max_range must be > 0"


@dataclass
class MemoryConfig:
    cell_size: int = MEMORY_CELL_SIZE
    occupied_range_fraction: float = OCCUPIED_RANGE_FRACTION
    unexplored_threshold: float = UNEXPLORED_RATIO_THRESHOLD

    def __post_init__(self) -> None:
        assert self.cell_size > 0, "cell_size must be > 0"
        assert 0.0 < self.occupied_range_fraction <= 1.0, "occupied_range_fraction in (0,1]"
        assert 0.0 < self.unexplored_threshold <= 1.0, "unexplored_threshold in (0,1]"


@dataclass
class ControllerConfig:
    wall_detection_distance: float = WALL_DETECTION_DISTANCE
    safe_stop_distance: float = SAFE_STOP_DISTANCE
    wall_lost_distance: float = WALL_LOST_DISTANCE
    clearing_ticks: int = CLEARING_TICKS
    stabilizing_ticks: int = STABILIZING_TICKS

    def __post_init__(self) -> None:
        assert self.safe_stop_distance > 0.0, "safe_stop_distance must be > 0"
        # Stop < lost-wall < search keeps the corner machine from chattering
        assert (
            self.safe_stop_distance <= self.wall_lost_distance <= self.wall_detection_distance
        ), "expected safe_stop <= wall_lost <= wall_detection"
        assert self.clearing_ticks >= 1, "clearing_ticks must be >= 1"
        assert self.stabilizing_ticks >= 1, "stabilizing_ticks must be >= 1"


@dataclass
class RobotConfig:
    size: int = ROBOT_SIZE_PX
    speed: float = ROBOT_SPEED_PX

    def __post_init__(self) -> None:
        assert self.size > 0, "size must be > 0"
        assert self.speed > 0.0, "speed must be > 0"


@dataclass
class SimConfig:
    sensor: SensorConfig = field(default_factory=SensorConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    robot: RobotConfig = field(default_factory=RobotConfig)
    map_path: Optional[str] = None
    map_size: Tuple[int, int] = (200, 150)
    seed: Optional[int] = None
    smooth_every: int = SMOOTH_EVERY_TICKS
    smooth_iterations: int = SMOOTH_ITERATIONS
    max_ticks: int = 20000

    def __post_init__(self) -> None:
        assert self.map_size[0] > 0 and self.map_size[1] > 0, "map_size must be positive"
        assert self.smooth_every >= 0, "smooth_every must be >= 0 (0 disables)"
        assert self.smooth_iterations >= 1, "smooth_iterations must be >= 1"
        assert self.max_ticks > 0, "max_ticks must be > 0"

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any] | None) -> "SimConfig":
        d = cfg or {}
        map_size = d.get("map_size", cls.map_size)
        return cls(
            sensor=SensorConfig(**(d.get("sensor") or {})),
            memory=MemoryConfig(**(d.get("memory") or {})),
            controller=ControllerConfig(**(d.get("controller") or {})),
            robot=RobotConfig(**(d.get("robot") or {})),
            map_path=d.get("map_path"),
            map_size=(int(map_size[0]), int(map_size[1])),
            seed=d.get("seed"),
            smooth_every=int(d.get("smooth_every", SMOOTH_EVERY_TICKS)),
            smooth_iterations=int(d.get("smooth_iterations", SMOOTH_ITERATIONS)),
            max_ticks=int(d.get("max_ticks", 20000)),
        )
