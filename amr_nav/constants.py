from __future__ import annotations

# Range sensor
SENSOR_RAY_COUNT: int = 360
SENSOR_MAX_RANGE: float = 100.0
# Reciprocal used in place of 1/0 for axis-parallel rays
DDA_LARGE_DELTA: float = 1e30

# Spatial memory
MEMORY_CELL_SIZE: int = 1
OCCUPIED_RANGE_FRACTION: float = 0.98
UNEXPLORED_RATIO_THRESHOLD: float = 0.311
SMOOTH_KERNEL_SIZE: int = 3

# Wall follower
WALL_DETECTION_DISTANCE: float = 10.0
SAFE_STOP_DISTANCE: float = 7.0
WALL_LOST_DISTANCE: float = 9.0
CLEARING_TICKS: int = 5
STABILIZING_TICKS: int = 8

# Robot
ROBOT_SIZE_PX: int = 11
ROBOT_SPEED_PX: float = 1.0

# Tick loop
SMOOTH_EVERY_TICKS: int = 60
SMOOTH_ITERATIONS: int = 1
SPAWN_MAX_ATTEMPTS: int = 10000
