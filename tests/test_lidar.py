import math

import numpy as np
import pytest

from amr_nav.sim.lidar import RangeSensor
from amr_nav.sim.world import GridWorld
from amr_nav.types import Pose


def wall_column_world(width: int = 50, height: int = 50, wall_x: int = 30) -> GridWorld:
    walls = np.zeros((height, width), dtype=bool)
    walls[:, wall_x] = True
    return GridWorld(walls)


def test_empty_world_returns_max_range() -> None:
    world = GridWorld(np.zeros((300, 300), dtype=bool))
    sensor = RangeSensor(ray_count=36, max_range=100.0)
    distances = sensor.scan(Pose(150.5, 150.5, 0.0), world)
    assert distances.shape == (36,)
    assert np.allclose(distances, 100.0)


def test_leaving_world_counts_as_max_range() -> None:
    world = GridWorld(np.zeros((20, 20), dtype=bool))
    sensor = RangeSensor(ray_count=72, max_range=100.0)
    distances = sensor.scan(Pose(10.5, 10.5, 0.0), world)
    assert np.all(distances == 100.0)


def test_forward_ray_reports_boundary_distance() -> None:
    world = wall_column_world()
    sensor = RangeSensor(ray_count=360, max_range=100.0)
    d = sensor.cast_ray(Pose(10.5, 25.5, 0.0), sensor.forward_index, world)
    # Entering column 30 crosses the boundary at x = 30
    assert d == pytest.approx(19.5)


def test_vertical_ray_uses_large_reciprocal() -> None:
    walls = np.zeros((50, 50), dtype=bool)
    walls[40, :] = True
    sensor = RangeSensor(ray_count=360, max_range=100.0)
    d = sensor.cast_ray(Pose(10.5, 25.5, math.pi / 2), sensor.forward_index, GridWorld(walls))
    assert d == pytest.approx(14.5)


def test_right_ray_is_quarter_turn_clockwise() -> None:
    sensor = RangeSensor(ray_count=360, max_range=100.0)
    assert sensor.forward_index == 180
    assert sensor.right_index == 270
    assert sensor.bearing(0.0, sensor.right_index) == pytest.approx(math.pi / 2)
    assert sensor.bearing(0.0, 0) == pytest.approx(-math.pi)


def test_distances_stay_within_range() -> None:
    world = GridWorld.rooms(120, 90)
    sensor = RangeSensor(ray_count=90, max_range=40.0)
    rng = np.random.default_rng(0)
    for _ in range(5):
        x, y = world.sample_free_position(rng, radius=3)
        heading = float(rng.uniform(-math.pi, math.pi))
        distances = sensor.scan(Pose(x + 0.5, y + 0.5, heading), world)
        assert np.all(distances >= 0.0)
        assert np.all(distances <= 40.0)


def test_hit_beyond_range_is_clipped() -> None:
    world = wall_column_world(width=200, height=50, wall_x=150)
    sensor = RangeSensor(ray_count=360, max_range=20.0)
    d = sensor.cast_ray(Pose(10.5, 25.5, 0.0), sensor.forward_index, world)
    assert d == 20.0


def test_hit_points_follow_bearings() -> None:
    world = wall_column_world()
    sensor = RangeSensor(ray_count=360, max_range=100.0)
    pose = Pose(10.5, 25.5, 0.0)
    pts = sensor.hit_points(pose, world)
    assert pts.shape == (360, 2)
    assert list(pts[sensor.forward_index]) == pytest.approx([30.0, 25.5])


def test_ray_index_out_of_range_raises() -> None:
    world = wall_column_world()
    sensor = RangeSensor(ray_count=8, max_range=10.0)
    with pytest.raises(IndexError):
        sensor.cast_ray(Pose(5.5, 5.5, 0.0), 8, world)
    with pytest.raises(IndexError):
        sensor.cast_ray(Pose(5.5, 5.5, 0.0), -1, world)
