import numpy as np

from amr_nav.config import MemoryConfig, SensorConfig, SimConfig
from amr_nav.control.behavior import NavigationMode
from amr_nav.sim.simulation import Simulation, trigger_from_key
from amr_nav.sim.world import GridWorld
from amr_nav.types import Cell


def make_sim(**kwargs) -> Simulation:
    cfg = SimConfig(sensor=SensorConfig(ray_count=90, max_range=40.0), **kwargs)
    return Simulation(GridWorld.rooms(80, 60), cfg, start=(20, 15))


def test_idle_tick_integrates_scan() -> None:
    sim = make_sim()
    result = sim.step()
    assert result.proposal == (0.0, 0.0)
    assert result.applied is False
    assert result.scan.shape == (90,)
    assert sim.memory.explored_ratio() > 0.0
    assert sim.memory.cell_at(20.5, 15.5) == Cell.FREE


def test_keys_switch_mode_and_drive() -> None:
    sim = make_sim()
    sim.step("1")
    assert sim.controller.mode == NavigationMode.MANUAL
    result = sim.step("d")
    assert result.applied
    assert (sim.robot.x, sim.robot.y) == (21, 15)
    assert sim.robot.heading == 0.0
    sim.step("2")
    assert sim.controller.mode == NavigationMode.WALL_FOLLOW
    assert trigger_from_key("x") is None
    assert trigger_from_key(ord("2")) == 1


def test_wall_follow_never_enters_walls_and_keeps_obstacles() -> None:
    sim = make_sim(smooth_every=10)
    sim.controller.set_mode(1)
    occupied = sim.memory.render() == Cell.OCCUPIED
    for _ in range(150):
        sim.step()
        assert not sim.world.collides(sim.robot.x, sim.robot.y, sim.robot.radius)
        now = sim.memory.render() == Cell.OCCUPIED
        assert np.all(now[occupied])
        occupied = now
    assert occupied.any()


def test_run_stops_when_explored() -> None:
    calls = []
    cfg = SimConfig(
        sensor=SensorConfig(ray_count=90, max_range=40.0),
        memory=MemoryConfig(unexplored_threshold=1.0),
    )
    sim = Simulation(
        GridWorld.rooms(80, 60), cfg, start=(20, 15), on_exploration_complete=lambda: calls.append(1)
    )
    ticks = sim.run(max_ticks=50)
    assert ticks < 50
    assert sim.controller.exploration_done
    assert calls == [1]
