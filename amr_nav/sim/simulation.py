"""Single-threaded tick loop: sense -> decide -> arbitrate -> sense -> integrate.

The loop owns the only writer of the spatial memory; the controller and renderer read it
between ticks, so they always see a whole-scan state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from amr_nav.config import SimConfig
from amr_nav.control.behavior import Key, NavigationController
from amr_nav.mapping.occupancy import SpatialMemory
from amr_nav.sim.lidar import RangeSensor
from amr_nav.sim.robot import Robot
from amr_nav.sim.world import GridWorld

logger = logging.getLogger(__name__)

# Number keys standing in for the camera tag ids
KEY_TRIGGERS: dict[str, int] = {"1": 0, "2": 1}


@dataclass
class TickResult:
    proposal: tuple[float, float]
    applied: bool
    scan: np.ndarray
    hit_points: np.ndarray


def trigger_from_key(key: Key) -> Optional[int]:
    if isinstance(key, int) and 0 <= key < 0x110000:
        key = chr(key)
    if isinstance(key, str):
        return KEY_TRIGGERS.get(key)
    return None


class Simulation:
    """Wires world, robot, sensor, memory and controller for one run."""

    def __init__(
        self,
        world: GridWorld,
        config: Optional[SimConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        start: Optional[tuple[int, int]] = None,
        on_exploration_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self.cfg = config or SimConfig()
        self.world = world
        self._rng = rng or np.random.default_rng(self.cfg.seed)

        self.robot = Robot(size=self.cfg.robot.size, speed=self.cfg.robot.speed)
        self.sensor = RangeSensor(
            ray_count=self.cfg.sensor.ray_count, max_range=self.cfg.sensor.max_range
        )
        self.memory = SpatialMemory(
            world.width,
            world.height,
            cell_size=self.cfg.memory.cell_size,
            max_range=self.cfg.sensor.max_range,
            occupied_range_fraction=self.cfg.memory.occupied_range_fraction,
            unexplored_threshold=self.cfg.memory.unexplored_threshold,
        )
        self.controller = NavigationController(
            speed=self.cfg.robot.speed,
            config=self.cfg.controller,
            on_exploration_complete=on_exploration_complete,
        )

        if start is None:
            start = world.sample_free_position(self._rng, self.robot.radius, margin=self.robot.size)
        self.robot.move_to(*start)
        logger.debug("Robot start at (%d, %d)", self.robot.x, self.robot.y)

        self.tick_count = 0
        self.scan = self.sensor.scan(self.robot.pose, self.world)

    def step(self, key: Key = None, trigger: Optional[int] = None) -> TickResult:
        """Advance one tick. `trigger` overrides any trigger derived from `key`."""
        if trigger is None:
            trigger = trigger_from_key(key)
        if trigger is not None:
            self.controller.set_mode(trigger)

        dx, dy = self.controller.decide(self.scan, self.memory, key, pose=self.robot.pose)
        applied = self._arbitrate(dx, dy)

        pose = self.robot.pose
        self.scan = self.sensor.scan(pose, self.world)
        hits = self.sensor.points_from_scan(pose, self.scan)
        self.memory.integrate(hits, (pose.x, pose.y))

        self.tick_count += 1
        every = self.cfg.smooth_every
        if every > 0 and self.tick_count % every == 0:
            self.memory.smooth(self.cfg.smooth_iterations)

        return TickResult(proposal=(dx, dy), applied=applied, scan=self.scan, hit_points=hits)

    def _arbitrate(self, dx: float, dy: float) -> bool:
        """Apply the proposal if the robot disk stays clear of walls."""
        tx, ty = self.robot.target(dx, dy)
        mx, my = tx - self.robot.x, ty - self.robot.y
        if mx == 0 and my == 0:
            return False
        if self.world.collides(tx, ty, self.robot.radius):
            return False
        self.robot.move_to(tx, ty)
        self.robot.update_heading(mx, my)
        return True

    def run(self, max_ticks: Optional[int] = None, trigger: Optional[int] = 1) -> int:
        """Headless run; `trigger` is applied once before the first tick. Returns ticks run."""
        limit = self.cfg.max_ticks if max_ticks is None else int(max_ticks)
        if trigger is not None:
            self.controller.set_mode(trigger)
        for _ in range(limit):
            self.step()
            if self.controller.exploration_done:
                break
        return self.tick_count
