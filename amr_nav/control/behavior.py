"""Mode switch and reactive motion policies (manual passthrough, right-hand wall follower).

API:
- set_mode(trigger_id): external discrete signal -> mode (unknown ids ignored)
- decide(scan, memory, key, *, pose) -> (dx, dy) displacement proposal

The wall follower first drives straight until a wall appears ahead, turns left onto it
and then keeps it on the right. Inner corners (wall ahead) always win; outer corners
(wall lost on the right) run a Clearing -> Turning -> Stabilizing sub-machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from math import cos, sin
from typing import Callable, Mapping, Optional, Protocol, Sequence, Union

from amr_nav.config import ControllerConfig
from amr_nav.constants import ROBOT_SPEED_PX
from amr_nav.types import Pose

logger = logging.getLogger(__name__)

Key = Union[int, str, None]


class NavigationMode(Enum):
    IDLE = "IDLE"
    MANUAL = "MANUAL"
    WALL_FOLLOW = "WALL FOLLOWING"

    @property
    def display_name(self) -> str:
        return self.value


class CornerPhase(Enum):
    NORMAL = 0
    CLEARING = 1
    TURNING = 2
    STABILIZING = 3


@dataclass(frozen=True)
class CornerState:
    """Outer-corner sub-state; the counter belongs to the phase it is paired with."""

    phase: CornerPhase = CornerPhase.NORMAL
    counter: int = 0


@dataclass
class WallFollowState:
    wall_found: bool = False
    corner: CornerState = field(default_factory=CornerState)
    # Survives mode resets; only a new controller clears it
    exploration_done: bool = False

    @property
    def searching(self) -> bool:
        return not self.wall_found

    def reset(self) -> None:
        self.wall_found = False
        self.corner = CornerState()


class ExplorationStatus(Protocol):
    def is_fully_explored(self) -> bool: ...


# Trigger ids as shown by the camera tags / number keys
DEFAULT_MODE_TRIGGERS: Mapping[int, NavigationMode] = {
    0: NavigationMode.MANUAL,
    1: NavigationMode.WALL_FOLLOW,
}

# Unit displacements, y pointing down. Both ZQSD and WASD layouts.
DEFAULT_KEY_DIRECTIONS: Mapping[str, tuple[int, int]] = {
    "z": (0, -1),
    "w": (0, -1),
    "s": (0, 1),
    "q": (-1, 0),
    "a": (-1, 0),
    "d": (1, 0),
}


def _normalize_key(key: Key) -> Optional[str]:
    if key is None:
        return None
    if isinstance(key, int):
        if not 0 <= key < 0x110000:
            return None
        key = chr(key)
    return key.lower() if len(key) == 1 else None


class NavigationController:
    """Per-tick motion decision for a single robot.

    Args:
        speed: displacement magnitude per tick.
        config: distance thresholds and corner-phase durations.
        mode_triggers: trigger id -> mode table used by `set_mode`.
        key_directions: key -> unit (dx, dy) table used in manual mode.
        on_exploration_complete: called once when the memory reports full exploration.
    """

    def __init__(
        self,
        speed: float = ROBOT_SPEED_PX,
        config: Optional[ControllerConfig] = None,
        *,
        mode_triggers: Optional[Mapping[int, NavigationMode]] = None,
        key_directions: Optional[Mapping[str, tuple[int, int]]] = None,
        on_exploration_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self.speed = float(speed)
        self.cfg = config or ControllerConfig()
        self.mode_triggers = dict(DEFAULT_MODE_TRIGGERS if mode_triggers is None else mode_triggers)
        self.key_directions = dict(DEFAULT_KEY_DIRECTIONS if key_directions is None else key_directions)
        self.on_exploration_complete = on_exploration_complete
        self.mode = NavigationMode.IDLE
        self.state = WallFollowState()

    @property
    def mode_name(self) -> str:
        return self.mode.display_name

    @property
    def corner_phase(self) -> CornerPhase:
        return self.state.corner.phase

    @property
    def phase_counter(self) -> int:
        return self.state.corner.counter

    @property
    def exploration_done(self) -> bool:
        return self.state.exploration_done

    def set_mode(self, trigger_id: int) -> bool:
        """Switch mode from an external trigger. Returns True when the mode changed."""
        new_mode = self.mode_triggers.get(trigger_id)
        if new_mode is None or new_mode == self.mode:
            return False
        self.mode = new_mode
        self.state.reset()
        logger.info("Navigation mode -> %s", self.mode.display_name)
        return True

    def decide(
        self,
        scan: Sequence[float],
        memory: ExplorationStatus,
        key: Key = None,
        *,
        pose: Pose,
    ) -> tuple[float, float]:
        """Proposed (dx, dy) for this tick; the caller decides whether to apply it."""
        heading = pose.heading
        if self.mode == NavigationMode.MANUAL:
            return self._manual(key)
        if self.mode == NavigationMode.WALL_FOLLOW:
            return self._wall_follow(scan, memory, heading)
        return (0.0, 0.0)

    def _manual(self, key: Key) -> tuple[float, float]:
        direction = self.key_directions.get(_normalize_key(key) or "")
        if direction is None:
            return (0.0, 0.0)
        return (self.speed * direction[0], self.speed * direction[1])

    # Displacements relative to heading (screen frame, y down)
    def _forward(self, heading: float) -> tuple[float, float]:
        return (self.speed * cos(heading), self.speed * sin(heading))

    def _turn_left(self, heading: float) -> tuple[float, float]:
        return (self.speed * sin(heading), -self.speed * cos(heading))

    def _turn_right(self, heading: float) -> tuple[float, float]:
        return (-self.speed * sin(heading), self.speed * cos(heading))

    def _wall_follow(
        self, scan: Sequence[float], memory: ExplorationStatus, heading: float
    ) -> tuple[float, float]:
        st = self.state
        if st.exploration_done:
            return (0.0, 0.0)
        if memory.is_fully_explored():
            st.exploration_done = True
            logger.info("Map fully explored, wall follower stopping")
            if self.on_exploration_complete is not None:
                self.on_exploration_complete()
            return (0.0, 0.0)

        n = len(scan)
        front = float(scan[n // 2])
        right = float(scan[n // 2 + n // 4])
        cfg = self.cfg

        if not st.wall_found:
            if front < cfg.wall_detection_distance:
                st.wall_found = True
                return self._turn_left(heading)
            return self._forward(heading)

        # Inner corner takes precedence over the outer-corner machine
        if front < cfg.safe_stop_distance:
            st.corner = CornerState()
            return self._turn_left(heading)

        corner = st.corner
        if corner.phase == CornerPhase.NORMAL:
            if right > cfg.wall_lost_distance:
                # This straight tick is the first clearing tick
                st.corner = self._advance_clearing(CornerState(CornerPhase.CLEARING, 0))
            return self._forward(heading)

        if corner.phase == CornerPhase.CLEARING:
            st.corner = self._advance_clearing(corner)
            return self._forward(heading)

        if corner.phase == CornerPhase.TURNING:
            st.corner = CornerState(CornerPhase.STABILIZING, 0)
            return self._turn_right(heading)

        counter = corner.counter + 1
        if counter >= cfg.stabilizing_ticks:
            st.corner = CornerState()
        else:
            st.corner = replace(corner, counter=counter)
        return self._forward(heading)

    def _advance_clearing(self, corner: CornerState) -> CornerState:
        counter = corner.counter + 1
        if counter >= self.cfg.clearing_ticks:
            return CornerState(CornerPhase.TURNING, counter)
        return CornerState(CornerPhase.CLEARING, counter)
