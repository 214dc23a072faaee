from .behavior import (
    CornerPhase,
    CornerState,
    NavigationController,
    NavigationMode,
    WallFollowState,
)

__all__ = [
    "CornerPhase",
    "CornerState",
    "NavigationController",
    "NavigationMode",
    "WallFollowState",
]
