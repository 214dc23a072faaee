from __future__ import annotations

from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from amr_nav.mapping.occupancy import SpatialMemory
from amr_nav.types import Pose


def draw_memory(memory: SpatialMemory, ax, pose: Optional[Pose] = None, title: Optional[str] = None):
    ax.clear()
    cs = memory.cell_size
    extent = [0.0, memory.cols * cs, memory.rows * cs, 0.0]
    ax.imshow(memory.to_image(), cmap="gray", vmin=0, vmax=255, extent=extent, interpolation="nearest")
    if pose is not None:
        ax.plot(pose.x, pose.y, "go", markersize=6)
    ax.set_aspect("equal")
    explored = memory.explored_ratio() * 100.0
    ax.set_title(title or f"Memory: {explored:.1f}% explored (grey unknown, black occupied)")
    return ax


def save_memory_figure(memory: SpatialMemory, path: str, pose: Optional[Pose] = None, dpi: int = 150) -> None:
    fig, ax = plt.subplots(figsize=(8, 6))
    draw_memory(memory, ax, pose)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
