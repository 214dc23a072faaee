from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from amr_nav.config import SimConfig
from amr_nav.sim.simulation import Simulation
from amr_nav.sim.world import GridWorld
from amr_nav.utils.config import load_sim_config


def build_world(cfg: SimConfig) -> GridWorld:
    if cfg.map_path:
        return GridWorld.from_image(cfg.map_path)
    w, h = cfg.map_size
    return GridWorld.rooms(w, h)


def print_banner() -> None:
    print("\n=== SIMULATION STARTED ===")
    print("Controls:")
    print("  - Key 1: MANUAL mode (ZQSD / WASD)")
    print("  - Key 2: WALL FOLLOWING mode")
    print("  - ESC: quit")
    print("==========================\n")


def run_interactive(sim: Simulation, scale: int) -> None:
    from amr_nav.viz.pygame_renderer import Renderer, VizConfig

    renderer = Renderer(sim.world.size, viz_cfg=VizConfig(scale=scale), display=True)
    print_banner()
    try:
        running = True
        while running:
            running, keys = renderer.poll_keys()
            if not running:
                break
            key = keys[-1] if keys else None
            result = sim.step(key)
            renderer.render_frame(
                sim.world.walls,
                sim.memory.to_image(),
                sim.robot.pose,
                sim.robot.radius,
                scan=result.scan,
                hit_points=result.hit_points,
                max_range=sim.sensor.max_range,
                mode_name=sim.controller.mode_name,
                explored=sim.memory.explored_ratio(),
                tick=sim.tick_count,
            )
    finally:
        renderer.close()


def run_headless(sim: Simulation, max_ticks: int, figure: str | None) -> None:
    t0 = time.time()
    ticks = sim.run(max_ticks=max_ticks)
    dt = time.time() - t0
    counts = sim.memory.counts()
    print(
        f"ticks: {ticks}, explored: {sim.memory.explored_ratio() * 100.0:.1f}%, "
        f"done: {sim.controller.exploration_done}, cells: {counts}, time: {dt:.1f}s"
    )
    if figure:
        from amr_nav.viz.plotting import save_memory_figure

        save_memory_figure(sim.memory, figure, pose=sim.robot.pose)
        print(f"Saved memory map -> {figure}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Wall-following exploration simulator")
    parser.add_argument("--config", type=str, default="configs/default.yaml", help="Path to YAML config")
    parser.add_argument("--headless", action="store_true", help="Run wall following without a window")
    parser.add_argument("--max-ticks", type=int, default=None)
    parser.add_argument("--scale", type=int, default=3, help="Screen pixels per map pixel")
    parser.add_argument("--figure", type=str, default=None, help="Save final memory map (headless)")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("overrides", nargs="*", help="key=value config overrides")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = args.config if os.path.isfile(args.config) else None
    cfg = load_sim_config(config_path, args.overrides)
    world = build_world(cfg)
    sim = Simulation(world, cfg)

    if args.headless:
        run_headless(sim, args.max_ticks or cfg.max_ticks, args.figure)
    else:
        run_interactive(sim, args.scale)


if __name__ == "__main__":
    main()
