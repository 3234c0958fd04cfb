#!/usr/bin/env python3
"""
Main entry point for the SPH dam-break simulation.

Usage:
    python -m sph2d.main                       # Default dam break
    python -m sph2d.main --particles 500       # Smaller block
    python -m sph2d.main --backend numba       # Use Numba backend

Controls:
    R       Reset and lay out the dam block again
    Space   Pause / resume
    C       Toggle speed coloring
    S       Toggle overlay
    Escape  Quit
"""

import argparse
from typing import List, Optional

from sph2d.core.simulation import SPHSimulation
from sph2d.main_headless import (add_simulation_arguments, config_from_args,
                                 configure_package_logging, select_backend)
from sph2d.visualization.pygame_renderer import PygameRenderer


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="SPH Dam Break")
    add_simulation_arguments(parser)
    parser.add_argument(
        "--window-size",
        type=int,
        nargs=2,
        default=[800, 800],
        metavar=("WIDTH", "HEIGHT"),
        help="Window size in pixels (default: 800 800)"
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target FPS (default: 60)"
    )

    args = parser.parse_args(argv)
    configure_package_logging(args.log_level)

    config = config_from_args(args)
    sim = SPHSimulation(config, log_level=args.log_level)
    sim.initialize(args.particles)

    select_backend(args.backend, sim.n_particles)
    sim.logger.info(f"Running {sim.n_particles} particles on the {sim.backend} backend")

    renderer = PygameRenderer(domain_size=config.domain_size,
                              window_size=tuple(args.window_size))
    try:
        while renderer.handle_events():
            if renderer.reset_requested:
                renderer.reset_requested = False
                sim.restart(args.particles)

            if not renderer.is_paused:
                sim.advance(config.updates_per_frame)

            renderer.draw(sim.particles)
            renderer.tick(args.fps)
    finally:
        renderer.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
