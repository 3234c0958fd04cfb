#!/usr/bin/env python3
"""
Headless version of main.py for running without a display.
Runs the dam break for a number of frames and reports performance.

Usage:
    python -m sph2d.main_headless --steps 200
    python -m sph2d.main_headless --particles 500 --snapshot dam.png
"""

import argparse
import logging
import time
from typing import List, Optional

import numpy as np

import sph2d
from sph2d.core.config import SPHConfig, NEIGHBOR_SEARCH_MODES, BACKEND_NAMES
from sph2d.core.simulation import SPHSimulation


def add_simulation_arguments(parser: argparse.ArgumentParser):
    """Options shared by the windowed and headless drivers."""
    parser.add_argument(
        "--particles",
        type=int,
        default=None,
        help="Particle limit (default: config particle_cap)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the initial jitter (default: unseeded)"
    )
    parser.add_argument(
        "--backend",
        choices=list(BACKEND_NAMES) + ["auto"],
        default="auto",
        help="Computation backend (default: auto)"
    )
    parser.add_argument(
        "--neighbor-search",
        choices=list(NEIGHBOR_SEARCH_MODES),
        default=None,
        help="Neighbor search for the cpu backend (default: all_pairs)"
    )
    parser.add_argument(
        "--updates-per-frame",
        type=int,
        default=None,
        help="Simulation ticks per frame (default: 2)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON file with SPHConfig fields"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )


def config_from_args(args: argparse.Namespace) -> SPHConfig:
    """Build the configuration: JSON file first, then command line overrides."""
    config = SPHConfig.from_json(args.config) if args.config else SPHConfig()

    overrides = {}
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.neighbor_search is not None:
        overrides['neighbor_search'] = args.neighbor_search
    if args.updates_per_frame is not None:
        overrides['updates_per_frame'] = args.updates_per_frame
    if overrides:
        config = config.with_overrides(**overrides)
    return config.validate()


def configure_package_logging(log_level: str):
    """Send the library module loggers (sph2d.*) to stderr."""
    package_logger = logging.getLogger("sph2d")
    package_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        package_logger.addHandler(handler)


def select_backend(requested: str, n_particles: int) -> str:
    """Apply the --backend choice globally and return the active backend."""
    if requested == "auto":
        return sph2d.auto_select_backend(n_particles)
    if not sph2d.set_backend(requested):
        logging.getLogger(__name__).warning(
            f"Backend '{requested}' not available, using {sph2d.get_backend()}")
    return sph2d.get_backend()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="SPH Dam Break (Headless)")
    add_simulation_arguments(parser)
    parser.add_argument("--steps", type=int, default=100, help="Number of frames to run")
    parser.add_argument("--report-every", type=int, default=20,
                        help="Frames between progress reports")
    parser.add_argument("--snapshot", default=None, help="Save final positions plot to PATH")
    parser.add_argument("--diagnostics-plot", default=None,
                        help="Save density/speed/energy history plot to PATH")

    args = parser.parse_args(argv)
    configure_package_logging(args.log_level)

    config = config_from_args(args)
    sim = SPHSimulation(config, log_level=args.log_level)
    sim.initialize(args.particles)
    log = sim.logger

    select_backend(args.backend, sim.n_particles)

    log.info("Simulation info:")
    log.info(f"  Particles: {sim.n_particles}")
    log.info(f"  Domain: {config.domain_width:g}x{config.domain_height:g}")
    log.info(f"  Backend: {sim.backend}, neighbor search: {config.neighbor_search}")
    log.info(f"  Frames: {args.steps} x {config.updates_per_frame} ticks")

    history = [sim.diagnostics()]
    frame_times = []
    report_every = max(1, args.report_every)

    for frame in range(args.steps):
        t0 = time.perf_counter()
        sim.advance(config.updates_per_frame)
        frame_times.append(time.perf_counter() - t0)

        diag = sim.diagnostics()
        history.append(diag)

        if (frame + 1) % report_every == 0:
            avg_time = max(np.mean(frame_times[-report_every:]), 1e-9)
            log.info(f"  Frame {frame + 1}/{args.steps}: {avg_time * 1000:.1f} ms/frame "
                     f"({1.0 / avg_time:.1f} FPS) {diag.summary()}")

    if frame_times:
        avg_time = max(np.mean(frame_times), 1e-9)
        log.info(f"Average: {avg_time * 1000:.1f} ms/frame ({1.0 / avg_time:.1f} FPS)")
        log.info(f"Total time: {sum(frame_times):.1f} seconds")

    final = history[-1]
    log.info(f"Final state: {final.summary()} stable={final.is_stable}")

    if args.snapshot or args.diagnostics_plot:
        from sph2d.visualization.snapshot_plot import save_snapshot, plot_diagnostics
        if args.snapshot:
            save_snapshot(sim.particles, config, args.snapshot,
                          title=f"t = {sim.time:.4f}, {sim.n_particles} particles")
            log.info(f"Snapshot written to {args.snapshot}")
        if args.diagnostics_plot:
            plot_diagnostics(history, args.diagnostics_plot)
            log.info(f"Diagnostics plot written to {args.diagnostics_plot}")

    return 0 if final.is_stable else 1


if __name__ == "__main__":
    raise SystemExit(main())
