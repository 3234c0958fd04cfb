"""
SPH simulation state and tick pipeline.

One tick runs three passes over the whole population:

    density/pressure  ->  forces  ->  integration + wall clamp

Each pass reads the state left by the previous one and writes its own
outputs, so no particle ever sees a partially updated neighbor.
"""

import logging
from typing import Optional

import numpy as np

from .. import api
from .backend import get_backend
from .config import SPHConfig
from .diagnostics import SimulationDiagnostics, compute_diagnostics
from .particles import ParticleArrays
from .spatial_hash_vectorized import create_neighbor_search
from ..scenarios.dam_break import generate_dam_block_positions


class SPHSimulation:
    """Dam-break fluid simulation driven by fixed-size ticks."""

    def __init__(self, config: Optional[SPHConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 log_level: str = "INFO"):
        """
        Args:
            config: Simulation constants (defaults to SPHConfig())
            rng: Random generator for the layout jitter; when None one is
                seeded from config.seed
            log_level: Logging level name for this simulation's logger

        Raises:
            ValueError: If the configuration is invalid
        """
        self._config = (config if config is not None else SPHConfig()).validate()
        self.rng = rng if rng is not None else np.random.default_rng(self._config.seed)

        self.logger = logging.getLogger(f"SPH2D_{id(self)}")
        self.logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

        self._search = create_neighbor_search(self._config)
        self._particles = ParticleArrays.allocate(0)
        self._step_count = 0
        self._time = 0.0
        self._unstable = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def config(self) -> SPHConfig:
        return self._config

    @property
    def particles(self) -> ParticleArrays:
        return self._particles

    @property
    def n_particles(self) -> int:
        return self._particles.n_particles

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def time(self) -> float:
        return self._time

    @property
    def backend(self) -> str:
        """Backend used by step(): the configured one, else the global one."""
        return self._config.backend or get_backend()

    # ------------------------------------------------------------------
    # Population management
    # ------------------------------------------------------------------
    def initialize(self, particle_limit: Optional[int] = None):
        """Replace the population with the dam-break block.

        Args:
            particle_limit: Maximum particle count, capped at
                config.particle_cap (None for the cap itself, <= 0 for none)
        """
        positions = generate_dam_block_positions(self._config, particle_limit, self.rng)
        self._particles = ParticleArrays.from_positions(positions)
        self._reset_clock()
        self.logger.info(f"Initialized {self.n_particles} particles")

    def reset(self):
        """Discard all particles and rewind the clock."""
        self._particles = ParticleArrays.allocate(0)
        self._reset_clock()
        self.logger.debug("Simulation reset")

    def restart(self, particle_limit: Optional[int] = None):
        """Reset, then lay out the dam block again."""
        self.reset()
        self.initialize(particle_limit)

    def load_positions(self, positions: np.ndarray):
        """Replace the population with particles at rest at ``positions``.

        Raises:
            ValueError: If positions is not an (N, 2) array
        """
        self._particles = ParticleArrays.from_positions(positions)
        self._reset_clock()
        self.logger.debug(f"Loaded {self.n_particles} particles")

    def _reset_clock(self):
        self._step_count = 0
        self._time = 0.0
        self._unstable = False

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------
    def step(self):
        """Advance the simulation by one tick of config.dt."""
        if self.n_particles == 0:
            return

        backend = self.backend
        particles = self._particles

        # The Numba kernels loop over all pairs themselves
        pairs = None
        if backend == "cpu":
            pairs = self._search.find_pairs(particles.position_x, particles.position_y)

        api.compute_density_pressure(particles, self._config, pairs, backend=backend)
        api.compute_forces(particles, self._config, pairs, backend=backend)
        api.integrate(particles, self._config, backend=backend)

        self._step_count += 1
        self._time += self._config.dt
        self._check_stability()

    def advance(self, n_steps: int):
        """Run ``n_steps`` ticks."""
        for _ in range(max(0, int(n_steps))):
            self.step()

    def _check_stability(self):
        """Log a warning when the run first becomes unstable."""
        p = self._particles
        speed2 = p.velocity_x ** 2 + p.velocity_y ** 2
        limit = self._config.speed_limit
        stable = bool(np.all(np.isfinite(speed2)) and np.all(speed2 <= limit * limit)
                      and np.all(np.isfinite(p.density)))

        if not stable and not self._unstable:
            diag = self.diagnostics()
            self.logger.warning(
                f"Simulation unstable at step {self._step_count}: "
                f"max speed {diag.max_speed:.4g} (limit {limit:.4g}), "
                f"{diag.non_finite_count} non-finite values")
        elif stable and self._unstable:
            self.logger.info(f"Simulation stable again at step {self._step_count}")
        self._unstable = not stable

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def snapshot_positions(self) -> np.ndarray:
        """Copy of the current positions, shape (N, 2), in particle order."""
        return self._particles.get_positions()

    def diagnostics(self) -> SimulationDiagnostics:
        return compute_diagnostics(self._particles, self._config,
                                   self._step_count, self._time)
