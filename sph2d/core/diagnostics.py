"""
Per-tick summary statistics used to detect numerical blow-up.
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from .config import SPHConfig
from .particles import ParticleArrays


@dataclass
class SimulationDiagnostics:
    """Snapshot of aggregate simulation quantities."""
    step: int
    time: float
    n_particles: int
    min_density: float
    max_density: float
    mean_density: float
    max_speed: float
    kinetic_energy: float
    net_force: Tuple[float, float]
    non_finite_count: int
    speed_limit: float

    @property
    def is_stable(self) -> bool:
        """True while every value is finite and no particle exceeds the speed limit."""
        return self.non_finite_count == 0 and self.max_speed <= self.speed_limit

    def summary(self) -> str:
        return (f"step={self.step} t={self.time:.4f} n={self.n_particles} "
                f"rho=[{self.min_density:.4g}, {self.max_density:.4g}] "
                f"v_max={self.max_speed:.4g} KE={self.kinetic_energy:.4g}")


def compute_diagnostics(particles: ParticleArrays, config: SPHConfig,
                        step: int, time: float) -> SimulationDiagnostics:
    """Build a diagnostics snapshot of the current particle state.

    Statistics are taken over finite values only; the count of non-finite
    entries across positions, velocities and densities is reported separately.
    An empty population gives zeros.
    """
    n = particles.n_particles
    if n == 0:
        return SimulationDiagnostics(
            step=step, time=time, n_particles=0,
            min_density=0.0, max_density=0.0, mean_density=0.0,
            max_speed=0.0, kinetic_energy=0.0, net_force=(0.0, 0.0),
            non_finite_count=0, speed_limit=config.speed_limit,
        )

    fields = (particles.position_x, particles.position_y,
              particles.velocity_x, particles.velocity_y, particles.density)
    non_finite = int(sum(np.count_nonzero(~np.isfinite(f)) for f in fields))

    density = particles.density[np.isfinite(particles.density)]
    speed2 = particles.velocity_x ** 2 + particles.velocity_y ** 2
    speed2 = speed2[np.isfinite(speed2)]

    if density.size:
        min_rho, max_rho, mean_rho = float(density.min()), float(density.max()), float(density.mean())
    else:
        min_rho = max_rho = mean_rho = float('nan')

    max_speed = float(np.sqrt(speed2.max())) if speed2.size else float('inf')

    return SimulationDiagnostics(
        step=step,
        time=time,
        n_particles=n,
        min_density=min_rho,
        max_density=max_rho,
        mean_density=mean_rho,
        max_speed=max_speed,
        kinetic_energy=float(0.5 * config.mass * speed2.sum()),
        net_force=(float(np.sum(particles.force_x)), float(np.sum(particles.force_y))),
        non_finite_count=non_finite,
        speed_limit=config.speed_limit,
    )
