"""
Numba-optimized density and pressure computation.

Brute-force over all particles, parallel over i. Each thread reads the
shared position snapshot and writes only its own density slot.
"""

import numpy as np
import numba as nb

from ..core.config import SPHConfig
from ..core.particles import ParticleArrays


@nb.njit(parallel=True, fastmath=True, cache=True)
def compute_density_pressure_numba(position_x: np.ndarray, position_y: np.ndarray,
                                   density: np.ndarray, pressure: np.ndarray,
                                   n_particles: int, mass: float, hsq: float,
                                   poly6_norm: float, gas_constant: float,
                                   rest_density: float):
    """Density (self included) and linear equation of state, O(N^2)."""
    for i in nb.prange(n_particles):
        xi = position_x[i]
        yi = position_y[i]
        rho = 0.0

        for j in range(n_particles):
            dx = position_x[j] - xi
            dy = position_y[j] - yi
            r2 = dx * dx + dy * dy
            if r2 < hsq:
                diff = hsq - r2
                rho += mass * poly6_norm * diff * diff * diff

        density[i] = rho
        pressure[i] = gas_constant * (rho - rest_density)


def compute_density_pressure_numba_wrapper(particles: ParticleArrays, config: SPHConfig):
    """Wrapper for Numba density computation that matches standard interface."""
    n = particles.n_particles
    if n == 0:
        return
    compute_density_pressure_numba(
        particles.position_x, particles.position_y,
        particles.density, particles.pressure,
        n, config.mass, config.hsq, config.poly6_norm,
        config.gas_constant, config.rest_density
    )
