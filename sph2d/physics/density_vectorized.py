"""
Vectorized density and pressure computation.

Density is the poly6-weighted mass sum over every particle within H,
including the particle itself:

    rho_i = sum_j m * W_poly6(|x_j - x_i|^2)

Pressure follows from a linear equation of state:

    p_i = k * (rho_i - rho_0)
"""

import numpy as np

from ..core.config import SPHConfig
from ..core.particles import ParticleArrays
from ..core.kernel_vectorized import Poly6Kernel
from ..core.spatial_hash_vectorized import NeighborPairs


def linear_equation_of_state(density: np.ndarray, gas_constant: float,
                             rest_density: float) -> np.ndarray:
    """Pressure from density: p = k * (rho - rho_0). Negative below rest density."""
    return gas_constant * (density - rest_density)


def compute_density_pressure_vectorized(particles: ParticleArrays, config: SPHConfig,
                                        pairs: NeighborPairs):
    """Compute density and pressure for every particle from a pair list.

    Results are accumulated into fresh arrays and assigned at the end, so
    every particle sees the same position snapshot.

    Args:
        particles: Particle arrays (density and pressure are overwritten)
        config: Simulation constants
        pairs: Ordered neighbor pairs (i != j) within the kernel radius
    """
    n = particles.n_particles
    if n == 0:
        return

    kernel = Poly6Kernel(config.kernel_radius)

    # Self contribution, r = 0
    density = np.full(n, config.mass * kernel.W_self(), dtype=np.float64)

    if pairs.n_pairs > 0:
        contrib = config.mass * kernel.W_vectorized(pairs.r2)
        density += np.bincount(pairs.i, weights=contrib, minlength=n)

    particles.density[:] = density
    particles.pressure[:] = linear_equation_of_state(
        density, config.gas_constant, config.rest_density)
