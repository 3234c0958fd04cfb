"""
Vectorized force computation.

Per particle i, summed over neighbors j != i with r = |x_j - x_i| < H:

    f_press = -r_hat * m * (p_i + p_j) / (2 rho_j) * spiky * (H - r)^3
    f_visc  = mu * m * (v_j - v_i) / rho_j * visc_lap * (H - r)
    f_grav  = g * m / rho_i        (or g * m without density scaling)

The spiky normalisation is negative, so with the sign convention above a
particle below rest density (negative pressure) is pushed away from its
neighbors.
"""

import numpy as np

from ..core.config import SPHConfig
from ..core.particles import ParticleArrays
from ..core.kernel_vectorized import SpikyGradientKernel, ViscosityLaplacianKernel
from ..core.spatial_hash_vectorized import NeighborPairs


def gravity_force(config: SPHConfig, divisor_density: np.ndarray):
    """Gravity force components for every particle.

    Args:
        config: Simulation constants
        divisor_density: Density used as divisor (already guarded)

    Returns:
        (gravity_x, gravity_y) arrays
    """
    gx, gy = config.gravity
    if config.density_scaled_gravity:
        scale = config.mass / divisor_density
    else:
        scale = np.full(divisor_density.shape[0], config.mass)
    return gx * scale, gy * scale


def compute_forces_vectorized(particles: ParticleArrays, config: SPHConfig,
                              pairs: NeighborPairs):
    """Compute pressure, viscosity and gravity forces from a pair list.

    Reads density, pressure, position and velocity of the current snapshot
    and overwrites force_x and force_y.

    Args:
        particles: Particle arrays with density and pressure up to date
        config: Simulation constants
        pairs: Ordered neighbor pairs (i != j) within the kernel radius
    """
    n = particles.n_particles
    if n == 0:
        return

    min_density = config.min_density if config.guard_density else None
    rho = particles.safe_density(min_density)

    force_x = np.zeros(n, dtype=np.float64)
    force_y = np.zeros(n, dtype=np.float64)

    if pairs.n_pairs > 0:
        i = pairs.i
        j = pairs.j
        r = pairs.r

        spiky = SpikyGradientKernel(config.kernel_radius)
        visc = ViscosityLaplacianKernel(config.kernel_radius)

        # Pressure: grad W already carries the -r_hat direction
        grad_x, grad_y = spiky.gradW_vectorized(pairs.dx, pairs.dy, r)
        press_coeff = config.mass * (particles.pressure[i] + particles.pressure[j]) / (2.0 * rho[j])

        # Viscosity
        visc_coeff = config.viscosity * config.mass / rho[j] * visc.laplacianW_vectorized(r)
        dvx = particles.velocity_x[j] - particles.velocity_x[i]
        dvy = particles.velocity_y[j] - particles.velocity_y[i]

        pair_fx = grad_x * press_coeff + visc_coeff * dvx
        pair_fy = grad_y * press_coeff + visc_coeff * dvy

        force_x += np.bincount(i, weights=pair_fx, minlength=n)
        force_y += np.bincount(i, weights=pair_fy, minlength=n)

    grav_x, grav_y = gravity_force(config, rho)
    particles.force_x[:] = force_x + grav_x
    particles.force_y[:] = force_y + grav_y
