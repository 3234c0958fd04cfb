"""
Numba-optimized force computation.

Same physics as forces_vectorized, evaluated pair by pair without a pair
list. Parallel over i; every thread reads the density, pressure, position
and velocity snapshot and writes only force[i].
"""

import numpy as np
import numba as nb

from ..core.config import SPHConfig
from ..core.particles import ParticleArrays


@nb.njit(parallel=True, fastmath=True, cache=True)
def compute_forces_numba(position_x: np.ndarray, position_y: np.ndarray,
                         velocity_x: np.ndarray, velocity_y: np.ndarray,
                         density: np.ndarray, pressure: np.ndarray,
                         force_x: np.ndarray, force_y: np.ndarray,
                         n_particles: int, mass: float, h: float,
                         spiky_norm: float, visc_lap_norm: float, viscosity: float,
                         gravity_x: float, gravity_y: float,
                         min_density: float, guard_density: bool,
                         density_scaled_gravity: bool):
    """Pressure + viscosity + gravity, O(N^2)."""
    for i in nb.prange(n_particles):
        xi = position_x[i]
        yi = position_y[i]
        vxi = velocity_x[i]
        vyi = velocity_y[i]
        pi = pressure[i]

        rho_i = density[i]
        if guard_density and rho_i < min_density:
            rho_i = min_density

        fpx = 0.0
        fpy = 0.0
        fvx = 0.0
        fvy = 0.0

        for j in range(n_particles):
            if j == i:
                continue

            dx = position_x[j] - xi
            dy = position_y[j] - yi
            r = np.sqrt(dx * dx + dy * dy)
            if r < h:
                rho_j = density[j]
                if guard_density and rho_j < min_density:
                    rho_j = min_density

                q = h - r

                # Coincident particles have no pressure direction
                if r > 0.0:
                    coeff = -mass * (pi + pressure[j]) / (2.0 * rho_j) * spiky_norm * q * q * q / r
                    fpx += coeff * dx
                    fpy += coeff * dy

                visc = viscosity * mass / rho_j * visc_lap_norm * q
                fvx += visc * (velocity_x[j] - vxi)
                fvy += visc * (velocity_y[j] - vyi)

        if density_scaled_gravity:
            gscale = mass / rho_i
        else:
            gscale = mass

        force_x[i] = fpx + fvx + gravity_x * gscale
        force_y[i] = fpy + fvy + gravity_y * gscale


def compute_forces_numba_wrapper(particles: ParticleArrays, config: SPHConfig):
    """Wrapper for Numba force computation that matches standard interface."""
    n = particles.n_particles
    if n == 0:
        return
    gx, gy = config.gravity
    compute_forces_numba(
        particles.position_x, particles.position_y,
        particles.velocity_x, particles.velocity_y,
        particles.density, particles.pressure,
        particles.force_x, particles.force_y,
        n, config.mass, config.kernel_radius,
        config.spiky_grad_norm, config.visc_lap_norm, config.viscosity,
        gx, gy, config.min_density, config.guard_density,
        config.density_scaled_gravity
    )
