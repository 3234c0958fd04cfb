"""
Vectorized time integration for SPH particles.

Symplectic Euler with a fixed timestep followed by a clamping wall
boundary: a particle that enters the band of width EPS along a wall is put
back on the band edge and the normal velocity component is multiplied by
the (negative) damping factor.
"""

import numpy as np
from typing import Tuple

from .config import SPHConfig
from .particles import ParticleArrays


def integrate_symplectic_euler_vectorized(particles: ParticleArrays, config: SPHConfig):
    """Advance velocities then positions by one fixed timestep.

    v += dt * f / rho
    x += dt * v

    Args:
        particles: Particle arrays with forces and density computed
        config: Simulation constants (dt, domain, damping, density guard)
    """
    if particles.n_particles == 0:
        return

    dt = config.dt
    min_density = config.min_density if config.guard_density else None
    rho = particles.safe_density(min_density)

    # Update velocities (vectorized)
    particles.velocity_x += dt * particles.force_x / rho
    particles.velocity_y += dt * particles.force_y / rho

    # Update positions with the new velocities
    particles.position_x += dt * particles.velocity_x
    particles.position_y += dt * particles.velocity_y

    apply_boundary_clamp_vectorized(particles, config.domain_size, config.eps,
                                    config.boundary_damping)


def _clamp_axis(position: np.ndarray, velocity: np.ndarray, extent: float,
                eps: float, damping: float):
    # Lower wall first, then upper wall on the already clamped position
    mask_low = position - eps < 0.0
    velocity[mask_low] *= damping
    position[mask_low] = eps

    mask_high = position + eps > extent
    velocity[mask_high] *= damping
    position[mask_high] = extent - eps


def apply_boundary_clamp_vectorized(particles: ParticleArrays,
                                    domain_size: Tuple[float, float],
                                    eps: float, damping: float = -0.5):
    """Clamp particles into [eps, extent - eps] on both axes.

    Args:
        particles: Particle arrays
        domain_size: (width, height) of the domain
        eps: Boundary band width
        damping: Factor applied to the normal velocity on contact, in (-1, 0]
    """
    width, height = domain_size
    _clamp_axis(particles.position_x, particles.velocity_x, width, eps, damping)
    _clamp_axis(particles.position_y, particles.velocity_y, height, eps, damping)
