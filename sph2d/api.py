"""
Unified API for SPH with automatic backend dispatch.

This module provides a clean interface that automatically dispatches
to the CPU (NumPy) or Numba implementations based on the current backend.
"""

from typing import Optional

from .core.backend import (dispatch, set_backend, get_backend, list_backends,
                           auto_select_backend, print_backend_info)
from .core.backend import backend_function, for_backend, Backend
from .core.config import SPHConfig
from .core.particles import ParticleArrays
from .core.spatial_hash_vectorized import NeighborPairs, create_neighbor_search
from .core.integrator_vectorized import integrate_symplectic_euler_vectorized

# CPU implementations
from .physics.density_vectorized import compute_density_pressure_vectorized
from .physics.forces_vectorized import compute_forces_vectorized

# Numba implementations
from .physics.density_numba import compute_density_pressure_numba_wrapper
from .physics.forces_numba import compute_forces_numba_wrapper


def _pairs_for(particles: ParticleArrays, config: SPHConfig,
               pairs: Optional[NeighborPairs]) -> NeighborPairs:
    if pairs is not None:
        return pairs
    search = create_neighbor_search(config)
    return search.find_pairs(particles.position_x, particles.position_y)


# Register CPU implementations
@backend_function("compute_density_pressure")
@for_backend(Backend.CPU)
def _compute_density_pressure_cpu(particles: ParticleArrays, config: SPHConfig,
                                  pairs: Optional[NeighborPairs] = None):
    compute_density_pressure_vectorized(particles, config, _pairs_for(particles, config, pairs))


@backend_function("compute_forces")
@for_backend(Backend.CPU)
def _compute_forces_cpu(particles: ParticleArrays, config: SPHConfig,
                        pairs: Optional[NeighborPairs] = None):
    compute_forces_vectorized(particles, config, _pairs_for(particles, config, pairs))


@backend_function("integrate")
@for_backend(Backend.CPU)
def _integrate_cpu(particles: ParticleArrays, config: SPHConfig):
    integrate_symplectic_euler_vectorized(particles, config)


# Register Numba implementations (pair list is not needed)
@backend_function("compute_density_pressure")
@for_backend(Backend.NUMBA)
def _compute_density_pressure_numba(particles: ParticleArrays, config: SPHConfig,
                                    pairs: Optional[NeighborPairs] = None):
    compute_density_pressure_numba_wrapper(particles, config)


@backend_function("compute_forces")
@for_backend(Backend.NUMBA)
def _compute_forces_numba(particles: ParticleArrays, config: SPHConfig,
                          pairs: Optional[NeighborPairs] = None):
    compute_forces_numba_wrapper(particles, config)


@backend_function("integrate")
@for_backend(Backend.NUMBA)
def _integrate_numba(particles: ParticleArrays, config: SPHConfig):
    # O(N) update, the vectorized version is already memory bound
    integrate_symplectic_euler_vectorized(particles, config)


# Public API functions that dispatch to appropriate backend
def compute_density_pressure(particles: ParticleArrays, config: SPHConfig = None,
                             pairs: Optional[NeighborPairs] = None,
                             backend: Optional[str] = None):
    """Compute SPH density and pressure using current or specified backend.

    Args:
        particles: Particle arrays
        config: Simulation constants (defaults to SPHConfig())
        pairs: Precomputed neighbor pairs (CPU only; searched when None)
        backend: Override backend ('cpu', 'numba', or None for current)
    """
    if config is None:
        config = SPHConfig()
    dispatch("compute_density_pressure", particles, config, pairs, backend=backend)


def compute_forces(particles: ParticleArrays, config: SPHConfig = None,
                   pairs: Optional[NeighborPairs] = None,
                   backend: Optional[str] = None):
    """Compute pressure, viscosity and gravity forces.

    Density and pressure must be current.

    Args:
        particles: Particle arrays
        config: Simulation constants (defaults to SPHConfig())
        pairs: Precomputed neighbor pairs (CPU only; searched when None)
        backend: Override backend
    """
    if config is None:
        config = SPHConfig()
    dispatch("compute_forces", particles, config, pairs, backend=backend)


def integrate(particles: ParticleArrays, config: SPHConfig = None,
              backend: Optional[str] = None):
    """Integrate particle velocities and positions, then clamp to the walls.

    Args:
        particles: Particle arrays
        config: Simulation constants (defaults to SPHConfig())
        backend: Override backend
    """
    if config is None:
        config = SPHConfig()
    dispatch("integrate", particles, config, backend=backend)


# Re-export backend management functions
__all__ = [
    # API functions
    'compute_density_pressure',
    'compute_forces',
    'integrate',

    # Backend management
    'set_backend',
    'get_backend',
    'list_backends',
    'auto_select_backend',
    'print_backend_info',

    # Core classes
    'ParticleArrays',
    'SPHConfig',
    'NeighborPairs',
]
