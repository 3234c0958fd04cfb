"""Core SPH components: particles, kernels, neighbor search, and integration."""

from .config import SPHConfig
from .particles import ParticleArrays
from .kernel_vectorized import Poly6Kernel, SpikyGradientKernel, ViscosityLaplacianKernel
from .spatial_hash_vectorized import (
    NeighborPairs,
    AllPairsSearch,
    UniformGridSearch,
    create_neighbor_search
)
from .integrator_vectorized import (
    integrate_symplectic_euler_vectorized,
    apply_boundary_clamp_vectorized
)
from .diagnostics import SimulationDiagnostics, compute_diagnostics

__all__ = [
    'SPHConfig',
    'ParticleArrays',
    'Poly6Kernel',
    'SpikyGradientKernel',
    'ViscosityLaplacianKernel',
    'NeighborPairs',
    'AllPairsSearch',
    'UniformGridSearch',
    'create_neighbor_search',
    'integrate_symplectic_euler_vectorized',
    'apply_boundary_clamp_vectorized',
    'SimulationDiagnostics',
    'compute_diagnostics'
]
