"""Physics passes for SPH: density/pressure and forces."""

from .density_vectorized import (
    compute_density_pressure_vectorized,
    linear_equation_of_state
)
from .forces_vectorized import (
    compute_forces_vectorized,
    gravity_force
)

__all__ = [
    'compute_density_pressure_vectorized',
    'linear_equation_of_state',
    'compute_forces_vectorized',
    'gravity_force'
]
