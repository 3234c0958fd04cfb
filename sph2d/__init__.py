"""SPH (Smoothed Particle Hydrodynamics) dam-break fluid simulation in 2-D."""

from . import core
from . import physics
from . import scenarios

# Import API to trigger backend registration
from . import api

from .api import (
    # Core functions
    compute_density_pressure,
    compute_forces,
    integrate,

    # Backend management
    set_backend,
    get_backend,
    list_backends,
    auto_select_backend,
    print_backend_info,

    # Core classes
    ParticleArrays,
    SPHConfig,
)
from .core.simulation import SPHSimulation
from .core.diagnostics import SimulationDiagnostics

__version__ = "0.1.0"

__all__ = [
    # Modules
    'core',
    'physics',
    'scenarios',

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
    'SPHSimulation',
    'SimulationDiagnostics',
]
