"""
Simulation constants for the 2-D SPH dam break.

All physical and numerical constants live in one dataclass so the solver can
be exercised with different parameter sets. Values are fixed once the
simulation is constructed.
"""

import json
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np


NEIGHBOR_SEARCH_MODES = ("all_pairs", "grid")
BACKEND_NAMES = ("cpu", "numba")


@dataclass
class SPHConfig:
    """Configuration surface of the simulation.

    Defaults reproduce the classic dam-break setup: a 1000x1000 domain,
    kernel radius 16 and a stiff linear equation of state.
    """
    # Kernel and fluid
    kernel_radius: float = 16.0      # H, also the boundary epsilon
    mass: float = 2.5                # same for every particle
    gas_constant: float = 2000.0     # equation of state stiffness
    rest_density: float = 300.0
    viscosity: float = 200.0
    gravity: Tuple[float, float] = (0.0, -10.0)

    # Integration
    dt: float = 0.0007
    boundary_damping: float = -0.5

    # Domain and population
    domain_width: float = 1000.0
    domain_height: float = 1000.0
    particle_cap: int = 250000
    updates_per_frame: int = 2

    # Initial layout (None means "derive from the domain")
    block_spacing: Optional[float] = None
    block_x_min: Optional[float] = None
    block_x_max: Optional[float] = None
    jitter: float = 1.0
    seed: Optional[int] = None

    # Numerical guards
    min_density: float = 1e-6
    guard_density: bool = True
    density_scaled_gravity: bool = True
    max_speed_warning: Optional[float] = None  # None: one kernel radius per step

    # Execution
    neighbor_search: str = "all_pairs"
    backend: Optional[str] = None

    def __post_init__(self):
        if np.ndim(self.gravity) != 1:
            raise ValueError(f"gravity must be a (gx, gy) pair, got {self.gravity!r}")
        self.gravity = tuple(float(g) for g in self.gravity)

    # ------------------------------------------------------------------
    # Derived constants
    # ------------------------------------------------------------------
    @property
    def eps(self) -> float:
        """Boundary epsilon, equal to the kernel radius."""
        return self.kernel_radius

    @property
    def hsq(self) -> float:
        return self.kernel_radius * self.kernel_radius

    @property
    def poly6_norm(self) -> float:
        """2-D poly6 normalisation 4 / (pi H^8)."""
        return 4.0 / (np.pi * self.kernel_radius ** 8)

    @property
    def spiky_grad_norm(self) -> float:
        """Spiky gradient normalisation -10 / (pi H^5)."""
        return -10.0 / (np.pi * self.kernel_radius ** 5)

    @property
    def visc_lap_norm(self) -> float:
        """Viscosity Laplacian normalisation 40 / (pi H^5)."""
        return 40.0 / (np.pi * self.kernel_radius ** 5)

    @property
    def domain_size(self) -> Tuple[float, float]:
        return (self.domain_width, self.domain_height)

    @property
    def speed_limit(self) -> float:
        """Speed above which a run is reported as unstable."""
        if self.max_speed_warning is not None:
            return self.max_speed_warning
        return self.kernel_radius / self.dt

    @property
    def gravity_vector(self) -> np.ndarray:
        return np.array(self.gravity, dtype=np.float64)

    @property
    def layout_spacing(self) -> float:
        return self.block_spacing if self.block_spacing is not None else self.kernel_radius

    @property
    def layout_x_range(self) -> Tuple[float, float]:
        x_min = self.block_x_min if self.block_x_min is not None else self.domain_width / 7.0
        x_max = self.block_x_max if self.block_x_max is not None else self.domain_width / 2.0
        return x_min, x_max

    # ------------------------------------------------------------------
    # Validation and construction
    # ------------------------------------------------------------------
    def validate(self) -> 'SPHConfig':
        """Check the configuration for values the solver cannot handle.

        Returns:
            self, so the call can be chained

        Raises:
            ValueError: On the first invalid field found
        """
        positive = {
            'kernel_radius': self.kernel_radius,
            'mass': self.mass,
            'dt': self.dt,
            'min_density': self.min_density,
            'layout_spacing': self.layout_spacing,
        }
        for name, value in positive.items():
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if len(self.gravity) != 2:
            raise ValueError(f"gravity must have 2 components, got {len(self.gravity)}")

        if not -1.0 < self.boundary_damping <= 0.0:
            raise ValueError(
                f"boundary_damping must lie in (-1, 0], got {self.boundary_damping}")

        for name, extent in (('domain_width', self.domain_width),
                             ('domain_height', self.domain_height)):
            if extent <= 2.0 * self.eps:
                raise ValueError(
                    f"{name}={extent} leaves no room inside the boundary band "
                    f"of width {self.eps}")

        if self.particle_cap < 0:
            raise ValueError(f"particle_cap must be >= 0, got {self.particle_cap}")
        if self.updates_per_frame < 1:
            raise ValueError(f"updates_per_frame must be >= 1, got {self.updates_per_frame}")
        if self.jitter < 0:
            raise ValueError(f"jitter must be >= 0, got {self.jitter}")
        if self.max_speed_warning is not None and not self.max_speed_warning > 0:
            raise ValueError(
                f"max_speed_warning must be positive, got {self.max_speed_warning}")

        if self.neighbor_search not in NEIGHBOR_SEARCH_MODES:
            raise ValueError(
                f"Unknown neighbor_search '{self.neighbor_search}'. "
                f"Choose from: {', '.join(NEIGHBOR_SEARCH_MODES)}")
        if self.backend is not None and self.backend not in BACKEND_NAMES:
            raise ValueError(
                f"Unknown backend '{self.backend}'. Choose from: {', '.join(BACKEND_NAMES)}")
        return self

    def with_overrides(self, **kwargs) -> 'SPHConfig':
        """Copy of this configuration with some fields replaced."""
        return dataclasses.replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data['gravity'] = list(self.gravity)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SPHConfig':
        """Build a configuration from a flat mapping.

        Args:
            data: Field names to values; missing fields keep their defaults

        Raises:
            ValueError: If the mapping contains unknown keys
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> 'SPHConfig':
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))
