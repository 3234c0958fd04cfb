"""
Particle data structure using the Structure-of-Arrays (SoA) pattern.

Every attribute is a contiguous float64 array indexed by particle id, so the
density, force and integration passes can read whole-population snapshots
and write whole-population results without per-particle objects.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional


@dataclass
class ParticleArrays:
    """Structure of Arrays for the fluid particles.

    Order is stable for the lifetime of the arrays: index i always refers to
    the same particle in every field.
    """
    # Primary state (N particles)
    position_x: np.ndarray      # shape: (N,)
    position_y: np.ndarray      # shape: (N,)
    velocity_x: np.ndarray      # shape: (N,)
    velocity_y: np.ndarray      # shape: (N,)

    # Force accumulators, recomputed every tick
    force_x: np.ndarray         # shape: (N,)
    force_y: np.ndarray         # shape: (N,)

    # Derived per-tick fields
    density: np.ndarray         # shape: (N,)
    pressure: np.ndarray        # shape: (N,)

    @staticmethod
    def allocate(n_particles: int) -> 'ParticleArrays':
        """Allocate zero-filled arrays for ``n_particles`` particles.

        Args:
            n_particles: Number of particles (negative values give an empty set)

        Returns:
            New ParticleArrays instance
        """
        n = max(0, int(n_particles))

        def zeros():
            return np.zeros(n, dtype=np.float64)

        return ParticleArrays(
            position_x=zeros(),
            position_y=zeros(),
            velocity_x=zeros(),
            velocity_y=zeros(),
            force_x=zeros(),
            force_y=zeros(),
            density=zeros(),
            pressure=zeros(),
        )

    @staticmethod
    def from_positions(positions: np.ndarray) -> 'ParticleArrays':
        """Create particles at rest at the given positions.

        Args:
            positions: Array of shape (N, 2)

        Raises:
            ValueError: If positions is not an (N, 2) array
        """
        positions = np.asarray(positions, dtype=np.float64)
        if positions.size == 0:
            return ParticleArrays.allocate(0)
        if positions.ndim != 2 or positions.shape[1] != 2:
            raise ValueError(f"positions must have shape (N, 2), got {positions.shape}")

        particles = ParticleArrays.allocate(positions.shape[0])
        particles.position_x[:] = positions[:, 0]
        particles.position_y[:] = positions[:, 1]
        return particles

    @property
    def n_particles(self) -> int:
        return self.position_x.shape[0]

    def get_positions(self) -> np.ndarray:
        """Get particle positions as an (N, 2) array copy."""
        return np.column_stack((self.position_x, self.position_y))

    def get_velocities(self) -> np.ndarray:
        """Get particle velocities as an (N, 2) array copy."""
        return np.column_stack((self.velocity_x, self.velocity_y))

    def safe_density(self, min_density: Optional[float] = None) -> np.ndarray:
        """Density to divide by: clamped to ``min_density`` when one is given.

        The stored density is not modified.
        """
        if min_density is None:
            return self.density
        return np.maximum(self.density, min_density)

    def copy(self) -> 'ParticleArrays':
        """Deep copy of every field."""
        return ParticleArrays(
            position_x=self.position_x.copy(),
            position_y=self.position_y.copy(),
            velocity_x=self.velocity_x.copy(),
            velocity_y=self.velocity_y.copy(),
            force_x=self.force_x.copy(),
            force_y=self.force_y.copy(),
            density=self.density.copy(),
            pressure=self.pressure.copy(),
        )
