"""
Vectorized 2-D smoothing kernels with compact support H.

Implements the three kernels of the classic Mueller et al. fluid model:
- Poly6 for density estimation
- Spiky gradient for pressure forces
- Viscosity Laplacian for viscous forces

Every kernel evaluates to exactly zero at and beyond the support radius.
"""

import numpy as np
from typing import Tuple


class Poly6Kernel:
    """Poly6 density kernel.

    W(r2) = 4 / (pi H^8) * (H^2 - r2)^3    if r2 < H^2
          = 0                               otherwise

    Evaluated on squared distances so no square root is needed.
    """

    def __init__(self, h: float):
        """Initialize kernel for support radius ``h``."""
        if h <= 0:
            raise ValueError(f"Kernel radius must be positive, got {h}")
        self.h = float(h)
        self.hsq = self.h * self.h
        self.norm_factor = 4.0 / (np.pi * self.h ** 8)

    def W_vectorized(self, r2: np.ndarray) -> np.ndarray:
        """Kernel values for an array of squared distances.

        Args:
            r2: Squared distances, any shape

        Returns:
            Kernel values with the same shape as r2
        """
        r2 = np.asarray(r2, dtype=np.float64)
        diff = np.where(r2 < self.hsq, self.hsq - r2, 0.0)
        return self.norm_factor * diff ** 3

    def W_self(self) -> float:
        """Kernel value at r=0 (self-contribution)."""
        return self.norm_factor * self.hsq ** 3

    def normalization_integral(self, n_samples: int = 2000) -> float:
        """Integrate W over the disc of radius H (should be close to 1)."""
        r = np.linspace(0.0, self.h, n_samples)
        integrand = 2.0 * np.pi * r * self.W_vectorized(r * r)
        # Trapezoid rule
        return float(np.sum(0.5 * (integrand[1:] + integrand[:-1]) * np.diff(r)))


class SpikyGradientKernel:
    """Spiky kernel gradient used for the pressure term.

    The scalar factor is -10 / (pi H^5) * (H - r)^3 for r < H. The gradient
    direction is -r_ij / |r_ij| with r_ij = x_j - x_i.
    """

    def __init__(self, h: float):
        if h <= 0:
            raise ValueError(f"Kernel radius must be positive, got {h}")
        self.h = float(h)
        self.norm_factor = -10.0 / (np.pi * self.h ** 5)

    def magnitude_vectorized(self, r: np.ndarray) -> np.ndarray:
        """Signed scalar factor norm * (H - r)^3, zero for r >= H."""
        r = np.asarray(r, dtype=np.float64)
        diff = np.where(r < self.h, self.h - r, 0.0)
        return self.norm_factor * diff ** 3

    def gradW_vectorized(self, dx: np.ndarray, dy: np.ndarray,
                         r: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Gradient components for pair offsets r_ij = (dx, dy).

        Coincident pairs (r == 0) have no direction and return zero.

        Args:
            dx: x_j - x_i
            dy: y_j - y_i
            r: |r_ij|

        Returns:
            (grad_x, grad_y) with the same shape as r
        """
        r = np.asarray(r, dtype=np.float64)
        nonzero = r > 0.0
        safe_r = np.where(nonzero, r, 1.0)
        factor = np.where(nonzero, -self.magnitude_vectorized(r) / safe_r, 0.0)
        return factor * dx, factor * dy


class ViscosityLaplacianKernel:
    """Laplacian of the viscosity kernel: 40 / (pi H^5) * (H - r) for r < H."""

    def __init__(self, h: float):
        if h <= 0:
            raise ValueError(f"Kernel radius must be positive, got {h}")
        self.h = float(h)
        self.norm_factor = 40.0 / (np.pi * self.h ** 5)

    def laplacianW_vectorized(self, r: np.ndarray) -> np.ndarray:
        r = np.asarray(r, dtype=np.float64)
        return np.where(r < self.h, self.norm_factor * (self.h - r), 0.0)
