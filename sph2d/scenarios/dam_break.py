"""
Dam-break initial conditions.

A rectangular block of fluid sits against the left half of the domain,
resting on the bottom boundary band, and collapses under gravity once the
simulation starts.
"""

import numpy as np
from typing import Optional, Tuple

from ..core.config import SPHConfig


def generate_dam_block_positions(config: SPHConfig, particle_limit: Optional[int] = None,
                                 rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Lay out the dam block row by row, bottom to top.

    Rows sit at y = EPS + k * spacing while y < height - 2 * EPS. Within a
    row columns sit at x = x_min + c * spacing while x <= x_max, and each
    particle's x receives one uniform jitter draw in [0, jitter). Generation
    stops as soon as ``particle_limit`` particles exist.

    Args:
        config: Simulation constants (spacing, x range, jitter, domain)
        particle_limit: Maximum number of particles (None for config.particle_cap)
        rng: Random generator for the jitter (None: seeded from config.seed)

    Returns:
        Array of shape (N, 2), N <= particle_limit
    """
    if particle_limit is None:
        particle_limit = config.particle_cap
    limit = min(int(particle_limit), config.particle_cap)
    if limit <= 0:
        return np.zeros((0, 2), dtype=np.float64)

    if rng is None:
        rng = np.random.default_rng(config.seed)

    spacing = config.layout_spacing
    x_min, x_max = config.layout_x_range
    y_stop = config.domain_height - 2.0 * config.eps

    n_columns = 0
    while x_min + n_columns * spacing <= x_max:
        n_columns += 1
    n_rows = 0
    while config.eps + n_rows * spacing < y_stop:
        n_rows += 1

    full = n_rows * n_columns
    if full == 0:
        return np.zeros((0, 2), dtype=np.float64)

    # Row-major order, truncated at the limit
    n = min(full, limit)
    idx = np.arange(n)
    rows = idx // n_columns
    cols = idx % n_columns

    positions = np.empty((n, 2), dtype=np.float64)
    positions[:, 0] = x_min + cols * spacing + rng.uniform(0.0, 1.0, size=n) * config.jitter
    positions[:, 1] = config.eps + rows * spacing
    return positions


def generate_grid_block_positions(origin: Tuple[float, float], columns: int, rows: int,
                                  spacing: float, jitter: float = 0.0,
                                  rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Rectangular block of ``columns`` x ``rows`` particles.

    Args:
        origin: (x, y) of the bottom-left particle
        columns: Particles per row
        rows: Number of rows
        spacing: Distance between neighboring particles
        jitter: Uniform x jitter amplitude
        rng: Random generator for the jitter

    Returns:
        Array of shape (columns * rows, 2) in row-major order
    """
    columns = max(0, int(columns))
    rows = max(0, int(rows))
    n = columns * rows
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)

    idx = np.arange(n)
    positions = np.empty((n, 2), dtype=np.float64)
    positions[:, 0] = origin[0] + (idx % columns) * spacing
    positions[:, 1] = origin[1] + (idx // columns) * spacing

    if jitter > 0:
        if rng is None:
            rng = np.random.default_rng()
        positions[:, 0] += rng.uniform(0.0, 1.0, size=n) * jitter
    return positions
