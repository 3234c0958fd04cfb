"""
Neighbor pair search for the SPH passes.

Two interchangeable searches produce the same pair list:
- AllPairsSearch: brute force O(N^2), processed in row batches
- UniformGridSearch: cell lists with cell size H, scanning the 3x3 block
  of cells around each particle

Pairs are ordered by (i, j) in both cases, so downstream scatter-adds sum
contributions in the same order whichever search produced them.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .config import SPHConfig

logger = logging.getLogger(__name__)


@dataclass
class NeighborPairs:
    """Ordered pairs (i, j), i != j, closer than the kernel radius.

    Offsets point from i to j: dx = x_j - x_i, dy = y_j - y_i.
    """
    i: np.ndarray       # shape: (P,) int64
    j: np.ndarray       # shape: (P,) int64
    dx: np.ndarray      # shape: (P,) float64
    dy: np.ndarray      # shape: (P,) float64
    r2: np.ndarray      # shape: (P,) float64

    @staticmethod
    def empty() -> 'NeighborPairs':
        return NeighborPairs(
            i=np.zeros(0, dtype=np.int64),
            j=np.zeros(0, dtype=np.int64),
            dx=np.zeros(0, dtype=np.float64),
            dy=np.zeros(0, dtype=np.float64),
            r2=np.zeros(0, dtype=np.float64),
        )

    @property
    def n_pairs(self) -> int:
        return self.i.shape[0]

    @property
    def r(self) -> np.ndarray:
        return np.sqrt(self.r2)


class AllPairsSearch:
    """Brute-force search over every ordered particle pair.

    This is the reference search: O(N^2) distance checks per call, no
    acceleration structure.
    """

    def __init__(self, radius: float, batch_size: int = 512):
        """
        Args:
            radius: Kernel support radius H
            batch_size: Rows of the N x N distance matrix held in memory at once
        """
        self.radius = float(radius)
        self.radius2 = self.radius * self.radius
        self.batch_size = max(1, int(batch_size))

    def find_pairs(self, position_x: np.ndarray, position_y: np.ndarray) -> NeighborPairs:
        n = position_x.shape[0]
        if n == 0:
            return NeighborPairs.empty()

        chunks = []
        for batch_start in range(0, n, self.batch_size):
            batch_end = min(batch_start + self.batch_size, n)
            rows = np.arange(batch_start, batch_end)

            # r_ij = x_j - x_i for every i in the batch against all j
            dx = position_x[np.newaxis, :] - position_x[rows, np.newaxis]
            dy = position_y[np.newaxis, :] - position_y[rows, np.newaxis]
            r2 = dx * dx + dy * dy

            mask = r2 < self.radius2
            mask[np.arange(batch_end - batch_start), rows] = False

            local_i, j = np.nonzero(mask)
            chunks.append((rows[local_i], j, dx[local_i, j], dy[local_i, j], r2[local_i, j]))

        return NeighborPairs(
            i=np.concatenate([c[0] for c in chunks]).astype(np.int64),
            j=np.concatenate([c[1] for c in chunks]).astype(np.int64),
            dx=np.concatenate([c[2] for c in chunks]),
            dy=np.concatenate([c[3] for c in chunks]),
            r2=np.concatenate([c[4] for c in chunks]),
        )


class UniformGridSearch:
    """Cell-list search on a uniform grid of cell size H.

    Any pair closer than H lies in the same or an adjacent cell, so only the
    3x3 neighborhood of each particle's cell is scanned. Particles with
    non-finite coordinates are never paired, matching the brute-force search
    where their distances compare False.
    """

    def __init__(self, radius: float):
        self.radius = float(radius)
        self.radius2 = self.radius * self.radius
        self.cell_size = self.radius
        self.last_stats = {}

    def _cell_coordinates(self, px: np.ndarray, py: np.ndarray):
        """Integer cell coordinates shifted by one so neighbors stay >= 0."""
        cx = np.floor((px - px.min()) / self.cell_size).astype(np.int64) + 1
        cy = np.floor((py - py.min()) / self.cell_size).astype(np.int64) + 1
        return cx, cy

    def find_pairs(self, position_x: np.ndarray, position_y: np.ndarray) -> NeighborPairs:
        finite = np.isfinite(position_x) & np.isfinite(position_y)
        ids = np.nonzero(finite)[0]
        if ids.shape[0] == 0:
            return NeighborPairs.empty()

        px = position_x[ids]
        py = position_y[ids]
        cx, cy = self._cell_coordinates(px, py)

        # Linear cell id; the stride leaves room for the cy +/- 1 lookups
        stride = int(cy.max()) + 3
        cell_id = cx * stride + cy

        order = np.argsort(cell_id, kind='stable')
        sorted_cells = cell_id[order]

        cand_i = []
        cand_j = []
        for dcx in (-1, 0, 1):
            for dcy in (-1, 0, 1):
                target = (cx + dcx) * stride + (cy + dcy)
                start = np.searchsorted(sorted_cells, target, side='left')
                end = np.searchsorted(sorted_cells, target, side='right')
                counts = end - start
                total = int(counts.sum())
                if total == 0:
                    continue

                # Expand each [start, end) range into explicit candidate slots
                first_slot = np.cumsum(counts) - counts
                slot = np.repeat(start, counts) + (np.arange(total) - np.repeat(first_slot, counts))
                cand_i.append(np.repeat(np.arange(ids.shape[0]), counts))
                cand_j.append(order[slot])

        local_i = np.concatenate(cand_i)
        local_j = np.concatenate(cand_j)

        dx = px[local_j] - px[local_i]
        dy = py[local_j] - py[local_i]
        r2 = dx * dx + dy * dy
        keep = (r2 < self.radius2) & (local_i != local_j)

        i = ids[local_i[keep]]
        j = ids[local_j[keep]]
        sort = np.lexsort((j, i))

        occupied = np.unique(cell_id).shape[0]
        self.last_stats = {
            'particles': int(ids.shape[0]),
            'occupied_cells': int(occupied),
            'mean_particles_per_cell': float(ids.shape[0] / occupied),
            'candidates': int(local_i.shape[0]),
            'pairs': int(sort.shape[0]),
        }
        logger.debug("Grid search: %s", self.last_stats)

        return NeighborPairs(
            i=i[sort].astype(np.int64),
            j=j[sort].astype(np.int64),
            dx=dx[keep][sort],
            dy=dy[keep][sort],
            r2=r2[keep][sort],
        )


def create_neighbor_search(config: SPHConfig):
    """Create the neighbor search selected by ``config.neighbor_search``."""
    if config.neighbor_search == "grid":
        return UniformGridSearch(config.kernel_radius)
    if config.neighbor_search == "all_pairs":
        return AllPairsSearch(config.kernel_radius)
    raise ValueError(f"Unknown neighbor_search '{config.neighbor_search}'")
