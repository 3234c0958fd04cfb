"""SPH simulation scenarios."""

from .dam_break import (
    generate_dam_block_positions,
    generate_grid_block_positions
)

__all__ = [
    'generate_dam_block_positions',
    'generate_grid_block_positions'
]
