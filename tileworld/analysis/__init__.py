"""
Analysis module for the tile world.

Provides:
- Tile composition of a grid (counts and fractions per tile)
- Per-tick population series from a run history
- Change fraction between two grids
"""

from .composition import (
    TileComposition,
    tile_composition,
    population_history,
    change_fraction,
)

__all__ = [
    "TileComposition",
    "tile_composition",
    "population_history",
    "change_fraction",
]
