"""
Neighbor counting for the tile world.

For a cell, the neighbor-count table maps each tile symbol to how many
neighbors currently display it. Two neighborhood shapes:

    von Neumann (radius configured as 0):  N, S, E, W
    Moore (radius r >= 1):                  all cells within Chebyshev
                                            distance r, center excluded

Border cells are never counted. A neighbor that falls on or beyond the
border ring is skipped, so cells along the edge are not biased by the
border tile.

Two entry points:
- NeighborhoodCounter.count(grid, gx, gy): one cell (numba gather kernel)
- NeighborhoodCounter.count_field(grid):   every cell at once
  (scipy.ndimage.correlate per symbol), used by the automaton and smoother
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List
import numpy as np
from numba import njit
from scipy import ndimage

from .grid import Grid
from .tiles import TileCatalog


class NeighborhoodShape(Enum):
    """Neighborhood shapes."""
    VON_NEUMANN = "von_neumann"  # 4-connected
    MOORE = "moore"              # 8-connected, configurable radius

    @classmethod
    def for_radius(cls, radius: int) -> "NeighborhoodShape":
        """Radius 0 selects von Neumann, anything else Moore."""
        return cls.VON_NEUMANN if radius == 0 else cls.MOORE


def neighborhood_offsets(radius: int) -> np.ndarray:
    """
    (dx, dy) offsets of the neighborhood, row-major, center excluded.

    Args:
        radius: 0 for von Neumann, >= 1 for Moore of that radius

    Returns:
        int64 array of shape (K, 2)
    """
    if radius < 0:
        raise ValueError(f"Neighborhood radius must be non-negative, got {radius}")
    if radius == 0:
        return np.array([[0, -1], [-1, 0], [1, 0], [0, 1]], dtype=np.int64)

    offsets = [
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx != 0 or dy != 0
    ]
    return np.array(offsets, dtype=np.int64)


def neighborhood_footprint(radius: int) -> np.ndarray:
    """Weight kernel (1 where a neighbor is counted) for correlation."""
    size = 3 if radius == 0 else 2 * radius + 1
    center = size // 2
    kernel = np.zeros((size, size), dtype=np.int32)
    for dx, dy in neighborhood_offsets(radius):
        kernel[center + dy, center + dx] = 1
    return kernel


@njit(cache=True)
def _gather_neighbor_ids(tiles, gx, gy, offsets):
    """Tile ids of in-bounds, non-border neighbors of (gx, gy)."""
    height, width = tiles.shape
    out = np.empty(offsets.shape[0], dtype=np.int32)
    n = 0
    for k in range(offsets.shape[0]):
        nx = gx + offsets[k, 0]
        ny = gy + offsets[k, 1]
        # Skip border ring and anything beyond it
        if nx <= 0 or ny <= 0 or nx >= width - 1 or ny >= height - 1:
            continue
        out[n] = tiles[ny, nx]
        n += 1
    return out[:n]


@dataclass
class NeighborCountField:
    """
    Neighbor counts for every cell of a grid.

    Attributes:
        symbols: Symbols present in the grid interior
        counts: Array (len(symbols), total_height, total_width);
                counts[i, gy, gx] = neighbors of (gx, gy) showing symbols[i]
    """
    symbols: List[str]
    counts: np.ndarray

    def table_at(self, gx: int, gy: int) -> Dict[str, int]:
        """Neighbor-count table for one cell (zero counts omitted)."""
        column = self.counts[:, gy, gx]
        return {s: int(c) for s, c in zip(self.symbols, column) if c}

    def count_of(self, symbol: str) -> np.ndarray:
        """Count map for one symbol; zeros if the symbol is absent."""
        try:
            return self.counts[self.symbols.index(symbol)]
        except ValueError:
            return np.zeros(self.counts.shape[1:], dtype=np.int32)


class NeighborhoodCounter:
    """
    Counts neighbor symbols for grid cells.

    Example:
        counter = NeighborhoodCounter(catalog, radius=1)
        counter.count(grid, 3, 4)            # {'~': 2, '.': 6}

        field = counter.count_field(grid)
        field.table_at(3, 4)                 # same table
    """

    def __init__(self, catalog: TileCatalog, radius: int = 1):
        """
        Initialize counter.

        Args:
            catalog: Tile catalog used to resolve ids to symbols
            radius: 0 for von Neumann, >= 1 for Moore
        """
        self.catalog = catalog
        self.radius = int(radius)
        self.shape = NeighborhoodShape.for_radius(self.radius)
        self._offsets = neighborhood_offsets(self.radius)
        self._footprint = neighborhood_footprint(self.radius)

    @property
    def max_neighbors(self) -> int:
        """Number of positions in the neighborhood."""
        return len(self._offsets)

    def count(self, grid: Grid, gx: int, gy: int) -> Dict[str, int]:
        """
        Neighbor-count table for the cell at full-map coordinates (gx, gy).

        Returns:
            Mapping symbol -> count. Unknown ids count as the default symbol.
        """
        ids = _gather_neighbor_ids(grid.tiles, gx, gy, self._offsets)
        table: Dict[str, int] = {}
        if ids.size == 0:
            return table
        unique, counts = np.unique(ids, return_counts=True)
        for tile_id, n in zip(unique, counts):
            symbol = self.catalog.symbol_for_id(int(tile_id))
            table[symbol] = table.get(symbol, 0) + int(n)
        return table

    def count_field(self, grid: Grid) -> NeighborCountField:
        """
        Neighbor-count tables for all cells at once.

        Only interior cells contribute counts, so border tiles never appear.
        """
        tiles = grid.tiles
        interior_mask = np.zeros(tiles.shape, dtype=bool)
        interior_mask[1:-1, 1:-1] = True

        # Group interior ids by symbol (ids sharing a symbol add up)
        groups: Dict[str, List[int]] = {}
        for tile_id in np.unique(grid.interior):
            symbol = self.catalog.symbol_for_id(int(tile_id))
            groups.setdefault(symbol, []).append(int(tile_id))

        symbols = list(groups)
        counts = np.zeros((len(symbols),) + tiles.shape, dtype=np.int32)
        for i, symbol in enumerate(symbols):
            onehot = (np.isin(tiles, groups[symbol]) & interior_mask).astype(np.int32)
            counts[i] = ndimage.correlate(onehot, self._footprint, mode="constant", cval=0)

        return NeighborCountField(symbols=symbols, counts=counts)

    def __repr__(self) -> str:
        return f"NeighborhoodCounter(shape={self.shape.value}, radius={self.radius})"


def count_neighbors(
    grid: Grid,
    catalog: TileCatalog,
    gx: int,
    gy: int,
    radius: int = 1,
) -> Dict[str, int]:
    """Convenience wrapper around NeighborhoodCounter.count."""
    return NeighborhoodCounter(catalog, radius).count(grid, gx, gy)
