"""
Composition statistics for tile grids.

Only interior cells are counted; the border ring is a constant frame and
would skew every fraction towards the border tile.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Union
import numpy as np

from ..core.grid import Grid, GridSnapshot
from ..core.tiles import TileCatalog


@dataclass
class TileComposition:
    """Interior tile counts of one grid."""
    counts: Dict[int, int] = field(default_factory=dict)
    total: int = 0

    def fraction(self, tile_id: int) -> float:
        if self.total == 0:
            return 0.0
        return self.counts.get(tile_id, 0) / self.total

    def fractions(self) -> Dict[int, float]:
        return {tid: self.fraction(tid) for tid in self.counts}

    def by_name(self, catalog: TileCatalog) -> Dict[str, int]:
        """Counts keyed by tile name (unknown ids as 'unknown_<id>')."""
        result = {}
        for tid, n in self.counts.items():
            tile = catalog.get(tid)
            result[tile.name if tile is not None else f"unknown_{tid}"] = n
        return result


def _interior(grid: Union[Grid, GridSnapshot]) -> np.ndarray:
    return grid.tiles[1:-1, 1:-1]


def tile_composition(grid: Union[Grid, GridSnapshot]) -> TileComposition:
    """
    Count tiles in the grid interior.

    Example:
        comp = tile_composition(world.grid)
        comp.fraction(world.catalog.id_for_symbol("~"))
    """
    interior = _interior(grid)
    ids, counts = np.unique(interior, return_counts=True)
    return TileComposition(
        counts={int(i): int(c) for i, c in zip(ids, counts)},
        total=int(interior.size),
    )


def population_history(
    history: Sequence[Union[Grid, GridSnapshot]],
    tile_ids: Sequence[int],
) -> Dict[int, np.ndarray]:
    """
    Interior population of each tile id over a sequence of grids.

    Returns:
        Dict mapping tile id -> array with one count per grid
    """
    series: Dict[int, List[int]] = {tid: [] for tid in tile_ids}
    for grid in history:
        interior = _interior(grid)
        for tid in tile_ids:
            series[tid].append(int(np.count_nonzero(interior == tid)))
    return {tid: np.array(values, dtype=np.int64) for tid, values in series.items()}


def change_fraction(before: Union[Grid, GridSnapshot], after: Union[Grid, GridSnapshot]) -> float:
    """Fraction of interior cells whose tile differs between two grids."""
    a, b = _interior(before), _interior(after)
    if a.shape != b.shape:
        raise ValueError(f"Grid shapes differ: {a.shape} vs {b.shape}")
    if a.size == 0:
        return 0.0
    return float(np.count_nonzero(a != b)) / a.size
