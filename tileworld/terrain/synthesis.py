"""
Terrain synthesis for the tile world.

Per interior cell (x, y):

1. Sample three octaves and normalize each to [0, 1]:
       base   = unit(noise(x * 1, y * 1))                low frequency
       ridge  = 1 - |noise(x * 2 + 1000, y * 2 + 1000)|  ridgelines
       detail = unit(noise(x * 4 + 2000, y * 4 + 2000))  high frequency
2. Blend:  height = (0.4 * base + 0.4 * ridge + 0.2 * detail) ** 1.1
3. Zone:   height < 0.25 -> 0 (low), < 0.7 -> 1 (mid), else 2 (high)
4. Pick a spawn symbol for the zone by weighted choice (see
   select_symbol_for_zone), driven by a fourth, lower-frequency
   "variation" octave so neighboring cells vary coherently.
5. Write the symbol's tile id. Unresolvable symbols leave the cell as is.

Octave multipliers are applied on top of the sampler's frequency.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from ..core.grid import Grid
from ..core.tiles import TileCatalog
from .noise import NoiseSampler, to_unit
from .spawn import NUM_ZONES, SpawnTable

logger = logging.getLogger(__name__)


ZONE_LOW = 0
ZONE_MID = 1
ZONE_HIGH = 2

# Zone thresholds on the blended height
LOW_THRESHOLD = 0.25
HIGH_THRESHOLD = 0.7

BASE_WEIGHT = 0.4
RIDGE_WEIGHT = 0.4
DETAIL_WEIGHT = 0.2
HEIGHT_EXPONENT = 1.1


@dataclass(frozen=True)
class Octave:
    """Coordinate multiplier and phase offset for one noise layer."""
    scale: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    def sample(self, sampler: NoiseSampler, x: float, y: float) -> float:
        return sampler.sample(x * self.scale + self.offset_x, y * self.scale + self.offset_y)


BASE_OCTAVE = Octave(scale=1.0)
RIDGE_OCTAVE = Octave(scale=2.0, offset_x=1000.0, offset_y=1000.0)
DETAIL_OCTAVE = Octave(scale=4.0, offset_x=2000.0, offset_y=2000.0)
VARIATION_OCTAVE = Octave(scale=0.5, offset_x=5000.0, offset_y=5000.0)


def height_at(sampler: NoiseSampler, x: float, y: float) -> float:
    """Blended, curved height in [0, 1] for a cell."""
    base = to_unit(BASE_OCTAVE.sample(sampler, x, y))
    ridge = 1.0 - abs(RIDGE_OCTAVE.sample(sampler, x, y))
    detail = to_unit(DETAIL_OCTAVE.sample(sampler, x, y))

    height = BASE_WEIGHT * base + RIDGE_WEIGHT * ridge + DETAIL_WEIGHT * detail
    height = min(1.0, max(0.0, height))
    return height ** HEIGHT_EXPONENT


def classify_zone(height: float) -> int:
    """Elevation zone for a blended height."""
    if height < LOW_THRESHOLD:
        return ZONE_LOW
    if height < HIGH_THRESHOLD:
        return ZONE_MID
    return ZONE_HIGH


def select_symbol_for_zone(
    zone: int,
    spawn_table: SpawnTable,
    variation: float,
) -> Optional[str]:
    """
    Weighted choice of a spawn symbol for a zone.

    Each candidate weight is  probability * (0.9 + variation * 0.2).
    The weights are not normalized; `variation * total_weight` is used as a
    cursor and candidates are walked in table order, returning the first
    whose cumulative weight reaches the cursor.

    If the walk finds nothing (rounding, or every weight is zero) the
    candidate with the highest base probability wins, earliest on ties.

    Args:
        zone: Elevation zone (0, 1, 2)
        spawn_table: Spawn probabilities
        variation: Coherent noise value in [0, 1]

    Returns:
        Chosen symbol, or None if the table has no candidates
    """
    factor = 0.9 + variation * 0.2
    weighted: List[Tuple[str, float, float]] = []
    total = 0.0
    for symbol, probability in spawn_table.candidates(zone):
        weight = probability * factor
        weighted.append((symbol, probability, weight))
        total += weight

    if not weighted:
        return None

    if total > 0.0:
        cursor = variation * total
        cumulative = 0.0
        for symbol, _, weight in weighted:
            cumulative += weight
            if cumulative >= cursor:
                return symbol

    best_symbol, best_probability, _ = weighted[0]
    for symbol, probability, _ in weighted[1:]:
        if probability > best_probability:
            best_symbol, best_probability = symbol, probability
    return best_symbol


@dataclass
class SynthesisReport:
    """
    Outcome of one synthesis pass.

    Attributes:
        placed: Cells written
        unresolved: Cells left untouched because the symbol has no tile id
        zone_counts: Cells per zone (low, mid, high)
        symbol_counts: Cells per placed symbol
        heights: Blended heightmap of the interior, shape (height, width)
        skipped: True if nothing ran (empty spawn table)
    """
    placed: int = 0
    unresolved: int = 0
    zone_counts: List[int] = field(default_factory=lambda: [0] * NUM_ZONES)
    symbol_counts: Dict[str, int] = field(default_factory=dict)
    heights: Optional[np.ndarray] = None
    skipped: bool = False


class TerrainSynthesizer:
    """
    Noise-driven terrain placement.

    Example:
        synth = TerrainSynthesizer(catalog)
        report = synth.synthesize(grid, OpenSimplexSampler(), spawn_table,
                                  seed=1337, frequency=0.05)
    """

    def __init__(self, catalog: TileCatalog):
        self.catalog = catalog

    def heightmap(self, sampler: NoiseSampler, width: int, height: int) -> np.ndarray:
        """Blended heights for a width x height interior, indexed [y, x]."""
        heights = np.zeros((height, width), dtype=np.float64)
        for y in range(height):
            for x in range(width):
                heights[y, x] = height_at(sampler, float(x), float(y))
        return heights

    def synthesize(
        self,
        grid: Grid,
        sampler: NoiseSampler,
        spawn_table: SpawnTable,
        seed: int,
        frequency: float,
    ) -> SynthesisReport:
        """
        Populate the grid interior.

        Args:
            grid: Grid to fill (border untouched)
            sampler: Noise sampler, reseeded here
            spawn_table: Spawn probabilities
            seed: Noise seed
            frequency: Base noise frequency

        Returns:
            SynthesisReport
        """
        report = SynthesisReport()
        if not spawn_table:
            report.skipped = True
            return report

        sampler.set_seed(seed)
        sampler.set_frequency(frequency)

        heights = self.heightmap(sampler, grid.content_width, grid.content_height)
        report.heights = heights

        for y in range(grid.content_height):
            for x in range(grid.content_width):
                zone = classify_zone(float(heights[y, x]))
                report.zone_counts[zone] += 1

                variation = to_unit(VARIATION_OCTAVE.sample(sampler, float(x), float(y)))
                symbol = select_symbol_for_zone(zone, spawn_table, variation)
                if symbol is None:
                    continue

                tile_id = self.catalog.id_for_symbol(symbol)
                if tile_id is None:
                    report.unresolved += 1
                    continue

                grid.set_content(x, y, tile_id)
                report.placed += 1
                report.symbol_counts[symbol] = report.symbol_counts.get(symbol, 0) + 1

        if report.unresolved:
            logger.debug(f"{report.unresolved} cells chose symbols without a tile id")
        return report
