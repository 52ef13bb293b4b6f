"""
Biome boundary smoothing.

After synthesis and border creation, cells near biome boundaries are
reclassified using neighbor counts of three anchor categories:

    water-like, land-like, mountain-like

Boundary corrections (w, l, m = neighbors in each category):

    mountain cell:  w >= 4, or (w >= 3 and l <= 2)   -> water
    water cell:     m >= 5                           -> mountain
                    l >= 6 and m <= 1                -> land
    land cell:      w >= 5                           -> water
                    m >= 4 and w <= 1                -> mountain

All counts come from the grid as it was before the pass; changes are
committed together, and only if there is at least one.

Anchor symbols are picked by a CategoryResolver. The default one matches
tile names ("water", "grass", "mountain") and falls back to the shape of
the spawn probabilities; ExplicitCategories pins them directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Protocol
import logging

from ..core.grid import Grid
from ..core.neighborhood import NeighborhoodCounter
from ..core.tiles import TileCatalog
from .spawn import SpawnTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnchorSymbols:
    """Symbols standing for the three terrain categories."""
    water: str
    land: str
    mountain: str


class CategoryResolver(Protocol):
    """Strategy choosing anchor symbols for a world."""

    def resolve(self, catalog: TileCatalog, spawn_table: SpawnTable) -> Optional[AnchorSymbols]:
        ...


class ExplicitCategories:
    """Fixed anchor symbols."""

    def __init__(self, water: str, land: str, mountain: str):
        self.anchors = AnchorSymbols(water=water, land=land, mountain=mountain)

    def resolve(self, catalog: TileCatalog, spawn_table: SpawnTable) -> Optional[AnchorSymbols]:
        return self.anchors


class NameMatchCategories:
    """
    Anchor symbols by tile name, with a probability-shape fallback.

    For each category, the first catalog tile whose name contains the
    keyword is used. If no name matches, the spawn symbol whose
    probability for the category's zone strictly exceeds its other two
    zones is used (low -> water, mid -> land, high -> mountain).
    Otherwise the first spawn symbol.
    """

    KEYWORDS = {"water": "water", "land": "grass", "mountain": "mountain"}
    ZONES = {"water": 0, "land": 1, "mountain": 2}

    def __init__(self, keywords: Optional[Dict[str, str]] = None):
        self.keywords = dict(self.KEYWORDS)
        if keywords:
            self.keywords.update(keywords)

    def resolve(self, catalog: TileCatalog, spawn_table: SpawnTable) -> Optional[AnchorSymbols]:
        if not spawn_table:
            return None
        anchors = {
            category: self._resolve_one(category, catalog, spawn_table)
            for category in ("water", "land", "mountain")
        }
        return AnchorSymbols(**anchors)

    def _resolve_one(self, category: str, catalog: TileCatalog, spawn_table: SpawnTable) -> str:
        matches = catalog.find_by_name(self.keywords[category])
        if matches:
            return matches[0].symbol

        zone = self.ZONES[category]
        for symbol, rule in spawn_table.all_rules().items():
            if rule.dominant_zone == zone:
                return symbol

        # Last resort; may misclassify exotic tile sets
        first = spawn_table.symbols[0]
        logger.debug(f"No anchor for {category!r}, using first spawn symbol {first!r}")
        return first


class TerrainSmoother:
    """
    Boundary-correction pass over a synthesized grid.

    Example:
        smoother = TerrainSmoother(catalog, radius=1)
        changed = smoother.smooth(grid, spawn_table)
    """

    def __init__(
        self,
        catalog: TileCatalog,
        radius: int = 1,
        resolver: Optional[CategoryResolver] = None,
    ):
        """
        Initialize smoother.

        Args:
            catalog: Tile catalog
            radius: Neighborhood radius configured for the world
            resolver: Anchor strategy, NameMatchCategories by default
        """
        self.catalog = catalog
        self.counter = NeighborhoodCounter(catalog, radius)
        self.resolver = resolver if resolver is not None else NameMatchCategories()

    def reclassify(
        self, symbol: str, anchors: AnchorSymbols, w: int, l: int, m: int
    ) -> Optional[str]:
        """New anchor symbol for a cell, or None to keep it."""
        if symbol == anchors.mountain:
            if w >= 4 or (w >= 3 and l <= 2):
                return anchors.water
        elif symbol == anchors.water:
            if m >= 5:
                return anchors.mountain
            if l >= 6 and m <= 1:
                return anchors.land
        elif symbol == anchors.land:
            if w >= 5:
                return anchors.water
            if m >= 4 and w <= 1:
                return anchors.mountain
        return None

    def smooth(self, grid: Grid, spawn_table: SpawnTable) -> int:
        """
        Apply boundary corrections in place.

        Args:
            grid: Grid to smooth (border untouched)
            spawn_table: Spawn table used for anchor resolution

        Returns:
            Number of cells changed
        """
        anchors = self.resolver.resolve(self.catalog, spawn_table)
        if anchors is None:
            return 0

        target_ids = {
            symbol: self.catalog.id_for_symbol(symbol)
            for symbol in (anchors.water, anchors.land, anchors.mountain)
        }

        field_ = self.counter.count_field(grid)
        water = field_.count_of(anchors.water)
        land = field_.count_of(anchors.land)
        mountain = field_.count_of(anchors.mountain)

        current = grid.tiles
        next_tiles = current.copy()
        symbol_of = self.catalog.symbol_lookup_table()
        default_symbol = self.catalog.default_symbol

        changed = 0
        height, width = current.shape
        for gy in range(1, height - 1):
            for gx in range(1, width - 1):
                tile_id = int(current[gy, gx])
                symbol = symbol_of.get(tile_id, default_symbol)
                new_symbol = self.reclassify(
                    symbol, anchors,
                    int(water[gy, gx]), int(land[gy, gx]), int(mountain[gy, gx]),
                )
                if new_symbol is None:
                    continue
                new_id = target_ids[new_symbol]
                if new_id is None or new_id == tile_id:
                    continue
                next_tiles[gy, gx] = new_id
                changed += 1

        if changed:
            grid.replace_with(Grid(grid.content_width, grid.content_height, tiles=next_tiles))
        return changed
