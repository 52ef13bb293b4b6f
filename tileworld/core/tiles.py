"""
Tile catalog for the tile world.

Every tile kind has two identities:
    numeric id   - what the grid stores
    symbol       - single display character, what rules and spawn tables use

Several ids may share a symbol (e.g. water and lava both display as '~').
Lookups by symbol resolve to the first registered tile with that symbol.

The catalog is read-only for the simulation core: it only asks
"id for symbol" and "symbol for id". Unknown ids resolve to the default
symbol instead of failing.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional


DEFAULT_SYMBOL = "."


@dataclass(frozen=True)
class TileType:
    """
    A single tile kind.

    Attributes:
        id: Numeric id stored in the grid (>= 0)
        name: Human readable name, also used for terrain category matching
        symbol: Single display character
        color: Console color index
        passable: Whether an actor may walk over the tile
        destructible: Whether the tile can be destroyed
        damage: Damage dealt when standing on the tile
    """
    id: int
    name: str = "unknown"
    symbol: str = "?"
    color: int = 15
    passable: bool = True
    destructible: bool = False
    damage: int = 0

    def __post_init__(self):
        if self.id < 0:
            raise ValueError(f"Tile id must be non-negative, got {self.id}")
        if len(self.symbol) != 1:
            raise ValueError(f"Tile symbol must be a single character, got {self.symbol!r}")


class TileCatalog:
    """
    Bidirectional id <-> symbol lookup over a set of tile types.

    Example:
        catalog = TileCatalog.default()
        catalog.id_for_symbol('^')   # 7
        catalog.symbol_for_id(3)     # '~'
        catalog.symbol_for_id(999)   # '.' (default symbol)
    """

    def __init__(
        self,
        tiles: Optional[Iterable[TileType]] = None,
        default_symbol: str = DEFAULT_SYMBOL,
    ):
        self.default_symbol = default_symbol
        self._by_id: Dict[int, TileType] = {}
        self._id_by_symbol: Dict[str, int] = {}
        for tile in tiles or ():
            self._register(tile)

    def _register(self, tile: TileType) -> None:
        # Re-registering an id replaces the tile; symbol index is rebuilt
        self._by_id[tile.id] = tile
        self._id_by_symbol.clear()
        for t in self._by_id.values():
            self._id_by_symbol.setdefault(t.symbol, t.id)

    @classmethod
    def default(cls) -> "TileCatalog":
        """Catalog with the built-in tile set."""
        return cls(default_tiles())

    def id_for_symbol(self, symbol: str) -> Optional[int]:
        """Id of the first tile displaying `symbol`, or None."""
        return self._id_by_symbol.get(symbol)

    def symbol_for_id(self, tile_id: int) -> str:
        """Symbol for `tile_id`; the default symbol if the id is unknown."""
        tile = self._by_id.get(int(tile_id))
        if tile is None:
            return self.default_symbol
        return tile.symbol

    def get(self, tile_id: int) -> Optional[TileType]:
        return self._by_id.get(int(tile_id))

    def find_by_name(self, fragment: str) -> List[TileType]:
        """All tiles whose name contains `fragment` (case-insensitive)."""
        fragment = fragment.lower()
        return [t for t in self._by_id.values() if fragment in t.name.lower()]

    def tiles_with_symbol(self, symbol: str) -> List[TileType]:
        return [t for t in self._by_id.values() if t.symbol == symbol]

    def symbol_lookup_table(self) -> Dict[int, str]:
        """Mapping id -> symbol for every registered tile."""
        return {tile_id: t.symbol for tile_id, t in self._by_id.items()}

    @property
    def max_id(self) -> int:
        return max(self._by_id, default=0)

    @property
    def ids(self) -> List[int]:
        return list(self._by_id)

    def __contains__(self, tile_id: object) -> bool:
        return tile_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[TileType]:
        return iter(self._by_id.values())

    def __repr__(self) -> str:
        return f"TileCatalog({len(self)} tiles)"


def default_tiles() -> List[TileType]:
    """Built-in tile set used when no tile config is available."""
    return [
        TileType(0, "air", " ", 0, passable=True),
        TileType(1, "grass", ".", 10, passable=True),
        TileType(2, "stone_wall", "#", 8, passable=False, destructible=True),
        TileType(3, "water", "~", 9, passable=False),
        TileType(4, "lava", "~", 4, passable=True, damage=5),
        TileType(5, "tree", "T", 2, passable=False, destructible=True),
        TileType(6, "sand", ",", 14, passable=True),
        TileType(7, "mountain", "^", 7, passable=False),
    ]
