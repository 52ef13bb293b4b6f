"""
Grid representation for the tile world.

The grid is a 2D array of tile ids with a one-cell border on every side:

    total_width  = content_width  + 2
    total_height = content_height + 2

Interior (content) coordinates (x, y) with 0 <= x < content_width map to
grid coordinates (x + 1, y + 1). Border cells hold the border tile id and
are never touched by synthesis, smoothing or automaton stepping.

Storage is a numpy int32 array indexed [row, column] = [gy, gx].
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .tiles import TileCatalog


@dataclass
class GridSnapshot:
    """
    Immutable copy of a grid at a given tick.

    Attributes:
        tiles: Full array including border (read-only)
        tick: Automaton tick when captured
    """
    tiles: np.ndarray
    tick: int = 0
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        self.tiles = np.array(self.tiles, dtype=np.int32)
        self.tiles.flags.writeable = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridSnapshot):
            return False
        return np.array_equal(self.tiles, other.tiles)

    def __hash__(self) -> int:
        return hash((self.tiles.tobytes(), self.tiles.shape))


class Grid:
    """
    Mutable tile grid with a fixed border ring.

    Example:
        grid = Grid(content_width=10, content_height=5, fill=0)
        grid.set_content(0, 0, 3)         # interior (0,0) -> grid (1,1)
        grid.create_border(border_id=2)
        grid.tile_id_at(0, 0)             # 2 (border, full-map coords)
        grid.content_tile_at(0, 0)        # 3
    """

    def __init__(
        self,
        content_width: int,
        content_height: int,
        fill: int = 0,
        tiles: Optional[np.ndarray] = None,
    ):
        """
        Initialize grid.

        Args:
            content_width: Interior width (without border)
            content_height: Interior height (without border)
            fill: Tile id for every cell when `tiles` is not given
            tiles: Optional full array of shape (content_height+2, content_width+2)
        """
        if content_width < 1 or content_height < 1:
            raise ValueError(
                f"Grid content must be at least 1x1, got {content_width}x{content_height}"
            )
        self.content_width = int(content_width)
        self.content_height = int(content_height)

        shape = (self.total_height, self.total_width)
        if tiles is None:
            self._tiles = np.full(shape, fill, dtype=np.int32)
        else:
            tiles = np.asarray(tiles, dtype=np.int32)
            if tiles.shape != shape:
                raise ValueError(f"Tile array shape {tiles.shape} != expected {shape}")
            self._tiles = tiles.copy()

    # ===== Construction helpers =====

    @classmethod
    def from_content(cls, content: np.ndarray, border_id: int) -> "Grid":
        """Build a grid from an interior array, surrounding it with a border."""
        content = np.asarray(content, dtype=np.int32)
        height, width = content.shape
        grid = cls(width, height, fill=border_id)
        grid.interior[:, :] = content
        return grid

    @classmethod
    def from_symbols(
        cls,
        rows: list,
        catalog: "TileCatalog",
        border_id: int,
    ) -> "Grid":
        """
        Build a grid from interior rows of symbols.

        Unknown symbols leave the cell at id 0. Short rows are padded with 0.
        """
        height = len(rows)
        width = max(len(r) for r in rows)
        grid = cls(width, height, fill=0)
        for y, row in enumerate(rows):
            for x, symbol in enumerate(row):
                tile_id = catalog.id_for_symbol(symbol)
                if tile_id is not None:
                    grid.set_content(x, y, tile_id)
        grid.create_border(border_id)
        return grid

    # ===== Dimensions =====

    @property
    def total_width(self) -> int:
        return self.content_width + 2

    @property
    def total_height(self) -> int:
        return self.content_height + 2

    @property
    def shape(self) -> Tuple[int, int]:
        """(total_height, total_width)"""
        return self._tiles.shape

    @property
    def tiles(self) -> np.ndarray:
        """Full tile array including border."""
        return self._tiles

    @property
    def interior(self) -> np.ndarray:
        """Writable view of the content area."""
        return self._tiles[1:-1, 1:-1]

    # ===== Access =====

    def tile_id_at(self, x: int, y: int) -> int:
        """
        Tile id at full-map coordinates.

        Out-of-range coordinates return 0 rather than raising.
        """
        if 0 <= x < self.total_width and 0 <= y < self.total_height:
            return int(self._tiles[y, x])
        return 0

    def content_tile_at(self, x: int, y: int) -> int:
        """Tile id at interior coordinates."""
        return int(self._tiles[y + 1, x + 1])

    def set_content(self, x: int, y: int, tile_id: int) -> None:
        """Set tile id at interior coordinates."""
        if not (0 <= x < self.content_width and 0 <= y < self.content_height):
            raise IndexError(f"Interior coordinate ({x}, {y}) out of range")
        self._tiles[y + 1, x + 1] = tile_id

    def is_border(self, gx: int, gy: int) -> bool:
        """True if full-map coordinate lies on (or outside) the border ring."""
        return gx <= 0 or gy <= 0 or gx >= self.total_width - 1 or gy >= self.total_height - 1

    def interior_cells(self) -> Iterator[Tuple[int, int]]:
        """Full-map coordinates of every interior cell, row-major."""
        for gy in range(1, self.total_height - 1):
            for gx in range(1, self.total_width - 1):
                yield gx, gy

    # ===== Border =====

    def create_border(self, border_id: int) -> None:
        """Fill the outer ring with `border_id`."""
        self._tiles[0, :] = border_id
        self._tiles[-1, :] = border_id
        self._tiles[:, 0] = border_id
        self._tiles[:, -1] = border_id

    def border_is(self, border_id: int) -> bool:
        """Check that every border cell holds `border_id`."""
        t = self._tiles
        return bool(
            np.all(t[0, :] == border_id) and np.all(t[-1, :] == border_id)
            and np.all(t[:, 0] == border_id) and np.all(t[:, -1] == border_id)
        )

    # ===== Snapshots =====

    def copy(self) -> "Grid":
        return Grid(self.content_width, self.content_height, tiles=self._tiles)

    def snapshot(self, tick: int = 0) -> GridSnapshot:
        return GridSnapshot(tiles=self._tiles.copy(), tick=tick)

    def replace_with(self, other: "Grid") -> None:
        """Commit another grid's tiles into this one in a single assignment."""
        if other.shape != self.shape:
            raise ValueError(f"Grid shape mismatch: {other.shape} != {self.shape}")
        self._tiles = other._tiles.copy()

    def count_changed(self, other: "Grid") -> int:
        """Number of cells that differ from `other`."""
        return int(np.count_nonzero(self._tiles != other._tiles))

    # ===== Text =====

    def to_text(self, catalog: "TileCatalog", include_border: bool = True) -> str:
        """Render as lines of tile symbols."""
        t = self._tiles if include_border else self.interior
        lookup = catalog.symbol_lookup_table()
        lines = []
        for row in t:
            lines.append("".join(lookup.get(int(v), catalog.default_symbol) for v in row))
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return False
        return np.array_equal(self._tiles, other._tiles)

    def __repr__(self) -> str:
        return f"Grid({self.content_width}x{self.content_height}, total={self.total_width}x{self.total_height})"
