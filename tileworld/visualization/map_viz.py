"""
Tile map visualization.

Tiles carry a 16-color console palette index; it is mapped to RGB so a
plotted map looks like the terminal rendering.
"""

from __future__ import annotations
from typing import Any, Optional, Tuple, Union
import numpy as np

from ..core.grid import Grid, GridSnapshot
from ..core.tiles import TileCatalog

# Lazy import for matplotlib
_plt = None

def _get_plt():
    global _plt
    if _plt is None:
        import matplotlib.pyplot as plt
        _plt = plt
    return _plt


# Standard 16-color console palette
_CONSOLE_PALETTE = np.array([
    (0, 0, 0), (0, 0, 128), (0, 128, 0), (0, 128, 128),
    (128, 0, 0), (128, 0, 128), (128, 128, 0), (192, 192, 192),
    (128, 128, 128), (0, 0, 255), (0, 255, 0), (0, 255, 255),
    (255, 0, 0), (255, 0, 255), (255, 255, 0), (255, 255, 255),
], dtype=np.float64) / 255.0


def console_color_rgb(color: int) -> Tuple[float, float, float]:
    """RGB triple in [0, 1] for a console color index (wraps modulo 16)."""
    r, g, b = _CONSOLE_PALETTE[int(color) % len(_CONSOLE_PALETTE)]
    return float(r), float(g), float(b)


def tile_rgb_image(grid: Union[Grid, GridSnapshot], catalog: TileCatalog) -> np.ndarray:
    """(H, W, 3) image of the grid; unknown ids are drawn magenta."""
    tiles = np.asarray(grid.tiles)
    image = np.zeros(tiles.shape + (3,), dtype=np.float64)
    image[...] = (1.0, 0.0, 1.0)
    for tile in catalog:
        image[tiles == tile.id] = console_color_rgb(tile.color)
    return image


def plot_tile_map(
    grid: Union[Grid, GridSnapshot],
    catalog: TileCatalog,
    ax: Optional[Any] = None,
    title: str = "",
    show_symbols: bool = False,
) -> Any:
    """
    Plot a grid as a colored tile map.

    Args:
        grid: Grid or snapshot (border included)
        catalog: Tile catalog for colors and symbols
        ax: Matplotlib axis (created if None)
        title: Plot title
        show_symbols: Draw each tile's symbol on top (small maps only)

    Returns:
        Matplotlib axis
    """
    plt = _get_plt()

    image = tile_rgb_image(grid, catalog)
    h, w = image.shape[:2]

    if ax is None:
        fig, ax = plt.subplots(figsize=(max(4, w / 8), max(3, h / 8)))

    ax.imshow(image, interpolation='nearest')
    ax.set_xticks([])
    ax.set_yticks([])

    if show_symbols:
        tiles = np.asarray(grid.tiles)
        for y in range(h):
            for x in range(w):
                ax.text(x, y, catalog.symbol_for_id(int(tiles[y, x])),
                        ha='center', va='center', fontsize=6, family='monospace')

    if title:
        ax.set_title(title)

    return ax
