"""
Time series visualization functions.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import numpy as np

from ..core.automaton import RunResult
from ..core.tiles import TileCatalog
from .map_viz import console_color_rgb

_plt = None
def _get_plt():
    global _plt
    if _plt is None:
        import matplotlib.pyplot as plt
        _plt = plt
    return _plt


def plot_population_history(
    populations: Dict[int, np.ndarray],
    catalog: Optional[TileCatalog] = None,
    ax: Optional[Any] = None,
    title: str = "",
    **kwargs,
) -> Any:
    """
    Plot tile populations over ticks.

    Args:
        populations: Dict mapping tile id -> counts (see analysis.population_history)
        catalog: Used for legend names and line colors
        ax: Matplotlib axis
        title: Plot title

    Returns:
        Matplotlib axis
    """
    plt = _get_plt()

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))

    for tile_id, values in populations.items():
        tile = catalog.get(tile_id) if catalog is not None else None
        label = tile.name if tile is not None else f"tile {tile_id}"
        color = console_color_rgb(tile.color) if tile is not None else None
        ax.plot(np.arange(len(values)), values, label=label, color=color, **kwargs)

    ax.set_xlabel('Tick')
    ax.set_ylabel('Cells')
    ax.legend(loc='best')

    if title:
        ax.set_title(title)

    return ax


def plot_step_stats(
    result: RunResult,
    ax: Optional[Any] = None,
    title: str = "",
) -> Any:
    """Plot births and deaths per tick of a run."""
    plt = _get_plt()

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))

    ticks = np.arange(1, result.ticks + 1)
    ax.plot(ticks, result.births_series(), color='green', label='Births')
    ax.plot(ticks, result.deaths_series(), color='red', label='Deaths')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Cells')
    ax.legend(loc='best')
    ax.set_title(title or f"Automaton run ({result.stop_reason})")

    return ax
