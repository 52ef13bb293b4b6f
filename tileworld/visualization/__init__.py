"""
Visualization module for the tile world.

Provides:
- Tile map rendering (console colors mapped to RGB)
- Population and birth/death time series
"""

from .map_viz import plot_tile_map, console_color_rgb
from .timeseries_viz import plot_population_history, plot_step_stats

__all__ = [
    'plot_tile_map',
    'console_color_rgb',
    'plot_population_history',
    'plot_step_stats',
]
