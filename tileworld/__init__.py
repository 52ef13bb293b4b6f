"""
Tile World Simulator

A bordered 2D tile map generated from layered coherent noise and evolved
by a per-tile cellular automaton whose rules are written in a small
count-based expression language.

Main components:
- core: Tiles, grid, rule language, neighbor counting, automaton, World
- terrain: Noise sampling, spawn tables, synthesis, biome smoothing
- storage: Tile catalog JSON and line-oriented config readers
- analysis: Tile composition and population series
- visualization: Tile maps, time series
"""

__version__ = "0.1.0"
__author__ = "Tile World Team"

from .core import (
    TileType, TileCatalog, Grid, RuleExpression, AutomatonRuleSet,
    AutomatonStepper, NeighborhoodCounter, World,
)
from .terrain import OpenSimplexSampler, SpawnTable, TerrainSynthesizer, TerrainSmoother
from .config import WorldConfig

__all__ = [
    "TileType",
    "TileCatalog",
    "Grid",
    "RuleExpression",
    "AutomatonRuleSet",
    "AutomatonStepper",
    "NeighborhoodCounter",
    "World",
    "OpenSimplexSampler",
    "SpawnTable",
    "TerrainSynthesizer",
    "TerrainSmoother",
    "WorldConfig",
]
