"""
Terrain generation for the tile world.

Contains:
- NoiseSampler / OpenSimplexSampler: seeded 2D coherent noise
- SpawnRule / SpawnTable: per-zone tile probabilities
- TerrainSynthesizer: heightmap -> zones -> weighted tile choice
- TerrainSmoother: one-pass biome cleanup
"""

from .noise import NoiseSampler, OpenSimplexSampler
from .spawn import SpawnRule, SpawnTable, default_spawn_table
from .synthesis import (
    ZONE_LOW, ZONE_MID, ZONE_HIGH,
    TerrainSynthesizer, SynthesisReport,
    height_at, classify_zone, select_symbol_for_zone,
)
from .smoothing import (
    TerrainSmoother, AnchorSymbols, ExplicitCategories, NameMatchCategories,
)

__all__ = [
    "NoiseSampler",
    "OpenSimplexSampler",
    "SpawnRule",
    "SpawnTable",
    "default_spawn_table",
    "ZONE_LOW",
    "ZONE_MID",
    "ZONE_HIGH",
    "TerrainSynthesizer",
    "SynthesisReport",
    "height_at",
    "classify_zone",
    "select_symbol_for_zone",
    "TerrainSmoother",
    "AnchorSymbols",
    "ExplicitCategories",
    "NameMatchCategories",
]
