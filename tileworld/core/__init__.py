"""
Core module for the tile world.

Contains:
- TileType / TileCatalog: tile definitions and symbol lookup
- Grid: bordered 2D map of tile ids
- RuleExpression / AutomatonRuleSet: count-based rule language
- NeighborhoodCounter: per-symbol neighbor counts
- AutomatonStepper: synchronous survival/birth/death generations
- World: generation + automaton orchestration
"""

from .tiles import TileType, TileCatalog, DEFAULT_SYMBOL, default_tiles
from .grid import Grid, GridSnapshot
from .rules import (
    RuleParseError, RuleExpression, AutomatonRule, AutomatonRuleSet,
    parse_rule_expression, create_life_rules, create_default_rules,
)
from .neighborhood import (
    NeighborhoodShape, NeighborhoodCounter, NeighborCountField,
    neighborhood_offsets, count_neighbors,
)
from .automaton import AutomatonStepper, StepStats, RunResult
from .world import World, GenerationReport

__all__ = [
    "TileType",
    "TileCatalog",
    "DEFAULT_SYMBOL",
    "default_tiles",
    "Grid",
    "GridSnapshot",
    # Rule language
    "RuleParseError",
    "RuleExpression",
    "AutomatonRule",
    "AutomatonRuleSet",
    "parse_rule_expression",
    "create_life_rules",
    "create_default_rules",
    # Neighborhoods
    "NeighborhoodShape",
    "NeighborhoodCounter",
    "NeighborCountField",
    "neighborhood_offsets",
    "count_neighbors",
    # Automaton
    "AutomatonStepper",
    "StepStats",
    "RunResult",
    "World",
    "GenerationReport",
]
