"""
Storage module for the tile world.

Provides readers for:
- Tile catalog (JSON)
- Spawn probabilities, automaton rules, world settings (line-oriented .cfg)
"""

from .json_storage import load_tile_catalog, save_tile_catalog, parse_tile_catalog
from .config_files import (
    parse_spawn_config, load_spawn_table,
    parse_automaton_config, load_automaton_rules,
    parse_world_config, load_world_config,
)

__all__ = [
    "load_tile_catalog",
    "save_tile_catalog",
    "parse_tile_catalog",
    "parse_spawn_config",
    "load_spawn_table",
    "parse_automaton_config",
    "load_automaton_rules",
    "parse_world_config",
    "load_world_config",
]
