"""
JSON storage for the tile catalog.

The catalog file is a JSON array of tile objects:

    [
      {"id": 3, "name": "water", "character": "~", "color": 9,
       "isPassable": false, "isDestructible": false, "damage": 0},
      ...
    ]
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.tiles import TileCatalog, TileType

logger = logging.getLogger(__name__)


def tile_to_dict(tile: TileType) -> Dict[str, Any]:
    return {
        "id": tile.id,
        "name": tile.name,
        "character": tile.symbol,
        "color": tile.color,
        "isPassable": tile.passable,
        "isDestructible": tile.destructible,
        "damage": tile.damage,
    }


def tile_from_dict(data: Dict[str, Any]) -> TileType:
    """
    Build a TileType from a JSON object.

    Raises:
        ValueError: Missing/negative id, empty name or bad character
    """
    tile_id = int(data.get("id", -1))
    name = str(data.get("name", ""))
    if tile_id < 0 or not name:
        raise ValueError(f"Invalid tile - id: {tile_id}, name: {name!r}")
    character = str(data.get("character", "")) or "?"
    return TileType(
        id=tile_id,
        name=name,
        symbol=character[0],
        color=int(data.get("color", 15)),
        passable=bool(data.get("isPassable", False)),
        destructible=bool(data.get("isDestructible", False)),
        damage=int(data.get("damage", 0)),
    )


def parse_tile_catalog(data: Any) -> TileCatalog:
    """
    Build a catalog from decoded JSON.

    Invalid entries are skipped with a warning. A non-list document or one
    without valid tiles yields the default catalog.
    """
    if not isinstance(data, list):
        logger.error("Tile config is not a JSON array, using default tiles")
        return TileCatalog.default()

    tiles: List[TileType] = []
    for entry in data:
        try:
            tiles.append(tile_from_dict(entry))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning(f"Skipping tile entry: {exc}")

    if not tiles:
        logger.warning("No tile objects found in tile config, using default tiles")
        return TileCatalog.default()

    catalog = TileCatalog(tiles)
    logger.info(f"Tile loading completed: {len(catalog)} tiles loaded")
    for tile in catalog:
        logger.debug(f"Tile {tile.id}: '{tile.symbol}' - {tile.name} (color: {tile.color})")
    return catalog


def load_tile_catalog(path: Union[str, Path]) -> TileCatalog:
    """
    Load a tile catalog from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    logger.info(f"Loading tile types from: {path}")
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        logger.error("Tile config is empty, using default tiles")
        return TileCatalog.default()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error(f"Tile config is not valid JSON ({exc}), using default tiles")
        return TileCatalog.default()
    return parse_tile_catalog(data)


def save_tile_catalog(catalog: TileCatalog, path: Union[str, Path]) -> Path:
    """Write a catalog as a JSON array. Returns the written path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([tile_to_dict(t) for t in catalog], f, indent=2, ensure_ascii=False)
    logger.info(f"Saved {len(catalog)} tile types to: {path}")
    return path
