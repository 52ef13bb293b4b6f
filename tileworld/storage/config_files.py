"""
Readers for the line-oriented config files.

All formats share the same lexical rules: everything after "//" is a
comment, surrounding whitespace is ignored, blank lines are skipped.

Spawn config (one symbol per line, probabilities for low:mid:high zones):

    ~=0.8:0.05:0
    .=0.1:0.7          // high zone padded with 0.1

Automaton config (a one-character line opens a tile section):

    T
    survival=count['T'] >= 1 || count['~'] >= 1
    birth=count['T'] >= 3 && count['.'] >= 2
    death=count['^'] >= 5

World config (Key=Value):

    Width=80
    Height=40
    Seed=1337
    UseRandomSeed=false
    NoiseFrequency=0.05
    NeighborRadius=1

Readers never raise for bad content; problems are logged and the offending
line is skipped. Missing files raise FileNotFoundError.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union
import copy
import logging

from ..config import WorldConfig
from ..core.rules import AutomatonRule, AutomatonRuleSet
from ..terrain.spawn import MISSING_PROBABILITY, NUM_ZONES, SpawnRule, SpawnTable

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _clean_lines(text: str) -> Iterator[Tuple[int, str]]:
    """(line_number, content) with comments and surrounding blanks removed."""
    for number, line in enumerate(text.splitlines(), start=1):
        comment = line.find("//")
        if comment != -1:
            line = line[:comment]
        line = line.strip(" \t\r")
        if line:
            yield number, line


def _read(path: PathLike) -> str:
    return Path(path).read_text(encoding="utf-8")


# ===== Spawn config =====

def _parse_probability(token: str, symbol: str) -> float:
    try:
        value = float(token)
    except ValueError:
        logger.warning(f"Invalid probability {token!r} for {symbol!r}, using {MISSING_PROBABILITY}")
        return MISSING_PROBABILITY
    if not 0.0 <= value <= 1.0:
        clamped = min(1.0, max(0.0, value))
        logger.warning(f"Probability {value} for {symbol!r} outside [0, 1], clamped to {clamped}")
        return clamped
    return value


def parse_spawn_config(text: str) -> SpawnTable:
    """Parse spawn config text into a SpawnTable."""
    rules = []
    for number, line in _clean_lines(text):
        if "=" not in line:
            logger.warning(f"Spawn config line {number}: expected 'symbol=probabilities'")
            continue
        symbol, probabilities = line.split("=", 1)
        symbol = symbol.strip(" \t")
        if len(symbol) != 1:
            logger.warning(f"Spawn config line {number}: invalid spawn tile {symbol!r}")
            continue

        probs = [_parse_probability(t.strip(), symbol) for t in probabilities.split(":")]
        if len(probs) > NUM_ZONES:
            logger.warning(f"Spawn config line {number}: extra zone probabilities ignored")
            probs = probs[:NUM_ZONES]
        rules.append(SpawnRule(symbol, tuple(probs)))

    table = SpawnTable(rules)
    for symbol, rule in table.all_rules().items():
        p = rule.zone_probabilities
        logger.debug(f"Spawn rule '{symbol}' -> zones {p[0]}:{p[1]}:{p[2]}")
    logger.info(f"Spawn config loaded: {len(table)} spawn tiles")
    return table


def load_spawn_table(path: PathLike) -> SpawnTable:
    """Read a spawn config file."""
    logger.info(f"Loading spawn config from: {path}")
    return parse_spawn_config(_read(path))


# ===== Automaton config =====

_RULE_KINDS = ("survival", "birth", "death")


def parse_automaton_config(text: str) -> AutomatonRuleSet:
    """
    Parse automaton config text into a new AutomatonRuleSet.

    Sections keep file order, which is the order births are tried in.
    Malformed expressions are kept (they evaluate to False) and logged.
    """
    sections: Dict[str, Dict[str, str]] = {}
    current: Optional[str] = None

    for number, line in _clean_lines(text):
        if len(line) == 1:
            current = line
            sections.setdefault(current, {})
            continue

        if "=" not in line:
            logger.warning(f"Automaton config line {number}: ignored {line!r}")
            continue

        key, value = line.split("=", 1)
        key = key.strip(" \t")
        value = value.strip(" \t")

        if current is None:
            logger.warning(f"Automaton config line {number}: rule without tile definition")
            continue
        if key not in _RULE_KINDS:
            logger.warning(f"Automaton config line {number}: unknown key {key!r}")
            continue
        sections[current][key] = value

    rules = AutomatonRuleSet({
        symbol: AutomatonRule.from_text(**kinds) for symbol, kinds in sections.items()
    })

    for symbol, kind, error in rules.parse_errors():
        logger.warning(f"Tile '{symbol}' {kind} rule will never fire: {error.reason}")
    logger.info(f"Loaded cellular automaton rules:\n{rules.summary()}")
    return rules


def load_automaton_rules(path: PathLike) -> AutomatonRuleSet:
    """Read an automaton config file."""
    logger.info(f"Loading cellular automaton rules from: {path}")
    return parse_automaton_config(_read(path))


# ===== World config =====

def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


_WORLD_KEYS = {
    "Width": ("content_width", int),
    "WorldWidth": ("content_width", int),
    "Height": ("content_height", int),
    "WorldHeight": ("content_height", int),
    "Seed": ("seed", int),
    "WorldSeed": ("seed", int),
    "UseRandomSeed": ("use_random_seed", _parse_bool),
    "NoiseFrequency": ("noise_frequency", float),
}


def parse_world_config(text: str, base: Optional[WorldConfig] = None) -> WorldConfig:
    """
    Apply Key=Value world settings on top of `base` (defaults if None).

    Returns a new WorldConfig; `base` is not modified.
    """
    config = copy.deepcopy(base) if base is not None else WorldConfig()

    for number, line in _clean_lines(text):
        if "=" not in line:
            continue
        key, value = (part.strip(" \t") for part in line.split("=", 1))

        try:
            if key == "NeighborRadius":
                config.neighborhood.radius = int(value)
            elif key in _WORLD_KEYS:
                attribute, convert = _WORLD_KEYS[key]
                setattr(config.generation, attribute, convert(value))
            else:
                logger.warning(f"Unknown config key: {key}")
        except ValueError:
            logger.warning(f"World config line {number}: invalid value {value!r} for {key}")

    return config


def load_world_config(path: PathLike, base: Optional[WorldConfig] = None) -> WorldConfig:
    """Read a world config file."""
    logger.info(f"Loading world generation configuration from: {path}")
    return parse_world_config(_read(path), base)
