"""
Spawn probabilities for terrain synthesis.

Each spawn symbol carries one probability per elevation zone:

    [low, mid, high]    (water-leaning, land-leaning, mountain-leaning)

Rules given with fewer than three probabilities are padded with 0.1.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Sequence, Tuple

NUM_ZONES = 3
MISSING_PROBABILITY = 0.1


@dataclass(frozen=True)
class SpawnRule:
    """
    Zone probabilities for one spawn symbol.

    Attributes:
        symbol: Tile symbol to place
        zone_probabilities: (low, mid, high), each in [0, 1]
    """
    symbol: str
    zone_probabilities: Tuple[float, float, float]

    def __post_init__(self):
        if len(self.symbol) != 1:
            raise ValueError(f"Spawn symbol must be a single character, got {self.symbol!r}")
        probs = tuple(float(p) for p in self.zone_probabilities)
        if len(probs) > NUM_ZONES:
            raise ValueError(f"At most {NUM_ZONES} zone probabilities, got {len(probs)}")
        probs = probs + (MISSING_PROBABILITY,) * (NUM_ZONES - len(probs))
        for p in probs:
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"Zone probability {p} for {self.symbol!r} outside [0, 1]")
        object.__setattr__(self, "zone_probabilities", probs)

    def probability(self, zone: int) -> float:
        return self.zone_probabilities[zone]

    @property
    def dominant_zone(self) -> Optional[int]:
        """Zone whose probability strictly exceeds both others, if any."""
        p = self.zone_probabilities
        for zone in range(NUM_ZONES):
            others = [p[z] for z in range(NUM_ZONES) if z != zone]
            if all(p[zone] > o for o in others):
                return zone
        return None


class SpawnTable:
    """
    Ordered, immutable mapping symbol -> SpawnRule.

    Iteration order is insertion order; weighted selection walks candidates
    in this order.

    Example:
        table = SpawnTable.from_mapping({'~': [0.9, 0.1, 0.0], '.': [0.1, 0.8]})
        table['.'].zone_probabilities   # (0.1, 0.8, 0.1)
    """

    def __init__(self, rules: Sequence[SpawnRule] = ()):
        entries = {}
        for rule in rules:
            entries[rule.symbol] = rule
        self._rules = MappingProxyType(entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Sequence[float]]) -> "SpawnTable":
        return cls([SpawnRule(symbol, tuple(probs)) for symbol, probs in mapping.items()])

    def candidates(self, zone: int) -> Iterator[Tuple[str, float]]:
        """(symbol, probability) for every symbol covering `zone`."""
        for symbol, rule in self._rules.items():
            if zone < len(rule.zone_probabilities):
                yield symbol, rule.zone_probabilities[zone]

    def all_rules(self) -> Mapping[str, SpawnRule]:
        return self._rules

    def get(self, symbol: str) -> Optional[SpawnRule]:
        return self._rules.get(symbol)

    @property
    def symbols(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def __getitem__(self, symbol: str) -> SpawnRule:
        return self._rules[symbol]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __bool__(self) -> bool:
        return len(self._rules) > 0

    def __repr__(self) -> str:
        return f"SpawnTable({list(self._rules)})"


def default_spawn_table() -> SpawnTable:
    """Spawn table matching the built-in tile catalog."""
    return SpawnTable.from_mapping({
        "~": [0.8, 0.05, 0.0],
        ",": [0.3, 0.1, 0.0],
        ".": [0.1, 0.7, 0.1],
        "T": [0.0, 0.3, 0.1],
        "#": [0.0, 0.05, 0.3],
        "^": [0.0, 0.05, 0.8],
    })
