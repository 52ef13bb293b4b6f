"""
Configuration module for the tile world.

Contains all configurable parameters for world generation and the automaton.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import json
import time
from pathlib import Path


@dataclass
class GenerationParams:
    """Terrain generation parameters."""
    content_width: int = 80      # Interior width (border excluded)
    content_height: int = 40     # Interior height (border excluded)
    seed: int = 1337
    use_random_seed: bool = True  # Ignore `seed`, draw one from the clock
    noise_frequency: float = 0.05


@dataclass
class NeighborhoodParams:
    """Neighbor counting parameters."""
    radius: int = 3  # 0 = von Neumann, >= 1 = Moore of that radius


@dataclass
class AutomatonParams:
    """Cellular automaton parameters."""
    enabled: bool = True
    empty_symbol: str = " "   # Background tile cells die into
    border_symbol: str = "#"  # Tile placed on the border ring


@dataclass
class SmoothingParams:
    """Biome smoothing parameters."""
    enabled: bool = True


@dataclass
class PathParams:
    """Config file locations. None means built-in defaults."""
    tiles: Optional[Path] = None
    spawn: Optional[Path] = None
    automaton: Optional[Path] = None


@dataclass
class WorldConfig:
    """
    Main configuration container for the tile world.

    Example:
        config = WorldConfig(
            generation=GenerationParams(content_width=40, use_random_seed=False),
        )
        config.save("my_config.json")
    """
    generation: GenerationParams = field(default_factory=GenerationParams)
    neighborhood: NeighborhoodParams = field(default_factory=NeighborhoodParams)
    automaton: AutomatonParams = field(default_factory=AutomatonParams)
    smoothing: SmoothingParams = field(default_factory=SmoothingParams)
    paths: PathParams = field(default_factory=PathParams)

    # Random seed drawn for this session, see effective_seed()
    _session_seed: Optional[int] = field(default=None, repr=False, compare=False)

    def effective_seed(self) -> int:
        """
        Seed to generate with.

        With use_random_seed, a clock-derived seed is drawn once and reused
        for the rest of the session.
        """
        if not self.generation.use_random_seed:
            return self.generation.seed
        if self._session_seed is None:
            self._session_seed = int(time.time()) & 0x7FFFFFFF
        return self._session_seed

    def save(self, path: str | Path) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self._to_dict()
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: str | Path) -> "WorldConfig":
        """Load configuration from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls._from_dict(data)

    def _to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def convert(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items() if not k.startswith('_')}
            elif isinstance(obj, (list, tuple)):
                return [convert(x) for x in obj]
            return obj

        return convert(self)

    @classmethod
    def _from_dict(cls, data: dict) -> "WorldConfig":
        """Reconstruct from dictionary."""
        data = dict(data)
        if 'generation' in data:
            data['generation'] = GenerationParams(**data['generation'])
        if 'neighborhood' in data:
            data['neighborhood'] = NeighborhoodParams(**data['neighborhood'])
        if 'automaton' in data:
            data['automaton'] = AutomatonParams(**data['automaton'])
        if 'smoothing' in data:
            data['smoothing'] = SmoothingParams(**data['smoothing'])
        if 'paths' in data:
            paths = {k: Path(v) if v is not None else None for k, v in data['paths'].items()}
            data['paths'] = PathParams(**paths)

        return cls(**data)

    def validate(self) -> List[str]:
        """Validate configuration, return list of warnings/errors."""
        issues = []
        gen = self.generation

        if gen.content_width < 1 or gen.content_height < 1:
            issues.append("content_width and content_height must be at least 1")
        if gen.content_width * gen.content_height > 10**7:
            issues.append("world area > 10^7 cells will be very slow")
        if gen.noise_frequency <= 0:
            issues.append("noise_frequency must be positive")

        if self.neighborhood.radius < 0:
            issues.append("neighborhood radius must be non-negative")

        if len(self.automaton.empty_symbol) != 1:
            issues.append("empty_symbol must be a single character")
        if len(self.automaton.border_symbol) != 1:
            issues.append("border_symbol must be a single character")

        return issues


# Preset configurations
def minimal_config() -> WorldConfig:
    """Small, fixed-seed configuration for quick testing."""
    return WorldConfig(
        generation=GenerationParams(
            content_width=16,
            content_height=8,
            seed=42,
            use_random_seed=False,
        ),
        neighborhood=NeighborhoodParams(radius=1),
    )


def standard_config() -> WorldConfig:
    """Standard configuration for typical worlds."""
    return WorldConfig(
        generation=GenerationParams(seed=1337, use_random_seed=False),
    )
