"""
Coherent noise sampling.

The terrain pipeline consumes noise through a narrow interface:

    set_seed(seed)
    set_frequency(frequency)
    sample(x, y) -> float in [-1, 1]

`sample` scales its coordinates by the configured frequency before
evaluating the noise, so callers work in grid units.

OpenSimplexSampler is the production implementation (opensimplex).
"""

from __future__ import annotations
from typing import Protocol, runtime_checkable

from opensimplex import OpenSimplex


@runtime_checkable
class NoiseSampler(Protocol):
    """Interface consumed by the terrain pipeline."""

    def set_seed(self, seed: int) -> None:
        ...

    def set_frequency(self, frequency: float) -> None:
        ...

    def sample(self, x: float, y: float) -> float:
        ...


class OpenSimplexSampler:
    """
    2D OpenSimplex noise with a configurable frequency.

    Example:
        sampler = OpenSimplexSampler(seed=1337, frequency=0.05)
        sampler.sample(10.0, 4.0)   # value in [-1, 1]
    """

    def __init__(self, seed: int = 1337, frequency: float = 0.01):
        self.seed = int(seed)
        self.frequency = float(frequency)
        self._noise = OpenSimplex(seed=self.seed)

    def set_seed(self, seed: int) -> None:
        self.seed = int(seed)
        self._noise = OpenSimplex(seed=self.seed)

    def set_frequency(self, frequency: float) -> None:
        self.frequency = float(frequency)

    def sample(self, x: float, y: float) -> float:
        value = self._noise.noise2(x * self.frequency, y * self.frequency)
        # Guard against tiny overshoots of the theoretical range
        return max(-1.0, min(1.0, float(value)))

    def __repr__(self) -> str:
        return f"OpenSimplexSampler(seed={self.seed}, frequency={self.frequency})"


def to_unit(value: float) -> float:
    """Map a noise value from [-1, 1] to [0, 1]."""
    return max(0.0, min(1.0, (value + 1.0) * 0.5))
