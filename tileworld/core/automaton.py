"""
Cellular automaton stepping for the tile world.

One generation tick is a synchronous update:

    G(t) -> G(t+1)

Every interior cell, in row-major order, is evaluated against neighbor
counts taken from G(t) only; the next grid is built completely before it
replaces the old one. Per cell:

1. Death    (non-empty cell with a death rule): rule true -> cell empties,
            nothing else is checked for that cell.
2. Survival (non-empty cell, death did not fire): rule present and false
            -> cell empties.
3. Birth    (cell empty before the tick): walk rule-set entries in order,
            the first birth rule that holds turns the cell into that
            entry's tile.

Cells none of this applies to are copied unchanged. Border cells are
outside the iteration range and never change.

The automaton has no terminal state; it steps once per call until the
owner disables it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import logging
import time

import numpy as np

from .grid import Grid, GridSnapshot
from .neighborhood import NeighborhoodCounter
from .rules import AutomatonRuleSet, RuleExpression
from .tiles import TileCatalog

logger = logging.getLogger(__name__)


@dataclass
class StepStats:
    """
    Counts from a single tick.

    Attributes:
        births: Empty cells that became a tile
        deaths: Cells that became empty (death rule or failed survival)
        starvations: Part of `deaths` caused by a failed survival rule
        unresolved: Birth matches whose symbol has no tile id
        skipped: True if the tick was skipped (empty rule set)
    """
    births: int = 0
    deaths: int = 0
    starvations: int = 0
    unresolved: int = 0
    skipped: bool = False

    @property
    def changed(self) -> int:
        """Number of cells whose tile changed."""
        return self.births + self.deaths


@dataclass
class RunResult:
    """
    Result of running several ticks.

    Contains:
    - Final grid
    - Per-tick statistics
    - Snapshots (if enabled)
    - Stop reason
    """
    final_grid: Grid
    stats: List[StepStats] = field(default_factory=list)
    history: List[GridSnapshot] = field(default_factory=list)
    stop_reason: str = "max_ticks"
    elapsed_time: float = 0.0

    @property
    def ticks(self) -> int:
        return len(self.stats)

    @property
    def total_births(self) -> int:
        return sum(s.births for s in self.stats)

    @property
    def total_deaths(self) -> int:
        return sum(s.deaths for s in self.stats)

    def births_series(self) -> np.ndarray:
        return np.array([s.births for s in self.stats], dtype=np.int64)

    def deaths_series(self) -> np.ndarray:
        return np.array([s.deaths for s in self.stats], dtype=np.int64)


class AutomatonStepper:
    """
    Synchronous generation stepper.

    Example:
        stepper = AutomatonStepper(catalog, radius=1, empty_id=0)
        new_grid, stats = stepper.step(grid, rules)
        print(stats.births, stats.deaths)

        result = stepper.run(grid, rules, ticks=50, store_history=True)
    """

    def __init__(
        self,
        catalog: TileCatalog,
        radius: int = 1,
        empty_id: Optional[int] = 0,
    ):
        """
        Initialize stepper.

        Args:
            catalog: Tile catalog for id <-> symbol resolution
            radius: Neighborhood radius (0 = von Neumann)
            empty_id: Tile id of empty/background cells. None disables births.
        """
        self.catalog = catalog
        self.counter = NeighborhoodCounter(catalog, radius)
        self.empty_id = empty_id

        self._step_callbacks: List[Callable[[Grid, StepStats], None]] = []

    def add_step_callback(self, callback: Callable[[Grid, StepStats], None]) -> None:
        """Add callback called with (new_grid, stats) after each tick of run()."""
        self._step_callbacks.append(callback)

    def _birth_candidates(
        self, rules: AutomatonRuleSet
    ) -> List[Tuple[str, RuleExpression, Optional[int]]]:
        candidates = []
        for symbol, rule in rules.all_rules().items():
            if rule.birth is not None:
                candidates.append((symbol, rule.birth, self.catalog.id_for_symbol(symbol)))
        return candidates

    def step(self, grid: Grid, rules: AutomatonRuleSet) -> Tuple[Grid, StepStats]:
        """
        Compute one generation.

        Args:
            grid: Current grid (not modified)
            rules: Active rule set for the whole tick

        Returns:
            (next_grid, stats)
        """
        stats = StepStats()
        if not rules.has_rules:
            logger.warning("Automaton rule set is empty, tick skipped")
            stats.skipped = True
            return grid.copy(), stats

        current = grid.tiles
        next_tiles = current.copy()
        field_ = self.counter.count_field(grid)
        symbol_of = self.catalog.symbol_lookup_table()
        default_symbol = self.catalog.default_symbol
        births = self._birth_candidates(rules)
        empty_id = self.empty_id

        height, width = current.shape
        for gy in range(1, height - 1):
            for gx in range(1, width - 1):
                tile_id = int(current[gy, gx])

                if tile_id != empty_id:
                    rule = rules.get_rule(symbol_of.get(tile_id, default_symbol))
                    if rule is None or (rule.death is None and rule.survival is None):
                        continue
                    if empty_id is None:
                        continue
                    counts = field_.table_at(gx, gy)
                    # Death takes precedence over survival
                    if rule.death is not None and rule.death.evaluate(counts):
                        next_tiles[gy, gx] = empty_id
                        stats.deaths += 1
                    elif rule.survival is not None and not rule.survival.evaluate(counts):
                        next_tiles[gy, gx] = empty_id
                        stats.deaths += 1
                        stats.starvations += 1
                    continue

                if not births:
                    continue
                counts = field_.table_at(gx, gy)
                for symbol, birth_rule, birth_id in births:
                    if birth_rule.evaluate(counts):
                        if birth_id is None:
                            stats.unresolved += 1
                        elif birth_id != empty_id:
                            next_tiles[gy, gx] = birth_id
                            stats.births += 1
                        break

        if stats.unresolved:
            logger.debug(f"{stats.unresolved} births matched symbols without a tile id")

        next_grid = Grid(grid.content_width, grid.content_height, tiles=next_tiles)
        return next_grid, stats

    def run(
        self,
        grid: Grid,
        rules: AutomatonRuleSet,
        ticks: int,
        store_history: bool = False,
        history_stride: int = 1,
        stop_when_stable: bool = False,
    ) -> RunResult:
        """
        Run several ticks.

        Args:
            grid: Initial grid (not modified)
            rules: Rule set used for every tick
            ticks: Maximum number of ticks
            store_history: Keep snapshots (initial state included)
            history_stride: Keep every N-th snapshot
            stop_when_stable: Stop once a tick changes nothing

        Returns:
            RunResult with final grid, per-tick stats and history
        """
        start = time.time()
        result = RunResult(final_grid=grid)
        if store_history:
            result.history.append(grid.snapshot(tick=0))

        current = grid
        for tick in range(1, ticks + 1):
            current, stats = self.step(current, rules)
            result.stats.append(stats)

            if store_history and tick % history_stride == 0:
                result.history.append(current.snapshot(tick=tick))

            for callback in self._step_callbacks:
                callback(current, stats)

            if stats.skipped:
                result.stop_reason = "no_rules"
                break
            if stop_when_stable and stats.changed == 0:
                result.stop_reason = "stable"
                break

        result.final_grid = current
        result.elapsed_time = time.time() - start
        return result

    def __repr__(self) -> str:
        return f"AutomatonStepper({self.counter!r}, empty_id={self.empty_id})"
