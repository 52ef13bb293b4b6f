"""
World orchestrator.

Owns the grid, the tile catalog, the spawn table and the active rule set,
and runs the pipelines over them:

    generate():  synthesis -> border -> smoothing     (once per world)
    tick():      one automaton step, grid swapped     (once per game tick)

Rule sets, spawn tables and catalogs are replaced as whole objects by the
reload_* methods; the previous object is dropped, never patched. A tick
reads the rule set reference once, so it always sees a single rule set.

Everything here is single-threaded: callers must not tick while a tick or
a reload is in progress.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import logging

from ..config import WorldConfig
from ..terrain.noise import NoiseSampler, OpenSimplexSampler
from ..terrain.smoothing import CategoryResolver, TerrainSmoother
from ..terrain.spawn import SpawnTable, default_spawn_table
from ..terrain.synthesis import SynthesisReport, TerrainSynthesizer
from .automaton import AutomatonStepper, RunResult, StepStats
from .grid import Grid
from .rules import AutomatonRuleSet, create_default_rules
from .tiles import TileCatalog

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """Summary of one world generation."""
    seed: int
    synthesis: SynthesisReport
    smoothed: int = 0


class World:
    """
    Tile world with terrain generation and a rule-driven automaton.

    Example:
        world = World(minimal_config())
        world.generate()
        for _ in range(10):
            world.tick()
        print(world.to_text())
    """

    def __init__(
        self,
        config: Optional[WorldConfig] = None,
        catalog: Optional[TileCatalog] = None,
        spawn_table: Optional[SpawnTable] = None,
        rules: Optional[AutomatonRuleSet] = None,
        sampler: Optional[NoiseSampler] = None,
        resolver: Optional[CategoryResolver] = None,
    ):
        """
        Initialize world.

        Args:
            config: World configuration (defaults if None)
            catalog: Tile catalog (built-in tiles if None)
            spawn_table: Spawn probabilities (built-in table if None)
            rules: Automaton rules (built-in rules if None)
            sampler: Noise sampler (OpenSimplex if None)
            resolver: Anchor category strategy for smoothing
        """
        self.config = config if config is not None else WorldConfig()
        for issue in self.config.validate():
            logger.warning(f"Config issue: {issue}")

        self._catalog = catalog if catalog is not None else TileCatalog.default()
        self._spawn_table = spawn_table if spawn_table is not None else default_spawn_table()
        self._rules = rules if rules is not None else create_default_rules()
        self.sampler = sampler if sampler is not None else OpenSimplexSampler()
        self.resolver = resolver

        self.automaton_enabled = self.config.automaton.enabled
        self.tick_count = 0
        self.seed: Optional[int] = None

        self._build_pipeline()
        gen = self.config.generation
        self._grid = Grid(gen.content_width, gen.content_height, fill=self._fill_id)
        self._grid.create_border(self._border_id)

    @classmethod
    def from_config(cls, config: WorldConfig, **kwargs) -> "World":
        """
        Build a world, reading catalog/spawn/rule files named in config.paths.

        Unreadable files are logged; the world then falls back to the
        built-in catalog, or an empty spawn table / rule set, which makes
        generation / ticking skip their step.
        """
        from ..storage import load_automaton_rules, load_spawn_table, load_tile_catalog

        paths = config.paths
        if paths.tiles is not None and "catalog" not in kwargs:
            try:
                kwargs["catalog"] = load_tile_catalog(paths.tiles)
            except OSError as exc:
                logger.error(f"Tile config not loaded ({exc}), using default tiles")
        if paths.spawn is not None and "spawn_table" not in kwargs:
            try:
                kwargs["spawn_table"] = load_spawn_table(paths.spawn)
            except OSError as exc:
                logger.error(f"Spawn config not loaded ({exc})")
                kwargs["spawn_table"] = SpawnTable()
        if paths.automaton is not None and "rules" not in kwargs:
            try:
                kwargs["rules"] = load_automaton_rules(paths.automaton)
            except OSError as exc:
                logger.error(f"Cellular automaton config not loaded ({exc})")
                kwargs["rules"] = AutomatonRuleSet()
        return cls(config, **kwargs)

    def _build_pipeline(self) -> None:
        """(Re)build everything that depends on the catalog."""
        auto = self.config.automaton
        radius = self.config.neighborhood.radius

        self._empty_id = self._catalog.id_for_symbol(auto.empty_symbol)
        if self._empty_id is None:
            logger.warning(f"Empty symbol {auto.empty_symbol!r} not in tile catalog, cells cannot die or be born")
        self._fill_id = self._empty_id if self._empty_id is not None else 0

        border_id = self._catalog.id_for_symbol(auto.border_symbol)
        if border_id is None:
            logger.warning(f"Border symbol {auto.border_symbol!r} not in tile catalog, using background tile")
            border_id = self._fill_id
        self._border_id = border_id

        self.synthesizer = TerrainSynthesizer(self._catalog)
        self.smoother = TerrainSmoother(self._catalog, radius, self.resolver)
        self.stepper = AutomatonStepper(self._catalog, radius, self._empty_id)

    # ===== Read-only export =====

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def catalog(self) -> TileCatalog:
        return self._catalog

    @property
    def spawn_table(self) -> SpawnTable:
        return self._spawn_table

    @property
    def rules(self) -> AutomatonRuleSet:
        return self._rules

    @property
    def border_id(self) -> int:
        return self._border_id

    @property
    def empty_id(self) -> Optional[int]:
        return self._empty_id

    @property
    def total_width(self) -> int:
        return self._grid.total_width

    @property
    def total_height(self) -> int:
        return self._grid.total_height

    @property
    def content_width(self) -> int:
        return self._grid.content_width

    @property
    def content_height(self) -> int:
        return self._grid.content_height

    def tile_id_at(self, x: int, y: int) -> int:
        """Tile id at full-map coordinates (0 outside the map)."""
        return self._grid.tile_id_at(x, y)

    def to_text(self) -> str:
        return self._grid.to_text(self._catalog)

    # ===== Generation =====

    def generate(self, seed: Optional[int] = None) -> GenerationReport:
        """
        Generate a fresh world.

        Args:
            seed: Noise seed; the config's effective seed if None

        Returns:
            GenerationReport
        """
        gen = self.config.generation
        seed = self.config.effective_seed() if seed is None else int(seed)
        logger.info(
            f"Generating world with seed: {seed}, size: {gen.content_width}x{gen.content_height}, "
            f"noise frequency: {gen.noise_frequency}"
        )

        grid = Grid(gen.content_width, gen.content_height, fill=self._fill_id)
        synthesis = self.synthesizer.synthesize(
            grid, self.sampler, self._spawn_table, seed, gen.noise_frequency,
        )
        report = GenerationReport(seed=seed, synthesis=synthesis)
        if synthesis.skipped:
            # Current grid is kept as it was
            logger.warning("Spawn table is empty, terrain synthesis skipped")
            return report

        logger.info(f"Tiles placed: {synthesis.placed}, zones (low/mid/high): {synthesis.zone_counts}")
        if synthesis.unresolved:
            logger.warning(f"{synthesis.unresolved} cells left unset, spawn symbols missing from tile catalog")

        grid.create_border(self._border_id)

        if self.config.smoothing.enabled:
            report.smoothed = self.smoother.smooth(grid, self._spawn_table)
            logger.info(f"Terrain smoothing changed {report.smoothed} cells")

        self._grid = grid
        self.seed = seed
        self.tick_count = 0
        return report

    # ===== Automaton =====

    def set_automaton_enabled(self, enabled: bool) -> None:
        self.automaton_enabled = bool(enabled)

    def tick(self) -> Optional[StepStats]:
        """
        Advance the automaton one generation.

        Returns:
            StepStats, or None if the automaton is disabled
        """
        if not self.automaton_enabled:
            return None

        rules = self._rules
        if not rules.has_rules:
            logger.warning("No cellular automaton rules loaded, tick skipped")
            return StepStats(skipped=True)

        next_grid, stats = self.stepper.step(self._grid, rules)
        self._grid = next_grid
        self.tick_count += 1
        logger.debug(f"Tick {self.tick_count}: births={stats.births}, deaths={stats.deaths}")
        return stats

    def run(self, ticks: int, store_history: bool = False) -> RunResult:
        """
        Advance several generations with one rule set, committing the result.

        With the automaton disabled nothing runs and the result has no ticks.
        """
        if not self.automaton_enabled:
            logger.warning("Automaton disabled, run skipped")
            return RunResult(final_grid=self._grid, stop_reason="disabled")

        result = self.stepper.run(self._grid, self._rules, ticks, store_history=store_history)
        self._grid = result.final_grid
        self.tick_count += sum(1 for s in result.stats if not s.skipped)
        return result

    # ===== Reload (whole-object replace) =====

    def reload_rules(self, rules: AutomatonRuleSet) -> None:
        self._rules = rules
        logger.info(f"Cellular automaton rules replaced: {len(rules)} symbols")

    def reload_rules_from(self, path: Union[str, Path]) -> bool:
        """Replace the rule set from a file. Keeps the current one on failure."""
        from ..storage import load_automaton_rules

        try:
            rules = load_automaton_rules(path)
        except OSError as exc:
            logger.error(f"Failed to reload cellular automaton rules: {exc}")
            return False
        self.reload_rules(rules)
        return True

    def reload_spawn_table(self, spawn_table: SpawnTable) -> None:
        """Replace the spawn table; takes effect on the next generate()."""
        self._spawn_table = spawn_table

    def reload_tiles(self, catalog: TileCatalog) -> None:
        """Replace the tile catalog and rebuild the pipelines that use it."""
        removed = set(self._catalog.ids) - set(catalog.ids)
        if removed:
            logger.info(f"Tiles removed: {len(removed)}")
        self._catalog = catalog
        self._build_pipeline()

    def summary(self) -> str:
        return (f"World({self.content_width}x{self.content_height}, seed={self.seed}, "
                f"tick={self.tick_count}, rules={len(self._rules)}, "
                f"automaton={'on' if self.automaton_enabled else 'off'})")
