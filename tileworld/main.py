"""
Tile World Simulator - noise-generated terrain with a rule-driven automaton.

Main entry point for simulations.
"""

from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Optional

from tileworld.config import WorldConfig, standard_config
from tileworld.core import World
from tileworld.analysis import tile_composition, population_history
from tileworld.storage import load_world_config


logger = logging.getLogger(__name__)


def run_simulation(
    config: WorldConfig,
    ticks: int = 10,
    seed: Optional[int] = None,
    output_dir: Optional[Path] = None,
    store_history: bool = False,
) -> dict:
    """
    Generate a world and run the automaton.

    Args:
        config: World configuration (config.paths selects tile/spawn/rule files)
        ticks: Number of automaton ticks
        seed: Overrides the configured seed
        output_dir: If given, the final map and config are written there
        store_history: Keep per-tick snapshots

    Returns:
        Dictionary with results
    """
    world = World.from_config(config)
    logger.info(f"Starting simulation: {world.summary()}")

    report = world.generate(seed)
    initial = world.grid.copy()

    result = world.run(ticks, store_history=store_history)
    logger.info(
        f"Ran {result.ticks} ticks ({result.stop_reason}): "
        f"births={result.total_births}, deaths={result.total_deaths}, "
        f"time={result.elapsed_time:.3f}s"
    )

    composition = tile_composition(world.grid)
    analysis = {
        'seed': report.seed,
        'tiles_placed': report.synthesis.placed,
        'smoothed': report.smoothed,
        'ticks': result.ticks,
        'total_births': result.total_births,
        'total_deaths': result.total_deaths,
        'composition': composition.by_name(world.catalog),
        'changed_cells': initial.count_changed(world.grid),
    }

    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "map.txt").write_text(world.to_text() + "\n", encoding="utf-8")
        config.save(output_dir / "config.json")
        logger.info(f"Results saved to: {output_dir}")

    return {
        'world': world,
        'initial': initial,
        'run': result,
        'analysis': analysis,
    }


def main(argv=None):
    """Command-line interface for running simulations."""
    parser = argparse.ArgumentParser(description="Tile World Simulator")

    parser.add_argument('--config', type=str, default=None,
                       help='World config JSON (default: built-in)')
    parser.add_argument('--world-cfg', type=str, default=None,
                       help='Key=Value world settings file applied on top')
    parser.add_argument('--tiles', type=str, default=None,
                       help='Tile catalog JSON (default: built-in tiles)')
    parser.add_argument('--spawn', type=str, default=None,
                       help='Spawn probabilities config (default: built-in)')
    parser.add_argument('--rules', type=str, default=None,
                       help='Cellular automaton rules config (default: built-in)')
    parser.add_argument('--width', type=int, default=None,
                       help='Interior width (default: 80)')
    parser.add_argument('--height', type=int, default=None,
                       help='Interior height (default: 40)')
    parser.add_argument('--radius', type=int, default=None,
                       help='Neighborhood radius, 0 = von Neumann (default: 3)')
    parser.add_argument('--seed', type=int, default=None,
                       help='Noise seed (default: config seed)')
    parser.add_argument('--ticks', type=int, default=10,
                       help='Number of automaton ticks (default: 10)')
    parser.add_argument('--no-smoothing', action='store_true',
                       help='Skip biome smoothing')
    parser.add_argument('--output', type=str, default=None,
                       help='Output directory for map and config')
    parser.add_argument('--quiet', action='store_true',
                       help='Do not print the final map')
    parser.add_argument('--visualize', action='store_true',
                       help='Save map and population plots (needs --output)')
    parser.add_argument('--log-level', type=str, default='INFO',
                       help='Logging level (default: INFO)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Build config
    config = WorldConfig.load(args.config) if args.config else standard_config()
    if args.world_cfg:
        try:
            config = load_world_config(args.world_cfg, config)
        except OSError as exc:
            logger.error(f"World config not loaded ({exc}), using defaults")
    if args.width is not None:
        config.generation.content_width = args.width
    if args.height is not None:
        config.generation.content_height = args.height
    if args.radius is not None:
        config.neighborhood.radius = args.radius
    if args.no_smoothing:
        config.smoothing.enabled = False
    if args.tiles:
        config.paths.tiles = Path(args.tiles)
    if args.spawn:
        config.paths.spawn = Path(args.spawn)
    if args.rules:
        config.paths.automaton = Path(args.rules)

    output_dir = Path(args.output) if args.output else None
    results = run_simulation(
        config,
        ticks=args.ticks,
        seed=args.seed,
        output_dir=output_dir,
        store_history=args.visualize,
    )

    if not args.quiet:
        print(results['world'].to_text())

    # Visualization
    if args.visualize:
        if output_dir is None:
            logger.warning("--visualize needs --output, skipping plots")
        else:
            logger.info("Generating visualization...")
            import matplotlib.pyplot as plt
            from tileworld.visualization import plot_tile_map, plot_population_history

            world = results['world']
            ax = plot_tile_map(world.grid, world.catalog, title=f"Seed {results['analysis']['seed']}")
            ax.figure.savefig(output_dir / "map.png", dpi=150)
            plt.close(ax.figure)

            populations = population_history(results['run'].history, world.catalog.ids)
            ax = plot_population_history(populations, world.catalog, title="Tile populations")
            ax.figure.savefig(output_dir / "populations.png", dpi=150)
            plt.close(ax.figure)

            logger.info(f"Visualization saved to: {output_dir}")

    logger.info("Done!")
    return 0


if __name__ == "__main__":
    main()
