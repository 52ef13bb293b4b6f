"""
Tests for terrain synthesis and smoothing.
"""

import pytest
import numpy as np
from tileworld.core import Grid, TileCatalog, TileType
from tileworld.terrain import (
    OpenSimplexSampler, NoiseSampler, SpawnRule, SpawnTable, default_spawn_table,
    TerrainSynthesizer, TerrainSmoother, ExplicitCategories, NameMatchCategories,
    AnchorSymbols, classify_zone, select_symbol_for_zone, height_at,
    ZONE_LOW, ZONE_MID, ZONE_HIGH,
)


WALL = 2


class ConstantSampler:
    """Deterministic sampler returning the same value everywhere."""

    def __init__(self, value: float):
        self.value = value
        self.seed = None
        self.frequency = None

    def set_seed(self, seed):
        self.seed = seed

    def set_frequency(self, frequency):
        self.frequency = frequency

    def sample(self, x, y):
        return self.value


@pytest.fixture
def catalog():
    return TileCatalog.default()


class TestNoise:
    """Tests for the OpenSimplex sampler."""

    def test_protocol(self):
        """Test that both samplers satisfy the NoiseSampler protocol."""
        assert isinstance(OpenSimplexSampler(), NoiseSampler)
        assert isinstance(ConstantSampler(0.0), NoiseSampler)

    def test_range_and_determinism(self):
        """Test value range and seed reproducibility."""
        a = OpenSimplexSampler(seed=7, frequency=0.1)
        b = OpenSimplexSampler(seed=1, frequency=0.1)
        b.set_seed(7)
        values = [a.sample(x * 1.3, x * 0.7) for x in range(50)]
        assert all(-1.0 <= v <= 1.0 for v in values)
        assert values == [b.sample(x * 1.3, x * 0.7) for x in range(50)]


class TestSpawnTable:
    """Tests for spawn rules."""

    def test_padding(self):
        """Test that missing zone probabilities default to 0.1."""
        rule = SpawnRule('.', (0.2,))
        assert rule.zone_probabilities == (0.2, 0.1, 0.1)

    def test_validation(self):
        """Test rejected spawn rules."""
        with pytest.raises(ValueError):
            SpawnRule('.', (0.1, 0.2, 0.3, 0.4))
        with pytest.raises(ValueError):
            SpawnRule('.', (1.5,))
        with pytest.raises(ValueError):
            SpawnRule('..', (0.5,))

    def test_dominant_zone(self):
        """Test strict dominance."""
        assert SpawnRule('~', (0.8, 0.1, 0.0)).dominant_zone == ZONE_LOW
        assert SpawnRule('^', (0.0, 0.1, 0.8)).dominant_zone == ZONE_HIGH
        assert SpawnRule('?', (0.5, 0.5, 0.0)).dominant_zone is None

    def test_order(self):
        """Test that candidates keep insertion order."""
        table = default_spawn_table()
        assert table.symbols == ('~', ',', '.', 'T', '#', '^')
        assert [s for s, _ in table.candidates(ZONE_LOW)][:2] == ['~', ',']


class TestZones:
    """Tests for height blending and zone classification."""

    def test_thresholds(self):
        """Test zone boundaries."""
        assert classify_zone(0.0) == ZONE_LOW
        assert classify_zone(0.2499) == ZONE_LOW
        assert classify_zone(0.25) == ZONE_MID
        assert classify_zone(0.6999) == ZONE_MID
        assert classify_zone(0.7) == ZONE_HIGH
        assert classify_zone(1.0) == ZONE_HIGH

    def test_height_blend(self):
        """Test the weighted blend and power curve."""
        # All octaves at -1: base 0, ridge 0, detail 0
        assert height_at(ConstantSampler(-1.0), 3, 4) == 0.0
        # All octaves at 0: 0.4*0.5 + 0.4*1 + 0.2*0.5 = 0.7
        assert height_at(ConstantSampler(0.0), 3, 4) == pytest.approx(0.7 ** 1.1)


class TestWeightedSelection:
    """Tests for select_symbol_for_zone."""

    def test_single_candidate(self):
        """Test that a lone candidate is always chosen."""
        table = SpawnTable.from_mapping({'A': [0.9, 0.1, 0.0]})
        for variation in (0.0, 0.25, 0.5, 0.99, 1.0):
            assert select_symbol_for_zone(ZONE_LOW, table, variation) == 'A'

    def test_cursor_walk(self):
        """Test that the variation value walks the cumulative weights."""
        table = SpawnTable.from_mapping({'A': [0.5, 0, 0], 'B': [0.5, 0, 0]})
        assert select_symbol_for_zone(ZONE_LOW, table, 0.0) == 'A'
        assert select_symbol_for_zone(ZONE_LOW, table, 0.4) == 'A'
        assert select_symbol_for_zone(ZONE_LOW, table, 1.0) == 'B'

    def test_zero_weight_in_walk(self):
        """Test that a zero-weight symbol is reached only when the cursor is zero."""
        table = SpawnTable.from_mapping({'A': [0.0, 0, 0], 'B': [0.5, 0, 0]})
        assert select_symbol_for_zone(ZONE_LOW, table, 0.0) == 'A'
        assert select_symbol_for_zone(ZONE_LOW, table, 0.01) == 'B'
        assert select_symbol_for_zone(ZONE_LOW, table, 0.5) == 'B'

    def test_zero_total_fallback(self):
        """Test fallback to the highest base weight, earliest on ties."""
        table = SpawnTable.from_mapping({'A': [0.0, 0.2, 0], 'B': [0.0, 0.9, 0]})
        assert select_symbol_for_zone(ZONE_HIGH, table, 0.5) == 'A'

    def test_empty_table(self):
        """Test that an empty table yields None."""
        assert select_symbol_for_zone(ZONE_MID, SpawnTable(), 0.5) is None


class TestTerrainSynthesizer:
    """Tests for TerrainSynthesizer."""

    def test_deterministic(self, catalog):
        """Test that the same seed and frequency give the same grid."""
        synth = TerrainSynthesizer(catalog)
        table = default_spawn_table()

        grids = []
        for _ in range(2):
            grid = Grid(20, 10)
            synth.synthesize(grid, OpenSimplexSampler(), table, seed=1337, frequency=0.05)
            grids.append(grid)
        assert grids[0] == grids[1]

    def test_fills_interior(self, catalog):
        """Test that every interior cell gets a spawn tile and the border is untouched."""
        grid = Grid(12, 6, fill=0)
        grid.create_border(WALL)
        report = TerrainSynthesizer(catalog).synthesize(
            grid, OpenSimplexSampler(), default_spawn_table(), seed=3, frequency=0.1,
        )
        assert report.placed == 72
        assert sum(report.zone_counts) == 72
        assert report.heights.shape == (6, 12)
        assert grid.border_is(WALL)
        spawn_ids = {catalog.id_for_symbol(s) for s in default_spawn_table().symbols}
        assert set(np.unique(grid.interior)) <= spawn_ids

    def test_constant_low_zone(self, catalog):
        """Test a fully low world with a deterministic sampler."""
        sampler = ConstantSampler(-1.0)
        grid = Grid(5, 4)
        report = TerrainSynthesizer(catalog).synthesize(
            grid, sampler, SpawnTable.from_mapping({'~': [0.9, 0.1, 0.0]}), seed=9, frequency=0.2,
        )
        assert sampler.seed == 9
        assert sampler.frequency == 0.2
        assert report.zone_counts == [20, 0, 0]
        assert np.all(grid.interior == catalog.id_for_symbol('~'))

    def test_unresolved_symbol_skipped(self, catalog):
        """Test that symbols without a tile id leave cells untouched."""
        grid = Grid(4, 3, fill=0)
        report = TerrainSynthesizer(catalog).synthesize(
            grid, ConstantSampler(0.0), SpawnTable.from_mapping({'Q': [1, 1, 1]}), seed=1, frequency=0.1,
        )
        assert report.placed == 0
        assert report.unresolved == 12
        assert np.all(grid.interior == 0)

    def test_empty_table_skipped(self, catalog):
        """Test that an empty spawn table skips synthesis."""
        grid = Grid(4, 3, fill=0)
        report = TerrainSynthesizer(catalog).synthesize(
            grid, ConstantSampler(0.0), SpawnTable(), seed=1, frequency=0.1,
        )
        assert report.skipped
        assert np.all(grid.interior == 0)


class TestTerrainSmoother:
    """Tests for TerrainSmoother."""

    ANCHORS = AnchorSymbols(water='~', land='.', mountain='^')

    def test_reclassify_rules(self, catalog):
        """Test each boundary-correction threshold."""
        smoother = TerrainSmoother(catalog, radius=1)
        a = self.ANCHORS
        # Mountain
        assert smoother.reclassify('^', a, 4, 4, 0) == '~'
        assert smoother.reclassify('^', a, 3, 2, 0) == '~'
        assert smoother.reclassify('^', a, 3, 3, 0) is None
        # Water
        assert smoother.reclassify('~', a, 0, 0, 5) == '^'
        assert smoother.reclassify('~', a, 0, 6, 1) == '.'
        assert smoother.reclassify('~', a, 0, 6, 2) is None
        # Land
        assert smoother.reclassify('.', a, 5, 0, 0) == '~'
        assert smoother.reclassify('.', a, 1, 0, 4) == '^'
        assert smoother.reclassify('.', a, 2, 0, 4) is None
        # Other symbols are left alone
        assert smoother.reclassify('T', a, 8, 0, 0) is None

    def test_isolated_mountain(self, catalog):
        """Test that a mountain surrounded by water becomes water."""
        grid = Grid.from_symbols(["~~~", "~^~", "~~~"], catalog, border_id=WALL)
        smoother = TerrainSmoother(catalog, radius=1, resolver=ExplicitCategories('~', '.', '^'))
        changed = smoother.smooth(grid, default_spawn_table())
        assert changed == 1
        assert grid.content_tile_at(1, 1) == catalog.id_for_symbol('~')
        assert grid.border_is(WALL)

    def test_uses_pre_pass_counts(self, catalog):
        """Test that changes within the pass are not read back."""
        grid = Grid.from_symbols(["~~~", "~.~", "~~^"], catalog, border_id=WALL)
        smoother = TerrainSmoother(catalog, radius=1, resolver=ExplicitCategories('~', '.', '^'))
        changed = smoother.smooth(grid, default_spawn_table())
        # The land cell turns to water; the mountain still saw it as land
        assert changed == 1
        assert grid.content_tile_at(1, 1) == catalog.id_for_symbol('~')
        assert grid.content_tile_at(2, 2) == catalog.id_for_symbol('^')

    def test_no_change(self, catalog):
        """Test that a uniform grid is left alone."""
        grid = Grid.from_symbols(["...", "...", "..."], catalog, border_id=WALL)
        before = grid.copy()
        assert TerrainSmoother(catalog, radius=1).smooth(grid, default_spawn_table()) == 0
        assert grid == before

    def test_empty_spawn_table(self, catalog):
        """Test that smoothing does nothing without spawn rules."""
        grid = Grid.from_symbols(["~~~", "~^~", "~~~"], catalog, border_id=WALL)
        assert TerrainSmoother(catalog, radius=1).smooth(grid, SpawnTable()) == 0


class TestCategoryResolution:
    """Tests for anchor symbol resolution."""

    def test_name_match(self, catalog):
        """Test that tile names pick the anchors."""
        anchors = NameMatchCategories().resolve(catalog, default_spawn_table())
        assert anchors == AnchorSymbols(water='~', land='.', mountain='^')

    def test_probability_fallback(self):
        """Test anchors from zone-probability dominance."""
        catalog = TileCatalog([TileType(0, "a", "x"), TileType(1, "b", "y"), TileType(2, "c", "z")])
        table = SpawnTable.from_mapping({
            'z': [0.0, 0.1, 0.9],
            'x': [0.9, 0.1, 0.0],
            'y': [0.1, 0.8, 0.1],
        })
        anchors = NameMatchCategories().resolve(catalog, table)
        assert anchors == AnchorSymbols(water='x', land='y', mountain='z')

    def test_last_resort(self):
        """Test that the first spawn symbol is used when nothing qualifies."""
        catalog = TileCatalog([TileType(0, "a", "q"), TileType(1, "b", "r")])
        table = SpawnTable.from_mapping({'q': [0.5, 0.5, 0.5], 'r': [0.2, 0.2, 0.2]})
        anchors = NameMatchCategories().resolve(catalog, table)
        assert anchors == AnchorSymbols(water='q', land='q', mountain='q')

    def test_name_match_wins_over_probabilities(self):
        """Test that a name match is used even when its symbol is not spawned."""
        catalog = TileCatalog([
            TileType(0, "deep water", "~"),
            TileType(1, "pond", "w"),
            TileType(2, "grass", "."),
            TileType(3, "mountain", "^"),
        ])
        table = SpawnTable.from_mapping({
            'w': [0.9, 0.1, 0.0],
            '.': [0.1, 0.8, 0.1],
            '^': [0.0, 0.1, 0.9],
        })
        anchors = NameMatchCategories().resolve(catalog, table)
        assert anchors == AnchorSymbols(water='~', land='.', mountain='^')
