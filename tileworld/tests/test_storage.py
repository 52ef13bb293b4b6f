"""
Tests for storage module: tile JSON and config file readers.
"""

import json
import pytest
from tileworld.config import WorldConfig, minimal_config
from tileworld.core import TileCatalog, TileType
from tileworld.storage import (
    parse_spawn_config, load_spawn_table,
    parse_automaton_config, load_automaton_rules,
    parse_world_config, load_world_config,
    parse_tile_catalog, load_tile_catalog, save_tile_catalog,
)


class TestSpawnConfig:
    """Tests for the spawn config reader."""

    def test_parse(self):
        """Test comments, padding and order."""
        table = parse_spawn_config(
            "// spawn probabilities\n"
            "~=0.8:0.05:0\n"
            "\n"
            ".=0.1:0.7   // high zone padded\n"
        )
        assert table.symbols == ('~', '.')
        assert table['~'].zone_probabilities == (0.8, 0.05, 0.0)
        assert table['.'].zone_probabilities == (0.1, 0.7, 0.1)

    def test_bad_values(self):
        """Test invalid, out-of-range and extra probabilities."""
        table = parse_spawn_config("a=abc:0.5\nb=1.5:-2\nc=0.1:0.2:0.3:0.4\n")
        assert table['a'].zone_probabilities == (0.1, 0.5, 0.1)
        assert table['b'].zone_probabilities == (1.0, 0.0, 0.1)
        assert table['c'].zone_probabilities == (0.1, 0.2, 0.3)

    def test_bad_lines_skipped(self):
        """Test that malformed lines are ignored."""
        table = parse_spawn_config("no equals sign\nab=0.5\n=0.5\n~=0.5\n")
        assert table.symbols == ('~',)

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_spawn_table(tmp_path / "nope.cfg")

    def test_load(self, tmp_path):
        """Test reading from disk."""
        path = tmp_path / "spawn.cfg"
        path.write_text("^=0:0.05:0.8\n", encoding="utf-8")
        assert load_spawn_table(path)['^'].probability(2) == 0.8


class TestAutomatonConfig:
    """Tests for the automaton config reader."""

    TEXT = (
        "// Trees\n"
        "T\n"
        "survival=count['T'] >= 1 || count['~'] >= 1\n"
        "birth=count['T'] >= 3 && count['.'] >= 2\n"
        "death=count['^'] >= 5\n"
        "\n"
        ",\n"
        "birth=count['~'] >= 3   // sand near water\n"
    )

    def test_parse(self):
        """Test sections and kinds."""
        rules = parse_automaton_config(self.TEXT)
        assert list(rules) == ['T', ',']
        tree = rules.get_rule('T')
        assert tree.survival.evaluate({'~': 1})
        assert tree.birth.evaluate({'T': 3, '.': 2})
        assert tree.death.evaluate({'^': 5})
        sand = rules.get_rule(',')
        assert sand.survival is None
        assert sand.birth.evaluate({'~': 3})

    def test_bad_lines(self):
        """Test rules before any section, unknown keys and malformed rules."""
        rules = parse_automaton_config(
            "birth=true\n"
            "#\n"
            "grow=true\n"
            "survival=count[#] >= 2\n"
        )
        assert list(rules) == ['#']
        assert rules.get_rule('#').birth is None
        assert not rules.get_rule('#').survival.is_valid
        assert len(rules.parse_errors()) == 1

    def test_empty_section(self):
        """Test that a header without rules still registers the symbol."""
        rules = parse_automaton_config("T\n")
        assert 'T' in rules
        assert list(rules.get_rule('T').expressions()) == []

    def test_load_missing(self, tmp_path):
        """Test that a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_automaton_rules(tmp_path / "missing.cfg")

    def test_load(self, tmp_path):
        """Test reading from disk."""
        path = tmp_path / "automaton.cfg"
        path.write_text(self.TEXT, encoding="utf-8")
        assert len(load_automaton_rules(path)) == 2


class TestWorldConfigFile:
    """Tests for the Key=Value world config reader."""

    def test_parse(self):
        """Test known keys and aliases."""
        config = parse_world_config(
            "Width=30\n"
            "WorldHeight=12\n"
            "Seed=99\n"
            "UseRandomSeed=false\n"
            "NoiseFrequency=0.2\n"
            "NeighborRadius=0\n"
        )
        assert config.generation.content_width == 30
        assert config.generation.content_height == 12
        assert config.generation.seed == 99
        assert config.generation.use_random_seed is False
        assert config.generation.noise_frequency == 0.2
        assert config.neighborhood.radius == 0

    def test_base_not_modified(self):
        """Test that the base config is copied."""
        base = minimal_config()
        config = parse_world_config("Width=50\n", base)
        assert config.generation.content_width == 50
        assert base.generation.content_width == 16
        assert config.generation.seed == 42

    def test_bad_values_ignored(self):
        """Test invalid values and unknown keys."""
        config = parse_world_config("Width=wide\nColor=blue\nHeight=7\n")
        assert config.generation.content_width == WorldConfig().generation.content_width
        assert config.generation.content_height == 7

    def test_load(self, tmp_path):
        """Test reading from disk."""
        path = tmp_path / "world.cfg"
        path.write_text("Seed=5 // fixed\n", encoding="utf-8")
        assert load_world_config(path).generation.seed == 5


class TestTileCatalogJSON:
    """Tests for tile catalog JSON storage."""

    def test_parse(self):
        """Test field mapping and skipped entries."""
        catalog = parse_tile_catalog([
            {"id": 0, "name": "void", "character": " ", "color": 0},
            {"id": 3, "name": "water", "character": "~", "color": 9, "isPassable": False, "damage": 0},
            {"id": -1, "name": "broken", "character": "x"},
            {"name": "no id"},
        ])
        assert len(catalog) == 2
        water = catalog.get(3)
        assert water.symbol == '~'
        assert water.color == 9
        assert water.passable is False

    def test_fallback_to_default(self):
        """Test that unusable documents give the built-in catalog."""
        assert len(parse_tile_catalog({"id": 1})) == len(TileCatalog.default())
        assert len(parse_tile_catalog([{"bad": True}])) == len(TileCatalog.default())

    def test_save_and_load(self, tmp_path):
        """Test writing and reading a catalog file."""
        catalog = TileCatalog([TileType(0, "air", " ", 0), TileType(9, "ice", "*", 11, damage=1)])
        path = save_tile_catalog(catalog, tmp_path / "tiles.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[1]["character"] == "*"

        loaded = load_tile_catalog(path)
        assert loaded.get(9) == catalog.get(9)

    def test_invalid_json(self, tmp_path):
        """Test empty and malformed files."""
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        broken = tmp_path / "broken.json"
        broken.write_text("[{", encoding="utf-8")
        assert len(load_tile_catalog(empty)) == len(TileCatalog.default())
        assert len(load_tile_catalog(broken)) == len(TileCatalog.default())

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_tile_catalog(tmp_path / "missing.json")
