"""
Batch Conversion Tests
======================

End-to-end tests for Converter: PRG discovery, validation order, effect
and colour selection, output naming and compilation building.
"""

import random
from pathlib import Path

import pytest

from gyrotap.assets import LoaderAssets
from gyrotap.config import ConverterConfig
from gyrotap.converter import Converter, default_output_dir
from gyrotap.effects import LOADING_EFFECTS, FoundMessageStyle, TextColour
from gyrotap.errors import (
    InvalidArgumentError,
    MissingAssetError,
    MissingEntryPointError,
    OutOfAddressRangeError,
    OutputCollisionError,
    TapeIOError,
)
from gyrotap.tap.reader import TapReader


@pytest.fixture
def games(tmp_path, make_prg) -> Path:
    directory = tmp_path / "games"
    directory.mkdir()
    (directory / "Alpha.prg").write_bytes(make_prg(payload=bytes(50)))
    (directory / "Bravo-[EX].prg").write_bytes(make_prg(sys_text=b"4096"))
    (directory / "readme.txt").write_text("not a program")
    return directory


@pytest.fixture
def config(asset_dir, tmp_path) -> ConverterConfig:
    return ConverterConfig(asset_dir=asset_dir, output_dir=tmp_path / "out")


# =============================================================================
# Output Directory Tests
# =============================================================================

class TestDefaultOutputDir:
    """Tests for default_output_dir."""

    def test_directory(self, tmp_path):
        games = tmp_path / "games"
        games.mkdir()
        assert default_output_dir(games) == tmp_path / "games-TAPs"

    def test_file(self, tmp_path):
        game = tmp_path / "game.prg"
        game.write_bytes(b"\x01\x08")
        assert default_output_dir(game) == tmp_path / "game.prg-TAP"


# =============================================================================
# Conversion Tests
# =============================================================================

class TestConvert:
    """Tests for Converter.convert."""

    def test_directory(self, config, games):
        report = Converter(config).convert(games)

        assert report.output_dir == config.output_dir
        assert [r.stem for r in report.results] == ["Alpha", "Bravo"]
        assert report.sys_addresses == {"Alpha": 2061, "Bravo": 4096}
        assert report.cassettes == []

        for result in report.results:
            assert result.tap_path.exists()
            assert TapReader.from_file(result.tap_path).is_length_consistent

        assert sorted(p.name for p in config.output_dir.iterdir()) == ["Alpha.tap", "Bravo.tap"]

    def test_single_file_default_output(self, asset_dir, tmp_path, make_prg):
        game = tmp_path / "game.prg"
        game.write_bytes(make_prg())
        report = Converter(ConverterConfig(asset_dir=asset_dir)).convert(game)

        assert report.output_dir == tmp_path / "game.prg-TAP"
        assert (report.output_dir / "game.tap").exists()

    def test_progress_callback(self, config, games):
        seen = []
        Converter(config).convert(games, on_program=lambda r, sys: seen.append((r.stem, sys)))
        assert seen == [("Alpha", 2061), ("Bravo", 4096)]

    def test_no_programs(self, config, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(TapeIOError, match="PRG"):
            Converter(config).convert(empty)

    def test_missing_assets(self, tmp_path):
        with pytest.raises(MissingAssetError):
            Converter(ConverterConfig(asset_dir=tmp_path))

    def test_first_failure_stops_batch(self, config, games):
        (games / "Charlie.prg").write_bytes(bytes([0x00, 0x02, 0xEA]))
        (games / "Delta.prg").write_bytes((games / "Alpha.prg").read_bytes())

        with pytest.raises(OutOfAddressRangeError, match="Charlie.prg"):
            Converter(config).convert(games)

        written = sorted(p.name for p in config.output_dir.iterdir())
        assert written == ["Alpha.tap", "Bravo.tap"]

    def test_missing_sys_line(self, config, tmp_path):
        program = tmp_path / "nosys.prg"
        program.write_bytes(bytes([0x00, 0x10, 0xA9, 0x00, 0x60]))
        with pytest.raises(MissingEntryPointError):
            Converter(config).convert(program)
        assert not (config.output_dir / "nosys.tap").exists()

    def test_output_collision(self, config, games):
        (games / "Alpha-[ex].prg").write_bytes((games / "Alpha.prg").read_bytes())
        with pytest.raises(OutputCollisionError, match="Alpha.tap"):
            Converter(config).convert(games)

    def test_compilations(self, config, games):
        config.tape_length_minutes = 60
        report = Converter(config).convert(games)

        assert len(report.cassettes) == 1
        names = sorted(p.name for p in config.output_dir.iterdir())
        assert names == [
            "C64 Compilation Cassette #1 - Contents.txt",
            "C64 Compilation Cassette #1 - Side A.tap",
        ]

    @pytest.mark.parametrize("minutes", [1, 0, -60])
    def test_bad_tape_length_writes_nothing(self, config, games, minutes):
        config.tape_length_minutes = minutes
        with pytest.raises(InvalidArgumentError, match="at least 2 minutes"):
            Converter(config).convert(games)
        assert not config.output_dir.exists()

    def test_no_compilation_for_single_file(self, config, games):
        config.tape_length_minutes = 60
        report = Converter(config).convert(games / "Alpha.prg")
        assert report.cassettes == []
        assert (config.output_dir / "Alpha.tap").exists()

    def test_compilations_keep_individual(self, config, games):
        config.tape_length_minutes = 60
        config.keep_individual = True
        Converter(config).convert(games)
        assert (config.output_dir / "Alpha.tap").exists()
        assert (config.output_dir / "Bravo.tap").exists()


# =============================================================================
# Effect and Style Selection Tests
# =============================================================================

class TestSelection:
    """Tests for per-program effect and style choices."""

    def test_fixed_effect(self, config):
        config.effect = 4
        converter = Converter(config)
        assert converter.next_effect() is LOADING_EFFECTS[4]
        assert converter.next_effect() is LOADING_EFFECTS[4]

    def test_random_effect_never_repeats(self, config):
        config.effect = None
        converter = Converter(config, rng=random.Random(99))

        previous = LOADING_EFFECTS[0]
        for _ in range(50):
            effect = converter.next_effect()
            assert effect is not previous
            previous = effect

    def test_seed_is_reproducible(self, config):
        config.effect = None
        config.random_colour = True
        config.seed = 2024

        first = Converter(config)
        second = Converter(config)
        assert [first.next_effect() for _ in range(10)] == [second.next_effect() for _ in range(10)]
        assert [first.next_style() for _ in range(10)] == [second.next_style() for _ in range(10)]

    def test_fixed_style(self, config):
        config.clear_screen = True
        config.colour = TextColour.ORANGE
        assert Converter(config).next_style() == FoundMessageStyle(True, TextColour.ORANGE)

    def test_random_colour_never_repeats(self, config):
        config.random_colour = True
        config.clear_screen = True
        converter = Converter(config, rng=random.Random(5))

        previous = TextColour.BLACK
        for _ in range(50):
            style = converter.next_style()
            assert style.clear_screen
            assert style.colour is not previous
            previous = style.colour

    def test_injected_assets(self, config, header_template, boot_code, tmp_path):
        config.asset_dir = tmp_path / "nowhere"
        assets = LoaderAssets(header_template=header_template, boot_code=boot_code)
        converter = Converter(config, assets=assets)
        assert converter.assets is assets
