"""
CLI Tests
=========

Tests for the gyrotap command using click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from gyrotap import __version__
from gyrotap.cli.errors import ExitCode, describe_error
from gyrotap.cli.gyrotap import main
from gyrotap.errors import (
    InvalidArgumentError,
    MissingAssetError,
    MissingEntryPointError,
    OutputCollisionError,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["GYROTAP_ASSET_DIR", "GYROTAP_EFFECT", "GYROTAP_COLOUR",
                 "GYROTAP_TAPE_LENGTH", "GYROTAP_SEED"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def game(tmp_path, make_prg):
    path = tmp_path / "game.prg"
    path.write_bytes(make_prg())
    return path


class TestGyrotapCli:
    """Tests for the gyrotap command."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Gyrospeed" in result.output
        assert "--tape-length" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_list_effects(self, runner):
        result = runner.invoke(main, ["--list-effects"])
        assert result.exit_code == 0
        assert "0 - Original" in result.output
        assert "J - It's a Sin!" in result.output

    def test_convert_file(self, runner, game, asset_dir, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(main, [str(game), "--assets", str(asset_dir), "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert "Processing game.prg - found BASIC SYS line with jump address $080d (2061)" in result.output
        assert "Running length: 00:" in result.output
        assert (output / "game.tap").exists()

    def test_assets_from_environment(self, runner, game, asset_dir, tmp_path, monkeypatch):
        monkeypatch.setenv("GYROTAP_ASSET_DIR", str(asset_dir))
        result = runner.invoke(main, [str(game), "-o", str(tmp_path / "out")])
        assert result.exit_code == 0, result.output

    def test_compilation(self, runner, asset_dir, tmp_path, make_prg):
        games = tmp_path / "games"
        games.mkdir()
        (games / "one.prg").write_bytes(make_prg())
        (games / "two.prg").write_bytes(make_prg(payload=bytes(10)))

        output = tmp_path / "out"
        result = runner.invoke(main, [
            str(games), "-a", str(asset_dir), "-o", str(output), "-t", "60", "-k",
        ])

        assert result.exit_code == 0, result.output
        assert "C64 Compilation Cassette #1" in result.output
        assert (output / "one.tap").exists()
        assert (output / "C64 Compilation Cassette #1 - Side A.tap").exists()

    def test_compilation_needs_folder(self, runner, game, asset_dir, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(main, [str(game), "-a", str(asset_dir), "-o", str(output), "-t", "60"])

        assert result.exit_code == 0, result.output
        assert (output / "game.tap").exists()
        assert not (output / "C64 Compilation Cassette #1 - Side A.tap").exists()

    def test_random_choices_with_seed(self, runner, game, asset_dir, tmp_path):
        result = runner.invoke(main, [
            str(game), "-a", str(asset_dir), "-o", str(tmp_path / "out"),
            "--effect", "R", "--colour", "R", "--clear-screen", "--seed", "1",
        ])
        assert result.exit_code == 0, result.output

    def test_unknown_effect(self, runner, game, asset_dir):
        result = runner.invoke(main, [str(game), "-a", str(asset_dir), "--effect", "Z"])
        assert result.exit_code == 2
        assert "Unknown loading effect" in result.output

    def test_unknown_colour(self, runner, game, asset_dir):
        result = runner.invoke(main, [str(game), "-a", str(asset_dir), "--colour", "mauve"])
        assert result.exit_code == 2

    def test_tape_too_short(self, runner, game, asset_dir):
        result = runner.invoke(main, [str(game), "-a", str(asset_dir), "-t", "1"])
        assert result.exit_code == 2

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "missing.prg")])
        assert result.exit_code == 2

    def test_missing_assets(self, runner, game, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(main, [str(game), "-a", str(empty)])
        assert result.exit_code == 1
        assert "gyrospeed-header.prg" in result.output
        assert "GYROTAP_ASSET_DIR" in result.output

    def test_program_out_of_range(self, runner, tmp_path, asset_dir):
        bad = tmp_path / "bad.prg"
        bad.write_bytes(bytes([0x00, 0x02, 0xEA]))
        result = runner.invoke(main, [str(bad), "-a", str(asset_dir), "-o", str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Error: Cannot convert" in result.output
        assert "bad.prg" in result.output
        assert "  program must load into the address range $0400 - $cfff" in result.output
        assert not (tmp_path / "out" / "bad.tap").exists()

    def test_short_tape_length_from_environment_ignored(self, runner, asset_dir, tmp_path,
                                                        make_prg, monkeypatch):
        games = tmp_path / "games"
        games.mkdir()
        (games / "one.prg").write_bytes(make_prg())
        monkeypatch.setenv("GYROTAP_TAPE_LENGTH", "1")

        output = tmp_path / "out"
        result = runner.invoke(main, [str(games), "-a", str(asset_dir), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in output.iterdir()) == ["one.tap"]


class TestDescribeError:
    """Tests for mapping exceptions to messages and exit codes."""

    def test_program_error_names_file(self, tmp_path):
        error = MissingEntryPointError(tmp_path / "game.prg")
        lines, code = describe_error(error)
        assert code is ExitCode.CONVERSION_ERROR
        assert lines == [
            f"Cannot convert {tmp_path / 'game.prg'}",
            "couldn't locate BASIC SYS line at $0801",
        ]

    def test_program_error_without_path(self):
        lines, code = describe_error(MissingEntryPointError())
        assert lines == ["couldn't locate BASIC SYS line at $0801"]
        assert code is ExitCode.CONVERSION_ERROR

    def test_asset_error_hint(self, tmp_path):
        lines, code = describe_error(MissingAssetError(tmp_path / "gyrospeed-boot.prg"))
        assert code is ExitCode.CONVERSION_ERROR
        assert "--assets" in lines[-1]

    def test_invalid_argument(self):
        lines, code = describe_error(InvalidArgumentError("Tape length must be at least 2 minutes, got 1"))
        assert code is ExitCode.INVALID_ARGS

    def test_tape_error(self, tmp_path):
        error = OutputCollisionError(tmp_path / "a.tap", "a.prg", "a-[ex].prg")
        assert describe_error(error)[1] is ExitCode.CONVERSION_ERROR

    def test_missing_file(self):
        error = FileNotFoundError(2, "No such file or directory", "game.prg")
        assert describe_error(error) == (["game.prg: No such file or directory"], ExitCode.INVALID_ARGS)

    def test_unexpected_error(self):
        assert describe_error(RuntimeError("boom")) == ([], ExitCode.INTERNAL_ERROR)
