"""Tests for main_app module."""

import pytest

import constants
from enums import NoiseType
from main_app import build_parser, main, settings_from_args
from model.rtin import TerrainSizeError


@pytest.fixture(autouse=True)
def _reset(reset_logging):
    yield


class TestArguments:
    """Tests for the argument parsing."""

    def test_defaults(self):
        settings = settings_from_args(build_parser().parse_args([]))
        assert settings.terrain_size == constants.TERRAIN_SIZE_DEFAULT
        assert settings.grid_size == constants.WFC_GRID_SIZE_DEFAULT
        assert settings.tries_allowed is None
        assert settings.noise_type is NoiseType.OPENSIMPLEX

    def test_legacy_relaxation(self):
        settings = settings_from_args(build_parser().parse_args(["--legacy-relaxation"]))
        assert settings.tries_allowed == constants.WFC_TRIES_ALLOWED_LEGACY

    def test_options(self):
        args = build_parser().parse_args(
            ["--terrain-size", "16", "--noise-type", "perlin", "--tries-allowed", "2", "--seed", "4"]
        )
        settings = settings_from_args(args)
        assert settings.terrain_size == 16
        assert settings.noise_type is NoiseType.PERLIN
        assert settings.tries_allowed == 2
        assert settings.seed == 4

    def test_unknown_noise_type(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--noise-type", "value"])


class TestMain:
    """Tests for main."""

    def test_summary(self, capsys):
        assert main(["--terrain-size", "8", "--grid-size", "3", "--seed", "1"]) == 0
        out = capsys.readouterr().out
        assert "Seed: 1" in out
        assert "Tiles: 9 cells" in out

    def test_writes_previews(self, tmp_path):
        output = tmp_path / "out"
        assert main(["--terrain-size", "8", "--grid-size", "3", "--seed", "2", "--output", str(output)]) == 0
        for name in ("tiles.png", "heightmap.png", "terrain.png"):
            assert (output / name).exists()

    def test_log_file(self, tmp_path, capsys):
        log_file = tmp_path / "worldgen.log"
        main(["--terrain-size", "4", "--grid-size", "2", "--seed", "3", "--log-file", str(log_file)])
        assert f"Logging to: {log_file}" in capsys.readouterr().out
        assert log_file.exists()

    def test_invalid_size_is_raised(self):
        with pytest.raises(TerrainSizeError):
            main(["--terrain-size", "6"])
