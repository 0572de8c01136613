"""Tests for the command-line interface."""

import json
import logging

import numpy as np
import pytest
import yaml
from click.testing import CliRunner

from texrecolor import __version__
from texrecolor.cli import cli
from texrecolor.image.bitmap import load_texture, save_texture


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the handlers installed by the CLI group."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def texture_file(tmp_path):
    bitmap = np.zeros((8, 8, 4), dtype=np.uint8)
    bitmap[..., :3] = (200, 40, 40)
    bitmap[:4, :, :3] = (40, 40, 200)
    bitmap[..., 3] = 255
    return save_texture(bitmap, tmp_path / "body_col.png")


@pytest.fixture
def bundle_dir(tmp_path, texture_file):
    root = tmp_path / "bundles"
    for name in ("pm0001_00_00", "pm0004_00_00"):
        save_texture(load_texture(texture_file), root / name / f"{name}_body_col.png")
    return root


class TestCli:
    """Test CLI commands."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert f"texrecolor Version: {__version__}" in result.output

    def test_texture_with_category(self, runner, texture_file, tmp_path):
        output = tmp_path / "out.png"
        result = runner.invoke(
            cli, ["texture", str(texture_file), "-o", str(output), "--category", "water"]
        )
        assert result.exit_code == 0, result.output
        assert "Recolored texture saved to" in result.output
        assert load_texture(output).shape == (8, 8, 4)

    def test_texture_random_seeded(self, runner, texture_file, tmp_path):
        outputs = []
        for name in ("a.png", "b.png"):
            output = tmp_path / name
            result = runner.invoke(
                cli, ["texture", str(texture_file), "-o", str(output), "--seed", "3"]
            )
            assert result.exit_code == 0, result.output
            outputs.append(load_texture(output))
        np.testing.assert_array_equal(outputs[0], outputs[1])

    def test_analyze_writes_json(self, runner, texture_file, tmp_path):
        output = tmp_path / "analysis.json"
        result = runner.invoke(cli, ["analyze", str(texture_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Clusters: 2" in result.output
        assert "Unique colors: 2" in result.output
        data = json.loads(output.read_text())
        assert data["texture_name"] == "body_col"
        assert len(data["dominant_colors"]) == 2

    def test_recolor_directory(self, runner, bundle_dir, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(
            cli,
            ["recolor", str(bundle_dir), "-o", str(output), "--category", "fire", "--workers", "2"],
        )
        assert result.exit_code == 0, result.output
        assert f"Output written to {output}" in result.output
        assert (output / "pm0001_00_00" / "pm0001_00_00_body_col.png").exists()
        assert (output / "pm0004_00_00" / "pm0004_00_00_body_col.png").exists()

    def test_recolor_category_conflicts_with_random_mode(self, runner, bundle_dir, tmp_path):
        result = runner.invoke(
            cli,
            [
                "recolor", str(bundle_dir), "-o", str(tmp_path / "out"),
                "--mode", "random", "--category", "fire",
            ],
        )
        assert result.exit_code == 2
        assert "--category cannot be combined with --mode random" in result.output
        assert not (tmp_path / "out").exists()

    def test_recolor_category_overrides_configured_random_mode(
        self, runner, bundle_dir, tmp_path
    ):
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"processing": {"mode": "random", "seed": 5}}))
        forced = tmp_path / "forced"
        plain = tmp_path / "plain"

        result = runner.invoke(
            cli,
            ["--config", str(config), "recolor", str(bundle_dir), "-o", str(forced),
             "--category", "fire"],
        )
        assert result.exit_code == 0, result.output
        result = runner.invoke(
            cli, ["recolor", str(bundle_dir), "-o", str(plain), "--category", "fire"]
        )
        assert result.exit_code == 0, result.output

        relative = "pm0001_00_00/pm0001_00_00_body_col.png"
        np.testing.assert_array_equal(
            load_texture(forced / relative), load_texture(plain / relative)
        )

    def test_recolor_with_personal_table(self, runner, bundle_dir, tmp_path):
        table = tmp_path / "personal.json"
        table.write_text(json.dumps({"Personal": [{"monsno": 1, "type1": 11}]}))
        output = tmp_path / "out"

        result = runner.invoke(
            cli,
            [
                "recolor", str(bundle_dir), "-o", str(output),
                "--personal-table", str(table), "--max-bundles", "1",
            ],
        )
        assert result.exit_code == 0, result.output
        assert [p.name for p in output.iterdir()] == ["pm0001_00_00"]

    def test_recolor_invalid_config(self, runner, bundle_dir, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"replacement": {"replacement_strength": 3}}))

        result = runner.invoke(
            cli, ["--config", str(config), "recolor", str(bundle_dir), "-o", str(tmp_path / "out")]
        )
        assert result.exit_code != 0
        assert "replacement.replacement_strength" in result.output

    def test_palettes_listing(self, runner):
        result = runner.invoke(cli, ["palettes", "--category", "water"])
        assert result.exit_code == 0, result.output
        assert "Category Palettes" in result.output

    def test_init_config_palettes(self, runner, tmp_path):
        output = tmp_path / "palettes.yaml"
        result = runner.invoke(cli, ["init-config", "-o", str(output), "--palettes"])
        assert result.exit_code == 0, result.output
        assert "Palette configuration created at:" in result.output
        assert len(yaml.safe_load(output.read_text())["categories"]) == 18

        result = runner.invoke(cli, ["init-config", "-o", str(output), "--palettes"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_config_standard(self, runner, tmp_path):
        output = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["init-config", "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "Standard configuration created at:" in result.output
        assert yaml.safe_load(output.read_text())["processing"]["mode"] == "category"

    def test_palette_config_option(self, runner, texture_file, tmp_path):
        palettes = tmp_path / "palettes.yaml"
        palettes.write_text("categories: [broken\n")

        result = runner.invoke(
            cli,
            [
                "texture", str(texture_file), "-o", str(tmp_path / "out.png"),
                "--category", "fire", "--palette-config", str(palettes),
            ],
        )
        assert result.exit_code == 1
        assert "Failed to load palette configuration" in result.output
