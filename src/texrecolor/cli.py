"""Command-line interface for texrecolor."""

import json
import logging
import sys
from pathlib import Path

import click
import numpy as np
import rich.traceback
from rich.console import Console
from rich.table import Table

from .color.analyzer import ColorAnalyzer
from .color.hsv_transform import ColorParameters
from .core.batch import BatchRecolorer
from .core.recolorer import Algorithm, TextureRecolorer
from .image.bitmap import load_texture, save_texture
from .palettes.catalog import SLOT_NAMES, PaletteCatalog
from .palettes.categories import (
    Category,
    MonsterTable,
    lookup_category,
    resolve_category,
)
from .palettes.loader import write_default_palette_config
from .utils.config import ConfigManager
from .utils.logging import setup_logging

# Rich console setup
console = Console()
rich.traceback.install(console=console)

try:
    from . import __version__
except ImportError:
    __version__ = "unknown"

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [c.name.lower() for c in Category]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
@click.option(
    "--config", type=click.Path(exists=True), help="Path to configuration file"
)
@click.option("--log-file", type=click.Path(), help="Also write a debug log to this file")
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, config, log_file):
    """texrecolor: recolor textures with category palettes."""
    ctx.ensure_object(dict)

    log_level = logging.INFO
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    setup_logging(level=log_level, log_file=log_file)

    ctx.obj["config_manager"] = ConfigManager.from_env(config)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def _build_catalog(config_manager: ConfigManager, palette_config) -> PaletteCatalog:
    palette_config = palette_config or config_manager.get("palettes.config_path")
    default_category = resolve_category(config_manager.get("palettes.default_category"))
    if palette_config:
        return PaletteCatalog.from_config(palette_config, default_category)
    return PaletteCatalog(default_category=default_category)


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--output", "-o", type=click.Path(), help="Output directory (default from config)"
)
@click.option(
    "--mode",
    type=click.Choice(["category", "random"]),
    help="Category palettes or random hue shifts",
)
@click.option(
    "--algorithm",
    type=click.Choice([a.value for a in Algorithm]),
    help="Algorithm used in category mode",
)
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES, case_sensitive=False),
    help="Apply one category to every bundle (implies --mode category)",
)
@click.option(
    "--personal-table",
    type=click.Path(exists=True, dir_okay=False),
    help="Personal table JSON mapping creature numbers to categories",
)
@click.option(
    "--palette-config",
    type=click.Path(exists=True, dir_okay=False),
    help="Palette override file (YAML or JSON)",
)
@click.option("--seed", type=int, help="Random seed for random mode")
@click.option("--max-bundles", type=int, help="Process at most this many bundles")
@click.option("--workers", type=int, help="Number of worker threads")
@click.option(
    "--profile",
    type=click.Choice(["gentle", "balanced", "vivid"]),
    help="Replacement strength profile",
)
@click.pass_context
def recolor(
    ctx,
    input_dir,
    output,
    mode,
    algorithm,
    category,
    personal_table,
    palette_config,
    seed,
    max_bundles,
    workers,
    profile,
):
    """Recolor every bundle directory found in INPUT_DIR."""
    try:
        config_manager: ConfigManager = ctx.obj["config_manager"]

        if profile:
            config_manager.apply_profile(profile)
        if category:
            if mode == "random":
                raise click.UsageError("--category cannot be combined with --mode random")
            if config_manager.get("processing.mode") == "random":
                logger.info(f"--category {category} given, switching to category mode")
            mode = "category"
        overrides = {
            "processing.mode": mode,
            "processing.algorithm": algorithm,
            "processing.seed": seed,
            "processing.max_bundles": max_bundles,
            "processing.workers": workers,
            "palettes.personal_table": personal_table,
            "output.directory": output,
        }
        for key, value in overrides.items():
            if value is not None:
                config_manager.set(key, value)

        is_valid, errors = config_manager.validate_config()
        if not is_valid:
            raise click.UsageError("Invalid configuration: " + "; ".join(errors))

        processing = config_manager.get_processing_config()
        recolorer = TextureRecolorer(
            catalog=_build_catalog(config_manager, palette_config),
            replacement_params=config_manager.get_replacement_parameters(),
            algorithm=processing.algorithm,
        )

        table_path = config_manager.get("palettes.personal_table")
        monster_table = MonsterTable.from_json(table_path) if table_path else None

        batch = BatchRecolorer(
            recolorer=recolorer,
            processing=processing,
            monster_table=monster_table,
            category=category,
        )
        output_dir = Path(config_manager.get("output.directory", "./output"))
        stats = batch.process_directory(input_dir, output_dir)

        table = Table(title="Recolor Summary")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Bundles processed", str(stats.bundles_processed))
        table.add_row("Bundles modified", str(stats.bundles_modified))
        table.add_row("Bundles skipped", str(stats.bundles_skipped))
        table.add_row("Bundles failed", str(stats.bundles_failed))
        table.add_row("Textures modified", str(stats.textures_modified))
        table.add_row("Errors", str(stats.errors))
        table.add_row("Success rate", f"{stats.success_rate:.1f}%")
        table.add_row("Time", f"{stats.elapsed_seconds:.2f}s")
        if not ctx.obj.get("quiet"):
            console.print(table)

        click.echo(f"Output written to {output_dir}")

    except click.UsageError:
        raise
    except Exception as e:
        logger.error(f"Error during batch recolor: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_image", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(), required=True, help="Output PNG path")
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES, case_sensitive=False),
    help="Target category (omit for a random hue shift)",
)
@click.option(
    "--algorithm",
    type=click.Choice([a.value for a in Algorithm]),
    default=Algorithm.REPLACEMENT.value,
    help="Algorithm used with --category",
)
@click.option(
    "--palette-config",
    type=click.Path(exists=True, dir_okay=False),
    help="Palette override file (YAML or JSON)",
)
@click.option("--seed", type=int, help="Random seed when no category is given")
@click.pass_context
def texture(ctx, input_image, output, category, algorithm, palette_config, seed):
    """Recolor a single texture image."""
    try:
        config_manager: ConfigManager = ctx.obj["config_manager"]
        recolorer = TextureRecolorer(
            catalog=_build_catalog(config_manager, palette_config),
            replacement_params=config_manager.get_replacement_parameters(),
            algorithm=algorithm,
        )

        if category:
            color_params = recolorer.parameters_for_category(category)
        else:
            color_params = ColorParameters.random(np.random.default_rng(seed))

        pixels = load_texture(input_image)
        recolored = recolorer.recolor(pixels, color_params, Path(input_image).stem)
        save_texture(recolored, output)

        click.echo(f"Recolored texture saved to {output}")
        logger.info(f"Recolored {input_image} -> {output}")

    except Exception as e:
        logger.error(f"Error recoloring texture: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_image", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", help="Texture name used for eye detection (default: file stem)")
@click.option("--output", "-o", type=click.Path(), help="Write the analysis as JSON")
def analyze(input_image, name, output):
    """Analyze the dominant colors of a texture image."""
    try:
        texture_name = name if name is not None else Path(input_image).stem
        result = ColorAnalyzer().analyze(load_texture(input_image), texture_name)

        table = Table(title=f"Dominant colors: {texture_name}")
        table.add_column("Color")
        table.add_column("Frequency", justify="right")
        table.add_column("Role")
        table.add_column("Value", justify="right")
        for dominant in result.dominant_colors:
            table.add_row(
                f"[on {dominant.color.hex}]  [/] {dominant.color.hex}",
                f"{dominant.frequency:.1%}",
                dominant.role.value,
                f"{dominant.average_luminance:.2f}",
            )
        console.print(table)

        stats = result.statistics
        click.echo(f"Clusters: {len(result.color_clusters)}")
        click.echo(f"Unique colors: {stats.unique_color_count}")
        click.echo(f"Complexity: {stats.color_complexity:.3f}")
        click.echo(f"Average luminance: {stats.average_luminance:.3f}")
        click.echo(f"Saturation level: {stats.saturation_level:.3f}")
        click.echo(f"High contrast: {'yes' if stats.has_high_contrast else 'no'}")
        click.echo(f"Gradients: {'yes' if stats.has_gradients else 'no'}")
        for area in result.preservation_areas:
            click.echo(f"Preserved: {area.reason} ({area.pixel_count} pixels)")

        if output:
            with open(output, "w") as f:
                json.dump(result.to_dict(), f, indent=2)
            click.echo(f"\nAnalysis saved to {output}")

    except Exception as e:
        logger.error(f"Error during color analysis: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--palette-config",
    type=click.Path(exists=True, dir_okay=False),
    help="Palette override file (YAML or JSON)",
)
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES, case_sensitive=False),
    help="Show a single category",
)
@click.pass_context
def palettes(ctx, palette_config, category):
    """List the category palettes."""
    try:
        catalog = _build_catalog(ctx.obj["config_manager"], palette_config)
        categories = [lookup_category(category)] if category else list(Category)

        table = Table(title="Category Palettes")
        table.add_column("Category")
        for slot in SLOT_NAMES:
            table.add_column(slot.capitalize())
        table.add_column("HSV target")

        for cat in categories:
            palette = catalog.get_palette(cat)
            target = palette.hsv_target
            name = cat.display_name + (" *" if catalog.is_overridden(cat) else "")
            table.add_row(
                name,
                *(f"[on {getattr(palette, s).hex}]  [/] {getattr(palette, s).hex}" for s in SLOT_NAMES),
                f"{target.hue:.3f}/{target.saturation:.2f}/{target.value:.2f}",
            )
        console.print(table)

    except Exception as e:
        logger.error(f"Error listing palettes: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="./texrecolor_config.yaml",
    help="Output configuration file path",
)
@click.option(
    "--palettes",
    "palette_file",
    is_flag=True,
    help="Write the built-in palettes instead of processing settings",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output, palette_file, force):
    """Initialize a default configuration file."""
    try:
        if Path(output).exists() and not force:
            raise FileExistsError(f"{output} already exists (use --force to overwrite)")

        if palette_file:
            write_default_palette_config(output, overwrite=True)
            click.echo(f"Palette configuration created at: {output}")
            click.echo("Edit the hex colors to customize each category")
        else:
            ConfigManager().save_config(output)
            click.echo(f"Standard configuration created at: {output}")

        logger.info(f"Initialized config file at {output} (palettes={palette_file})")

    except Exception as e:
        logger.error(f"Error initializing config: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
def version():
    """Display texrecolor version."""
    click.echo(f"texrecolor Version: {__version__}")


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
