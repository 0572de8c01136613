"""Loading and exporting palette configuration files."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..color.model import Color, clamp01
from ..utils.logging import get_logger
from .catalog import SLOT_NAMES, DefaultPalettes, HsvTarget, Palette
from .categories import Category

logger = get_logger(__name__)

CONFIG_VERSION = "1.0"

CATEGORY_DESCRIPTIONS = {
    Category.NORMAL: "Natural, earthy tones",
    Category.FIRE: "Reds, oranges, and flames",
    Category.WATER: "Ocean blues and aqua",
    Category.GRASS: "Rich greens and nature",
    Category.ELECTRIC: "Bright yellows and energy",
    Category.PSYCHIC: "Mystical purples and pinks",
    Category.ICE: "Icy blues and crystalline whites",
    Category.DRAGON: "Mystical purples with royal colors",
    Category.DARK: "Deep blacks and shadow colors",
    Category.FIGHTING: "Earthy oranges and browns",
    Category.POISON: "Toxic purples and sickly greens",
    Category.GROUND: "Earth tones with clay and sand",
    Category.FLYING: "Sky blues with cloud whites",
    Category.BUG: "Forest greens with nature accents",
    Category.ROCK: "Stone greys with mineral colors",
    Category.GHOST: "Dark purples with ethereal blues",
    Category.STEEL: "Metallic silvers with chrome",
    Category.FAIRY: "Soft pinks with magical colors",
}


class PaletteConfigError(ValueError):
    """Raised when a palette configuration file cannot be read at all."""


class HsvEntry(BaseModel):
    """HSV triple as written in a palette file, clamped to [0, 1]."""

    hue: float = 0.0
    saturation: float = 0.0
    value: float = 0.0

    @field_validator("hue", "saturation", "value")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)


class PaletteFileEntry(BaseModel):
    """One category entry of a palette file."""

    model_config = ConfigDict(extra="ignore")

    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    dark: Optional[str] = None
    light: Optional[str] = None
    neutral: Optional[str] = None
    hue_shift_hsv: Optional[HsvEntry] = None

    def has_palette(self) -> bool:
        return any(getattr(self, slot) is not None for slot in SLOT_NAMES)


@dataclass
class PaletteOverrides:
    """Validated overrides read from a palette file."""

    palettes: Dict[Category, Palette] = field(default_factory=dict)
    hsv_targets: Dict[Category, HsvTarget] = field(default_factory=dict)
    success_count: int = 0
    error_count: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.palettes and not self.hsv_targets


class PaletteConfigLoader:
    """Read palette override files (YAML or JSON).

    Every entry is validated when the file is loaded. An entry with any invalid
    value is rejected as a whole so its category keeps the built-in defaults.
    """

    def load(self, config_path: Union[str, Path]) -> PaletteOverrides:
        """Load overrides from a file.

        A missing file is not an error; empty overrides are returned.

        Raises:
            PaletteConfigError: If the file exists but cannot be parsed
        """
        config_path = Path(config_path)
        if not config_path.exists():
            logger.info(
                f"Palette configuration not found at {config_path}, using built-in palettes"
            )
            return PaletteOverrides()

        logger.info(f"Loading color palettes from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise PaletteConfigError(
                f"Failed to load palette configuration from {config_path}: {e}"
            ) from e

        if data is None:
            logger.warning(f"Palette configuration is empty: {config_path}")
            return PaletteOverrides()

        return self.parse(data)

    def parse(self, data: Dict[str, Any]) -> PaletteOverrides:
        """Validate an already-decoded palette configuration mapping."""
        if not isinstance(data, dict):
            raise PaletteConfigError("Palette configuration must be a mapping")

        entries = data.get("categories", data.get("pokemon_types"))
        overrides = PaletteOverrides()
        if not entries:
            logger.warning("No palette entries found in configuration")
            return overrides
        if not isinstance(entries, dict):
            raise PaletteConfigError("Palette entries must be a mapping of category names")

        for name, raw_entry in entries.items():
            error = self._parse_entry(str(name), raw_entry, overrides)
            if error:
                logger.warning(error)
                overrides.errors.append(error)
                overrides.error_count += 1
            else:
                overrides.success_count += 1

        logger.info(
            f"Palette configuration results: {overrides.success_count} successful, "
            f"{overrides.error_count} errors"
        )

        if overrides.success_count == 0:
            logger.warning("No valid palette entries in configuration, using built-in palettes")
        elif overrides.error_count > overrides.success_count:
            logger.warning(
                f"More errors ({overrides.error_count}) than successes "
                f"({overrides.success_count}) in palette configuration, "
                "configuration may be incomplete"
            )

        return overrides

    def _parse_entry(
        self, name: str, raw_entry: Any, overrides: PaletteOverrides
    ) -> Optional[str]:
        category = Category.__members__.get(name.strip().upper())
        if category is None:
            return f"Unknown category '{name}' in palette configuration, skipping"

        try:
            entry = PaletteFileEntry.model_validate(raw_entry or {})
        except ValidationError as e:
            return f"Invalid palette entry for {category.display_name}: {e.error_count()} errors"

        palette = None
        if entry.has_palette():
            try:
                colors = [Color.from_hex(getattr(entry, slot) or "") for slot in SLOT_NAMES]
            except ValueError as e:
                return f"Invalid colors for {category.display_name}, keeping defaults: {e}"
            palette = Palette(category, *colors, name=category.display_name)

        if palette is None and entry.hue_shift_hsv is None:
            return f"Palette entry for {category.display_name} defines no colors"

        if palette is not None:
            overrides.palettes[category] = palette
            logger.debug(f"Loaded palette for {category.display_name} (primary {palette.primary.hex})")
        if entry.hue_shift_hsv is not None:
            hsv = entry.hue_shift_hsv
            overrides.hsv_targets[category] = HsvTarget(
                hsv.hue, hsv.saturation, hsv.value, name=category.display_name
            )
        return None


def _format_float(value: float) -> str:
    text = f"{value:.3f}".rstrip("0")
    return text + "0" if text.endswith(".") else text


def render_default_palette_config() -> str:
    """Render the built-in palettes as a commented YAML document."""
    palettes = DefaultPalettes.create_palettes()
    targets = DefaultPalettes.create_hsv_targets()

    lines = [
        "# Category Color Palette Configuration",
        "# Edit these colors to customize the appearance of recolored textures",
        "#",
        "# Each category has 6 colors for the color replacement algorithm.",
        "# Each slot is assigned based on how often the color it replaces appears in the texture.",
        "# hue_shift_hsv is the single target color used by the hue shift algorithm.",
        "#",
        "config_info:",
        f'  version: "{CONFIG_VERSION}"',
        '  description: "Category color palette configuration for texrecolor"',
        f'  last_modified: "{datetime.now().strftime("%Y-%m-%d %H:%M:%S")}"',
        "categories:",
    ]

    for category in sorted(Category, key=lambda c: c.name):
        palette = palettes[category]
        target = targets[category]
        lines.append(f"  # {CATEGORY_DESCRIPTIONS[category]}")
        lines.append(f"  {category.name.lower()}:")
        for slot in SLOT_NAMES:
            lines.append(f'    {slot}: "{getattr(palette, slot).hex}"')
        lines.append("    hue_shift_hsv:")
        lines.append(f"      hue: {_format_float(target.hue)}")
        lines.append(f"      saturation: {_format_float(target.saturation)}")
        lines.append(f"      value: {_format_float(target.value)}")

    return "\n".join(lines) + "\n"


def write_default_palette_config(output_path: Union[str, Path], overwrite: bool = False) -> Path:
    """Write the built-in palettes to a YAML file users can edit.

    Args:
        output_path: Destination file
        overwrite: Replace an existing file

    Returns:
        The output path

    Raises:
        FileExistsError: If the file exists and ``overwrite`` is False
    """
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Palette configuration already exists at {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_default_palette_config(), encoding="utf-8")
    logger.info(f"Created default palette configuration: {output_path}")
    return output_path
