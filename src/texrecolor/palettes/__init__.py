"""Category palettes and palette configuration files."""

from .categories import Category, MonsterTable, resolve_category
from .catalog import DefaultPalettes, HsvTarget, Palette, PaletteCatalog
from .loader import PaletteConfigError, PaletteConfigLoader, write_default_palette_config

__all__ = [
    "Category",
    "MonsterTable",
    "resolve_category",
    "DefaultPalettes",
    "HsvTarget",
    "Palette",
    "PaletteCatalog",
    "PaletteConfigError",
    "PaletteConfigLoader",
    "write_default_palette_config",
]
