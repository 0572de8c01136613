"""Built-in category palettes and their resolution."""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..color.model import Color, clamp01
from ..utils.logging import get_logger
from .categories import DEFAULT_CATEGORY, Category, CategoryId, lookup_category

logger = get_logger(__name__)

SLOT_NAMES = ("primary", "secondary", "accent", "dark", "light", "neutral")

SLOT_WEIGHTS = {
    "primary": 1.0,
    "secondary": 0.9,
    "accent": 0.8,
    "dark": 0.7,
    "light": 0.7,
    "neutral": 0.6,
}


@dataclass(frozen=True)
class HsvTarget:
    """Single HSV target color used by the lightweight transform."""

    hue: float
    saturation: float
    value: float
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "hue", clamp01(float(self.hue)))
        object.__setattr__(self, "saturation", clamp01(float(self.saturation)))
        object.__setattr__(self, "value", clamp01(float(self.value)))

    def to_dict(self) -> Dict[str, float]:
        return {"hue": self.hue, "saturation": self.saturation, "value": self.value}


@dataclass(frozen=True)
class Palette:
    """Six named colors describing a category's look."""

    category: Category
    primary: Color
    secondary: Color
    accent: Color
    dark: Color
    light: Color
    neutral: Color
    name: str = ""
    hsv_target: Optional[HsvTarget] = field(default=None, compare=False)

    def slots(self) -> Iterator[Tuple[str, Color, float]]:
        """Yield ``(slot_name, color, base_weight)`` in fixed slot order."""
        for slot in SLOT_NAMES:
            yield slot, getattr(self, slot), SLOT_WEIGHTS[slot]

    def to_dict(self) -> Dict[str, str]:
        return {slot: getattr(self, slot).hex for slot in SLOT_NAMES}


def _palette(category: Category, name: str, *colors) -> Palette:
    return Palette(category, *(Color(*rgb) for rgb in colors), name=name)


class DefaultPalettes:
    """Factory for the built-in palettes and HSV targets."""

    @staticmethod
    def create_palettes() -> Dict[Category, Palette]:
        """Create the eighteen built-in six-slot palettes."""
        palettes = [
            _palette(Category.NORMAL, "Normal",
                     (210, 180, 140), (160, 140, 120), (240, 220, 200),
                     (90, 70, 50), (250, 240, 230), (180, 160, 140)),
            _palette(Category.FIRE, "Fire",
                     (220, 80, 40), (255, 140, 60), (255, 220, 60),
                     (140, 40, 20), (255, 200, 120), (200, 120, 80)),
            _palette(Category.WATER, "Water",
                     (60, 120, 200), (40, 100, 160), (120, 220, 255),
                     (20, 60, 120), (160, 200, 255), (100, 160, 200)),
            _palette(Category.GRASS, "Grass",
                     (80, 160, 80), (60, 120, 60), (160, 240, 120),
                     (40, 80, 40), (140, 220, 140), (100, 140, 100)),
            _palette(Category.ELECTRIC, "Electric",
                     (255, 220, 60), (255, 180, 40), (120, 200, 255),
                     (180, 140, 20), (255, 255, 200), (220, 200, 100)),
            _palette(Category.PSYCHIC, "Psychic",
                     (220, 80, 160), (180, 60, 140), (140, 120, 255),
                     (120, 40, 80), (255, 160, 220), (200, 120, 180)),
            _palette(Category.ICE, "Ice",
                     (140, 220, 255), (100, 180, 220), (255, 255, 255),
                     (60, 140, 180), (220, 240, 255), (180, 220, 240)),
            _palette(Category.DRAGON, "Dragon",
                     (100, 60, 160), (60, 80, 140), (255, 200, 60),
                     (40, 20, 80), (160, 120, 220), (120, 100, 160)),
            _palette(Category.DARK, "Dark",
                     (60, 60, 60), (40, 40, 50), (140, 100, 120),
                     (20, 20, 20), (120, 120, 120), (80, 80, 90)),
            _palette(Category.FIGHTING, "Fighting",
                     (180, 100, 60), (140, 80, 40), (220, 60, 40),
                     (80, 40, 20), (240, 180, 120), (160, 120, 80)),
            _palette(Category.POISON, "Poison",
                     (160, 80, 200), (120, 60, 140), (160, 255, 80),
                     (80, 40, 100), (220, 180, 255), (140, 120, 160)),
            _palette(Category.GROUND, "Ground",
                     (140, 100, 60), (200, 160, 100), (80, 200, 120),
                     (60, 40, 20), (220, 200, 160), (160, 140, 100)),
            _palette(Category.FLYING, "Flying",
                     (120, 180, 240), (200, 220, 240), (255, 255, 255),
                     (60, 100, 160), (230, 240, 255), (180, 200, 220)),
            _palette(Category.BUG, "Bug",
                     (100, 160, 60), (60, 120, 40), (200, 240, 80),
                     (40, 80, 20), (160, 220, 120), (120, 140, 100)),
            _palette(Category.ROCK, "Rock",
                     (140, 130, 120), (100, 90, 80), (200, 180, 140),
                     (60, 55, 50), (200, 190, 180), (120, 115, 110)),
            _palette(Category.GHOST, "Ghost",
                     (80, 60, 120), (60, 80, 140), (200, 180, 255),
                     (40, 30, 60), (160, 140, 200), (100, 90, 130)),
            _palette(Category.STEEL, "Steel",
                     (180, 180, 200), (140, 140, 160), (240, 240, 255),
                     (80, 80, 100), (220, 220, 240), (160, 160, 180)),
            _palette(Category.FAIRY, "Fairy",
                     (255, 160, 220), (220, 120, 180), (255, 255, 255),
                     (180, 80, 140), (255, 220, 240), (240, 180, 210)),
        ]
        return {palette.category: palette for palette in palettes}

    @staticmethod
    def create_hsv_targets() -> Dict[Category, HsvTarget]:
        """Create the eighteen built-in HSV targets."""
        return {
            Category.NORMAL: HsvTarget(0.0, 0.0, 0.95, "White"),
            Category.FIGHTING: HsvTarget(0.083, 0.8, 0.9, "Orange"),
            Category.FLYING: HsvTarget(0.55, 0.6, 0.85, "Sky Blue"),
            Category.POISON: HsvTarget(0.83, 0.7, 0.7, "Purple"),
            Category.GROUND: HsvTarget(0.083, 0.8, 0.4, "Brown"),
            Category.ROCK: HsvTarget(0.17, 0.6, 0.5, "Olive Green"),
            Category.BUG: HsvTarget(0.25, 0.8, 0.8, "Lime Green"),
            Category.GHOST: HsvTarget(0.75, 0.8, 0.5, "Indigo"),
            Category.STEEL: HsvTarget(0.0, 0.1, 0.7, "Silver Gray"),
            Category.FIRE: HsvTarget(0.0, 0.9, 0.9, "Red"),
            Category.WATER: HsvTarget(0.67, 0.8, 0.6, "Deep Blue"),
            Category.GRASS: HsvTarget(0.33, 0.8, 0.4, "Forest Green"),
            Category.ELECTRIC: HsvTarget(0.17, 0.9, 0.95, "Yellow"),
            Category.PSYCHIC: HsvTarget(0.92, 0.7, 0.8, "Magenta Pink"),
            Category.ICE: HsvTarget(0.5, 0.7, 0.9, "Cyan"),
            Category.DRAGON: HsvTarget(0.67, 0.9, 0.4, "Navy Blue"),
            Category.DARK: HsvTarget(0.0, 0.0, 0.15, "Black"),
            Category.FAIRY: HsvTarget(0.92, 0.4, 0.95, "Light Pink"),
        }


class PaletteCatalog:
    """Read-only palette lookup with optional per-category overrides.

    Resolution is two-tier: a validated override wins, otherwise the built-in
    default is used. Overrides are validated when loaded, never per lookup.
    """

    def __init__(
        self,
        palette_overrides: Optional[Mapping[Category, Palette]] = None,
        hsv_overrides: Optional[Mapping[Category, HsvTarget]] = None,
        default_category: Category = DEFAULT_CATEGORY,
    ):
        """Initialize catalog.

        Args:
            palette_overrides: Six-slot palettes replacing the defaults
            hsv_overrides: HSV targets replacing the defaults
            default_category: Category used for unknown ids
        """
        self.default_category = default_category
        self._defaults = DefaultPalettes.create_palettes()
        self._default_targets = DefaultPalettes.create_hsv_targets()
        self._overrides = dict(palette_overrides or {})
        self._hsv_overrides = dict(hsv_overrides or {})

        if self._overrides or self._hsv_overrides:
            logger.info(
                f"Palette catalog using {len(self._overrides)} palette overrides "
                f"and {len(self._hsv_overrides)} HSV overrides"
            )

    @classmethod
    def from_config(
        cls, config_path, default_category: Category = DEFAULT_CATEGORY
    ) -> "PaletteCatalog":
        """Build a catalog from a palette configuration file."""
        from .loader import PaletteConfigLoader

        overrides = PaletteConfigLoader().load(config_path)
        return cls(overrides.palettes, overrides.hsv_targets, default_category)

    def _resolve(self, category_id: CategoryId) -> Category:
        category = lookup_category(category_id)
        if category is None:
            logger.warning(
                f"Unknown category {category_id!r}, using "
                f"{self.default_category.display_name} palette"
            )
            return self.default_category
        return category

    def get_palette(self, category_id: CategoryId) -> Palette:
        """Get the palette for a category.

        Unknown ids fall back to the default category with a warning.
        """
        category = self._resolve(category_id)
        palette = self._overrides.get(category) or self._defaults[category]
        if palette.hsv_target is None:
            palette = replace(palette, hsv_target=self._target_for(category))
        return palette

    def get_hsv_target(self, category_id: CategoryId) -> HsvTarget:
        """Get the single HSV target for a category."""
        return self._target_for(self._resolve(category_id))

    def _target_for(self, category: Category) -> HsvTarget:
        return self._hsv_overrides.get(category) or self._default_targets[category]

    def is_overridden(self, category: Category) -> bool:
        return category in self._overrides or category in self._hsv_overrides


def get_palette(category_id: CategoryId) -> Palette:
    """Get a built-in palette by category id."""
    return PaletteCatalog().get_palette(category_id)
