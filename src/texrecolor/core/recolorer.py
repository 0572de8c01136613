"""Per-texture recoloring with algorithm selection."""

from enum import Enum
from typing import Optional

import numpy as np

from ..color.analyzer import ColorAnalyzer
from ..color.hsv_transform import ColorParameters, HsvTransformer
from ..color.replacer import ColorReplacer
from ..color.types import ReplacementParameters
from ..image.bitmap import BitmapLike, InvalidBitmapError, as_rgba
from ..palettes.catalog import PaletteCatalog
from ..palettes.categories import CategoryId, resolve_category
from ..utils.logging import get_logger

logger = get_logger(__name__)


class Algorithm(str, Enum):
    """Recoloring algorithm used in category mode."""

    REPLACEMENT = "replacement"
    HUE_SHIFT = "hue_shift"


class TextureRecolorer:
    """Recolor single textures using either palette replacement or HSV shifting.

    Palette replacement only applies to category-mode parameters; freeform
    parameters always go through the HSV transform. If replacement fails for a
    texture the HSV transform is used instead.
    """

    def __init__(
        self,
        catalog: Optional[PaletteCatalog] = None,
        replacement_params: Optional[ReplacementParameters] = None,
        algorithm: Algorithm = Algorithm.REPLACEMENT,
    ):
        """Initialize recolorer.

        Args:
            catalog: Palette catalog, built-in palettes when None
            replacement_params: Parameters for palette replacement
            algorithm: Algorithm used for category-mode parameters
        """
        self.catalog = catalog or PaletteCatalog()
        self.replacement_params = replacement_params or ReplacementParameters()
        self.algorithm = Algorithm(algorithm)
        self.analyzer = ColorAnalyzer()
        self.replacer = ColorReplacer()
        self.transformer = HsvTransformer()

    def parameters_for_category(self, category_id: CategoryId) -> ColorParameters:
        """Build category-mode parameters from the catalog's HSV target."""
        category = resolve_category(category_id)
        target = self.catalog.get_hsv_target(category)
        logger.debug(
            f"Category {category.display_name} targets {target.name or 'custom'} "
            f"(H={target.hue:.3f}, S={target.saturation:.3f}, V={target.value:.3f})"
        )
        return ColorParameters.for_category(target, category=int(category))

    def recolor(
        self,
        bitmap: BitmapLike,
        color_params: ColorParameters,
        texture_name: Optional[str] = "",
    ) -> np.ndarray:
        """Recolor one texture.

        Args:
            bitmap: RGBA texture
            color_params: Per-bundle color parameters
            texture_name: Texture name, used for eye-region detection

        Returns:
            New RGBA array

        Raises:
            InvalidBitmapError: If the bitmap is not 8-bit RGBA
        """
        pixels = as_rgba(bitmap)

        if (
            color_params.category_based
            and color_params.category is not None
            and self.algorithm == Algorithm.REPLACEMENT
        ):
            try:
                return self._replace(pixels, color_params.category, texture_name)
            except InvalidBitmapError:
                raise
            except Exception as e:
                logger.error(
                    f"Color replacement failed for '{texture_name}', "
                    f"falling back to HSV transform: {e}",
                    exc_info=True,
                )

        return self.transformer.transform(pixels, color_params, texture_name)

    def _replace(
        self, pixels: np.ndarray, category: int, texture_name: Optional[str]
    ) -> np.ndarray:
        analysis = self.analyzer.analyze(pixels, texture_name)
        palette = self.catalog.get_palette(category)
        return self.replacer.replace(pixels, analysis, palette, self.replacement_params)
