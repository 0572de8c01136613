"""Whole-image HSV transform, the lightweight alternative to palette replacement."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..image.bitmap import BitmapLike, as_rgba
from ..utils.logging import get_logger
from .analyzer import grey_shadow_mask, is_eye_texture, white_mask
from .model import hsv_to_rgb_array, rgb_to_hsv_array

logger = get_logger(__name__)

HUE_BLEND_FACTOR = 0.7
SATURATION_BLEND_FACTOR = 0.6
VALUE_BLEND_FACTOR = 0.5


@dataclass(frozen=True)
class ColorParameters:
    """Per-bundle parameters for the HSV transform.

    In category mode ``hue_shift`` and ``saturation_variation`` hold the target
    hue and saturation; in freeform mode they are a hue offset and a saturation
    multiplier.
    """

    hue_shift: float
    saturation_variation: float
    target_value: Optional[float] = None
    category_based: bool = False
    category: Optional[int] = None

    @classmethod
    def for_category(cls, target, category: Optional[int] = None) -> "ColorParameters":
        """Category-mode parameters from an HSV target.

        Args:
            target: Object with ``hue``, ``saturation`` and ``value`` attributes
            category: Category the target belongs to
        """
        return cls(
            hue_shift=target.hue,
            saturation_variation=target.saturation,
            target_value=target.value,
            category_based=True,
            category=category,
        )

    @classmethod
    def random(cls, rng: np.random.Generator) -> "ColorParameters":
        """Draw freeform parameters: hue offset in [-1, 1), saturation x[0.8, 1.2)."""
        hue_shift = (rng.random() - 0.5) * 2.0
        saturation_variation = 0.8 + rng.random() * 0.4
        logger.debug(
            f"Generated color parameters - Hue shift: {hue_shift:.3f}, "
            f"Saturation variation: {saturation_variation:.3f}"
        )
        return cls(hue_shift=float(hue_shift), saturation_variation=float(saturation_variation))


def blend_hue(hue: np.ndarray, target: float, factor: float) -> np.ndarray:
    """Move hues toward a target along the shorter way around the hue circle."""
    diff = target - hue
    diff = np.where(diff > 0.5, diff - 1.0, diff)
    diff = np.where(diff < -0.5, diff + 1.0, diff)

    result = hue + diff * factor
    result = np.where(result < 0, result + 1.0, result)
    return np.where(result >= 1.0, result - 1.0, result)


class HsvTransformer:
    """Apply category or freeform HSV adjustments to every eligible pixel."""

    def transform(
        self,
        bitmap: BitmapLike,
        color_params: ColorParameters,
        texture_name: Optional[str] = "",
    ) -> np.ndarray:
        """Transform a texture in HSV space.

        Transparent pixels are left untouched. For eye textures, near-white
        and grey-shadow pixels are preserved as well.

        Args:
            bitmap: RGBA texture
            color_params: Transform parameters
            texture_name: Texture name, used for eye-region detection

        Returns:
            New RGBA array
        """
        pixels = as_rgba(bitmap)
        result = pixels.copy()

        eligible = pixels[..., 3] != 0
        skipped = int(np.count_nonzero(~eligible))
        preserved = 0

        if is_eye_texture(texture_name):
            rgb = pixels[..., :3]
            keep = eligible & (white_mask(rgb) | grey_shadow_mask(rgb))
            preserved = int(np.count_nonzero(keep))
            eligible &= ~keep

        if eligible.any():
            hsv = rgb_to_hsv_array(pixels[eligible][:, :3])
            if color_params.category_based:
                hsv = self._apply_category(hsv, color_params)
            else:
                hsv = self._apply_freeform(hsv, color_params)
            result[eligible, :3] = hsv_to_rgb_array(hsv)

        logger.debug(
            f"Color processing complete - Pixels processed: {int(np.count_nonzero(eligible))}, "
            f"Pixels skipped: {skipped}, Pixels preserved: {preserved}"
        )
        return result

    def _apply_category(self, hsv: np.ndarray, params: ColorParameters) -> np.ndarray:
        h, s, v = hsv[:, 0], hsv[:, 1], hsv[:, 2]
        original_v = v

        h = blend_hue(h, params.hue_shift, HUE_BLEND_FACTOR)
        s = np.clip(
            s * (1 - SATURATION_BLEND_FACTOR)
            + params.saturation_variation * SATURATION_BLEND_FACTOR,
            0.0,
            1.0,
        )
        if params.target_value is not None:
            v = np.clip(
                original_v * (1 - VALUE_BLEND_FACTOR)
                + params.target_value * VALUE_BLEND_FACTOR,
                0.0,
                1.0,
            )

        return np.stack([h, s, v], axis=-1)

    def _apply_freeform(self, hsv: np.ndarray, params: ColorParameters) -> np.ndarray:
        h = np.mod(hsv[:, 0] + params.hue_shift, 1.0)
        s = np.clip(hsv[:, 1] * params.saturation_variation, 0.0, 1.0)
        return np.stack([h, s, hsv[:, 2]], axis=-1)


def hsv_transform(
    bitmap: BitmapLike,
    color_params: ColorParameters,
    texture_name: Optional[str] = "",
) -> np.ndarray:
    """Transform a texture with a fresh :class:`HsvTransformer`."""
    return HsvTransformer().transform(bitmap, color_params, texture_name)
