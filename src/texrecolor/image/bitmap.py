"""Bitmap validation and PNG input/output."""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..utils.logging import get_logger

logger = get_logger(__name__)

BitmapLike = Union[np.ndarray, Image.Image]


class InvalidBitmapError(ValueError):
    """Raised when a bitmap is not an 8-bit RGBA image."""


def as_rgba(bitmap: BitmapLike) -> np.ndarray:
    """Validate a bitmap and return it as a ``(H, W, 4)`` uint8 array.

    PIL images must already be in RGBA mode. Arrays are returned as-is (no copy)
    when they are already valid.

    Args:
        bitmap: numpy array or PIL image

    Returns:
        RGBA pixel array

    Raises:
        InvalidBitmapError: If the input is not 8-bit RGBA
    """
    if isinstance(bitmap, Image.Image):
        if bitmap.mode != "RGBA":
            raise InvalidBitmapError(f"Expected RGBA image, got mode {bitmap.mode}")
        return np.asarray(bitmap, dtype=np.uint8)

    if not isinstance(bitmap, np.ndarray):
        raise InvalidBitmapError(
            f"Expected numpy array or PIL image, got {type(bitmap).__name__}"
        )

    if bitmap.ndim != 3 or bitmap.shape[2] != 4:
        raise InvalidBitmapError(
            f"Expected array of shape (height, width, 4), got {bitmap.shape}"
        )

    if bitmap.dtype != np.uint8:
        raise InvalidBitmapError(f"Expected uint8 pixels, got {bitmap.dtype}")

    return bitmap


def load_texture(path: Union[str, Path]) -> np.ndarray:
    """Load an image file and convert it to an RGBA array.

    Args:
        path: Image file path

    Returns:
        RGBA pixel array
    """
    path = Path(path)
    with Image.open(path) as image:
        if image.mode != "RGBA":
            logger.debug(f"Converting {path.name} from {image.mode} to RGBA")
            image = image.convert("RGBA")
        pixels = np.array(image, dtype=np.uint8)

    logger.debug(f"Loaded {path.name}: {pixels.shape[1]}x{pixels.shape[0]}")
    return pixels


def save_texture(bitmap: BitmapLike, path: Union[str, Path]) -> Path:
    """Write an RGBA bitmap as PNG, creating parent directories.

    Returns:
        The written path
    """
    pixels = as_rgba(bitmap)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    Image.fromarray(np.ascontiguousarray(pixels)).save(path, format="PNG")
    logger.debug(f"Saved {path}")
    return path
