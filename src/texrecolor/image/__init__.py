"""Bitmap validation and image file input/output."""

from .bitmap import InvalidBitmapError, as_rgba, load_texture, save_texture

__all__ = ["InvalidBitmapError", "as_rgba", "load_texture", "save_texture"]
