"""Tests for bitmap validation and PNG input/output."""

import numpy as np
import pytest
from PIL import Image

from texrecolor.image.bitmap import InvalidBitmapError, as_rgba, load_texture, save_texture


class TestAsRgba:
    def test_accepts_rgba_array_without_copy(self):
        bitmap = np.zeros((2, 3, 4), dtype=np.uint8)
        assert as_rgba(bitmap) is bitmap

    def test_accepts_rgba_image(self):
        pixels = as_rgba(Image.new("RGBA", (3, 2), (1, 2, 3, 4)))
        assert pixels.shape == (2, 3, 4)
        assert tuple(pixels[0, 0]) == (1, 2, 3, 4)

    @pytest.mark.parametrize(
        "bitmap",
        [
            np.zeros((2, 2, 3), dtype=np.uint8),
            np.zeros((2, 2), dtype=np.uint8),
            np.zeros((2, 2, 4), dtype=np.float32),
            Image.new("RGB", (2, 2)),
            [[0, 0, 0, 0]],
        ],
    )
    def test_rejects_other_inputs(self, bitmap):
        with pytest.raises(InvalidBitmapError):
            as_rgba(bitmap)

    def test_error_is_value_error(self):
        assert issubclass(InvalidBitmapError, ValueError)


class TestTextureFiles:
    def test_save_and_load(self, tmp_path):
        bitmap = np.zeros((4, 5, 4), dtype=np.uint8)
        bitmap[..., 0] = 200
        bitmap[..., 3] = 128
        bitmap[0, 0] = (0, 0, 0, 0)

        path = save_texture(bitmap, tmp_path / "nested" / "tex_col.png")
        assert path.exists()
        np.testing.assert_array_equal(load_texture(path), bitmap)

    def test_load_converts_rgb(self, tmp_path):
        path = tmp_path / "rgb.png"
        Image.new("RGB", (2, 2), (10, 20, 30)).save(path)

        pixels = load_texture(path)
        assert pixels.shape == (2, 2, 4)
        assert tuple(pixels[1, 1]) == (10, 20, 30, 255)
