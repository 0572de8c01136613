#!/usr/bin/env python3
"""Basic functionality tests for texrecolor."""

import numpy as np
import pytest

import texrecolor
from texrecolor import (
    Category,
    ColorAnalyzer,
    ColorParameters,
    PaletteCatalog,
    ReplacementParameters,
    TextureRecolorer,
    analyze,
    get_palette,
    hsv_transform,
    replace,
)


class TestBasicFunctionality:
    """Test basic functionality of texrecolor components."""

    @pytest.fixture
    def sample_texture(self):
        """Create a sample texture for testing."""
        # Three vertical stripes plus a transparent corner
        texture = np.zeros((64, 64, 4), dtype=np.uint8)
        texture[..., 3] = 255

        # Red stripe
        texture[:, :21, :3] = (220, 30, 30)

        # Green stripe
        texture[:, 21:42, :3] = (30, 180, 30)

        # Blue stripe
        texture[:, 42:, :3] = (30, 30, 200)

        texture[:4, :4, 3] = 0
        return texture

    def test_package_exports(self):
        """Test the public API is importable."""
        for name in texrecolor.__all__:
            assert hasattr(texrecolor, name)
        assert texrecolor.__version__

    def test_analyzer(self, sample_texture):
        """Test color analysis of the stripes."""
        result = ColorAnalyzer().analyze(sample_texture, "body_col")

        assert len(result.dominant_colors) == 3
        assert len(result.color_clusters) == 3
        assert sum(d.frequency for d in result.dominant_colors) == pytest.approx(1.0)
        assert result.statistics.opaque_pixel_count == 64 * 64 - 16

    def test_palette_catalog(self):
        """Test palette lookup."""
        catalog = PaletteCatalog()
        for category in Category:
            palette = catalog.get_palette(category)
            assert palette.category == category
            assert palette.hsv_target is not None

    def test_replacement_pipeline(self, sample_texture):
        """Test analysis followed by palette replacement."""
        analysis = analyze(sample_texture, "body_col")
        result = replace(
            sample_texture, analysis, get_palette("psychic"), ReplacementParameters()
        )

        assert result.shape == sample_texture.shape
        assert result.dtype == np.uint8
        np.testing.assert_array_equal(result[..., 3], sample_texture[..., 3])
        np.testing.assert_array_equal(result[:4, :4], sample_texture[:4, :4])
        assert not np.array_equal(result, sample_texture)

    def test_hsv_pipeline(self, sample_texture):
        """Test the lightweight HSV transform."""
        params = ColorParameters(hue_shift=0.5, saturation_variation=1.0)
        result = hsv_transform(sample_texture, params, "body_col")

        np.testing.assert_array_equal(result[..., 3], sample_texture[..., 3])
        assert not np.array_equal(result[..., :3], sample_texture[..., :3])

    def test_recolorer_deterministic(self, sample_texture):
        """Test that recoloring is a pure function of its inputs."""
        recolorer = TextureRecolorer()
        params = recolorer.parameters_for_category(Category.DRAGON)

        first = recolorer.recolor(sample_texture, params, "body_col")
        second = recolorer.recolor(sample_texture, params, "body_col")
        np.testing.assert_array_equal(first, second)


if __name__ == "__main__":
    pytest.main([__file__])
