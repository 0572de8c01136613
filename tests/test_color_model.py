"""Tests for color-space conversions and the Color type."""

import itertools

import numpy as np
import pytest

from texrecolor.color.model import (
    Color,
    hsv_distance,
    hsv_to_rgb,
    hsv_to_rgb_array,
    lab_distance,
    parse_hex_color,
    rgb_distance,
    rgb_to_hsv,
    rgb_to_hsv_array,
    rgb_to_lab,
    rgb_to_lab_array,
)

CHANNEL_SAMPLES = list(range(0, 256, 15)) + [1, 127, 128, 254, 255]


class TestHsvConversion:
    """Test RGB <-> HSV conversion."""

    @pytest.mark.parametrize(
        "rgb, expected",
        [
            ((255, 0, 0), (0.0, 1.0, 1.0)),
            ((0, 255, 0), (1 / 3, 1.0, 1.0)),
            ((0, 0, 255), (2 / 3, 1.0, 1.0)),
            ((0, 0, 0), (0.0, 0.0, 0.0)),
            ((255, 255, 255), (0.0, 0.0, 1.0)),
        ],
    )
    def test_primary_colors(self, rgb, expected):
        """Test known HSV coordinates of primary colors."""
        assert rgb_to_hsv(*rgb) == pytest.approx(expected)

    def test_negative_hue_wraps(self):
        """Red-dominant colors with more blue than green wrap into [0, 1)."""
        h, _, _ = rgb_to_hsv(255, 0, 128)
        assert 0.9 < h < 1.0

    def test_round_trip_within_one(self):
        """hsv_to_rgb(rgb_to_hsv(c)) reconstructs every channel within 1."""
        for rgb in itertools.product(CHANNEL_SAMPLES, repeat=3):
            restored = hsv_to_rgb(*rgb_to_hsv(*rgb))
            assert max(abs(a - b) for a, b in zip(rgb, restored)) <= 1, rgb

    def test_greyscale_has_zero_saturation(self):
        """Grey colors have exactly zero saturation."""
        for level in range(256):
            _, s, _ = rgb_to_hsv(level, level, level)
            assert s == 0.0

    def test_rounds_half_to_even(self):
        """Half-way channel values round to the even byte."""
        assert hsv_to_rgb(0.0, 0.0, 0.5) == (128, 128, 128)

    def test_array_matches_scalar(self):
        """Vectorized conversions agree with the scalar versions."""
        rgb = np.array(list(itertools.product(CHANNEL_SAMPLES, repeat=3)), dtype=np.uint8)
        hsv = rgb_to_hsv_array(rgb)

        expected = np.array([rgb_to_hsv(*c) for c in rgb])
        np.testing.assert_allclose(hsv, expected, atol=1e-12)

        restored = hsv_to_rgb_array(hsv)
        expected_rgb = np.array([hsv_to_rgb(*c) for c in expected], dtype=np.uint8)
        np.testing.assert_array_equal(restored, expected_rgb)


class TestLabConversion:
    """Test RGB -> CIELAB conversion."""

    def test_white_and_black(self):
        """White is L=100 and black is L=0."""
        assert rgb_to_lab(255, 255, 255)[0] == pytest.approx(100.0, abs=1e-6)
        assert rgb_to_lab(0, 0, 0) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_greyscale_is_achromatic(self):
        """Grey colors have a and b close to zero."""
        for level in range(0, 256, 5):
            _, a, b = rgb_to_lab(level, level, level)
            assert abs(a) < 0.05
            assert abs(b) < 0.05

    def test_red_reference_value(self):
        """sRGB red lands on its well known LAB coordinates."""
        L, a, b = rgb_to_lab(255, 0, 0)
        assert L == pytest.approx(53.24, abs=0.05)
        assert a == pytest.approx(80.09, abs=0.2)
        assert b == pytest.approx(67.20, abs=0.2)

    def test_linear_branch_for_dark_colors(self):
        """Very dark colors use the linear branch and stay continuous."""
        L1 = rgb_to_lab(1, 1, 1)[0]
        L2 = rgb_to_lab(2, 2, 2)[0]
        assert 0 < L1 < L2 < 2

    def test_array_matches_scalar(self):
        """Vectorized LAB agrees with the scalar version."""
        rgb = np.array(list(itertools.product(CHANNEL_SAMPLES, repeat=3)), dtype=np.uint8)
        expected = np.array([rgb_to_lab(*c) for c in rgb])
        np.testing.assert_allclose(rgb_to_lab_array(rgb), expected, atol=1e-9)


class TestHexParsing:
    """Test hex color parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("#FF8000", (255, 128, 0)),
            ("ff8000", (255, 128, 0)),
            ("#f80", (255, 136, 0)),
            ("  #0a0B0c  ", (10, 11, 12)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_hex_color(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "#", "#12345", "#GGGGGG", "12", "#1234567", "##FFF", "+F+F+F", "# FFF", "0x1F2"],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_hex_color(text)

    def test_non_string(self):
        with pytest.raises(ValueError):
            parse_hex_color(123)


class TestColor:
    """Test the Color value type."""

    def test_derived_values(self):
        """HSV and LAB are derived from the RGB bytes."""
        color = Color(255, 0, 0)
        assert color.hsv == pytest.approx((0.0, 1.0, 1.0))
        assert color.lab == pytest.approx(rgb_to_lab(255, 0, 0))
        assert color.hex == "#FF0000"

    def test_equality_uses_rgb(self):
        assert Color(1, 2, 3) == Color(1, 2, 3)
        assert len({Color(1, 2, 3), Color(1, 2, 3), Color(3, 2, 1)}) == 2

    def test_accepts_numpy_bytes(self):
        color = Color(*np.array([10, 20, 30], dtype=np.uint8))
        assert color.rgb == (10, 20, 30)
        assert isinstance(color.r, int)

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)

    def test_from_hex_and_hsv(self):
        assert Color.from_hex("#00FF00") == Color(0, 255, 0)
        assert Color.from_hsv(2 / 3, 1.0, 1.0) == Color(0, 0, 255)


class TestDistances:
    """Test color distance metrics."""

    def test_rgb_distance(self):
        assert rgb_distance(Color(0, 0, 0), Color(3, 4, 0)) == pytest.approx(5.0)
        assert rgb_distance((0, 0, 0), (0, 0, 0)) == 0.0

    def test_hsv_distance_wraps_hue(self):
        """Hues near 0 and near 1 are close."""
        near_zero = Color.from_hsv(0.02, 1.0, 1.0)
        near_one = Color.from_hsv(0.98, 1.0, 1.0)
        assert hsv_distance(near_zero, near_one) < 0.1

    def test_lab_distance_symmetric(self):
        a, b = Color(200, 30, 30), Color(30, 200, 30)
        assert lab_distance(a, b) == pytest.approx(lab_distance(b, a))
        assert lab_distance(a, a) == 0.0
