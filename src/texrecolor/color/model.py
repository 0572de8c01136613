"""Color model and color-space conversions for texrecolor.

Scalar helpers work on single byte triples. The ``*_array`` variants apply the
same formulas to numpy arrays of shape ``(..., 3)`` so whole textures can be
converted at once; both paths produce identical results.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Tuple, Union

import numpy as np

# sRGB (D65) to XYZ
RGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)

# D65 reference white, 2 degree observer
WHITE_POINT = (0.95047, 1.0, 1.08883)

LAB_EPSILON = 0.008856
LAB_KAPPA_SLOPE = 7.787


def clamp01(value: float) -> float:
    """Clamp a float into [0, 1]."""
    return max(0.0, min(1.0, value))


def rgb_to_hsv(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert byte RGB to HSV.

    Args:
        r: Red component (0-255)
        g: Green component (0-255)
        b: Blue component (0-255)

    Returns:
        Tuple of (hue, saturation, value), each in [0, 1)
    """
    rf = r / 255.0
    gf = g / 255.0
    bf = b / 255.0

    cmax = max(rf, gf, bf)
    cmin = min(rf, gf, bf)
    delta = cmax - cmin

    v = cmax
    s = 0.0 if cmax == 0 else delta / cmax

    if delta == 0:
        h = 0.0
    elif cmax == rf:
        h = ((gf - bf) / delta) / 6.0
    elif cmax == gf:
        h = (2.0 + (bf - rf) / delta) / 6.0
    else:
        h = (4.0 + (rf - gf) / delta) / 6.0

    if h < 0:
        h += 1.0

    return h, s, v


def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[int, int, int]:
    """Convert HSV to byte RGB using the six-sector reconstruction.

    Channels are rounded half to even.

    Args:
        h: Hue in [0, 1)
        s: Saturation in [0, 1]
        v: Value in [0, 1]

    Returns:
        Tuple of (r, g, b) bytes
    """
    c = v * s
    x = c * (1 - abs(((h * 6) % 2) - 1))
    m = v - c

    if h < 1 / 6:
        rf, gf, bf = c, x, 0.0
    elif h < 2 / 6:
        rf, gf, bf = x, c, 0.0
    elif h < 3 / 6:
        rf, gf, bf = 0.0, c, x
    elif h < 4 / 6:
        rf, gf, bf = 0.0, x, c
    elif h < 5 / 6:
        rf, gf, bf = x, 0.0, c
    else:
        rf, gf, bf = c, 0.0, x

    return (
        _to_byte((rf + m) * 255),
        _to_byte((gf + m) * 255),
        _to_byte((bf + m) * 255),
    )


def _to_byte(value: float) -> int:
    return int(min(255, max(0, round(value))))


def _srgb_decode(channel: float) -> float:
    if channel > 0.04045:
        return ((channel + 0.055) / 1.055) ** 2.4
    return channel / 12.92


def _lab_f(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return LAB_KAPPA_SLOPE * t + 16.0 / 116.0


def rgb_to_lab(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert byte RGB to CIELAB (D65).

    Args:
        r: Red component (0-255)
        g: Green component (0-255)
        b: Blue component (0-255)

    Returns:
        Tuple of (L, a, b)
    """
    rl = _srgb_decode(r / 255.0)
    gl = _srgb_decode(g / 255.0)
    bl = _srgb_decode(b / 255.0)

    x = rl * 0.4124 + gl * 0.3576 + bl * 0.1805
    y = rl * 0.2126 + gl * 0.7152 + bl * 0.0722
    z = rl * 0.0193 + gl * 0.1192 + bl * 0.9505

    fx = _lab_f(x / WHITE_POINT[0])
    fy = _lab_f(y / WHITE_POINT[1])
    fz = _lab_f(z / WHITE_POINT[2])

    return 116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized :func:`rgb_to_hsv` over an ``(..., 3)`` byte array.

    Returns:
        Float64 array of the same leading shape with (h, s, v) in the last axis
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    rf, gf, bf = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    cmax = rgb.max(axis=-1)
    cmin = rgb.min(axis=-1)
    delta = cmax - cmin

    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(cmax == 0, 0.0, delta / cmax)
        h_r = ((gf - bf) / delta) / 6.0
        h_g = (2.0 + (bf - rf) / delta) / 6.0
        h_b = (4.0 + (rf - gf) / delta) / 6.0

    h = np.where(cmax == rf, h_r, np.where(cmax == gf, h_g, h_b))
    h = np.where(delta == 0, 0.0, h)
    h = np.where(h < 0, h + 1.0, h)

    return np.stack([h, s, cmax], axis=-1)


def hsv_to_rgb_array(hsv: np.ndarray) -> np.ndarray:
    """Vectorized :func:`hsv_to_rgb` over an ``(..., 3)`` float array.

    Returns:
        uint8 array of the same leading shape with (r, g, b) in the last axis
    """
    hsv = np.asarray(hsv, dtype=np.float64)
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]

    c = v * s
    x = c * (1 - np.abs(np.mod(h * 6, 2) - 1))
    m = v - c
    zero = np.zeros_like(c)

    conditions = [h < 1 / 6, h < 2 / 6, h < 3 / 6, h < 4 / 6, h < 5 / 6]
    rf = np.select(conditions, [c, x, zero, zero, x], default=c)
    gf = np.select(conditions, [x, c, c, x, zero], default=zero)
    bf = np.select(conditions, [zero, zero, x, c, c], default=x)

    rgb = np.stack([rf + m, gf + m, bf + m], axis=-1) * 255
    return np.clip(np.rint(rgb), 0, 255).astype(np.uint8)


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized :func:`rgb_to_lab` over an ``(..., 3)`` byte array."""
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    linear = np.where(rgb > 0.04045, ((rgb + 0.055) / 1.055) ** 2.4, rgb / 12.92)

    xyz = linear @ RGB_TO_XYZ.T
    xyz = xyz / np.array(WHITE_POINT, dtype=np.float64)

    f = np.where(
        xyz > LAB_EPSILON,
        np.cbrt(xyz),
        LAB_KAPPA_SLOPE * xyz + 16.0 / 116.0,
    )
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)

HEX_COLOR_PATTERN = re.compile(r"[0-9a-fA-F]{3}|[0-9a-fA-F]{6}")


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse a ``#RGB`` or ``#RRGGBB`` hex string.

    The leading ``#`` is optional and surrounding whitespace is ignored.

    Raises:
        ValueError: If the string is not a valid 3 or 6 digit hex color
    """
    if not isinstance(value, str):
        raise ValueError(f"Hex color must be a string, got {type(value).__name__}")

    text = value.strip()
    if text.startswith("#"):
        text = text[1:]
    if not HEX_COLOR_PATTERN.fullmatch(text):
        raise ValueError(f"Invalid hex color: {value!r}")

    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


@dataclass(frozen=True)
class Color:
    """An opaque RGB color with its derived HSV and LAB coordinates.

    HSV and LAB are always computed from the RGB bytes, never set directly.
    """

    r: int
    g: int
    b: int
    hue: float = field(init=False, repr=False, compare=False)
    saturation: float = field(init=False, repr=False, compare=False)
    value: float = field(init=False, repr=False, compare=False)
    lab: Tuple[float, float, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("r", "g", "b"):
            channel = int(getattr(self, name))
            if not 0 <= channel <= 255:
                raise ValueError(f"Channel {name}={channel} outside 0-255")
            object.__setattr__(self, name, channel)

        h, s, v = rgb_to_hsv(self.r, self.g, self.b)
        object.__setattr__(self, "hue", h)
        object.__setattr__(self, "saturation", s)
        object.__setattr__(self, "value", v)
        object.__setattr__(self, "lab", rgb_to_lab(self.r, self.g, self.b))

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Build a color from a hex string."""
        return cls(*parse_hex_color(value))

    @classmethod
    def from_hsv(cls, h: float, s: float, v: float) -> "Color":
        """Build a color from HSV coordinates."""
        return cls(*hsv_to_rgb(h, s, v))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.r, self.g, self.b

    @property
    def hsv(self) -> Tuple[float, float, float]:
        return self.hue, self.saturation, self.value

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def __str__(self) -> str:
        return self.hex


ColorLike = Union[Color, Tuple[int, int, int]]


def _rgb_of(color: ColorLike) -> Tuple[int, int, int]:
    if isinstance(color, Color):
        return color.rgb
    return tuple(int(c) for c in color[:3])


def rgb_distance(c1: ColorLike, c2: ColorLike) -> float:
    """Euclidean distance between two colors in byte RGB space."""
    r1, g1, b1 = _rgb_of(c1)
    r2, g2, b2 = _rgb_of(c2)
    return math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2)


def hsv_distance(c1: ColorLike, c2: ColorLike) -> float:
    """Distance in HSV space with circular hue difference."""
    h1, s1, v1 = c1.hsv if isinstance(c1, Color) else rgb_to_hsv(*_rgb_of(c1))
    h2, s2, v2 = c2.hsv if isinstance(c2, Color) else rgb_to_hsv(*_rgb_of(c2))
    dh = abs(h1 - h2)
    dh = min(dh, 1.0 - dh)
    return math.sqrt(dh * dh + (s1 - s2) ** 2 + (v1 - v2) ** 2)


def lab_distance(c1: ColorLike, c2: ColorLike) -> float:
    """Euclidean distance in CIELAB."""
    l1, a1, b1 = c1.lab if isinstance(c1, Color) else rgb_to_lab(*_rgb_of(c1))
    l2, a2, b2 = c2.lab if isinstance(c2, Color) else rgb_to_lab(*_rgb_of(c2))
    return math.sqrt((l1 - l2) ** 2 + (a1 - a2) ** 2 + (b1 - b2) ** 2)
