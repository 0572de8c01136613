"""Color model, analysis and HSV transform."""

from .model import Color, hsv_to_rgb, parse_hex_color, rgb_to_hsv, rgb_to_lab
from .types import (
    ColorAnalysisResult,
    ColorCluster,
    ColorSpace,
    ColorStatistics,
    DominantColor,
    PreservationArea,
    PreservationType,
    ReplacementParameters,
    Role,
)
from .analyzer import ColorAnalyzer
from .hsv_transform import ColorParameters, HsvTransformer

__all__ = [
    "Color",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_lab",
    "parse_hex_color",
    "ColorAnalysisResult",
    "ColorCluster",
    "ColorSpace",
    "ColorStatistics",
    "DominantColor",
    "PreservationArea",
    "PreservationType",
    "ReplacementParameters",
    "Role",
    "ColorAnalyzer",
    "ColorParameters",
    "HsvTransformer",
]
