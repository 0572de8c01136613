"""Data model shared by the analysis and replacement stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .model import Color

Pixel = Tuple[int, int]


class Role(Enum):
    """Structural role a dominant color plays in a texture."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    ACCENT = "accent"
    SHADOW = "shadow"
    HIGHLIGHT = "highlight"
    NEUTRAL = "neutral"
    DETAIL = "detail"


class PreservationType(Enum):
    """Kinds of regions exempted from recoloring."""

    EYE = "eye"
    TEETH = "teeth"
    SHINE = "shine"
    SHADOW = "shadow"
    NEUTRAL = "neutral"
    DETAIL = "detail"


class ColorSpace(str, Enum):
    """Color space used to match pixels against cluster members."""

    RGB = "rgb"
    HSV = "hsv"
    LAB = "lab"


@dataclass(frozen=True)
class DominantColor:
    """A frequent (quantized) color found in a texture."""

    color: Color
    frequency: float
    role: Role
    average_luminance: float
    sample_pixels: Tuple[Pixel, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.color.hex,
            "frequency": self.frequency,
            "role": self.role.value,
            "average_luminance": self.average_luminance,
            "sample_pixels": [list(p) for p in self.sample_pixels],
        }


@dataclass
class ColorCluster:
    """A group of perceptually similar dominant colors."""

    representative: Color
    colors: List[Color] = field(default_factory=list)
    total_frequency: float = 0.0
    role: Role = Role.DETAIL
    luminance_variance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "representative": self.representative.hex,
            "colors": [c.hex for c in self.colors],
            "total_frequency": self.total_frequency,
            "role": self.role.value,
            "luminance_variance": self.luminance_variance,
        }


@dataclass(frozen=True)
class ColorStatistics:
    """Whole-texture color statistics."""

    average_luminance: float = 0.0
    saturation_level: float = 0.0
    unique_color_count: int = 0
    color_complexity: float = 0.0
    has_high_contrast: bool = False
    has_gradients: bool = False
    opaque_pixel_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_luminance": self.average_luminance,
            "saturation_level": self.saturation_level,
            "unique_color_count": self.unique_color_count,
            "color_complexity": self.color_complexity,
            "has_high_contrast": self.has_high_contrast,
            "has_gradients": self.has_gradients,
            "opaque_pixel_count": self.opaque_pixel_count,
        }


@dataclass
class PreservationArea:
    """A pixel region that must not be recolored.

    ``pixels`` is an int array of shape ``(N, 2)`` holding ``(x, y)`` pairs.
    """

    type: PreservationType
    pixels: np.ndarray
    representative_color: Color
    reason: str = ""

    def __post_init__(self):
        pixels = np.asarray(self.pixels, dtype=np.int64)
        self.pixels = pixels.reshape(-1, 2)

    @property
    def pixel_count(self) -> int:
        return int(self.pixels.shape[0])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "pixel_count": self.pixel_count,
            "representative_color": self.representative_color.hex,
            "reason": self.reason,
        }


@dataclass
class ColorAnalysisResult:
    """Everything the analyzer learned about one texture."""

    dominant_colors: List[DominantColor] = field(default_factory=list)
    color_clusters: List[ColorCluster] = field(default_factory=list)
    statistics: ColorStatistics = field(default_factory=ColorStatistics)
    preservation_areas: List[PreservationArea] = field(default_factory=list)
    texture_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.dominant_colors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "texture_name": self.texture_name,
            "dominant_colors": [c.to_dict() for c in self.dominant_colors],
            "color_clusters": [c.to_dict() for c in self.color_clusters],
            "statistics": self.statistics.to_dict(),
            "preservation_areas": [a.to_dict() for a in self.preservation_areas],
        }


class ReplacementParameters(BaseModel):
    """Tuning knobs for palette-driven color replacement."""

    model_config = ConfigDict(frozen=True)

    replacement_strength: float = Field(default=0.8, ge=0.0, le=1.0)
    luminance_preservation: float = Field(default=0.7, ge=0.0, le=1.0)
    saturation_preservation: float = Field(default=0.5, ge=0.0, le=1.0)
    minimum_color_distance: float = Field(default=0.1, ge=0.0, le=1.0)
    color_space: ColorSpace = ColorSpace.LAB
    preserve_gradients: bool = True
