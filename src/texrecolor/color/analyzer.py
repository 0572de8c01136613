"""Color analysis: dominant colors, clusters, statistics and preservation areas."""

from typing import List, Optional

import numpy as np

from ..image.bitmap import BitmapLike, as_rgba
from ..utils.logging import get_logger
from .model import Color, lab_distance
from .types import (
    ColorAnalysisResult,
    ColorCluster,
    ColorStatistics,
    DominantColor,
    PreservationArea,
    PreservationType,
    Role,
)

logger = get_logger(__name__)

# Histogram
QUANTIZATION_STEP = 8
MAX_SAMPLE_PIXELS = 10
MIN_DOMINANT_FREQUENCY = 0.005
MIN_DOMINANT_COLORS = 10

# Clustering
CLUSTER_LAB_THRESHOLD = 20.0

# Statistics
HIGH_CONTRAST_THRESHOLD = 0.6
GRADIENT_SAMPLE_STEP = 4
GRADIENT_MIN_DELTA = 2
GRADIENT_MAX_DELTA = 20
GRADIENT_FRACTION = 0.3

# Preservation
WHITE_THRESHOLD = 225
GREY_MIN = 150
GREY_MAX = 240
GREY_TOLERANCE = 20
TEETH_MIN_PIXELS = 10
NEUTRAL_PRESERVE_FREQUENCY = 0.02

EYE_WHITE_COLOR = Color(240, 240, 240)
EYE_SHADOW_COLOR = Color(180, 180, 180)


def is_eye_texture(texture_name: Optional[str]) -> bool:
    """Check whether a texture name refers to an eye or iris texture."""
    if not texture_name:
        return False
    name = texture_name.lower()
    return "eye" in name or "iris" in name


def white_mask(rgb: np.ndarray) -> np.ndarray:
    """Boolean mask of near-white pixels (every channel at least 225)."""
    return np.all(rgb >= WHITE_THRESHOLD, axis=-1)


def grey_shadow_mask(rgb: np.ndarray) -> np.ndarray:
    """Boolean mask of neutral greys in the eye-shadow range."""
    in_range = np.all((rgb >= GREY_MIN) & (rgb <= GREY_MAX), axis=-1)
    spread = rgb.max(axis=-1).astype(np.int16) - rgb.min(axis=-1).astype(np.int16)
    return in_range & (spread <= GREY_TOLERANCE)


def classify_role(color: Color, frequency: float) -> Role:
    """Assign a structural role to a dominant color.

    Rules are checked in order and the first match wins.
    """
    if color.value > 0.9 and color.saturation < 0.3:
        return Role.HIGHLIGHT
    if color.value < 0.2:
        return Role.SHADOW
    if frequency > 0.15:
        return Role.PRIMARY
    if frequency > 0.05:
        return Role.SECONDARY
    if color.saturation > 0.7:
        return Role.ACCENT
    if color.saturation < 0.3:
        return Role.NEUTRAL
    return Role.DETAIL


class _Histogram:
    """Quantized color histogram over the opaque pixels of a texture.

    Buckets are ordered by descending count, ties broken by the scan position of
    the first pixel that landed in the bucket.
    """

    def __init__(self, rgb: np.ndarray, xs: np.ndarray, ys: np.ndarray):
        quantized = (rgb // QUANTIZATION_STEP).astype(np.int32) * QUANTIZATION_STEP
        keys = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]

        _, first_index, inverse, counts = np.unique(
            keys, return_index=True, return_inverse=True, return_counts=True
        )
        inverse = inverse.reshape(-1)

        self.rgb = rgb
        self.xs = xs
        self.ys = ys
        self.first_index = first_index
        self.counts = counts
        self.order = np.lexsort((first_index, -counts))

        # Pixel indices grouped by bucket, scan order preserved within each group
        self._members = np.argsort(inverse, kind="stable")
        self._starts = np.concatenate(([0], np.cumsum(counts)[:-1]))

    def __len__(self) -> int:
        return len(self.counts)

    def color(self, bucket: int) -> Color:
        return Color(*self.rgb[self.first_index[bucket]])

    def sample_pixels(self, bucket: int, limit: int = MAX_SAMPLE_PIXELS):
        start = self._starts[bucket]
        stop = start + min(int(self.counts[bucket]), limit)
        idx = self._members[start:stop]
        return tuple(
            (int(x), int(y)) for x, y in zip(self.xs[idx], self.ys[idx])
        )


class ColorAnalyzer:
    """Decompose a texture into dominant colors, clusters and protected regions."""

    def __init__(self, cluster_threshold: float = CLUSTER_LAB_THRESHOLD):
        """Initialize analyzer.

        Args:
            cluster_threshold: LAB distance under which colors join a cluster seed
        """
        self.cluster_threshold = cluster_threshold

    def analyze(
        self, bitmap: BitmapLike, texture_name: Optional[str] = ""
    ) -> ColorAnalysisResult:
        """Analyze the colors of a texture.

        Args:
            bitmap: RGBA texture
            texture_name: Texture name, used for eye-region detection

        Returns:
            ColorAnalysisResult; empty when the texture has no opaque pixels

        Raises:
            InvalidBitmapError: If the bitmap is not 8-bit RGBA
        """
        pixels = as_rgba(bitmap)
        ys, xs = np.nonzero(pixels[..., 3])
        opaque_count = int(ys.size)

        if opaque_count == 0:
            logger.debug(f"No opaque pixels in '{texture_name}', nothing to analyze")
            return ColorAnalysisResult(texture_name=texture_name)

        rgb = pixels[ys, xs, :3]
        histogram = _Histogram(rgb, xs, ys)

        dominant_colors = self._extract_dominant_colors(histogram, opaque_count)
        clusters = self._cluster_colors(dominant_colors)
        statistics = self._compute_statistics(
            pixels, dominant_colors, len(histogram), opaque_count
        )
        areas = self._identify_preservation_areas(
            rgb, xs, ys, texture_name, dominant_colors
        )

        logger.debug(
            f"Analyzed '{texture_name}': {len(dominant_colors)} dominant colors, "
            f"{len(clusters)} clusters, {len(areas)} preservation areas, "
            f"{statistics.unique_color_count} unique colors"
        )

        return ColorAnalysisResult(
            dominant_colors=dominant_colors,
            color_clusters=clusters,
            statistics=statistics,
            preservation_areas=areas,
            texture_name=texture_name,
        )

    def _extract_dominant_colors(
        self, histogram: _Histogram, opaque_count: int
    ) -> List[DominantColor]:
        dominant_colors = []

        for bucket in histogram.order:
            frequency = histogram.counts[bucket] / opaque_count
            if (
                frequency < MIN_DOMINANT_FREQUENCY
                and len(dominant_colors) >= MIN_DOMINANT_COLORS
            ):
                break

            color = histogram.color(bucket)
            dominant_colors.append(
                DominantColor(
                    color=color,
                    frequency=float(frequency),
                    role=classify_role(color, frequency),
                    average_luminance=color.value,
                    sample_pixels=histogram.sample_pixels(bucket),
                )
            )

        return dominant_colors

    def _cluster_colors(
        self, dominant_colors: List[DominantColor]
    ) -> List[ColorCluster]:
        """Greedy clustering around the most frequent unassigned color."""
        clusters = []
        assigned = [False] * len(dominant_colors)

        for i, seed in enumerate(dominant_colors):
            if assigned[i]:
                continue
            assigned[i] = True
            members = [seed]

            for j in range(i + 1, len(dominant_colors)):
                if assigned[j]:
                    continue
                candidate = dominant_colors[j]
                if lab_distance(seed.color, candidate.color) < self.cluster_threshold:
                    assigned[j] = True
                    members.append(candidate)

            cluster = ColorCluster(
                representative=seed.color,
                colors=[m.color for m in members],
                total_frequency=sum(m.frequency for m in members),
                role=seed.role,
            )
            if len(members) > 1:
                values = [m.color.value for m in members]
                mean_value = sum(values) / len(values)
                cluster.luminance_variance = sum(
                    abs(v - mean_value) for v in values
                ) / len(values)

            clusters.append(cluster)

        clusters.sort(key=lambda c: c.total_frequency, reverse=True)
        return clusters

    def _compute_statistics(
        self,
        pixels: np.ndarray,
        dominant_colors: List[DominantColor],
        unique_count: int,
        opaque_count: int,
    ) -> ColorStatistics:
        average_luminance = sum(d.frequency * d.color.value for d in dominant_colors)
        saturation_level = sum(
            d.frequency * d.color.saturation for d in dominant_colors
        )

        contrast = 0.0
        if len(dominant_colors) >= 2:
            values = [d.color.value for d in dominant_colors]
            contrast = max(values) - min(values)

        return ColorStatistics(
            average_luminance=average_luminance,
            saturation_level=saturation_level,
            unique_color_count=unique_count,
            color_complexity=unique_count / opaque_count,
            has_high_contrast=bool(contrast > HIGH_CONTRAST_THRESHOLD),
            has_gradients=bool(detect_gradients(pixels)),
            opaque_pixel_count=opaque_count,
        )

    def _identify_preservation_areas(
        self,
        rgb: np.ndarray,
        xs: np.ndarray,
        ys: np.ndarray,
        texture_name: Optional[str],
        dominant_colors: List[DominantColor],
    ) -> List[PreservationArea]:
        areas = []
        coords = np.stack([xs, ys], axis=1)
        whites = white_mask(rgb)

        if is_eye_texture(texture_name):
            greys = ~whites & grey_shadow_mask(rgb)
            if whites.any():
                areas.append(
                    PreservationArea(
                        type=PreservationType.EYE,
                        pixels=coords[whites],
                        representative_color=EYE_WHITE_COLOR,
                        reason="Eye white areas",
                    )
                )
            if greys.any():
                areas.append(
                    PreservationArea(
                        type=PreservationType.EYE,
                        pixels=coords[greys],
                        representative_color=EYE_SHADOW_COLOR,
                        reason="Eye shadow areas",
                    )
                )

        if np.count_nonzero(whites) > TEETH_MIN_PIXELS:
            areas.append(
                PreservationArea(
                    type=PreservationType.TEETH,
                    pixels=coords[whites],
                    representative_color=EYE_WHITE_COLOR,
                    reason="White structural elements",
                )
            )

        for dominant in dominant_colors:
            if (
                dominant.role == Role.NEUTRAL
                and dominant.frequency > NEUTRAL_PRESERVE_FREQUENCY
            ):
                areas.append(
                    PreservationArea(
                        type=PreservationType.NEUTRAL,
                        pixels=np.array(dominant.sample_pixels, dtype=np.int64),
                        representative_color=dominant.color,
                        reason="Structural neutral color",
                    )
                )

        return areas


def detect_gradients(pixels: np.ndarray) -> bool:
    """Detect smooth color transitions by sampling every 4th pixel.

    A sample counts as gradual when the pixel differs only slightly from its
    right or its lower neighbour. Samples without both neighbours are skipped.
    """
    height, width = pixels.shape[:2]
    sy = np.arange(0, height, GRADIENT_SAMPLE_STEP)
    sx = np.arange(0, width, GRADIENT_SAMPLE_STEP)
    sy = sy[sy + 1 < height]
    sx = sx[sx + 1 < width]

    total = sy.size * sx.size
    if total == 0:
        return False

    sample = pixels[np.ix_(sy, sx)]
    right = pixels[np.ix_(sy, sx + 1)]
    below = pixels[np.ix_(sy + 1, sx)]

    gradual = _is_gradual(sample, right) | _is_gradual(sample, below)
    return bool(np.count_nonzero(gradual) / total > GRADIENT_FRACTION)


def _is_gradual(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    opaque = (first[..., 3] != 0) & (second[..., 3] != 0)
    delta = np.abs(
        first[..., :3].astype(np.int16) - second[..., :3].astype(np.int16)
    ).max(axis=-1)
    return opaque & (delta > GRADIENT_MIN_DELTA) & (delta < GRADIENT_MAX_DELTA)


def analyze(bitmap: BitmapLike, texture_name: Optional[str] = "") -> ColorAnalysisResult:
    """Analyze a texture with the default analyzer settings."""
    return ColorAnalyzer().analyze(bitmap, texture_name)
