"""Palette-driven color replacement."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..image.bitmap import BitmapLike, as_rgba
from ..palettes.catalog import Palette
from ..utils.logging import get_logger
from .model import Color, rgb_to_hsv_array, hsv_to_rgb_array, rgb_to_lab_array
from .types import (
    ColorAnalysisResult,
    ColorCluster,
    ColorSpace,
    PreservationArea,
    ReplacementParameters,
    Role,
)

logger = get_logger(__name__)

ROLE_IMPORTANCE = {
    Role.PRIMARY: 1.0,
    Role.SECONDARY: 0.8,
    Role.ACCENT: 0.6,
    Role.NEUTRAL: 0.4,
    Role.SHADOW: 0.3,
    Role.HIGHLIGHT: 0.3,
    Role.DETAIL: 0.2,
}

ROLE_STRENGTH = {
    Role.PRIMARY: 1.0,
    Role.SECONDARY: 0.9,
    Role.ACCENT: 1.1,
    Role.SHADOW: 0.8,
    Role.HIGHLIGHT: 0.8,
    Role.NEUTRAL: 0.6,
    Role.DETAIL: 0.7,
}

REUSE_PENALTY = 0.3

# Upper bound on unique colors compared against cluster members at once
DISTANCE_CHUNK = 32768


@dataclass
class ColorMapping:
    """Assignment of a source cluster to a target palette color."""

    cluster: ColorCluster
    target: Color
    slot: str
    strength: float
    preserve_luminance: bool
    preserve_saturation: bool


def cluster_importance(cluster: ColorCluster) -> float:
    return cluster.total_frequency * ROLE_IMPORTANCE.get(cluster.role, 0.5)


def role_compatibility(role: Role, slot_color: Color) -> float:
    """How well a palette color suits a cluster role."""
    if role == Role.PRIMARY:
        return 1.0
    if role == Role.SECONDARY:
        return 0.9
    if role == Role.SHADOW and slot_color.value < 0.4:
        return 1.2
    if role == Role.HIGHLIGHT and slot_color.value > 0.7:
        return 1.2
    if role == Role.ACCENT and slot_color.saturation > 0.6:
        return 1.1
    if role == Role.NEUTRAL and slot_color.saturation < 0.4:
        return 1.1
    return 0.8


def slot_score(cluster: ColorCluster, slot_color: Color, base_weight: float) -> float:
    """Score a palette slot for a cluster; higher is better."""
    source = cluster.representative
    value_similarity = 1.0 - abs(source.value - slot_color.value)
    if cluster.role == Role.NEUTRAL:
        saturation_similarity = 1.0
    else:
        saturation_similarity = 1.0 - 0.5 * abs(source.saturation - slot_color.saturation)

    return (
        base_weight
        * role_compatibility(cluster.role, slot_color)
        * value_similarity
        * saturation_similarity
    )


class ColorReplacer:
    """Repaint texture clusters with the colors of a target palette."""

    def create_mappings(
        self,
        clusters: Sequence[ColorCluster],
        palette: Palette,
        params: ReplacementParameters,
    ) -> List[ColorMapping]:
        """Greedily assign clusters to palette slots, most important first.

        Slots already taken are penalized rather than excluded. Clusters for
        which no slot scores above zero get no mapping.
        """
        ranked = sorted(clusters, key=cluster_importance, reverse=True)
        used_colors = set()
        mappings = []

        for cluster in ranked:
            best_score = 0.0
            best_slot: Optional[Tuple[str, Color]] = None

            for slot, color, weight in palette.slots():
                if color in used_colors:
                    weight *= REUSE_PENALTY
                score = slot_score(cluster, color, weight)
                if score > best_score:
                    best_score = score
                    best_slot = (slot, color)

            if best_slot is None:
                logger.debug(
                    f"No palette slot for {cluster.role.value} cluster "
                    f"{cluster.representative.hex}"
                )
                continue

            slot, target = best_slot
            used_colors.add(target)
            strength = params.replacement_strength * ROLE_STRENGTH.get(cluster.role, 0.8)
            mapping = ColorMapping(
                cluster=cluster,
                target=target,
                slot=slot,
                strength=min(1.0, max(0.0, strength)),
                preserve_luminance=cluster.role
                in (Role.SHADOW, Role.HIGHLIGHT, Role.DETAIL),
                preserve_saturation=cluster.role in (Role.NEUTRAL, Role.DETAIL),
            )
            mappings.append(mapping)

            logger.debug(
                f"Mapped {cluster.role.value} cluster ({cluster.total_frequency:.1%}) "
                f"to {slot} {target.hex} with strength {mapping.strength:.1%}"
            )

        return mappings

    def replace(
        self,
        bitmap: BitmapLike,
        analysis: ColorAnalysisResult,
        palette: Palette,
        params: Optional[ReplacementParameters] = None,
    ) -> np.ndarray:
        """Replace texture colors with palette colors.

        Args:
            bitmap: RGBA texture the analysis was computed from
            analysis: Result of :meth:`ColorAnalyzer.analyze`
            palette: Target palette
            params: Replacement parameters, defaults when None

        Returns:
            New RGBA array; alpha and preserved pixels are untouched

        Raises:
            InvalidBitmapError: If the bitmap is not 8-bit RGBA
        """
        pixels = as_rgba(bitmap)
        params = params or ReplacementParameters()
        result = pixels.copy()

        logger.debug(
            f"Starting color replacement for {palette.name or palette.category.name} "
            f"with {len(analysis.dominant_colors)} dominant colors"
        )

        mappings = self.create_mappings(analysis.color_clusters, palette, params)
        if not mappings:
            logger.debug("No color mappings created, texture left unchanged")
            return result

        preserved = preservation_mask(pixels.shape[:2], analysis.preservation_areas)
        opaque = pixels[..., 3] != 0
        ys, xs = np.nonzero(opaque & ~preserved)
        if ys.size == 0:
            return result

        unique_rgb, inverse = np.unique(
            pixels[ys, xs, :3], axis=0, return_inverse=True
        )
        inverse = inverse.reshape(-1)

        member_rgb, member_mapping = _member_table(mappings)
        best_member, best_distance = _closest_members(
            unique_rgb, member_rgb, params.color_space
        )
        matched = best_distance <= params.minimum_color_distance * 255
        chosen = member_mapping[best_member]

        new_rgb = unique_rgb.copy()
        for index, mapping in enumerate(mappings):
            selected = matched & (chosen == index)
            if selected.any():
                new_rgb[selected] = apply_mapping(unique_rgb[selected], mapping, params)

        result[ys, xs, :3] = new_rgb[inverse]

        replaced = int(np.count_nonzero(matched[inverse]))
        logger.debug(
            f"Color replacement complete - Replaced: {replaced}, "
            f"Preserved: {int(np.count_nonzero(opaque & preserved))}, "
            f"Skipped: {ys.size - replaced}"
        )
        return result


def preservation_mask(shape: Tuple[int, int], areas: Sequence[PreservationArea]) -> np.ndarray:
    """Union of all preservation areas as a boolean ``(H, W)`` mask."""
    height, width = shape
    mask = np.zeros((height, width), dtype=bool)
    for area in areas:
        if area.pixel_count == 0:
            continue
        xs = area.pixels[:, 0]
        ys = area.pixels[:, 1]
        inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
        mask[ys[inside], xs[inside]] = True
    return mask


def _member_table(mappings: Sequence[ColorMapping]):
    """Flatten cluster members in mapping order with their owning mapping."""
    member_rgb = []
    member_mapping = []
    for index, mapping in enumerate(mappings):
        for color in mapping.cluster.colors:
            member_rgb.append(color.rgb)
            member_mapping.append(index)
    return (
        np.array(member_rgb, dtype=np.uint8).reshape(-1, 3),
        np.array(member_mapping, dtype=np.int64),
    )


def _closest_members(
    colors: np.ndarray, members: np.ndarray, color_space: ColorSpace
) -> Tuple[np.ndarray, np.ndarray]:
    """Index of and distance to the nearest member for every color.

    Ties resolve to the first member in mapping order.
    """
    if color_space == ColorSpace.LAB:
        color_coords = rgb_to_lab_array(colors)
        member_coords = rgb_to_lab_array(members)
    elif color_space == ColorSpace.HSV:
        color_coords = rgb_to_hsv_array(colors)
        member_coords = rgb_to_hsv_array(members)
    else:
        color_coords = colors.astype(np.float64)
        member_coords = members.astype(np.float64)

    best_index = np.empty(len(colors), dtype=np.int64)
    best_distance = np.empty(len(colors), dtype=np.float64)

    for start in range(0, len(colors), DISTANCE_CHUNK):
        chunk = color_coords[start:start + DISTANCE_CHUNK]
        delta = np.abs(chunk[:, None, :] - member_coords[None, :, :])
        if color_space == ColorSpace.HSV:
            delta[..., 0] = np.minimum(delta[..., 0], 1.0 - delta[..., 0])
        distances = np.sqrt(np.sum(delta * delta, axis=-1))

        index = np.argmin(distances, axis=1)
        best_index[start:start + DISTANCE_CHUNK] = index
        best_distance[start:start + DISTANCE_CHUNK] = distances[np.arange(len(chunk)), index]

    return best_index, best_distance


def apply_mapping(
    rgb: np.ndarray, mapping: ColorMapping, params: ReplacementParameters
) -> np.ndarray:
    """Blend source colors toward a mapping's target color.

    Hue moves toward the target by the mapping strength. Value and saturation
    are first pulled back toward the source by their preservation amount, then
    blended by the same strength.
    """
    source = rgb_to_hsv_array(rgb)
    source_h, source_s, source_v = source[:, 0], source[:, 1], source[:, 2]
    target = mapping.target

    luminance_amount = 1.0 if mapping.preserve_luminance else params.luminance_preservation
    saturation_amount = 1.0 if mapping.preserve_saturation else params.saturation_preservation

    new_v = target.value * (1 - luminance_amount) + source_v * luminance_amount
    new_s = target.saturation * (1 - saturation_amount) + source_s * saturation_amount

    strength = mapping.strength
    h = source_h * (1 - strength) + target.hue * strength
    s = np.clip(source_s * (1 - strength) + new_s * strength, 0.0, 1.0)
    v = np.clip(source_v * (1 - strength) + new_v * strength, 0.0, 1.0)

    return hsv_to_rgb_array(np.stack([h, s, v], axis=-1))


def replace(
    bitmap: BitmapLike,
    analysis: ColorAnalysisResult,
    palette: Palette,
    params: Optional[ReplacementParameters] = None,
) -> np.ndarray:
    """Replace texture colors using a fresh :class:`ColorReplacer`."""
    return ColorReplacer().replace(bitmap, analysis, palette, params)
