"""Batch recoloring of exported texture bundles."""

import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from ..color.hsv_transform import ColorParameters
from ..image.bitmap import load_texture, save_texture
from ..palettes.categories import (
    DEFAULT_CATEGORY,
    Category,
    CategoryId,
    MonsterTable,
    resolve_category,
)
from ..utils.config import ProcessingConfig
from ..utils.logging import PerformanceLogger, ProgressLogger, get_logger
from .recolorer import TextureRecolorer

logger = get_logger(__name__)

PRIMARY_BUNDLE_PATTERN = re.compile(r"^pm\d{4}_\d{2}_\d{2}$", re.IGNORECASE)
FALLBACK_BUNDLE_PATTERN = re.compile(r"^pm\d{4}_\d{2}$", re.IGNORECASE)

TEXTURE_SUFFIXES = (".png",)


@dataclass
class ProcessingStatistics:
    """Counters for a batch run."""

    bundles_processed: int = 0
    bundles_modified: int = 0
    bundles_skipped: int = 0
    bundles_failed: int = 0
    textures_modified: int = 0
    errors: int = 0
    elapsed_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        """Percentage of processed bundles that were modified."""
        if self.bundles_processed == 0:
            return 0.0
        return self.bundles_modified / self.bundles_processed * 100

    @property
    def average_textures_per_bundle(self) -> float:
        if self.bundles_modified == 0:
            return 0.0
        return self.textures_modified / self.bundles_modified

    def to_dict(self) -> Dict[str, float]:
        return {
            "bundles_processed": self.bundles_processed,
            "bundles_modified": self.bundles_modified,
            "bundles_skipped": self.bundles_skipped,
            "bundles_failed": self.bundles_failed,
            "textures_modified": self.textures_modified,
            "errors": self.errors,
            "elapsed_seconds": self.elapsed_seconds,
            "success_rate": self.success_rate,
            "average_textures_per_bundle": self.average_textures_per_bundle,
        }


@dataclass
class BundleJob:
    """A bundle directory with its color textures and parameters."""

    path: Path
    textures: List[Path]
    color_params: ColorParameters
    category: Optional[Category] = None
    outputs: Dict[str, str] = field(default_factory=dict)
    errors: int = 0

    @property
    def name(self) -> str:
        return self.path.name


def is_bundle_name(name: str) -> bool:
    """Check a name against the ``pm####_##_##`` and ``pm####_##`` patterns."""
    if not name or not name.strip():
        return False
    return bool(PRIMARY_BUNDLE_PATTERN.match(name) or FALLBACK_BUNDLE_PATTERN.match(name))


def find_bundles(input_dir: Union[str, Path]) -> List[Path]:
    """Find exported bundle directories, sorted by name."""
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        return []

    bundles = [p for p in input_dir.iterdir() if p.is_dir() and is_bundle_name(p.name)]
    return sorted(bundles, key=lambda p: p.name)


def find_color_textures(bundle_dir: Union[str, Path], texture_filter: str = "_col") -> List[Path]:
    """Find texture images in a bundle whose name contains ``texture_filter``."""
    needle = texture_filter.lower()
    textures = [
        p
        for p in Path(bundle_dir).iterdir()
        if p.is_file()
        and p.suffix.lower() in TEXTURE_SUFFIXES
        and needle in p.stem.lower()
    ]
    return sorted(textures, key=lambda p: p.name)


class BatchRecolorer:
    """Recolor every color texture of every bundle under a directory.

    Textures are processed on a thread pool. Color parameters are fixed per
    bundle before any work is scheduled, so results do not depend on the
    order in which workers finish.
    """

    def __init__(
        self,
        recolorer: Optional[TextureRecolorer] = None,
        processing: Optional[ProcessingConfig] = None,
        monster_table: Optional[MonsterTable] = None,
        category: Optional[CategoryId] = None,
    ):
        """Initialize batch recolorer.

        Args:
            recolorer: Per-texture recolorer
            processing: Batch settings
            monster_table: Resolves bundle names to categories in category mode
            category: Fixed category applied to every bundle in category mode
        """
        self.recolorer = recolorer or TextureRecolorer()
        self.processing = processing or ProcessingConfig()
        self.monster_table = monster_table
        self.category = resolve_category(category) if category is not None else None
        self.progress = ProgressLogger()
        self.performance = PerformanceLogger()

    def process_directory(
        self, input_dir: Union[str, Path], output_dir: Union[str, Path]
    ) -> ProcessingStatistics:
        """Recolor all bundles found in ``input_dir``.

        Args:
            input_dir: Directory containing exported bundle directories
            output_dir: Directory receiving ``<bundle>/<texture>.png`` outputs

        Returns:
            Statistics for the run
        """
        start = time.perf_counter()
        stats = ProcessingStatistics()
        output_dir = Path(output_dir)

        bundles = find_bundles(input_dir)
        if self.processing.max_bundles:
            bundles = bundles[: self.processing.max_bundles]

        if not bundles:
            logger.warning(f"No bundles found in {input_dir}")
            return stats

        logger.info(
            f"Processing {len(bundles)} bundles in {self.processing.mode} mode "
            f"with {self.processing.workers} workers"
        )

        jobs = self._plan_jobs(bundles, stats)

        self.performance.start_timer("batch")
        with ThreadPoolExecutor(max_workers=self.processing.workers) as executor:
            futures = [
                (job, texture, executor.submit(self._process_texture, job, texture, output_dir))
                for job in jobs
                for texture in job.textures
            ]
            for job, texture, future in futures:
                try:
                    job.outputs[texture.name] = str(future.result())
                except Exception as e:
                    job.errors += 1
                    logger.error(f"Failed to recolor {job.name}/{texture.name}: {e}", exc_info=True)
        self.performance.end_timer("batch")

        for index, job in enumerate(jobs):
            self.progress.log_bundle_step(index, len(jobs), job.name)
            stats.errors += job.errors
            if job.outputs:
                stats.bundles_modified += 1
                stats.textures_modified += len(job.outputs)
                self.progress.log_export_results(job.outputs)
            elif job.errors:
                stats.bundles_failed += 1

        stats.elapsed_seconds = time.perf_counter() - start
        logger.info(
            f"Processed {stats.bundles_processed} bundles: {stats.bundles_modified} modified, "
            f"{stats.bundles_skipped} skipped, {stats.bundles_failed} failed, "
            f"{stats.textures_modified} textures, "
            f"{stats.errors} errors ({stats.success_rate:.1f}% success) "
            f"in {stats.elapsed_seconds:.2f}s"
        )
        return stats

    def _plan_jobs(self, bundles: List[Path], stats: ProcessingStatistics) -> List[BundleJob]:
        seeds = np.random.SeedSequence(self.processing.seed).spawn(len(bundles))
        jobs = []

        for bundle, seed in zip(bundles, seeds):
            stats.bundles_processed += 1
            textures = find_color_textures(bundle, self.processing.texture_filter)
            if not textures:
                logger.debug(f"No color textures in {bundle.name}, skipping")
                stats.bundles_skipped += 1
                continue

            category = None
            if self.processing.mode == "category":
                category = self._category_for(bundle.name)
                color_params = self.recolorer.parameters_for_category(category)
                palette = self.recolorer.catalog.get_palette(category)
                self.progress.log_palette(category.display_name, palette.to_dict())
            else:
                color_params = ColorParameters.random(np.random.default_rng(seed))

            jobs.append(BundleJob(bundle, textures, color_params, category))

        return jobs

    def _category_for(self, bundle_name: str) -> Category:
        if self.category is not None:
            return self.category
        if self.monster_table is not None:
            return self.monster_table.category_for_bundle(bundle_name)
        logger.warning(
            f"No category source for {bundle_name}, using {DEFAULT_CATEGORY.display_name}"
        )
        return DEFAULT_CATEGORY

    def _process_texture(self, job: BundleJob, texture: Path, output_dir: Path) -> Path:
        pixels = load_texture(texture)
        recolored = self.recolorer.recolor(pixels, job.color_params, texture.stem)
        return save_texture(recolored, output_dir / job.name / texture.name)
