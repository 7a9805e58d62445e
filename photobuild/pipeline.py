"""
Pipeline - Runs a complete build from descriptors to index.json.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .auxiliary import copy_folder_with_index, copy_statistics
from .build_config import BuildConfig
from .build_progress import BuildProgress
from .build_stats import BuildStats
from .collectors import AlbumCollector, EventCollector
from .corners import CornerExtractor
from .jobs import WorkQueue
from .output import relative_posix, write_json
from .scheduler import TransformScheduler
from .variant_generator import VariantGenerator


@dataclass
class BuildResult:
    """Paths written by a run and its statistics."""
    index: Path
    manifests: Dict[str, Path] = field(default_factory=dict)
    stats: BuildStats = field(default_factory=BuildStats)


class Pipeline:
    """
    Builds the static photo output for one source tree.

    Steps:
        1. Collect event and album photo records
        2. Prepare each photo (corners, work items)
        3. Copy originals, then generate all variants
        4. Merge resolutions and write the manifests
        5. Copy statistics and auxiliary folders, write index.json
    """

    def __init__(self, config: BuildConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.stats = BuildStats()
        self.transforms = config.transform_specs()

    def run(self, progress: Optional[BuildProgress] = None) -> BuildResult:
        """
        Execute the build.

        Raises:
            DescriptorError: a descriptor could not be read (nothing is written)
        """
        config = self.config
        cwd, target = config.cwd, config.target_folder
        self.logger.info(f"[START] Running with target folder {target}")

        extractor = CornerExtractor(logger=self.logger)
        shared = dict(
            extractor=extractor,
            stats=self.stats,
            prepare_concurrency=config.prepare_concurrency,
            logger=self.logger,
        )
        events_collector = EventCollector(cwd, target, self.transforms, filename=config.events_file, **shared)
        albums_collector = AlbumCollector(cwd, target, self.transforms, filename=config.albums_file, **shared)
        collectors = [events_collector, albums_collector]
        for collector in collectors:
            collector.collect()

        queue = WorkQueue()
        for collector in collectors:
            collector.prepare(queue)

        scheduler = TransformScheduler(
            VariantGenerator(config.retry_attempts, config.settle_delay, self.logger),
            variant_concurrency=config.variant_concurrency,
            copy_concurrency=config.copy_concurrency,
            stats=self.stats,
            logger=self.logger,
        )
        scheduler.run_copies(queue.copies, progress)
        results = scheduler.run_variants(queue.variants, progress)

        events = events_collector.finalize(results)
        albums = albums_collector.finalize(results)
        statistics = copy_statistics(cwd, target, config.stats, self.logger)
        folders = {
            folder: relative_posix(
                copy_folder_with_index(cwd, target, folder, config.copy_concurrency, self.logger),
                target,
            )
            for folder in config.folders
        }

        index = write_json(target / 'index.json', {
            'license': config.license,
            'photos': relative_posix(albums, target),
            'events': relative_posix(events, target),
            'statistics': statistics,
            'folders': folders,
        }, self.logger)

        self.logger.info(
            f"[END] done: {self.stats.photos} photos, {self.stats.variant_jobs} transforms, "
            f"{self.stats.errors} errors ({self.stats.elapsed_seconds:.1f}s)"
        )
        return BuildResult(
            index=index,
            manifests={'photos': albums, 'events': events},
            stats=self.stats,
        )
