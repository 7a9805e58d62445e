"""
TransformScheduler - Runs copy items and variant jobs on bounded pools.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple

from .build_progress import BuildProgress
from .build_stats import BuildStats
from .errors import VariantWriteError
from .jobs import CopyItem, VariantJob
from .output import copy_file
from .variant_generator import Resolution, VariantGenerator, VariantResult


class TransformScheduler:
    """
    Executes the work queues of a run.

    Copies and variant jobs each run on their own thread pool. A failing
    unit is logged and counted; it never stops the others. Results are
    returned rather than written into photo records.
    """

    def __init__(
        self,
        generator: VariantGenerator,
        variant_concurrency: int = 3,
        copy_concurrency: int = 10,
        stats: Optional[BuildStats] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize scheduler.

        Args:
            generator: Variant generator used for each job
            variant_concurrency: Maximum concurrent variant jobs
            copy_concurrency: Maximum concurrent copies
            stats: Statistics to update (a fresh BuildStats if omitted)
            logger: Optional logger instance
        """
        self.generator = generator
        self.variant_concurrency = variant_concurrency
        self.copy_concurrency = copy_concurrency
        self.stats = stats if stats is not None else BuildStats()
        self.logger = logger or logging.getLogger(__name__)

    def run_copies(self, items: List[CopyItem], progress: Optional[BuildProgress] = None) -> None:
        """Copy each source into the output tree unless the target exists."""
        self.stats.add(copies=len(items))
        self.logger.info(f"[COPY] {len(items)} originals to copy")

        with ThreadPoolExecutor(max_workers=self.copy_concurrency) as pool:
            futures = {pool.submit(copy_file, item.src, item.target, True, self.logger): item for item in items}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    cached = future.result()
                except OSError as e:
                    error_msg = f"Error copying {item.src}: {e}"
                    self.logger.error(f"[COPY] {error_msg}")
                    self.stats.record_error(error_msg)
                    continue
                if cached:
                    self.stats.add(copies_cached=1)
                else:
                    self.stats.add(copies_done=1)
                if progress:
                    progress.on_copy_done(item, cached)

    def run_variants(
        self,
        jobs: List[VariantJob],
        progress: Optional[BuildProgress] = None
    ) -> Dict[Tuple[str, str], Resolution]:
        """
        Generate all variant jobs.

        Returns:
            (source file, transform key) -> (width, height) for every job
            that produced a readable file
        """
        self.stats.add(variant_jobs=len(jobs))
        self.logger.info(
            f"[TRANSFORM] {len(jobs)} transforms to process "
            f"(concurrency={self.variant_concurrency})"
        )

        results: Dict[Tuple[str, str], Resolution] = {}
        with ThreadPoolExecutor(max_workers=self.variant_concurrency) as pool:
            futures = {pool.submit(self._process_job, job, progress): job for job in jobs}
            for future in as_completed(futures):
                resolution = future.result()
                if resolution is not None:
                    results[futures[future].identity] = resolution
                if progress:
                    progress.on_progress_update(self.stats)

        self.logger.info(
            f"[TRANSFORM] complete: {self.stats.files_written} written, "
            f"{self.stats.files_cached} cached, {self.stats.retries} retries, "
            f"{self.stats.unresolved} without resolution"
        )
        return results

    def _process_job(self, job: VariantJob, progress: Optional[BuildProgress]) -> Optional[Resolution]:
        """
        Run one job; failures are logged and counted, never raised.

        A write failure on a later format keeps the resolution already read
        from an earlier one.
        """
        key = job.transform.key
        error: Optional[Exception] = None
        try:
            result = self.generator.generate(job)
        except VariantWriteError as e:
            error = e
            result = e.result or VariantResult()
        except (OSError, ValueError) as e:
            error = e
            result = VariantResult()

        self.stats.add(
            variants_done=1,
            files_written=result.written,
            files_cached=result.cached,
            retries=result.retries,
        )
        if error is not None:
            error_msg = f"Error processing {job.file} @{key}: {error}"
            self.logger.error(f"[TRANSFORM] {error_msg}")
            self.stats.record_error(error_msg)
        if result.resolution is None:
            self.stats.add(unresolved=1)
            if error is None:
                self.logger.warning(
                    f"[TRANSFORM] No resolution recorded for {job.file} @{key} "
                    f"(unreadable: {', '.join(result.unreadable)})"
                )
        if progress:
            progress.on_variant_done(
                job,
                resolution=result.resolution,
                error=str(error) if error is not None else None,
            )
        return result.resolution
