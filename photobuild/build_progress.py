"""
BuildProgress - Tracks and displays build progress.
"""

import logging
from typing import Optional

from .build_stats import BuildStats
from .jobs import CopyItem, VariantJob


class BuildProgress:
    """
    Tracks and displays build progress with optional per-file output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 100,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each unit of work as it finishes
            log_interval: Log summary progress every N variant jobs (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_variant_done(self, job: VariantJob, resolution=None, error: Optional[str] = None) -> None:
        """Called when a variant job finishes."""
        if not self.show_files:
            return
        key = job.transform.key
        if error:
            print(f"  [ERROR] {job.file} @{key} -> {error}")
        elif resolution:
            print(f"  [OK] {job.file} @{key} -> {resolution[0]}x{resolution[1]}")
        else:
            print(f"  [WARN] {job.file} @{key} -> no resolution")

    def on_copy_done(self, item: CopyItem, cached: bool) -> None:
        """Called when a copy item finishes."""
        if self.show_files:
            status = "cached" if cached else "copied"
            print(f"  [COPY] {item.src} -> {item.target} ({status})")

    def on_progress_update(self, stats: BuildStats) -> None:
        """
        Called after each variant job to report overall progress.

        Args:
            stats: Current build statistics
        """
        done = stats.variants_done

        if not self.show_files and done - self.last_logged >= self.log_interval:
            self.last_logged = done
            eta_minutes = stats.estimated_remaining_seconds / 60
            self.logger.info(
                f"Progress: {done}/{stats.variant_jobs} transforms, "
                f"{stats.files_written} written, {stats.errors} errors "
                f"({stats.rate_per_minute:.1f}/min, "
                f"~{eta_minutes:.0f}m remaining, {stats.remaining_count} left)"
            )

    def __call__(self, stats: BuildStats) -> None:
        """Allow use as callback for stats updates."""
        self.on_progress_update(stats)
