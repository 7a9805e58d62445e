"""
BuildStats - Statistics for a build run.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class BuildStats:
    """
    Statistics for a build run.

    Attributes:
        photos: Photo records collected
        variant_jobs: Variant jobs scheduled
        variants_done: Variant jobs finished (with or without a resolution)
        files_written: Variant files encoded
        files_cached: Variant files reused from a previous run
        retries: Regenerations after unreadable output
        unresolved: Variant jobs that ended without a resolution
        copies: Copy items scheduled
        copies_done: Copy items performed
        copies_cached: Copy items skipped because the target existed
        errors: Failed units of work (photos, variant jobs, copies)
        start_time: Start timestamp
        error_details: List of error messages
    """
    photos: int = 0
    variant_jobs: int = 0
    variants_done: int = 0
    files_written: int = 0
    files_cached: int = 0
    retries: int = 0
    unresolved: int = 0
    copies: int = 0
    copies_done: int = 0
    copies_cached: int = 0
    errors: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, **counts: int) -> None:
        """Increment counters; safe to call from worker threads."""
        with self._lock:
            for name, value in counts.items():
                setattr(self, name, getattr(self, name) + value)

    def record_error(self, message: str) -> None:
        with self._lock:
            self.errors += 1
            self.error_details.append(message)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Variant jobs finished per second."""
        if self.elapsed_seconds > 0:
            return self.variants_done / self.elapsed_seconds
        return 0.0

    @property
    def rate_per_minute(self) -> float:
        return self.rate_per_second * 60

    @property
    def remaining_count(self) -> int:
        """Variant jobs not yet finished."""
        return self.variant_jobs - self.variants_done

    @property
    def estimated_remaining_seconds(self) -> float:
        if self.rate_per_second > 0:
            return self.remaining_count / self.rate_per_second
        return 0.0

    @property
    def clean(self) -> bool:
        """True if no unit of work failed."""
        return self.errors == 0
