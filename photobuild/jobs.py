"""
Work items produced by photo preparation and consumed by the scheduler.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .transform_spec import TransformSpec


@dataclass(frozen=True)
class VariantJob:
    """
    Generate every format of one transform for one source photo.

    Attributes:
        src: Absolute path of the source image
        file: Source path relative to the source root (the photo's identity)
        base: Output path without extension; files become <base>@<key>.<fmt>
        transform: Transform to apply
    """
    src: Path
    file: str
    base: Path
    transform: TransformSpec

    @property
    def identity(self) -> Tuple[str, str]:
        """Result key: (source file, transform key)."""
        return (self.file, self.transform.key)

    def output_paths(self) -> List[Path]:
        return [Path(self.transform.output_path(str(self.base), fmt)) for fmt in self.transform.formats]


@dataclass(frozen=True)
class CopyItem:
    """Verbatim copy of a source file into the output tree."""
    src: Path
    target: Path


@dataclass
class WorkQueue:
    """
    Variant jobs and copy items collected across all photos of a run.

    Safe to fill from several preparation threads. Jobs with the same
    identity and copies with the same target are only kept once.
    """
    _variants: Dict[Tuple[str, str], VariantJob] = field(default_factory=dict)
    _copies: Dict[Path, CopyItem] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add_variant(self, job: VariantJob) -> bool:
        with self._lock:
            if job.identity in self._variants:
                return False
            self._variants[job.identity] = job
            return True

    def add_copy(self, item: CopyItem) -> bool:
        with self._lock:
            if item.target in self._copies:
                return False
            self._copies[item.target] = item
            return True

    @property
    def variants(self) -> List[VariantJob]:
        with self._lock:
            return list(self._variants.values())

    @property
    def copies(self) -> List[CopyItem]:
        with self._lock:
            return list(self._copies.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._variants) + len(self._copies)
