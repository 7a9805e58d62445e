"""
Photo preparation: corner swatches plus the work items for one photo.
"""

from pathlib import Path
from typing import Sequence

from .corners import CornerExtractor
from .jobs import CopyItem, VariantJob, WorkQueue
from .photo_record import PhotoRecord
from .transform_spec import TransformSpec


def prepare_photo(
    record: PhotoRecord,
    transforms: Sequence[TransformSpec],
    cwd: Path,
    target_folder: Path,
    queue: WorkQueue,
    extractor: CornerExtractor,
) -> None:
    """
    Compute corners (if missing) and enqueue the photo's work.

    One variant job per transform plus one copy of the original are added
    to `queue`. Only `record` is mutated, so distinct photos can be
    prepared concurrently.

    Raises:
        CornerExtractionError: nothing is enqueued for the photo
    """
    src = cwd / record.file
    if record.corners is None:
        record.corners = extractor.extract(src)

    base = target_folder / record.base
    for transform in transforms:
        queue.add_variant(VariantJob(src=src, file=record.file, base=base, transform=transform))
    queue.add_copy(CopyItem(src=src, target=target_folder / record.file))
