"""
Static photo build for the website.

Turns album and event descriptors plus their source photos into resized
image variants, copies of the originals, and JSON manifests:
    1. Collect photo records from photos.json and events.json
    2. Prepare each photo: corner swatches and work items
    3. Copy originals and generate variants on bounded worker pools
    4. Write the manifests and index.json
"""

__version__ = "1.0.0"

from .transform_spec import ResizePolicy, TransformSpec, parse_transforms
from .photo_record import PhotoRecord
from .jobs import VariantJob, CopyItem, WorkQueue
from .corners import CornerExtractor
from .variant_generator import VariantGenerator, VariantResult
from .scheduler import TransformScheduler
from .preparation import prepare_photo
from .collectors import AlbumCollector, EventCollector
from .build_stats import BuildStats
from .build_progress import BuildProgress
from .build_config import BuildConfig
from .pipeline import Pipeline, BuildResult
from .reporter import Reporter

__all__ = [
    "ResizePolicy",
    "TransformSpec",
    "parse_transforms",
    "PhotoRecord",
    "VariantJob",
    "CopyItem",
    "WorkQueue",
    "CornerExtractor",
    "VariantGenerator",
    "VariantResult",
    "TransformScheduler",
    "prepare_photo",
    "AlbumCollector",
    "EventCollector",
    "BuildStats",
    "BuildProgress",
    "BuildConfig",
    "Pipeline",
    "BuildResult",
    "Reporter",
]
