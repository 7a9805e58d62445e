"""
Collectors - Turn the album and event descriptors into photo records and
write the enriched manifests once all work is done.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .build_stats import BuildStats
from .corners import CornerExtractor
from .errors import CornerExtractionError, DescriptorError
from .jobs import WorkQueue
from .output import read_json, write_json
from .photo_record import PhotoRecord, Resolution
from .preparation import prepare_photo
from .transform_spec import TransformSpec


class Collector:
    """
    Base class for a descriptor file and the photos it references.

    Lifecycle: collect() -> prepare(queue) -> [scheduler runs] -> finalize(results)
    """

    #: Name of the descriptor, read from the source root and written to the target root
    filename = ''
    #: Missing sources are skipped with an info message instead of failing the photo
    optional_sources = False

    def __init__(
        self,
        cwd: Path,
        target_folder: Path,
        transforms: Sequence[TransformSpec],
        extractor: Optional[CornerExtractor] = None,
        stats: Optional[BuildStats] = None,
        prepare_concurrency: int = 5,
        filename: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.cwd = cwd
        self.target_folder = target_folder
        self.transforms = list(transforms)
        self.logger = logger or logging.getLogger(__name__)
        self.extractor = extractor or CornerExtractor(logger=self.logger)
        self.stats = stats if stats is not None else BuildStats()
        self.prepare_concurrency = prepare_concurrency
        if filename:
            self.filename = filename
        self.descriptor: dict = {}
        self.records: List[PhotoRecord] = []

    @property
    def source_path(self) -> Path:
        return self.cwd / self.filename

    @property
    def target_path(self) -> Path:
        return self.target_folder / self.filename

    def collect(self) -> List[PhotoRecord]:
        """Read the descriptor and build the photo records."""
        self.descriptor = read_json(self.source_path)
        try:
            self.records = self._collect(self.descriptor)
        except (KeyError, TypeError, AttributeError) as e:
            raise DescriptorError(f"Malformed descriptor {self.source_path}: {e!r}") from e
        self.stats.add(photos=len(self.records))
        self.logger.info(f"[START] {self.filename}: {len(self.records)} photos")
        return self.records

    def _collect(self, descriptor: dict) -> List[PhotoRecord]:
        raise NotImplementedError

    def prepare(self, queue: WorkQueue) -> None:
        """Prepare every record concurrently, isolating per-photo failures."""
        with ThreadPoolExecutor(max_workers=self.prepare_concurrency) as pool:
            list(pool.map(lambda record: self._prepare_record(record, queue), self.records))

    def _prepare_record(self, record: PhotoRecord, queue: WorkQueue) -> None:
        if self.optional_sources and not (self.cwd / record.file).exists():
            self.logger.info(f"[CORNERS] {record.file} not found, skipping optional image")
            record.failed = True
            return
        try:
            prepare_photo(record, self.transforms, self.cwd, self.target_folder, queue, self.extractor)
        except CornerExtractionError as e:
            record.failed = True
            error_msg = f"{e}: {e.__cause__}"
            self.logger.error(f"[CORNERS] {error_msg}")
            self.stats.record_error(error_msg)

    def finalize(self, results: Dict[Tuple[str, str], Resolution]) -> Path:
        """Merge scheduler results into the records and write the manifest."""
        for record in self.records:
            record.merge_resolutions(results, self.transforms)
            missing = record.missing_transforms(self.transforms)
            if missing:
                reason = "photo was skipped" if record.failed else "no readable variant"
                self.logger.warning(
                    f"[WRITE] {record.file} has no resolution for {', '.join(missing)} ({reason})"
                )
        return write_json(self.target_path, self._manifest(), self.logger)

    def _manifest(self) -> dict:
        raise NotImplementedError

    def _with_transforms(self, descriptor: dict) -> dict:
        manifest = {'transforms': [t.to_dict() for t in self.transforms]}
        manifest.update(descriptor)
        return manifest


class AlbumCollector(Collector):
    """
    Photo albums: `groups` -> `photos`, each photo with a `location`.

    Groups and photos flagged `removed` are left out entirely.
    """

    filename = 'photos.json'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.groups: List[Tuple[dict, List[PhotoRecord]]] = []

    def _collect(self, descriptor: dict) -> List[PhotoRecord]:
        self.groups = []
        records = []
        for group in descriptor['groups']:
            if group.get('removed'):
                continue
            group_records = [
                PhotoRecord.from_album_photo(photo)
                for photo in group['photos']
                if not photo.get('removed')
            ]
            self.groups.append((group, group_records))
            records.extend(group_records)
        return records

    def _manifest(self) -> dict:
        manifest = self._with_transforms(self.descriptor)
        manifest['groups'] = [
            dict(group, photos=[r.to_album_entry(self.transforms) for r in records])
            for group, records in self.groups
        ]
        return manifest


class EventCollector(Collector):
    """
    Events: `groups` -> `events`, each event with an optional `image`.

    Events without an image are written back untouched.
    """

    filename = 'events.json'
    optional_sources = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events: List[Tuple[dict, PhotoRecord]] = []

    def _collect(self, descriptor: dict) -> List[PhotoRecord]:
        self.events = []
        groups = descriptor['groups']
        if isinstance(groups, dict):
            groups = groups.values()
        for group in groups:
            for event in group['events']:
                if event.get('image'):
                    self.events.append((event, PhotoRecord.from_event_image(event['image'])))
        return [record for _, record in self.events]

    def _manifest(self) -> dict:
        for event, record in self.events:
            event['image'] = record.to_event_image(self.transforms)
        return self._with_transforms(self.descriptor)
