"""
PhotoRecord - One source photo and the metadata derived from it.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .transform_spec import TransformSpec


Resolution = Tuple[int, int]


@dataclass
class PhotoRecord:
    """
    Record for a single source photo.

    Attributes:
        file: Path of the source image, relative to the source root
        caption: Optional caption
        instructional: Optional album flag, passed through to the manifest
        corners: Four hex colour swatches (set once by photo preparation)
        res: Transform key -> [width, height] of the generated variant
        failed: Set when preparation could not process the photo
    """
    file: str
    caption: Optional[str] = None
    instructional: Optional[bool] = None
    corners: Optional[List[str]] = None
    res: Dict[str, List[int]] = field(default_factory=dict)
    failed: bool = False

    @property
    def base(self) -> str:
        """Source path without its extension; variant files hang off it."""
        return posixpath.splitext(self.file)[0]

    def missing_transforms(self, transforms: Sequence[TransformSpec]) -> List[str]:
        """Transform keys that have no recorded resolution."""
        return [t.key for t in transforms if t.key not in self.res]

    def merge_resolutions(
        self,
        results: Dict[Tuple[str, str], Resolution],
        transforms: Sequence[TransformSpec]
    ) -> None:
        """Copy the scheduler's results for this photo's file into `res`."""
        for t in transforms:
            size = results.get((self.file, t.key))
            if size is not None:
                self.res[t.key] = list(size)

    def res_array(self, transforms: Sequence[TransformSpec]) -> List[Optional[List[int]]]:
        """`res` flattened to the transform order; gaps become None."""
        return [self.res.get(t.key) for t in transforms]

    def to_album_entry(self, transforms: Sequence[TransformSpec]) -> dict:
        """Photo entry for the album manifest. Absent values are omitted."""
        entry: dict = {'file': self.file}
        if self.instructional is not None:
            entry['instructional'] = self.instructional
        if self.caption is not None:
            entry['caption'] = self.caption
        entry['res'] = self.res_array(transforms)
        if self.corners is not None:
            entry['corners'] = list(self.corners)
        return entry

    def to_event_image(self, transforms: Sequence[TransformSpec]) -> dict:
        """Image entry for an event in the events manifest."""
        entry: dict = {}
        if self.caption is not None:
            entry['caption'] = self.caption
        entry['file'] = self.file
        entry['res'] = self.res_array(transforms)
        if self.corners is not None:
            entry['corners'] = list(self.corners)
        return entry

    @classmethod
    def from_album_photo(cls, data: dict) -> 'PhotoRecord':
        """Create from a photo descriptor in photos.json."""
        return cls(
            file=data['location'],
            caption=data.get('caption'),
            instructional=data.get('instructional'),
        )

    @classmethod
    def from_event_image(cls, data: dict) -> 'PhotoRecord':
        """Create from an event's `image` descriptor in events.json."""
        return cls(
            file=data['location'],
            caption=data.get('caption'),
        )
