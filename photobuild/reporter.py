"""
Reporter - Human-readable coverage reports over written manifests.
"""

import logging
import sys
from typing import Iterator, List, Optional, TextIO, Tuple

from .output import read_json


def iter_manifest_photos(manifest: dict) -> Iterator[Tuple[str, dict]]:
    """
    Yield (group label, photo entry) for an album or events manifest.

    Album manifests list `groups[].photos[]`; events manifests carry
    `groups{}.events[].image`.
    """
    groups = manifest.get('groups', [])
    if isinstance(groups, dict):
        for name, group in groups.items():
            for event in group.get('events', []):
                if event.get('image'):
                    yield name, event['image']
    else:
        for i, group in enumerate(groups):
            label = group.get('title') or group.get('name') or group.get('id') or f"group {i}"
            for photo in group.get('photos', []):
                yield str(label), photo


class Reporter:
    """
    Reports which photos of a manifest lack resolutions or corners.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def gaps(self, manifest: dict) -> List[Tuple[str, str, List[str]]]:
        """
        Find photos with incomplete data.

        Returns:
            (group, file, problems) for each photo missing a transform
            resolution or its corners
        """
        keys = [t['key'] for t in manifest.get('transforms', [])]
        found = []
        for group, photo in iter_manifest_photos(manifest):
            res = photo.get('res') or []
            problems = [
                key for i, key in enumerate(keys)
                if i >= len(res) or res[i] is None
            ]
            if not photo.get('corners'):
                problems.append('corners')
            if problems:
                found.append((group, photo.get('file', '?'), problems))
        return found

    def report_manifest(self, name: str, manifest: dict) -> int:
        """
        Print a coverage report for one manifest.

        Returns:
            Number of photos with gaps
        """
        keys = [t['key'] for t in manifest.get('transforms', [])]
        photos = list(iter_manifest_photos(manifest))
        gaps = self.gaps(manifest)

        self._print("=" * 80)
        self._print(f"MANIFEST: {name}")
        self._print("=" * 80)
        self._print(f"  Transforms:  {', '.join(keys) or '(none)'}")
        self._print(f"  Photos:      {len(photos)}")
        for i, key in enumerate(keys):
            resolved = sum(
                1 for _, photo in photos
                if len(photo.get('res') or []) > i and photo['res'][i] is not None
            )
            self._print(f"  @{key:<12} {resolved}/{len(photos)} resolved")
        self._print()

        if gaps:
            self._print(f"Photos with gaps ({len(gaps)}):")
            for group, file, problems in gaps:
                self._print(f"  [{group}] {file} - missing {', '.join(problems)}")
        else:
            self._print("All photos complete.")
        self._print()
        return len(gaps)

    def report_files(self, paths: List[str]) -> int:
        """Report on several manifest files; returns the total number of gaps."""
        total = 0
        for path in paths:
            total += self.report_manifest(path, read_json(path))
        return total
