"""
VariantGenerator - Writes the resized/re-encoded files of one transform.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

from .errors import VariantWriteError
from .imaging import apply_resize, output_format, prepare_for_format, save_options
from .jobs import VariantJob


Resolution = Tuple[int, int]


@dataclass
class VariantResult:
    """
    Outcome of one variant job.

    Attributes:
        resolution: (width, height) of the first format that could be read back
        written: Files encoded (including regenerations)
        cached: Files that already existed
        retries: Delete-and-regenerate cycles after unreadable output
        unreadable: Formats given up on after exhausting retries
    """
    resolution: Optional[Resolution] = None
    written: int = 0
    cached: int = 0
    retries: int = 0
    unreadable: List[str] = field(default_factory=list)


class VariantGenerator:
    """
    Generates the variant files of a transform with on-disk caching.

    Existing files are reused. Every file is read back after writing; if
    that fails the file is deleted and regenerated, up to `retry_attempts`
    times, after which the format is skipped with a warning.
    """

    def __init__(
        self,
        retry_attempts: int = 3,
        settle_delay: float = 0.03,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize variant generator.

        Args:
            retry_attempts: Regenerations allowed after a failed read-back
            settle_delay: Seconds to wait after a write before reading it back
            logger: Optional logger instance
        """
        self.retry_attempts = retry_attempts
        self.settle_delay = settle_delay
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, job: VariantJob) -> VariantResult:
        """
        Produce every format of `job.transform` for `job.src`.

        Formats are processed in declared order. The source is decoded and
        resized at most once per job.

        Raises:
            VariantWriteError: a file could not be encoded; its `result`
                holds what the earlier formats produced
        """
        result = VariantResult()
        rendered: Optional[Tuple[Image.Image, dict]] = None

        def render() -> Tuple[Image.Image, dict]:
            nonlocal rendered
            if rendered is None:
                rendered = self._render(job)
            return rendered

        for fmt in job.transform.formats:
            path = Path(job.transform.output_path(str(job.base), fmt))
            size = self._ensure_format(job, fmt, path, render, result)
            if size is not None and result.resolution is None:
                result.resolution = size
        return result

    def _ensure_format(self, job, fmt, path, render, result) -> Optional[Resolution]:
        """Write (or reuse) one format file and return its dimensions."""
        key = job.transform.key
        attempt = 0
        while True:
            if path.exists():
                result.cached += 1
                self.logger.debug(f"[TRANSFORM] {job.file} key={key} format={fmt} -> {path} cached")
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                self.logger.debug(f"[TRANSFORM] {job.file} key={key} format={fmt} -> {path} writing")
                try:
                    image, info = render()
                    self.write(image, info, path, fmt, job.transform.quality)
                except Exception as e:
                    raise VariantWriteError(job.src, e, result) from e
                result.written += 1
                time.sleep(self.settle_delay)

            try:
                return self.read_resolution(path)
            except (OSError, SyntaxError, ValueError) as cause:
                if attempt >= self.retry_attempts:
                    self.logger.warning(
                        f"[TRANSFORM] Can not get metadata from {path} "
                        f"(attempt={attempt}): {cause}"
                    )
                    result.unreadable.append(fmt)
                    return None
                attempt += 1
                result.retries += 1
                self.logger.warning(
                    f"[TRANSFORM] Reattempting to write {path} (attempt={attempt}): {cause}"
                )
                try:
                    path.unlink()
                except OSError as err:
                    self.logger.warning(
                        f"[TRANSFORM] Unlinking {path} failed with \"{err}\" because of -> {cause}"
                    )

    def _render(self, job: VariantJob) -> Tuple[Image.Image, dict]:
        """Decode and resize the source; returns the image and source metadata."""
        with Image.open(job.src) as src:
            src.load()
            info = dict(src.info)
            image = apply_resize(src, job.transform.resize)
            if image is src:
                image = src.copy()
            return image, info

    @staticmethod
    def write(image: Image.Image, info: dict, path: Path, fmt: str, quality: Optional[int] = None) -> None:
        """Encode `image` to `path` in format `fmt`, keeping embedded metadata."""
        pil_format = output_format(fmt)
        prepared = prepare_for_format(image, pil_format)
        prepared.save(path, **save_options(info, pil_format, quality))

    @staticmethod
    def read_resolution(path: Path) -> Resolution:
        """Read back the dimensions of a written file, checking it decodes."""
        with Image.open(path) as img:
            img.verify()
            return img.size
