"""
CornerExtractor - Derives four placeholder colours from a photo.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image, ImageEnhance, ImageOps

from .errors import CornerExtractionError
from .imaging import RESAMPLE, to_srgb


# Indices of the four corner cells in a row-major 3x3 grid.
CORNER_CELLS = (0, 2, 6, 8)


def to_hex_color(rgb: Sequence[int]) -> str:
    """'rrggbb' for an RGB triple."""
    return ''.join(f"{channel:02x}" for channel in rgb[:3])


class CornerExtractor:
    """
    Computes the corner swatches shown while the real image loads.

    The photo is squashed to a small square, contrast-normalised and
    saturated so faint colours stay distinguishable, then reduced to a 3x3
    grid whose four corner cells become the swatches.
    """

    def __init__(
        self,
        sample_size: int = 80,
        saturation: float = 1.5,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize corner extractor.

        Args:
            sample_size: Edge of the intermediate square (default: 80)
            saturation: Saturation multiplier (default: 1.5)
            logger: Optional logger instance
        """
        self.sample_size = sample_size
        self.saturation = saturation
        self.logger = logger or logging.getLogger(__name__)

    def extract(self, src: Path) -> List[str]:
        """
        Compute the four corner colours of an image file.

        Args:
            src: Path of the source image

        Returns:
            [top-left, top-right, bottom-left, bottom-right] as 'rrggbb'

        Raises:
            CornerExtractionError: the image could not be read or processed
        """
        try:
            with Image.open(src) as img:
                grid = self._grid(img)
        except Exception as e:
            raise CornerExtractionError(src) from e

        pixels = list(grid.getdata())
        corners = [to_hex_color(pixels[i]) for i in CORNER_CELLS]
        self.logger.debug(f"[CORNERS] {src} -> {' '.join(corners)}")
        return corners

    def _grid(self, img: Image.Image) -> Image.Image:
        """The normalised, saturated 3x3 RGB grid for an open image."""
        img = to_srgb(img, self.logger)
        small = img.resize((self.sample_size, self.sample_size), RESAMPLE)
        small = ImageOps.autocontrast(small, cutoff=1)
        small = ImageEnhance.Color(small).enhance(self.saturation)
        return small.resize((3, 3), Image.Resampling.BOX)
