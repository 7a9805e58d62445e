"""
Pillow helpers shared by the corner extractor and the variant generator.
"""

import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageCms, ImageOps

from .transform_spec import ResizePolicy


RESAMPLE = Image.Resampling.LANCZOS
DEFAULT_QUALITY = 85
LOSSY_FORMATS = {'JPEG', 'WEBP', 'AVIF'}


def convert_color_mode(img: Image.Image, background: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Flatten to RGB; transparent pixels are composited onto `background`."""
    if img.mode == 'RGB':
        return img
    if img.mode in ('RGBA', 'LA', 'PA', 'P'):
        rgba = img.convert('RGBA')
        flat = Image.new('RGB', img.size, background)
        flat.paste(rgba, mask=rgba.getchannel('A'))
        return flat
    return img.convert('RGB')


def to_srgb(img: Image.Image, logger: Optional[logging.Logger] = None) -> Image.Image:
    """
    Convert to plain RGB in the sRGB colour space.

    Images with an embedded ICC profile are colour-managed; everything else,
    including images whose profile cannot be used, goes through
    convert_color_mode.
    """
    icc = img.info.get('icc_profile')
    if not icc or img.mode not in ('RGB', 'CMYK', 'L'):
        return convert_color_mode(img)
    try:
        source = ImageCms.ImageCmsProfile(io.BytesIO(icc))
        target = ImageCms.createProfile('sRGB')
        return ImageCms.profileToProfile(img, source, target, outputMode='RGB')
    except (ImageCms.PyCMSError, OSError) as e:
        (logger or logging.getLogger(__name__)).debug(f"Ignoring unusable ICC profile: {e}")
        return convert_color_mode(img)


def output_format(fmt: str) -> str:
    """Pillow format name for a file extension such as 'webp' or 'jpg'."""
    name = Image.registered_extensions().get(f".{fmt.lower()}")
    if name is None:
        raise ValueError(f"unsupported output format: {fmt}")
    return name


def prepare_for_format(img: Image.Image, pil_format: str) -> Image.Image:
    """Convert the colour mode into one the encoder accepts."""
    if pil_format == 'JPEG':
        return convert_color_mode(img)
    if img.mode in ('RGB', 'RGBA', 'L', 'LA'):
        return img
    if img.mode == 'P' or 'A' in img.getbands():
        return img.convert('RGBA')
    return img.convert('RGB')


def save_options(info: dict, pil_format: str, quality: Optional[int] = None) -> dict:
    """Encoder options; EXIF and ICC data from the source `info` are carried over."""
    options: dict = {'format': pil_format}
    if pil_format in LOSSY_FORMATS:
        options['quality'] = quality or DEFAULT_QUALITY
    if pil_format in ('JPEG', 'PNG'):
        options['optimize'] = True
    exif = info.get('exif')
    if exif:
        options['exif'] = exif
    icc = info.get('icc_profile')
    if icc:
        options['icc_profile'] = icc
    return options


def _scaled(size: Tuple[int, int], scale: float) -> Tuple[int, int]:
    return max(1, round(size[0] * scale)), max(1, round(size[1] * scale))


def apply_resize(img: Image.Image, policy: Optional[ResizePolicy]) -> Image.Image:
    """
    Scale an image according to a resize policy.

    Fit modes:
        inside:  largest size that fits within the box, aspect ratio kept
        outside: smallest size that covers the box, aspect ratio kept
        contain: 'inside', then padded to exactly the box
        cover:   scaled and centre-cropped to exactly the box
        fill:    stretched to exactly the box
    With only one of width/height the other follows the aspect ratio.
    """
    if policy is None:
        return img

    src_w, src_h = img.size
    width, height = policy.width, policy.height

    if width is None or height is None:
        scale = width / src_w if width is not None else height / src_h
        if policy.without_enlargement:
            scale = min(scale, 1.0)
        return img.resize(_scaled(img.size, scale), RESAMPLE)

    if policy.without_enlargement and src_w <= width and src_h <= height:
        return img

    if policy.fit == 'fill':
        return img.resize((width, height), RESAMPLE)
    if policy.fit == 'cover':
        return ImageOps.fit(img, (width, height), method=RESAMPLE)
    if policy.fit == 'contain':
        return ImageOps.pad(img, (width, height), method=RESAMPLE, color=policy.background)

    if policy.fit == 'outside':
        scale = max(width / src_w, height / src_h)
    else:
        scale = min(width / src_w, height / src_h)
    if policy.without_enlargement:
        scale = min(scale, 1.0)
    return img.resize(_scaled(img.size, scale), RESAMPLE)
