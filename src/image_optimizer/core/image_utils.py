"""Image helpers for the image optimizer."""

from typing import Tuple

from PIL import Image

JPEG_MODES = ("RGB", "L")
# Pillow resizes these modes with NEAREST whatever filter is requested
NEAREST_ONLY_MODES = {"1": "L", "P": "RGB"}


def scaled_size(width: int, height: int, target_width: int) -> Tuple[int, int]:
    """
    Calculate the output size for a width-bounded resize.

    Images already at or below ``target_width`` keep their size; they are
    never upscaled.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        target_width: Maximum output width

    Returns:
        (width, height) preserving the source aspect ratio
    """
    if width <= target_width:
        return width, height
    return target_width, max(1, round(height * target_width / width))


def resize_to_width(img: Image.Image, target_width: int) -> Image.Image:
    """Resize with Lanczos resampling so the width is at most ``target_width``."""
    size = scaled_size(img.width, img.height, target_width)
    if size == img.size:
        return img
    if img.mode in NEAREST_ONLY_MODES:
        img = img.convert(NEAREST_ONLY_MODES[img.mode])
    return img.resize(size, Image.Resampling.LANCZOS)


def prepare_for_jpeg(img: Image.Image) -> Image.Image:
    """Convert modes JPEG cannot hold (alpha, palette, 16-bit, CMYK) to RGB."""
    if img.mode in JPEG_MODES:
        return img
    return img.convert("RGB")


def derive_dest_key(source_key: str, dest_prefix: str) -> str:
    """
    Calculate the destination key for a source key.

    The full source key is kept and placed under ``dest_prefix``, so
    ``uuid/a.jpg`` becomes ``optimized/uuid/a.jpg``.

    Args:
        source_key: Original S3 key
        dest_prefix: Destination prefix to add

    Returns:
        Destination S3 key
    """
    if not dest_prefix:
        return source_key
    if not dest_prefix.endswith("/"):
        dest_prefix = dest_prefix + "/"
    return f"{dest_prefix}{source_key}"
