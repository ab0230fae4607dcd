"""
Image loading and saving around the editing core.

Decoding arbitrary formats is delegated to Pillow; the core only ever
sees a fully decoded RGBA buffer.
"""

import base64
import binascii
import io
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np
import structlog
from PIL import Image, UnidentifiedImageError

from ..config import settings
from ..core.bmp import encode_bmp
from ..core.raster import RasterBuffer

logger = structlog.get_logger()

ImageSource = Union[str, Path, bytes, BinaryIO]


class ImageLoadError(ValueError):
    """Raised when an input image cannot be decoded or is not acceptable."""


def load_raster(source: ImageSource, max_width: int = None, max_height: int = None) -> RasterBuffer:
    """
    Decode an image into an RGBA raster buffer.

    Args:
        source: File path, raw encoded bytes or a binary file object
        max_width: Largest accepted width (defaults to settings)
        max_height: Largest accepted height (defaults to settings)

    Returns:
        RasterBuffer with the decoded pixels
    """
    max_width = max_width or settings.max_image_width
    max_height = max_height or settings.max_image_height

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        with Image.open(source) as image:
            width, height = image.size
            if width > max_width or height > max_height:
                raise ImageLoadError(
                    f"Image {width}x{height} exceeds limit {max_width}x{max_height}"
                )
            rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ImageLoadError(f"Could not decode image: {e}") from e

    logger.info("Image loaded", width=width, height=height)
    return RasterBuffer.from_rgba(rgba)


def decode_base64_image(data: str, **limits) -> RasterBuffer:
    """Decode a base64 string or data URL ("data:image/png;base64,...")."""
    if "," in data:
        _, data = data.split(",", 1)
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError(f"Invalid base64 image data: {e}") from e
    return load_raster(raw, **limits)


def save_bmp(buffer: RasterBuffer, path: Union[str, Path] = None) -> Path:
    """Write the buffer as a BMP file and return its path."""
    path = Path(path or settings.export_filename)
    path.write_bytes(encode_bmp(buffer))
    logger.info("BMP saved", path=str(path), width=buffer.width, height=buffer.height)
    return path
