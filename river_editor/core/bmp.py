"""
Uncompressed 24-bit BMP encoder.

Layout:
- BITMAPFILEHEADER (14 bytes): "BM", file size, two reserved zero
  words, pixel data offset (54)
- BITMAPINFOHEADER (40 bytes): positive height (bottom-up rows),
  1 plane, 24 bpp, no compression, 2835 px/m (72 DPI), no palette
- Pixel rows from bottom to top, B,G,R per pixel, each row zero-padded
  to a multiple of 4 bytes. Alpha is dropped.
"""

import struct

import numpy as np
import structlog

from .raster import RasterBuffer

logger = structlog.get_logger()

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
PIXEL_DATA_OFFSET = FILE_HEADER_SIZE + INFO_HEADER_SIZE
BYTES_PER_PIXEL = 3
PIXELS_PER_METER = 2835  # 72 DPI


def row_stride(width: int) -> int:
    """Bytes per BMP row after 4-byte alignment."""
    return (BYTES_PER_PIXEL * width + 3) // 4 * 4


def encode_bmp(buffer: RasterBuffer) -> bytes:
    """Serialize a buffer to BMP bytes."""
    width, height = buffer.width, buffer.height
    stride = row_stride(width)
    image_size = stride * height
    file_size = PIXEL_DATA_OFFSET + image_size

    file_header = struct.pack("<2sIHHI", b"BM", file_size, 0, 0, PIXEL_DATA_OFFSET)
    info_header = struct.pack(
        "<IiiHHIIiiII",
        INFO_HEADER_SIZE,
        width,
        height,
        1,
        BYTES_PER_PIXEL * 8,
        0,
        image_size,
        PIXELS_PER_METER,
        PIXELS_PER_METER,
        0,
        0,
    )

    rows = np.zeros((height, stride), dtype=np.uint8)
    # bottom row first, RGB -> BGR
    bgr = buffer.pixels[::-1, :, 2::-1]
    rows[:, :BYTES_PER_PIXEL * width] = bgr.reshape(height, BYTES_PER_PIXEL * width)

    logger.debug("Encoded BMP", width=width, height=height, size=file_size)
    return file_header + info_header + rows.tobytes()
