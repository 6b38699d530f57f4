"""Preview module for raster output.

Components:
    canvas: Float RGB raster with 8-bit and PPM conversion
    export: PNG/JPEG/PPM encoding and file output
"""

from src.raycast.preview.canvas import Canvas
from src.raycast.preview.export import (
    SUPPORTED_FORMATS,
    EncodingError,
    ExportError,
    UnsupportedFormatError,
    encode_image,
    normalize_format,
    save_image,
)

__all__ = [
    "Canvas",
    "SUPPORTED_FORMATS",
    "encode_image",
    "save_image",
    "normalize_format",
    "ExportError",
    "UnsupportedFormatError",
    "EncodingError",
]
