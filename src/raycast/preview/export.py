"""Image encoding for rendered canvases.

Supported formats:
    - png: 8-bit RGB via Pillow
    - jpeg: 8-bit RGB via Pillow
    - ppm: plain-text P3 written by the canvas itself

Encoding is the last step of a render; any failure here is reported once
and no partial output is returned.

Example:
    >>> from src.raycast.preview.canvas import Canvas
    >>> from src.raycast.preview.export import encode_image, save_image
    >>> canvas = Canvas(4, 2)
    >>> data = encode_image(canvas, "png")
    >>> save_image(canvas, "output.jpg")  # format taken from the extension
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image as PILImage

from src.raycast.preview.canvas import Canvas

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("png", "jpeg", "ppm")

# File extensions accepted as aliases when inferring a format from a path
_EXTENSION_ALIASES = {"jpg": "jpeg", "jpeg": "jpeg", "png": "png", "ppm": "ppm"}

# Pillow format names
_PILLOW_FORMATS = {"png": "PNG", "jpeg": "JPEG"}


class ExportError(Exception):
    """Base class for image export errors."""


class UnsupportedFormatError(ExportError, ValueError):
    """Raised when an image format has no encoder."""

    def __init__(self, image_format: str) -> None:
        self.image_format = image_format
        supported = ", ".join(SUPPORTED_FORMATS)
        super().__init__(f"Unsupported image format '{image_format}' (supported: {supported})")


class EncodingError(ExportError):
    """Raised when the encoder fails to produce output."""


def normalize_format(image_format: str) -> str:
    """Validate an image format name.

    Matching is case-insensitive and accepts "jpg" for "jpeg".

    Raises:
        UnsupportedFormatError: If the format is not supported.
    """
    name = _EXTENSION_ALIASES.get(str(image_format).strip().lower())
    if name is None:
        raise UnsupportedFormatError(image_format)
    return name


def encode_image(canvas: Canvas, image_format: str) -> bytes:
    """Encode a canvas into an image byte stream.

    Args:
        canvas: The rendered raster.
        image_format: One of SUPPORTED_FORMATS.

    Returns:
        The encoded image.

    Raises:
        UnsupportedFormatError: If the format is not supported.
        EncodingError: If the encoder fails. The original exception is
            chained as the cause.
    """
    name = normalize_format(image_format)
    if name == "ppm":
        return canvas.to_ppm().encode("ascii")

    buffer = io.BytesIO()
    try:
        pil_image = PILImage.fromarray(canvas.to_uint8())
        pil_image.save(buffer, format=_PILLOW_FORMATS[name])
    except (OSError, ValueError) as e:
        raise EncodingError(f"Failed to encode {name} image: {e}") from e

    data = buffer.getvalue()
    logger.debug("Encoded %dx%d %s image (%d bytes)", canvas.width, canvas.height, name, len(data))
    return data


def save_image(canvas: Canvas, filepath: Union[str, Path], image_format: Optional[str] = None) -> None:
    """Encode a canvas and write it to a file.

    Args:
        canvas: The rendered raster.
        filepath: Output path.
        image_format: Format name. Inferred from the file extension if None.

    Raises:
        UnsupportedFormatError: If the format is not supported.
        EncodingError: If encoding or writing fails.
    """
    path = Path(filepath)
    if image_format is None:
        image_format = path.suffix.lstrip(".")
    data = encode_image(canvas, image_format)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise EncodingError(f"Failed to write {path}: {e}") from e
    logger.info("Saved %s", path)
