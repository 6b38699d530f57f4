"""In-memory raster of linear RGB colors.

Pixels are stored as float32 in an array of shape (height, width, 3) so that
row 0 is the top of the image. Channel values are unbounded while rendering
and are clamped only when converted to 8-bit.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt

# Maximum characters per line in plain PPM output
PPM_LINE_LIMIT = 70


class Canvas:
    """A width x height grid of RGB pixels, initially black.

    Raises:
        ValueError: If a dimension is not positive.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._pixels = np.zeros((self.height, self.width, 3), dtype=np.float32)

    @classmethod
    def from_array(cls, pixels: npt.ArrayLike) -> Canvas:
        """Build a canvas from an array of shape (height, width, 3)."""
        array = np.asarray(pixels, dtype=np.float32)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (height, width, 3), got {array.shape}")
        canvas = cls(array.shape[1], array.shape[0])
        canvas._pixels[...] = array
        return canvas

    def write_pixel(self, x: int, y: int, color) -> None:
        """Set the color of pixel (x, y)."""
        self._pixels[y, x] = color

    def pixel_at(self, x: int, y: int) -> Tuple[float, float, float]:
        """Get the color of pixel (x, y)."""
        r, g, b = self._pixels[y, x]
        return (float(r), float(g), float(b))

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Copy of the raw float32 pixels, shape (height, width, 3)."""
        return self._pixels.copy()

    def to_uint8(self) -> npt.NDArray[np.uint8]:
        """Convert to 8-bit channels.

        Each channel is clamped to [0, 1], scaled by 255 and rounded up.
        """
        clamped = np.clip(self._pixels, np.float32(0.0), np.float32(1.0))
        scaled = np.ceil(clamped * np.float32(255.0))
        return scaled.astype(np.uint8)

    def to_ppm(self) -> str:
        """Encode as plain-text PPM (P3).

        Pixel rows are wrapped so that no line exceeds PPM_LINE_LIMIT
        characters, and the output always ends with a newline.
        """
        lines = []
        for row in self.to_uint8():
            line = ""
            for value in (str(int(c)) for c in row.reshape(-1)):
                if len(line) + len(value) + 1 >= PPM_LINE_LIMIT:
                    lines.append(line)
                    line = value
                elif not line:
                    line = value
                else:
                    line = f"{line} {value}"
            if line:
                lines.append(line)
        body = "".join(f"{line}\n" for line in lines)
        return f"P3\n{self.width} {self.height}\n255\n{body}"
