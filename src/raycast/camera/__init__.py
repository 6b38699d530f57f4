"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole camera with per-pixel ray generation

Pixel coordinates are integers with (0, 0) at the top-left of the image.
"""

from .pinhole import Camera, ray_for_pixel, setup_camera

__all__ = [
    "Camera",
    "setup_camera",
    "ray_for_pixel",
]
