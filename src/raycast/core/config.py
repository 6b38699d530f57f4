"""Render configuration.

``RenderOptions`` collects everything ``render`` needs besides the mesh.
Defaults frame a mesh lying below the origin from slightly above and behind.

Example:
    >>> from src.raycast.core.config import RenderOptions
    >>> options = RenderOptions(width_pixels=200, height_pixels=100, image_format="png")
    >>> RenderOptions.from_dict(options.to_dict()) == options
    True
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Tuple

from src.raycast.preview.export import normalize_format

Vector = Tuple[float, float, float]

# Largest image the render target holds
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Fields holding 3-vectors; converted to float tuples on construction
_VECTOR_FIELDS = ("from_point", "to_point", "up", "material_color", "light_position", "light_intensity")


@dataclass(frozen=True)
class RenderOptions:
    """Options for rendering a mesh.

    Attributes:
        width_pixels: Output image width.
        height_pixels: Output image height.
        from_point: Camera position.
        to_point: Point the camera looks at.
        up: Approximate up direction of the camera.
        fov_radians: Field of view of the wider image axis.
        material_color: Base color of every triangle.
        image_format: Output encoding ("png", "jpeg" or "ppm").
        light_position: Position of the point light.
        light_intensity: Color of the point light.
        parallel: Render pixels in parallel (True) or in order (False).

    Raises:
        ValueError: If a value is out of range.
        UnsupportedFormatError: If ``image_format`` has no encoder.
    """

    width_pixels: int = 400
    height_pixels: int = 400
    from_point: Vector = (0.0, -2.5, -10.0)
    to_point: Vector = (0.0, -5.0, 0.0)
    up: Vector = (0.0, 1.0, 0.0)
    fov_radians: float = math.pi / 2
    material_color: Vector = (0.0196, 0.65, 0.874)
    image_format: str = "jpeg"
    light_position: Vector = (-10.0, -10.0, -5.0)
    light_intensity: Vector = (1.0, 1.0, 1.0)
    parallel: bool = True

    def __post_init__(self) -> None:
        for name in _VECTOR_FIELDS:
            value = getattr(self, name)
            try:
                x, y, z = (float(c) for c in value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"{name} must be three numbers, got {value!r}") from e
            object.__setattr__(self, name, (x, y, z))

        if not 0 < self.width_pixels <= MAX_IMAGE_WIDTH:
            raise ValueError(f"width_pixels must be in [1, {MAX_IMAGE_WIDTH}], got {self.width_pixels}")
        if not 0 < self.height_pixels <= MAX_IMAGE_HEIGHT:
            raise ValueError(f"height_pixels must be in [1, {MAX_IMAGE_HEIGHT}], got {self.height_pixels}")
        if not 0.0 < self.fov_radians < math.pi:
            raise ValueError(f"fov_radians must be in (0, pi), got {self.fov_radians}")

        object.__setattr__(self, "image_format", normalize_format(self.image_format))

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> RenderOptions:
        """Build options from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form of the options."""
        return asdict(self)
