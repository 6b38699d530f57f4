"""Pinhole camera model for per-pixel ray generation.

The camera looks down its local -z axis at a virtual screen one unit away.
Its ``transform`` is the world-to-camera (view) matrix, usually built with
``view_transform``; rays are produced in world space by pushing the screen
point and the camera origin through the transform's inverse.

The screen size follows from the field of view and the aspect ratio:

    half_view = tan(field_of_view / 2)
    aspect >= 1:  half_width = half_view,          half_height = half_view / aspect
    aspect <  1:  half_width = half_view * aspect, half_height = half_view
    pixel_size = 2 * half_width / hsize

so pixels are always square. These constants are derived once when the
camera is built and uploaded to fields by ``setup_camera``.

Pixel (0, 0) is the top-left corner of the image.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.camera.pinhole import Camera
    >>> camera = Camera(hsize=201, vsize=101, field_of_view=math.pi / 2)
    >>> origin, direction = camera.ray_for_pixel(100, 50)  # direction ~ (0, 0, -1)
"""


import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Tuple

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import Ray, make_ray, transform_point, vec3
from src.raycast.core.transform import identity

if TYPE_CHECKING:
    from src.raycast.preview.canvas import Canvas
    from src.raycast.scene.world import World

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(eq=False)
class Camera:
    """A pinhole camera.

    Attributes:
        hsize: Horizontal size of the image in pixels.
        vsize: Vertical size of the image in pixels.
        field_of_view: Angle covered by the wider image axis, in radians.
        transform: World-to-camera 4x4 matrix. Defaults to identity.
        half_width: Half the screen width at z = -1 (derived).
        half_height: Half the screen height at z = -1 (derived).
        pixel_size: Size of one pixel on the screen (derived).

    Raises:
        ValueError: If a dimension is not positive, the field of view is not
            in (0, pi), or the transform is not invertible.
    """

    hsize: int
    vsize: int
    field_of_view: float
    transform: npt.NDArray[np.float64] = field(default_factory=identity)
    half_width: float = field(init=False)
    half_height: float = field(init=False)
    pixel_size: float = field(init=False)

    def __post_init__(self) -> None:
        if self.hsize <= 0 or self.vsize <= 0:
            raise ValueError(f"Camera dimensions must be positive, got {self.hsize}x{self.vsize}")
        if not 0.0 < self.field_of_view < math.pi:
            raise ValueError(f"Field of view must be in (0, pi), got {self.field_of_view}")

        self.transform = np.array(self.transform, dtype=np.float64)
        try:
            self._inverse = np.linalg.inv(self.transform)
        except np.linalg.LinAlgError as e:
            raise ValueError("Camera transform is not invertible") from e

        half_view = math.tan(self.field_of_view / 2.0)
        aspect = self.hsize / self.vsize
        if aspect >= 1.0:
            self.half_width = half_view
            self.half_height = half_view / aspect
        else:
            self.half_width = half_view * aspect
            self.half_height = half_view
        self.pixel_size = (self.half_width * 2.0) / self.hsize

    @property
    def inverse(self) -> npt.NDArray[np.float64]:
        """Camera-to-world transform."""
        return self._inverse

    def ray_for_pixel(self, px: int, py: int) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        """Compute the world-space ray through the center of a pixel.

        Uploads this camera and runs the kernel-side ``ray_for_pixel``.

        Returns:
            A tuple (origin, direction) of float triples. The direction is
            unit length.
        """
        setup_camera(self)
        rows = _ray_for_pixel_kernel(px, py)
        origin = (float(rows[0, 0]), float(rows[0, 1]), float(rows[0, 2]))
        direction = (float(rows[1, 0]), float(rows[1, 1]), float(rows[1, 2]))
        return origin, direction

    def render(self, world: "World", parallel: bool = True) -> "Canvas":
        """Render a world through this camera.

        Args:
            world: The scene to render.
            parallel: Run pixels in parallel (default) or strictly in order.
                Both produce identical pixels.

        Returns:
            A canvas of size hsize x vsize.
        """
        from src.raycast.core.integrator import render

        return render(self, world, parallel=parallel)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera-to-world transform
_camera_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())

# Screen constants derived from field of view and aspect ratio
_half_width = ti.field(dtype=ti.f32, shape=())
_half_height = ti.field(dtype=ti.f32, shape=())
_pixel_size = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload camera state to the fields read by ``ray_for_pixel``.

    Args:
        camera: The camera to render through.
    """
    _camera_inverse.from_numpy(camera.inverse.astype(np.float32))
    _half_width[None] = camera.half_width
    _half_height[None] = camera.half_height
    _pixel_size[None] = camera.pixel_size


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def ray_for_pixel(px: ti.i32, py: ti.i32) -> Ray:
    """Generate the world-space ray through the center of pixel (px, py).

    Args:
        px: Pixel column (0 = left).
        py: Pixel row (0 = top).

    Returns:
        A ray starting at the camera position with a unit direction.
    """
    # Offset from the screen edge to the pixel's center
    xoffset = (ti.cast(px, ti.f32) + 0.5) * _pixel_size[None]
    yoffset = (ti.cast(py, ti.f32) + 0.5) * _pixel_size[None]

    # The camera looks toward -z, so +x is to the left
    world_x = _half_width[None] - xoffset
    world_y = _half_height[None] - yoffset

    inv = _camera_inverse[None]
    pixel = transform_point(inv, vec3(world_x, world_y, -1.0))
    origin = transform_point(inv, vec3(0.0, 0.0, 0.0))
    direction = tm.normalize(pixel - origin)

    return make_ray(origin, direction)


@ti.kernel
def _ray_for_pixel_kernel(px: ti.i32, py: ti.i32) -> ti.types.matrix(2, 3, ti.f32):
    ray = ray_for_pixel(px, py)
    return ti.Matrix.rows([ray.origin, ray.direction])
