"""Whitted-style direct lighting integrator.

Each camera ray is traced once: the nearest visible surface is found, the
shading inputs are prepared and the surface is lit by the single point light
with the Phong model. A shadow ray from the over-point toward the light
decides whether diffuse and specular contribute. Rays that hit nothing
return black.

Pixels are independent. The render kernel maps over every (x, y) with
Taichi's parallel outermost loop, or, for the serial mode, the same loop
with ``ti.loop_config(serialize=True)``. The scene and camera fields are only
read while the kernel runs; the raster is copied back to the host after the
kernel returns.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.camera.pinhole import Camera
    >>> from src.raycast.core.integrator import render
    >>> from src.raycast.core.transform import view_transform
    >>> from src.raycast.scene.world import default_world
    >>>
    >>> camera = Camera(11, 11, math.pi / 2, view_transform((0, 0, -5), (0, 0, 0), (0, 1, 0)))
    >>> canvas = render(camera, default_world())
    >>> canvas.pixel_at(5, 5)  # ~(0.38066, 0.47583, 0.2855)
"""


import logging
import time
from typing import TYPE_CHECKING, Tuple

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raycast.camera.pinhole import Camera, ray_for_pixel, setup_camera
from src.raycast.core.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from src.raycast.core.ray import Ray, make_ray, to_vec3
from src.raycast.materials.phong import PointLight, lighting
from src.raycast.preview.canvas import Canvas
from src.raycast.scene.intersection import Computations, get_arena

if TYPE_CHECKING:
    from src.raycast.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Background color for rays that hit nothing
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)

# =============================================================================
# Light Source Configuration
# =============================================================================

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_intensity = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_light(light: PointLight) -> None:
    """Configure the point light used by shading kernels.

    Args:
        light: The scene's light source.
    """
    _light_position[None] = list(light.position)
    _light_intensity[None] = list(light.intensity)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [x, y] (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    _image_width[None] = width
    _image_height[None] = height
    _color_buffer.fill(0.0)


def get_image_dimensions() -> Tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


# =============================================================================
# Shading
# =============================================================================


@ti.func
def is_shadowed(arena: ti.template(), point: vec3) -> ti.i32:
    """Test whether the light is occluded from a point.

    The shadow ray runs from the point toward the light; anything struck
    with 0 <= t < distance-to-light blocks it.

    Returns:
        1 if the point is in shadow, 0 otherwise.
    """
    v = _light_position[None] - point
    distance = tm.length(v)
    ray = make_ray(point, tm.normalize(v))
    return arena.intersect_any(ray, distance)


@ti.func
def shade_hit(arena: ti.template(), comps: Computations) -> vec3:
    """Light a prepared hit with the scene's point light."""
    shadowed = is_shadowed(arena, comps.over_point)
    return lighting(
        arena.material_at(comps.node),
        _light_position[None],
        _light_intensity[None],
        comps.over_point,
        comps.eyev,
        comps.normalv,
        shadowed,
    )


@ti.func
def color_at(arena: ti.template(), ray: Ray) -> vec3:
    """Color seen along a world-space ray.

    Returns:
        The shaded color of the nearest visible surface, or the background
        color if the ray hits nothing.
    """
    color = BACKGROUND_COLOR
    hit = arena.intersect(ray)
    if hit.hit == 1:
        comps = arena.prepare_computations(hit, ray)
        color = shade_hit(arena, comps)
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _render_pixel(arena: ti.template(), px: ti.i32, py: ti.i32):
    _color_buffer[px, py] = color_at(arena, ray_for_pixel(px, py))


@ti.kernel
def _render_parallel(arena: ti.template(), width: ti.i32, height: ti.i32):
    """Shade every pixel, parallelized over the outermost loop."""
    for px, py in ti.ndrange(width, height):
        _render_pixel(arena, px, py)


@ti.kernel
def _render_serial(arena: ti.template(), width: ti.i32, height: ti.i32):
    """Shade every pixel in order on a single thread."""
    ti.loop_config(serialize=True)
    for px, py in ti.ndrange(width, height):
        _render_pixel(arena, px, py)


@ti.kernel
def _color_at_kernel(arena: ti.template(), origin: vec3, direction: vec3) -> vec3:
    return color_at(arena, make_ray(origin, direction))


@ti.kernel
def _is_shadowed_kernel(arena: ti.template(), point: vec3) -> ti.i32:
    return is_shadowed(arena, point)


# =============================================================================
# Public Rendering API
# =============================================================================


def color_at_ray(origin, direction) -> Tuple[float, float, float]:
    """Trace one ray through the loaded scene.

    Returns:
        The color as an (r, g, b) tuple.
    """
    color = _color_at_kernel(get_arena(), to_vec3(origin), to_vec3(direction))
    return (float(color[0]), float(color[1]), float(color[2]))


def is_shadowed_point(point) -> bool:
    """Test a point against the loaded scene and light."""
    return bool(_is_shadowed_kernel(get_arena(), to_vec3(point)))


def get_image_numpy() -> np.ndarray:
    """Copy the active region of the color buffer to the host.

    Returns:
        Array of shape (height, width, 3), row 0 at the top of the image.
    """
    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    # Transpose from (width, height, 3) to (height, width, 3)
    return np.ascontiguousarray(np.transpose(full_image[:width, :height, :], (1, 0, 2)))


def render(camera: Camera, world: "World", parallel: bool = True) -> Canvas:
    """Render a world through a camera.

    Args:
        camera: The camera defining image size and view.
        world: The scene to render.
        parallel: Run pixels in parallel (default) or strictly in order.
            Both modes produce identical pixels.

    Returns:
        The rendered canvas.

    Raises:
        ValueError: If the image is larger than the render target.
    """
    setup_render_target(camera.hsize, camera.vsize)
    node_count = world.load()
    setup_camera(camera)
    arena = get_arena()

    mode = "parallel" if parallel else "serial"
    logger.info("Rendering %dx%d image of %d nodes (%s)", camera.hsize, camera.vsize, node_count, mode)

    start = time.perf_counter()
    if parallel:
        _render_parallel(arena, camera.hsize, camera.vsize)
    else:
        _render_serial(arena, camera.hsize, camera.vsize)
    ti.sync()
    elapsed = time.perf_counter() - start
    logger.debug("Render kernel finished in %.3fs", elapsed)

    return Canvas.from_array(get_image_numpy())
