"""Mesh-to-image rendering entry point.

``render`` turns a triangle mesh into encoded image bytes: the mesh becomes
one group of triangles sharing a single material, the group is placed in a
world with one point light, and a camera built from the look-at options
renders it. The raster is handed to the encoder only after every pixel is
finished.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.pipeline import render
    >>> from src.raycast.core.config import RenderOptions
    >>> from src.raycast.scene.stl import load_stl
    >>> data = render(load_stl("part.stl"), RenderOptions(image_format="png"))
"""

from __future__ import annotations

import logging
from typing import Optional

from src.raycast.camera.pinhole import Camera
from src.raycast.core.config import RenderOptions
from src.raycast.core.transform import view_transform
from src.raycast.materials.phong import Material, PointLight
from src.raycast.preview.export import encode_image
from src.raycast.scene.mesh import group_from_mesh
from src.raycast.scene.stl import load_stl
from src.raycast.scene.world import World

logger = logging.getLogger(__name__)


def build_world(mesh, options: RenderOptions) -> World:
    """Wrap a mesh into a single-group world lit per the options."""
    group = group_from_mesh(mesh, Material(color=options.material_color))
    light = PointLight(options.light_position, options.light_intensity)
    return World([group], light)


def build_camera(options: RenderOptions) -> Camera:
    """Camera with the option's size, field of view and look-at transform."""
    transform = view_transform(options.from_point, options.to_point, options.up)
    return Camera(options.width_pixels, options.height_pixels, options.fov_radians, transform)


def render(mesh, options: Optional[RenderOptions] = None) -> bytes:
    """Render a mesh and encode the image.

    Args:
        mesh: An object with ``vertices()``/``triangles()`` accessors, or raw
            STL bytes.
        options: Render options. Defaults to ``RenderOptions()``.

    Returns:
        The encoded image.

    Raises:
        UnsupportedFormatError: If the image format has no encoder.
        EncodingError: If encoding fails.
        ValueError: If the options or the STL data are invalid.
    """
    options = options if options is not None else RenderOptions()
    if isinstance(mesh, (bytes, bytearray)):
        mesh = load_stl(mesh)

    world = build_world(mesh, options)
    camera = build_camera(options)
    logger.info(
        "Rendering mesh with %d triangles at %dx%d as %s",
        len(world.shapes[0]),
        options.width_pixels,
        options.height_pixels,
        options.image_format,
    )

    canvas = camera.render(world, parallel=options.parallel)
    return encode_image(canvas, options.image_format)
