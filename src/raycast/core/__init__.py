"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities for kernels
    transform: Host-side 4x4 affine transform constructors
    hits: Host-side intersection records, hit selection and shading inputs
    integrator: Direct lighting, shadow rays and the render kernels
    config: Render options

All per-pixel work runs in Taichi kernels; host-side helpers use NumPy.
"""

from .hits import (
    Intersection,
    PreparedComputations,
    hit,
    prepare_computations,
    sort_intersections,
)
from .ray import (
    EPSILON,
    Ray,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    position,
    ray_at,
    reflect,
    transform_ray,
    vec3,
)
from .transform import (
    identity,
    rotation_x,
    rotation_y,
    rotation_z,
    scaling,
    shearing,
    translation,
    view_transform,
)

# Note: integrator and config are NOT imported here to avoid circular imports.
# Import directly from src.raycast.core.integrator or src.raycast.core.config.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "transform_ray",
    "position",
    "vec3",
    "EPSILON",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "identity",
    "translation",
    "scaling",
    "rotation_x",
    "rotation_y",
    "rotation_z",
    "shearing",
    "view_transform",
    "Intersection",
    "hit",
    "sort_intersections",
    "PreparedComputations",
    "prepare_computations",
]
