"""Geometry module for shapes and intersection algorithms.

Components:
    sphere: Unit sphere and the LocalHits record shared by all primitives
    plane: Infinite xz-plane
    cube: Axis-aligned unit cube (slab method)
    triangle: Flat triangle (Moller-Trumbore)
    bounds: Axis-aligned bounding boxes and the ray/box predicate
    shape: Host-side shape hierarchy and device-side kind dispatch

Primitives are defined in object space; shapes carry the transforms that
place them in the world.
"""

from .bounds import AABB, check_axis, hit_aabb
from .cube import local_intersect_cube, local_normal_cube
from .plane import local_intersect_plane, local_normal_plane
from .shape import (
    Cube,
    Group,
    Plane,
    Primitive,
    Shape,
    ShapeKind,
    Sphere,
    Triangle,
    local_intersect_kind,
    local_normal_kind,
)
from .sphere import LocalHits, local_intersect_sphere, local_normal_sphere
from .triangle import local_intersect_triangle, local_normal_triangle

__all__ = [
    # Local intersections
    "LocalHits",
    "local_intersect_sphere",
    "local_normal_sphere",
    "local_intersect_plane",
    "local_normal_plane",
    "local_intersect_cube",
    "local_normal_cube",
    "local_intersect_triangle",
    "local_normal_triangle",
    # Bounding boxes
    "AABB",
    "check_axis",
    "hit_aabb",
    # Shapes
    "Shape",
    "Primitive",
    "ShapeKind",
    "Sphere",
    "Plane",
    "Cube",
    "Triangle",
    "Group",
    "local_intersect_kind",
    "local_normal_kind",
]
