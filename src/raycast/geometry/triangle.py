"""Triangle primitive with Moller-Trumbore intersection.

Triangles are the building block of mesh scenes. Edge vectors and the face
normal are precomputed on the host when the shape is built:

    e1 = p2 - p1
    e2 = p3 - p1
    normal = normalize(e2 x e1)

The normal is constant across the face. Degenerate triangles (zero-length
edges) have a zero normal and a zero determinant, so they never intersect.

Example:
    >>> from src.raycast.geometry.triangle import local_intersect_triangle
    >>> # hits = local_intersect_triangle(ray, p1, e1, e2) inside a kernel
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import EPSILON, Ray
from src.raycast.geometry.sphere import LocalHits, no_hits

vec3 = tm.vec3


@ti.func
def local_intersect_triangle(ray: Ray, p1: vec3, e1: vec3, e2: vec3) -> LocalHits:
    """Intersect an object-space ray with a triangle.

    Args:
        ray: The ray in the triangle's object space.
        p1: First vertex.
        e1: Edge p2 - p1.
        e2: Edge p3 - p1.

    Returns:
        One hit when the ray crosses the triangle's interior or edges,
        otherwise no hits (including rays parallel to the face).
    """
    dir_cross_e2 = tm.cross(ray.direction, e2)
    det = tm.dot(e1, dir_cross_e2)

    result = no_hits()
    if ti.abs(det) >= EPSILON:
        f = 1.0 / det
        p1_to_origin = ray.origin - p1
        u = f * tm.dot(p1_to_origin, dir_cross_e2)

        if u >= 0.0 and u <= 1.0:
            origin_cross_e1 = tm.cross(p1_to_origin, e1)
            v = f * tm.dot(ray.direction, origin_cross_e1)

            if v >= 0.0 and u + v <= 1.0:
                t = f * tm.dot(e2, origin_cross_e1)
                result = LocalHits(count=1, t0=t, t1=0.0)
    return result


@ti.func
def local_normal_triangle(face_normal: vec3) -> vec3:
    """The triangle's normal is its precomputed face normal."""
    return face_normal
