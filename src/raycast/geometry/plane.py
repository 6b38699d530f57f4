"""Infinite plane primitive.

In object space the plane is the xz-plane (y = 0) with normal +y. Rays whose
direction has (almost) no y component are parallel to the plane and never
intersect it, including rays that lie inside the plane.
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import EPSILON, Ray
from src.raycast.geometry.sphere import LocalHits, no_hits

vec3 = tm.vec3


@ti.func
def local_intersect_plane(ray: Ray) -> LocalHits:
    """Intersect an object-space ray with the xz-plane.

    Args:
        ray: The ray in the plane's object space.

    Returns:
        One hit at ``t = -origin.y / direction.y``, or no hits when the ray
        is parallel to the plane.
    """
    result = no_hits()
    if ti.abs(ray.direction.y) >= EPSILON:
        result = LocalHits(count=1, t0=-ray.origin.y / ray.direction.y, t1=0.0)
    return result


@ti.func
def local_normal_plane(point: vec3) -> vec3:
    """The plane's normal is +y everywhere."""
    return vec3(0.0, 1.0, 0.0)
