"""Axis-aligned cube primitive.

The cube occupies [-1, 1] on every object-space axis. Intersection uses the
slab method shared with bounding boxes; the normal is taken from the face
whose axis has the largest absolute coordinate.
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import Ray
from src.raycast.geometry.bounds import slab_interval
from src.raycast.geometry.sphere import LocalHits, no_hits

vec3 = tm.vec3


@ti.func
def local_intersect_cube(ray: Ray) -> LocalHits:
    """Intersect an object-space ray with the unit cube.

    Args:
        ray: The ray in the cube's object space.

    Returns:
        Two hits (entry tmin and exit tmax) when the slab intervals overlap,
        otherwise no hits. A ray starting inside yields a negative tmin.
    """
    tmin, tmax = slab_interval(ray, vec3(-1.0, -1.0, -1.0), vec3(1.0, 1.0, 1.0))
    result = no_hits()
    if tmin <= tmax:
        result = LocalHits(count=2, t0=tmin, t1=tmax)
    return result


@ti.func
def local_normal_cube(point: vec3) -> vec3:
    """Face normal of the cube at an object-space surface point.

    Ties (edges and corners) resolve to x, then y, then z.
    """
    a = ti.abs(point)
    maxc = ti.max(ti.max(a.x, a.y), a.z)
    normal = vec3(0.0, 0.0, point.z)
    if maxc == a.x:
        normal = vec3(point.x, 0.0, 0.0)
    elif maxc == a.y:
        normal = vec3(0.0, point.y, 0.0)
    return normal
