"""Unit sphere primitive with ray-sphere intersection.

The sphere is always the unit sphere centred at the object-space origin;
position and size come from the owning shape's transform. The intersection
solves the quadratic

    |O + t * D|^2 = 1

and returns both roots, including negative ones (the ray origin may be
inside or in front of the sphere). ``t0 <= t1`` holds by construction
because the quadratic coefficient ``a = D . D`` is positive.

This module also defines ``LocalHits``, the fixed-size record every
primitive returns from its local intersection routine.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.geometry.sphere import local_intersect_sphere
    >>> # Use local_intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import Ray

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class LocalHits:
    """Object-space intersections of a ray with one primitive.

    Attributes:
        count: Number of valid roots (0, 1 or 2).
        t0: First root. Only valid if count >= 1.
        t1: Second root (t1 >= t0 for two-root primitives). Only valid if
            count == 2.
    """

    count: ti.i32
    t0: ti.f32
    t1: ti.f32


@ti.func
def no_hits() -> LocalHits:
    """Create a LocalHits record with no intersections."""
    return LocalHits(count=0, t0=0.0, t1=0.0)


@ti.func
def local_intersect_sphere(ray: Ray) -> LocalHits:
    """Intersect an object-space ray with the unit sphere.

    Args:
        ray: The ray in the sphere's object space.

    Returns:
        Two roots when the discriminant is non-negative (a tangent ray
        yields two equal roots), otherwise no hits.
    """
    # Vector from sphere center (the origin) to ray origin
    sphere_to_ray = ray.origin

    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(ray.direction, sphere_to_ray)
    c = tm.dot(sphere_to_ray, sphere_to_ray) - 1.0
    discriminant = b * b - 4.0 * a * c

    result = no_hits()
    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        result = LocalHits(
            count=2,
            t0=(-b - sqrt_d) / (2.0 * a),
            t1=(-b + sqrt_d) / (2.0 * a),
        )
    return result


@ti.func
def local_normal_sphere(point: vec3) -> vec3:
    """Outward normal of the unit sphere: the point itself."""
    return point
