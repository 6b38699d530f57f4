"""Ray data structure and vector utilities for ray casting.

This module provides the Ray dataclass used inside Taichi kernels together
with the small set of vector and matrix helpers that every intersection and
shading routine shares. Rays are immutable values: moving a ray into the
object space of a shape produces a new ray through ``transform_ray``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def sample() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import numpy as np
import taichi as ti
import taichi.math as tm

# Type aliases for vectors and matrices using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4

# Tolerance for parallel/degenerate tests and the shadow-bias offset
EPSILON = 1e-5


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Callers normalize
            directions derived from pixels or light vectors; object-space
            rays produced by ``transform_ray`` are left unnormalized so that
            ``t`` keeps the same meaning in both spaces.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def transform_point(m: mat4, p: vec3) -> vec3:
    """Apply an affine 4x4 matrix to a point (w = 1)."""
    r = m @ vec4(p.x, p.y, p.z, 1.0)
    return vec3(r.x, r.y, r.z)


@ti.func
def transform_vector(m: mat4, v: vec3) -> vec3:
    """Apply an affine 4x4 matrix to a direction (w = 0).

    Translation does not affect directions.
    """
    r = m @ vec4(v.x, v.y, v.z, 0.0)
    return vec3(r.x, r.y, r.z)


@ti.func
def transform_ray(ray: Ray, m: mat4) -> Ray:
    """Transform a ray by a 4x4 matrix.

    The origin is transformed as a point and the direction as a vector.
    The direction is deliberately not renormalized.

    Args:
        ray: The ray to transform.
        m: The transformation matrix (typically a shape's inverse transform).

    Returns:
        A new ray in the target space.
    """
    return Ray(origin=transform_point(m, ray.origin), direction=transform_vector(m, ray.direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes ``incident - 2 * (incident . normal) * normal``. The normal
    should be unit length for correct results.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Host-side Helpers
# =============================================================================


def position(origin, direction, t: float) -> np.ndarray:
    """Compute origin + t * direction on the host.

    Args:
        origin: Ray origin as any 3-sequence.
        direction: Ray direction as any 3-sequence.
        t: Ray parameter.

    Returns:
        The point as a float64 array of shape (3,).
    """
    return np.asarray(origin, dtype=np.float64) + t * np.asarray(direction, dtype=np.float64)


def to_vec3(values) -> vec3:
    """Convert any 3-sequence into a Taichi vec3 for kernel arguments."""
    x, y, z = (float(c) for c in values)
    return vec3(x, y, z)
