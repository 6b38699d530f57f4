"""Axis-aligned bounding boxes for culling.

An AABB stores its minimum and maximum corners. Two special boxes matter:

- ``AABB.empty()``: min = +inf, max = -inf. It has no extent and is the
  identity element of ``merge``, so bounding boxes can be folded over any
  collection of shapes in any order.
- ``AABB.infinite()``: min = -inf, max = +inf. Used by unbounded shapes
  (planes); every ray overlaps it.

Boxes are built and merged on the host with NumPy. Inside kernels the box is
only ever used as a boolean predicate through ``hit_aabb``.

Example:
    >>> from src.raycast.geometry.bounds import AABB
    >>> a = AABB((-1, -1, -1), (1, 1, 1))
    >>> b = AABB((0, 0, 0), (3, 2, 1))
    >>> a.merge(b)
    AABB(min=(-1.0, -1.0, -1.0), max=(3.0, 2.0, 1.0))
"""


from itertools import product

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import EPSILON, Ray

vec3 = tm.vec3

INF = float("inf")


class AABB:
    """An axis-aligned bounding box.

    Instances are immutable; ``merge`` and ``transform`` return new boxes.

    Attributes:
        min: Minimum corner as a read-only float64 array of shape (3,).
        max: Maximum corner as a read-only float64 array of shape (3,).
    """

    __slots__ = ("min", "max")

    def __init__(self, min_corner, max_corner) -> None:
        lo = np.array(min_corner, dtype=np.float64).reshape(3)
        hi = np.array(max_corner, dtype=np.float64).reshape(3)
        lo.setflags(write=False)
        hi.setflags(write=False)
        self.min: npt.NDArray[np.float64] = lo
        self.max: npt.NDArray[np.float64] = hi

    @classmethod
    def empty(cls) -> "AABB":
        """Return the box with no extent (identity of ``merge``)."""
        return cls((INF, INF, INF), (-INF, -INF, -INF))

    @classmethod
    def infinite(cls) -> "AABB":
        """Return the box covering all of space."""
        return cls((-INF, -INF, -INF), (INF, INF, INF))

    @classmethod
    def from_points(cls, points) -> "AABB":
        """Return the tightest box around a collection of points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(pts) == 0:
            return cls.empty()
        return cls(pts.min(axis=0), pts.max(axis=0))

    @property
    def is_empty(self) -> bool:
        """True if the box has no extent on some axis."""
        return bool(np.any(self.min > self.max))

    @property
    def is_finite(self) -> bool:
        """True if both corners are finite."""
        return bool(np.all(np.isfinite(self.min)) and np.all(np.isfinite(self.max)))

    def merge(self, other: "AABB") -> "AABB":
        """Return the smallest box enclosing both boxes.

        Associative and commutative; ``AABB.empty()`` is the identity.
        """
        return AABB(np.minimum(self.min, other.min), np.maximum(self.max, other.max))

    def contains_point(self, point) -> bool:
        """True if the point lies inside or on the box."""
        p = np.asarray(point, dtype=np.float64)
        return bool(np.all(self.min <= p) and np.all(p <= self.max))

    def transform(self, matrix) -> "AABB":
        """Return the box enclosing this box after an affine transform.

        All eight corners are transformed and re-bounded. Boxes with an
        infinite extent stay infinite, and the empty box stays empty.

        Args:
            matrix: A 4x4 affine matrix.

        Returns:
            The axis-aligned bounds of the transformed box.
        """
        if self.is_empty:
            return AABB.empty()
        if not self.is_finite:
            return AABB.infinite()
        m = np.asarray(matrix, dtype=np.float64)
        corners = np.array(
            [(x, y, z, 1.0) for x, y, z in product(*zip(self.min, self.max))],
            dtype=np.float64,
        )
        transformed = (corners @ m.T)[:, :3]
        return AABB(transformed.min(axis=0), transformed.max(axis=0))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return bool(np.array_equal(self.min, other.min) and np.array_equal(self.max, other.max))

    def __hash__(self) -> int:
        return hash((tuple(self.min), tuple(self.max)))

    def __repr__(self) -> str:
        lo = tuple(float(c) for c in self.min)
        hi = tuple(float(c) for c in self.max)
        return f"AABB(min={lo}, max={hi})"


# =============================================================================
# Slab Test (Taichi-compatible)
# =============================================================================


@ti.func
def check_axis(origin: ti.f32, direction: ti.f32, axis_min: ti.f32, axis_max: ti.f32):
    """Compute the parametric interval where a ray lies between two planes.

    A direction component near zero means the ray is parallel to the slab:
    the interval is unbounded when the origin lies inside the slab and empty
    otherwise.

    Args:
        origin: Ray origin component on this axis.
        direction: Ray direction component on this axis.
        axis_min: Lower slab boundary.
        axis_max: Upper slab boundary.

    Returns:
        A tuple (tmin, tmax) with tmin <= tmax unless the interval is empty.
    """
    tmin = -INF
    tmax = INF
    if ti.abs(direction) >= EPSILON:
        tmin = (axis_min - origin) / direction
        tmax = (axis_max - origin) / direction
        if tmin > tmax:
            temp = tmin
            tmin = tmax
            tmax = temp
    elif origin < axis_min or origin > axis_max:
        tmin = INF
        tmax = -INF
    return tmin, tmax


@ti.func
def slab_interval(ray: Ray, bmin: vec3, bmax: vec3):
    """Intersect the three per-axis slab intervals of a box.

    Returns:
        A tuple (tmin, tmax); the ray misses the box when tmin > tmax.
    """
    xtmin, xtmax = check_axis(ray.origin.x, ray.direction.x, bmin.x, bmax.x)
    ytmin, ytmax = check_axis(ray.origin.y, ray.direction.y, bmin.y, bmax.y)
    ztmin, ztmax = check_axis(ray.origin.z, ray.direction.z, bmin.z, bmax.z)
    tmin = ti.max(ti.max(xtmin, ytmin), ztmin)
    tmax = ti.min(ti.min(xtmax, ytmax), ztmax)
    return tmin, tmax


@ti.func
def hit_aabb(ray: Ray, bmin: vec3, bmax: vec3) -> ti.i32:
    """Boolean ray/box overlap test used to cull whole groups.

    The test ignores the sign of t: a box behind the ray origin still counts
    as overlapping, which keeps culling conservative.

    Args:
        ray: The ray, in the same space as the box.
        bmin: Minimum corner of the box.
        bmax: Maximum corner of the box.

    Returns:
        1 if the ray's line passes through the box, 0 otherwise. An empty
        box never overlaps.
    """
    result = 0
    if bmin.x <= bmax.x and bmin.y <= bmax.y and bmin.z <= bmax.z:
        tmin, tmax = slab_interval(ray, bmin, bmax)
        if tmin <= tmax:
            result = 1
    return result
