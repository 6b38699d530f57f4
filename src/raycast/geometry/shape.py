"""Shape hierarchy: transformed primitives and bounding-box groups.

Every shape owns an object-to-world ``transform`` and its cached
``inverse``. The shared operations are implemented once on ``Shape``:

- ``intersect`` moves the ray into object space and delegates to the
  variant's ``local_intersect``.
- ``normal_at`` moves the point into object space, asks the variant for its
  ``local_normal_at`` and maps the normal back with the inverse transpose.
- ``bounds`` is the variant's ``local_bounds`` pushed through the transform.

Variants only implement the local operations. Primitives (sphere, plane,
cube, triangle) run the same ``@ti.func`` algorithms the renderer uses,
dispatched on ``ShapeKind``. A ``Group`` holds an immutable tuple of
children and a bounding box computed once at construction; rays that miss
the box never visit the children.

Intersections carry the composite world-to-object matrix of the struck
primitive, so shading a hit inside nested transformed groups never needs to
walk back up the tree.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.core.transform import scaling
    >>> from src.raycast.geometry.shape import Group, Sphere
    >>> group = Group([Sphere(transform=scaling(2, 2, 2))])
    >>> [x.t for x in group.intersect((0, 0, -5), (0, 0, 1))]
    [3.0, 7.0]
"""


from abc import ABC, abstractmethod
from enum import IntEnum
from functools import reduce
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raycast.core.hits import Intersection, sort_intersections
from src.raycast.core.ray import Ray, make_ray, to_vec3
from src.raycast.core.transform import Matrix4, identity
from src.raycast.geometry.bounds import AABB, hit_aabb
from src.raycast.geometry.cube import local_intersect_cube, local_normal_cube
from src.raycast.geometry.plane import local_intersect_plane, local_normal_plane
from src.raycast.geometry.sphere import LocalHits, local_intersect_sphere, local_normal_sphere, no_hits
from src.raycast.geometry.triangle import local_intersect_triangle, local_normal_triangle
from src.raycast.materials.phong import Material

vec3 = tm.vec3

_ZERO = (0.0, 0.0, 0.0)


class ShapeKind(IntEnum):
    """Tags for device-side dispatch over shape variants."""

    GROUP = 0
    SPHERE = 1
    PLANE = 2
    CUBE = 3
    TRIANGLE = 4


# =============================================================================
# Device-side Dispatch
# =============================================================================


@ti.func
def local_intersect_kind(kind: ti.i32, ray: Ray, p1: vec3, e1: vec3, e2: vec3) -> LocalHits:
    """Intersect an object-space ray with the primitive identified by kind.

    Triangle vertex data is ignored for the other kinds. Groups never
    produce local hits.
    """
    result = no_hits()
    if kind == int(ShapeKind.SPHERE):
        result = local_intersect_sphere(ray)
    elif kind == int(ShapeKind.PLANE):
        result = local_intersect_plane(ray)
    elif kind == int(ShapeKind.CUBE):
        result = local_intersect_cube(ray)
    elif kind == int(ShapeKind.TRIANGLE):
        result = local_intersect_triangle(ray, p1, e1, e2)
    return result


@ti.func
def local_normal_kind(kind: ti.i32, point: vec3, face_normal: vec3) -> vec3:
    """Object-space normal of the primitive identified by kind."""
    result = vec3(0.0)
    if kind == int(ShapeKind.SPHERE):
        result = local_normal_sphere(point)
    elif kind == int(ShapeKind.PLANE):
        result = local_normal_plane(point)
    elif kind == int(ShapeKind.CUBE):
        result = local_normal_cube(point)
    elif kind == int(ShapeKind.TRIANGLE):
        result = local_normal_triangle(face_normal)
    return result


@ti.kernel
def _local_intersect_kernel(
    kind: ti.i32, origin: vec3, direction: vec3, p1: vec3, e1: vec3, e2: vec3
) -> vec3:
    ray = make_ray(origin, direction)
    hits = local_intersect_kind(kind, ray, p1, e1, e2)
    return vec3(ti.cast(hits.count, ti.f32), hits.t0, hits.t1)


@ti.kernel
def _local_normal_kernel(kind: ti.i32, point: vec3, face_normal: vec3) -> vec3:
    return local_normal_kind(kind, point, face_normal)


@ti.kernel
def _box_probe_kernel(origin: vec3, direction: vec3, bmin: vec3, bmax: vec3) -> ti.i32:
    return hit_aabb(make_ray(origin, direction), bmin, bmax)


# =============================================================================
# Host-side Shapes
# =============================================================================


def _as_point(values) -> npt.NDArray[np.float64]:
    return np.asarray(values, dtype=np.float64).reshape(3)


def _homogeneous(m: Matrix4, values, w: float) -> npt.NDArray[np.float64]:
    x, y, z = _as_point(values)
    return (m @ np.array([x, y, z, w], dtype=np.float64))[:3]


class Shape(ABC):
    """Base class for everything that can be placed in a world.

    Args:
        transform: Object-to-world 4x4 matrix. Defaults to identity.
        material: Surface material. Defaults to ``Material()``.

    Raises:
        ValueError: If the transform is not an invertible 4x4 matrix.
    """

    kind: Optional[ShapeKind] = None

    def __init__(self, transform=None, material: Optional[Material] = None) -> None:
        matrix = identity() if transform is None else np.array(transform, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Shape transform must be 4x4, got shape {matrix.shape}")
        try:
            inverse = np.linalg.inv(matrix)
        except np.linalg.LinAlgError as e:
            raise ValueError("Shape transform is not invertible") from e
        matrix.setflags(write=False)
        inverse.setflags(write=False)
        self._transform = matrix
        self._inverse = inverse
        self._material = material if material is not None else Material()

    @property
    def transform(self) -> Matrix4:
        """Object-to-world transform."""
        return self._transform

    @property
    def inverse(self) -> Matrix4:
        """World-to-object transform."""
        return self._inverse

    @property
    def material(self) -> Material:
        return self._material

    def intersect(self, origin, direction) -> List[Intersection]:
        """Intersect a ray given in the parent's space.

        Returns:
            Every intersection, including negative t, in ascending order of t
            for groups and in root order for primitives. Each intersection's
            ``world_to_object`` maps the caller's space into the struck
            primitive's object space.
        """
        local_origin = _homogeneous(self._inverse, origin, 1.0)
        local_direction = _homogeneous(self._inverse, direction, 0.0)
        result = []
        for x in self.local_intersect(local_origin, local_direction):
            inner = x.world_to_object if x.world_to_object is not None else identity()
            result.append(Intersection(x.t, x.object, inner @ self._inverse))
        return result

    def normal_at(self, point, world_to_object: Optional[Matrix4] = None) -> npt.NDArray[np.float64]:
        """Unit surface normal at a point given in the caller's space.

        Args:
            point: The surface point.
            world_to_object: Composite inverse recorded on the intersection
                when the shape sits inside groups. Defaults to this shape's
                own inverse.
        """
        m = self._inverse if world_to_object is None else np.asarray(world_to_object, dtype=np.float64)
        local_point = _homogeneous(m, point, 1.0)
        local_normal = self.local_normal_at(local_point)
        world_normal = _homogeneous(m.T, local_normal, 0.0)
        norm = np.linalg.norm(world_normal)
        if norm == 0.0:
            return world_normal
        return world_normal / norm

    def bounds(self) -> AABB:
        """Bounding box in the parent's space."""
        return self.local_bounds().transform(self._transform)

    @abstractmethod
    def local_intersect(self, origin, direction) -> List[Intersection]:
        """Intersect an object-space ray with this shape."""

    @abstractmethod
    def local_normal_at(self, point) -> npt.NDArray[np.float64]:
        """Object-space normal at an object-space point."""

    @abstractmethod
    def local_bounds(self) -> AABB:
        """Object-space bounding box."""


class Primitive(Shape):
    """A leaf shape whose math runs through the device dispatch functions."""

    def triangle_data(self) -> Tuple[tuple, tuple, tuple, tuple]:
        """Vertex data passed to the dispatch functions: (p1, e1, e2, normal)."""
        return _ZERO, _ZERO, _ZERO, _ZERO

    def local_intersect(self, origin, direction) -> List[Intersection]:
        p1, e1, e2, _ = self.triangle_data()
        packed = _local_intersect_kernel(
            int(self.kind), to_vec3(origin), to_vec3(direction), to_vec3(p1), to_vec3(e1), to_vec3(e2)
        )
        count = int(packed[0])
        roots = (float(packed[1]), float(packed[2]))
        return [Intersection(t, self) for t in roots[:count]]

    def local_normal_at(self, point) -> npt.NDArray[np.float64]:
        normal = self.triangle_data()[3]
        result = _local_normal_kernel(int(self.kind), to_vec3(point), to_vec3(normal))
        return np.array([result[0], result[1], result[2]], dtype=np.float64)


class Sphere(Primitive):
    """The unit sphere centred at the object-space origin."""

    kind = ShapeKind.SPHERE

    def local_bounds(self) -> AABB:
        return AABB((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))


class Plane(Primitive):
    """The object-space xz-plane."""

    kind = ShapeKind.PLANE

    def local_bounds(self) -> AABB:
        inf = float("inf")
        return AABB((-inf, 0.0, -inf), (inf, 0.0, inf))


class Cube(Primitive):
    """The axis-aligned cube spanning [-1, 1] on every axis."""

    kind = ShapeKind.CUBE

    def local_bounds(self) -> AABB:
        return AABB((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))


class Triangle(Primitive):
    """A flat triangle with a precomputed face normal.

    Args:
        p1: First vertex.
        p2: Second vertex.
        p3: Third vertex.
        transform: Object-to-world transform.
        material: Surface material.
    """

    kind = ShapeKind.TRIANGLE

    def __init__(self, p1, p2, p3, transform=None, material: Optional[Material] = None) -> None:
        super().__init__(transform=transform, material=material)
        self.p1 = _as_point(p1)
        self.p2 = _as_point(p2)
        self.p3 = _as_point(p3)
        self.e1 = self.p2 - self.p1
        self.e2 = self.p3 - self.p1
        normal = np.cross(self.e2, self.e1)
        norm = np.linalg.norm(normal)
        # Degenerate faces keep a zero normal and never intersect
        self.normal = normal / norm if norm > 0.0 else np.zeros(3, dtype=np.float64)

    def triangle_data(self):
        return self.p1, self.e1, self.e2, self.normal

    def local_bounds(self) -> AABB:
        return AABB.from_points([self.p1, self.p2, self.p3])


class Group(Shape):
    """A composite shape holding an immutable collection of children.

    The bounding box is the merge of every child's ``bounds()`` and is
    computed once here. ``local_intersect`` returns nothing, without
    visiting any child, when the ray misses it.

    Args:
        children: Child shapes. Each child's own transform is honoured.
        transform: Object-to-world transform of the whole group.
        material: Unused by groups; accepted for a uniform constructor.
    """

    kind = ShapeKind.GROUP

    def __init__(self, children: Iterable[Shape] = (), transform=None, material: Optional[Material] = None) -> None:
        super().__init__(transform=transform, material=material)
        self._children: Tuple[Shape, ...] = tuple(children)
        self._bounds = reduce(lambda acc, child: acc.merge(child.bounds()), self._children, AABB.empty())

    @property
    def children(self) -> Tuple[Shape, ...]:
        return self._children

    @property
    def is_empty(self) -> bool:
        return not self._children

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._children)

    def local_bounds(self) -> AABB:
        return self._bounds

    def local_intersect(self, origin, direction) -> List[Intersection]:
        box = self._bounds
        if box.is_empty:
            return []
        if not _box_probe_kernel(to_vec3(origin), to_vec3(direction), to_vec3(box.min), to_vec3(box.max)):
            return []
        xs = []
        for child in self._children:
            xs.extend(child.intersect(origin, direction))
        return sort_intersections(xs)

    def local_normal_at(self, point) -> npt.NDArray[np.float64]:
        # Groups are never struck directly
        return np.zeros(3, dtype=np.float64)
