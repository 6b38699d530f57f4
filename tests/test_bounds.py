"""Unit tests for axis-aligned bounding boxes.

Tests cover:
- The empty and infinite boxes
- Merging (identity, commutativity, associativity)
- Transforming boxes, including the special boxes
- Shape and group bounds
- The kernel-side ray/box predicate
"""

import math

import numpy as np
import pytest
import taichi as ti


def _random_box(rng):
    a = rng.uniform(-10.0, 10.0, 3)
    b = rng.uniform(-10.0, 10.0, 3)
    from src.raycast.geometry.bounds import AABB

    return AABB(np.minimum(a, b), np.maximum(a, b))


class TestAABB:
    """Tests for host-side box construction and merging."""

    def test_empty_box(self):
        from src.raycast.geometry.bounds import AABB

        box = AABB.empty()
        assert box.is_empty
        assert np.all(np.isposinf(box.min))
        assert np.all(np.isneginf(box.max))

    def test_infinite_box(self):
        from src.raycast.geometry.bounds import AABB

        box = AABB.infinite()
        assert not box.is_empty
        assert not box.is_finite
        assert box.contains_point((1e30, -1e30, 0.0))

    def test_from_points(self):
        from src.raycast.geometry.bounds import AABB

        box = AABB.from_points([(-5.0, 2.0, 0.0), (7.0, 0.0, -3.0), (0.0, 3.0, 1.0)])
        assert np.array_equal(box.min, (-5.0, 0.0, -3.0))
        assert np.array_equal(box.max, (7.0, 3.0, 1.0))
        assert AABB.from_points([]).is_empty

    def test_merge(self):
        from src.raycast.geometry.bounds import AABB

        a = AABB((-5.0, -2.0, 0.0), (7.0, 4.0, 4.0))
        b = AABB((8.0, -7.0, -2.0), (14.0, 2.0, 8.0))
        merged = a.merge(b)
        assert merged == AABB((-5.0, -7.0, -2.0), (14.0, 4.0, 8.0))

    def test_empty_is_merge_identity(self):
        from src.raycast.geometry.bounds import AABB

        rng = np.random.default_rng(1)
        for _ in range(20):
            box = _random_box(rng)
            assert AABB.empty().merge(box) == box
            assert box.merge(AABB.empty()) == box

    def test_merge_is_commutative_and_associative(self):
        rng = np.random.default_rng(2)
        for _ in range(20):
            a, b, c = _random_box(rng), _random_box(rng), _random_box(rng)
            assert a.merge(b) == b.merge(a)
            assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_contains_point(self):
        from src.raycast.geometry.bounds import AABB

        box = AABB((5.0, -2.0, 0.0), (11.0, 4.0, 7.0))
        assert box.contains_point((5.0, -2.0, 0.0))
        assert box.contains_point((8.0, 1.0, 3.0))
        assert not box.contains_point((3.0, 0.0, 3.0))
        assert not box.contains_point((8.0, 1.0, 8.0))

    def test_boxes_are_immutable(self):
        from src.raycast.geometry.bounds import AABB

        box = AABB((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
        with pytest.raises(ValueError):
            box.min[0] = -1.0


class TestTransformBounds:
    """Tests for pushing boxes through transforms."""

    def test_rotated_box(self):
        from src.raycast.core.transform import rotation_x, rotation_y
        from src.raycast.geometry.bounds import AABB

        box = AABB((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))
        result = box.transform(rotation_x(math.pi / 4) @ rotation_y(math.pi / 4))
        assert np.allclose(result.min, (-1.41421, -1.70711, -1.70711), atol=1e-5)
        assert np.allclose(result.max, (1.41421, 1.70711, 1.70711), atol=1e-5)

    def test_empty_stays_empty(self):
        from src.raycast.core.transform import translation
        from src.raycast.geometry.bounds import AABB

        assert AABB.empty().transform(translation(1.0, 2.0, 3.0)).is_empty

    def test_infinite_stays_infinite(self):
        from src.raycast.core.transform import rotation_z
        from src.raycast.geometry.bounds import AABB

        assert AABB.infinite().transform(rotation_z(0.3)) == AABB.infinite()

    def test_shape_bounds_in_parent_space(self):
        from src.raycast.core.transform import scaling, translation
        from src.raycast.geometry.shape import Sphere

        s = Sphere(transform=translation(1.0, -3.0, 5.0) @ scaling(0.5, 2.0, 4.0))
        box = s.bounds()
        assert np.allclose(box.min, (0.5, -5.0, 1.0))
        assert np.allclose(box.max, (1.5, -1.0, 9.0))

    def test_group_bounds_cover_all_children(self):
        from src.raycast.core.transform import scaling, translation
        from src.raycast.geometry.shape import Cube, Group, Sphere

        s = Sphere(transform=translation(2.0, 5.0, -3.0) @ scaling(2.0, 2.0, 2.0))
        c = Cube(transform=translation(-4.0, 0.0, 0.0))
        box = Group([s, c]).local_bounds()
        assert np.allclose(box.min, (-5.0, -1.0, -5.0))
        assert np.allclose(box.max, (4.0, 7.0, 1.0))

    def test_empty_group_has_empty_bounds(self):
        from src.raycast.geometry.shape import Group

        assert Group().local_bounds().is_empty


class TestHitAABB:
    """Tests for the kernel-side box predicate."""

    @staticmethod
    def _probe(origin, direction, bmin, bmax):
        from src.raycast.core.ray import Ray, vec3
        from src.raycast.geometry.bounds import hit_aabb

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(o: vec3, d: vec3, lo: vec3, hi: vec3):
            result[None] = hit_aabb(Ray(origin=o, direction=d), lo, hi)

        test_kernel(vec3(*origin), vec3(*direction), vec3(*bmin), vec3(*bmax))
        return result[None]

    def test_ray_through_box(self):
        assert self._probe((5.0, 0.5, 0.0), (-1.0, 0.0, 0.0), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0)) == 1

    def test_ray_misses_box(self):
        hit = self._probe((-2.0, 0.0, 0.0), (0.2673, 0.5345, 0.8018), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))
        assert hit == 0

    def test_parallel_ray_outside_slab(self):
        assert self._probe((0.0, 5.0, -5.0), (0.0, 0.0, 1.0), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0)) == 0

    def test_box_behind_ray_still_overlaps(self):
        assert self._probe((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0)) == 1

    def test_empty_box_never_overlaps(self):
        inf = float("inf")
        assert self._probe((0.0, 0.0, -5.0), (0.0, 0.0, 1.0), (inf, inf, inf), (-inf, -inf, -inf)) == 0

    def test_infinite_box_always_overlaps(self):
        inf = float("inf")
        lo, hi = (-inf, -inf, -inf), (inf, inf, inf)
        assert self._probe((0.0, 0.0, -5.0), (0.0, 0.0, 1.0), lo, hi) == 1
        assert self._probe((3.0, -2.0, 1.0), (0.5773, 0.5773, 0.5773), lo, hi) == 1
