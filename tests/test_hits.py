"""Unit tests for host-side hit selection and shading preparation."""

import math

import numpy as np


class TestHit:
    """Tests for choosing the visible intersection."""

    def test_all_positive(self):
        from src.raycast.core.hits import Intersection, hit

        i1 = Intersection(1.0, "s")
        i2 = Intersection(2.0, "s")
        assert hit([i2, i1]) is i1

    def test_some_negative(self):
        from src.raycast.core.hits import Intersection, hit

        i1 = Intersection(-1.0, "s")
        i2 = Intersection(1.0, "s")
        assert hit([i2, i1]) is i2

    def test_all_negative(self):
        from src.raycast.core.hits import Intersection, hit

        assert hit([Intersection(-2.0, "s"), Intersection(-1.0, "s")]) is None

    def test_empty(self):
        from src.raycast.core.hits import hit

        assert hit([]) is None

    def test_lowest_nonnegative(self):
        from src.raycast.core.hits import Intersection, hit

        xs = [Intersection(t, "s") for t in (5.0, 7.0, -3.0, 2.0)]
        assert hit(xs) is xs[3]

    def test_zero_counts_as_visible(self):
        from src.raycast.core.hits import Intersection, hit

        xs = [Intersection(0.0, "s"), Intersection(-0.5, "s")]
        assert hit(xs) is xs[0]

    def test_nan_is_never_selected(self):
        from src.raycast.core.hits import Intersection, hit

        xs = [Intersection(math.nan, "a"), Intersection(1.0, "b")]
        assert hit(xs) is xs[1]
        assert hit([Intersection(math.nan, "a")]) is None

    def test_ties_keep_input_order(self):
        from src.raycast.core.hits import Intersection, hit

        first = Intersection(2.0, "first")
        second = Intersection(2.0, "second")
        assert hit([first, second]) is first
        assert hit([second, first]) is second


class TestSortIntersections:
    """Tests for ordering intersections."""

    def test_ascending(self):
        from src.raycast.core.hits import Intersection, sort_intersections

        xs = [Intersection(t, "s") for t in (3.0, -1.0, 2.0)]
        assert [x.t for x in sort_intersections(xs)] == [-1.0, 2.0, 3.0]

    def test_nan_sinks_to_the_end(self):
        from src.raycast.core.hits import Intersection, sort_intersections

        xs = [Intersection(t, "s") for t in (math.nan, 2.0, -1.0)]
        result = [x.t for x in sort_intersections(xs)]
        assert result[:2] == [-1.0, 2.0]
        assert math.isnan(result[2])


class TestPrepareComputations:
    """Tests for deriving shading inputs from a hit."""

    def test_hit_on_outside(self):
        from src.raycast.core.hits import Intersection, prepare_computations
        from src.raycast.geometry.shape import Sphere

        shape = Sphere()
        comps = prepare_computations(Intersection(4.0, shape), (0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert comps.t == 4.0
        assert comps.object is shape
        assert np.allclose(comps.point, (0.0, 0.0, -1.0))
        assert np.allclose(comps.eyev, (0.0, 0.0, -1.0))
        assert np.allclose(comps.normalv, (0.0, 0.0, -1.0))
        assert comps.inside is False

    def test_hit_on_inside(self):
        from src.raycast.core.hits import Intersection, prepare_computations
        from src.raycast.geometry.shape import Sphere

        comps = prepare_computations(Intersection(1.0, Sphere()), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert np.allclose(comps.point, (0.0, 0.0, 1.0))
        assert np.allclose(comps.eyev, (0.0, 0.0, -1.0))
        assert comps.inside is True
        # Flipped to face the eye
        assert np.allclose(comps.normalv, (0.0, 0.0, -1.0))

    def test_over_point_lies_above_surface(self):
        from src.raycast.core.hits import Intersection, prepare_computations
        from src.raycast.core.ray import EPSILON
        from src.raycast.core.transform import translation
        from src.raycast.geometry.shape import Sphere

        shape = Sphere(transform=translation(0.0, 0.0, 1.0))
        comps = prepare_computations(Intersection(5.0, shape), (0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert comps.over_point[2] < -EPSILON / 2
        assert comps.point[2] > comps.over_point[2]

    def test_hit_inside_group_uses_composite_transform(self):
        from src.raycast.core.hits import hit, prepare_computations
        from src.raycast.core.transform import scaling, translation
        from src.raycast.geometry.shape import Group, Sphere

        s = Sphere(transform=translation(0.0, 0.0, 3.0))
        g = Group([s], transform=scaling(2.0, 2.0, 2.0))
        origin, direction = (0.0, 0.0, -10.0), (0.0, 0.0, 1.0)
        first = hit(g.intersect(origin, direction))
        assert first is not None
        comps = prepare_computations(first, origin, direction)
        # Sphere of radius 2 centred at z = 6; the near pole faces -z
        assert np.allclose(comps.point, (0.0, 0.0, 4.0), atol=1e-5)
        assert np.allclose(comps.normalv, (0.0, 0.0, -1.0), atol=1e-5)
