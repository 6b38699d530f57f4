"""Unit tests for the infinite plane primitive."""

import numpy as np
import taichi as ti


class TestPlane:
    """Tests for plane intersection and normals."""

    def test_normal_is_constant(self):
        from src.raycast.geometry.shape import Plane

        p = Plane()
        for point in [(0.0, 0.0, 0.0), (10.0, 0.0, -10.0), (-5.0, 0.0, 150.0)]:
            assert np.allclose(p.local_normal_at(point), (0.0, 1.0, 0.0))

    def test_parallel_ray_misses(self):
        from src.raycast.geometry.shape import Plane

        assert Plane().local_intersect((0.0, 10.0, 0.0), (0.0, 0.0, 1.0)) == []

    def test_coplanar_ray_misses(self):
        from src.raycast.geometry.shape import Plane

        assert Plane().local_intersect((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)) == []

    def test_ray_from_above(self):
        from src.raycast.geometry.shape import Plane

        p = Plane()
        xs = p.local_intersect((0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
        assert len(xs) == 1
        assert xs[0].t == 1.0
        assert xs[0].object is p

    def test_ray_from_below(self):
        from src.raycast.geometry.shape import Plane

        xs = Plane().local_intersect((0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert [x.t for x in xs] == [1.0]

    def test_nearly_parallel_ray_misses(self):
        """Test direction.y below EPSILON counts as parallel."""
        from src.raycast.core.ray import Ray, vec3
        from src.raycast.geometry.plane import local_intersect_plane

        count = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(1.0, -1e-6, 0.0))
            count[None] = local_intersect_plane(ray).count

        test_kernel()
        assert count[None] == 0

    def test_plane_bounds_are_unbounded_in_x_and_z(self):
        from src.raycast.geometry.shape import Plane

        box = Plane().local_bounds()
        assert np.isneginf(box.min[0]) and np.isneginf(box.min[2])
        assert np.isposinf(box.max[0]) and np.isposinf(box.max[2])
        assert box.min[1] == 0.0 and box.max[1] == 0.0
