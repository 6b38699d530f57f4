"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Ray transformation by translation and scaling
- Vector utility functions (reflect, normalize)
- Host-side position helper
"""

import math

import numpy as np
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_positions(self):
        """Test ray_at at zero, positive and negative t."""
        from src.raycast.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(2.0, 3.0, 4.0), direction=vec3(1.0, 0.0, 0.0))
            result[0] = ray_at(ray, 0.0)
            result[1] = ray_at(ray, 1.0)
            result[2] = ray_at(ray, -1.0)
            result[3] = ray_at(ray, 2.5)

        test_kernel()
        expected = [(2.0, 3.0, 4.0), (3.0, 3.0, 4.0), (1.0, 3.0, 4.0), (4.5, 3.0, 4.0)]
        for i, point in enumerate(expected):
            r = result[i]
            for c in range(3):
                assert abs(r[c] - point[c]) < 1e-6

    def test_host_position_matches(self):
        """Test the host helper computes origin + t * direction."""
        from src.raycast.core.ray import position

        p = position((2.0, 3.0, 4.0), (1.0, 0.0, 0.0), 2.5)
        assert np.allclose(p, (4.5, 3.0, 4.0))


class TestRayTransform:
    """Tests for moving rays between spaces."""

    def test_translating_a_ray(self):
        """Test translation moves the origin but not the direction."""
        from src.raycast.core.ray import Ray, transform_ray, vec3
        from src.raycast.core.transform import translation

        m = ti.Matrix(translation(3.0, 4.0, 5.0).astype(np.float32).tolist())
        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat: ti.math.mat4):
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 1.0, 0.0))
            moved = transform_ray(ray, mat)
            origin[None] = moved.origin
            direction[None] = moved.direction

        test_kernel(m)
        assert np.allclose(origin[None].to_numpy(), (4.0, 6.0, 8.0))
        assert np.allclose(direction[None].to_numpy(), (0.0, 1.0, 0.0))

    def test_scaling_a_ray(self):
        """Test scaling changes both origin and direction, without renormalizing."""
        from src.raycast.core.ray import Ray, transform_ray, vec3
        from src.raycast.core.transform import scaling

        m = ti.Matrix(scaling(2.0, 3.0, 4.0).astype(np.float32).tolist())
        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat: ti.math.mat4):
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 1.0, 0.0))
            moved = transform_ray(ray, mat)
            origin[None] = moved.origin
            direction[None] = moved.direction

        test_kernel(m)
        assert np.allclose(origin[None].to_numpy(), (2.0, 6.0, 12.0))
        assert np.allclose(direction[None].to_numpy(), (0.0, 3.0, 0.0))


class TestVectorUtilities:
    """Tests for vector helpers used in shading."""

    def test_reflect_at_45_degrees(self):
        """Test reflecting a vector approaching at 45 degrees."""
        from src.raycast.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert np.allclose(result[None].to_numpy(), (1.0, 1.0, 0.0), atol=1e-6)

    def test_reflect_off_slanted_surface(self):
        """Test reflecting a vector off a slanted surface."""
        from src.raycast.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        k = math.sqrt(2.0) / 2.0

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(0.0, -1.0, 0.0), vec3(k, k, 0.0))

        test_kernel()
        assert np.allclose(result[None].to_numpy(), (1.0, 0.0, 0.0), atol=1e-6)

    def test_normalize_and_length(self):
        """Test normalize produces a unit vector."""
        from src.raycast.core.ray import length, normalize, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            v = vec3(1.0, 2.0, 3.0)
            result[0] = length(v)
            result[1] = length(normalize(v))

        test_kernel()
        assert abs(result[0] - math.sqrt(14.0)) < 1e-5
        assert abs(result[1] - 1.0) < 1e-6
