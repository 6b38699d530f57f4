"""World: the shapes of a scene and the light that illuminates them.

A ``World`` is immutable once built. Host-side queries come in two flavors:

- ``intersect`` walks the shape objects directly and returns every
  intersection, sorted by t. Useful for inspection and tests.
- ``is_shadowed``, ``color_at`` and rendering run on the device against the
  flattened arena. The world uploads itself on first use; the most recently
  loaded world is tracked so repeated queries do not re-upload.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.scene.world import default_world
    >>> world = default_world()
    >>> [x.t for x in world.intersect((0, 0, -5), (0, 0, 1))]
    [4.0, 4.5, 5.5, 6.0]
    >>> world.color_at((0, 0, -5), (0, 0, 1))  # ~(0.38066, 0.47583, 0.2855)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from src.raycast.core import integrator
from src.raycast.core.hits import Intersection, PreparedComputations, sort_intersections
from src.raycast.core.transform import scaling
from src.raycast.geometry.shape import Shape, Sphere
from src.raycast.materials.phong import Color, Material, PointLight, shade
from src.raycast.scene.intersection import get_node_count, load_shapes

logger = logging.getLogger(__name__)

# World whose shapes and light are currently uploaded to the device
_active_world: Optional[World] = None


class World:
    """A collection of shapes lit by one point light.

    Args:
        shapes: Top-level shapes. Groups may nest arbitrarily.
        light: The light source. Defaults to a white light at (-10, 10, -10).
    """

    def __init__(self, shapes: Iterable[Shape] = (), light: Optional[PointLight] = None) -> None:
        self._shapes: Tuple[Shape, ...] = tuple(shapes)
        self._light = light if light is not None else PointLight()
        self._nodes: List[Shape] = []

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        return self._shapes

    @property
    def light(self) -> PointLight:
        return self._light

    @property
    def nodes(self) -> List[Shape]:
        """Shapes in device arena order. Empty until the world is loaded."""
        return self._nodes

    def load(self) -> int:
        """Upload the shapes and light to the device.

        Returns:
            The number of arena nodes written.
        """
        global _active_world
        self._nodes = load_shapes(self._shapes)
        integrator.setup_light(self._light)
        _active_world = self
        logger.info("Loaded world: %d top-level shapes, %d nodes", len(self._shapes), len(self._nodes))
        return len(self._nodes)

    def _ensure_loaded(self) -> None:
        if _active_world is not self or get_node_count() != len(self._nodes):
            self.load()

    def node_count(self) -> int:
        """Number of arena nodes this world flattens into, groups included."""
        self._ensure_loaded()
        return len(self._nodes)

    def intersect(self, origin, direction) -> List[Intersection]:
        """Intersect a world-space ray with every shape.

        Returns:
            All intersections, including negative t, sorted ascending.
        """
        xs: List[Intersection] = []
        for shape in self._shapes:
            xs.extend(shape.intersect(origin, direction))
        return sort_intersections(xs)

    def is_shadowed(self, point) -> bool:
        """Test whether something lies between a point and the light."""
        self._ensure_loaded()
        return integrator.is_shadowed_point(point)

    def shade_hit(self, comps: PreparedComputations) -> Color:
        """Light a prepared hit, including the shadow test."""
        shadowed = self.is_shadowed(comps.over_point)
        return shade(comps.object.material, self._light, comps.over_point, comps.eyev, comps.normalv, shadowed)

    def color_at(self, origin, direction) -> Color:
        """Color seen along a world-space ray; black if nothing is hit."""
        self._ensure_loaded()
        return integrator.color_at_ray(origin, direction)


def default_world() -> World:
    """Two concentric spheres lit from the upper left.

    The outer unit sphere is greenish; the inner sphere has radius 0.5 and
    the default material.
    """
    outer = Sphere(material=Material(color=(0.8, 1.0, 0.6), diffuse=0.7, specular=0.2))
    inner = Sphere(transform=scaling(0.5, 0.5, 0.5))
    return World([outer, inner], PointLight((-10.0, 10.0, -10.0), (1.0, 1.0, 1.0)))
