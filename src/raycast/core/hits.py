"""Host-side intersection records and hit selection.

Shapes report every candidate intersection along a ray, including those
behind the ray origin. ``hit`` picks the visible one: the smallest
non-negative ``t``. Sorting never raises on NaN; undefined ``t`` values sink
to the end of the ordering and can never be selected as the hit.

The kernel-side equivalents live in ``src.raycast.scene.intersection``;
these host versions back unit tests and small interactive queries.

Example:
    >>> from src.raycast.core.hits import Intersection, hit
    >>> xs = [Intersection(-1.0, None), Intersection(2.0, None), Intersection(1.0, None)]
    >>> hit(xs).t
    1.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

import numpy as np
import numpy.typing as npt

from src.raycast.core.ray import EPSILON, position

if TYPE_CHECKING:
    from src.raycast.geometry.shape import Shape


@dataclass(frozen=True)
class Intersection:
    """A candidate hit of a ray against a shape.

    Attributes:
        t: Ray parameter of the intersection.
        object: The primitive that was struck.
        world_to_object: Composite inverse transform from world space into
            the struck primitive's object space, accumulated through every
            enclosing group. ``None`` means "use the object's own inverse".
    """

    t: float
    object: Any
    world_to_object: Optional[npt.NDArray[np.float64]] = field(default=None, compare=False, repr=False)


def _sort_key(intersection: Intersection):
    # NaN compares false against everything; give it its own bucket
    t = intersection.t
    return (1, 0.0) if math.isnan(t) else (0, t)


def sort_intersections(intersections: Iterable[Intersection]) -> List[Intersection]:
    """Sort intersections by ascending t.

    The sort is stable, so intersections with equal t keep their input
    order. NaN values sink to the end.
    """
    return sorted(intersections, key=_sort_key)


def hit(intersections: Iterable[Intersection]) -> Optional[Intersection]:
    """Select the nearest intersection with t >= 0.

    Args:
        intersections: Candidate intersections in any order.

    Returns:
        The intersection with the smallest non-negative t, or None if there
        is none. On exact ties the earliest one in input order wins.
    """
    visible = [i for i in intersections if i.t >= 0.0]
    if not visible:
        return None
    return sort_intersections(visible)[0]


@dataclass(frozen=True)
class PreparedComputations:
    """Shading inputs derived from a hit.

    Attributes:
        t: Ray parameter of the hit.
        object: The struck primitive.
        point: World-space hit point.
        eyev: Unit vector from the point back toward the eye.
        normalv: Surface normal facing the eye.
        inside: True if the ray struck the surface from the inside.
        over_point: ``point`` nudged along ``normalv`` by EPSILON, used as the
            shadow ray origin.
    """

    t: float
    object: Any
    point: npt.NDArray[np.float64]
    eyev: npt.NDArray[np.float64]
    normalv: npt.NDArray[np.float64]
    inside: bool
    over_point: npt.NDArray[np.float64]


def prepare_computations(intersection: Intersection, origin, direction) -> PreparedComputations:
    """Derive the shading inputs for an intersection.

    Args:
        intersection: The hit being shaded.
        origin: World-space ray origin.
        direction: World-space ray direction.

    Returns:
        The prepared computations. The normal is flipped toward the eye when
        the hit lies on the inside of the surface.
    """
    shape: Shape = intersection.object
    point = position(origin, direction, intersection.t)
    eyev = -np.asarray(direction, dtype=np.float64)
    normalv = shape.normal_at(point, intersection.world_to_object)

    inside = bool(np.dot(normalv, eyev) < 0.0)
    if inside:
        normalv = -normalv

    return PreparedComputations(
        t=intersection.t,
        object=shape,
        point=point,
        eyev=eyev,
        normalv=normalv,
        inside=inside,
        over_point=point + normalv * EPSILON,
    )
