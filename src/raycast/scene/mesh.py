"""Triangle meshes and their conversion into shape groups.

A mesh is any object exposing ``vertices()`` and ``triangles()``. The
triangles may be given either as index triples into the vertex array or
directly as coordinate triples, shape (M, 3, 3). ``group_from_mesh`` wraps
one ``Triangle`` per face into a single ``Group`` so the whole mesh is culled
by one bounding box.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from src.raycast.geometry.shape import Group, Triangle
from src.raycast.materials.phong import Material


class Mesh:
    """An indexed triangle mesh.

    Args:
        vertices: Vertex positions, shape (N, 3).
        triangles: Vertex index triples, shape (M, 3).

    Raises:
        ValueError: If the arrays have the wrong shape or an index is out of
            range.
    """

    def __init__(self, vertices: npt.ArrayLike, triangles: npt.ArrayLike) -> None:
        verts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        if len(tris) and (tris.min() < 0 or tris.max() >= len(verts)):
            raise ValueError(f"Triangle indices out of range for {len(verts)} vertices")
        self._vertices = verts
        self._triangles = tris

    @classmethod
    def from_faces(cls, faces: npt.ArrayLike) -> Mesh:
        """Build a mesh from per-face coordinates of shape (M, 3, 3)."""
        coords = np.asarray(faces, dtype=np.float64).reshape(-1, 3, 3)
        vertices = coords.reshape(-1, 3)
        triangles = np.arange(len(vertices), dtype=np.int64).reshape(-1, 3)
        return cls(vertices, triangles)

    def vertices(self) -> npt.NDArray[np.float64]:
        return self._vertices

    def triangles(self) -> npt.NDArray[np.int64]:
        return self._triangles

    def faces(self) -> npt.NDArray[np.float64]:
        """Per-face vertex coordinates, shape (M, 3, 3)."""
        return self._vertices[self._triangles]

    def __len__(self) -> int:
        return len(self._triangles)

    def __repr__(self) -> str:
        return f"Mesh(vertices={len(self._vertices)}, triangles={len(self._triangles)})"


def mesh_faces(mesh) -> npt.NDArray[np.float64]:
    """Resolve a mesh's triangles into coordinates of shape (M, 3, 3).

    Raises:
        ValueError: If the triangles are neither index nor coordinate triples.
    """
    triangles = np.asarray(mesh.triangles())
    if triangles.size == 0:
        return np.zeros((0, 3, 3), dtype=np.float64)
    if triangles.ndim == 3 and triangles.shape[1:] == (3, 3):
        return triangles.astype(np.float64)
    if triangles.ndim == 2 and triangles.shape[1] == 3 and np.issubdtype(triangles.dtype, np.integer):
        vertices = np.asarray(mesh.vertices(), dtype=np.float64).reshape(-1, 3)
        return vertices[triangles]
    raise ValueError(
        f"Mesh triangles must be index triples (M, 3) or coordinate triples (M, 3, 3), got {triangles.shape}"
    )


def group_from_mesh(mesh, material: Optional[Material] = None) -> Group:
    """Wrap every face of a mesh into one group of triangles.

    Degenerate faces are kept; they never intersect anything.

    Args:
        mesh: Object with ``vertices()`` and ``triangles()`` accessors.
        material: Material shared by every triangle.

    Returns:
        A group with one triangle per face. An empty mesh gives an empty
        group.
    """
    material = material if material is not None else Material()
    triangles = [Triangle(p1, p2, p3, material=material) for p1, p2, p3 in mesh_faces(mesh)]
    return Group(triangles)
