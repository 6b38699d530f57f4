"""Scene module for worlds, the device-side arena and mesh input.

Components:
    intersection: Flattened scene arena and ray-scene traversal
    world: World container, host queries and the reference scene
    mesh: Indexed triangle meshes and conversion to shape groups
    stl: Binary and ASCII STL loading

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout for node data
    - Depth-first node order with skip indices for stackless traversal
"""

from .intersection import (
    INITIAL_NODE_CAPACITY,
    SceneArena,
    SceneHit,
    allocate_arena,
    clear_scene,
    collect_intersections,
    get_arena,
    get_node_count,
    load_shapes,
)
from .mesh import Mesh, group_from_mesh
from .stl import load_stl
from .world import World, default_world

__all__ = [
    # Intersection module
    "SceneHit",
    "load_shapes",
    "clear_scene",
    "get_node_count",
    "collect_intersections",
    "SceneArena",
    "allocate_arena",
    "get_arena",
    "INITIAL_NODE_CAPACITY",
    # World module
    "World",
    "default_world",
    # Mesh input
    "Mesh",
    "group_from_mesh",
    "load_stl",
]
