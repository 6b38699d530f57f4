"""Device-side scene arena and ray-scene intersection.

The shape tree is flattened into Taichi fields before rendering. Nodes are
stored in depth-first pre-order and each node records ``skip``, the index
just past its subtree. One stackless loop then walks the whole tree:

    i = 0
    while i < num_nodes:
        group whose box the ray misses  ->  i = skip[i]
        anything else                   ->  test it, i += 1

Every node stores its composite world-to-object matrix (its own inverse
composed with all enclosing groups' inverses), so the ray is moved straight
from world space into the node's space. Group boxes are stored in the
group's own space and tested against the ray in that space.

The arena is written once per render and only read while kernels run. It
starts with INITIAL_NODE_CAPACITY slots and is reallocated at the next power
of two when a scene does not fit, so any triangle count can be loaded.
Kernels that read it take the arena as a template argument and recompile
for a new one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.geometry.shape import Group, Sphere
    >>> from src.raycast.scene.intersection import load_shapes, get_node_count
    >>> nodes = load_shapes([Group([Sphere(), Sphere()])])
    >>> get_node_count()
    3
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import EPSILON, Ray, make_ray, ray_at, to_vec3, transform_point, transform_ray, transform_vector
from src.raycast.core.transform import identity
from src.raycast.geometry.bounds import hit_aabb
from src.raycast.geometry.sphere import LocalHits
from src.raycast.geometry.shape import Shape, ShapeKind, local_intersect_kind, local_normal_kind
from src.raycast.materials.phong import PhongMaterial

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHit:
    """Nearest intersection of a ray with the scene.

    Attributes:
        hit: 1 if a visible intersection (t >= 0) was found, 0 otherwise.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        node: Arena index of the struck primitive. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    node: ti.i32


@ti.dataclass
class Computations:
    """Shading inputs derived from a hit.

    Attributes:
        t: Ray parameter of the hit.
        node: Arena index of the struck primitive.
        point: World-space hit point.
        eyev: Vector from the point toward the eye.
        normalv: Unit surface normal facing the eye.
        inside: 1 if the ray struck the surface from the inside.
        over_point: ``point`` moved EPSILON along ``normalv``.
    """

    t: ti.f32
    node: ti.i32
    point: vec3
    eyev: vec3
    normalv: vec3
    inside: ti.i32
    over_point: vec3



# Node slots allocated for the first arena; larger scenes grow it
INITIAL_NODE_CAPACITY = 65536

# Maximum number of intersections gathered by collect_intersections
MAX_COLLECTED = 1024

# Output of collect_intersections
collected_t = ti.field(dtype=ti.f32, shape=MAX_COLLECTED)
collected_node = ti.field(dtype=ti.i32, shape=MAX_COLLECTED)
num_collected = ti.field(dtype=ti.i32, shape=())


@ti.data_oriented
class SceneArena:
    """Flattened shape tree stored in Taichi fields.

    The fields are placed in an SNode tree of their own, so an arena that
    is outgrown can be destroyed and replaced by a larger one. Kernels take
    the arena as a ``ti.template()`` argument and are compiled per arena.

    Attributes:
        capacity: Number of node slots.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity

        # Node storage: Structure of Arrays layout
        self.kinds = ti.field(dtype=ti.i32)
        self.skips = ti.field(dtype=ti.i32)
        self.inverses = ti.Matrix.field(4, 4, dtype=ti.f32)
        # Group bounding boxes in the group's own object space
        self.box_min = ti.Vector.field(3, dtype=ti.f32)
        self.box_max = ti.Vector.field(3, dtype=ti.f32)

        # Per-node Phong material
        self.colors = ti.Vector.field(3, dtype=ti.f32)
        self.ambient = ti.field(dtype=ti.f32)
        self.diffuse = ti.field(dtype=ti.f32)
        self.specular = ti.field(dtype=ti.f32)
        self.shininess = ti.field(dtype=ti.f32)

        # Triangle data (zero for every other kind)
        self.tri_p1 = ti.Vector.field(3, dtype=ti.f32)
        self.tri_e1 = ti.Vector.field(3, dtype=ti.f32)
        self.tri_e2 = ti.Vector.field(3, dtype=ti.f32)
        self.tri_normal = ti.Vector.field(3, dtype=ti.f32)

        self.num_nodes = ti.field(dtype=ti.i32)

        builder = ti.FieldsBuilder()
        for node_field in (
            self.kinds,
            self.skips,
            self.inverses,
            self.box_min,
            self.box_max,
            self.colors,
            self.ambient,
            self.diffuse,
            self.specular,
            self.shininess,
            self.tri_p1,
            self.tri_e1,
            self.tri_e2,
            self.tri_normal,
        ):
            builder.dense(ti.i, capacity).place(node_field)
        builder.place(self.num_nodes)
        self._tree = builder.finalize()

    def destroy(self) -> None:
        """Release the arena's device memory."""
        self._tree.destroy()

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    @ti.func
    def _node_hits(self, i: ti.i32, local_ray: Ray) -> LocalHits:
        """Local intersections of node i with a ray already in its space."""
        return local_intersect_kind(self.kinds[i], local_ray, self.tri_p1[i], self.tri_e1[i], self.tri_e2[i])

    @ti.func
    def _next_node(self, i: ti.i32, local_ray: Ray) -> ti.i32:
        """Index of the next node to visit after node i.

        Groups whose box the ray misses continue past their whole subtree.
        """
        next_i = i + 1
        if self.kinds[i] == int(ShapeKind.GROUP):
            if hit_aabb(local_ray, self.box_min[i], self.box_max[i]) == 0:
                next_i = self.skips[i]
        return next_i

    @ti.func
    def intersect(self, ray: Ray) -> SceneHit:
        """Find the nearest intersection with t >= 0.

        On exact ties the node visited first wins. NaN parameters never
        compare as visible and are never selected.

        Args:
            ray: World-space ray.

        Returns:
            The hit record, or a miss record if nothing visible was struck.
        """
        result = SceneHit(hit=0, t=0.0, node=-1)
        n = self.num_nodes[None]
        i = 0
        while i < n:
            local_ray = transform_ray(ray, self.inverses[i])
            hits = self._node_hits(i, local_ray)
            next_i = self._next_node(i, local_ray)
            if hits.count >= 1:
                if hits.t0 >= 0.0 and (result.hit == 0 or hits.t0 < result.t):
                    result = SceneHit(hit=1, t=hits.t0, node=i)
            if hits.count >= 2:
                if hits.t1 >= 0.0 and (result.hit == 0 or hits.t1 < result.t):
                    result = SceneHit(hit=1, t=hits.t1, node=i)
            i = next_i
        return result

    @ti.func
    def intersect_any(self, ray: Ray, t_max: ti.f32) -> ti.i32:
        """Test whether anything lies on the ray with 0 <= t < t_max.

        Stops at the first qualifying intersection, for shadow queries.

        Returns:
            1 if an occluder was found, 0 otherwise.
        """
        hit_any = 0
        n = self.num_nodes[None]
        i = 0
        while i < n:
            local_ray = transform_ray(ray, self.inverses[i])
            hits = self._node_hits(i, local_ray)
            next_i = self._next_node(i, local_ray)
            if hits.count >= 1:
                if hits.t0 >= 0.0 and hits.t0 < t_max:
                    hit_any = 1
            if hits.count >= 2:
                if hits.t1 >= 0.0 and hits.t1 < t_max:
                    hit_any = 1
            if hit_any == 1:
                next_i = n
            i = next_i
        return hit_any

    @ti.kernel
    def _collect_kernel(self, origin: vec3, direction: vec3):
        num_collected[None] = 0
        ray = make_ray(origin, direction)
        n = self.num_nodes[None]
        i = 0
        while i < n:
            local_ray = transform_ray(ray, self.inverses[i])
            hits = self._node_hits(i, local_ray)
            next_i = self._next_node(i, local_ray)
            if hits.count >= 1:
                _collect(hits.t0, i)
            if hits.count >= 2:
                _collect(hits.t1, i)
            i = next_i

    # -------------------------------------------------------------------------
    # Shading Support
    # -------------------------------------------------------------------------

    @ti.func
    def material_at(self, node: ti.i32) -> PhongMaterial:
        """Get the Phong material of a node."""
        return PhongMaterial(
            color=self.colors[node],
            ambient=self.ambient[node],
            diffuse=self.diffuse[node],
            specular=self.specular[node],
            shininess=self.shininess[node],
        )

    @ti.func
    def normal_at(self, node: ti.i32, world_point: vec3) -> vec3:
        """Unit world-space normal of a node at a world-space surface point.

        The object-space normal is mapped back with the transpose of the
        composite inverse.
        """
        m = self.inverses[node]
        local_point = transform_point(m, world_point)
        local_normal = local_normal_kind(self.kinds[node], local_point, self.tri_normal[node])
        world_normal = transform_vector(m.transpose(), local_normal)
        return tm.normalize(world_normal)

    @ti.func
    def prepare_computations(self, hit: SceneHit, ray: Ray) -> Computations:
        """Derive the shading inputs for a hit.

        Args:
            hit: A hit record with hit == 1.
            ray: The world-space ray that produced it.

        Returns:
            The computations. The normal is flipped toward the eye when the
            ray struck the inside of the surface.
        """
        point = ray_at(ray, hit.t)
        eyev = -ray.direction
        normalv = self.normal_at(hit.node, point)
        inside = 0
        if tm.dot(normalv, eyev) < 0.0:
            inside = 1
            normalv = -normalv
        return Computations(
            t=hit.t,
            node=hit.node,
            point=point,
            eyev=eyev,
            normalv=normalv,
            inside=inside,
            over_point=point + normalv * EPSILON,
        )


@ti.func
def _collect(t: ti.f32, node: ti.i32):
    idx = num_collected[None]
    if idx < MAX_COLLECTED:
        collected_t[idx] = t
        collected_node[idx] = node
    num_collected[None] = idx + 1


# =============================================================================
# Arena Management
# =============================================================================

_arena = None


def allocate_arena(capacity: int = INITIAL_NODE_CAPACITY) -> SceneArena:
    """Replace the current arena with an empty one of the given capacity.

    Args:
        capacity: Number of node slots (at least 1).

    Returns:
        The new arena.

    Raises:
        ValueError: If capacity is not positive.
    """
    global _arena
    if capacity < 1:
        raise ValueError(f"Arena capacity must be positive, got {capacity}")
    if _arena is not None:
        _arena.destroy()
    _arena = SceneArena(capacity)
    logger.debug("Allocated scene arena with %d node slots", capacity)
    return _arena


def get_arena() -> SceneArena:
    """Get the current arena, allocating it on first use."""
    if _arena is None:
        return allocate_arena()
    return _arena


def clear_scene() -> None:
    """Remove every node from the arena.

    Field contents are left in place and overwritten by the next load.
    """
    get_arena().num_nodes[None] = 0


def get_node_count() -> int:
    """Get the number of nodes currently in the arena."""
    return int(get_arena().num_nodes[None])


def _flatten(shape: Shape, parent_inverse: np.ndarray, nodes: List[Shape], inverses: List[np.ndarray], skips: List[int]) -> None:
    if shape.kind is None:
        raise TypeError(f"Shape type {type(shape).__name__} cannot be loaded into the scene")
    index = len(nodes)
    inverse = shape.inverse @ parent_inverse
    nodes.append(shape)
    inverses.append(inverse)
    skips.append(-1)
    if shape.kind == ShapeKind.GROUP:
        for child in shape.children:
            _flatten(child, inverse, nodes, inverses, skips)
    skips[index] = len(nodes)


def load_shapes(shapes: Sequence[Shape]) -> List[Shape]:
    """Flatten a list of top-level shapes into the arena.

    The arena is replaced by one with the next power-of-two capacity when
    the tree does not fit.

    Args:
        shapes: Top-level shapes of the world.

    Returns:
        The shapes in arena order; index i holds the shape of node i.

    Raises:
        TypeError: If a shape has no device-side representation.
    """
    nodes: List[Shape] = []
    inverses: List[np.ndarray] = []
    skips: List[int] = []
    root = identity()
    for shape in shapes:
        _flatten(shape, root, nodes, inverses, skips)

    count = len(nodes)
    arena = get_arena()
    if count > arena.capacity:
        capacity = 1 << (count - 1).bit_length()
        logger.info("Growing scene arena from %d to %d node slots", arena.capacity, capacity)
        arena = allocate_arena(capacity)
    size = arena.capacity

    kinds = np.zeros(size, dtype=np.int32)
    skip_arr = np.zeros(size, dtype=np.int32)
    inv_arr = np.zeros((size, 4, 4), dtype=np.float32)
    box_min = np.zeros((size, 3), dtype=np.float32)
    box_max = np.zeros((size, 3), dtype=np.float32)
    colors = np.zeros((size, 3), dtype=np.float32)
    params = np.zeros((size, 4), dtype=np.float32)
    tri = np.zeros((4, size, 3), dtype=np.float32)

    for i, shape in enumerate(nodes):
        kinds[i] = int(shape.kind)
        skip_arr[i] = skips[i]
        inv_arr[i] = inverses[i]
        material = shape.material
        colors[i] = material.color
        params[i] = (material.ambient, material.diffuse, material.specular, material.shininess)
        if shape.kind == ShapeKind.GROUP:
            box = shape.local_bounds()
            box_min[i] = box.min
            box_max[i] = box.max
        elif shape.kind == ShapeKind.TRIANGLE:
            tri[:, i] = shape.triangle_data()

    arena.kinds.from_numpy(kinds)
    arena.skips.from_numpy(skip_arr)
    arena.inverses.from_numpy(inv_arr)
    arena.box_min.from_numpy(box_min)
    arena.box_max.from_numpy(box_max)
    arena.colors.from_numpy(colors)
    arena.ambient.from_numpy(np.ascontiguousarray(params[:, 0]))
    arena.diffuse.from_numpy(np.ascontiguousarray(params[:, 1]))
    arena.specular.from_numpy(np.ascontiguousarray(params[:, 2]))
    arena.shininess.from_numpy(np.ascontiguousarray(params[:, 3]))
    arena.tri_p1.from_numpy(tri[0])
    arena.tri_e1.from_numpy(tri[1])
    arena.tri_e2.from_numpy(tri[2])
    arena.tri_normal.from_numpy(tri[3])
    arena.num_nodes[None] = count

    logger.debug("Loaded %d scene nodes from %d top-level shapes", count, len(shapes))
    return nodes


def collect_intersections(origin, direction) -> List[Tuple[float, int]]:
    """Gather every intersection of a ray with the loaded arena.

    Negative t values are included. Results are in traversal order, not
    sorted.

    Returns:
        A list of (t, node_index) pairs.

    Raises:
        RuntimeError: If more than MAX_COLLECTED intersections were found.
    """
    get_arena()._collect_kernel(to_vec3(origin), to_vec3(direction))
    count = int(num_collected[None])
    if count > MAX_COLLECTED:
        raise RuntimeError(f"Maximum number of collected intersections ({MAX_COLLECTED}) exceeded: {count}")
    ts = collected_t.to_numpy()[:count]
    ids = collected_node.to_numpy()[:count]
    return [(float(t), int(node)) for t, node in zip(ts, ids)]
