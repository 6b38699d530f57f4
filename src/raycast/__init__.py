"""Taichi-based ray-casting renderer for triangle meshes.

Renders a scene of transformed primitives (spheres, planes, cubes,
triangles) and bounding-box groups with Phong shading and hard shadows from
a single point light. Every pixel is traced independently on the Taichi
backend.

Subpackages:
    core: Rays, transforms, hit selection, configuration and the integrator
    geometry: Primitive intersection algorithms, bounding boxes and shapes
    materials: Phong material model and point lights
    scene: World, device-side scene arena, meshes and STL loading
    camera: Pinhole camera with per-pixel ray generation
    preview: Raster canvas and image encoding

The mesh-to-image entry point is ``src.raycast.pipeline.render``.
"""

__version__ = "0.1.0"
