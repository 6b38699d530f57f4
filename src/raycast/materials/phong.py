"""Phong reflection model: materials, point lights and local illumination.

Every surface is shaded with the classic three-term Phong model:

    color = ambient + diffuse + specular

    effective = material.color * light.intensity        (component-wise)
    ambient   = effective * material.ambient
    diffuse   = effective * material.diffuse * (l . n)
    specular  = light.intensity * material.specular * (r . e) ^ shininess

where ``l`` points from the surface toward the light, ``r`` is ``-l``
reflected about the normal and ``e`` points toward the eye. Diffuse and
specular vanish when the surface faces away from the light, specular also
vanishes when the reflection points away from the eye, and a point in shadow
receives the ambient term only.

Host code builds ``Material`` and ``PointLight`` values; kernels carry the
``PhongMaterial`` mirror and call ``lighting``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.materials.phong import Material, PointLight, shade
    >>> light = PointLight(position=(0.0, 0.0, -10.0))
    >>> shade(Material(), light, (0, 0, 0), (0, 0, -1), (0, 0, -1))  # ~(1.9, 1.9, 1.9)
"""


from dataclasses import dataclass
from typing import Tuple

import taichi as ti
import taichi.math as tm

from src.raycast.core.ray import reflect, to_vec3

# Type alias for 3D vectors
vec3 = tm.vec3

Color = Tuple[float, float, float]


def _as_triple(values) -> Color:
    x, y, z = (float(c) for c in values)
    return (x, y, z)


@dataclass(frozen=True)
class Material:
    """Surface appearance for Phong shading.

    Attributes:
        color: Base albedo (RGB).
        ambient: Ambient reflection coefficient.
        diffuse: Diffuse reflection coefficient.
        specular: Specular reflection coefficient.
        shininess: Specular exponent. Larger values give tighter highlights.

    Raises:
        ValueError: If a coefficient is negative.
    """

    color: Color = (1.0, 1.0, 1.0)
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _as_triple(self.color))
        for name in ("ambient", "diffuse", "specular", "shininess"):
            value = float(getattr(self, name))
            if value < 0.0:
                raise ValueError(f"Material {name} must be non-negative, got {value}")
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class PointLight:
    """A point light source with no size.

    Attributes:
        position: World-space position.
        intensity: Light color and brightness (RGB).
    """

    position: Color = (-10.0, 10.0, -10.0)
    intensity: Color = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_triple(self.position))
        object.__setattr__(self, "intensity", _as_triple(self.intensity))


@ti.dataclass
class PhongMaterial:
    """Phong material properties as seen inside kernels."""

    color: vec3
    ambient: ti.f32
    diffuse: ti.f32
    specular: ti.f32
    shininess: ti.f32


@ti.func
def lighting(
    material: PhongMaterial,
    light_position: vec3,
    light_intensity: vec3,
    point: vec3,
    eyev: vec3,
    normalv: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Shade a surface point with the Phong model.

    Args:
        material: Surface material.
        light_position: World-space light position.
        light_intensity: Light color (RGB).
        point: The point being shaded.
        eyev: Unit vector from the point toward the eye.
        normalv: Unit surface normal facing the eye.
        in_shadow: Non-zero if the light is occluded.

    Returns:
        The reflected color. Never below the ambient term.
    """
    effective_color = material.color * light_intensity
    ambient = effective_color * material.ambient

    lightv = tm.normalize(light_position - point)
    light_dot_normal = tm.dot(lightv, normalv)

    diffuse = vec3(0.0)
    specular = vec3(0.0)
    if light_dot_normal >= 0.0:
        diffuse = effective_color * material.diffuse * light_dot_normal
        reflectv = reflect(-lightv, normalv)
        reflect_dot_eye = tm.dot(reflectv, eyev)
        if reflect_dot_eye > 0.0:
            factor = ti.pow(reflect_dot_eye, material.shininess)
            specular = light_intensity * material.specular * factor

    result = ambient + diffuse + specular
    if in_shadow != 0:
        result = ambient
    return result


@ti.kernel
def _lighting_kernel(
    color: vec3,
    ambient: ti.f32,
    diffuse: ti.f32,
    specular: ti.f32,
    shininess: ti.f32,
    light_position: vec3,
    light_intensity: vec3,
    point: vec3,
    eyev: vec3,
    normalv: vec3,
    in_shadow: ti.i32,
) -> vec3:
    material = PhongMaterial(
        color=color, ambient=ambient, diffuse=diffuse, specular=specular, shininess=shininess
    )
    return lighting(material, light_position, light_intensity, point, eyev, normalv, in_shadow)


def shade(
    material: Material,
    light: PointLight,
    point,
    eyev,
    normalv,
    in_shadow: bool = False,
) -> Color:
    """Evaluate ``lighting`` from host code.

    Runs the same Taichi function the renderer uses, so host results match
    rendered pixels.

    Returns:
        The color as an (r, g, b) tuple of floats.
    """
    result = _lighting_kernel(
        to_vec3(material.color),
        material.ambient,
        material.diffuse,
        material.specular,
        material.shininess,
        to_vec3(light.position),
        to_vec3(light.intensity),
        to_vec3(point),
        to_vec3(eyev),
        to_vec3(normalv),
        1 if in_shadow else 0,
    )
    return (float(result[0]), float(result[1]), float(result[2]))
