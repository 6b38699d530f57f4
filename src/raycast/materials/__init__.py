"""Materials module.

Components:
    phong: Phong material, point light and the lighting function

Lighting is evaluated in Taichi functions; ``shade`` runs the same code from
the host.
"""

from .phong import Material, PhongMaterial, PointLight, lighting, shade

__all__ = [
    "Material",
    "PhongMaterial",
    "PointLight",
    "lighting",
    "shade",
]
