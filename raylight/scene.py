"""
Scene container handed to the ray tracer.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .lights import AmbientLight, LightSource
from .shapes import Geometries, Intersectable
from .vec3 import Color


@dataclass
class Scene:
    """Everything the tracer reads while rendering.

    Assembled before rendering and left untouched while a render runs.
    `geometries` may be a flat Geometries collection or any Intersectable,
    typically one holding a BVH.
    """
    name: str
    background: Color = field(default_factory=lambda: Color.BLACK)
    ambient_light: AmbientLight = field(default_factory=lambda: AmbientLight.NONE)
    geometries: Intersectable = field(default_factory=Geometries)
    lights: list[LightSource] = field(default_factory=list)

    def set_background(self, background: Color) -> Scene:
        self.background = background
        return self

    def set_ambient_light(self, ambient_light: AmbientLight) -> Scene:
        self.ambient_light = ambient_light
        return self

    def set_geometries(self, geometries: Intersectable) -> Scene:
        self.geometries = geometries
        return self

    def add_light(self, light: LightSource) -> Scene:
        self.lights.append(light)
        return self
