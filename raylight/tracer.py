"""
Ray tracers: turn a ray into a color.

The simple ray tracer implements recursive Phong shading:
- Ambient and emitted light at every hit
- Diffuse and specular contribution of every light, attenuated by the
  transparency of whatever lies between the point and the light
- Optional soft shadows sampled over the disk of point lights with a radius
- Reflection and refraction, recursively, until the recursion level runs out
  or the accumulated attenuation becomes negligible
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
import logging
import random
from typing import Optional

from .errors import ConfigurationError, ZeroVectorError
from .lights import LightSource, PointLight
from .materials import Material
from .ray import Ray
from .scene import Scene
from .shapes import Intersection
from .vec3 import Point, Vector, Color, Double3, align_zero, is_zero

logger = logging.getLogger(__name__)

# Maximum number of nested reflection/refraction evaluations
MAX_CALC_COLOR_LEVEL = 10
# Attenuation below which a branch stops contributing
MIN_CALC_COLOR_K = 0.001
INITIAL_K = Double3.ONE


class RayTracerType(Enum):
    """Available ray tracer implementations."""
    SIMPLE = "simple"


class RayTracerBase(ABC):
    """Abstract base class for ray tracers."""

    def __init__(self, scene: Scene):
        self.scene = scene

    @abstractmethod
    def trace_ray(self, ray: Ray) -> Color:
        """Color seen along a ray."""
        pass


class SimpleRayTracer(RayTracerBase):
    """Recursive Phong ray tracer with shadows, reflection and refraction."""

    def __init__(self, scene: Scene, soft_shadows: bool = False, grid_resolution: int = 5, seed: int = 0):
        """Create a ray tracer over a scene.

        Args:
            scene: Scene to trace
            soft_shadows: Sample the disk of point lights that have a radius
            grid_resolution: Shadow samples per light are grid_resolution^2
            seed: Seed of the soft-shadow sampling
        """
        super().__init__(scene)
        if grid_resolution < 1:
            raise ConfigurationError("grid_resolution must be at least 1")
        self.soft_shadows = soft_shadows
        self.grid_resolution = grid_resolution
        self.seed = seed

    def trace_ray(self, ray: Ray) -> Color:
        try:
            closest = self._find_closest(ray)
        except ZeroVectorError:
            logger.debug("Degenerate primary ray %r", ray)
            return Color.BLACK
        if closest is None:
            return self.scene.background
        return self._calc_color(closest, ray, MAX_CALC_COLOR_LEVEL, INITIAL_K)

    def _find_closest(self, ray: Ray) -> Optional[Intersection]:
        return ray.closest_intersection(self.scene.geometries.intersect(ray))

    def _rng(self, point: Point) -> random.Random:
        # Same point, same samples, whichever thread shades it
        return random.Random(hash((self.seed, point.x, point.y, point.z)))

    def _calc_color(self, gp: Intersection, ray: Ray, level: int, k: Double3) -> Color:
        """Color at an intersection.

        Args:
            gp: The intersection being shaded
            ray: Ray that produced it
            level: Remaining recursion levels
            k: Attenuation accumulated along the path so far
        """
        if not self._preprocess(gp, ray):
            return Color.BLACK

        color = self.scene.ambient_light.intensity.scale(gp.material.ka)
        color = color + self._calc_local_effects(gp)
        if level == 1:
            return color
        return color + self._calc_global_effects(gp, level, k)

    def _preprocess(self, gp: Intersection, ray: Ray) -> bool:
        """Fill the view-dependent scratch of an intersection.

        Returns False when the point can't be shaded: no material, or a ray
        grazing the surface.
        """
        if gp.material is None:
            return False
        try:
            gp.normal = gp.geometry.normal(gp.point)
        except ZeroVectorError:
            logger.debug("No normal at %s on %r", gp.point, gp.geometry)
            return False
        gp.v = ray.direction
        gp.v_normal = align_zero(gp.normal.dot(gp.v))
        return gp.v_normal != 0

    def _set_light_source(self, gp: Intersection, light: LightSource) -> None:
        """Fill the light scratch for the direction to the light's center."""
        gp.light = light
        gp.l = light.direction_to(gp.point)
        gp.l_normal = align_zero(gp.normal.dot(gp.l))

    def _calc_local_effects(self, gp: Intersection) -> Color:
        color = gp.geometry.emission
        for light in self.scene.lights:
            try:
                self._set_light_source(gp, light)
                color = color + self._light_contribution(gp, light)
            except ZeroVectorError:
                logger.debug("Skipping %r at %s: degenerate direction", light, gp.point)
        return color

    def _light_contribution(self, gp: Intersection, light: LightSource) -> Color:
        """Diffuse and specular light from one source, shadowed.

        Every sampled direction is shaded on its own and the results are
        averaged. Directions reaching the surface from the side opposite
        the viewer add nothing but still count in the average.
        """
        directions = [gp.l]
        if self.soft_shadows and isinstance(light, PointLight) and not is_zero(light.radius):
            directions += light.sample_directions(gp.point, self.grid_resolution ** 2, self._rng(gp.point))

        intensity = light.intensity(gp.point)
        color = Color.BLACK
        for l in directions:
            l_normal = align_zero(gp.normal.dot(l))
            if l_normal * gp.v_normal <= 0:
                continue
            ktr = self._transparency(gp, light, l)
            if ktr.not_above(MIN_CALC_COLOR_K):
                continue
            shading = self._diffuse(gp, l_normal) + self._specular(gp, l, l_normal)
            color = color + intensity.scale(shading).scale(ktr)
        return color.reduce(len(directions))

    def _diffuse(self, gp: Intersection, l_normal: float) -> Double3:
        return gp.material.kd.scale(abs(l_normal))

    def _specular(self, gp: Intersection, l: Vector, l_normal: float) -> Double3:
        material: Material = gp.material
        r = l - gp.normal * (2 * l_normal)
        rv = -align_zero(r.dot(gp.v))
        if rv <= 0:
            return Double3.ZERO
        return material.ks.scale(rv ** material.shininess)

    def _transparency(self, gp: Intersection, light: LightSource, l: Vector) -> Double3:
        """Fraction of the light that passes the geometry between point and light.

        Every occluder closer than the light multiplies in its kt.
        """
        light_ray = Ray.with_offset(gp.point, -l, gp.normal)
        light_distance = light.distance_to(gp.point)

        ktr = Double3.ONE
        for hit in self.scene.geometries.intersect(light_ray):
            if align_zero(hit.point.distance(gp.point) - light_distance) < 0:
                ktr = ktr.product(hit.material.kt)
                if ktr.lower_than(MIN_CALC_COLOR_K):
                    return Double3.ZERO
        return ktr

    def _calc_global_effects(self, gp: Intersection, level: int, k: Double3) -> Color:
        material = gp.material
        reflected = self._calc_global_effect(gp, self._reflected_direction, material.kr, level, k)
        refracted = self._calc_global_effect(gp, self._refracted_direction, material.kt, level, k)
        return reflected + refracted

    @staticmethod
    def _reflected_direction(gp: Intersection) -> Vector:
        return gp.v - gp.normal * (2 * gp.v_normal)

    @staticmethod
    def _refracted_direction(gp: Intersection) -> Vector:
        return gp.v

    def _calc_global_effect(self, gp: Intersection, direction_of, kx: Double3, level: int, k: Double3) -> Color:
        kkx = k.product(kx)
        if kkx.lower_than(MIN_CALC_COLOR_K):
            return Color.BLACK

        try:
            ray = Ray.with_offset(gp.point, direction_of(gp), gp.normal)
            closest = self._find_closest(ray)
        except ZeroVectorError:
            logger.debug("Dropping degenerate secondary ray at %s", gp.point)
            return Color.BLACK

        if closest is None:
            return self.scene.background.scale(kx)
        return self._calc_color(closest, ray, level - 1, kkx).scale(kx)


def create_ray_tracer(scene: Scene, tracer_type: RayTracerType = RayTracerType.SIMPLE, **kwargs) -> RayTracerBase:
    """Build the ray tracer of the given type over a scene."""
    if tracer_type is RayTracerType.SIMPLE:
        return SimpleRayTracer(scene, **kwargs)
    raise ConfigurationError(f"Unknown ray tracer type: {tracer_type}")
