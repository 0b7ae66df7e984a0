"""
Light sources for the ray tracer.

Implements:
- Ambient light (uniform fill)
- Point lights with constant/linear/quadratic attenuation, optionally
  with a radius for soft shadows
- Spot lights
- Directional lights (sun)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import math
import random

from .errors import ConfigurationError
from .materials import Coefficient
from .sampling import disk_points
from .vec3 import Point, Vector, Color, Double3, is_zero


class AmbientLight:
    """Uniform light reaching every surface regardless of geometry."""

    def __init__(self, color: Color, ka: Coefficient = 1.0):
        """Create an ambient light.

        Args:
            color: Light color
            ka: Attenuation factor applied to the color
        """
        self.intensity = color.scale(Double3.of(ka))

    def __repr__(self) -> str:
        return f"AmbientLight({self.intensity})"


AmbientLight.NONE = AmbientLight(Color.BLACK, 0.0)


class LightSource(ABC):
    """Abstract base class for lights that cast shadows."""

    def __init__(self, color: Color):
        self.color = color

    @abstractmethod
    def intensity(self, point: Point) -> Color:
        """Light intensity arriving at a point."""
        pass

    @abstractmethod
    def direction_to(self, point: Point) -> Vector:
        """Unit vector from the light toward the point."""
        pass

    @abstractmethod
    def distance_to(self, point: Point) -> float:
        """Distance between the light and the point."""
        pass


class PointLight(LightSource):
    """A point light source.

    Point lights emit light equally in all directions from a single point.
    A non-zero radius turns the light into a small disk for soft shadows.
    """

    def __init__(
        self,
        color: Color,
        position: Point,
        kc: float = 1.0,
        kl: float = 0.0,
        kq: float = 0.0,
        radius: float = 0.0
    ):
        """Create a point light.

        Args:
            color: Color of the light
            position: Position of the light
            kc, kl, kq: Constant, linear and quadratic attenuation factors
            radius: Radius of the emitting disk (0 = hard shadows)
        """
        super().__init__(color)
        if min(kc, kl, kq) < 0 or (kc == 0 and kl == 0 and kq == 0):
            raise ConfigurationError("Attenuation factors must be non-negative and not all zero")
        if radius < 0:
            raise ConfigurationError("Light radius must be non-negative")
        self.position = position
        self.kc = kc
        self.kl = kl
        self.kq = kq
        self.radius = radius

    def intensity(self, point: Point) -> Color:
        d = self.position.distance(point)
        factor = self.kc + self.kl * d + self.kq * d * d
        if is_zero(factor):
            return self.color
        return self.color.scale(1.0 / factor)

    def direction_to(self, point: Point) -> Vector:
        return (point - self.position).normalize()

    def distance_to(self, point: Point) -> float:
        return self.position.distance(point)

    def sample_directions(self, point: Point, count: int, rng: random.Random) -> list[Vector]:
        """Directions from random points of the light's disk toward a point.

        The disk is centered on the light and faces the point. A light
        without radius has nothing to sample and returns an empty list.
        """
        if is_zero(self.radius):
            return []
        samples = disk_points(self.direction_to(point), self.position, self.radius, count, rng)
        return [(point - sample).normalize() for sample in samples]

    def __repr__(self) -> str:
        return f"PointLight(color={self.color}, position={self.position})"


class SpotLight(PointLight):
    """A point light that shines mostly along one direction."""

    def __init__(self, color: Color, position: Point, direction: Vector, **kwargs):
        super().__init__(color, position, **kwargs)
        self.direction = direction.normalize()

    def intensity(self, point: Point) -> Color:
        factor = max(0.0, self.direction.dot(self.direction_to(point)))
        return super().intensity(point).scale(factor)


class DirectionalLight(LightSource):
    """A directional light (like the sun).

    Directional lights have parallel rays and no falloff.
    """

    def __init__(self, color: Color, direction: Vector):
        """Create a directional light.

        Args:
            color: Color of the light
            direction: Direction the light travels in
        """
        super().__init__(color)
        self.direction = direction.normalize()

    def intensity(self, point: Point) -> Color:
        return self.color

    def direction_to(self, point: Point) -> Vector:
        return self.direction

    def distance_to(self, point: Point) -> float:
        return math.inf
