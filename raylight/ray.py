"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a unit direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
from typing import Optional, TYPE_CHECKING

from .vec3 import Point, Vector, is_zero

if TYPE_CHECKING:
    from .shapes import Intersection

# Distance a secondary ray's origin is moved off its surface
DELTA = 0.1


class Ray:
    """A ray with origin and normalized direction.

    The parametric form is: P(t) = origin + t * direction
    where t > 0 represents points in front of the origin.
    """

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point, direction: Vector):
        """Create a ray with given origin and direction.

        Args:
            origin: The starting point of the ray
            direction: The direction vector (stored normalized)
        """
        self.origin = origin
        self.direction = direction.normalize()

    @classmethod
    def with_offset(cls, point: Point, direction: Vector, normal: Vector) -> Ray:
        """Create a secondary ray whose origin is moved off the surface.

        The origin is shifted by DELTA along the normal, towards the side the
        direction points to, so the ray does not hit the surface it starts on.

        Args:
            point: Point on the surface
            direction: Direction of the new ray
            normal: Surface normal at the point
        """
        nd = normal.dot(direction)
        if is_zero(nd):
            return cls(point, direction)
        return cls(point + normal * (DELTA if nd > 0 else -DELTA), direction)

    def at(self, t: float) -> Point:
        """Get the point along the ray at distance t from the origin."""
        if is_zero(t):
            return self.origin
        return self.origin + self.direction * t

    def closest_intersection(self, intersections: list[Intersection]) -> Optional[Intersection]:
        """Return the intersection nearest to the ray origin, if any."""
        closest = None
        min_distance = float('inf')
        for intersection in intersections:
            distance = self.origin.distance_squared(intersection.point)
            if distance < min_distance:
                min_distance = distance
                closest = intersection
        return closest

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return self.origin == other.origin and self.direction == other.direction

    def __hash__(self) -> int:
        return hash((self.origin, self.direction))

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
