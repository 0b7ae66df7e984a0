"""
Sample point generation on small planar patches.

Used by area-like lights to spread shadow rays over a disk perpendicular
to the light-to-point direction.
"""

from __future__ import annotations
import math
import random

from .errors import ConfigurationError, ZeroVectorError
from .vec3 import Point, Vector, is_zero


def perpendicular_basis(n: Vector) -> tuple[Vector, Vector]:
    """Return two unit vectors spanning the plane perpendicular to n."""
    try:
        right = n.cross(Vector.AXIS_X).normalize()
    except ZeroVectorError:
        right = n.cross(Vector.AXIS_Y).normalize()
    up = n.cross(right).normalize()
    return right, up


def _offset(center: Point, right: Vector, up: Vector, x: float, y: float) -> Point:
    return Point.from_array(center.to_array() + right.to_array() * x + up.to_array() * y)


def disk_points(
    normal: Vector,
    center: Point,
    radius: float,
    count: int,
    rng: random.Random
) -> list[Point]:
    """Uniformly distributed random points on a disk.

    The radius is drawn through a square root so the points have uniform
    density over the area; the angle is uniform.

    Args:
        normal: Normal of the disk's plane
        center: Center of the disk
        radius: Disk radius
        count: Number of points
        rng: Random source
    """
    if radius < 0 or count < 1:
        raise ConfigurationError("radius must be non-negative and count at least 1")
    if is_zero(radius):
        return [center]

    right, up = perpendicular_basis(normal)
    points = []
    for _ in range(count):
        r = radius * math.sqrt(rng.random())
        theta = 2.0 * math.pi * rng.random()
        points.append(_offset(center, right, up, r * math.cos(theta), r * math.sin(theta)))
    return points
