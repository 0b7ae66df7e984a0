"""
Geometric shapes for the ray tracer.

Every shape implements the Intersectable contract:
- `normal(point)` returns the unit surface normal at a point
- `intersect(ray)` returns every Intersection in front of the ray origin

Intersection lists are unordered; callers pick the closest themselves.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Optional, TYPE_CHECKING
import math

import numpy as np

from .errors import ConfigurationError, ZeroVectorError
from .materials import Material
from .ray import Ray
from .vec3 import Point, Vector, Color, is_zero, align_zero

if TYPE_CHECKING:
    from .lights import LightSource

# Padding applied to boxes in the slab test so flat boxes still get hit
BOX_EPSILON = 1e-9


@dataclass(eq=False)
class Intersection:
    """A ray-geometry intersection and the shading scratch data for it.

    Attributes:
        geometry: The geometry that was hit
        point: The intersection point in world space
        material: The material of the geometry
        v: Direction of the ray that produced this hit
        normal: Surface normal at the point
        v_normal: normal . v
        light: Light currently being evaluated
        l: Direction from that light toward the point
        l_normal: normal . l
    """
    geometry: Geometry
    point: Point
    material: Optional[Material] = None
    v: Optional[Vector] = None
    normal: Optional[Vector] = None
    v_normal: float = 0.0
    light: Optional[LightSource] = None
    l: Optional[Vector] = None
    l_normal: float = 0.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Intersection):
            return NotImplemented
        return self.geometry is other.geometry and self.point == other.point

    def __hash__(self) -> int:
        return hash((id(self.geometry), self.point))

    def __repr__(self) -> str:
        return f"Intersection(geometry={self.geometry!r}, point={self.point})"


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point, maximum: Point):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        if any(lo > hi for lo, hi in zip(minimum, maximum)):
            raise ConfigurationError(f"AABB minimum {minimum} exceeds maximum {maximum}")
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray) -> bool:
        """Conservative slab test.

        May accept rays that miss the enclosed geometry, never rejects a ray
        that reaches the box in front of its origin (or starts inside it).
        """
        origin = ray.origin.to_array()
        direction = ray.direction.to_array()
        t_min = 0.0
        t_max = math.inf

        for i in range(3):
            lo = self.minimum[i] - BOX_EPSILON
            hi = self.maximum[i] + BOX_EPSILON
            if direction[i] == 0.0:
                if origin[i] < lo or origin[i] > hi:
                    return False
                continue

            inv_d = 1.0 / direction[i]
            t0 = (lo - origin[i]) * inv_d
            t1 = (hi - origin[i]) * inv_d
            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = max(t0, t_min)
            t_max = min(t1, t_max)
            if t_max < t_min:
                return False

        return True

    @staticmethod
    def combine(box0: AABB, box1: AABB) -> AABB:
        """Return the smallest AABB that contains both input boxes."""
        return AABB(
            Point.from_array(np.minimum(box0.minimum.to_array(), box1.minimum.to_array())),
            Point.from_array(np.maximum(box0.maximum.to_array(), box1.maximum.to_array()))
        )

    @staticmethod
    def from_points(points) -> AABB:
        coords = np.array([p.to_array() for p in points])
        return AABB(Point.from_array(coords.min(axis=0)), Point.from_array(coords.max(axis=0)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return self.minimum == other.minimum and self.maximum == other.maximum

    __hash__ = None

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Intersectable(ABC):
    """Abstract base class for everything a ray can be tested against.

    The bounding box is computed on first request and cached. `intersect`
    uses it to reject rays before running the exact test.
    """

    _bbox: Optional[AABB] = None
    _bbox_ready: bool = False
    cull_with_bounding_box: bool = True

    def intersect(self, ray: Ray) -> list[Intersection]:
        """Return all intersections of the ray with this object."""
        if self.cull_with_bounding_box:
            box = self.bounding_box()
            if box is not None and not box.hit(ray):
                return []
        return self._intersect(ray)

    def find_intersections(self, ray: Ray) -> list[Point]:
        """Return just the intersection points."""
        return [intersection.point for intersection in self.intersect(ray)]

    @abstractmethod
    def _intersect(self, ray: Ray) -> list[Intersection]:
        """Exact intersection test, without any box rejection."""
        pass

    def bounding_box(self) -> Optional[AABB]:
        """Get the axis-aligned bounding box, or None for unbounded objects."""
        if not self._bbox_ready:
            self._bbox = self._calculate_bounding_box()
            self._bbox_ready = True
        return self._bbox

    def _calculate_bounding_box(self) -> Optional[AABB]:
        return None

    def invalidate_bounding_box(self) -> None:
        """Drop the cached box after a structural change."""
        self._bbox = None
        self._bbox_ready = False

    def prepare(self) -> None:
        """Resolve cached boxes ahead of concurrent reads."""
        self.bounding_box()


class Geometry(Intersectable):
    """A shape with an emission color and a material."""

    def __init__(self, emission: Optional[Color] = None, material: Optional[Material] = None):
        self.emission = emission if emission is not None else Color.BLACK
        self.material = material if material is not None else Material()

    def set_emission(self, emission: Color) -> Geometry:
        self.emission = emission
        return self

    def set_material(self, material: Material) -> Geometry:
        self.material = material
        return self

    @abstractmethod
    def normal(self, point: Point) -> Vector:
        """Unit normal at a point on the surface."""
        pass


class Plane(Geometry):
    """An infinite plane defined by a point and normal."""

    def __init__(self, point: Point, normal: Vector, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
        """
        super().__init__(emission, material)
        self.point = point
        self.normal_vector = normal.normalize()

    @classmethod
    def from_points(cls, a: Point, b: Point, c: Point, **kwargs) -> Plane:
        """Create the plane through three points."""
        try:
            normal = (b - a).cross(c - a).normalize()
        except ZeroVectorError as e:
            raise ConfigurationError("Plane points must be distinct and not collinear") from e
        return cls(a, normal, **kwargs)

    def normal(self, point: Point = None) -> Vector:
        return self.normal_vector

    def _intersect(self, ray: Ray) -> list[Intersection]:
        if ray.origin == self.point:
            return []

        # Parallel rays never hit, even when they run inside the plane
        denom = align_zero(self.normal_vector.dot(ray.direction))
        if denom == 0:
            return []

        t = align_zero(self.normal_vector.dot(self.point - ray.origin) / denom)
        if t <= 0:
            return []

        return [Intersection(self, ray.at(t), self.material)]

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal_vector})"


class Sphere(Geometry):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point, radius: float, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        super().__init__(emission, material)
        if radius <= 0:
            raise ConfigurationError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius

    def normal(self, point: Point) -> Vector:
        return (point - self.center).normalize()

    def _intersect(self, ray: Ray) -> list[Intersection]:
        """Geometric ray-sphere test.

        The center is projected onto the ray (tm); its distance d to the ray
        decides between 0 and 2 crossings at tm -/+ th.
        """
        if ray.origin == self.center:
            return [Intersection(self, ray.at(self.radius), self.material)]

        u = self.center - ray.origin
        tm = ray.direction.dot(u)
        d = math.sqrt(max(u.length_squared() - tm * tm, 0.0))
        if align_zero(d - self.radius) >= 0:
            return []

        th = math.sqrt(self.radius * self.radius - d * d)
        t0 = align_zero(tm - th)
        t1 = align_zero(tm + th)

        return [Intersection(self, ray.at(t), self.material) for t in (t0, t1) if t > 0]

    def _calculate_bounding_box(self) -> Optional[AABB]:
        r = np.full(3, self.radius)
        center = self.center.to_array()
        return AABB(Point.from_array(center - r), Point.from_array(center + r))

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Polygon(Geometry):
    """A convex planar polygon given by its vertices in edge order."""

    def __init__(self, *vertices: Point, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        """Create a polygon.

        Raises ConfigurationError for fewer than 3 vertices, coincident
        consecutive vertices, three collinear consecutive vertices,
        non-coplanar vertices or a concave/misordered vertex list.
        """
        super().__init__(emission, material)
        if len(vertices) < 3:
            raise ConfigurationError("A polygon can't have less than 3 vertices")
        self.vertices = tuple(vertices)
        self.size = len(vertices)
        self.plane = Plane.from_points(vertices[0], vertices[1], vertices[2])
        if self.size == 3:
            return  # triangles are always planar and convex

        n = self.plane.normal_vector
        try:
            edge1 = vertices[-1] - vertices[-2]
            edge2 = vertices[0] - vertices[-1]
            # Turn direction of the closing corner; every other corner must agree
            positive = edge1.cross(edge2).dot(n) > 0
            for i in range(1, self.size):
                if not is_zero((vertices[i] - vertices[0]).dot(n)):
                    raise ConfigurationError("All vertices of a polygon must lay in the same plane")
                edge1 = edge2
                edge2 = vertices[i] - vertices[i - 1]
                if positive != (edge1.cross(edge2).dot(n) > 0):
                    raise ConfigurationError("All vertices must be ordered and the polygon must be convex")
        except ZeroVectorError as e:
            raise ConfigurationError(
                "Polygon has coincident consecutive vertices or three collinear consecutive vertices"
            ) from e

    def normal(self, point: Point = None) -> Vector:
        return self.plane.normal_vector

    def _intersect(self, ray: Ray) -> list[Intersection]:
        plane_points = self.plane.find_intersections(ray)
        if not plane_points:
            return []

        origin = ray.origin
        direction = ray.direction
        if any(vertex == origin for vertex in self.vertices):
            return []

        # Edges and vertices count as outside
        positive = None
        try:
            for i in range(self.size):
                v1 = self.vertices[i] - origin
                v2 = self.vertices[(i + 1) % self.size] - origin
                sign = align_zero(v1.cross(v2).normalize().dot(direction))
                if sign == 0:
                    return []
                if positive is None:
                    positive = sign > 0
                elif positive != (sign > 0):
                    return []
        except ZeroVectorError:
            return []

        return [Intersection(self, plane_points[0], self.material)]

    def prepare(self) -> None:
        self.plane.prepare()
        super().prepare()

    def _calculate_bounding_box(self) -> Optional[AABB]:
        return AABB.from_points(self.vertices)

    def __repr__(self) -> str:
        return f"Polygon({', '.join(map(str, self.vertices))})"


class Triangle(Polygon):
    """A triangle defined by three vertices."""

    def __init__(self, p1: Point, p2: Point, p3: Point, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        super().__init__(p1, p2, p3, emission=emission, material=material)

    def __repr__(self) -> str:
        return f"Triangle({self.vertices[0]}, {self.vertices[1]}, {self.vertices[2]})"


class Tube(Geometry):
    """An infinite tube of given radius around an axis ray."""

    def __init__(self, radius: float, axis: Ray, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        super().__init__(emission, material)
        if radius <= 0:
            raise ConfigurationError(f"Tube radius must be positive, got {radius}")
        self.radius = radius
        self.axis = axis

    def normal(self, point: Point) -> Vector:
        vec = point - self.axis.origin
        t = align_zero(self.axis.direction.dot(vec))
        if t == 0:
            return vec.normalize()
        closest = self.axis.origin + self.axis.direction * t
        return (point - closest).normalize()

    def lateral_roots(self, ray: Ray) -> list[float]:
        """Ray parameters where the ray crosses the lateral surface, near to far.

        Solves |a t + b|^2 = r^2 where a and b are the components of the ray
        direction and of (origin - axis origin) perpendicular to the axis.
        """
        axis_dir = self.axis.direction.to_array()
        direction = ray.direction.to_array()
        delta = ray.origin.to_array() - self.axis.origin.to_array()

        a = direction - np.dot(direction, axis_dir) * axis_dir
        b = delta - np.dot(delta, axis_dir) * axis_dir

        qa = float(np.dot(a, a))
        if is_zero(qa):
            return []  # parallel to the axis
        qb = 2.0 * float(np.dot(a, b))
        qc = float(np.dot(b, b)) - self.radius * self.radius

        discriminant = align_zero(qb * qb - 4 * qa * qc)
        if discriminant <= 0:
            return []

        sqrt_d = math.sqrt(discriminant)
        roots = (align_zero((-qb - sqrt_d) / (2 * qa)), align_zero((-qb + sqrt_d) / (2 * qa)))
        return [t for t in roots if t > 0]

    def _intersect(self, ray: Ray) -> list[Intersection]:
        return [Intersection(self, ray.at(t), self.material) for t in self.lateral_roots(ray)]

    def __repr__(self) -> str:
        return f"Tube(radius={self.radius}, axis={self.axis})"


class Cylinder(Geometry):
    """A finite tube closed by two flat caps.

    Composed of a lateral Tube and one Plane per cap. The axis ray starts at
    the center of the first cap; the second cap lies `height` along it.
    """

    def __init__(self, height: float, axis: Ray, radius: float, emission: Optional[Color] = None,
                 material: Optional[Material] = None):
        super().__init__(emission, material)
        if height <= 0:
            raise ConfigurationError(f"Cylinder height must be positive, got {height}")
        self.tube = Tube(radius, axis)
        self.height = height
        self.radius = radius
        self.axis = axis
        self.bottom_center = axis.origin
        self.top_center = axis.origin + axis.direction * height
        self.bottom_cap = Plane(self.bottom_center, -axis.direction)
        self.top_cap = Plane(self.top_center, axis.direction)

    def normal(self, point: Point) -> Vector:
        direction = self.axis.direction
        if point == self.bottom_center:
            return -direction
        if point == self.top_center:
            return direction
        if is_zero((point - self.bottom_center).dot(direction)):
            return -direction
        if is_zero((point - self.top_center).dot(direction)):
            return direction
        return self.tube.normal(point)

    def _intersect(self, ray: Ray) -> list[Intersection]:
        axis_dir = self.axis.direction.to_array()
        base = self.bottom_center.to_array()
        points = []

        for t in self.tube.lateral_roots(ray):
            point = ray.at(t)
            height = align_zero(float(np.dot(point.to_array() - base, axis_dir)))
            if 0 < height and align_zero(height - self.height) < 0:
                points.append(point)

        r_squared = self.radius * self.radius
        for cap in (self.bottom_cap, self.top_cap):
            for point in cap.find_intersections(ray):
                if align_zero(point.distance_squared(cap.point) - r_squared) < 0:
                    points.append(point)

        points.sort(key=ray.origin.distance_squared)
        return [Intersection(self, point, self.material) for point in points]

    def prepare(self) -> None:
        for part in (self.tube, self.bottom_cap, self.top_cap):
            part.prepare()
        super().prepare()

    def _calculate_bounding_box(self) -> Optional[AABB]:
        # Each cap is a disk; its extent along axis k is r * sqrt(1 - d_k^2)
        axis_dir = self.axis.direction.to_array()
        extent = self.radius * np.sqrt(np.clip(1.0 - axis_dir * axis_dir, 0.0, 1.0))
        ends = np.array([self.bottom_center.to_array(), self.top_center.to_array()])
        return AABB(
            Point.from_array(ends.min(axis=0) - extent),
            Point.from_array(ends.max(axis=0) + extent)
        )

    def __repr__(self) -> str:
        return f"Cylinder(height={self.height}, axis={self.axis}, radius={self.radius})"


class Geometries(Intersectable):
    """A flat collection of intersectables.

    Intersection merges the results of every member. The collection's box
    is the union of the member boxes, or None if any member is unbounded.
    """

    def __init__(self, *geometries: Intersectable):
        self._items: list[Intersectable] = []
        self.add(*geometries)

    def add(self, *geometries: Intersectable) -> Geometries:
        """Add objects to the collection."""
        self._items.extend(geometries)
        self.invalidate_bounding_box()
        return self

    def clear(self) -> None:
        """Remove all objects."""
        self._items.clear()
        self.invalidate_bounding_box()

    def is_empty(self) -> bool:
        return not self._items

    def _intersect(self, ray: Ray) -> list[Intersection]:
        intersections: list[Intersection] = []
        for item in self._items:
            intersections.extend(item.intersect(ray))
        return intersections

    def _calculate_bounding_box(self) -> Optional[AABB]:
        if not self._items:
            return None
        boxes = [item.bounding_box() for item in self._items]
        if any(box is None for box in boxes):
            return None
        return reduce(AABB.combine, boxes)

    def prepare(self) -> None:
        for item in self._items:
            item.prepare()
        self.bounding_box()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __repr__(self) -> str:
        return f"Geometries({len(self._items)} items)"
