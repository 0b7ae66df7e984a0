"""
Three-component value types for 3D math.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors (never zero length)
- Per-channel material coefficients
- RGB color values

All types are immutable and store their components in a numpy array.
"""

from __future__ import annotations
import math
from typing import Union
import numpy as np

from .errors import ZeroVectorError

ACCURACY = 1e-10


def is_zero(value: float) -> bool:
    """Check whether a number is zero within the tracer's accuracy."""
    return abs(value) < ACCURACY


def align_zero(value: float) -> float:
    """Snap values that are practically zero to exactly 0.0."""
    return 0.0 if is_zero(value) else value


class Vec3:
    """A generic triple of floats.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API. Subclasses give the triple its meaning.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create an instance from a numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.all(np.abs(self._data - other._data) < ACCURACY))

    def __hash__(self) -> int:
        return hash(tuple(np.round(self._data, 8)))

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return iter(self._data.tolist())

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()


class Point(Vec3):
    """A location in 3D space."""

    __slots__ = ()

    def __add__(self, other: Vector) -> Point:
        return Point.from_array(self._data + other._data)

    def __sub__(self, other: Union[Point, Vector]) -> Union[Vector, Point]:
        """Point - Point gives the Vector between them, Point - Vector a Point."""
        if isinstance(other, Vector):
            return Point.from_array(self._data - other._data)
        return Vector.from_array(self._data - other._data)

    def distance_squared(self, other: Point) -> float:
        diff = self._data - other._data
        return float(np.dot(diff, diff))

    def distance(self, other: Point) -> float:
        return math.sqrt(self.distance_squared(other))


class Vector(Vec3):
    """A direction in 3D space.

    A vector can never have zero length: constructing one, or computing one
    through arithmetic, raises ZeroVectorError when all components vanish.
    """

    __slots__ = ()

    def __init__(self, x: float, y: float, z: float):
        super().__init__(x, y, z)
        self._check()

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vector:
        v = super().from_array(arr)
        v._check()
        return v

    def _check(self) -> None:
        if np.all(np.abs(self._data) < ACCURACY):
            raise ZeroVectorError("Vector cannot have zero length")

    def __neg__(self) -> Vector:
        return Vector.from_array(-self._data)

    def __add__(self, other: Vector) -> Vector:
        return Vector.from_array(self._data + other._data)

    def __sub__(self, other: Vector) -> Vector:
        return Vector.from_array(self._data - other._data)

    def __mul__(self, scalar: float) -> Vector:
        return Vector.from_array(self._data * scalar)

    def __rmul__(self, scalar: float) -> Vector:
        return Vector.from_array(scalar * self._data)

    def __truediv__(self, scalar: float) -> Vector:
        return Vector.from_array(self._data / scalar)

    def scale(self, scalar: float) -> Vector:
        return self * scalar

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vector:
        """Return a unit vector in the same direction."""
        return Vector.from_array(self._data / self.length())

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vector) -> Vector:
        """Compute cross product with another vector.

        Raises ZeroVectorError for parallel vectors.
        """
        a, b = self._data, other._data
        return Vector(
            a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0]
        )


class Double3(Vec3):
    """A per-channel coefficient triple (material factors, attenuation)."""

    __slots__ = ()

    def __init__(self, x: float, y: float = None, z: float = None):
        if y is None and z is None:
            y = z = x
        super().__init__(x, y, z)

    @classmethod
    def of(cls, value: Union[Double3, float]) -> Double3:
        """Accept a scalar or a triple and return a Double3."""
        if isinstance(value, Double3):
            return value
        if isinstance(value, Vec3):
            return cls.from_array(value._data.copy())
        return cls(float(value))

    def __add__(self, other: Double3) -> Double3:
        return Double3.from_array(self._data + other._data)

    def __mul__(self, other: Union[Double3, float]) -> Double3:
        if isinstance(other, Vec3):
            return Double3.from_array(self._data * other._data)
        return Double3.from_array(self._data * other)

    __rmul__ = __mul__

    def product(self, other: Double3) -> Double3:
        """Channel-wise product."""
        return self * other

    def scale(self, scalar: float) -> Double3:
        return self * scalar

    def lower_than(self, k: float) -> bool:
        """True when every channel is below k."""
        return bool(np.all(self._data < k))

    def not_above(self, k: float) -> bool:
        """True when every channel is at most k."""
        return bool(np.all(self._data <= k))


class Color(Vec3):
    """An RGB color with non-negative channels, unbounded above.

    Colors are expressed on a 0-255 scale and only clamped when written
    to an image file.
    """

    __slots__ = ()

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0):
        super().__init__(r, g, b)

    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __add__(self, other: Color) -> Color:
        return Color.from_array(self._data + other._data)

    def __mul__(self, other: Union[Vec3, float]) -> Color:
        if isinstance(other, Vec3):
            return Color.from_array(self._data * other._data)
        return Color.from_array(self._data * other)

    __rmul__ = __mul__

    def scale(self, k: Union[Double3, float]) -> Color:
        """Scale by a scalar or channel-wise by a triple."""
        return self * k

    def reduce(self, n: float) -> Color:
        """Divide every channel by n (sample averaging)."""
        return Color.from_array(self._data / n)


Point.ZERO = Point(0, 0, 0)
Vector.AXIS_X = Vector(1, 0, 0)
Vector.AXIS_Y = Vector(0, 1, 0)
Vector.AXIS_Z = Vector(0, 0, 1)
Double3.ZERO = Double3(0.0)
Double3.ONE = Double3(1.0)
Color.BLACK = Color(0, 0, 0)
