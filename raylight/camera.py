"""
Camera module for generating primary rays and rendering them.

The camera is a pinhole at `location` looking along `v_to`, with a view
plane of `width` x `height` at `distance` in front of it, divided into
`nx` x `ny` pixels. Cameras are assembled with CameraBuilder and are not
changed afterwards, apart from the image they render into.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np

from .errors import ConfigurationError, ZeroVectorError
from .ray import Ray
from .renderer import Renderer, RenderSettings, RenderStrategy, save_image
from .scene import Scene
from .tracer import RayTracerBase, RayTracerType, create_ray_tracer
from .vec3 import Point, Vector, Color, is_zero

logger = logging.getLogger(__name__)


class Camera:
    """A pinhole camera with an orthonormal basis."""

    def __init__(self):
        self.location: Optional[Point] = None
        self.v_to: Optional[Vector] = None
        self.v_up: Optional[Vector] = None
        self.v_right: Optional[Vector] = None
        self.width = 0.0
        self.height = 0.0
        self.distance = 0.0
        self.nx = 0
        self.ny = 0
        self.ray_tracer: Optional[RayTracerBase] = None
        self.settings = RenderSettings()
        self.image: Optional[np.ndarray] = None

    @staticmethod
    def builder() -> CameraBuilder:
        return CameraBuilder()

    def construct_ray(self, nx: int, ny: int, j: int, i: int) -> Ray:
        """Ray from the camera through the center of pixel (j, i).

        Args:
            nx, ny: Resolution of the view plane
            j: Column of the pixel
            i: Row of the pixel (0 is the top row)
        """
        x_j = (j - (nx - 1) / 2) * self.width / nx
        y_i = -(i - (ny - 1) / 2) * self.height / ny

        p_ij = self.location + self.v_to * self.distance
        if not is_zero(x_j):
            p_ij = p_ij + self.v_right * x_j
        if not is_zero(y_i):
            p_ij = p_ij + self.v_up * y_i

        return Ray(self.location, p_ij - self.location)

    def cast_ray(self, j: int, i: int) -> Color:
        """Color of pixel (j, i) at the camera's own resolution."""
        return self.ray_tracer.trace_ray(self.construct_ray(self.nx, self.ny, j, i))

    def render_image(self) -> Camera:
        """Render every pixel into `self.image`; blocks until done."""
        self.image = Renderer(self.settings).render(self)
        return self

    def print_grid(self, interval: int, color: Color) -> Camera:
        """Draw grid lines every `interval` pixels over the image."""
        if interval < 1:
            raise ConfigurationError("Grid interval must be at least 1")
        if self.image is None:
            self.image = np.zeros((self.ny, self.nx, 3), dtype=np.float64)
        self.image[::interval, :] = color.to_array()
        self.image[:, ::interval] = color.to_array()
        return self

    def write_to_image(self, filename: str) -> None:
        """Save the rendered image."""
        if self.image is None:
            raise ConfigurationError("Nothing to write: render the image first")
        save_image(self.image, filename)

    def __repr__(self) -> str:
        return f"Camera(location={self.location}, v_to={self.v_to}, resolution={self.nx}x{self.ny})"


class CameraBuilder:
    """Step-by-step construction of a Camera.

    Setters validate what they can on their own and return the builder;
    `build()` checks the whole configuration.
    """

    def __init__(self):
        self._location: Optional[Point] = None
        self._v_to: Optional[Vector] = None
        self._v_up: Optional[Vector] = None
        self._width = 0.0
        self._height = 0.0
        self._distance = 0.0
        self._nx = 0
        self._ny = 0
        self._scene: Optional[Scene] = None
        self._tracer_type: Optional[RayTracerType] = None
        self._soft_shadows = False
        self._grid_resolution = 5
        self._settings: Union[RenderSettings, int] = 0
        self._debug_print = 0.0

    def set_location(self, location: Point) -> CameraBuilder:
        self._location = location
        return self

    def set_direction(self, v_to: Vector, v_up: Vector) -> CameraBuilder:
        """Set the forward and up vectors; they must be orthogonal."""
        if not is_zero(v_to.dot(v_up)):
            raise ConfigurationError("v_to and v_up must be orthogonal")
        self._v_to = v_to.normalize()
        self._v_up = v_up.normalize()
        return self

    def set_direction_to(self, target: Point, v_up: Vector = Vector.AXIS_Y) -> CameraBuilder:
        """Look at a target point.

        The up vector is only a hint: it is replaced by the closest vector
        orthogonal to the viewing direction. Requires the location.
        """
        if self._location is None:
            raise ConfigurationError("Set the location before looking at a target")
        try:
            v_to = (target - self._location).normalize()
            v_right = v_to.cross(v_up).normalize()
        except ZeroVectorError as e:
            raise ConfigurationError("Target must differ from the location and not lie along v_up") from e
        self._v_to = v_to
        self._v_up = v_right.cross(v_to).normalize()
        return self

    def set_vp_size(self, width: float, height: float) -> CameraBuilder:
        if width <= 0 or height <= 0:
            raise ConfigurationError("View plane width and height must be positive")
        self._width = width
        self._height = height
        return self

    def set_vp_distance(self, distance: float) -> CameraBuilder:
        if distance <= 0:
            raise ConfigurationError("View plane distance must be positive")
        self._distance = distance
        return self

    def set_resolution(self, nx: int, ny: int) -> CameraBuilder:
        if nx <= 0 or ny <= 0:
            raise ConfigurationError("Resolution must be positive")
        self._nx = nx
        self._ny = ny
        return self

    def set_ray_tracer(self, scene: Scene, tracer_type: RayTracerType = RayTracerType.SIMPLE) -> CameraBuilder:
        self._scene = scene
        self._tracer_type = tracer_type
        return self

    def set_soft_shadows(self, enabled: bool = True) -> CameraBuilder:
        self._soft_shadows = enabled
        return self

    def set_grid_resolution(self, resolution: int) -> CameraBuilder:
        if resolution < 1:
            raise ConfigurationError("Grid resolution must be at least 1")
        self._grid_resolution = resolution
        return self

    def set_multithreading(self, strategy: Union[RenderStrategy, int], thread_count: int = 0) -> CameraBuilder:
        """Choose how pixels are spread over threads.

        Args:
            strategy: A RenderStrategy, or an integer code (0 sequential,
                -1 data-parallel, -2 auto-sized pool, n > 0 pool of n threads)
            thread_count: Workers for a RenderStrategy (0 = auto)
        """
        if isinstance(strategy, RenderStrategy):
            self._settings = RenderSettings(strategy, thread_count)
        else:
            RenderSettings.from_code(strategy)
            self._settings = strategy
        return self

    def set_debug_print(self, percent: float) -> CameraBuilder:
        """Log rendering progress every `percent` percent (0 = off)."""
        if not 0 <= percent <= 100:
            raise ConfigurationError("Debug print interval must be between 0 and 100 percent")
        self._debug_print = percent
        return self

    def build(self) -> Camera:
        missing = [
            name for name, value in (
                ('location', self._location),
                ('v_to', self._v_to),
                ('v_up', self._v_up),
                ('ray tracer', self._scene),
            ) if value is None
        ]
        missing += [
            name for name, value in (
                ('width', self._width),
                ('height', self._height),
                ('distance', self._distance),
                ('nx', self._nx),
                ('ny', self._ny),
            ) if value == 0
        ]
        if missing:
            raise ConfigurationError(f"Camera values not set: {', '.join(missing)}")

        try:
            v_right = self._v_to.cross(self._v_up).normalize()
        except ZeroVectorError as e:
            raise ConfigurationError("v_to and v_up must not be parallel") from e
        if not (is_zero(self._v_to.dot(v_right)) and is_zero(self._v_to.dot(self._v_up))
                and is_zero(v_right.dot(self._v_up))):
            raise ConfigurationError("v_to, v_up and v_right must be orthogonal")
        if not all(is_zero(v.length() - 1) for v in (self._v_to, self._v_up, v_right)):
            raise ConfigurationError("v_to, v_up and v_right must be normalized")

        camera = Camera()
        camera.location = self._location
        camera.v_to = self._v_to
        camera.v_up = self._v_up
        camera.v_right = v_right
        camera.width = self._width
        camera.height = self._height
        camera.distance = self._distance
        camera.nx = self._nx
        camera.ny = self._ny
        camera.ray_tracer = create_ray_tracer(
            self._scene, self._tracer_type,
            soft_shadows=self._soft_shadows, grid_resolution=self._grid_resolution
        )
        if isinstance(self._settings, RenderSettings):
            camera.settings = RenderSettings(
                self._settings.strategy, self._settings.thread_count, self._debug_print
            )
        else:
            camera.settings = RenderSettings.from_code(self._settings, self._debug_print)

        logger.debug("Built %r", camera)
        return camera
