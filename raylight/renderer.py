"""
Renderer module - drives the ray tracer over the image plane.

Implements:
- Sequential rendering
- Data-parallel rendering of rows on a thread pool executor
- A fixed pool of worker threads pulling pixels from a shared PixelManager
- 8-bit output through Pillow
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
import logging
import os
import threading
import time
from typing import Callable, Optional, TYPE_CHECKING

import numpy as np

from .errors import ConfigurationError
from .pixel_manager import PixelManager

if TYPE_CHECKING:
    from .camera import Camera

logger = logging.getLogger(__name__)


class RenderStrategy(Enum):
    """How pixels are distributed over threads."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    THREAD_POOL = "thread_pool"


def default_thread_count() -> int:
    """Number of workers used when none is given: all cores but two, at least one."""
    return max(1, (os.cpu_count() or 1) - 2)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    strategy: RenderStrategy = RenderStrategy.SEQUENTIAL
    thread_count: int = 0  # 0 = auto-detect
    debug_print: float = 0.0  # progress log interval in percent, 0 = off

    def __post_init__(self):
        if self.thread_count < 0:
            raise ConfigurationError("thread_count must be non-negative")
        if not 0 <= self.debug_print <= 100:
            raise ConfigurationError("debug_print must be between 0 and 100 percent")
        if self.thread_count == 0:
            self.thread_count = default_thread_count()

    @classmethod
    def from_code(cls, code: int, debug_print: float = 0.0) -> RenderSettings:
        """Settings from an integer threading code.

        0 renders sequentially, -1 data-parallel, -2 on a pool of
        automatically sized workers, and a positive n on a pool of n workers.
        """
        if code == 0:
            return cls(RenderStrategy.SEQUENTIAL, 1, debug_print)
        if code == -1:
            return cls(RenderStrategy.PARALLEL, 0, debug_print)
        if code == -2:
            return cls(RenderStrategy.THREAD_POOL, 0, debug_print)
        if code > 0:
            return cls(RenderStrategy.THREAD_POOL, code, debug_print)
        raise ConfigurationError(f"Invalid multithreading code: {code}")


class Renderer:
    """Renders a camera's view into a float image buffer."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, camera: Camera) -> np.ndarray:
        """Render the camera's view.

        Args:
            camera: The camera to render from

        Returns:
            Image as numpy array of shape (ny, nx, 3), colors on a 0-255 scale
        """
        nx, ny = camera.nx, camera.ny
        image = np.zeros((ny, nx, 3), dtype=np.float64)

        # Every lazy cache is filled before any worker reads the scene
        camera.ray_tracer.scene.geometries.prepare()

        pixels = PixelManager(ny, nx, self.settings.debug_print, self._progress_callback)
        strategy = self.settings.strategy
        logger.info(
            "Rendering %dx%d (%s, %d threads)", nx, ny, strategy.value,
            1 if strategy is RenderStrategy.SEQUENTIAL else self.settings.thread_count
        )
        start = time.perf_counter()

        def cast_pixel(row: int, column: int) -> None:
            image[row, column] = camera.cast_ray(column, row).to_array()
            pixels.pixel_done()

        def render_row(row: int) -> None:
            for column in range(nx):
                cast_pixel(row, column)

        if strategy is RenderStrategy.SEQUENTIAL:
            for row in range(ny):
                render_row(row)
        elif strategy is RenderStrategy.PARALLEL:
            with ThreadPoolExecutor(max_workers=self.settings.thread_count) as executor:
                list(executor.map(render_row, range(ny)))
        else:
            self._run_pool(pixels, cast_pixel)

        logger.info("Rendered %d pixels in %.2fs", pixels.total, time.perf_counter() - start)
        return image

    def _run_pool(self, pixels: PixelManager, cast_pixel: Callable[[int, int], None]) -> None:
        """Run worker threads until the pixel manager runs dry.

        The first exception raised by a worker is re-raised once all
        workers have stopped.
        """
        errors: list[BaseException] = []

        def worker() -> None:
            while not errors:
                pixel = pixels.next_pixel()
                if pixel is None:
                    return
                try:
                    cast_pixel(*pixel)
                except Exception as e:
                    errors.append(e)
                    return

        threads = [
            threading.Thread(target=worker, name=f"raylight-worker-{i}")
            for i in range(self.settings.thread_count)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise errors[0]


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Clamp a 0-255 float image and convert it to 8 bits.

    Args:
        image: Image array (float64)

    Returns:
        LDR image as uint8 array
    """
    return np.clip(image, 0, 255).astype(np.uint8)


def save_image(image: np.ndarray, filename: str) -> None:
    """Save image to file.

    Args:
        image: Float image on a 0-255 scale, or an 8-bit image
        filename: Output filename (extension determines format)
    """
    from PIL import Image as PILImage

    if image.dtype != np.uint8:
        image = to_ldr(image)

    PILImage.fromarray(image, 'RGB').save(filename)
    logger.info("Wrote %s", filename)
