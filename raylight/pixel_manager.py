"""
Shared work cursor and progress counter for concurrent rendering.
"""

from __future__ import annotations
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PixelManager:
    """Hands out pixels to render workers and tracks completion.

    Pixels are handed out row by row. Every method is safe to call from
    any number of threads.
    """

    def __init__(
        self,
        ny: int,
        nx: int,
        debug_print: float = 0.0,
        callback: Optional[Callable[[float], None]] = None
    ):
        """Create a pixel manager.

        Args:
            ny: Number of rows
            nx: Number of columns
            debug_print: Log progress every this many percent (0 = never)
            callback: Called with the progress (0.0 to 1.0) after every pixel
        """
        self.ny = ny
        self.nx = nx
        self.total = ny * nx
        self.debug_print = debug_print
        self._callback = callback
        self._lock = threading.Lock()
        self._cursor = 0
        self._done = 0
        self._last_reported = 0.0

    def next_pixel(self) -> Optional[tuple[int, int]]:
        """Claim the next unrendered pixel as (row, column), or None when all are taken."""
        with self._lock:
            if self._cursor >= self.total:
                return None
            pixel = divmod(self._cursor, self.nx)
            self._cursor += 1
            return pixel

    def pixel_done(self) -> None:
        """Record one finished pixel."""
        report = None
        with self._lock:
            self._done += 1
            progress = self._done / self.total
            percent = progress * 100.0
            if self.debug_print > 0 and (
                percent - self._last_reported >= self.debug_print or self._done == self.total
            ):
                self._last_reported = percent
                report = (percent, self._done)

        if report is not None:
            logger.info("Rendered %.1f%% (%d/%d pixels)", report[0], report[1], self.total)
        if self._callback:
            self._callback(progress)

    @property
    def done(self) -> int:
        with self._lock:
            return self._done

    @property
    def progress(self) -> float:
        with self._lock:
            return self._done / self.total if self.total else 1.0
