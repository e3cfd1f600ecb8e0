"""Timing and throughput statistics for a render.

Example:
    >>> from src.pathy.core.stats import timed_render
    >>> stats = timed_render(scene, image)
    >>> print(stats.summary())
    completed in 1.23 seconds (4.56 million rays/second)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from src.pathy.core.render import Image, RenderSettings, render
from src.pathy.scene.description import Scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderStats:
    """Outcome of one timed render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        ray_count: Total rays traced.
        seconds: Wall-clock duration of the render call.
    """

    width: int
    height: int
    ray_count: int
    seconds: float

    @property
    def rays_per_second(self) -> float:
        if self.seconds <= 0.0:
            return 0.0
        return self.ray_count / self.seconds

    @property
    def million_rays_per_second(self) -> float:
        return self.rays_per_second * 1e-6

    def summary(self) -> str:
        return (
            f"completed in {self.seconds:.2f} seconds "
            f"({self.million_rays_per_second:.2f} million rays/second)"
        )


def timed_render(
    scene: Scene, image: Image, settings: RenderSettings | None = None
) -> RenderStats:
    """Render an image and measure how long it took.

    The first render in a process includes Taichi's kernel compilation.

    Returns:
        RenderStats for the call.
    """
    start = time.perf_counter()
    ray_count = render(scene, image, settings)
    seconds = time.perf_counter() - start

    stats = RenderStats(
        width=image.width, height=image.height, ray_count=ray_count, seconds=seconds
    )
    logger.info("%dx%d render %s", image.width, image.height, stats.summary())
    return stats
