"""Parallel render dispatch.

render() repaints every pixel of an Image. The work is split into one unit
per image row: the outermost loop of the render kernel runs over rows, and
Taichi distributes its iterations across the CPU thread pool created by
ti.init(). Within a row, pixels are computed one after another.

Each row writes only its own pixels and its own slot of a per-row ray
counter array, so no two units touch the same memory. The kernel launch is
followed by ti.sync(), after which the per-row counters are summed.

Example:
    >>> from src.pathy.core.runtime import init_runtime
    >>> init_runtime()
    >>> from src.pathy.core.render import Image, render
    >>> from src.pathy.scene.loader import load_scene
    >>> image = Image(640, 480)
    >>> ray_count = render(load_scene("examples/scenes/spheres.xml"), image)
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathy.camera.perspective import PerspectiveCamera, get_ray, setup_camera
from src.pathy.core.integrator import LIGHT_SAMPLES, MAX_DEPTH, radiance
from src.pathy.core.runtime import pool_size
from src.pathy.preview.tonemap import encode_pixel
from src.pathy.scene.description import Scene
from src.pathy.scene.intersection import upload_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 8192
MAX_IMAGE_HEIGHT = 8192


# =============================================================================
# Settings
# =============================================================================


@dataclass
class RenderSettings:
    """Options for a render call.

    Attributes:
        max_depth: Mirror bounces followed before a path contributes zero.
        light_samples: Samples per sphere area light and for the
            environment light.
        workers: 1 renders the rows one after another on a single thread.
            None uses the thread pool set up by init_runtime(); any other
            value must equal that pool size.
    """

    max_depth: int = MAX_DEPTH
    light_samples: int = LIGHT_SAMPLES
    workers: int | None = None

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.light_samples < 0:
            raise ValueError(f"light_samples must be non-negative, got {self.light_samples}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


# =============================================================================
# Image Buffer
# =============================================================================


class Image:
    """Pixel buffer written by the renderer.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pitch: Bytes per row (3 bytes per pixel, no padding).
        pixels: uint8 array of shape (height, width, 3) in B, G, R order.
            Row 0 is the bottom of the view.
        linear: float32 array of shape (height, width, 3) holding the linear
            RGB radiance of the last render, before tone mapping.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a white image.

        Raises:
            ValueError: If a dimension is not positive or exceeds the maximum
                supported size.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({width}x{height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

        self.width = width
        self.height = height
        self.pitch = width * 3
        self.pixels: npt.NDArray[np.uint8] = np.full((height, width, 3), 255, dtype=np.uint8)
        self.linear: npt.NDArray[np.float32] = np.zeros((height, width, 3), dtype=np.float32)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Return the (blue, green, red) bytes at column x, row y."""
        b, g, r = self.pixels[y, x]
        return int(b), int(g), int(r)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _render_row(
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    light_samples: ti.i32,
    pixels: ti.template(),
    linear: ti.template(),
) -> ti.i64:
    """Render every pixel of row y in order and return the rays traced."""
    rays = ti.cast(0, ti.i64)
    v = ti.cast(y, ti.f32) / ti.cast(height, ti.f32)

    for x in range(width):
        u = ti.cast(x, ti.f32) / ti.cast(width, ti.f32)
        ray = get_ray(u, v)
        color, pixel_rays = radiance(ray.origin, ray.direction, 0, max_depth, light_samples)
        rays += pixel_rays

        for c in ti.static(range(3)):
            linear[y, x, c] = color[c]

        blue, green, red = encode_pixel(color)
        pixels[y, x, 0] = blue
        pixels[y, x, 1] = green
        pixels[y, x, 2] = red

    return rays


@ti.kernel
def _render_rows(
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    light_samples: ti.i32,
    pixels: ti.types.ndarray(dtype=ti.u8, ndim=3),
    linear: ti.types.ndarray(dtype=ti.f32, ndim=3),
    row_rays: ti.types.ndarray(dtype=ti.i64, ndim=1),
):
    """Render all rows, one parallel task per row."""
    for y in range(height):
        row_rays[y] = _render_row(y, width, height, max_depth, light_samples, pixels, linear)


@ti.kernel
def _render_rows_serial(
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    light_samples: ti.i32,
    pixels: ti.types.ndarray(dtype=ti.u8, ndim=3),
    linear: ti.types.ndarray(dtype=ti.f32, ndim=3),
    row_rays: ti.types.ndarray(dtype=ti.i64, ndim=1),
):
    """Render all rows on a single thread, bottom row first."""
    ti.loop_config(serialize=True)
    for y in range(height):
        row_rays[y] = _render_row(y, width, height, max_depth, light_samples, pixels, linear)


# Single-pixel probe results
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_rays = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    light_samples: ti.i32,
):
    u = ti.cast(x, ti.f32) / ti.cast(width, ti.f32)
    v = ti.cast(y, ti.f32) / ti.cast(height, ti.f32)
    ray = get_ray(u, v)
    color, rays = radiance(ray.origin, ray.direction, 0, max_depth, light_samples)
    _probe_color[None] = color
    _probe_rays[None] = rays


# =============================================================================
# Public Rendering API
# =============================================================================


def prepare_scene(scene: Scene, width: int, height: int) -> PerspectiveCamera:
    """Upload the scene and its camera for an image of the given size.

    Returns:
        The camera built for the image's aspect ratio.
    """
    upload_scene(scene)
    camera = PerspectiveCamera(scene.camera, width / height)
    setup_camera(camera)
    return camera


def render(scene: Scene, image: Image, settings: RenderSettings | None = None) -> int:
    """Repaint every pixel of an image.

    Blocks until every row has been rendered.

    Args:
        scene: The scene to render.
        image: The buffer to fill; its pixels and linear arrays are
            overwritten.
        settings: Render options (defaults to RenderSettings()).

    Returns:
        The total number of rays traced: primary, reflected and shadow.

    Raises:
        ValueError: If settings.workers is neither None, 1, nor the pool
            size passed to init_runtime().
    """
    if settings is None:
        settings = RenderSettings()

    configured = pool_size()
    if settings.workers not in (None, 1) and settings.workers != configured:
        raise ValueError(
            f"RenderSettings.workers={settings.workers} does not match the "
            f"{configured} worker threads set up by init_runtime()"
        )

    prepare_scene(scene, image.width, image.height)

    row_rays = np.zeros(image.height, dtype=np.int64)
    kernel = _render_rows_serial if settings.workers == 1 else _render_rows
    kernel(
        image.width,
        image.height,
        settings.max_depth,
        settings.light_samples,
        image.pixels,
        image.linear,
        row_rays,
    )
    ti.sync()

    total = int(row_rays.sum())
    logger.debug(
        "Rendered %dx%d image (%s): %d rays",
        image.width,
        image.height,
        "single worker" if settings.workers == 1 else "parallel rows",
        total,
    )
    return total


def trace_pixel(
    scene: Scene,
    width: int,
    height: int,
    x: int,
    y: int,
    settings: RenderSettings | None = None,
) -> tuple[tuple[float, float, float], int]:
    """Estimate the linear radiance of a single pixel.

    Useful for debugging and tests. Pixel (0, 0) is the bottom-left corner.

    Returns:
        A tuple ((r, g, b), rays).
    """
    if settings is None:
        settings = RenderSettings()

    prepare_scene(scene, width, height)
    _trace_single_pixel(x, y, width, height, settings.max_depth, settings.light_samples)

    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2])), int(_probe_rays[None])
