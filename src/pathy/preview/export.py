"""Image export utilities for rendered images.

The renderer's pixel buffer is stored bottom row first in B, G, R order.
These helpers turn it into a conventional top-row-first RGB array and save
it with Pillow.

Example:
    >>> from src.pathy.preview.export import save_png
    >>> save_png(image, "render.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathy.core.render import Image


def bgr_to_rgb(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Reorder the channels of a (H, W, 3) BGR array to RGB."""
    return np.ascontiguousarray(pixels[..., ::-1])


def image_to_rgb_array(image: Image) -> npt.NDArray[np.uint8]:
    """Get the pixel buffer as a (height, width, 3) RGB array, top row first.

    Args:
        image: The rendered image.

    Returns:
        A new uint8 array; the image itself is not modified.
    """
    # Row 0 of the buffer is the bottom of the view
    return np.ascontiguousarray(np.flipud(bgr_to_rgb(image.pixels)))


def save_png(image: Image, filepath: str | Path) -> Path:
    """Save the rendered image as an 8-bit PNG.

    The pixel bytes are written as they are; tone mapping already happened
    during the render.

    Args:
        image: The rendered image.
        filepath: Output file path (should end in .png).

    Returns:
        The path written to.
    """
    path = Path(filepath)
    pil_image = PILImage.fromarray(image_to_rgb_array(image))
    pil_image.save(path)
    return path
