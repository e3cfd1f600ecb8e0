"""Preview module for output and visualization.

Components:
    tonemap: Linear radiance to gamma-encoded BGR bytes
    export: PNG export via Pillow
    window: Taichi GGUI window showing a finished render

Example:
    >>> from src.pathy.preview import save_png
    >>> save_png(image, "render.png")
"""

from src.pathy.preview.export import bgr_to_rgb, image_to_rgb_array, save_png
from src.pathy.preview.tonemap import GAMMA_EXPONENT, linear_to_srgb_numpy, tone_map
from src.pathy.preview.window import PreviewWindow

__all__ = [
    "PreviewWindow",
    "tone_map",
    "linear_to_srgb_numpy",
    "GAMMA_EXPONENT",
    "save_png",
    "image_to_rgb_array",
    "bgr_to_rgb",
]
