"""Camera module for primary ray generation.

Components:
    perspective: Matrix-based perspective camera

Ray generation uses normalized screen coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: bottom to top across the image
"""

from .perspective import (
    PerspectiveCamera,
    get_ray,
    look_at_rh,
    perspective_fov_rh,
    setup_camera,
)

__all__ = [
    "PerspectiveCamera",
    "setup_camera",
    "get_ray",
    "look_at_rh",
    "perspective_fov_rh",
]
