"""Scene module: description, loading and GPU-side storage.

Components:
    description: Immutable scene dataclasses (spheres paired with materials,
        lights, camera configuration)
    loader: Mitsuba-style XML scene files
    intersection: Taichi-field scene storage and ray-scene queries

The intersection module declares Taichi fields and is not imported here;
import it directly after src.pathy.core.runtime.init_runtime().
"""

from .description import (
    CameraConfig,
    ConstantLight,
    Material,
    PointLight,
    Scene,
    SceneSphere,
    SphereAreaLight,
)
from .loader import SceneLoadError, load_scene, parse_scene

__all__ = [
    "Scene",
    "SceneSphere",
    "Material",
    "PointLight",
    "SphereAreaLight",
    "ConstantLight",
    "CameraConfig",
    "load_scene",
    "parse_scene",
    "SceneLoadError",
]
