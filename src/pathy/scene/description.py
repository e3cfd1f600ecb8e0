"""Immutable, Python-side scene description.

A Scene is built once (by hand or by the XML loader) and then only read.
Each sphere carries its own Material, so there is no separate material list
that has to stay index-aligned with the sphere list.

The renderer copies a Scene into Taichi fields with
src.pathy.scene.intersection.upload_scene() before each render.

Example:
    >>> from src.pathy.scene.description import (
    ...     Material, PointLight, Scene, SceneSphere
    ... )
    >>> red = Material(base_color=(0.8, 0.1, 0.1))
    >>> scene = Scene(
    ...     spheres=(SceneSphere(center=(0, 0, 0), radius=1.0, material=red),),
    ...     point_lights=(PointLight(position=(0, 3, 0), intensity=(10, 10, 10)),),
    ... )
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

Vec3 = tuple[float, float, float]


def as_vec3(value: object, name: str) -> Vec3:
    """Coerce a 3-sequence (or a scalar, broadcast) to a tuple of floats.

    Raises:
        ValueError: If the value is not a scalar or a sequence of 3 finite
            numbers.
    """
    if isinstance(value, (int, float)):
        components = [float(value)] * 3
    else:
        try:
            components = [float(c) for c in value]  # type: ignore[union-attr]
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name} must be a number or 3 numbers, got {value!r}") from e
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ValueError(f"{name} must be finite, got {components}")
    return (components[0], components[1], components[2])


@dataclass(frozen=True)
class Material:
    """Surface material.

    Attributes:
        base_color: Linear RGB albedo (diffuse) or reflectance (mirror).
        is_mirror: True for a perfect mirror, False for Lambertian diffuse.
    """

    base_color: Vec3 = (0.5, 0.5, 0.5)
    is_mirror: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_color", as_vec3(self.base_color, "base_color"))


@dataclass(frozen=True)
class SceneSphere:
    """A sphere paired with the material it is made of."""

    center: Vec3
    radius: float
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3(self.center, "center"))
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", float(self.radius))


@dataclass(frozen=True)
class PointLight:
    """Isotropic point light.

    Attributes:
        position: Light position in world space.
        intensity: Radiant intensity (W/sr) per RGB channel.
    """

    position: Vec3
    intensity: Vec3 = (0.9, 0.9, 0.9)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3(self.position, "position"))
        object.__setattr__(self, "intensity", as_vec3(self.intensity, "intensity"))


@dataclass(frozen=True)
class SphereAreaLight:
    """Spherical area light sampled over its visible cap.

    Attributes:
        position: Center of the light sphere.
        radius: Radius of the light sphere. A radius of 0 is accepted and
            contributes nothing.
        intensity: Emitted radiance per RGB channel.
    """

    position: Vec3
    radius: float
    intensity: Vec3 = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3(self.position, "position"))
        object.__setattr__(self, "intensity", as_vec3(self.intensity, "intensity"))
        if self.radius < 0.0:
            raise ValueError(f"Area light radius must be non-negative, got {self.radius}")
        object.__setattr__(self, "radius", float(self.radius))


@dataclass(frozen=True)
class ConstantLight:
    """Uniform environment light seen by rays that leave the scene."""

    radiance: Vec3 = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "radiance", as_vec3(self.radiance, "radiance"))


@dataclass(frozen=True)
class CameraConfig:
    """Viewpoint of the render.

    The defaults place the eye at (0, 2, 3) looking at the origin with +Y up
    and a 60 degree vertical field of view.

    Attributes:
        eye: Camera position.
        look_at: Point the camera looks at.
        up: Approximate up direction (must not be parallel to the view).
        vfov: Vertical field of view in degrees.
        near: Near clipping plane distance.
        far: Far clipping plane distance.
    """

    eye: Vec3 = (0.0, 2.0, 3.0)
    look_at: Vec3 = (0.0, 0.0, 0.0)
    up: Vec3 = (0.0, 1.0, 0.0)
    vfov: float = 60.0
    near: float = 0.1
    far: float = 128.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "eye", as_vec3(self.eye, "eye"))
        object.__setattr__(self, "look_at", as_vec3(self.look_at, "look_at"))
        object.__setattr__(self, "up", as_vec3(self.up, "up"))
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.vfov}")
        if not 0.0 < self.near < self.far:
            raise ValueError(f"Clip planes must satisfy 0 < near < far, got {self.near}, {self.far}")


@dataclass(frozen=True)
class Scene:
    """Everything the renderer needs to draw a frame.

    Attributes:
        spheres: Geometry with paired materials, in intersection order.
        point_lights: Point lights.
        area_lights: Spherical area lights.
        constant_light: The single environment light.
        camera: Viewpoint.
    """

    spheres: tuple[SceneSphere, ...] = ()
    point_lights: tuple[PointLight, ...] = ()
    area_lights: tuple[SphereAreaLight, ...] = ()
    constant_light: ConstantLight = field(default_factory=ConstantLight)
    camera: CameraConfig = field(default_factory=CameraConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "spheres", tuple(self.spheres))
        object.__setattr__(self, "point_lights", tuple(self.point_lights))
        object.__setattr__(self, "area_lights", tuple(self.area_lights))
