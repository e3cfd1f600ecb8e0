"""Ray data structure and vector helpers used inside Taichi kernels.

Every ray the renderer creates carries a unit-length direction. The
intersection code relies on this (the quadratic's leading coefficient is
taken to be 1), so the constructors below assert it when Taichi runs in
debug mode.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, debug=True)
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0).z
    >>> probe()
    -5.0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Allowed deviation of |direction| from 1
NORMALIZED_TOLERANCE = 1e-3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
    """

    origin: vec3
    direction: vec3


@ti.func
def is_normalized(v: vec3) -> ti.i32:
    """Return 1 if v has unit length within NORMALIZED_TOLERANCE."""
    return ti.abs(tm.dot(v, v) - 1.0) < NORMALIZED_TOLERANCE


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, asserting (in debug mode) that direction is normalized.

    Args:
        origin: The starting point of the ray.
        direction: The unit direction of the ray.

    Returns:
        A new Ray instance.
    """
    assert is_normalized(direction), "ray direction must be normalized"
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point origin + t * direction."""
    return ray.origin + t * ray.direction


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal.

    The result is renormalized so a reflected ray keeps a unit direction
    even when the normal carries rounding error.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected unit direction.
    """
    return tm.normalize(incident - 2.0 * tm.dot(incident, normal) * normal)
