"""Sphere primitive and ray-sphere intersection.

The intersection solves the ray-sphere quadratic in the frame centered on the
sphere. Because ray directions are unit length the quadratic's leading
coefficient is 1 and, with the half-b formulation, the roots are:

    b = dot(origin - center, direction)
    c = dot(origin - center, origin - center) - radius^2
    t = -b -/+ sqrt(b^2 - c)

The smaller root is tested first; if it lies outside (t_min, t_max) the
larger root is tested, which is the root that matters when the ray starts
inside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathy.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Spheres with radius <= 0 are
            never hit.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 otherwise.
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal, (point - center) / radius. It is not
            flipped when the ray starts inside the sphere.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def hit_sphere_t(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Find the nearest valid root of the ray-sphere quadratic.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test.
        t_min: Exclusive lower bound for a valid root.
        t_max: Exclusive upper bound for a valid root.

    Returns:
        A tuple (hit, t). t is only meaningful when hit == 1.
    """
    did_hit = 0
    hit_t = 0.0

    if sphere.radius > 0.0:
        oc = ray_origin - sphere.center
        b = tm.dot(oc, ray_direction)
        c = tm.dot(oc, oc) - sphere.radius * sphere.radius
        discriminant = b * b - c

        if discriminant > 0.0:
            sqrt_d = ti.sqrt(discriminant)

            t = -b - sqrt_d
            if t < t_max and t > t_min:
                did_hit = 1
                hit_t = t
            else:
                t = -b + sqrt_d
                if t < t_max and t > t_min:
                    did_hit = 1
                    hit_t = t

    return did_hit, hit_t


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test.
        t_min: Exclusive lower bound for a valid hit (suppresses self-hits).
        t_max: Exclusive upper bound for a valid hit.

    Returns:
        A HitRecord. Check the hit field to see whether an intersection
        was found.
    """
    did_hit, hit_t = hit_sphere_t(ray_origin, ray_direction, sphere, t_min, t_max)

    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    if did_hit == 1:
        hit_point = ray_origin + hit_t * ray_direction
        hit_normal = (hit_point - sphere.center) * (1.0 / sphere.radius)

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
