"""Monte Carlo sampling routines for light estimation.

Random numbers come from ti.random(), which keeps an independent generator
state per CPU thread, so rows rendered concurrently never share a stream.

Routines:
    build_orthonormal_basis: complete a unit direction to a right-handed frame
    sample_uniform_sphere: uniform direction over the full sphere, pdf 1/(4 pi)
    sample_visible_sphere: point on the cap of a sphere visible from a
        reference point, pdf 1/(2 pi (1 - cos theta_max)) in solid angle

Visible-sphere sampling follows Akalin's construction: a direction is drawn
uniformly inside the cone the sphere subtends, and the point where that
direction meets the sphere is expressed through the angle alpha at the sphere
center, which avoids intersecting a ray with the light.

The cone angle is drawn with cos(theta) uniform on [cos theta_max, 1], not
with theta uniform on [0, theta_max]. Only the former is uniform in solid
angle, so only it matches the constant pdf 1/(2 pi (1 - cos theta_max))
that the light estimator divides by; a theta-uniform draw would bias the
estimate away from the closed-form irradiance of a spherical emitter.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

UNIFORM_SPHERE_PDF = 1.0 / (4.0 * tm.pi)


@ti.func
def build_orthonormal_basis(w: vec3):
    """Build a right-handed orthonormal frame around a unit direction.

    Args:
        w: A unit vector that becomes the third axis of the frame.

    Returns:
        A tuple (u, v, w) of mutually orthogonal unit vectors with
        cross(u, v) == w.
    """
    # Pick the helper axis least aligned with w
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(w.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    v = tm.normalize(tm.cross(w, a))
    u = tm.cross(v, w)
    return u, v, w


@ti.func
def local_to_world(local_dir: vec3, u: vec3, v: vec3, w: vec3) -> vec3:
    """Transform a vector from frame (u, v, w) coordinates to world space."""
    return local_dir.x * u + local_dir.y * v + local_dir.z * w


@ti.func
def uniform_sphere_direction(u1: ti.f32, u2: ti.f32) -> vec3:
    """Map two uniform variates to a direction on the unit sphere.

    Inverse-CDF mapping: azimuth phi = 2 pi u1, polar theta = acos(1 - 2 u2).

    Args:
        u1: Uniform variate in [0, 1).
        u2: Uniform variate in [0, 1).

    Returns:
        A unit vector, uniformly distributed over the sphere when u1 and u2
        are independent and uniform.
    """
    phi = 2.0 * tm.pi * u1
    cos_theta = 1.0 - 2.0 * u2
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    return vec3(sin_theta * ti.cos(phi), sin_theta * ti.sin(phi), cos_theta)


@ti.func
def sample_uniform_sphere() -> vec3:
    """Draw a uniformly distributed unit direction (pdf = 1 / (4 pi))."""
    return uniform_sphere_direction(ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def visible_sphere_point(
    point: vec3,
    center: vec3,
    radius: ti.f32,
    u1: ti.f32,
    u2: ti.f32,
):
    """Map two uniform variates to a point on a sphere's visible cap.

    Args:
        point: The reference (shading) point.
        center: Center of the sphere being sampled.
        radius: Radius of the sphere being sampled.
        u1: Uniform variate in [0, 1) selecting the cone angle.
        u2: Uniform variate in [0, 1) selecting the azimuth.

    Returns:
        A tuple (valid, sample_point, pdf). valid is 0, and the other values
        are zero, when the radius is not positive or the reference point
        lies inside the sphere (the cone is undefined there).
    """
    valid = 0
    sample_point = vec3(0.0, 0.0, 0.0)
    pdf = 0.0

    to_center = center - point
    dist_sq = tm.dot(to_center, to_center)
    radius_sq = radius * radius

    if radius > 0.0 and dist_sq > radius_sq:
        dist = ti.sqrt(dist_sq)
        sin_theta_max_sq = radius_sq / dist_sq
        cos_theta_max = ti.sqrt(ti.max(0.0, 1.0 - sin_theta_max_sq))
        one_minus_cos_max = 1.0 - cos_theta_max

        if one_minus_cos_max > 0.0:
            # Uniform in solid angle over the cone: cos(theta) uniform on [cos_max, 1]
            cos_theta = 1.0 - u1 * one_minus_cos_max
            sin_theta_sq = ti.max(0.0, 1.0 - cos_theta * cos_theta)
            phi = 2.0 * tm.pi * u2

            # Distance from the reference point to the near side of the sphere
            # along the sampled direction
            ds = dist * cos_theta - ti.sqrt(ti.max(0.0, radius_sq - dist_sq * sin_theta_sq))
            # Angle alpha at the sphere center between the sample and the
            # direction back toward the reference point
            cos_alpha = (dist_sq + radius_sq - ds * ds) / (2.0 * dist * radius)
            cos_alpha = tm.clamp(cos_alpha, -1.0, 1.0)
            sin_alpha = ti.sqrt(ti.max(0.0, 1.0 - cos_alpha * cos_alpha))

            u, v, w = build_orthonormal_basis(to_center / dist)
            normal_on_light = local_to_world(
                vec3(sin_alpha * ti.cos(phi), sin_alpha * ti.sin(phi), -cos_alpha), u, v, w
            )

            valid = 1
            sample_point = center + radius * normal_on_light
            pdf = 1.0 / (2.0 * tm.pi * one_minus_cos_max)

    return valid, sample_point, pdf


@ti.func
def sample_visible_sphere(point: vec3, center: vec3, radius: ti.f32):
    """Draw a point on the cap of a sphere visible from a reference point.

    Args:
        point: The reference (shading) point.
        center: Center of the sphere being sampled.
        radius: Radius of the sphere being sampled.

    Returns:
        A tuple (valid, sample_point, pdf), see visible_sphere_point().
    """
    return visible_sphere_point(point, center, radius, ti.random(ti.f32), ti.random(ti.f32))
