"""Whitted-style radiance estimator.

For a ray, radiance() returns the incident radiance and the number of rays
traced to estimate it:

    miss            -> constant environment radiance
    mirror hit      -> base_color * radiance(reflected ray, depth + 1)
                       while depth < max_depth, zero once max_depth is reached
    diffuse hit     -> direct lighting from point lights, sphere area lights
                       and the environment, each weighted by the Lambertian
                       BRDF albedo / pi and the clamped cosine

A mirror chain only multiplies by base_color and continues, so the recursion
is evaluated as a loop that carries the accumulated base_color product and
the current depth. The depth starts from the caller's argument and lives only
in this call; nothing is shared between pixels or threads.

Every traced ray (primary, reflected and shadow) is counted. Shadow rays are
cast for every light sample regardless of the cosine, so the count depends on
the scene and the pixel only, never on the random numbers drawn.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathy.core.integrator import radiance
    >>> # Inside a Taichi kernel:
    >>> # color, rays = radiance(ray.origin, ray.direction, 0, MAX_DEPTH, LIGHT_SAMPLES)
"""

import taichi as ti
import taichi.math as tm

from src.pathy.core.ray import reflect
from src.pathy.core.sampling import (
    UNIFORM_SPHERE_PDF,
    sample_uniform_sphere,
    sample_visible_sphere,
)
from src.pathy.scene.intersection import (
    T_MAX,
    T_MIN,
    area_light_intensities,
    area_light_positions,
    area_light_radii,
    constant_light_radiance,
    get_sphere_base_color,
    get_sphere_is_mirror,
    intersect_scene,
    intersect_scene_any,
    num_area_lights,
    num_point_lights,
    point_light_intensities,
    point_light_positions,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Number of mirror bounces followed before a path contributes nothing
MAX_DEPTH = 2

# Samples per sphere area light and for the environment light
LIGHT_SAMPLES = 32


@ti.func
def eval_lambertian(albedo: vec3) -> vec3:
    """Evaluate the Lambertian BRDF, albedo / pi."""
    return albedo / tm.pi


# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def point_lights_radiance(point: vec3, normal: vec3, brdf: vec3):
    """Reflected radiance from all point lights.

    Args:
        point: The shading point.
        normal: The outward unit normal at the shading point.
        brdf: The BRDF value at the shading point.

    Returns:
        A tuple (radiance, rays) where rays is the number of shadow rays cast.
    """
    result = vec3(0.0, 0.0, 0.0)
    rays = 0

    for i in range(num_point_lights[None]):
        to_light = point_light_positions[i] - point
        dist_sq = tm.dot(to_light, to_light)
        if dist_sq > 0.0:
            dist = ti.sqrt(dist_sq)
            direction = to_light / dist
            rays += 1
            if intersect_scene_any(point, direction, dist) == 0:
                cos_theta = ti.max(0.0, tm.dot(normal, direction))
                result += brdf * cos_theta * point_light_intensities[i] / dist_sq

    return result, rays


@ti.func
def area_light_radiance(
    point: vec3,
    normal: vec3,
    brdf: vec3,
    light_index: ti.i32,
    light_samples: ti.i32,
):
    """Reflected radiance from one sphere area light.

    Draws light_samples points on the light's visible cap and averages
    brdf * cos * intensity / pdf over the unoccluded ones. A light that the
    point sits inside of, or one with zero radius, contributes nothing and
    casts no rays.

    Args:
        point: The shading point.
        normal: The outward unit normal at the shading point.
        brdf: The BRDF value at the shading point.
        light_index: Index of the area light.
        light_samples: Number of samples to draw.

    Returns:
        A tuple (radiance, rays).
    """
    result = vec3(0.0, 0.0, 0.0)
    rays = 0
    center = area_light_positions[light_index]
    radius = area_light_radii[light_index]
    intensity = area_light_intensities[light_index]

    for _ in range(light_samples):
        valid, sample_point, pdf = sample_visible_sphere(point, center, radius)
        if valid == 1:
            to_sample = sample_point - point
            dist = tm.length(to_sample)
            if dist > 0.0:
                direction = to_sample / dist
                rays += 1
                if intersect_scene_any(point, direction, dist) == 0:
                    cos_theta = ti.max(0.0, tm.dot(normal, direction))
                    result += brdf * cos_theta * intensity / pdf

    if light_samples > 0:
        result /= ti.cast(light_samples, ti.f32)

    return result, rays


@ti.func
def environment_radiance(point: vec3, normal: vec3, brdf: vec3, light_samples: ti.i32):
    """Reflected radiance from the constant environment light.

    Uses uniform full-sphere sampling (pdf 1 / (4 pi)); directions below the
    surface still cast a shadow ray but add zero through the clamped cosine.

    Returns:
        A tuple (radiance, rays).
    """
    result = vec3(0.0, 0.0, 0.0)
    rays = 0
    env = constant_light_radiance[None]

    for _ in range(light_samples):
        direction = sample_uniform_sphere()
        rays += 1
        if intersect_scene_any(point, direction, T_MAX) == 0:
            cos_theta = ti.max(0.0, tm.dot(normal, direction))
            result += brdf * cos_theta * (env / UNIFORM_SPHERE_PDF)

    if light_samples > 0:
        result /= ti.cast(light_samples, ti.f32)

    return result, rays


@ti.func
def direct_lighting(point: vec3, normal: vec3, albedo: vec3, light_samples: ti.i32):
    """Sum the three direct-lighting strategies at a diffuse point.

    Returns:
        A tuple (radiance, rays).
    """
    brdf = eval_lambertian(albedo)

    result, rays = point_lights_radiance(point, normal, brdf)

    for i in range(num_area_lights[None]):
        area, area_rays = area_light_radiance(point, normal, brdf, i, light_samples)
        result += area
        rays += area_rays

    env, env_rays = environment_radiance(point, normal, brdf, light_samples)
    result += env
    rays += env_rays

    return result, rays


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def radiance(
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
    light_samples: ti.i32,
):
    """Estimate the radiance arriving along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        depth: Mirror bounces already taken to reach this ray (0 for a
            primary ray).
        max_depth: Depth at which a mirror hit stops reflecting and
            contributes zero.
        light_samples: Samples per area light and for the environment.

    Returns:
        A tuple (radiance, rays) with the linear RGB radiance and the number
        of rays traced, including this one.
    """
    result = vec3(0.0, 0.0, 0.0)
    # Product of mirror base colors along the chain so far
    throughput = vec3(1.0, 1.0, 1.0)
    rays = 0

    origin = ray_origin
    direction = ray_direction
    current_depth = depth
    active = 1

    while active == 1:
        rec = intersect_scene(origin, direction, T_MIN, T_MAX)
        rays += 1

        if rec.hit == 0:
            result = throughput * constant_light_radiance[None]
            active = 0
        elif get_sphere_is_mirror(rec.sphere_index) == 1:
            if current_depth < max_depth:
                throughput *= get_sphere_base_color(rec.sphere_index)
                direction = reflect(direction, rec.normal)
                origin = rec.point
                current_depth += 1
            else:
                active = 0
        else:
            albedo = get_sphere_base_color(rec.sphere_index)
            direct, shadow_rays = direct_lighting(rec.point, rec.normal, albedo, light_samples)
            result = throughput * direct
            rays += shadow_rays
            active = 0

    return result, rays
