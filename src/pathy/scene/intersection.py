"""Scene storage in Taichi fields and ray-scene queries.

A Scene description is copied into Structure-of-Arrays Taichi fields with
upload_scene(). Each sphere slot holds both the geometry and the material of
that sphere, written together from one SceneSphere, so the two can never
drift apart.

Both queries are linear scans over every sphere:
    intersect_scene: nearest hit in (t_min, t_max), for camera and mirror rays
    intersect_scene_any: any hit in (T_MIN, t_max), for shadow rays

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathy.scene.description import Scene, SceneSphere
    >>> from src.pathy.scene.intersection import upload_scene
    >>> upload_scene(Scene(spheres=(SceneSphere((0, 0, -2), 0.5),)))
    >>> # Use intersect_scene / intersect_scene_any within a Taichi kernel
"""

import logging

import taichi as ti
import taichi.math as tm

from src.pathy.geometry.sphere import Sphere, hit_sphere, hit_sphere_t
from src.pathy.scene.description import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Intersections closer than this are ignored to avoid shadow acne
T_MIN = 1e-3
# Stand-in for an unbounded ray
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: Distance along the ray to the nearest hit. Only valid if hit == 1.
        point: The hit position. Only valid if hit == 1.
        normal: The outward unit normal at the hit. Only valid if hit == 1.
        sphere_index: Index of the hit sphere, used to look up its material.
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    sphere_index: ti.i32


# Maximum number of primitives and lights supported in the scene
MAX_SPHERES = 1024
MAX_POINT_LIGHTS = 256
MAX_AREA_LIGHTS = 256

# Sphere storage: geometry and material side by side, one slot per sphere
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_base_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_is_mirror = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Point lights
point_light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_POINT_LIGHTS)
point_light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_POINT_LIGHTS)
num_point_lights = ti.field(dtype=ti.i32, shape=())

# Sphere area lights
area_light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_AREA_LIGHTS)
area_light_radii = ti.field(dtype=ti.f32, shape=MAX_AREA_LIGHTS)
area_light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_AREA_LIGHTS)
num_area_lights = ti.field(dtype=ti.i32, shape=())

# Constant environment light
constant_light_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Remove all spheres and lights and turn the environment black.

    The field data is not zeroed; it is overwritten by the next upload.
    """
    num_spheres[None] = 0
    num_point_lights[None] = 0
    num_area_lights[None] = 0
    constant_light_radiance[None] = [0.0, 0.0, 0.0]


def upload_scene(scene: Scene) -> None:
    """Copy a scene description into the Taichi fields.

    Replaces whatever scene was stored before.

    Args:
        scene: The scene to render.

    Raises:
        RuntimeError: If the scene holds more spheres or lights than the
            fields can store.
    """
    if len(scene.spheres) > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    if len(scene.point_lights) > MAX_POINT_LIGHTS:
        raise RuntimeError(f"Maximum number of point lights ({MAX_POINT_LIGHTS}) exceeded")
    if len(scene.area_lights) > MAX_AREA_LIGHTS:
        raise RuntimeError(f"Maximum number of area lights ({MAX_AREA_LIGHTS}) exceeded")

    for i, sphere in enumerate(scene.spheres):
        sphere_centers[i] = list(sphere.center)
        sphere_radii[i] = sphere.radius
        sphere_base_colors[i] = list(sphere.material.base_color)
        sphere_is_mirror[i] = int(sphere.material.is_mirror)
    num_spheres[None] = len(scene.spheres)

    for i, light in enumerate(scene.point_lights):
        point_light_positions[i] = list(light.position)
        point_light_intensities[i] = list(light.intensity)
    num_point_lights[None] = len(scene.point_lights)

    for i, light in enumerate(scene.area_lights):
        area_light_positions[i] = list(light.position)
        area_light_radii[i] = light.radius
        area_light_intensities[i] = list(light.intensity)
    num_area_lights[None] = len(scene.area_lights)

    constant_light_radiance[None] = list(scene.constant_light.radiance)

    logger.debug(
        "Uploaded scene: %d spheres, %d point lights, %d area lights",
        len(scene.spheres),
        len(scene.point_lights),
        len(scene.area_lights),
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        sphere_index=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest sphere hit along a ray.

    Each sphere is tested with the best distance found so far as its upper
    bound, so a later sphere only replaces the current hit when it is
    strictly closer.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                sphere_index=i,
            )

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_max: ti.f32,
) -> ti.i32:
    """Test whether anything blocks a ray (shadow ray query).

    Stops testing spheres once one hit is found.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_max: Distance beyond which hits are ignored. Pass T_MAX for an
            unbounded ray, or the distance to a light for a shadow ray.

    Returns:
        1 if any sphere is hit in (T_MIN, t_max), 0 otherwise.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            did_hit, _ = hit_sphere_t(ray_origin, ray_direction, sphere, T_MIN, t_max)
            if did_hit == 1:
                hit_any = 1

    return hit_any


@ti.func
def get_sphere_base_color(sphere_index: ti.i32) -> vec3:
    return sphere_base_colors[sphere_index]


@ti.func
def get_sphere_is_mirror(sphere_index: ti.i32) -> ti.i32:
    return sphere_is_mirror[sphere_index]
