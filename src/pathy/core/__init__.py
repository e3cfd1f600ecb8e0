"""Core rendering module.

Components:
    runtime: Taichi initialization (import and call this first)
    ray: Ray data structure and vector helpers
    sampling: Orthonormal basis, uniform-sphere and visible-sphere sampling
    integrator: Whitted-style radiance estimator with direct lighting
    render: Image buffer, render settings and the row-parallel dispatch
    stats: Timed renders and ray throughput

All compute-intensive operations run in Taichi kernels on the CPU thread pool.
"""

from .ray import Ray, is_normalized, make_ray, ray_at, reflect, vec3
from .runtime import hardware_concurrency, init_runtime, pool_size
from .sampling import (
    UNIFORM_SPHERE_PDF,
    build_orthonormal_basis,
    local_to_world,
    sample_uniform_sphere,
    sample_visible_sphere,
    uniform_sphere_direction,
    visible_sphere_point,
)

# Note: integrator, render and stats are NOT imported here. They declare
# Taichi fields (through the scene and camera modules), which must be created
# after init_runtime(). Import them directly once Taichi is initialized:
#   from src.pathy.core.render import Image, RenderSettings, render

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "reflect",
    "is_normalized",
    "vec3",
    "init_runtime",
    "hardware_concurrency",
    "pool_size",
    "UNIFORM_SPHERE_PDF",
    "build_orthonormal_basis",
    "local_to_world",
    "uniform_sphere_direction",
    "sample_uniform_sphere",
    "visible_sphere_point",
    "sample_visible_sphere",
]
