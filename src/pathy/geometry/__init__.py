"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) called from the scene
queries in src.pathy.scene.intersection.
"""

from .sphere import HitRecord, Sphere, hit_sphere, hit_sphere_t

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "hit_sphere_t",
]
