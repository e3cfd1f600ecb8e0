"""Taichi implementation of the pathy sphere renderer.

This package renders small sphere scenes with a Whitted-style Monte Carlo
estimator on Taichi's parallel CPU backend, with support for:
- Mirror and Lambertian materials
- Point lights, spherical area lights and a constant environment light
- Row-parallel rendering with per-row ray counters
- Mitsuba-style XML scene files

Subpackages:
    core: Rays, sampling routines, the integrator and the render dispatch
    geometry: Sphere primitive and ray-sphere intersection
    scene: Scene description, Taichi scene storage and the XML loader
    camera: Perspective camera with matrix-based ray generation
    preview: Tone mapping, PNG export and the preview window
"""

__version__ = "0.1.0"
