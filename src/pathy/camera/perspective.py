"""Perspective camera built from view and projection matrices.

The camera derives, once per render:
- a right-handed look-at view matrix
- a right-handed perspective projection mapping depth to [0, 1]
- their product (world -> clip) and its inverse (clip -> world)

A primary ray for normalized screen coordinates (u, v) is found by placing
the point (2u - 1, 2v - 1, 0) on the near plane in clip space, unprojecting
it through the inverse transform and shooting a ray from the eye through it.

Matrices use the column-vector convention: clip = proj @ view @ world.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathy.camera.perspective import PerspectiveCamera, setup_camera
    >>> from src.pathy.scene.description import CameraConfig
    >>> camera = PerspectiveCamera(CameraConfig(), aspect_ratio=4.0 / 3.0)
    >>> origin, direction = camera.create_ray(0.5, 0.5)
    >>> setup_camera(camera)
    >>> # Use get_ray(u, v) within a Taichi kernel
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathy.core.ray import Ray, make_ray
from src.pathy.scene.description import CameraConfig

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4


def _normalize(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    length = np.linalg.norm(v)
    if length == 0.0:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / length


def look_at_rh(
    eye: npt.NDArray[np.float64],
    target: npt.NDArray[np.float64],
    up: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Build a right-handed view matrix (the camera looks down -Z).

    Raises:
        ValueError: If eye == target or up is parallel to the view direction.
    """
    z_axis = _normalize(eye - target)
    x_axis = np.cross(up, z_axis)
    if np.linalg.norm(x_axis) < 1e-12:
        raise ValueError("Camera up vector is parallel to the view direction")
    x_axis = _normalize(x_axis)
    y_axis = np.cross(z_axis, x_axis)

    view = np.eye(4)
    view[0, :3] = x_axis
    view[1, :3] = y_axis
    view[2, :3] = z_axis
    view[0, 3] = -np.dot(x_axis, eye)
    view[1, 3] = -np.dot(y_axis, eye)
    view[2, 3] = -np.dot(z_axis, eye)
    return view


def perspective_fov_rh(
    fovy: float, aspect_ratio: float, near: float, far: float
) -> npt.NDArray[np.float64]:
    """Build a right-handed perspective projection with depth in [0, 1].

    Args:
        fovy: Vertical field of view in radians.
        aspect_ratio: Width divided by height.
        near: Near plane distance (maps to depth 0).
        far: Far plane distance (maps to depth 1).
    """
    y_scale = 1.0 / math.tan(fovy / 2.0)
    x_scale = y_scale / aspect_ratio

    proj = np.zeros((4, 4))
    proj[0, 0] = x_scale
    proj[1, 1] = y_scale
    proj[2, 2] = far / (near - far)
    proj[2, 3] = near * far / (near - far)
    proj[3, 2] = -1.0
    return proj


class PerspectiveCamera:
    """Pinhole camera with a fixed view/projection transform.

    Attributes:
        config: The viewpoint the camera was built from.
        aspect_ratio: Width divided by height of the image.
        eye: Camera position.
        view: World -> view matrix.
        proj: View -> clip matrix.
        view_proj: World -> clip matrix.
        inverse_view_proj: Clip -> world matrix.
    """

    def __init__(self, config: CameraConfig, aspect_ratio: float) -> None:
        """Derive the camera transforms.

        Args:
            config: Eye, look-at, up, field of view and clip planes.
            aspect_ratio: Width divided by height of the image.

        Raises:
            ValueError: If the aspect ratio is not positive or the view
                basis is degenerate.
        """
        if not aspect_ratio > 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")

        self.config = config
        self.aspect_ratio = aspect_ratio
        self.eye = np.array(config.eye, dtype=np.float64)

        self.view = look_at_rh(
            self.eye,
            np.array(config.look_at, dtype=np.float64),
            np.array(config.up, dtype=np.float64),
        )
        self.proj = perspective_fov_rh(
            math.radians(config.vfov), aspect_ratio, config.near, config.far
        )
        self.view_proj = self.proj @ self.view
        self.inverse_view_proj = np.linalg.inv(self.view_proj)

    def unproject(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Map normalized screen coordinates to a world-space near-plane point."""
        clip = np.array([u * 2.0 - 1.0, v * 2.0 - 1.0, 0.0, 1.0])
        world = self.inverse_view_proj @ clip
        return world[:3] / world[3]

    def create_ray(
        self, u: float, v: float
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Create the primary ray through normalized screen coordinates.

        Args:
            u: Horizontal coordinate in [0, 1] (left to right).
            v: Vertical coordinate in [0, 1] (bottom to top).

        Returns:
            A tuple (origin, direction) with a unit direction.
        """
        point = self.unproject(u, v)
        return self.eye.copy(), _normalize(point - self.eye)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_inverse_view_proj = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())


def setup_camera(camera: PerspectiveCamera) -> None:
    """Upload the camera's eye and inverse transform for use in kernels."""
    _camera_eye[None] = camera.eye.tolist()
    _camera_inverse_view_proj[None] = camera.inverse_view_proj.tolist()


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Kernel-side equivalent of PerspectiveCamera.create_ray().

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the eye through the unprojected near-plane point.
    """
    clip = vec4(u * 2.0 - 1.0, v * 2.0 - 1.0, 0.0, 1.0)
    world = _camera_inverse_view_proj[None] @ clip
    point = vec3(world.x, world.y, world.z) / world.w
    eye = _camera_eye[None]
    return make_ray(eye, tm.normalize(point - eye))
