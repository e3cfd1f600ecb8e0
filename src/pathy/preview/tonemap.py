"""Conversion of linear radiance to 8-bit BGR pixels.

Per channel:
    1. clamp to [0, 1]
    2. encode with 1.055 * c^(1/2.4) - 0.055
    3. scale by 255 and truncate

Step 2 is the power segment of the sRGB curve applied over the whole range;
there is no linear segment near zero. Its output dips slightly below zero for
c < ~8.3e-4, and those values quantize to 0. Bytes are stored in blue,
green, red order to match the 24-bit BGR layout of the pixel buffer.

The same conversion exists twice: encode_channel/encode_pixel for use inside
render kernels, and tone_map for NumPy arrays.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

GAMMA_EXPONENT = 1.0 / 2.4


@ti.func
def linear_to_srgb(c: ti.f32) -> ti.f32:
    """Approximate sRGB encoding without the linear toe."""
    return 1.055 * c**GAMMA_EXPONENT - 0.055


@ti.func
def encode_channel(c: ti.f32) -> ti.u8:
    """Clamp, gamma-encode and quantize one linear channel to a byte."""
    encoded = linear_to_srgb(tm.clamp(c, 0.0, 1.0))
    return ti.cast(ti.max(0.0, 255.0 * encoded), ti.u8)


@ti.func
def encode_pixel(color: vec3):
    """Quantize a linear RGB color to a (blue, green, red) byte triple."""
    return encode_channel(color.z), encode_channel(color.y), encode_channel(color.x)


def linear_to_srgb_numpy(values: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """NumPy version of linear_to_srgb, evaluated in float32."""
    values = np.asarray(values, dtype=np.float32)
    return (
        np.float32(1.055) * np.power(values, np.float32(GAMMA_EXPONENT)) - np.float32(0.055)
    ).astype(np.float32)


def tone_map(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear RGB image to gamma-encoded BGR bytes.

    Args:
        image: Linear radiance array of shape (..., 3) in R, G, B order.

    Returns:
        uint8 array of the same shape in B, G, R order.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float32), 0.0, 1.0)
    encoded = np.maximum(linear_to_srgb_numpy(clamped) * np.float32(255.0), 0.0)
    return encoded.astype(np.uint8)[..., ::-1].copy()
