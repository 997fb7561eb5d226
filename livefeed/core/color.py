"""
Planar YUV420 → packed ARGB8888 conversion.

Camera frames arrive as three byte planes:
  Y  full resolution, addressed by  y * y_row_stride + x
  U  half resolution in both axes, addressed by
     (y // 2) * uv_row_stride + (x // 2) * uv_pixel_stride
  V  same layout as U

Row strides may include padding past the visible width, and a chroma pixel
stride of 2 covers the interleaved (NV12/NV21-style) layouts, so nothing here
assumes stride == width.

Transform (full-range BT.601, evaluated in float64, rounded half-to-even and
clamped to [0, 255]):
  R = Y + 1.402 * (V - 128)
  G = Y - 0.344 * (U - 128) - 0.714 * (V - 128)
  B = Y + 1.772 * (U - 128)

Output pixel = 0xFF000000 | R << 16 | G << 8 | B, one uint32 per pixel.
"""
from functools import lru_cache

import numpy as np

ALPHA = np.uint32(0xFF000000)


def plane_bytes(plane) -> np.ndarray:
    if isinstance(plane, np.ndarray):
        return plane.reshape(-1).view(np.uint8)
    return np.frombuffer(plane, dtype=np.uint8)


def _chroma_positions(n: int) -> np.ndarray:
    # odd trailing row/column reuses the last full chroma sample
    return np.minimum(np.arange(n) >> 1, max(n // 2 - 1, 0))


@lru_cache(maxsize=8)
def _index_grids(width: int, height: int, y_row_stride: int,
                 uv_row_stride: int, uv_pixel_stride: int):
    rows = np.arange(height)
    cols = np.arange(width)
    y_idx = rows[:, None] * y_row_stride + cols[None, :]
    uv_idx = (
        (_chroma_positions(height) * uv_row_stride)[:, None]
        + (_chroma_positions(width) * uv_pixel_stride)[None, :]
    )
    y_idx.flags.writeable = False
    uv_idx.flags.writeable = False
    return y_idx, uv_idx


def _channel(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint32)


def yuv420_to_argb8888(y_plane, u_plane, v_plane, width: int, height: int,
                       y_row_stride: int, uv_row_stride: int, uv_pixel_stride: int,
                       out: np.ndarray | None = None) -> np.ndarray:
    """Convert one YUV420 frame into ``width * height`` packed ARGB pixels.

    ``out`` is filled in place when given (it must be a uint32 array of
    exactly ``width * height`` elements) and returned; otherwise a new
    array is allocated. Planes too short for the given strides raise
    IndexError.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid frame size {width}x{height}")
    if y_row_stride < width:
        raise ValueError(f"y_row_stride {y_row_stride} < width {width}")
    if out is not None and (out.dtype != np.uint32 or out.size != width * height):
        raise ValueError(
            f"output buffer must be uint32[{width * height}], got {out.dtype}[{out.size}]"
        )

    y_idx, uv_idx = _index_grids(width, height, y_row_stride, uv_row_stride, uv_pixel_stride)
    y = plane_bytes(y_plane)[y_idx].astype(np.float64)
    u = plane_bytes(u_plane)[uv_idx].astype(np.float64) - 128.0
    v = plane_bytes(v_plane)[uv_idx].astype(np.float64) - 128.0

    r = _channel(y + 1.402 * v)
    g = _channel(y - 0.344 * u - 0.714 * v)
    b = _channel(y + 1.772 * u)
    packed = ALPHA | (r << 16) | (g << 8) | b

    if out is None:
        return packed.reshape(-1)
    out[:] = packed.reshape(-1)
    return out


def argb_to_rgb(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Unpack ARGB pixels into an (H, W, 3) uint8 RGB image."""
    p = np.asarray(pixels, dtype=np.uint32).reshape(height, width)
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = (p >> 16) & 0xFF
    rgb[..., 1] = (p >> 8) & 0xFF
    rgb[..., 2] = p & 0xFF
    return rgb


def argb_to_bgr(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Same as argb_to_rgb but in OpenCV channel order."""
    return np.ascontiguousarray(argb_to_rgb(pixels, width, height)[..., ::-1])
