"""Synthetic camera: deterministic YUV420 frames with configurable padding and chroma layout."""
import numpy as np
from livefeed.adapters.camera.base import FrameSource
from livefeed.core.contracts import Plane, PlanarFrame, StreamConfig


def _fill(value, shape) -> np.ndarray:
    if np.isscalar(value):
        return np.full(shape, value, dtype=np.uint8)
    arr = np.asarray(value, dtype=np.uint8)
    if arr.shape != shape:
        raise ValueError(f"plane content must be {shape}, got {arr.shape}")
    return arr


def make_planar_frame(width: int, height: int, y=235, u=128, v=128,
                      row_padding: int = 0, uv_pixel_stride: int = 1,
                      frame_id: int = 0, on_close=None) -> PlanarFrame:
    """Lay out logical Y/U/V content into padded plane buffers.

    ``y`` is a scalar or a (height, width) array; ``u``/``v`` are scalars or
    (ceil(height/2), ceil(width/2)) arrays. ``row_padding`` bytes are appended
    to every row. ``uv_pixel_stride=2`` interleaves U and V in one buffer the
    way semi-planar camera output does; U and V then view the same memory.
    """
    cw, ch = (width + 1) // 2, (height + 1) // 2
    y_stride = width + row_padding
    y_buf = np.zeros((height, y_stride), dtype=np.uint8)
    y_buf[:, :width] = _fill(y, (height, width))

    u_vals = _fill(u, (ch, cw))
    v_vals = _fill(v, (ch, cw))

    if uv_pixel_stride == 1:
        uv_stride = cw + row_padding
        u_buf = np.zeros((ch, uv_stride), dtype=np.uint8)
        v_buf = np.zeros((ch, uv_stride), dtype=np.uint8)
        u_buf[:, :cw] = u_vals
        v_buf[:, :cw] = v_vals
        u_data, v_data = u_buf.reshape(-1), v_buf.reshape(-1)
    elif uv_pixel_stride == 2:
        uv_stride = cw * 2 + row_padding
        uv_buf = np.zeros((ch, uv_stride), dtype=np.uint8)
        uv_buf[:, 0:cw * 2:2] = u_vals
        uv_buf[:, 1:cw * 2:2] = v_vals
        flat = uv_buf.reshape(-1)
        u_data, v_data = flat[:-1], flat[1:]
    else:
        raise ValueError(f"unsupported uv_pixel_stride {uv_pixel_stride}")

    planes = (
        Plane(y_buf.reshape(-1), row_stride=y_stride, pixel_stride=1),
        Plane(u_data, row_stride=uv_stride, pixel_stride=uv_pixel_stride),
        Plane(v_data, row_stride=uv_stride, pixel_stride=uv_pixel_stride),
    )
    return PlanarFrame(planes, width, height, on_close=on_close, frame_id=frame_id)


class SyntheticCamera(FrameSource):
    """Hands out a fresh frame on every acquire and tracks which ones are still open."""

    def __init__(self, status_store, width: int = 640, height: int = 480,
                 sensor_orientation: int = 90, y=235, u=128, v=128,
                 row_padding: int = 0, uv_pixel_stride: int = 1,
                 max_frames: int | None = None):
        self.status = status_store
        self._config = StreamConfig(width, height, sensor_orientation)
        self._content = (y, u, v)
        self._row_padding = row_padding
        self._uv_pixel_stride = uv_pixel_stride
        self._max_frames = max_frames
        self.delivered = 0
        self.released = 0
        self.outstanding: set[int] = set()

    def acquire_latest(self) -> PlanarFrame | None:
        if self._max_frames is not None and self.delivered >= self._max_frames:
            return None
        self.delivered += 1
        y, u, v = self._content
        frame = make_planar_frame(
            self._config.width, self._config.height, y, u, v,
            row_padding=self._row_padding, uv_pixel_stride=self._uv_pixel_stride,
            frame_id=self.delivered, on_close=self._on_close,
        )
        self.outstanding.add(frame.frame_id)
        return frame

    def stream_config(self) -> StreamConfig:
        return self._config

    def _on_close(self, frame: PlanarFrame):
        self.outstanding.discard(frame.frame_id)
        self.released += 1

    def release(self):
        if self.outstanding:
            self.status.log(f"synthetic_camera: {len(self.outstanding)} frame(s) never released")
