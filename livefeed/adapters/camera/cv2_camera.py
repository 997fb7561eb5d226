"""
OpenCV webcam capture adapter.
Frames are read as BGR, converted to I420 and handed out as planar frames.
CAMERA_INDEX env var (default 0) selects the webcam device.
"""
import os
import cv2
import numpy as np
from livefeed.adapters.camera.base import FrameSource
from livefeed.core.contracts import Plane, PlanarFrame, StreamConfig


def bgr_to_planar(bgr: np.ndarray, frame_id: int = 0, on_close=None) -> PlanarFrame:
    """Split a BGR image into tightly packed I420 planes (width/height cropped to even)."""
    h, w = bgr.shape[:2]
    h, w = h - h % 2, w - w % 2
    if h == 0 or w == 0:
        raise ValueError(f"image too small: {bgr.shape[1]}x{bgr.shape[0]}")
    i420 = cv2.cvtColor(np.ascontiguousarray(bgr[:h, :w]), cv2.COLOR_BGR2YUV_I420).reshape(-1)
    y_len, c_len = w * h, (w // 2) * (h // 2)
    planes = (
        Plane(i420[:y_len], row_stride=w),
        Plane(i420[y_len:y_len + c_len], row_stride=w // 2),
        Plane(i420[y_len + c_len:y_len + 2 * c_len], row_stride=w // 2),
    )
    return PlanarFrame(planes, w, h, on_close=on_close, frame_id=frame_id)


class CV2Camera(FrameSource):
    def __init__(self, status_store, index: int | None = None, width: int = 640, height: int = 480,
                 sensor_orientation: int = 0):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))
        self._config = StreamConfig(width - width % 2, height - height % 2, sensor_orientation)
        self._cap = None
        self._frame_id = 0

    def _open(self):
        if self._cap is None or not self._cap.isOpened():
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.log(f"cv2_camera: failed to open device {self._index}")
                return
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._config.width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._config.height)

    def stream_config(self) -> StreamConfig:
        return self._config

    def acquire_latest(self) -> PlanarFrame | None:
        self._open()
        if self._cap is None or not self._cap.isOpened():
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            self.status.log("cv2_camera: frame capture failed")
            return None
        if frame.shape[1] != self._config.width or frame.shape[0] != self._config.height:
            frame = cv2.resize(frame, (self._config.width, self._config.height))
        self._frame_id += 1
        return bgr_to_planar(frame, frame_id=self._frame_id)

    def release(self):
        if self._cap and self._cap.isOpened():
            self._cap.release()
            self._cap = None
