import numpy as np

from livefeed.core.color import plane_bytes
from livefeed.core.contracts import PlanarFrame


class PipelineResources:
    """Buffers reused across frames: the ARGB pixel buffer and three plane scratch copies.

    Pixel buffer is keyed by (width, height); a new size reallocates it.
    Plane buffers are grown lazily per plane because the row stride (and so
    the plane capacity) is only known once a frame shows up.
    """

    def __init__(self):
        self.width = 0
        self.height = 0
        self.pixels: np.ndarray | None = None
        self.planes: list[np.ndarray | None] = [None, None, None]

    def ensure_pixels(self, width: int, height: int) -> np.ndarray:
        if self.pixels is None or (width, height) != (self.width, self.height):
            self.pixels = np.zeros(width * height, dtype=np.uint32)
            self.width, self.height = width, height
        return self.pixels

    def materialize(self, frame: PlanarFrame) -> list[np.ndarray]:
        """Copy each plane out of the frame; the frame's buffers die with release()."""
        views = []
        for i, plane in enumerate(frame.planes):
            src = plane_bytes(plane.data)
            buf = self.planes[i]
            if buf is None or buf.size < src.size:
                buf = self.planes[i] = np.empty(src.size, dtype=np.uint8)
            buf[:src.size] = src
            views.append(buf[:src.size])
        return views

    def release(self):
        self.pixels = None
        self.planes = [None, None, None]
        self.width = self.height = 0
