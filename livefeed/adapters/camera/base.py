from abc import ABC, abstractmethod
from livefeed.core.contracts import PlanarFrame, StreamConfig


class FrameSource(ABC):
    @abstractmethod
    def acquire_latest(self) -> PlanarFrame | None:
        """Newest available frame or None. The caller must close() it exactly once."""
        ...

    @abstractmethod
    def stream_config(self) -> StreamConfig:
        """Geometry of the stream, known before any frame is delivered."""
        ...

    def release(self):
        pass


class SingleFrameSource(FrameSource):
    """Serves one already-built frame (e.g. an uploaded image), then nothing."""

    def __init__(self, frame: PlanarFrame, sensor_orientation: int = 0):
        self._frame = frame
        self._config = StreamConfig(frame.width, frame.height, sensor_orientation)

    def acquire_latest(self) -> PlanarFrame | None:
        frame, self._frame = self._frame, None
        return frame

    def stream_config(self) -> StreamConfig:
        return self._config
