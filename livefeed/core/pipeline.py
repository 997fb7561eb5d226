import time

from livefeed.core import errors
from livefeed.core.color import yuv420_to_argb8888
from livefeed.core.contracts import FrameResult, PlanarFrame, StreamConfig
from livefeed.core.gate import Admission, FrameGate
from livefeed.core.orientation import resolve
from livefeed.core.resources import PipelineResources


class FramePipeline:
    """Carries one admitted frame through copy-out → convert → classify → publish → release."""

    def __init__(self, classifier, sink, status_store, gate: FrameGate | None = None):
        self.classifier = classifier
        self.sink = sink
        self.status = status_store
        self.gate = gate or FrameGate()
        self.resources = PipelineResources()
        self.config: StreamConfig | None = None
        self.orientation = 0
        self._closing = False

    @property
    def configured(self) -> bool:
        return self.config is not None

    def on_stream_configured(self, width: int, height: int,
                             sensor_orientation: int = 0, screen_rotation: int = 0):
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid stream size {width}x{height}")
        self.config = StreamConfig(width=width, height=height, sensor_orientation=sensor_orientation)
        # fixed for the life of the session
        self.orientation = resolve(screen_rotation, sensor_orientation)
        self.resources.ensure_pixels(width, height)
        self._closing = False
        self.status.log(
            f"pipeline: stream configured {width}x{height}"
            f" sensor={sensor_orientation} screen={screen_rotation} orientation={self.orientation}"
        )

    def on_frame_available(self, source) -> FrameResult:
        config = self.config
        if config is None:
            return FrameResult(ok=False, error_code=errors.ERR_NOT_CONFIGURED)
        if self._closing:
            return FrameResult(ok=False, error_code=errors.ERR_SHUTDOWN)

        frame = source.acquire_latest()
        if frame is None:
            return FrameResult(ok=False, error_code=errors.ERR_NO_FRAME)

        if self.gate.admit(frame) is Admission.REJECTED:
            self.status.count("dropped")
            return FrameResult(ok=False, error_code=errors.ERR_BUSY, frame_id=frame.frame_id)

        self.status.count("admitted")
        try:
            if self._closing:
                return FrameResult(ok=False, error_code=errors.ERR_SHUTDOWN, frame_id=frame.frame_id)
            return self._process(frame, config)
        finally:
            try:
                frame.close()
            finally:
                self.gate.release()

    def _process(self, frame: PlanarFrame, config: StreamConfig) -> FrameResult:
        t0 = time.time()
        stage = errors.ERR_CONVERSION
        try:
            if (frame.width, frame.height) != (config.width, config.height):
                raise errors.TransientFrameError(
                    f"frame is {frame.width}x{frame.height}, stream is {config.width}x{config.height}"
                )
            y, u, v = self.resources.materialize(frame)
            y_plane, uv_plane = frame.planes[0], frame.planes[1]
            pixels = self.resources.ensure_pixels(config.width, config.height)
            yuv420_to_argb8888(
                y, u, v, config.width, config.height,
                y_plane.row_stride, uv_plane.row_stride, uv_plane.pixel_stride,
                out=pixels,
            )

            stage = errors.ERR_CLASSIFICATION
            results = self.classifier.classify(pixels, config.width, config.height)

            stage = errors.ERR_UNKNOWN
            if results:
                self.sink.publish(results)
                self.status.count("published")

            dt = int((time.time() - t0) * 1000)
            return FrameResult(ok=True, duration_ms=dt, frame_id=frame.frame_id, results=list(results or []))

        except Exception as e:
            dt = int((time.time() - t0) * 1000)
            self.status.count("failed")
            self.status.last_error = f"{stage}: {e}"
            self.status.log(f"pipeline: frame {frame.frame_id} failed [{stage}] {type(e).__name__}: {e}")
            return FrameResult(ok=False, duration_ms=dt, error_code=stage, frame_id=frame.frame_id)

    def shutdown(self, timeout: float | None = 5.0) -> bool:
        """Refuse new frames, wait for the in-flight one, then drop the buffers."""
        self._closing = True
        drained = self.gate.wait_idle(timeout)
        if drained:
            self.resources.release()
            self.status.log("pipeline: shut down")
        else:
            self.status.log("pipeline: shutdown timed out with a frame in flight")
        self.config = None
        return drained
