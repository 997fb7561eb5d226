import base64
import binascii
from contextlib import asynccontextmanager

import cv2
import numpy as np
from fastapi import FastAPI

from livefeed.adapters.camera.base import SingleFrameSource
from livefeed.adapters.camera.cv2_camera import bgr_to_planar
from livefeed.adapters.sink.status_sink import StatusSink
from livefeed.core.errors import FatalInitError
from livefeed.core.orientation import rotation_to_degrees
from livefeed.core.pipeline import FramePipeline
from livefeed.services.capture_loop import CaptureLoop
from livefeed.services.config import Settings
from livefeed.services.models import (
    RecognitionOut, StatusResponse, StreamOut, StreamResponse,
    FrameRequest, FrameResponse,
)
from livefeed.services.status_store import StatusStore


def build_camera(settings: Settings, status: StatusStore):
    if settings.camera_adapter == "cv2":
        from livefeed.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status, index=settings.camera_index, width=settings.frame_width,
                           height=settings.frame_height, sensor_orientation=settings.sensor_orientation)
    else:
        from livefeed.adapters.camera.mock_camera import SyntheticCamera
        camera = SyntheticCamera(status, width=settings.frame_width, height=settings.frame_height,
                                 sensor_orientation=settings.sensor_orientation)
    status.log(f"camera adapter: {type(camera).__name__}")
    return camera


def build_classifier(settings: Settings, status: StatusStore):
    """Raises FatalInitError when the model cannot be brought up."""
    adapter = settings.classifier_adapter
    if adapter == "histogram":
        from livefeed.adapters.vision.histogram_vision import HistogramClassifier
        classifier = HistogramClassifier(status, settings.model_path, labels=settings.labels,
                                         input_size=settings.input_size, top_k=settings.top_k)
    elif adapter == "http":
        from livefeed.adapters.vision.http_vision import HttpClassifier
        classifier = HttpClassifier(status, base_url=settings.classifier_url, input_size=settings.input_size,
                                    top_k=settings.top_k, timeout=settings.classifier_timeout)
    elif adapter == "mock":
        from livefeed.adapters.vision.mock_vision import MockClassifier
        classifier = MockClassifier(status, input_size=settings.input_size)
    else:
        raise FatalInitError(f"unknown classifier adapter '{adapter}'")
    status.log(f"classifier adapter: {type(classifier).__name__}")
    return classifier


def _recognitions_out(results) -> list[RecognitionOut]:
    return [RecognitionOut(label=r.label, confidence=r.confidence) for r in results]


def create_app(settings: Settings | None = None, camera=None, classifier=None,
               status: StatusStore | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    status = status or StatusStore(log_capacity=settings.log_capacity)
    camera = camera or build_camera(settings, status)
    if classifier is None:
        try:
            classifier = build_classifier(settings, status)
        except FatalInitError as e:
            status.log(f"FATAL classifier init failed: {e}")
            raise

    pipeline = FramePipeline(classifier, StatusSink(status), status)
    loop = CaptureLoop(pipeline, camera, status, interval_ms=settings.capture_interval_ms)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        loop.stop()
        pipeline.shutdown()
        camera.release()

    app = FastAPI(title="livefeed classifier", lifespan=lifespan)
    app.state.settings = settings
    app.state.status = status
    app.state.camera = camera
    app.state.classifier = classifier
    app.state.pipeline = pipeline
    app.state.loop = loop

    def stream_out() -> StreamOut:
        cfg = pipeline.config
        return StreamOut(
            configured=cfg is not None,
            running=loop.running,
            width=cfg.width if cfg else None,
            height=cfg.height if cfg else None,
            orientation=pipeline.orientation,
        )

    def configure(width: int, height: int, sensor_orientation: int):
        pipeline.on_stream_configured(width, height, sensor_orientation,
                                      rotation_to_degrees(settings.screen_rotation))

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        return StatusResponse(
            busy=pipeline.gate.busy,
            stream=stream_out(),
            results=_recognitions_out(status.last_results),
            result_text=status.last_text,
            last_error=status.last_error,
            stats=dict(status.stats),
            logs=list(status.logs),
        )

    @app.get("/health")
    def health():
        checks = {
            "api": True,
            "camera_adapter": type(camera).__name__,
            "classifier_adapter": type(classifier).__name__,
            "input_size": getattr(classifier, "input_size", None),
            "configured": pipeline.configured,
            "running": loop.running,
        }
        checks["all_ok"] = checks["api"]
        return checks

    @app.post("/stream/start", response_model=StreamResponse)
    def stream_start():
        if loop.running:
            return StreamResponse(ok=True, stream=stream_out())
        try:
            cfg = camera.stream_config()
            configure(cfg.width, cfg.height, cfg.sensor_orientation)
        except Exception as e:
            status.log(f"STREAM_START: error {e}")
            return StreamResponse(ok=False, stream=stream_out(), error=str(e))
        loop.start()
        return StreamResponse(ok=True, stream=stream_out())

    @app.post("/stream/stop", response_model=StreamResponse)
    def stream_stop():
        loop.stop()
        drained = pipeline.shutdown()
        camera.release()
        return StreamResponse(ok=drained, stream=stream_out(),
                              error=None if drained else "in-flight frame did not drain")

    @app.post("/tick", response_model=FrameResponse)
    def tick():
        """Pull one frame from the camera through the pipeline (no loop needed)."""
        fr = pipeline.on_frame_available(camera)
        return FrameResponse(ok=fr.ok, frame_id=fr.frame_id, duration_ms=fr.duration_ms,
                             error_code=fr.error_code, results=_recognitions_out(fr.results))

    @app.post("/frame", response_model=FrameResponse)
    def push_frame(req: FrameRequest):
        """Run one uploaded image through the same pipeline as camera frames.

        Without a configured stream the image's own size starts one; otherwise
        the image is resized to the stream size.
        """
        try:
            raw = base64.b64decode(req.image, validate=True)
        except (binascii.Error, ValueError) as e:
            status.log(f"FRAME decode error: {e}")
            return FrameResponse(ok=False, error="base64 decode failed")
        bgr = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
        if bgr is None:
            status.log("FRAME: image decode failed")
            return FrameResponse(ok=False, error="image decode failed")

        try:
            if not pipeline.configured:
                h, w = bgr.shape[:2]
                configure(w - w % 2, h - h % 2, req.sensor_orientation)
            cfg = pipeline.config
            if (bgr.shape[1], bgr.shape[0]) != (cfg.width, cfg.height):
                bgr = cv2.resize(bgr, (cfg.width, cfg.height))
            frame = bgr_to_planar(bgr)
        except ValueError as e:
            status.log(f"FRAME: {e}")
            return FrameResponse(ok=False, error=str(e))

        fr = pipeline.on_frame_available(SingleFrameSource(frame, req.sensor_orientation))
        return FrameResponse(ok=fr.ok, frame_id=fr.frame_id, duration_ms=fr.duration_ms,
                             error_code=fr.error_code, results=_recognitions_out(fr.results))

    return app
