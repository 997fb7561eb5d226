import threading


class CaptureLoop:
    """Producer thread: asks the pipeline to take a frame from the camera every interval.

    This stands in for the camera's frame-available callback, so everything the
    pipeline does for a frame runs on this one thread.
    """

    def __init__(self, pipeline, camera, status_store, interval_ms: int = 33):
        self.pipeline = pipeline
        self.camera = camera
        self.status = status_store
        self.interval = interval_ms / 1000.0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="capture-loop")
        self._thread.start()
        self.status.log(f"capture_loop: started interval={int(self.interval * 1000)}ms")

    def stop(self, timeout: float = 5.0):
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            self.status.log("capture_loop: thread did not stop in time")
        else:
            self.status.log("capture_loop: stopped")
        self._thread = None

    def _run(self):
        while not self._stop.is_set():
            try:
                self.pipeline.on_frame_available(self.camera)
            except Exception as e:
                # camera-side failure (acquire); the pipeline contains its own
                self.status.log(f"capture_loop: error {type(e).__name__}: {e}")
                self._stop.wait(1.0)
                continue
            self._stop.wait(self.interval)
