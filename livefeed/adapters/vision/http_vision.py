"""
HTTP adapter for a remote inference service.

Default contract:
  GET  /health    -> {"ok": true, "model": "<name>", "input_size": 224, "labels": [...]}
  POST /classify  {"model": "<name>", "image": "<base64 JPEG>", "top_k": 3}
               -> {"results": [{"label": "...", "confidence": 0.9}, ...]}  best first

The frame is cropped and resized to input_size locally so only the model
input crosses the wire.
"""
import base64

import cv2
import httpx
from livefeed.adapters.vision.base import ClassifierPort
from livefeed.core.contracts import Recognition
from livefeed.core.errors import ClassificationError, FatalInitError


class HttpClassifier(ClassifierPort):
    def __init__(self, status_store, base_url: str = "http://127.0.0.1:9100", model: str = "default",
                 input_size: int = 224, top_k: int = 3, timeout: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        self.status = status_store
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.input_size = input_size
        self.top_k = top_k
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        self._check_model()

    def _check_model(self):
        try:
            resp = self._client.get("/health")
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise FatalInitError(f"inference service unavailable at {self.base_url}: {e}") from e
        if not data.get("ok", False):
            raise FatalInitError(f"inference service not ready: {data.get('error', 'unknown')}")
        remote_size = data.get("input_size", self.input_size)
        if remote_size != self.input_size:
            raise FatalInitError(f"remote model expects input {remote_size}, configured for {self.input_size}")
        self.status.log(f"http_classifier: ready (model={data.get('model', self.model)} url={self.base_url})")

    def classify(self, pixels, width, height) -> list[Recognition]:
        img = self.prepare(pixels, width, height)
        ok, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, 90])
        if not ok:
            raise ClassificationError("jpeg encode failed")
        payload = {
            "model": self.model,
            "image": base64.standard_b64encode(buf.tobytes()).decode("ascii"),
            "top_k": self.top_k,
        }
        try:
            resp = self._client.post("/classify", json=payload)
            resp.raise_for_status()
            items = resp.json()["results"]
            return [Recognition(label=str(it["label"]), confidence=float(it["confidence"])) for it in items]
        except httpx.HTTPError as e:
            raise ClassificationError(f"inference request failed: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise ClassificationError(f"malformed inference response: {e}") from e

    def close(self):
        self._client.close()
