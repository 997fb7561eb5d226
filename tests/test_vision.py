import base64
import json
import pickle

import cv2
import httpx
import numpy as np
import pytest

from livefeed.adapters.vision.histogram_vision import (
    HistogramClassifier, build_model, load_model, save_model,
)
from livefeed.adapters.vision.http_vision import HttpClassifier
from livefeed.adapters.vision.mock_vision import DEFAULT_RESULTS, MockClassifier
from livefeed.core.errors import ClassificationError, FatalInitError

# pure colors, ARGB and BGR
COLORS = {
    "red": (0xFFFF0000, (0, 0, 255)),
    "green": (0xFF00FF00, (0, 255, 0)),
    "blue": (0xFF0000FF, (255, 0, 0)),
}


def solid_pixels(argb, width=64, height=48):
    return np.full(width * height, argb, dtype=np.uint32)


def solid_bgr(bgr, size=32):
    return np.full((size, size, 3), bgr, dtype=np.uint8)


@pytest.fixture
def model_path(tmp_path):
    samples = {label: [solid_bgr(bgr)] for label, (_, bgr) in COLORS.items()}
    path = tmp_path / "models" / "histograms.pkl"
    save_model(path, build_model(samples, input_size=32))
    return path


class TestPrepare:

    def test_crops_and_resizes_to_input_size(self, status):
        classifier = MockClassifier(status, input_size=24)
        img = classifier.prepare(solid_pixels(0xFF102030, 64, 48), 64, 48)
        assert img.shape == (24, 24, 3)
        assert img.dtype == np.uint8
        assert img[0, 0].tolist() == [0x30, 0x20, 0x10]

    def test_rejects_wrong_buffer_length(self, status):
        with pytest.raises(ClassificationError):
            MockClassifier(status).prepare(np.zeros(10, dtype=np.uint32), 4, 4)


class TestMockClassifier:

    def test_canned_results(self, status):
        classifier = MockClassifier(status, input_size=16)
        assert classifier.classify(solid_pixels(0xFF000000, 16, 16), 16, 16) == DEFAULT_RESULTS
        assert classifier.calls == 1

    def test_failure_mode(self, status):
        classifier = MockClassifier(status, input_size=16, fail=True)
        with pytest.raises(ClassificationError):
            classifier.classify(solid_pixels(0xFF000000, 16, 16), 16, 16)


class TestHistogramModel:

    def test_build_model_contents(self, model_path):
        model = load_model(model_path)
        assert model["labels"] == ["red", "green", "blue"]
        assert model["input_size"] == 32
        assert model["hists"]["red"].shape == (36, 32)
        assert set(model["feats"]["red"]) == {"sat_mean", "val_mean", "colorful_ratio"}

    def test_build_model_needs_images(self):
        with pytest.raises(ValueError):
            build_model({"red": []}, input_size=32)

    def test_missing_artifact_is_fatal(self, status, tmp_path):
        with pytest.raises(FatalInitError):
            HistogramClassifier(status, tmp_path / "nope.pkl", input_size=32)

    def test_corrupt_artifact_is_fatal(self, status, tmp_path):
        path = tmp_path / "bad.pkl"
        path.write_bytes(b"not a pickle")
        with pytest.raises(FatalInitError):
            HistogramClassifier(status, path, input_size=32)

    def test_malformed_artifact_is_fatal(self, status, tmp_path):
        path = tmp_path / "list.pkl"
        path.write_bytes(pickle.dumps([1, 2, 3]))
        with pytest.raises(FatalInitError):
            HistogramClassifier(status, path, input_size=32)

    def test_unknown_label_is_fatal(self, status, model_path):
        with pytest.raises(FatalInitError):
            HistogramClassifier(status, model_path, labels=["red", "purple"], input_size=32)

    def test_input_size_mismatch_is_fatal(self, status, model_path):
        with pytest.raises(FatalInitError):
            HistogramClassifier(status, model_path, input_size=224)


class TestHistogramClassifier:

    @pytest.mark.parametrize("label", list(COLORS))
    def test_ranks_matching_color_first(self, status, model_path, label):
        classifier = HistogramClassifier(status, model_path, input_size=32)
        results = classifier.classify(solid_pixels(COLORS[label][0]), 64, 48)
        assert results[0].label == label
        confidences = [r.confidence for r in results]
        assert confidences == sorted(confidences, reverse=True)
        assert all(0.0 <= c <= 1.0 for c in confidences)

    def test_top_k_and_label_subset(self, status, model_path):
        classifier = HistogramClassifier(status, model_path, labels=["green", "blue"], input_size=32, top_k=1)
        results = classifier.classify(solid_pixels(COLORS["blue"][0]), 64, 48)
        assert [r.label for r in results] == ["blue"]

    def test_logs_load(self, status, model_path):
        HistogramClassifier(status, model_path, input_size=32)
        assert any("histogram_classifier: loaded 3 labels" in line for line in status.logs)


def inference_service(health=None, classify_status=200, classify_body=None, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            return httpx.Response(200, json=health or {"ok": True, "model": "fake", "input_size": 32})
        if request.url.path == "/classify":
            if seen is not None:
                seen.append(request)
            body = classify_body if classify_body is not None else {
                "results": [{"label": "sky", "confidence": 0.8}, {"label": "sea", "confidence": 0.15}]
            }
            return httpx.Response(classify_status, json=body)
        return httpx.Response(404)
    return httpx.MockTransport(handler)


class TestHttpClassifier:

    def test_classify_round_trip(self, status):
        seen = []
        classifier = HttpClassifier(status, base_url="http://inference", input_size=32,
                                    transport=inference_service(seen=seen))
        results = classifier.classify(solid_pixels(0xFF336699), 64, 48)
        assert [(r.label, r.confidence) for r in results] == [("sky", 0.8), ("sea", 0.15)]

        body = json.loads(seen[0].content)
        assert body["top_k"] == 3
        img = cv2.imdecode(np.frombuffer(base64.b64decode(body["image"]), dtype=np.uint8), cv2.IMREAD_COLOR)
        assert img.shape == (32, 32, 3)

    def test_unreachable_service_is_fatal(self, status):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        with pytest.raises(FatalInitError):
            HttpClassifier(status, transport=httpx.MockTransport(handler))

    def test_not_ready_is_fatal(self, status):
        with pytest.raises(FatalInitError):
            HttpClassifier(status, input_size=32,
                           transport=inference_service(health={"ok": False, "error": "loading"}))

    def test_input_size_mismatch_is_fatal(self, status):
        with pytest.raises(FatalInitError):
            HttpClassifier(status, input_size=224, transport=inference_service())

    def test_server_error_is_classification_error(self, status):
        classifier = HttpClassifier(status, input_size=32, transport=inference_service(classify_status=500))
        with pytest.raises(ClassificationError):
            classifier.classify(solid_pixels(0xFF000000), 64, 48)

    def test_malformed_response_is_classification_error(self, status):
        classifier = HttpClassifier(status, input_size=32,
                                    transport=inference_service(classify_body={"labels": []}))
        with pytest.raises(ClassificationError):
            classifier.classify(solid_pixels(0xFF000000), 64, 48)
