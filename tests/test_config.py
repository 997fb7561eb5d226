import os

from livefeed.services.config import Settings

KEYS = ("CAMERA_ADAPTER", "FRAME_WIDTH", "FRAME_HEIGHT", "LABELS", "TOP_K", "INPUT_SIZE",
        "CLASSIFIER_TIMEOUT", "CLASSIFIER_ADAPTER")


class TestSettings:

    def test_defaults(self, monkeypatch):
        for key in KEYS:
            monkeypatch.delenv(key, raising=False)
        s = Settings.from_env(env_file=None)
        assert s.camera_adapter == "synthetic"
        assert (s.frame_width, s.frame_height) == (640, 480)
        assert s.classifier_adapter == "mock"
        assert s.input_size == 224
        assert s.labels == []

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CAMERA_ADAPTER", "CV2")
        monkeypatch.setenv("FRAME_WIDTH", "1280")
        monkeypatch.setenv("LABELS", "tabby_cat, coffee_mug,,  ")
        monkeypatch.setenv("CLASSIFIER_TIMEOUT", "2.5")
        s = Settings.from_env(env_file=None)
        assert s.camera_adapter == "cv2"
        assert s.frame_width == 1280
        assert s.labels == ["tabby_cat", "coffee_mug"]
        assert s.classifier_timeout == 2.5

    def test_env_file_does_not_override_environment(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TOP_K=7\nCLASSIFIER_ADAPTER=histogram\n")
        monkeypatch.setenv("TOP_K", "5")
        monkeypatch.delenv("CLASSIFIER_ADAPTER", raising=False)
        try:
            s = Settings.from_env(env_file=str(env_file))
            assert s.top_k == 5
            assert s.classifier_adapter == "histogram"
        finally:
            os.environ.pop("CLASSIFIER_ADAPTER", None)
