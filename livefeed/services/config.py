"""
Service configuration.

Values come from the process environment, optionally seeded from a ``.env``
file (existing environment variables win). Example ``.env``:

```
CAMERA_ADAPTER=cv2
CAMERA_INDEX=0
FRAME_WIDTH=640
FRAME_HEIGHT=480
CLASSIFIER_ADAPTER=histogram
MODEL_PATH=models/histograms.pkl
LABELS=tabby_cat,golden_retriever,coffee_mug
INPUT_SIZE=224
```
"""
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _labels(raw: str) -> List[str]:
    return [s.strip() for s in raw.split(",") if s.strip()]


@dataclass
class Settings:
    camera_adapter: str = "synthetic"     # synthetic | cv2
    camera_index: int = 0
    frame_width: int = 640
    frame_height: int = 480
    sensor_orientation: int = 90
    screen_rotation: int = 0              # display rotation index 0..3
    classifier_adapter: str = "mock"      # mock | histogram | http
    model_path: str = "models/histograms.pkl"
    labels: List[str] = field(default_factory=list)
    input_size: int = 224
    top_k: int = 3
    classifier_url: str = "http://127.0.0.1:9100"
    classifier_timeout: float = 10.0
    capture_interval_ms: int = 33
    log_capacity: int = 200

    @classmethod
    def from_env(cls, env_file: str | None = ".env") -> "Settings":
        if env_file:
            load_dotenv(dotenv_path=env_file, override=False)
        return cls(
            camera_adapter=os.getenv("CAMERA_ADAPTER", "synthetic").lower(),
            camera_index=int(os.getenv("CAMERA_INDEX", "0")),
            frame_width=int(os.getenv("FRAME_WIDTH", "640")),
            frame_height=int(os.getenv("FRAME_HEIGHT", "480")),
            sensor_orientation=int(os.getenv("SENSOR_ORIENTATION", "90")),
            screen_rotation=int(os.getenv("SCREEN_ROTATION", "0")),
            classifier_adapter=os.getenv("CLASSIFIER_ADAPTER", "mock").lower(),
            model_path=os.getenv("MODEL_PATH", "models/histograms.pkl"),
            labels=_labels(os.getenv("LABELS", "")),
            input_size=int(os.getenv("INPUT_SIZE", "224")),
            top_k=int(os.getenv("TOP_K", "3")),
            classifier_url=os.getenv("CLASSIFIER_URL", "http://127.0.0.1:9100"),
            classifier_timeout=float(os.getenv("CLASSIFIER_TIMEOUT", "10.0")),
            capture_interval_ms=int(os.getenv("CAPTURE_INTERVAL_MS", "33")),
            log_capacity=int(os.getenv("LOG_CAPACITY", "200")),
        )
