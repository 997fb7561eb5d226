"""
Histogram-based N-class image classifier.

Model artifact (pickle, built by scripts/calibrate_refs.py):
  {"labels": [...], "input_size": 224,
   "hists": {label: HSV H+S histogram}, "feats": {label: color feature dict}}

Classify:
  a. Center-crop + resize the frame to input_size x input_size
  b. Compute HSV histogram + saturation/brightness features
  c. Fuse histogram correlation with color-feature similarity per label
  d. Return labels ranked by fused score, best first (top_k of them)

No external ML model needed. Works offline.
"""
import pickle
from pathlib import Path

import cv2
import numpy as np
from livefeed.adapters.vision.base import ClassifierPort
from livefeed.core.contracts import Recognition
from livefeed.core.errors import FatalInitError

# HSV histogram: H+S channels
H_BINS, S_BINS = 36, 32
HIST_SIZE = [H_BINS, S_BINS]
HIST_RANGES = [0, 180, 0, 256]
CHANNELS = [0, 1]

# Fusion weights: histogram vs color-feature score
HIST_WEIGHT = 0.55
FEAT_WEIGHT = 0.45


# ── Feature extraction ──────────────────────────────────────────────────────

def compute_hist(bgr_img):
    hsv = cv2.cvtColor(bgr_img, cv2.COLOR_BGR2HSV)
    hist = cv2.calcHist([hsv], CHANNELS, None, HIST_SIZE, HIST_RANGES)
    cv2.normalize(hist, hist, 0, 1, cv2.NORM_MINMAX)
    return hist


def compute_color_features(bgr_img) -> dict:
    """Saturation / brightness summary of an image, all values in [0, 1]."""
    hsv = cv2.cvtColor(bgr_img, cv2.COLOR_BGR2HSV)
    s_ch, v_ch = hsv[:, :, 1], hsv[:, :, 2]
    total = bgr_img.shape[0] * bgr_img.shape[1]

    # Colorful pixels: S > 40 and V > 40 (avoids counting shadow/black as "colorful")
    colorful_mask = (s_ch > 40) & (v_ch > 40)

    return {
        "sat_mean":       float(s_ch.mean()) / 255.0,
        "val_mean":       float(v_ch.mean()) / 255.0,
        "colorful_ratio": float(colorful_mask.sum()) / total,
    }


def feature_score(query_feat: dict, ref_feat: dict) -> float:
    """Similarity in [0, 1] between query and reference color features."""
    weights = {"sat_mean": 0.4, "val_mean": 0.25, "colorful_ratio": 0.35}
    dist = sum(
        weights[k] * abs(query_feat[k] - ref_feat[k])
        for k in weights
        if k in query_feat and k in ref_feat
    )
    # dist=0 → 1.0, dist=0.5 → 0.0
    return float(np.clip(1.0 - dist * 2.0, 0.0, 1.0))


# ── Model artifact ──────────────────────────────────────────────────────────

def build_model(samples: dict[str, list[np.ndarray]], input_size: int) -> dict:
    """Average reference histograms/features per label from BGR sample images."""
    hists, feats = {}, {}
    for label, images in samples.items():
        if not images:
            raise ValueError(f"no reference images for '{label}'")
        resized = [cv2.resize(img, (input_size, input_size), interpolation=cv2.INTER_AREA) for img in images]
        hist = np.mean([compute_hist(img) for img in resized], axis=0).astype(np.float32)
        cv2.normalize(hist, hist, 0, 1, cv2.NORM_MINMAX)
        hists[label] = hist
        per_image = [compute_color_features(img) for img in resized]
        feats[label] = {k: float(np.mean([f[k] for f in per_image])) for k in per_image[0]}
    return {"labels": list(samples), "input_size": input_size, "hists": hists, "feats": feats}


def save_model(path, model: dict):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        pickle.dump(model, f)


def load_model(path) -> dict:
    path = Path(path)
    if not path.exists():
        raise FatalInitError(f"model artifact not found: {path}")
    try:
        with open(path, "rb") as f:
            model = pickle.load(f)
    except Exception as e:
        raise FatalInitError(f"model artifact unreadable: {path}: {e}") from e
    if not isinstance(model, dict) or "hists" not in model:
        raise FatalInitError(f"model artifact malformed: {path}")
    return model


# ── Classifier ──────────────────────────────────────────────────────────────

class HistogramClassifier(ClassifierPort):
    def __init__(self, status_store, model_path, labels: list[str] | None = None,
                 input_size: int = 224, top_k: int = 3):
        self.status = status_store
        self.input_size = input_size
        self.top_k = top_k

        model = load_model(model_path)
        if model.get("input_size", input_size) != input_size:
            raise FatalInitError(
                f"model built for input {model['input_size']}, configured for {input_size}"
            )
        self.labels = list(labels) if labels else list(model.get("labels") or model["hists"])
        missing = [l for l in self.labels if l not in model["hists"]]
        if missing:
            raise FatalInitError(f"model has no reference for labels {missing}")
        if not self.labels:
            raise FatalInitError("model has no labels")

        self._hists: dict[str, np.ndarray] = {l: model["hists"][l] for l in self.labels}
        self._feats: dict[str, dict] = {
            l: model.get("feats", {})[l] for l in self.labels if l in model.get("feats", {})
        }
        self.status.log(
            f"histogram_classifier: loaded {len(self.labels)} labels from {Path(model_path).name}"
            f"  input={input_size}  feats={'yes' if len(self._feats) == len(self.labels) else 'no'}"
        )

    def classify(self, pixels, width, height) -> list[Recognition]:
        img = self.prepare(pixels, width, height)

        query_hist = compute_hist(img)
        hist_scores = {
            # correlation is in [-1, 1]
            label: (cv2.compareHist(ref_hist, query_hist, cv2.HISTCMP_CORREL) + 1.0) / 2.0
            for label, ref_hist in self._hists.items()
        }

        if len(self._feats) == len(self.labels):
            query_feat = compute_color_features(img)
            fused = {
                label: HIST_WEIGHT * hist_scores[label]
                + FEAT_WEIGHT * feature_score(query_feat, self._feats[label])
                for label in self.labels
            }
        else:
            fused = hist_scores

        ranked = sorted(self.labels, key=fused.__getitem__, reverse=True)[:self.top_k]
        return [
            Recognition(label=label, confidence=float(np.clip(fused[label], 0.0, 1.0)))
            for label in ranked
        ]
