"""
Fake inference server for testing the HttpClassifier adapter without a model.

Ranks a fixed label set by how close the image's mean color is to each label's
nominal color. Port 9100 matches the CLASSIFIER_URL default.

Usage:
    python -m livefeed.scripts.fake_classifier_server
"""

import base64
import cv2
import numpy as np
import uvicorn
from fastapi import FastAPI, Request

INPUT_SIZE = 224

# label -> nominal BGR
LABEL_COLORS = {
    "snow": (235, 235, 235),
    "night": (20, 20, 20),
    "grass": (40, 160, 60),
    "sky": (220, 160, 90),
    "brick": (50, 60, 170),
}

app = FastAPI(title="fake-classifier-server")


@app.get("/health")
async def health():
    return {"ok": True, "model": "fake-mean-color", "input_size": INPUT_SIZE, "labels": list(LABEL_COLORS)}


@app.post("/classify")
async def classify(request: Request):
    body = await request.json()
    raw = base64.b64decode(body["image"])
    img = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        return {"results": []}
    mean = img.reshape(-1, 3).mean(axis=0)
    scores = {
        label: 1.0 - float(np.linalg.norm(mean - np.array(color))) / (255.0 * np.sqrt(3))
        for label, color in LABEL_COLORS.items()
    }
    ranked = sorted(scores, key=scores.__getitem__, reverse=True)[:int(body.get("top_k", 3))]
    print(f"[classifier] mean={mean.round(1).tolist()} → {ranked[0]}")
    return {"results": [{"label": l, "confidence": round(scores[l], 4)} for l in ranked]}


if __name__ == "__main__":
    print("Fake classifier server starting on http://localhost:9100")
    uvicorn.run(app, host="0.0.0.0", port=9100)
