import cv2
import numpy as np
from livefeed.core.color import argb_to_bgr
from livefeed.core.contracts import Recognition
from livefeed.core.errors import ClassificationError


class ClassifierPort:
    """Pixel buffer in, recognitions out (highest confidence first).

    input_size is the fixed square side the model consumes; fitting the live
    frame to it is the classifier's job, not the pipeline's.
    """

    input_size: int = 224

    def classify(self, pixels: np.ndarray, width: int, height: int) -> list[Recognition]:
        raise NotImplementedError

    def prepare(self, pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        """Center-crop to a square and resize to input_size. Returns a BGR image."""
        if len(pixels) != width * height:
            raise ClassificationError(
                f"pixel buffer has {len(pixels)} values, expected {width}x{height}={width * height}"
            )
        bgr = argb_to_bgr(pixels, width, height)
        side = min(width, height)
        y0, x0 = (height - side) // 2, (width - side) // 2
        square = np.ascontiguousarray(bgr[y0:y0 + side, x0:x0 + side])
        if side == self.input_size:
            return square
        return cv2.resize(square, (self.input_size, self.input_size), interpolation=cv2.INTER_AREA)
