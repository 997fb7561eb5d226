from livefeed.adapters.vision.base import ClassifierPort
from livefeed.core.contracts import Recognition
from livefeed.core.errors import ClassificationError

DEFAULT_RESULTS = [
    Recognition(label="tabby_cat", confidence=0.72),
    Recognition(label="tiger_cat", confidence=0.18),
    Recognition(label="egyptian_cat", confidence=0.06),
]


class MockClassifier(ClassifierPort):
    """Returns a canned ranking; can be told to fail to exercise error paths."""

    def __init__(self, status_store, input_size: int = 224, results=None, fail: bool = False):
        self.status = status_store
        self.input_size = input_size
        self.results = list(results) if results is not None else list(DEFAULT_RESULTS)
        self.fail = fail
        self.calls = 0
        self.status.log(f"mock_classifier: ready (input={input_size})")

    def classify(self, pixels, width, height) -> list[Recognition]:
        self.calls += 1
        self.prepare(pixels, width, height)
        if self.fail:
            raise ClassificationError("mock failure")
        return list(self.results)
