from livefeed.adapters.sink.base import ResultSink
from livefeed.core.contracts import Recognition


def format_results(results: list[Recognition]) -> str:
    """One "label, confidence" line per recognition."""
    return "".join(f"{r.label}, {r.confidence}\n" for r in results)


class StatusSink(ResultSink):
    """Keeps the latest ranking in the status store for GET /status to show."""

    def __init__(self, status_store):
        self.status = status_store

    def publish(self, results):
        self.status.set_results(results, format_results(results))
