ERR_NOT_CONFIGURED = "NOT_CONFIGURED"  # frame arrived before stream configuration
ERR_NO_FRAME = "NO_FRAME"              # source had nothing to hand out
ERR_BUSY = "BUSY"                      # dropped by the gate
ERR_CONVERSION = "CONVERSION"
ERR_CLASSIFICATION = "CLASSIFICATION"
ERR_SHUTDOWN = "SHUTDOWN"
ERR_UNKNOWN = "UNKNOWN"


class LiveFeedError(Exception):
    pass


class FatalInitError(LiveFeedError):
    """Classifier or service could not be constructed; the pipeline must not start."""


class ClassificationError(LiveFeedError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TransientFrameError(LiveFeedError):
    """A single admitted frame failed; the next frame is unaffected."""
