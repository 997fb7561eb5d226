class ResultSink:
    def publish(self, results):
        """Receive recognitions, best first. Must be cheap; never blocks the frame path."""
        raise NotImplementedError
