"""
Single-flight admission gate.

  IDLE --admit(frame)--> BUSY   frame is now owned by the pipeline
  BUSY --admit(frame)--> BUSY   frame is released on the spot, rejected
  BUSY --release()-----> IDLE

Under load the newest frame wins and nothing queues: whatever arrives while a
frame is in flight is closed immediately and never reaches conversion.
The lock is held only for the state flip, so admit() never waits on work.
"""
import threading
from enum import Enum

from livefeed.core.contracts import PlanarFrame


class GateState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class Admission(str, Enum):
    ADMITTED = "admitted"
    REJECTED = "rejected"


class FrameGate:
    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._state = GateState.IDLE
        self._frame: PlanarFrame | None = None

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is GateState.BUSY

    @property
    def current(self) -> PlanarFrame | None:
        return self._frame

    def admit(self, frame: PlanarFrame) -> Admission:
        with self._cond:
            admitted = self._state is GateState.IDLE
            if admitted:
                self._state = GateState.BUSY
                self._frame = frame
        if not admitted:
            frame.close()
            return Admission.REJECTED
        return Admission.ADMITTED

    def release(self) -> PlanarFrame:
        """Return to IDLE. The caller has already closed the frame."""
        with self._cond:
            if self._state is not GateState.BUSY:
                raise RuntimeError("gate released while idle")
            frame = self._frame
            self._frame = None
            self._state = GateState.IDLE
            self._cond.notify_all()
        return frame

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._state is GateState.IDLE, timeout)
