from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Plane:
    data: bytes | bytearray | memoryview | np.ndarray
    row_stride: int
    pixel_stride: int = 1

    @property
    def length(self) -> int:
        """Buffer capacity in bytes (may exceed the visible samples)."""
        if isinstance(self.data, np.ndarray):
            return int(self.data.nbytes)
        return len(self.data)


class PlanarFrame:
    """Borrowed view over Y, U, V planes owned by the camera subsystem.

    The holder must call close() exactly once; a second call is a bug.
    """

    def __init__(self, planes: Sequence[Plane], width: int, height: int,
                 on_close: Optional[Callable[["PlanarFrame"], None]] = None,
                 frame_id: int = 0):
        if len(planes) != 3:
            raise ValueError(f"expected 3 planes (Y, U, V), got {len(planes)}")
        self.planes = tuple(planes)
        self.width = width
        self.height = height
        self.frame_id = frame_id
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        if self._closed:
            raise RuntimeError(f"frame {self.frame_id} already released")
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)

    def __repr__(self):
        return f"PlanarFrame(id={self.frame_id}, {self.width}x{self.height}, closed={self._closed})"


@dataclass(frozen=True)
class Recognition:
    label: str                 # e.g. "tabby_cat"
    confidence: float


@dataclass(frozen=True)
class StreamConfig:
    width: int
    height: int
    sensor_orientation: int = 0


@dataclass
class FrameResult:
    ok: bool
    duration_ms: int = 0
    error_code: Optional[str] = None
    frame_id: Optional[int] = None
    results: list[Recognition] = field(default_factory=list)
