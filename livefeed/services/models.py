from pydantic import BaseModel
from typing import Dict, Optional


class RecognitionOut(BaseModel):
    label: str
    confidence: float


class StreamOut(BaseModel):
    configured: bool
    running: bool
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: int = 0


class StatusResponse(BaseModel):
    busy: bool
    stream: StreamOut
    results: list[RecognitionOut]
    result_text: str = ""
    last_error: Optional[str] = None
    stats: Dict[str, int]
    logs: list[str]


class StreamResponse(BaseModel):
    ok: bool
    stream: StreamOut
    error: Optional[str] = None


class FrameRequest(BaseModel):
    image: str  # base64 JPEG/PNG
    sensor_orientation: int = 0


class FrameResponse(BaseModel):
    ok: bool
    frame_id: Optional[int] = None
    duration_ms: int = 0
    error_code: Optional[str] = None
    results: list[RecognitionOut] = []
    error: Optional[str] = None
