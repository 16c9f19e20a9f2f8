"""Recording lifecycle for a single interview answer."""
from .controller import RecordedAnswer, RecordingController, RecordingState
from .providers import (
    CaptureDevice,
    CaptureUnavailableError,
    LiveTranscription,
    MediaArtifact,
    MediaArtifacts,
    MediaCapture,
    RecognitionResult,
    Ticker,
)
from .ticker import ThreadTicker

__all__ = [
    "CaptureDevice",
    "CaptureUnavailableError",
    "LiveTranscription",
    "MediaArtifact",
    "MediaArtifacts",
    "MediaCapture",
    "RecognitionResult",
    "RecordedAnswer",
    "RecordingController",
    "RecordingState",
    "ThreadTicker",
    "Ticker",
]
