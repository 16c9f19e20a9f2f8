"""Capability contracts the recording controller depends on.

Hosts supply concrete implementations (browser bridge, desktop capture,
test fakes). Only the shapes below are relied upon.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol

from pydantic import BaseModel


class CaptureUnavailableError(RuntimeError):  # Capture device denied or missing
    pass


class RecognitionResult(BaseModel):  # Incremental speech-to-text result
    text: str
    is_final: bool = False


class MediaArtifact(BaseModel):  # Finalized recording payload
    content: bytes
    mime_type: str


class MediaArtifacts(BaseModel):
    audio: Optional[MediaArtifact] = None
    video: Optional[MediaArtifact] = None


class CaptureDevice(Protocol):
    def start_recording(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def stop(self) -> MediaArtifacts: ...

    def release(self) -> None: ...


class MediaCapture(Protocol):
    def acquire(self) -> CaptureDevice:
        """Open an audio+video device or raise :class:`CaptureUnavailableError`."""
        ...


class LiveTranscription(Protocol):
    def start(self, on_result: Callable[[RecognitionResult], None]) -> None: ...

    def stop(self) -> None: ...


class Ticker(Protocol):
    def start(self, on_tick: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


__all__ = [
    "CaptureDevice",
    "CaptureUnavailableError",
    "LiveTranscription",
    "MediaArtifact",
    "MediaArtifacts",
    "MediaCapture",
    "RecognitionResult",
    "Ticker",
]
