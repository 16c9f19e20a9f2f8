"""Per-question capture lifecycle: device, timer and live transcript.

State machine::

    idle -> recording <-> paused -> completed -> idle
    (reset returns to idle from any state)

Calls made from a state where they do not apply are ignored and return
``False`` (``None`` for :meth:`RecordingController.submit`). The ticker and
transcription feed only run while ``recording``; every transition away from
``recording`` bumps a run epoch, so a callback that was already in flight is
dropped, and then stops the producers before returning.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

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

logger = logging.getLogger(__name__)

RecordingState = Literal["idle", "recording", "paused", "completed"]


class RecordedAnswer(BaseModel):  # Finalized capture handed to the orchestrator
    question_id: Optional[str] = None
    transcript: str
    elapsed_seconds: int = Field(ge=0)
    audio: Optional[MediaArtifact] = None
    video: Optional[MediaArtifact] = None


_Producers = Tuple[Optional[Ticker], bool]


class RecordingController:
    def __init__(
        self,
        capture: MediaCapture,
        transcription: Optional[LiveTranscription] = None,
        *,
        ticker_factory: Callable[[], Ticker] = ThreadTicker,
    ) -> None:
        self._capture = capture
        self._transcription = transcription
        self._ticker_factory = ticker_factory
        self._lock = threading.RLock()
        self._state: RecordingState = "idle"
        self._question_id: Optional[str] = None
        self._device: Optional[CaptureDevice] = None
        self._ticker: Optional[Ticker] = None
        self._feed_active = False
        self._epoch = 0
        self._elapsed = 0
        self._fragments: List[str] = []
        self._artifacts = MediaArtifacts()

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def question_id(self) -> Optional[str]:
        return self._question_id

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def transcript(self) -> str:
        with self._lock:
            return " ".join(self._fragments)

    @property
    def artifacts(self) -> MediaArtifacts:
        return self._artifacts

    @property
    def holds_device(self) -> bool:
        return self._device is not None

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self._state,
                "question_id": self._question_id,
                "elapsed_seconds": self._elapsed,
                "transcript": " ".join(self._fragments),
                "can_submit": self._state == "completed" and bool(" ".join(self._fragments).strip()),
            }

    def start(self, question_id: Optional[str] = None) -> bool:
        """Begin capturing an answer, bound to ``question_id`` when given."""
        with self._lock:
            if self._state != "idle":
                return False
            device = self._acquire()
            self._device = device
            self._question_id = question_id
            self._elapsed = 0
            self._fragments = []
            self._artifacts = MediaArtifacts()
            self._state = "recording"
            self._start_producers()
        logger.info("Recording started question=%s", question_id)
        return True

    def pause(self) -> bool:
        with self._lock:
            if self._state != "recording" or self._device is None:
                return False
            self._device.pause()
            self._state = "paused"
            producers = self._detach_producers()
        self._halt(producers)
        return True

    def resume(self) -> bool:
        with self._lock:
            if self._state != "paused" or self._device is None:
                return False
            self._device.resume()
            self._state = "recording"
            self._start_producers()
        return True

    def stop(self) -> bool:
        with self._lock:
            if self._state not in ("recording", "paused"):
                return False
            self._state = "completed"
            producers = self._detach_producers()
            device, self._device = self._device, None
        self._halt(producers)
        if device is not None:
            try:
                artifacts = device.stop()
            finally:
                device.release()
            with self._lock:
                if self._state == "completed":
                    self._artifacts = artifacts or MediaArtifacts()
        logger.info("Recording stopped elapsed=%ds", self._elapsed)
        return True

    def reset(self) -> None:
        with self._lock:
            producers = self._detach_producers()
            device, self._device = self._device, None
            self._state = "idle"
            self._question_id = None
            self._elapsed = 0
            self._fragments = []
            self._artifacts = MediaArtifacts()
        self._halt(producers)
        if device is not None:
            device.release()

    def submit(self) -> Optional[RecordedAnswer]:
        with self._lock:
            if self._state != "completed":
                return None
            transcript = " ".join(self._fragments).strip()
            if not transcript:
                return None
            answer = RecordedAnswer(
                question_id=self._question_id,
                transcript=transcript,
                elapsed_seconds=self._elapsed,
                audio=self._artifacts.audio,
                video=self._artifacts.video,
            )
        self.reset()
        return answer

    def _acquire(self) -> CaptureDevice:
        try:
            device = self._capture.acquire()
        except CaptureUnavailableError:
            logger.warning("Capture device unavailable")
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Capture device acquisition failed: %s", exc)
            raise CaptureUnavailableError(str(exc)) from exc
        try:
            device.start_recording()
        except Exception as exc:  # noqa: BLE001
            device.release()
            logger.warning("Capture device failed to start: %s", exc)
            raise CaptureUnavailableError(str(exc)) from exc
        return device

    def _start_producers(self) -> None:
        self._epoch += 1
        epoch = self._epoch
        ticker = self._ticker_factory()
        ticker.start(lambda: self._on_tick(epoch))
        self._ticker = ticker
        self._feed_active = False
        if self._transcription is not None:
            try:
                self._transcription.start(lambda result: self._on_result(epoch, result))
                self._feed_active = True
            except Exception as exc:  # noqa: BLE001
                logger.warning("Live transcription unavailable: %s", exc)

    def _detach_producers(self) -> _Producers:
        self._epoch += 1
        producers = (self._ticker, self._feed_active)
        self._ticker = None
        self._feed_active = False
        return producers

    def _halt(self, producers: _Producers) -> None:
        ticker, feed_active = producers
        if ticker is not None:
            ticker.stop()
        if feed_active and self._transcription is not None:
            self._transcription.stop()

    def _on_tick(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self._state != "recording":
                return
            self._elapsed += 1

    def _on_result(self, epoch: int, result: RecognitionResult) -> None:
        with self._lock:
            if epoch != self._epoch or self._state != "recording":
                return
            if not result.is_final:
                return
            text = result.text.strip()
            if text:
                self._fragments.append(text)


__all__ = ["RecordedAnswer", "RecordingController", "RecordingState"]
