import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from recording.providers import MediaArtifact, MediaArtifacts, RecognitionResult


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "PERSISTENCE_ENABLED", True, raising=False)
    monkeypatch.setattr(settings, "REASONING_API_KEY", None, raising=False)
    monkeypatch.setattr(settings, "TTS_API_KEY", None, raising=False)
    monkeypatch.setattr(settings, "AVATAR_API_KEY", None, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeHttpClient:
    """Records posts and replays queued responses (or raises queued exceptions)."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> Any:
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def completion(content: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


class ManualTicker:
    def __init__(self) -> None:
        self.on_tick: Optional[Callable[[], None]] = None
        self.stopped = False

    def start(self, on_tick: Callable[[], None]) -> None:
        self.on_tick = on_tick

    def stop(self) -> None:
        self.stopped = True

    def tick(self, times: int = 1) -> None:
        for _ in range(times):
            if self.on_tick is not None:
                self.on_tick()


class FakeDevice:
    def __init__(self, fail_on_start: bool = False) -> None:
        self.fail_on_start = fail_on_start
        self.calls: List[str] = []
        self.released = False

    def start_recording(self) -> None:
        self.calls.append("start")
        if self.fail_on_start:
            raise RuntimeError("recorder failed")

    def pause(self) -> None:
        self.calls.append("pause")

    def resume(self) -> None:
        self.calls.append("resume")

    def stop(self) -> MediaArtifacts:
        self.calls.append("stop")
        return MediaArtifacts(
            audio=MediaArtifact(content=b"audio", mime_type="audio/webm"),
            video=MediaArtifact(content=b"video", mime_type="video/webm"),
        )

    def release(self) -> None:
        self.released = True


class FakeCapture:
    def __init__(self, device: Optional[FakeDevice] = None, error: Optional[Exception] = None) -> None:
        self.device = device or FakeDevice()
        self.error = error
        self.acquired = 0

    def acquire(self) -> FakeDevice:
        if self.error is not None:
            raise self.error
        self.acquired += 1
        return self.device


class FakeTranscription:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.on_result: Optional[Callable[[RecognitionResult], None]] = None
        self.active = False

    def start(self, on_result: Callable[[RecognitionResult], None]) -> None:
        if self.fail:
            raise RuntimeError("speech recognition unsupported")
        self.on_result = on_result
        self.active = True

    def stop(self) -> None:
        self.active = False

    def emit(self, text: str, is_final: bool = True) -> None:
        if self.on_result is not None:
            self.on_result(RecognitionResult(text=text, is_final=is_final))


@pytest.fixture
def ticker():
    return ManualTicker()


@pytest.fixture
def transcription():
    return FakeTranscription()


@pytest.fixture
def capture():
    return FakeCapture()
