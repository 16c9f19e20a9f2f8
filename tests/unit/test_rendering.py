import json

import httpx
import pytest

from config import ServiceAvailability
from config.settings import Settings
from rendering import AvatarVideoRenderer, RenderingError, SpeechSynthesizer


def _cfg() -> Settings:
    return Settings(_env_file=None, TTS_API_KEY="tts-key", AVATAR_API_KEY="avatar-key", AVATAR_REPLICA_ID="r1")


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_unconfigured_services_return_not_configured():
    offline = ServiceAvailability.offline()
    assert SpeechSynthesizer(offline, _cfg()).render("Hello").configured is False
    assert AvatarVideoRenderer(offline, _cfg()).render("Hello").configured is False


def test_blank_text_is_rejected():
    with pytest.raises(ValueError):
        SpeechSynthesizer(ServiceAvailability(speech=True), _cfg()).render("   ")


def test_speech_returns_audio_bytes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers["xi-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, content=b"ID3audio", headers={"Content-Type": "audio/mpeg"})

    result = SpeechSynthesizer(ServiceAvailability(speech=True), _cfg(), client=_client(handler)).render("Question one")

    assert result.configured is True
    assert result.content == b"ID3audio"
    assert result.mime_type == "audio/mpeg"
    assert seen["url"].endswith("/text-to-speech/21m00Tcm4TlvDq8ikWAM")
    assert seen["key"] == "tts-key"
    assert seen["body"]["text"] == "Question one"


def test_speech_upstream_error_raises():
    client = _client(lambda request: httpx.Response(401, json={"detail": "bad key"}))
    with pytest.raises(RenderingError):
        SpeechSynthesizer(ServiceAvailability(speech=True), _cfg(), client=client).render("Hi")


def test_avatar_returns_video_reference():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert request.url.path == "/v2/videos"
        assert body["replica_id"] == "r1"
        assert request.headers["x-api-key"] == "avatar-key"
        return httpx.Response(200, json={"video_id": "v-123", "status": "queued"})

    result = AvatarVideoRenderer(ServiceAvailability(avatar=True), _cfg(), client=_client(handler)).render("Hi there")

    assert result.configured is True
    assert result.video_id == "v-123"
    assert result.status == "queued"
    assert result.video_url is None


def test_avatar_transport_failure_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RenderingError):
        AvatarVideoRenderer(ServiceAvailability(avatar=True), _cfg(), client=_client(handler)).render("Hi")


def test_avatar_non_object_payload_raises():
    client = _client(lambda request: httpx.Response(200, json=[1, 2]))
    with pytest.raises(RenderingError):
        AvatarVideoRenderer(ServiceAvailability(avatar=True), _cfg(), client=client).render("Hi")
