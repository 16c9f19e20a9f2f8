"""One-shot audio and avatar-video rendering for question and feedback text.

Neither client is required for a session to proceed: when a service is not
configured the call returns ``RenderResult(configured=False)`` and the host
falls back to local playback or a static avatar.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from config import ServiceAvailability, Settings

logger = logging.getLogger(__name__)


class RenderingError(RuntimeError):  # Upstream rendering service failed
    pass


class RenderResult(BaseModel):
    configured: bool
    content: Optional[bytes] = None
    mime_type: Optional[str] = None
    video_url: Optional[str] = None
    video_id: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None


def _require_text(text: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("Text is required")
    return cleaned


class _HttpRenderer:
    def __init__(self, cfg: Settings, client: Optional[httpx.Client] = None) -> None:
        self._cfg = cfg
        self._client = client

    def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, headers=headers, timeout=self._cfg.RENDER_TIMEOUT_S)
            else:
                with httpx.Client(timeout=self._cfg.RENDER_TIMEOUT_S) as client:
                    response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Rendering transport failure url=%s: %s", url, exc)
            raise RenderingError("Rendering service unreachable") from exc
        if response.status_code >= 400:
            logger.error("Rendering error status url=%s: %s", url, response.status_code)
            raise RenderingError(f"Rendering service returned status {response.status_code}")
        return response


class SpeechSynthesizer(_HttpRenderer):
    def __init__(self, availability: ServiceAvailability, cfg: Settings, client: Optional[httpx.Client] = None) -> None:
        super().__init__(cfg, client)
        self._enabled = availability.speech

    def render(self, text: str) -> RenderResult:
        script = _require_text(text)
        if not self._enabled:
            return RenderResult(configured=False, message="Speech synthesis not configured, use local TTS")
        cfg = self._cfg
        response = self._post(
            f"{cfg.TTS_BASE_URL.rstrip('/')}/text-to-speech/{cfg.TTS_VOICE_ID}",
            {
                "text": script,
                "model_id": cfg.TTS_MODEL_ID,
                "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
            },
            {"Accept": "audio/mpeg", "Content-Type": "application/json", "xi-api-key": cfg.TTS_API_KEY or ""},
        )
        return RenderResult(configured=True, content=response.content, mime_type="audio/mpeg")


class AvatarVideoRenderer(_HttpRenderer):
    def __init__(self, availability: ServiceAvailability, cfg: Settings, client: Optional[httpx.Client] = None) -> None:
        super().__init__(cfg, client)
        self._enabled = availability.avatar

    def render(self, text: str) -> RenderResult:
        script = _require_text(text)
        if not self._enabled:
            return RenderResult(configured=False, message="Avatar video not configured")
        cfg = self._cfg
        response = self._post(
            f"{cfg.AVATAR_BASE_URL.rstrip('/')}/v2/videos",
            {
                "script": script,
                "replica_id": cfg.AVATAR_REPLICA_ID,
                "video_name": f"Interview Question - {int(time.time() * 1000)}",
                "callback_url": None,
            },
            {"Content-Type": "application/json", "x-api-key": cfg.AVATAR_API_KEY or ""},
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise RenderingError("Avatar service returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise RenderingError("Avatar service returned an unexpected payload")
        # The download URL is only present once rendering finishes; callers poll by video_id.
        return RenderResult(
            configured=True,
            video_url=data.get("download_url"),
            video_id=data.get("video_id"),
            status=data.get("status"),
        )


__all__ = ["AvatarVideoRenderer", "RenderResult", "RenderingError", "SpeechSynthesizer"]
