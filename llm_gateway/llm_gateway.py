from __future__ import annotations  # Reasoning-service request gateway

import json
import logging
import os
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Raised for any transport, status or payload failure
    pass


T = TypeVar("T", bound=BaseModel)


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    system_prompt: Optional[str] = None,
    client: Optional[HttpClient] = None,
) -> T:  # Invoke configured route once and validate output
    messages: list[Dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": task})
    return chat(messages, schema, cfg=cfg, client=client)


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> T:
    payload: Dict[str, Any] = {"model": cfg.model, "messages": _normalize_messages(messages)}
    payload.update(cfg.options)
    headers = {"Content-Type": "application/json"}
    api_key = cfg.api_key or (os.getenv(cfg.api_key_env) if cfg.api_key_env else None)
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    preview = _preview(payload["messages"])
    if len(preview) > 120:
        preview = preview[:117] + "..."
    logger.info("LLM request send route=%s model=%s preview=%s", cfg.name, cfg.model, preview)
    try:
        response = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc
    if response.status_code >= 400:
        logger.error("LLM error status route=%s: %s", cfg.name, response.status_code)
        raise LlmGatewayError(f"LLM returned status {response.status_code}")
    try:
        data = response.json()
    except Exception as exc:  # noqa: BLE001
        logger.error("Invalid JSON envelope from LLM: %s", exc)
        raise LlmGatewayError("LLM payload was not JSON") from exc
    content = _extract_content(data)
    try:
        parsed = _validate(schema, content)
    except (json.JSONDecodeError, ValidationError, ValueError) as exc:
        logger.warning("LLM output validation failed route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM output validation failed") from exc
    logger.info("LLM request done route=%s model=%s", cfg.name, cfg.model)
    return parsed


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> HttpResponse:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout)
    with httpx.Client(timeout=timeout) as http_client:
        return http_client.post(url, json=payload, headers=headers)


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # First non-empty user line for logging
    for message in messages:
        if message.get("role") != "user":
            continue
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[0]
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from completion envelope
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str) and content.strip():
                return content
        if isinstance(data.get("content"), str) and data["content"].strip():
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    cleaned = _strip_code_fences(content)
    try:
        return schema.model_validate_json(cleaned)
    except (json.JSONDecodeError, ValidationError) as exc:
        adapter = getattr(schema, "from_raw_content", None)
        if callable(adapter):
            return adapter(cleaned)  # type: ignore[return-value]
        raise exc


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text
