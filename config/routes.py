from __future__ import annotations  # Configuration schema for reasoning-service routing

from pathlib import Path
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

from .settings import Settings

RouteName = Literal["questions", "feedback"]


class LlmRoute(BaseModel):  # Reasoning endpoint configuration
    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key_env: str | None = None
    api_key: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)


class AppConfig(BaseModel):  # Route overrides loaded from disk
    llm_routes: Dict[str, LlmRoute]


def load_config(path: Path) -> AppConfig:  # Load configuration from disk
    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def route_from_settings(cfg: Settings, name: RouteName) -> LlmRoute:  # Build a route for questions or feedback
    if name == "questions":
        options = {"temperature": cfg.QUESTIONS_TEMPERATURE, "max_tokens": cfg.QUESTIONS_MAX_TOKENS}
    else:
        options = {"temperature": cfg.FEEDBACK_TEMPERATURE, "max_tokens": cfg.FEEDBACK_MAX_TOKENS}
    return LlmRoute(
        name=name,
        base_url=cfg.REASONING_BASE_URL.rstrip("/"),
        endpoint=cfg.REASONING_ENDPOINT,
        model=cfg.REASONING_MODEL,
        timeout_s=cfg.REASONING_TIMEOUT_S,
        api_key=cfg.REASONING_API_KEY,
        options=options,
    )


def resolve_routes(cfg: Settings, overrides: AppConfig | None = None) -> Dict[RouteName, LlmRoute]:  # Merge file overrides over settings-derived routes
    routes: Dict[RouteName, LlmRoute] = {
        "questions": route_from_settings(cfg, "questions"),
        "feedback": route_from_settings(cfg, "feedback"),
    }
    if overrides is None:
        return routes
    for key in routes:
        if key in overrides.llm_routes:
            routes[key] = overrides.llm_routes[key]
    return routes


__all__ = ["AppConfig", "LlmRoute", "RouteName", "load_config", "resolve_routes", "route_from_settings"]
