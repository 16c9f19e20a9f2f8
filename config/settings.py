"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/practice.db")
    PERSISTENCE_ENABLED: bool = True

    QUESTION_COUNT: int = Field(default=5, ge=1)

    REASONING_API_KEY: str | None = None
    REASONING_BASE_URL: str = "https://api.deepseek.com/v1"
    REASONING_ENDPOINT: str = "/chat/completions"
    REASONING_MODEL: str = "deepseek-chat"
    REASONING_TIMEOUT_S: float = Field(default=20.0, ge=0.1)
    QUESTIONS_TEMPERATURE: float = 0.7
    QUESTIONS_MAX_TOKENS: int = 2000
    FEEDBACK_TEMPERATURE: float = 0.3
    FEEDBACK_MAX_TOKENS: int = 1500
    LLM_ROUTES_PATH: str | None = None  # JSON file of per-purpose route overrides

    TTS_API_KEY: str | None = None
    TTS_BASE_URL: str = "https://api.elevenlabs.io/v1"
    TTS_VOICE_ID: str = "21m00Tcm4TlvDq8ikWAM"
    TTS_MODEL_ID: str = "eleven_monolingual_v1"

    AVATAR_API_KEY: str | None = None
    AVATAR_BASE_URL: str = "https://tavusapi.com"
    AVATAR_REPLICA_ID: str = "default-replica"

    RENDER_TIMEOUT_S: float = Field(default=30.0, ge=0.1)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
