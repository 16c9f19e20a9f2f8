"""Explicit record of which external services are configured."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .settings import Settings


class ServiceAvailability(BaseModel):
    """Computed once at startup and handed to the components that call out.

    A ``False`` flag means the matching collaborator is treated as absent:
    generation falls back to local templates, sessions live in memory, and
    rendering reports ``configured=False``.
    """

    model_config = ConfigDict(frozen=True)

    reasoning: bool = False
    persistence: bool = False
    speech: bool = False
    avatar: bool = False

    @classmethod
    def from_settings(cls, cfg: Settings) -> "ServiceAvailability":
        return cls(
            reasoning=bool(cfg.REASONING_API_KEY),
            persistence=bool(cfg.PERSISTENCE_ENABLED and cfg.DB_PATH),
            speech=bool(cfg.TTS_API_KEY),
            avatar=bool(cfg.AVATAR_API_KEY),
        )

    @classmethod
    def offline(cls) -> "ServiceAvailability":
        return cls()

    def describe(self) -> str:
        flags = [name for name, enabled in self.model_dump().items() if enabled]
        return ",".join(flags) if flags else "offline"


__all__ = ["ServiceAvailability"]
