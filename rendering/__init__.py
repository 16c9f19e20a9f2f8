"""Text-to-speech and avatar video rendering clients."""
from .clients import AvatarVideoRenderer, RenderResult, RenderingError, SpeechSynthesizer

__all__ = ["AvatarVideoRenderer", "RenderResult", "RenderingError", "SpeechSynthesizer"]
