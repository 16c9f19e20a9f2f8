from __future__ import annotations  # Practice session domain package exports

from .errors import ConfigValidationError, OrchestratorStateError, SessionPersistenceError
from .models import (
    InterviewQuestion,
    InterviewResponse,
    JobContext,
    ResponseFeedback,
    Session,
    SessionConfig,
    SessionStatus,
)

__all__ = [
    "ConfigValidationError",
    "InterviewQuestion",
    "InterviewResponse",
    "JobContext",
    "OrchestratorStateError",
    "ResponseFeedback",
    "Session",
    "SessionConfig",
    "SessionPersistenceError",
    "SessionStatus",
]
