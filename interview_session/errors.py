from __future__ import annotations  # Error types raised by the session orchestrator

from typing import Dict


class ConfigValidationError(ValueError):  # Setup form rejected before any network call
    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = dict(errors)


class OrchestratorStateError(RuntimeError):  # Operation not valid in the current stage
    pass


class SessionPersistenceError(RuntimeError):  # Session store create/update failed
    pass


__all__ = ["ConfigValidationError", "OrchestratorStateError", "SessionPersistenceError"]
