from __future__ import annotations  # Session store interface and implementations

import logging
import sqlite3
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

from pydantic import ValidationError

from config import ServiceAvailability, Settings
from interview_session.errors import SessionPersistenceError
from interview_session.models import Session, utcnow

from .migrate import migrate
from .sqlite import get_conn

logger = logging.getLogger(__name__)


class SessionStore(Protocol):  # Key-value session persistence
    def create(self, user_id: str, initial_fields: Mapping[str, Any]) -> str: ...

    def update(self, session_id: str, partial_fields: Mapping[str, Any]) -> None: ...

    def get(self, session_id: str) -> Optional[Session]: ...

    def list_by_user(self, user_id: str) -> List[Session]: ...


def _build(session_id: str, user_id: str, fields: Mapping[str, Any]) -> Session:
    now = utcnow()
    data: Dict[str, Any] = {"status": "pending", "created_at": now, "updated_at": now}
    data.update(fields)
    data["id"] = session_id
    data["user_id"] = user_id
    try:
        return Session.model_validate(data)
    except ValidationError as exc:
        raise SessionPersistenceError(f"Invalid session fields: {exc}") from exc


def _merge(current: Session, partial_fields: Mapping[str, Any]) -> Session:
    data = current.model_dump()
    data.update({key: value for key, value in partial_fields.items() if key not in ("id", "user_id")})
    data["updated_at"] = utcnow()
    try:
        return Session.model_validate(data)
    except ValidationError as exc:
        raise SessionPersistenceError(f"Invalid session update: {exc}") from exc


class InMemorySessionStore:  # Thread-safe process-local store used when persistence is off
    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = RLock()

    def create(self, user_id: str, initial_fields: Mapping[str, Any]) -> str:
        session_id = f"demo-session-{uuid4().hex}"
        session = _build(session_id, user_id, initial_fields)
        with self._lock:
            self._sessions[session_id] = session
        return session_id

    def update(self, session_id: str, partial_fields: Mapping[str, Any]) -> None:
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise SessionPersistenceError(f"Session '{session_id}' not found")
            self._sessions[session_id] = _merge(current, partial_fields)

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def list_by_user(self, user_id: str) -> List[Session]:
        with self._lock:
            sessions = [item for item in self._sessions.values() if item.user_id == user_id]
        return sorted(sessions, key=lambda item: item.created_at)


class SqliteSessionStore:  # SQLite-backed store keeping each session as a JSON payload
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        migrate(db_path)

    def create(self, user_id: str, initial_fields: Mapping[str, Any]) -> str:
        session = _build(uuid4().hex, user_id, initial_fields)
        try:
            with get_conn(self._db_path) as conn:
                conn.execute(
                    """INSERT INTO practice_sessions (id, user_id, status, payload, created_at, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        session.id,
                        session.user_id,
                        session.status,
                        session.model_dump_json(),
                        session.created_at.isoformat(),
                        session.updated_at.isoformat(),
                    ),
                )
        except sqlite3.Error as exc:
            logger.error("Session create failed user=%s: %s", user_id, exc)
            raise SessionPersistenceError("Failed to create session") from exc
        return session.id

    def update(self, session_id: str, partial_fields: Mapping[str, Any]) -> None:
        current = self.get(session_id)
        if current is None:
            raise SessionPersistenceError(f"Session '{session_id}' not found")
        merged = _merge(current, partial_fields)
        try:
            with get_conn(self._db_path) as conn:
                conn.execute(
                    "UPDATE practice_sessions SET status = ?, payload = ?, updated_at = ? WHERE id = ?",
                    (merged.status, merged.model_dump_json(), merged.updated_at.isoformat(), session_id),
                )
        except sqlite3.Error as exc:
            logger.error("Session update failed session=%s: %s", session_id, exc)
            raise SessionPersistenceError("Failed to update session") from exc

    def get(self, session_id: str) -> Optional[Session]:
        try:
            with get_conn(self._db_path) as conn:
                row = conn.execute(
                    "SELECT payload FROM practice_sessions WHERE id = ?",
                    (session_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise SessionPersistenceError("Failed to load session") from exc
        if row is None:
            return None
        return Session.model_validate_json(row["payload"])

    def list_by_user(self, user_id: str) -> List[Session]:
        try:
            with get_conn(self._db_path) as conn:
                rows = conn.execute(
                    "SELECT payload FROM practice_sessions WHERE user_id = ? ORDER BY created_at ASC",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise SessionPersistenceError("Failed to list sessions") from exc
        return [Session.model_validate_json(row["payload"]) for row in rows]


def build_session_store(availability: ServiceAvailability, cfg: Settings) -> SessionStore:
    if availability.persistence:
        return SqliteSessionStore(cfg.DB_PATH)
    logger.info("Persistence disabled; sessions are kept in memory")
    return InMemorySessionStore()


__all__ = ["InMemorySessionStore", "SessionStore", "SqliteSessionStore", "build_session_store"]
