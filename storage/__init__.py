"""Session persistence."""
from .migrate import migrate
from .session_store import InMemorySessionStore, SessionStore, SqliteSessionStore, build_session_store

__all__ = ["InMemorySessionStore", "SessionStore", "SqliteSessionStore", "build_session_store", "migrate"]
