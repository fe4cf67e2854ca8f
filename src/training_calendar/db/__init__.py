"""Session persistence."""

from .session_store import InMemorySessionStore, SessionStore, SqliteSessionStore

__all__ = ["SessionStore", "InMemorySessionStore", "SqliteSessionStore"]
