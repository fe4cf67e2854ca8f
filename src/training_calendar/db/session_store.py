"""Key-value stores for persisted session slots."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Union, runtime_checkable

from ..exceptions import StorageError


@runtime_checkable
class SessionStore(Protocol):
    """
    Protocol for session slot storage.

    Slots are opaque bytes keyed by name; the session decides what goes
    in them.
    """

    def get(self, key: str) -> Optional[bytes]:
        """Get a slot's bytes, or None when it was never written."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Write a slot."""
        ...

    def delete(self, key: str) -> None:
        """Remove a slot if present."""
        ...

    def keys(self) -> List[str]:
        """Names of all written slots."""
        ...


class InMemorySessionStore:
    """Dictionary-backed store, for tests and hosts that persist elsewhere."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._slots: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._slots.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._slots[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._slots)


class SqliteSessionStore:
    """SQLite-backed store; one row per slot."""

    def __init__(self, db_path: Union[str, Path] = "session.db"):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        if self.db_path.parent and not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection("init") as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS session_slots (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)

    @contextmanager
    def _get_connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open session database {self.db_path}: {e}", operation=operation)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Session database {operation} failed: {e}", operation=operation)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, key: str) -> Optional[bytes]:
        with self._get_connection("get") as conn:
            row = conn.execute(
                "SELECT value FROM session_slots WHERE key = ?", (key,)
            ).fetchone()
        return bytes(row["value"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        with self._get_connection("set") as conn:
            conn.execute(
                """
                INSERT INTO session_slots (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), datetime.now(timezone.utc).isoformat()),
            )

    def delete(self, key: str) -> None:
        with self._get_connection("delete") as conn:
            conn.execute("DELETE FROM session_slots WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        with self._get_connection("keys") as conn:
            rows = conn.execute("SELECT key FROM session_slots ORDER BY key").fetchall()
        return [row["key"] for row in rows]
