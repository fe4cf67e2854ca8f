"""
Base service classes.

Defines the common plumbing for services that own persisted state.
"""

from abc import ABC
from typing import Optional
import logging

from ..db.session_store import InMemorySessionStore, SessionStore
from ..exceptions import StorageError


class BaseService(ABC):
    """
    Abstract base class for stateful services.

    Provides common functionality:
    - Logging setup
    - Slot storage integration
    - Error handling utilities
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store if store is not None else InMemorySessionStore()
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def store(self) -> SessionStore:
        """Get the slot store."""
        return self._store

    def _read_slot(self, key: str) -> Optional[bytes]:
        """Read a slot, treating storage failures as an empty slot."""
        try:
            return self._store.get(key)
        except StorageError as e:
            self._logger.warning(f"Slot read failed for '{key}': {e.message}")
            return None

    def _write_slot(self, key: str, value: bytes) -> None:
        """Write a slot; the in-memory state stays authoritative on failure."""
        try:
            self._store.set(key, value)
        except StorageError as e:
            self._logger.warning(f"Slot write failed for '{key}': {e.message}")

    def _delete_slot(self, key: str) -> None:
        """Delete a slot, handling errors gracefully."""
        try:
            self._store.delete(key)
        except StorageError as e:
            self._logger.warning(f"Slot delete failed for '{key}': {e.message}")
