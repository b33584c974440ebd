"""Abstract interface for durable session result storage."""

from abc import ABC, abstractmethod

from session_summarizer.domain.models import SessionCacheEntry


class SessionStore(ABC):
    """Abstract base class for persistent session result storage."""

    @abstractmethod
    def save(self, entry: SessionCacheEntry) -> None:
        """
        Persists a session result, replacing any previous one.

        Raises:
            StorageError: If persistence fails.
        """

    @abstractmethod
    def load(self, session_id: str) -> SessionCacheEntry | None:
        """
        Loads a persisted session result.

        Returns:
            The stored entry or None if the session was never saved.

        Raises:
            StorageError: If the lookup fails.
        """
