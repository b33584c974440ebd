"""Per-session result cache backed by a key/value cache and a durable store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from lifewrapped_common.logging import setup_logging
from pydantic import ValidationError

from session_summarizer.domain.models import (
    EngineTier,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
)
from session_summarizer.exceptions import StorageError
from session_summarizer.infrastructure.interfaces import CacheService, SessionStore

logger = setup_logging()


class SessionResultCache:
    """
    Stores the final transcript and summary for each session.

    Entries are never evicted here; a later ``put`` for the same session
    replaces the earlier one. Reads are lock-free, writes are serialized per
    session id so unrelated sessions never wait on each other.
    """

    def __init__(self, cache: CacheService, store: SessionStore | None = None):
        self._cache = cache
        self._store = store
        # session id -> (lock, writers holding or waiting on it)
        self._write_locks: dict[str, tuple[asyncio.Lock, int]] = {}

    async def get(self, session_id: str) -> SessionCacheEntry | None:
        """
        Returns the cached entry for a session.

        Falls back to the durable store on a cache miss and re-warms the
        cache from it.

        Raises:
            StorageError: If the cache or store cannot be read.
        """
        key = self._key(session_id)
        cached = await self._cache.get(key)
        if cached:
            try:
                entry = SessionCacheEntry.model_validate_json(cached)
            except ValidationError as e:
                logger.exception("Corrupt cache entry", extra={"session_id": session_id})
                raise StorageError(f"corrupt cache entry for session '{session_id}'", cause=e) from e
            logger.info("Session result retrieved from cache", extra={"session_id": session_id})
            return entry

        if self._store is None:
            return None

        entry = await asyncio.to_thread(self._store.load, session_id)
        if entry is None:
            return None

        await self._cache.set(key, entry.model_dump_json())
        logger.info("Session result restored from store", extra={"session_id": session_id})
        return entry

    async def put(
        self,
        session_id: str,
        transcript: Transcript,
        summary: SummaryResult,
        tier: EngineTier,
    ) -> SessionCacheEntry:
        """
        Stores a session result, replacing any previous entry.

        Raises:
            StorageError: If the store or cache cannot be written.
        """
        entry = SessionCacheEntry(
            session_id=session_id,
            transcript=transcript,
            summary=summary,
            tier=tier,
        )
        key = self._key(session_id)
        async with self._writing(session_id):
            if self._store is None:
                await self._cache.set(key, entry.model_dump_json())
            else:
                await asyncio.to_thread(self._store.save, entry)
                try:
                    await self._cache.set(key, entry.model_dump_json())
                except StorageError:
                    await self._invalidate(key, session_id)
                    raise

        logger.info(
            "Session result cached",
            extra={"session_id": session_id, "tier": tier.value},
        )
        return entry

    async def _invalidate(self, key: str, session_id: str) -> None:
        """Drops a stale cache value so reads fall through to the store."""
        try:
            await self._cache.delete(key)
        except StorageError:
            logger.exception(
                "Could not invalidate stale cache entry", extra={"session_id": session_id}
            )
        else:
            logger.warning(
                "Invalidated cache entry after failed write", extra={"session_id": session_id}
            )

    @asynccontextmanager
    async def _writing(self, session_id: str) -> AsyncIterator[None]:
        """Holds the session's write lock; the lock is dropped with its last writer."""
        lock, writers = self._write_locks.get(session_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._write_locks[session_id] = (lock, writers + 1)
        try:
            async with lock:
                yield
        finally:
            _, writers = self._write_locks[session_id]
            if writers == 1:
                del self._write_locks[session_id]
            else:
                self._write_locks[session_id] = (lock, writers - 1)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session-summary:{session_id}"
