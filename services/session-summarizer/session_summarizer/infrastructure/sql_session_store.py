"""SQLModel implementation of the SessionStore interface."""

from lifewrapped_common.db_models import SessionSummaryRecord
from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    EngineTier,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
)
from session_summarizer.exceptions import StorageError
from session_summarizer.infrastructure.interfaces import SessionStore

logger = setup_logging()


class SqlSessionStore(SessionStore):
    """
    Persists session results in a relational database.

    One row per session; saving a session again replaces its row.
    """

    def __init__(self, session_factory):
        """
        Initializes the store.

        Args:
            session_factory: Callable that returns a SQLModel Session context manager.
        """
        self._session_factory = session_factory

    def save(self, entry: SessionCacheEntry) -> None:
        try:
            with self._session_factory() as db_session:
                db_session.merge(
                    SessionSummaryRecord(
                        session_id=entry.session_id,
                        tier=entry.tier.value,
                        transcript_json=entry.transcript.model_dump_json(),
                        summary_json=entry.summary.model_dump_json(),
                        generated_at=entry.generated_at,
                    )
                )
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to persist session result",
                extra={"session_id": entry.session_id},
            )
            raise StorageError(f"could not save session '{entry.session_id}'", cause=e) from e

        logger.info(
            "Session result persisted",
            extra={"session_id": entry.session_id, "tier": entry.tier.value},
        )

    def load(self, session_id: str) -> SessionCacheEntry | None:
        try:
            with self._session_factory() as db_session:
                record = db_session.get(SessionSummaryRecord, session_id)
                if record is None:
                    return None
                return SessionCacheEntry(
                    session_id=record.session_id,
                    transcript=Transcript.model_validate_json(record.transcript_json),
                    summary=SummaryResult.model_validate_json(record.summary_json),
                    tier=EngineTier(record.tier),
                    generated_at=record.generated_at,
                )
        except Exception as e:
            logger.exception("Failed to load session result", extra={"session_id": session_id})
            raise StorageError(f"could not load session '{session_id}'", cause=e) from e
