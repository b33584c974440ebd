"""Abstract interface for summarization engines."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from datetime import datetime

from session_summarizer.domain.models import (
    EngineTier,
    PeriodSummary,
    PeriodType,
    ProgressState,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
)
from session_summarizer.exceptions import SummarizationError


class SummarizationEngine(ABC):
    """Abstract base class for one summarization tier."""

    tier: EngineTier

    @abstractmethod
    async def is_available(self) -> bool:
        """Returns whether this engine can be used right now."""

    @abstractmethod
    def summarize(
        self, transcript: Transcript, language: str | None
    ) -> AsyncIterator[ProgressState | SummaryResult]:
        """
        Summarizes a transcript.

        Args:
            transcript: The transcript to summarize.
            language: Detected language code, if any.

        Returns:
            An async stream of progress updates ending with a SummaryResult.

        Raises:
            SummarizationError: If the engine fails to produce a summary.
        """

    async def summarize_period(
        self,
        period_type: PeriodType,
        entries: list[SessionCacheEntry],
        period_start: datetime,
        period_end: datetime,
    ) -> PeriodSummary:
        """
        Rolls the session summaries of one period up into a single summary.

        Raises:
            SummarizationError: If the engine cannot summarize periods.
        """
        raise SummarizationError(self.tier, "period summaries are not supported")
