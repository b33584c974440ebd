"""Extractive summarization engine that needs no model."""

from collections.abc import AsyncIterator
from datetime import datetime

from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.extractive import (
    EMPTY_SUMMARY,
    extract_keywords,
    extractive_summary,
    merge_summaries,
    rank_by_frequency,
    split_sentences,
)
from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    PeriodSummary,
    PeriodType,
    ProgressState,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
)
from session_summarizer.domain.prompts import prepare_transcript_text
from session_summarizer.exceptions import SummarizationError
from session_summarizer.infrastructure.interfaces import SummarizationEngine

logger = setup_logging()


class BasicEngine(SummarizationEngine):
    """Summarizes by sentence scoring and keyword frequency. Always available."""

    tier = EngineTier.BASIC

    def __init__(
        self,
        settings: EngineSettings | None = None,
        max_summary_words: int = 150,
        max_period_words: int = 200,
    ):
        self._settings = settings or EngineSettings.defaults_for(self.tier)
        self._max_summary_words = max_summary_words
        self._max_period_words = max_period_words

    async def is_available(self) -> bool:
        return True

    async def summarize(
        self, transcript: Transcript, language: str | None
    ) -> AsyncIterator[ProgressState | SummaryResult]:
        yield ProgressState(phase="Reading transcript", fraction=0.1)
        text = prepare_transcript_text(transcript, self.tier, self._settings)

        yield ProgressState(phase="Scoring sentences", fraction=0.4)
        summary = extractive_summary(text, language, max_words=self._max_summary_words)
        if summary == EMPTY_SUMMARY:
            # Too few full sentences to score; keep the raw text instead.
            summary = text.strip()

        yield ProgressState(phase="Extracting topics", fraction=0.8)
        topics = extract_keywords(text, language, limit=5)

        logger.info(
            "Basic summary generated",
            extra={
                "transcript_id": transcript.id,
                "sentence_count": len(split_sentences(text)),
                "topic_count": len(topics),
            },
        )
        yield SummaryResult(
            summary=summary,
            title=topics[0].capitalize() if topics else None,
            topics=topics,
            word_count=transcript.word_count,
            language=language,
            tier=self.tier,
            source_transcript_id=transcript.id,
        )

    async def summarize_period(
        self,
        period_type: PeriodType,
        entries: list[SessionCacheEntry],
        period_start: datetime,
        period_end: datetime,
    ) -> PeriodSummary:
        if not entries:
            raise SummarizationError(self.tier, "no session summaries to combine")

        summaries = [entry.summary for entry in entries]
        combined = merge_summaries([summary.summary for summary in summaries])
        languages = rank_by_frequency([e.transcript.language or "" for e in entries], limit=1)
        summary_text = extractive_summary(
            combined,
            languages[0] if languages else None,
            max_words=self._max_period_words,
        )
        if summary_text == EMPTY_SUMMARY:
            summary_text = combined or EMPTY_SUMMARY

        sentiments = [s.sentiment for s in summaries if s.sentiment is not None]
        durations = [e.transcript.duration_seconds or 0.0 for e in entries]

        logger.info(
            "Basic period summary generated",
            extra={"period_type": period_type.value, "session_count": len(entries)},
        )
        return PeriodSummary(
            period_type=period_type,
            period_start=period_start,
            period_end=period_end,
            summary=summary_text,
            topics=rank_by_frequency([t for s in summaries for t in s.topics], limit=10),
            people=rank_by_frequency([p for s in summaries for p in s.people], limit=15),
            sentiment=sum(sentiments) / len(sentiments) if sentiments else None,
            session_ids=[entry.session_id for entry in entries],
            total_duration_seconds=sum(durations),
            total_word_count=sum(s.word_count for s in summaries),
            tier=self.tier,
        )
