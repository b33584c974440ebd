"""Request and response models for the session-summarizer API."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from session_summarizer.domain.models import (
    EngineTier,
    PeriodType,
    SessionCacheEntry,
    SummaryResult,
)


class SummaryRequest(BaseModel):
    """Body of a summary generation request. Exactly one source is required."""

    audio_path: str | None = None
    transcript_text: str | None = None
    tier: EngineTier | None = None
    force: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> "SummaryRequest":
        if (self.audio_path is None) == (self.transcript_text is None):
            raise ValueError("Provide exactly one of audio_path or transcript_text")
        return self


class SessionSummaryResponse(BaseModel):
    """Stored transcript and summary for one session."""

    session_id: str
    tier: EngineTier
    tier_display_name: str
    language: str | None
    transcript_text: str
    summary: SummaryResult
    generated_at: datetime

    @classmethod
    def from_entry(cls, entry: SessionCacheEntry) -> "SessionSummaryResponse":
        return cls(
            session_id=entry.session_id,
            tier=entry.tier,
            tier_display_name=entry.tier.display_name,
            language=entry.transcript.language,
            transcript_text=entry.transcript.text,
            summary=entry.summary,
            generated_at=entry.generated_at,
        )


class EngineStatus(BaseModel):
    """Availability of one summarization tier."""

    tier: EngineTier
    display_name: str
    description: str
    available: bool
    permitted: bool
    requires_internet: bool
    privacy_preserving: bool


class CancelResponse(BaseModel):
    """Response returned after a cancellation request."""

    session_id: str
    cancelled: bool


class PeriodSummaryRequest(BaseModel):
    """Body of a period roll-up request."""

    period_type: PeriodType
    period_start: datetime
    period_end: datetime
    session_ids: list[str] = Field(min_length=1)

    @model_validator(mode="after")
    def _ordered_period(self) -> "PeriodSummaryRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self
