"""Domain models for the session summary pipeline."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AudioResource(BaseModel, frozen=True):
    """Locator for recorded or imported audio. Borrowed read-only."""

    locator: str
    duration_seconds: float | None = None

    @property
    def path(self) -> Path:
        return Path(self.locator)

    @property
    def name(self) -> str:
        return self.path.name


class TranscriptSegment(BaseModel, frozen=True):
    """A timed piece of recognized speech."""

    start_time: float = Field(ge=0.0)
    end_time: float = Field(ge=0.0)
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    speaker: str | None = None


class Transcript(BaseModel, frozen=True):
    """Recognized text for one audio resource."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str
    segments: list[TranscriptSegment] = Field(default_factory=list)
    language: str | None = None
    duration_seconds: float | None = None

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    def with_language(self, language: str | None) -> "Transcript":
        """Returns a copy annotated with the detected language."""
        return self.model_copy(update={"language": language})


class EngineTier(str, Enum):
    """
    Summarization strategies, differing in cost, privacy and quality.

    Declaration order follows capability, but selection is driven by
    ``TierPolicy.preference`` and never walks this order.
    """

    BASIC = "basic"
    APPLE = "apple"
    LOCAL = "local"
    EXTERNAL = "external"

    @property
    def display_name(self) -> str:
        return _TIER_DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _TIER_DESCRIPTIONS[self]

    @property
    def requires_internet(self) -> bool:
        return self is EngineTier.EXTERNAL

    @property
    def is_privacy_preserving(self) -> bool:
        return self is not EngineTier.EXTERNAL

    @property
    def capability_rank(self) -> int:
        return list(EngineTier).index(self)


_TIER_DISPLAY_NAMES = {
    EngineTier.BASIC: "Basic",
    EngineTier.APPLE: "Apple Intelligence",
    EngineTier.LOCAL: "Local AI",
    EngineTier.EXTERNAL: "External AI",
}

_TIER_DESCRIPTIONS = {
    EngineTier.BASIC: (
        "Fast on-device extractive summarization using sentence scoring "
        "and keyword analysis"
    ),
    EngineTier.APPLE: (
        "Advanced AI using the platform's on-device foundation models"
    ),
    EngineTier.LOCAL: (
        "High-quality AI using a local model. Processing happens entirely "
        "on your device"
    ),
    EngineTier.EXTERNAL: (
        "Premium AI using external services. Requires an API key and an "
        "internet connection"
    ),
}


class ExternalProvider(str, Enum):
    """Hosted model providers the external tier can call."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    @property
    def display_name(self) -> str:
        return {"openai": "OpenAI", "anthropic": "Anthropic", "gemini": "Google Gemini"}[
            self.value
        ]

    @property
    def default_model(self) -> str:
        return {
            "openai": "gpt-4.1",
            "anthropic": "claude-sonnet-4-5",
            "gemini": "gemini-2.5-flash",
        }[self.value]


class EngineSettings(BaseModel, frozen=True):
    """Per-tier limits applied to a summarization run."""

    minimum_words: int = Field(default=1, ge=0)
    max_context_words: int = Field(default=4000, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def defaults_for(cls, tier: EngineTier) -> "EngineSettings":
        return _DEFAULT_ENGINE_SETTINGS[tier]


_DEFAULT_ENGINE_SETTINGS = {
    EngineTier.BASIC: EngineSettings(max_context_words=10000, timeout_seconds=5.0),
    EngineTier.APPLE: EngineSettings(max_context_words=8000, timeout_seconds=30.0),
    EngineTier.LOCAL: EngineSettings(max_context_words=4000, timeout_seconds=60.0),
    EngineTier.EXTERNAL: EngineSettings(
        max_context_words=16000, timeout_seconds=30.0
    ),
}


class ProgressState(BaseModel, frozen=True):
    """A phase label and normalized completion fraction."""

    phase: str
    fraction: float = Field(ge=0.0, le=1.0)


class SummaryResult(BaseModel, frozen=True):
    """Structured summary produced by one engine tier."""

    summary: str
    title: str | None = None
    topics: list[str] = Field(default_factory=list)
    key_moments: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    sentiment: float | None = Field(default=None, ge=-1.0, le=1.0)
    word_count: int = 0
    language: str | None = None
    tier: EngineTier
    generated_at: datetime = Field(default_factory=_utcnow)
    source_transcript_id: str


class SessionCacheEntry(BaseModel, frozen=True):
    """The cached outcome of one session's pipeline run."""

    session_id: str
    transcript: Transcript
    summary: SummaryResult
    tier: EngineTier
    generated_at: datetime = Field(default_factory=_utcnow)


class PeriodType(str, Enum):
    """Time buckets that session summaries can be rolled up into."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class PeriodSummary(BaseModel, frozen=True):
    """Roll-up of the cached session summaries that fall in one period."""

    period_type: PeriodType
    period_start: datetime
    period_end: datetime
    summary: str
    topics: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    sentiment: float | None = Field(default=None, ge=-1.0, le=1.0)
    session_ids: list[str]
    total_duration_seconds: float = 0.0
    total_word_count: int = 0
    tier: EngineTier
    generated_at: datetime = Field(default_factory=_utcnow)

    @computed_field
    @property
    def session_count(self) -> int:
        return len(self.session_ids)


class PipelineState(str, Enum):
    """States of a single summary pipeline run."""

    IDLE = "idle"
    CHECKING_CACHE = "checking_cache"
    SELECTING_TIER = "selecting_tier"
    TRANSCRIBING = "transcribing"
    DETECTING_LANGUAGE = "detecting_language"
    SUMMARIZING = "summarizing"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = {
    PipelineState.COMPLETED,
    PipelineState.FAILED,
    PipelineState.CANCELLED,
}


class ProgressEvent(BaseModel, frozen=True):
    """Progress update emitted while a run is in flight."""

    kind: Literal["progress"] = "progress"
    state: PipelineState
    progress: ProgressState
    tier: EngineTier | None = None


class CompletedEvent(BaseModel, frozen=True):
    """Terminal event for a successful run."""

    kind: Literal["completed"] = "completed"
    entry: SessionCacheEntry
    from_cache: bool = False


class FailedEvent(BaseModel, frozen=True):
    """Terminal event for a failed run."""

    kind: Literal["failed"] = "failed"
    stage: PipelineState
    error_type: str
    message: str


class CancelledEvent(BaseModel, frozen=True):
    """Terminal event for a cancelled run."""

    kind: Literal["cancelled"] = "cancelled"
    stage: PipelineState


PipelineEvent = ProgressEvent | CompletedEvent | FailedEvent | CancelledEvent


class RecognitionUpdate(BaseModel, frozen=True):
    """One item of a recognition backend's output stream."""

    fraction: float = Field(default=0.0, ge=0.0, le=1.0)
    text: str = ""
    segments: list[TranscriptSegment] = Field(default_factory=list)
    is_final: bool = False
