"""Domain layer exports."""

from session_summarizer.domain.language_detector import LanguageDetector
from session_summarizer.domain.models import (
    AudioResource,
    CancelledEvent,
    CompletedEvent,
    EngineSettings,
    EngineTier,
    ExternalProvider,
    FailedEvent,
    PeriodSummary,
    PeriodType,
    PipelineEvent,
    PipelineState,
    ProgressEvent,
    ProgressState,
    RecognitionUpdate,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
    TranscriptSegment,
)

__all__ = [
    "AudioResource",
    "CancelledEvent",
    "CompletedEvent",
    "EngineSettings",
    "EngineTier",
    "ExternalProvider",
    "FailedEvent",
    "PeriodSummary",
    "PeriodType",
    "PipelineEvent",
    "PipelineState",
    "ProgressEvent",
    "ProgressState",
    "RecognitionUpdate",
    "SessionCacheEntry",
    "SummaryResult",
    "Transcript",
    "TranscriptSegment",
    "LanguageDetector",
]
