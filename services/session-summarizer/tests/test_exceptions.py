from session_summarizer.domain.models import EngineTier, PipelineState
from session_summarizer.exceptions import (
    AudioFileNotFoundError,
    CacheServiceError,
    InvalidAudioFormatError,
    LifeWrappedError,
    NotAuthorizedError,
    NotAvailableError,
    PipelineCancelledError,
    RecognitionFailedError,
    RecognizerSetupError,
    StorageError,
    SummarizationError,
)

ALL_ERRORS = [
    NotAuthorizedError(),
    NotAvailableError(),
    RecognizerSetupError("no model for locale"),
    RecognitionFailedError("audio stream ended"),
    AudioFileNotFoundError("/recordings/2025/abc123.m4a"),
    InvalidAudioFormatError("unsupported file type '.txt'"),
    PipelineCancelledError(),
    SummarizationError(EngineTier.LOCAL, "model not loaded"),
    StorageError("disk full"),
]


def test_every_error_kind_has_a_distinct_description():
    descriptions = [error.description for error in ALL_ERRORS]

    assert all(descriptions)
    assert len(set(descriptions)) == len(ALL_ERRORS)
    assert all(isinstance(error, LifeWrappedError) for error in ALL_ERRORS)


def test_audio_file_not_found_mentions_file_name():
    error = AudioFileNotFoundError("/recordings/2025/abc123.m4a")

    assert "abc123.m4a" in error.description
    assert error.locator == "/recordings/2025/abc123.m4a"


def test_summarization_error_names_the_tier():
    error = SummarizationError(EngineTier.EXTERNAL, "HTTP 401")

    assert str(error) == "External AI summarization failed: HTTP 401"
    assert error.tier is EngineTier.EXTERNAL


def test_cause_is_kept():
    cause = OSError("connection reset")

    error = CacheServiceError("session-summary:abc123", "get", cause=cause)

    assert error.cause is cause
    assert isinstance(error, StorageError)
    assert "session-summary:abc123" in str(error)


def test_cancelled_error_carries_stage():
    error = PipelineCancelledError(PipelineState.SUMMARIZING)

    assert error.stage is PipelineState.SUMMARIZING
    assert error.description == "Summary generation was cancelled"
