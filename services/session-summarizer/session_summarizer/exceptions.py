"""Custom exceptions for the session-summarizer service."""

from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from session_summarizer.domain.models import EngineTier, PipelineState


class LifeWrappedError(Exception):
    """
    Base class for every error the summary pipeline surfaces.

    ``stage`` is filled in by the pipeline with the state it was in when the
    error was raised, so callers can tell which stage failed.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        self.stage: "PipelineState | None" = None
        super().__init__(message)

    @property
    def description(self) -> str:
        """Human-readable description of the error."""
        return str(self)


class NotAuthorizedError(LifeWrappedError):
    """Raised when speech recognition permission has not been granted."""

    def __init__(self, cause: Exception | None = None):
        super().__init__("Speech recognition is not authorized", cause=cause)


class NotAvailableError(LifeWrappedError):
    """Raised when no recognizer exists for the device or locale."""

    def __init__(self, cause: Exception | None = None):
        super().__init__(
            "Speech recognition is not available on this device", cause=cause
        )


class RecognizerSetupError(LifeWrappedError):
    """Raised when the recognition backend cannot be initialized."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Failed to set up speech recognizer: {reason}", cause=cause)


class RecognitionFailedError(LifeWrappedError):
    """Raised when recognition fails mid-run."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Recognition failed: {reason}", cause=cause)


class AudioFileNotFoundError(LifeWrappedError):
    """Raised when the audio locator does not point at a readable file."""

    def __init__(self, locator: str, cause: Exception | None = None):
        self.locator = locator
        super().__init__(
            f"Audio file not found: {PurePath(locator).name}", cause=cause
        )


class InvalidAudioFormatError(LifeWrappedError):
    """Raised when the audio file is empty or in an unsupported format."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Invalid audio format: {reason}", cause=cause)


class PipelineCancelledError(LifeWrappedError):
    """Raised when a run is cancelled before it completes."""

    def __init__(
        self, stage: "PipelineState | None" = None, cause: Exception | None = None
    ):
        super().__init__("Summary generation was cancelled", cause=cause)
        self.stage = stage


class SummarizationError(LifeWrappedError):
    """Raised when a summarization engine fails to produce a summary."""

    def __init__(
        self, tier: "EngineTier", reason: str, cause: Exception | None = None
    ):
        self.tier = tier
        self.reason = reason
        super().__init__(
            f"{tier.display_name} summarization failed: {reason}", cause=cause
        )


class StorageError(LifeWrappedError):
    """Raised when reading or writing persisted session results fails."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Storage operation failed: {reason}", cause=cause)


class CacheServiceError(StorageError):
    """Raised when cache operations fail."""

    def __init__(self, key: str, operation: str, cause: Exception | None = None):
        self.key = key
        self.operation = operation
        super().__init__(f"cache {operation} failed for key '{key}'", cause=cause)
