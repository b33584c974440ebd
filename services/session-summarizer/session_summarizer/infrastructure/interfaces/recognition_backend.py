"""Abstract interface for speech recognition backends."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from session_summarizer.domain.models import AudioResource, RecognitionUpdate


class RecognitionBackend(ABC):
    """Abstract base class for speech recognition backends."""

    @abstractmethod
    async def is_authorized(self) -> bool:
        """Returns whether the backend may be used (permission, credentials)."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Returns whether a recognizer exists for this device and locale."""

    @abstractmethod
    def recognize(self, audio: AudioResource) -> AsyncIterator[RecognitionUpdate]:
        """
        Recognizes speech in an audio resource.

        Args:
            audio: A validated, readable audio resource.

        Returns:
            An async stream of partial updates ending with one final update.

        Raises:
            RecognizerSetupError: If the backend cannot be initialized.
            RecognitionFailedError: If recognition fails mid-run.
        """
