"""Core business logic for turning audio into transcripts."""

from collections.abc import Callable
from contextlib import aclosing

from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    AudioResource,
    ProgressState,
    RecognitionUpdate,
    Transcript,
)
from session_summarizer.exceptions import (
    AudioFileNotFoundError,
    InvalidAudioFormatError,
    LifeWrappedError,
    NotAuthorizedError,
    NotAvailableError,
    RecognitionFailedError,
)
from session_summarizer.infrastructure.interfaces.recognition_backend import (
    RecognitionBackend,
)

logger = setup_logging()

SUPPORTED_AUDIO_EXTENSIONS = frozenset(
    {".aac", ".caf", ".flac", ".m4a", ".mp3", ".mp4", ".ogg", ".wav", ".webm"}
)

ProgressCallback = Callable[[ProgressState], None]


class TranscriptionService:
    """Validates audio and drives a recognition backend to a Transcript."""

    def __init__(self, backend: RecognitionBackend):
        self._backend = backend

    async def transcribe(
        self, audio: AudioResource, on_progress: ProgressCallback | None = None
    ) -> Transcript:
        """
        Transcribes an audio resource.

        Args:
            audio: Audio to transcribe. Never modified.
            on_progress: Optional callback receiving partial progress.

        Returns:
            The final Transcript.

        Raises:
            AudioFileNotFoundError: If the audio file does not exist.
            InvalidAudioFormatError: If the file is empty or unsupported.
            NotAuthorizedError: If recognition permission was denied.
            NotAvailableError: If no recognizer is available.
            RecognizerSetupError: If the backend cannot start.
            RecognitionFailedError: If recognition fails mid-run.
        """
        self._validate(audio)

        if not await self._backend.is_authorized():
            raise NotAuthorizedError()
        if not await self._backend.is_available():
            raise NotAvailableError()

        logger.info("Transcription started", extra={"audio_file": audio.name})

        final: RecognitionUpdate | None = None
        try:
            async with aclosing(self._backend.recognize(audio)) as updates:
                async for update in updates:
                    if update.is_final:
                        final = update
                        break
                    if on_progress is not None:
                        on_progress(
                            ProgressState(
                                phase=_partial_phase(update), fraction=update.fraction
                            )
                        )
        except LifeWrappedError:
            raise
        except Exception as e:
            logger.exception(
                "Recognition backend failed", extra={"audio_file": audio.name}
            )
            raise RecognitionFailedError(str(e) or type(e).__name__, cause=e) from e

        if final is None:
            raise RecognitionFailedError("recognizer finished without a final result")

        transcript = self._build(final, audio)
        logger.info(
            "Transcription completed",
            extra={
                "audio_file": audio.name,
                "segment_count": len(transcript.segments),
                "word_count": transcript.word_count,
            },
        )
        return transcript

    def _validate(self, audio: AudioResource) -> None:
        """Checks the audio file exists and looks like supported audio."""
        path = audio.path
        if not path.is_file():
            raise AudioFileNotFoundError(audio.locator)
        if path.suffix.lower() not in SUPPORTED_AUDIO_EXTENSIONS:
            raise InvalidAudioFormatError(
                f"unsupported file type '{path.suffix or audio.name}'"
            )
        if path.stat().st_size == 0:
            raise InvalidAudioFormatError(f"'{audio.name}' is empty")

    def _build(self, final: RecognitionUpdate, audio: AudioResource) -> Transcript:
        """Builds the transcript from a final recognition update."""
        segments = list(final.segments)
        if segments:
            text = " ".join(s.text.strip() for s in segments if s.text.strip())
        else:
            text = final.text.strip()

        duration = audio.duration_seconds
        if duration is None and segments:
            duration = max(s.end_time for s in segments)

        return Transcript(text=text, segments=segments, duration_seconds=duration)


def _partial_phase(update: RecognitionUpdate) -> str:
    if update.text:
        return f"Transcribing audio: {_tail(update.text)}"
    return "Transcribing audio"


def _tail(text: str, words: int = 8) -> str:
    parts = text.split()
    if len(parts) <= words:
        return text.strip()
    return "..." + " ".join(parts[-words:])
