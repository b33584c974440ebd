"""AssemblyAI implementation of the RecognitionBackend interface."""

import asyncio
from collections.abc import AsyncIterator

import assemblyai as aai
from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    AudioResource,
    RecognitionUpdate,
    TranscriptSegment,
)
from session_summarizer.exceptions import RecognitionFailedError, RecognizerSetupError
from session_summarizer.infrastructure.interfaces import RecognitionBackend

logger = setup_logging()

_QUEUED_FRACTION = 0.1
_MAX_PARTIAL_FRACTION = 0.9


class AssemblyAIRecognizer(RecognitionBackend):
    """
    Recognizes speech with AssemblyAI.

    The file is submitted once and the transcript is polled until it
    completes; each poll is a suspension point, so a cancelled run stops
    polling promptly.
    """

    def __init__(
        self,
        transcriber: aai.Transcriber,
        api_key: str,
        poll_interval_seconds: float = 3.0,
    ):
        self._transcriber = transcriber
        self._api_key = api_key
        self._poll_interval_seconds = poll_interval_seconds

    async def is_authorized(self) -> bool:
        return bool(self._api_key)

    async def is_available(self) -> bool:
        return self._transcriber is not None

    async def recognize(self, audio: AudioResource) -> AsyncIterator[RecognitionUpdate]:
        try:
            submitted = await asyncio.to_thread(self._transcriber.submit, str(audio.path))
        except Exception as e:
            logger.exception("AssemblyAI submission failed", extra={"audio_file": audio.name})
            raise RecognizerSetupError(str(e) or type(e).__name__, cause=e) from e

        transcript_id = submitted.id
        logger.info(
            "Audio submitted for recognition",
            extra={"audio_file": audio.name, "transcript_id": transcript_id},
        )
        fraction = _QUEUED_FRACTION
        yield RecognitionUpdate(fraction=fraction)

        while True:
            await asyncio.sleep(self._poll_interval_seconds)
            try:
                transcript = await asyncio.to_thread(aai.Transcript.get_by_id, transcript_id)
            except Exception as e:
                logger.exception(
                    "AssemblyAI polling failed", extra={"transcript_id": transcript_id}
                )
                raise RecognitionFailedError(str(e) or type(e).__name__, cause=e) from e

            if transcript.status == aai.TranscriptStatus.error:
                raise RecognitionFailedError(transcript.error or "unknown AssemblyAI error")

            if transcript.status == aai.TranscriptStatus.completed:
                yield RecognitionUpdate(
                    fraction=1.0,
                    text=transcript.text or "",
                    segments=_segments(transcript),
                    is_final=True,
                )
                return

            if transcript.status == aai.TranscriptStatus.processing:
                fraction = min(_MAX_PARTIAL_FRACTION, fraction + 0.1)
            yield RecognitionUpdate(fraction=fraction)


def _segments(transcript: aai.Transcript) -> list[TranscriptSegment]:
    """Converts speaker utterances (millisecond offsets) to segments."""
    return [
        TranscriptSegment(
            start_time=u.start / 1000,
            end_time=u.end / 1000,
            text=u.text,
            confidence=u.confidence,
            speaker=u.speaker,
        )
        for u in transcript.utterances or []
    ]
