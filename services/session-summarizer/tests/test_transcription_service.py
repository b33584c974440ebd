import asyncio

import pytest
from conftest import ENGLISH_SEGMENTS, ENGLISH_TEXT, FakeRecognizer

from session_summarizer.domain.models import AudioResource, RecognitionUpdate
from session_summarizer.domain.transcription_service import TranscriptionService
from session_summarizer.exceptions import (
    AudioFileNotFoundError,
    InvalidAudioFormatError,
    NotAuthorizedError,
    NotAvailableError,
    PipelineCancelledError,
    RecognitionFailedError,
    RecognizerSetupError,
)


def test_transcribes_segments(audio_file):
    recognizer = FakeRecognizer()
    progress = []

    transcript = asyncio.run(
        TranscriptionService(recognizer).transcribe(audio_file, on_progress=progress.append)
    )

    assert transcript.text == ENGLISH_TEXT
    assert transcript.segments == ENGLISH_SEGMENTS
    assert transcript.duration_seconds == 10.0
    assert transcript.language is None
    assert [p.fraction for p in progress] == [0.5]
    assert progress[0].phase.startswith("Transcribing audio")
    assert recognizer.closed


def test_falls_back_to_final_text_without_segments(audio_file):
    class TextOnlyRecognizer(FakeRecognizer):
        async def recognize(self, audio):
            yield RecognitionUpdate(fraction=1.0, text="  just a note to self  ", is_final=True)

    transcript = asyncio.run(TranscriptionService(TextOnlyRecognizer()).transcribe(audio_file))

    assert transcript.text == "just a note to self"
    assert transcript.segments == []


def test_repeated_calls_are_equivalent(audio_file):
    service = TranscriptionService(FakeRecognizer())

    first = asyncio.run(service.transcribe(audio_file))
    second = asyncio.run(service.transcribe(audio_file))

    assert first.id != second.id
    assert first.model_dump(exclude={"id"}) == second.model_dump(exclude={"id"})
    assert audio_file.duration_seconds == 10.0


def test_missing_file(tmp_path):
    recognizer = FakeRecognizer()
    audio = AudioResource(locator=str(tmp_path / "missing.m4a"))

    with pytest.raises(AudioFileNotFoundError) as exc_info:
        asyncio.run(TranscriptionService(recognizer).transcribe(audio))

    assert "missing.m4a" in str(exc_info.value)
    assert recognizer.calls == 0


def test_unsupported_extension(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not audio")

    with pytest.raises(InvalidAudioFormatError):
        asyncio.run(TranscriptionService(FakeRecognizer()).transcribe(AudioResource(locator=str(path))))


def test_empty_file(tmp_path):
    path = tmp_path / "empty.wav"
    path.touch()

    with pytest.raises(InvalidAudioFormatError) as exc_info:
        asyncio.run(TranscriptionService(FakeRecognizer()).transcribe(AudioResource(locator=str(path))))

    assert "empty" in str(exc_info.value)


def test_not_authorized(audio_file):
    recognizer = FakeRecognizer(authorized=False)

    with pytest.raises(NotAuthorizedError):
        asyncio.run(TranscriptionService(recognizer).transcribe(audio_file))

    assert recognizer.calls == 0


def test_not_available(audio_file):
    with pytest.raises(NotAvailableError):
        asyncio.run(TranscriptionService(FakeRecognizer(available=False)).transcribe(audio_file))


def test_unexpected_backend_error_is_wrapped(audio_file):
    recognizer = FakeRecognizer(error=RuntimeError("decoder lost sync"))

    with pytest.raises(RecognitionFailedError) as exc_info:
        asyncio.run(TranscriptionService(recognizer).transcribe(audio_file))

    assert "decoder lost sync" in str(exc_info.value)
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert recognizer.closed


@pytest.mark.parametrize(
    "error", [RecognizerSetupError("no model"), PipelineCancelledError()]
)
def test_domain_errors_propagate(audio_file, error):
    with pytest.raises(type(error)):
        asyncio.run(TranscriptionService(FakeRecognizer(error=error)).transcribe(audio_file))


def test_stream_without_final_update_fails(audio_file):
    with pytest.raises(RecognitionFailedError):
        asyncio.run(TranscriptionService(FakeRecognizer(final=False)).transcribe(audio_file))
