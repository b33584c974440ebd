import asyncio

import pytest

from session_summarizer.domain.language_detector import LanguageDetector
from session_summarizer.domain.models import (
    AudioResource,
    EngineTier,
    ProgressState,
    RecognitionUpdate,
    SummaryResult,
    TranscriptSegment,
)
from session_summarizer.domain.pipeline import SummaryPipeline
from session_summarizer.domain.session_cache import SessionResultCache
from session_summarizer.domain.tier_selector import TierPolicy, TierSelector
from session_summarizer.domain.transcription_service import TranscriptionService
from session_summarizer.infrastructure.basic_engine import BasicEngine
from session_summarizer.infrastructure.interfaces import (
    PlatformModel,
    RecognitionBackend,
    SummarizationEngine,
)
from session_summarizer.infrastructure.memory_cache import InMemoryCacheService

ENGLISH_SEGMENTS = [
    TranscriptSegment(
        start_time=0.0,
        end_time=4.5,
        text="I went to the market with my sister this morning and we bought fresh bread.",
        confidence=0.94,
    ),
    TranscriptSegment(
        start_time=4.5,
        end_time=10.0,
        text="After that we walked home through the park and talked about our plans for the summer.",
        confidence=0.91,
    ),
]

ENGLISH_TEXT = " ".join(segment.text for segment in ENGLISH_SEGMENTS)


class FakeRecognizer(RecognitionBackend):
    def __init__(
        self,
        segments=None,
        authorized=True,
        available=True,
        delay=0.0,
        error=None,
        final=True,
    ):
        self.segments = list(ENGLISH_SEGMENTS if segments is None else segments)
        self.authorized = authorized
        self.available = available
        self.delay = delay
        self.error = error
        self.final = final
        self.calls = 0
        self.closed = False

    async def is_authorized(self) -> bool:
        return self.authorized

    async def is_available(self) -> bool:
        return self.available

    async def recognize(self, audio):
        self.calls += 1
        try:
            yield RecognitionUpdate(fraction=0.5, text=self.segments[0].text if self.segments else "")
            await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            if self.final:
                yield RecognitionUpdate(fraction=1.0, segments=self.segments, is_final=True)
        finally:
            self.closed = True


class FakeEngine(SummarizationEngine):
    def __init__(self, tier: EngineTier, available=True, error=None, delay=0.0):
        self.tier = tier
        self.available = available
        self.error = error
        self.delay = delay
        self.calls = 0

    async def is_available(self) -> bool:
        return self.available

    async def summarize(self, transcript, language):
        self.calls += 1
        yield ProgressState(phase=f"{self.tier.display_name} working", fraction=0.5)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        yield SummaryResult(
            summary=f"{self.tier.display_name} summary",
            word_count=transcript.word_count,
            language=language,
            tier=self.tier,
            source_transcript_id=transcript.id,
        )


class FakePlatformModel(PlatformModel):
    def __init__(self, response: str, available=True):
        self.response = response
        self.available = available
        self.prompts = []

    async def is_available(self) -> bool:
        return self.available

    async def generate(self, prompt: str, instructions: str) -> str:
        self.prompts.append((prompt, instructions))
        return self.response


@pytest.fixture
def audio_file(tmp_path) -> AudioResource:
    path = tmp_path / "abc123.wav"
    path.write_bytes(b"RIFF\x00\x00\x00\x00WAVEfmt ")
    return AudioResource(locator=str(path), duration_seconds=10.0)


@pytest.fixture
def build_pipeline():
    """Builds a pipeline around fakes; returns (pipeline, recognizer, cache)."""

    def _build(recognizer=None, engines=None, policy=None, engine_settings=None, store=None):
        recognizer = recognizer or FakeRecognizer()
        registered = {EngineTier.BASIC: BasicEngine()}
        registered.update(engines or {})
        cache = SessionResultCache(InMemoryCacheService(), store)
        pipeline = SummaryPipeline(
            transcription=TranscriptionService(recognizer),
            detector=LanguageDetector(),
            selector=TierSelector(registered),
            cache=cache,
            policy=policy or TierPolicy(),
            engine_settings=engine_settings,
        )
        return pipeline, recognizer, cache

    return _build
