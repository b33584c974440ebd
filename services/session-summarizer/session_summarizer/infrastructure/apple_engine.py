"""Summarization through the platform's built-in foundation model."""

from collections.abc import AsyncIterator

from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    ProgressState,
    SummaryResult,
    Transcript,
)
from session_summarizer.domain.prompts import (
    SYSTEM_INSTRUCTION,
    build_session_prompt,
    parse_summary_response,
    prepare_transcript_text,
)
from session_summarizer.exceptions import SummarizationError
from session_summarizer.infrastructure.interfaces import PlatformModel, SummarizationEngine

logger = setup_logging()


class AppleEngine(SummarizationEngine):
    """Summarizes with a PlatformModel. Unavailable when none is installed."""

    tier = EngineTier.APPLE

    def __init__(self, model: PlatformModel | None, settings: EngineSettings | None = None):
        self._model = model
        self._settings = settings or EngineSettings.defaults_for(self.tier)

    async def is_available(self) -> bool:
        if self._model is None:
            return False
        return await self._model.is_available()

    async def summarize(
        self, transcript: Transcript, language: str | None
    ) -> AsyncIterator[ProgressState | SummaryResult]:
        if self._model is None:
            raise SummarizationError(self.tier, "no platform model is installed")

        text = prepare_transcript_text(transcript, self.tier, self._settings)
        yield ProgressState(phase="Preparing Apple Intelligence request", fraction=0.1)

        yield ProgressState(phase="Apple Intelligence is writing a summary", fraction=0.3)
        try:
            content = await self._model.generate(
                build_session_prompt(text, transcript, language), SYSTEM_INSTRUCTION
            )
        except SummarizationError:
            raise
        except Exception as e:
            logger.exception("Platform model generation failed")
            raise SummarizationError(self.tier, str(e) or type(e).__name__, cause=e) from e

        yield ProgressState(phase="Parsing response", fraction=0.9)
        parsed = parse_summary_response(content)
        if not parsed.summary.strip():
            raise SummarizationError(self.tier, "model returned an empty summary")

        yield parsed.to_result(self.tier, transcript, language)
