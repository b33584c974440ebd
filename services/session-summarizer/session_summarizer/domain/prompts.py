"""Session prompt and model response parsing shared by the LLM tiers."""

import json
import re

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from session_summarizer.domain.extractive import truncate_words
from session_summarizer.domain.language_detector import LanguageDetector
from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    SummaryResult,
    Transcript,
)
from session_summarizer.exceptions import SummarizationError

SYSTEM_INSTRUCTION = (
    "You are a private journaling assistant. You summarize faithfully and never "
    'invent facts. If something is unclear, write "unclear". No generic '
    "motivational fluff."
)

SESSION_SCHEMA = """{
  "title": "string - short descriptive title",
  "summary": "string - 2-3 sentence summary",
  "key_moments": ["string array of important moments"],
  "topics": ["string array of main topics"],
  "people": ["string array of mentioned people"],
  "sentiment": "number from -1.0 (negative) to 1.0 (positive)"
}"""

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMSummary(BaseModel):
    """Structured summary returned by a language model."""

    title: str | None = None
    summary: str = Field(
        validation_alias=AliasChoices("summary", "session_summary", "text")
    )
    key_moments: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    sentiment: float | None = None

    @field_validator("sentiment")
    @classmethod
    def _clamp_sentiment(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return max(-1.0, min(1.0, value))

    def to_result(
        self, tier: EngineTier, transcript: Transcript, language: str | None
    ) -> SummaryResult:
        return SummaryResult(
            summary=self.summary,
            title=self.title,
            topics=self.topics,
            key_moments=self.key_moments,
            people=self.people,
            sentiment=self.sentiment,
            word_count=transcript.word_count,
            language=language,
            tier=tier,
            source_transcript_id=transcript.id,
        )


def build_session_prompt(transcript_text: str, transcript: Transcript, language: str | None) -> str:
    """Builds the session summary prompt for a (possibly truncated) transcript."""
    duration = int(transcript.duration_seconds or 0)
    language_line = ""
    if language:
        language_line = (
            f"The transcript is in {LanguageDetector.display_name(language)}. "
            "Write the summary in the same language.\n"
        )
    return (
        f"Summarize this recording session (duration: {duration}s, "
        f"words: {transcript.word_count}).\n"
        f"{language_line}"
        "Return ONLY a JSON object with these exact field names:\n"
        f"{SESSION_SCHEMA}\n\n"
        f"Transcript:\n{transcript_text}"
    )


def parse_summary_response(content: str) -> LLMSummary:
    """
    Parses a model response into an LLMSummary.

    Accepts bare JSON, JSON inside a fenced code block, and common field
    name variations. Anything that is not a JSON object with a summary is
    treated as a plain-text summary.
    """
    text = content.strip()
    fenced = _FENCED_JSON.search(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return LLMSummary(summary=content.strip())

    if not isinstance(payload, dict):
        return LLMSummary(summary=content.strip())

    try:
        return LLMSummary.model_validate(payload)
    except ValidationError:
        return LLMSummary(summary=content.strip())


def prepare_transcript_text(
    transcript: Transcript, tier: EngineTier, settings: EngineSettings
) -> str:
    """
    Returns the transcript text an engine may send to its model.

    Raises:
        SummarizationError: If the transcript is shorter than the tier's
            minimum word count.
    """
    required = max(1, settings.minimum_words)
    if transcript.word_count < required:
        raise SummarizationError(
            tier,
            f"transcript has {transcript.word_count} words, "
            f"at least {required} required",
        )
    return truncate_words(transcript.text, settings.max_context_words)
