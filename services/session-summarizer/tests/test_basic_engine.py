import asyncio

import pytest
from conftest import ENGLISH_TEXT

from session_summarizer.domain.extractive import (
    EMPTY_SUMMARY,
    extract_keywords,
    extractive_summary,
    split_sentences,
    truncate_words,
)
from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    ProgressState,
    SummaryResult,
    Transcript,
)
from session_summarizer.exceptions import SummarizationError
from session_summarizer.infrastructure.basic_engine import BasicEngine

LONG_TEXT = (
    "The garden project started in early spring with a small budget. "
    "We planted tomatoes, peppers and herbs along the southern fence. "
    "My neighbour helped build raised garden beds from reclaimed wood. "
    "Watering became a daily routine during the dry weeks of summer. "
    "By August the garden produced more tomatoes than we could eat. "
    "We gave baskets of tomatoes to friends and the local food bank."
)


async def _collect(engine, transcript, language="en"):
    return [item async for item in engine.summarize(transcript, language)]


def test_produces_summary_with_topics():
    transcript = Transcript(text=LONG_TEXT)

    items = asyncio.run(_collect(BasicEngine(), transcript))

    progress = [item for item in items if isinstance(item, ProgressState)]
    result = items[-1]
    assert isinstance(result, SummaryResult)
    assert result.tier is EngineTier.BASIC
    assert result.summary
    assert "garden" in result.topics
    assert "tomatoes" in result.topics
    assert result.word_count == transcript.word_count
    assert result.source_transcript_id == transcript.id
    assert result.language == "en"
    assert len({p.phase for p in progress}) == len(progress)
    assert [p.fraction for p in progress] == sorted(p.fraction for p in progress)


def test_is_always_available():
    assert asyncio.run(BasicEngine().is_available())


def test_rejects_transcripts_below_minimum_words():
    engine = BasicEngine(EngineSettings(minimum_words=50))

    with pytest.raises(SummarizationError) as exc_info:
        asyncio.run(_collect(engine, Transcript(text=ENGLISH_TEXT)))

    assert exc_info.value.tier is EngineTier.BASIC


def test_rejects_empty_transcript():
    with pytest.raises(SummarizationError):
        asyncio.run(_collect(BasicEngine(), Transcript(text="")))


def test_short_text_is_kept_as_summary():
    items = asyncio.run(_collect(BasicEngine(), Transcript(text="Call mom")))

    assert items[-1].summary == "Call mom"


def test_extractive_summary_keeps_sentence_order():
    summary = extractive_summary(LONG_TEXT, "en", max_words=30)
    sentences = split_sentences(LONG_TEXT)

    chosen = [s for s in sentences if s in summary]
    assert len(chosen) == 2
    assert sentences.index(chosen[0]) < sentences.index(chosen[1])
    assert summary.endswith(".")


def test_extractive_summary_without_sentences():
    assert extractive_summary("Hi there.", "en") == EMPTY_SUMMARY


def test_keywords_skip_stopwords_and_short_words():
    keywords = extract_keywords("The garden, the garden and the tomatoes with them.", "en")

    assert keywords == ["garden", "tomatoes"]


def test_truncate_words():
    assert truncate_words("one two three", 5) == "one two three"
    assert truncate_words("one two three four", 2) == "one two..."
