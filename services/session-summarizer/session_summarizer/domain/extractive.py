"""Extractive summarization helpers used by the basic tier."""

import re
from collections import Counter

from session_summarizer.domain.stopwords import STOPWORDS

EMPTY_SUMMARY = "No content available for summary."

AVERAGE_WORDS_PER_SENTENCE = 15

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_WORD_PATTERN = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)?")


def truncate_words(text: str, max_words: int) -> str:
    """Truncates text to at most ``max_words`` whitespace-separated words."""
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + "..."


def split_sentences(text: str) -> list[str]:
    """Splits text into sentences of more than three words."""
    sentences = (s.strip() for s in _SENTENCE_BOUNDARY.split(text))
    return [s for s in sentences if s and len(s.split()) > 3]


def extract_keywords(text: str, language: str | None = None, limit: int = 5) -> list[str]:
    """
    Returns the most frequent content words in text.

    Words of four letters or fewer and stop words are ignored. Ties keep
    first-occurrence order.
    """
    stopwords = STOPWORDS.get(language or "", frozenset()) | STOPWORDS["en"]
    words = [
        word.lower()
        for word in _WORD_PATTERN.findall(text)
        if len(word) > 3 and word.lower() not in stopwords
    ]
    return [word for word, _ in Counter(words).most_common(limit)]


def extractive_summary(text: str, language: str | None = None, max_words: int = 150) -> str:
    """
    Builds a summary from the highest scoring sentences of text.

    Sentences score for position (earlier is better), medium length
    (8 to 25 words) and the number of top keywords they contain. The selected
    sentences keep their original order.
    """
    sentences = split_sentences(text)
    if not sentences:
        return EMPTY_SUMMARY

    max_sentences = max(1, max_words // AVERAGE_WORDS_PER_SENTENCE)
    keywords = extract_keywords(text, language, limit=10)

    scored: list[tuple[float, int]] = []
    for index, sentence in enumerate(sentences):
        position_score = 1.0 - index / len(sentences)
        word_count = len(sentence.split())
        length_score = 1.0 if 8 <= word_count <= 25 else 0.5
        lowered = sentence.lower()
        keyword_hits = sum(1 for keyword in keywords if keyword in lowered)
        score = position_score * 0.3 + length_score * 0.2 + keyword_hits * 0.5
        scored.append((score, index))

    chosen = sorted(scored, key=lambda item: (-item[0], item[1]))[:max_sentences]
    summary = ". ".join(sentences[index] for _, index in sorted(chosen, key=lambda item: item[1]))
    if summary and summary[-1] not in ".!?":
        summary += "."
    return summary


def merge_summaries(summaries: list[str]) -> str:
    """
    Joins several summaries into one text without repeated sentences.

    Any trailing "Key themes:" section is dropped first so themes from an
    earlier roll-up are not counted twice.
    """
    seen: set[str] = set()
    merged: list[str] = []
    for summary in summaries:
        cut = summary.lower().find("key themes:")
        if cut != -1:
            summary = summary[:cut]
        for sentence in _SENTENCE_BOUNDARY.split(summary):
            sentence = sentence.strip()
            normalized = sentence.lower()
            if sentence and normalized not in seen:
                seen.add(normalized)
                merged.append(sentence)
    return ". ".join(merged) + "." if merged else ""


def rank_by_frequency(items: list[str], limit: int) -> list[str]:
    """
    Returns the most frequent items, compared case-insensitively.

    Each item keeps the spelling it first appeared with; ties keep
    first-occurrence order.
    """
    counts: Counter[str] = Counter()
    spelling: dict[str, str] = {}
    for item in items:
        item = item.strip()
        if not item:
            continue
        key = item.lower()
        spelling.setdefault(key, item)
        counts[key] += 1
    return [spelling[key] for key, _ in counts.most_common(limit)]
