"""Dominant-language detection from transcript text."""

import re

from session_summarizer.domain.stopwords import STOPWORDS

UNDETERMINED = "und"

_WORD_PATTERN = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)?")

_DISPLAY_NAMES = {
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "nl": "Dutch",
    "pt": "Portuguese",
}


class LanguageDetector:
    """
    Estimates the dominant language of a text from stop-word frequencies.

    Each supported language scores one point per token found in its
    stop-word profile. Confidences are each language's share of all hits.
    Ties are broken by the lexicographically smallest language code, so
    results are deterministic for identical input.
    """

    def __init__(self, profiles: dict[str, frozenset[str]] | None = None):
        self._profiles = profiles or STOPWORDS

    @staticmethod
    def display_name(code: str) -> str:
        """Returns a human-readable name for a language code."""
        return _DISPLAY_NAMES.get(code, code.upper())

    def supported_languages(self) -> list[str]:
        """Returns the language codes this detector can recognize."""
        return sorted(self._profiles)

    def detect_language(self, text: str) -> str | None:
        """
        Detects the dominant language in text.

        Args:
            text: Text to analyze.

        Returns:
            A language code such as "en", or None when the text is empty or
            no language could be determined.
        """
        ranked = self._rank(text)
        if not ranked:
            return None
        code, _ = ranked[0]
        return None if code == UNDETERMINED else code

    def language_hypotheses(self, text: str, maximum: int = 3) -> dict[str, float]:
        """
        Scores candidate languages for text.

        Args:
            text: Text to analyze.
            maximum: Largest number of hypotheses to return.

        Returns:
            Mapping of language code to confidence in [0.0, 1.0], highest
            first. Empty for empty text; ``{"und": 1.0}`` when the text has
            no recognizable words.
        """
        return dict(self._rank(text)[: max(1, maximum)])

    def _rank(self, text: str) -> list[tuple[str, float]]:
        if not text or not text.strip():
            return []

        tokens = [token.lower() for token in _WORD_PATTERN.findall(text)]
        hits = {
            code: sum(1 for token in tokens if token in words)
            for code, words in self._profiles.items()
        }
        total = sum(hits.values())
        if total == 0:
            return [(UNDETERMINED, 1.0)]

        scored = [(code, count / total) for code, count in hits.items() if count]
        return sorted(scored, key=lambda item: (-item[1], item[0]))
