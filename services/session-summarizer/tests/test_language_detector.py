import pytest

from session_summarizer.domain.language_detector import UNDETERMINED, LanguageDetector


@pytest.fixture
def detector():
    return LanguageDetector()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I think that we should go to the park with the kids after lunch.", "en"),
        ("Creo que es una buena idea ir al parque con los niños y la familia.", "es"),
        ("Je pense que nous allons au parc avec les enfants et la famille.", "fr"),
        ("Ich glaube, dass wir mit den Kindern in den Park gehen und nicht zu Hause sind.", "de"),
    ],
)
def test_detects_dominant_language(detector, text, expected):
    assert detector.detect_language(text) == expected


def test_hypotheses_are_valid_confidences(detector):
    hypotheses = detector.language_hypotheses(
        "I think that we should go to the park with the kids after lunch."
    )

    assert 1 <= len(hypotheses) <= 3
    assert all(0.0 <= confidence <= 1.0 for confidence in hypotheses.values())


def test_detected_language_has_maximal_confidence(detector):
    text = "We went to the mercado and compramos pan con la familia."

    hypotheses = detector.language_hypotheses(text, maximum=10)
    detected = detector.detect_language(text)

    assert detected in hypotheses
    assert hypotheses[detected] == max(hypotheses.values())


@pytest.mark.parametrize("text", ["", "   \n\t "])
def test_empty_text(detector, text):
    assert detector.detect_language(text) is None
    assert detector.language_hypotheses(text) == {}


def test_text_without_known_words_is_undetermined(detector):
    assert detector.language_hypotheses("xyzzy plugh 12345") == {UNDETERMINED: 1.0}
    assert detector.detect_language("xyzzy plugh 12345") is None


def test_ties_resolve_to_smallest_code(detector):
    # "the" only counts for English, "und" only for German.
    hypotheses = detector.language_hypotheses("the und", maximum=10)

    assert hypotheses == {"de": 0.5, "en": 0.5}
    assert detector.detect_language("the und") == "de"


def test_is_deterministic(detector):
    text = "Nous avons parlé de la semaine et des projets pour les vacances."

    assert detector.language_hypotheses(text) == detector.language_hypotheses(text)


def test_maximum_limits_hypotheses(detector):
    text = "the la de in is"

    assert len(detector.language_hypotheses(text, maximum=1)) == 1


def test_display_names(detector):
    assert LanguageDetector.display_name("en") == "English"
    assert LanguageDetector.display_name("xx") == "XX"
    assert detector.supported_languages() == sorted(detector.supported_languages())
    assert "en" in detector.supported_languages()
