"""Infrastructure interface exports."""

from lifewrapped_common.infrastructure.interfaces import CacheService

from session_summarizer.infrastructure.interfaces.platform_model import PlatformModel
from session_summarizer.infrastructure.interfaces.recognition_backend import (
    RecognitionBackend,
)
from session_summarizer.infrastructure.interfaces.session_store import SessionStore
from session_summarizer.infrastructure.interfaces.summarization_engine import (
    SummarizationEngine,
)

__all__ = [
    "CacheService",
    "PlatformModel",
    "RecognitionBackend",
    "SessionStore",
    "SummarizationEngine",
]
