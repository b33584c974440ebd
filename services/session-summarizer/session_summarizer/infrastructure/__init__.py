from session_summarizer.infrastructure.apple_engine import AppleEngine
from session_summarizer.infrastructure.assemblyai_recognizer import AssemblyAIRecognizer
from session_summarizer.infrastructure.basic_engine import BasicEngine
from session_summarizer.infrastructure.external_engine import ExternalEngine
from session_summarizer.infrastructure.local_engine import LocalEngine
from session_summarizer.infrastructure.memory_cache import InMemoryCacheService
from session_summarizer.infrastructure.redis_cache import RedisCacheService
from session_summarizer.infrastructure.sql_session_store import SqlSessionStore

__all__ = [
    "AppleEngine",
    "AssemblyAIRecognizer",
    "BasicEngine",
    "ExternalEngine",
    "InMemoryCacheService",
    "LocalEngine",
    "RedisCacheService",
    "SqlSessionStore",
]
