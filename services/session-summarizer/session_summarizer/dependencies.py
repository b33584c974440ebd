"""Dependency injection configuration for the session-summarizer service."""

from contextlib import contextmanager
from functools import lru_cache

import assemblyai as aai
import httpx
import redis.asyncio as redis
from google import genai
from lifewrapped_common.infrastructure.interfaces import CacheService
from lifewrapped_common.logging import setup_logging
from sqlmodel import Session, SQLModel, create_engine

from session_summarizer.config import AppConfig, load_config
from session_summarizer.domain.language_detector import LanguageDetector
from session_summarizer.domain.models import EngineTier, ExternalProvider
from session_summarizer.domain.pipeline import SummaryPipeline
from session_summarizer.domain.session_cache import SessionResultCache
from session_summarizer.domain.tier_selector import TierPolicy, TierSelector
from session_summarizer.domain.transcription_service import TranscriptionService
from session_summarizer.infrastructure import (
    AppleEngine,
    AssemblyAIRecognizer,
    BasicEngine,
    ExternalEngine,
    InMemoryCacheService,
    LocalEngine,
    RedisCacheService,
    SqlSessionStore,
)
from session_summarizer.infrastructure.interfaces import PlatformModel

logger = setup_logging()


def build_cache_service(config: AppConfig) -> CacheService:
    if config.cache_backend == "memory":
        return InMemoryCacheService()
    client = redis.Redis(
        host=config.redis.host,
        port=config.redis.port,
        decode_responses=True,
    )
    return RedisCacheService(client, config.redis.cache_ttl_seconds)


def build_session_store(config: AppConfig) -> SqlSessionStore:
    db_engine = create_engine(config.database.url)
    SQLModel.metadata.create_all(db_engine)
    logger.info("Database initialized", extra={"url": db_engine.url.render_as_string()})

    @contextmanager
    def _session_factory():
        """Creates a database session context manager."""
        with Session(db_engine) as session:
            yield session

    return SqlSessionStore(_session_factory)


def build_selector(config: AppConfig, platform_model: PlatformModel | None = None) -> TierSelector:
    """Registers one engine per tier from configuration."""
    settings = config.summarization.engine_settings
    local = config.local_model
    external = config.external_api

    gemini_client = None
    if external.provider is ExternalProvider.GEMINI and external.api_key:
        gemini_client = genai.Client(api_key=external.api_key)

    return TierSelector(
        {
            EngineTier.BASIC: BasicEngine(settings[EngineTier.BASIC]),
            EngineTier.APPLE: AppleEngine(platform_model, settings[EngineTier.APPLE]),
            EngineTier.LOCAL: LocalEngine(
                lambda: httpx.AsyncClient(base_url=local.base_url, timeout=httpx.Timeout(120.0)),
                model_name=local.model_name,
                enabled=local.enabled,
                max_tokens=local.max_tokens,
                temperature=local.temperature,
                settings=settings[EngineTier.LOCAL],
            ),
            EngineTier.EXTERNAL: ExternalEngine(
                external.provider,
                external.api_key,
                model_name=external.resolved_model_name,
                gemini_client=gemini_client,
                settings=settings[EngineTier.EXTERNAL],
            ),
        }
    )


def build_transcription_service(config: AppConfig) -> TranscriptionService:
    aai.settings.api_key = config.assemblyai.api_key
    transcriber = aai.Transcriber(
        config=aai.TranscriptionConfig(speaker_labels=config.assemblyai.speaker_labels)
    )
    return TranscriptionService(
        AssemblyAIRecognizer(
            transcriber,
            config.assemblyai.api_key,
            poll_interval_seconds=config.assemblyai.poll_interval_seconds,
        )
    )


def build_pipeline(
    config: AppConfig, platform_model: PlatformModel | None = None
) -> SummaryPipeline:
    """Composes the summary pipeline from configuration."""
    pipeline = SummaryPipeline(
        transcription=build_transcription_service(config),
        detector=LanguageDetector(),
        selector=build_selector(config, platform_model),
        cache=SessionResultCache(build_cache_service(config), build_session_store(config)),
        policy=TierPolicy.from_config(config.summarization),
        engine_settings=config.summarization.engine_settings,
    )
    logger.info(
        "Summary pipeline configured",
        extra={
            "privacy_mode": config.summarization.privacy_mode,
            "cache_backend": config.cache_backend,
        },
    )
    return pipeline


@lru_cache
def get_pipeline() -> SummaryPipeline:
    """Returns the process-wide pipeline instance."""
    return build_pipeline(load_config())
