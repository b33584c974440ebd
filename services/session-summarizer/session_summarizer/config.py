"""Application configuration loaded from environment variables."""

import os
from typing import Literal

from lifewrapped_common import DatabaseConfig, RedisConfig
from pydantic import BaseModel, Field

from session_summarizer.domain.models import EngineSettings, EngineTier, ExternalProvider


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI speech recognition configuration."""

    api_key: str
    speaker_labels: bool = True
    poll_interval_seconds: float = 3.0


class LocalModelConfig(BaseModel, frozen=True):
    """On-device model server configuration (LM Studio, llama.cpp)."""

    enabled: bool = False
    base_url: str = "http://127.0.0.1:1234"
    model_name: str = "qwen2-0.5b-instruct"
    max_tokens: int = 1024
    temperature: float = 0.3


class ExternalAPIConfig(BaseModel, frozen=True):
    """Hosted model provider configuration."""

    provider: ExternalProvider = ExternalProvider.OPENAI
    api_key: str = ""
    model_name: str | None = None

    @property
    def resolved_model_name(self) -> str:
        return self.model_name or self.provider.default_model


class SummarizationConfig(BaseModel, frozen=True):
    """Tier selection and per-tier limits."""

    privacy_mode: Literal["private", "standard"] = "private"
    preferred_tier: EngineTier | None = None
    tier_order: tuple[EngineTier, ...] = (
        EngineTier.LOCAL,
        EngineTier.APPLE,
        EngineTier.EXTERNAL,
        EngineTier.BASIC,
    )
    fallback_on_failure: bool = False
    refresh_lower_tier_results: bool = False
    engine_settings: dict[EngineTier, EngineSettings] = Field(
        default_factory=lambda: {tier: EngineSettings.defaults_for(tier) for tier in EngineTier}
    )


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    redis: RedisConfig
    database: DatabaseConfig
    assemblyai: AssemblyAIConfig
    local_model: LocalModelConfig
    external_api: ExternalAPIConfig
    summarization: SummarizationConfig
    cache_backend: Literal["redis", "memory"] = "redis"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _optional_int(name: str) -> int | None:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


def _tier_order(value: str) -> tuple[EngineTier, ...]:
    return tuple(EngineTier(name.strip()) for name in value.split(",") if name.strip())


def _engine_settings() -> dict[EngineTier, EngineSettings]:
    """Reads per-tier overrides such as ``LOCAL_TIMEOUT_SECONDS``."""
    settings = {}
    for tier in EngineTier:
        defaults = EngineSettings.defaults_for(tier)
        prefix = tier.value.upper()
        settings[tier] = EngineSettings(
            minimum_words=int(os.getenv(f"{prefix}_MINIMUM_WORDS", defaults.minimum_words)),
            max_context_words=int(
                os.getenv(f"{prefix}_MAX_CONTEXT_WORDS", defaults.max_context_words)
            ),
            timeout_seconds=float(
                os.getenv(f"{prefix}_TIMEOUT_SECONDS", defaults.timeout_seconds)
            ),
        )
    return settings


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    preferred_tier = os.getenv("PREFERRED_TIER", "").strip()
    return AppConfig(
        redis=RedisConfig(
            host=os.getenv("REDIS_HOST", "redis"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            cache_ttl_seconds=_optional_int("REDIS_CACHE_TTL_SECONDS"),
        ),
        database=DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///lifewrapped.db"),
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
            speaker_labels=_flag("ASSEMBLYAI_SPEAKER_LABELS", "true"),
            poll_interval_seconds=float(os.getenv("ASSEMBLYAI_POLL_INTERVAL_SECONDS", "3")),
        ),
        local_model=LocalModelConfig(
            enabled=_flag("LOCAL_MODEL_ENABLED"),
            base_url=os.getenv("LOCAL_MODEL_BASE_URL", "http://127.0.0.1:1234"),
            model_name=os.getenv("LOCAL_MODEL_NAME", "qwen2-0.5b-instruct"),
            max_tokens=int(os.getenv("LOCAL_MODEL_MAX_TOKENS", "1024")),
            temperature=float(os.getenv("LOCAL_MODEL_TEMPERATURE", "0.3")),
        ),
        external_api=ExternalAPIConfig(
            provider=ExternalProvider(os.getenv("EXTERNAL_API_PROVIDER", "openai")),
            api_key=os.getenv("EXTERNAL_API_KEY", ""),
            model_name=os.getenv("EXTERNAL_API_MODEL") or None,
        ),
        summarization=SummarizationConfig(
            privacy_mode=os.getenv("PRIVACY_MODE", "private"),
            preferred_tier=EngineTier(preferred_tier) if preferred_tier else None,
            tier_order=_tier_order(os.getenv("TIER_ORDER", "local,apple,external,basic")),
            fallback_on_failure=_flag("FALLBACK_ON_FAILURE"),
            refresh_lower_tier_results=_flag("REFRESH_LOWER_TIER_RESULTS"),
            engine_settings=_engine_settings(),
        ),
        cache_backend=os.getenv("CACHE_BACKEND", "redis"),
    )
