from session_summarizer.config import load_config
from session_summarizer.dependencies import build_cache_service, build_selector
from session_summarizer.domain.models import EngineTier, ExternalProvider
from session_summarizer.infrastructure.memory_cache import InMemoryCacheService
from session_summarizer.infrastructure.redis_cache import RedisCacheService


def test_defaults(monkeypatch):
    for name in ("PRIVACY_MODE", "TIER_ORDER", "PREFERRED_TIER", "REDIS_CACHE_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.summarization.privacy_mode == "private"
    assert config.summarization.tier_order == (
        EngineTier.LOCAL,
        EngineTier.APPLE,
        EngineTier.EXTERNAL,
        EngineTier.BASIC,
    )
    assert config.summarization.fallback_on_failure is False
    assert config.redis.cache_ttl_seconds is None
    assert config.summarization.engine_settings[EngineTier.LOCAL].timeout_seconds == 60.0
    assert config.summarization.engine_settings[EngineTier.EXTERNAL].max_context_words == 16000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PRIVACY_MODE", "standard")
    monkeypatch.setenv("PREFERRED_TIER", "external")
    monkeypatch.setenv("TIER_ORDER", "apple, basic")
    monkeypatch.setenv("EXTERNAL_API_PROVIDER", "anthropic")
    monkeypatch.setenv("EXTERNAL_API_KEY", "key")
    monkeypatch.setenv("REDIS_CACHE_TTL_SECONDS", "600")
    monkeypatch.setenv("LOCAL_TIMEOUT_SECONDS", "90")
    monkeypatch.setenv("LOCAL_MODEL_ENABLED", "true")
    monkeypatch.setenv("CACHE_BACKEND", "memory")

    config = load_config()

    assert config.summarization.privacy_mode == "standard"
    assert config.summarization.preferred_tier is EngineTier.EXTERNAL
    assert config.summarization.tier_order == (EngineTier.APPLE, EngineTier.BASIC)
    assert config.external_api.provider is ExternalProvider.ANTHROPIC
    assert config.external_api.resolved_model_name == "claude-sonnet-4-5"
    assert config.redis.cache_ttl_seconds == 600
    assert config.summarization.engine_settings[EngineTier.LOCAL].timeout_seconds == 90.0
    assert config.local_model.enabled is True
    assert isinstance(build_cache_service(config), InMemoryCacheService)


def test_selector_registers_every_tier(monkeypatch):
    monkeypatch.setenv("CACHE_BACKEND", "redis")
    config = load_config()

    selector = build_selector(config)

    assert isinstance(build_cache_service(config), RedisCacheService)
    for tier in EngineTier:
        assert selector.engine(tier).tier is tier
