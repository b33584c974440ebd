"""Summarization tier selection policy."""

from collections.abc import Mapping

from lifewrapped_common.logging import setup_logging
from pydantic import BaseModel

from session_summarizer.config import SummarizationConfig
from session_summarizer.domain.models import EngineTier
from session_summarizer.infrastructure.interfaces.summarization_engine import (
    SummarizationEngine,
)

logger = setup_logging()

DEFAULT_TIER_ORDER = (
    EngineTier.LOCAL,
    EngineTier.APPLE,
    EngineTier.EXTERNAL,
    EngineTier.BASIC,
)


class TierPolicy(BaseModel, frozen=True):
    """
    Decides which tiers a run may use and in which order they are tried.

    ``fallback_on_failure`` allows a failed non-basic tier to be retried with
    the basic tier. Fallback never moves to another tier, so a private run
    can never end up on an external provider.
    """

    preference: tuple[EngineTier, ...] = DEFAULT_TIER_ORDER
    allow_external: bool = False
    fallback_on_failure: bool = False
    refresh_lower_tier_results: bool = False

    @classmethod
    def build(
        cls,
        preferred_tier: EngineTier | None = None,
        tier_order: tuple[EngineTier, ...] = DEFAULT_TIER_ORDER,
        **options,
    ) -> "TierPolicy":
        """Builds a policy that tries ``preferred_tier`` before ``tier_order``."""
        order = ((preferred_tier,) if preferred_tier else ()) + tuple(tier_order)
        return cls(preference=tuple(dict.fromkeys(order)), **options)

    @classmethod
    def from_config(cls, config: SummarizationConfig) -> "TierPolicy":
        """Builds the default policy. Private mode never permits external."""
        return cls.build(
            preferred_tier=config.preferred_tier,
            tier_order=config.tier_order,
            allow_external=config.privacy_mode == "standard",
            fallback_on_failure=config.fallback_on_failure,
            refresh_lower_tier_results=config.refresh_lower_tier_results,
        )

    def forcing(self, tier: EngineTier) -> "TierPolicy":
        """Returns a copy that only considers ``tier`` (basic stays the fallback)."""
        return self.model_copy(update={"preference": (tier,)})

    def permits(self, tier: EngineTier) -> bool:
        if tier is EngineTier.EXTERNAL:
            return self.allow_external
        return True


class TierSelector:
    """Selects the first applicable summarization tier for a policy."""

    def __init__(self, engines: Mapping[EngineTier, SummarizationEngine]):
        if EngineTier.BASIC not in engines:
            raise ValueError("A basic engine is required as the universal fallback")
        self._engines = dict(engines)

    def engine(self, tier: EngineTier) -> SummarizationEngine:
        return self._engines[tier]

    async def select(self, policy: TierPolicy) -> EngineTier:
        """
        Walks the policy's preference order and returns the first tier that
        is permitted, registered and currently available.

        Returns:
            The selected tier, or BASIC when nothing else applies.
        """
        for tier in policy.preference:
            if tier is EngineTier.BASIC:
                return tier
            if not policy.permits(tier):
                logger.info("Tier not permitted", extra={"tier": tier.value})
                continue
            if await self._is_available(tier):
                logger.info("Tier selected", extra={"tier": tier.value})
                return tier

        logger.info("Falling back to basic tier")
        return EngineTier.BASIC

    async def available_tiers(self) -> list[EngineTier]:
        """Returns every registered tier that is currently available."""
        return [tier for tier in EngineTier if await self._is_available(tier)]

    async def _is_available(self, tier: EngineTier) -> bool:
        engine = self._engines.get(tier)
        if engine is None:
            return False
        try:
            return await engine.is_available()
        except Exception:
            logger.exception("Availability check failed", extra={"tier": tier.value})
            return False
