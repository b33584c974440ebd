from lifewrapped_common.infrastructure.interfaces.cache_service import CacheService

__all__ = ["CacheService"]
