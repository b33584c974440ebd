from lifewrapped_common.infrastructure.interfaces import CacheService

__all__ = ["CacheService"]
