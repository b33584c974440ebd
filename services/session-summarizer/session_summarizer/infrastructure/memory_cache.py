"""In-process cache service for single-instance deployments and tests."""

from lifewrapped_common.infrastructure.interfaces import CacheService


class InMemoryCacheService(CacheService):
    """Keeps cached values in a dict for the lifetime of the process."""

    def __init__(self):
        self._values: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)
