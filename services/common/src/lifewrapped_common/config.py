"""Shared configuration models for infrastructure components."""

from pydantic import BaseModel


class RedisConfig(BaseModel, frozen=True):
    """Redis connection configuration."""

    host: str
    port: int = 6379
    # None keeps entries until they are overwritten
    cache_ttl_seconds: int | None = None


class DatabaseConfig(BaseModel, frozen=True):
    """Database connection configuration for the durable session store."""

    url: str = "sqlite:///lifewrapped.db"
