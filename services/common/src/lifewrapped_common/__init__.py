from lifewrapped_common.config import DatabaseConfig, RedisConfig
from lifewrapped_common.db_models import SessionSummaryRecord
from lifewrapped_common.logging import setup_logging

__all__ = [
    "setup_logging",
    "DatabaseConfig",
    "RedisConfig",
    "SessionSummaryRecord",
]
