import logging
import os
import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "lifewrapped-session-summarizer"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """
    Routes every log record through one JSON handler on stdout.

    Records carry timestamp, level, logger name, message, the Datadog
    trace_id/span_id and the service name. Pipeline modules call this at
    import time, so the handler is installed once and later calls only
    adjust the level. Uvicorn's loggers share the handler and stop
    propagating to avoid duplicate lines.

    Args:
        level: Log level name or number. Defaults to ``LOG_LEVEL`` or INFO.

    Returns:
        logging.Logger: The root logger.
    """
    resolved = _resolve_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    handler = next(
        (h for h in root_logger.handlers if getattr(h, "_lifewrapped", False)), None
    )
    if handler is None:
        formatter = jsonlogger.JsonFormatter(
            _LOG_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level"},
            static_fields={"service": SERVICE_NAME},
        )
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler._lifewrapped = True
        root_logger.handlers = [handler]

    for logger_name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.setLevel(resolved)
        server_logger.handlers = [handler]
        server_logger.propagate = False

    return root_logger
