import json
import logging

from lifewrapped_common.logging import SERVICE_NAME, setup_logging


def _json_handlers(logger):
    return [h for h in logger.handlers if getattr(h, "_lifewrapped", False)]


def test_setup_is_idempotent_and_honours_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    try:
        setup_logging()
        root = setup_logging()

        assert len(_json_handlers(root)) == 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").handlers == _json_handlers(root)
        assert logging.getLogger("uvicorn.access").propagate is False
    finally:
        setup_logging("INFO")


def test_unknown_level_falls_back_to_info():
    root = setup_logging("chatty")

    assert root.level == logging.INFO


def test_records_are_json_with_service_name():
    handler = _json_handlers(setup_logging())[0]
    record = logging.LogRecord(
        "session_summarizer.domain.pipeline",
        logging.INFO,
        __file__,
        1,
        "Pipeline completed",
        None,
        None,
    )
    record.session_id = "abc123"

    payload = json.loads(handler.formatter.format(record))

    assert payload["message"] == "Pipeline completed"
    assert payload["level"] == "INFO"
    assert payload["service"] == SERVICE_NAME
    assert payload["session_id"] == "abc123"
    assert "timestamp" in payload
