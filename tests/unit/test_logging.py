import json
import logging

from moneytransfer.utils.logging import JsonFormatter, get_logger, setup_logging


def _record(**extra):
    record = logging.LogRecord("moneytransfer.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    data = json.loads(JsonFormatter().format(_record()))
    assert data["level"] == "INFO"
    assert data["logger"] == "moneytransfer.test"
    assert data["message"] == "hello world"
    assert "timestamp" in data
    assert "event" not in data


def test_json_formatter_event_extras():
    data = json.loads(JsonFormatter().format(_record(event="Convert_Start", attributes={"from": "PLN"})))
    assert data["event"] == "Convert_Start"
    assert data["attributes"] == {"from": "PLN"}


def test_setup_logging_disabled_and_reenabled():
    setup_logging(enabled=False)
    assert logging.getLogger("moneytransfer").isEnabledFor(logging.CRITICAL) is False

    setup_logging(level="warning", format_type="text")
    assert logging.getLogger().level == logging.WARNING
    assert get_logger("moneytransfer.x").isEnabledFor(logging.ERROR)
