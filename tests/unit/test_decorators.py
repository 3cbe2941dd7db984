"""Tests for decorator utilities."""
import logging

import pytest

from moneytransfer.utils.decorators import log_execution


@pytest.mark.asyncio
async def test_log_execution(caplog):
    """Test log_execution decorator."""
    @log_execution(log_args=True, log_result=True)
    async def logged_function(x, y):
        return x + y

    with caplog.at_level(logging.DEBUG, logger="moneytransfer.utils.decorators"):
        result = await logged_function(2, 3)

    assert result == 5
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Starting logged_function", "Completed logged_function"]
    assert caplog.records[0].function_args == "(2, 3)"
    assert caplog.records[1].result == "5"
    assert caplog.records[1].execution_time_ms >= 0


@pytest.mark.asyncio
async def test_log_execution_failure(caplog):
    @log_execution()
    async def failing():
        raise ValueError("nope")

    with caplog.at_level(logging.DEBUG, logger="moneytransfer.utils.decorators"):
        with pytest.raises(ValueError, match="nope"):
            await failing()

    failure = caplog.records[-1]
    assert failure.levelno == logging.ERROR
    assert failure.getMessage() == "Failed failing"
    assert failure.error == "nope"


def test_log_execution_sync(caplog):
    @log_execution(log_args=False)
    def double(x):
        return x * 2

    with caplog.at_level(logging.DEBUG, logger="moneytransfer.utils.decorators"):
        assert double(4) == 8

    assert not hasattr(caplog.records[0], "function_args")
    assert double.__name__ == "double"
