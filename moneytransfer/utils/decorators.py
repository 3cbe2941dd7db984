"""Utility decorators for call logging."""
import asyncio
import functools
import time
from typing import Callable
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)


def log_execution(log_args: bool = True, log_result: bool = False):
    """
    Decorator to log function execution with timing.

    Args:
        log_args: Whether to log function arguments
        log_result: Whether to log function result

    Example:
        @log_execution(log_args=True, log_result=True)
        async def convert(self, from_code, to_code, amount):
            ...
    """
    def decorator(func: Callable):
        def _start_extra(args, kwargs) -> dict:
            extra = {"function": func.__name__}
            if log_args:
                extra["function_args"] = str(args)[:100]
                extra["function_kwargs"] = str(kwargs)[:100]
            return extra

        def _done_extra(start_time: float, result=None) -> dict:
            execution_time = (time.time() - start_time) * 1000
            extra = {"function": func.__name__, "execution_time_ms": round(execution_time, 2)}
            if log_result:
                extra["result"] = str(result)[:100]
            return extra

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            logger.debug(f"Starting {func.__name__}", extra=_start_extra(args, kwargs))
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                extra = _done_extra(start_time)
                extra["error"] = str(e)
                logger.error(f"Failed {func.__name__}", extra=extra)
                raise
            logger.debug(f"Completed {func.__name__}", extra=_done_extra(start_time, result))
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            logger.debug(f"Starting {func.__name__}", extra=_start_extra(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                extra = _done_extra(start_time)
                extra["error"] = str(e)
                logger.error(f"Failed {func.__name__}", extra=extra)
                raise
            logger.debug(f"Completed {func.__name__}", extra=_done_extra(start_time, result))
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator
