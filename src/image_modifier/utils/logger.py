"""
Logging helpers on top of loguru.

The library logs through the shared ``loguru`` logger and never configures
sinks on import. Applications call :func:`configure_logging` once to get a
stderr sink at the configured level.
"""

import sys
from enum import StrEnum
from functools import wraps
from typing import Any, Callable, Final

from loguru import logger
from returns.io import IOResult
from returns.pipeline import is_successful
from returns.result import Result
from returns.unsafe import unsafe_perform_io

from image_modifier.settings import Settings, get_settings

VERBOSE: Final[bool] = False


class FailureLevel(StrEnum):
    """Loguru level at which a failed railway function is reported."""

    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def configure_logging(settings: Settings | None = None, level: str | None = None) -> int:
    """
    Send log records to stderr.

    Replaces loguru's default sink with a single stderr sink and logs the
    active configuration at debug level.

    :param settings: Source of the ``log_level``, defaults to `get_settings()`.
    :param level: Explicit level overriding the settings, e.g. ``"DEBUG"``.
    :returns: The id of the added sink, usable with ``logger.remove``.
    """
    settings = settings or get_settings()
    logger.remove()
    handler_id = logger.add(sys.stderr, level=(level or settings.log_level).upper())
    settings.log_config()
    return handler_id


def _failure_of(result: Result | IOResult) -> Any:
    failure = result.failure()
    return unsafe_perform_io(failure) if isinstance(result, IOResult) else failure


def log_railway_function(
    failure_message: str,
    success_message: str | None = None,
    failure_level: FailureLevel = FailureLevel.ERROR,
):
    """
    Log the outcome of a function returning a ``returns`` container.

    A failure is reported at ``failure_level`` with ``failure_message``; the
    error itself goes to the debug level. A success is reported at info level
    when ``success_message`` is given. The container is returned unchanged.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if VERBOSE:
                arguments = [repr(arg) for arg in args] + [f"{key}={value!r}" for key, value in kwargs.items()]
                logger.debug(f"Calling {func.__name__}({', '.join(arguments)})")
            result = func(*args, **kwargs)
            if not isinstance(result, (Result, IOResult)):
                return result
            if is_successful(result):
                if success_message:
                    logger.info(success_message)
            else:
                logger.debug(f"{failure_message}: {_failure_of(result)}")
                logger.log(failure_level.value, failure_message)
            return result

        return wrapper

    return decorator
