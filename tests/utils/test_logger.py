import logging
import sys
from collections.abc import Callable, Set
from typing import Final
from unittest.mock import patch

import pytest
from loguru import logger
from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure, Result, Success

from image_modifier.settings import Settings
from image_modifier.utils import FailureLevel, configure_logging, log_railway_function

SUCCESS_MESSAGE: Final[str] = "Operation succeeded"
FAILURE_MESSAGE: Final[str] = "Operation failed"
ERROR_VALUE: Final[Exception] = RuntimeError("Something went wrong")


@log_railway_function(failure_message=FAILURE_MESSAGE, success_message=SUCCESS_MESSAGE)
def some_io_function(should_succeed: bool):
    if should_succeed:
        return IOSuccess(42)
    return IOFailure(ERROR_VALUE)


@log_railway_function(failure_message=FAILURE_MESSAGE, success_message=SUCCESS_MESSAGE)
def some_function(should_succeed: bool):
    if should_succeed:
        return Success(42)
    return Failure(ERROR_VALUE)


@log_railway_function(failure_message=FAILURE_MESSAGE, success_message=SUCCESS_MESSAGE)
def some_complex_function(a, *, b, c=3):
    """Combine the arguments."""
    return Success({"a": a, "x": [b, c]})


@pytest.mark.parametrize(
    "function, should_succeed, message, level",
    (
        pytest.param(some_function, True, SUCCESS_MESSAGE, {"INFO"}, id="Success"),
        pytest.param(
            some_function, False, FAILURE_MESSAGE, {"DEBUG", "ERROR"}, id="Failure"
        ),
        pytest.param(some_io_function, True, SUCCESS_MESSAGE, {"INFO"}, id="IOSuccess"),
        pytest.param(
            some_io_function, False, FAILURE_MESSAGE, {"DEBUG", "ERROR"}, id="IOFailure"
        ),
    ),
)
def test_log_railway_function_capture_log_message(
    function: Callable[[bool], Result | IOResult],
    should_succeed: bool,
    message: str,
    level: Set[str],
    caplog: pytest.LogCaptureFixture,
):
    with caplog.at_level(logging.DEBUG):
        _ = function(should_succeed)

    assert message in caplog.text
    assert {record.levelname for record in caplog.records} == level


@pytest.mark.parametrize(
    "failure_level, levelname",
    [
        pytest.param(FailureLevel.WARNING, "WARNING", id="warning"),
        pytest.param(FailureLevel.CRITICAL, "CRITICAL", id="critical"),
    ],
)
def test_failure_level(
    failure_level: FailureLevel, levelname: str, caplog: pytest.LogCaptureFixture
):
    @log_railway_function(failure_message=FAILURE_MESSAGE, failure_level=failure_level)
    def failing():
        return Failure(ERROR_VALUE)

    with caplog.at_level(logging.INFO):
        _ = failing()

    assert [record.levelname for record in caplog.records] == [levelname]


@pytest.mark.parametrize("success_message", (None, ""))
def test_empty_success_message_does_not_log_on_success(
    success_message: str | None, caplog: pytest.LogCaptureFixture
):
    @log_railway_function(failure_message=FAILURE_MESSAGE, success_message=success_message)
    def empty_success_message_func():
        return IOSuccess(100)

    with caplog.at_level(logging.DEBUG):
        _ = empty_success_message_func()

    assert not {record.levelname for record in caplog.records}


def test_decorator_is_not_destructive():
    result = some_complex_function(1, b=2, c=5)

    assert isinstance(result, Success)
    assert result.unwrap() == {"a": 1, "x": [2, 5]}


def test_decorator_preserves_function_metadata():
    assert some_complex_function.__name__ == "some_complex_function"
    assert some_complex_function.__doc__ == "Combine the arguments."


@patch("image_modifier.utils.logger.VERBOSE", True)
def test_verbose_mode_logs_function_signature(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.DEBUG):
        _ = some_complex_function(1, b=2, c=5)

    assert "Calling some_complex_function(1, b=2, c=5)" in caplog.text


def test_configure_logging_replaces_default_sink(capsys: pytest.CaptureFixture[str]):
    # Act
    handler_id = configure_logging(level="info")
    try:
        logger.debug("hidden message")
        logger.info("visible message")
    finally:
        logger.remove(handler_id)
        logger.add(lambda message: sys.stderr.write(message))

    # Assert
    captured = capsys.readouterr().err
    assert "visible message" in captured
    assert "hidden message" not in captured


def test_configure_logging_uses_settings_level(capsys: pytest.CaptureFixture[str]):
    # Act
    handler_id = configure_logging(Settings(log_level="error"))
    try:
        logger.warning("quiet warning")
        logger.error("loud error")
    finally:
        logger.remove(handler_id)
        logger.add(lambda message: sys.stderr.write(message))

    # Assert
    captured = capsys.readouterr().err
    assert "loud error" in captured
    assert "quiet warning" not in captured


@pytest.mark.parametrize(
    "level, logged",
    [
        pytest.param("debug", True, id="debug"),
        pytest.param("info", False, id="info"),
    ],
)
def test_configure_logging_reports_configuration_at_debug(
    capsys: pytest.CaptureFixture[str], level: str, logged: bool
):
    # Act
    handler_id = configure_logging(Settings(backend="array", log_level=level))
    logger.remove(handler_id)
    logger.add(lambda message: sys.stderr.write(message))

    # Assert
    captured = capsys.readouterr().err
    assert ("Image modifier configuration:" in captured) is logged
    assert ("Backend: array" in captured) is logged


def test_failure_debug_record_shows_the_error(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.DEBUG):
        _ = some_io_function(False)

    assert f"{FAILURE_MESSAGE}: Something went wrong" in caplog.text
