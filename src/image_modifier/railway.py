"""
Railway-oriented execution of backend steps.

An export is a chain of backend calls where every call consumes the output of
the previous one. Each call is wrapped as a *railway step* returning an
``IOResultE``: on success the chain continues on the success track, the first
failure switches to the failure track and skips every remaining step.

`run_pipeline` hides the container mechanics: it binds the steps together with
``returns.pipeline.flow``, unwraps the final value and, on failure, raises the
captured :class:`~image_modifier.exceptions.ImageModifierError`.
"""

from collections.abc import Callable
from typing import Any

from loguru import logger
from returns.interfaces.container import ContainerN
from returns.io import IOFailure, IOResultE, IOSuccess, impure_safe
from returns.pipeline import flow
from returns.pointfree import bind
from returns.result import Failure, Success

from image_modifier.exceptions import BackendError, ImageModifierError
from image_modifier.utils.logger import log_railway_function


def railway_step[T, R](description: str, func: Callable[[T], R]) -> Callable[[T], IOResultE[R]]:
    """
    Wrap a raising function as a railway step.

    Library errors (`ImageModifierError`) are kept as they are; any other
    exception is converted to a `BackendError` naming the step.

    :param description: What the step does, e.g. ``"apply resize #2"``.
    :param func: The function to run.
    :returns: A function returning ``IOSuccess(result)`` or ``IOFailure(error)``.
    """

    @log_railway_function(f"Failed to {description}")
    @impure_safe
    def step(value: T) -> R:
        logger.debug(f"Running step: {description}")
        try:
            return func(value)
        except ImageModifierError:
            raise
        except Exception as error:
            raise BackendError(f"Failed to {description}: {error}") from error

    step.__name__ = description.replace(" ", "_")
    return step


def _capture_ioresult_value[T](result: IOResultE[T]) -> T:
    match result:
        case IOSuccess(Success(value)):
            return value
        case IOFailure(Failure(error)) if isinstance(error, ImageModifierError):
            raise error
        case IOFailure(Failure(error)):
            raise BackendError(str(error)) from error
    raise TypeError(f"Expected an IOResult, got {result!r}")


def _pipeline_flow[T](entry_value: Any | ContainerN, *pipeline: Callable[..., Any]) -> IOResultE[T]:
    first_function = None
    pipeline_tasks: Any = pipeline
    if not isinstance(entry_value, ContainerN) and pipeline:
        first_function, *pipeline_tasks = pipeline

    return flow(
        entry_value,
        *((first_function,) if first_function else ()),
        *[bind(task) for task in pipeline_tasks],
    )


def run_pipeline(entry_value: Any | ContainerN, *tasks: Callable[[Any], IOResultE[Any]]) -> Any:
    """
    Execute railway steps in order and return the final value.

    :param entry_value: The value passed to the first step, or a container
        holding it.
    :param tasks: Railway steps; each receives the unwrapped output of the previous one.
    :returns: The unwrapped value of the last step.
    :raises ImageModifierError: The error of the first failing step.

    :examples
    --------
    >>> load = railway_step("load source", backend.load)
    >>> greyscale = railway_step("apply greyscale", backend.apply_greyscale)
    >>> image = run_pipeline(source_path, load, greyscale)
    """
    return _capture_ioresult_value(_pipeline_flow(entry_value, *tasks))
