"""
Errors raised by the image modifier.

Errors fall into two phases:

- *Enqueue time* (:class:`InvalidDimension`, :class:`InvalidArgumentCount`,
  :class:`ResourceNotFound`): raised by the operation call itself, before the
  pipeline is touched.
- *Export time* (:class:`BackendError`, :class:`ExportError`,
  :class:`UnsupportedFormat`): raised by ``Pipeline.export`` only. The queue is
  left intact so an export can be retried.

All errors derive from :class:`ImageModifierError` and additionally from the
builtin exception that best describes them, so callers may catch either.
"""


class ImageModifierError(Exception):
    """Base class of all image modifier errors."""

    def __init__(self, message: str):
        super().__init__(message)


class InvalidDimension(ImageModifierError, ValueError):
    """Raised when crop or resize arguments do not describe a valid geometry."""


class InvalidArgumentCount(ImageModifierError, TypeError):
    """Raised when a variadic crop or resize receives an unsupported number of arguments."""

    def __init__(self, operation: str, count: int):
        self.operation = operation
        self.count = count
        super().__init__(f"Insufficient arguments for {operation}: got {count}.")


class ResourceNotFound(ImageModifierError, FileNotFoundError):
    """Raised when a file needed by an operation does not exist."""

    def __init__(self, message: str, path: object = None):
        self.path = path
        super().__init__(message)


class UnsupportedFormat(ImageModifierError, ValueError):
    """Raised when an image or export target uses a mime type outside the supported set."""


class BackendError(ImageModifierError):
    """Raised when a backend fails to execute a queued operation."""


class ExportError(BackendError):
    """Raised when the final image cannot be encoded or written."""
