"""
Backends executing queued operations on real pixels.

Each backend implements :class:`~image_modifier.backends.protocol.BackendExecutor`
for its own native image handle and registers itself in the backend registry
under a short name:

- ``pillow``: :class:`PillowBackend`, handles are ``PIL.Image.Image`` objects.
- ``array``: :class:`ArrayBackend`, handles are RGBA numpy arrays processed
  with scikit-image.

Both encode through :func:`~image_modifier.backends.image_io.save_image`, so
format conversion and the atomic write are shared.
"""

from .array import ArrayBackend
from .pillow import PillowBackend
from .protocol import BackendExecutor
from .registry import (
    BackendAlreadyRegisteredError,
    UnknownBackendError,
    get_backend_registry,
)


__all__ = (
    "ArrayBackend",
    "BackendAlreadyRegisteredError",
    "BackendExecutor",
    "PillowBackend",
    "UnknownBackendError",
    "get_backend_registry",
)
