"""
Backend-agnostic image modification.

Queue crop, resize, watermark and greyscale operations against an image of
known size, then apply them all at once with :meth:`Pipeline.export`::

    from image_modifier import Maximum, Pipeline

    Pipeline.from_file("photo.jpg").crop(4 / 3).resize(Maximum(800), 600).export()
"""

from .backends import (
    ArrayBackend,
    BackendExecutor,
    PillowBackend,
    get_backend_registry,
)
from .container_models import (
    Crop,
    Dimensions,
    Greyscale,
    Maximum,
    Operation,
    Resize,
    Watermark,
)
from .exceptions import (
    BackendError,
    ExportError,
    ImageModifierError,
    InvalidArgumentCount,
    InvalidDimension,
    ResourceNotFound,
    UnsupportedFormat,
)
from .models import MimeType, ResampleFilter, WatermarkPosition
from .pipeline import Pipeline
from .settings import Settings, get_settings


__all__ = (
    "ArrayBackend",
    "BackendError",
    "BackendExecutor",
    "Crop",
    "Dimensions",
    "ExportError",
    "Greyscale",
    "ImageModifierError",
    "InvalidArgumentCount",
    "InvalidDimension",
    "Maximum",
    "MimeType",
    "Operation",
    "PillowBackend",
    "Pipeline",
    "ResampleFilter",
    "Resize",
    "ResourceNotFound",
    "Settings",
    "UnsupportedFormat",
    "Watermark",
    "WatermarkPosition",
    "get_backend_registry",
    "get_settings",
)
