"""
Immutable value models shared by the geometry resolver, the operation queue
and the backends.

Notes
-----
Operation records are frozen pydantic models. Once an operation has been
validated and queued it is never modified, which makes it safe to share the
records between pipelines cloned from a common source.
"""

from .base import Dimensions, Maximum
from .operations import Crop, Greyscale, Operation, Resize, Watermark


__all__ = [
    "Crop",
    "Dimensions",
    "Greyscale",
    "Maximum",
    "Operation",
    "Resize",
    "Watermark",
]
