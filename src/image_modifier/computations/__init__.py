"""
Stateless computations used when queuing operations.

Anything in this package is a pure function of its arguments and can be used
without a pipeline or a backend.
"""

from .geometry import (
    crop_by_offsets,
    crop_to_aspect_ratio,
    crop_to_size,
    resize_by_scale,
    resize_to_dimensions,
    round_half_away,
    watermark_offset,
)


__all__ = (
    "crop_by_offsets",
    "crop_to_aspect_ratio",
    "crop_to_size",
    "resize_by_scale",
    "resize_to_dimensions",
    "round_half_away",
    "watermark_offset",
)
