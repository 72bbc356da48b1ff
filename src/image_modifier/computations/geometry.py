"""
Geometry resolver.

Pure functions turning crop and resize arguments into concrete operation
records, given the *running* dimensions of the image (the dimensions after
all previously queued operations). Nothing here touches pixels or mutates
state; invalid arguments raise :class:`~image_modifier.exceptions.InvalidDimension`.

Rounding is half away from zero throughout, so ``0.5`` rounds to ``1``.

Crop bias
---------
When height is the limiting side of a crop on a portrait image, the removed
rows are split 1/3 above and 2/3 below the kept region, so the kept region
sits towards the top of the image. Horizontal crops are always centered.
"""

import math
from numbers import Integral, Real

from loguru import logger

from image_modifier.container_models import Crop, Dimensions, Maximum, Resize
from image_modifier.exceptions import InvalidDimension
from image_modifier.models import WatermarkPosition


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_integer(value: object) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _split_upper_biased(removed: float) -> tuple[int, int]:
    return round_half_away(removed / 3), round_half_away(removed * 2 / 3)


def _checked_crop(dimensions: Dimensions, crop: Crop, *arguments: object) -> Crop:
    if not crop.resulting_dimensions(dimensions).is_positive:
        raise InvalidDimension(
            f"Invalid dimension(s) for cropping: {', '.join(map(str, arguments))}. "
            f"Cropping {dimensions} would leave an empty image."
        )
    logger.debug(f"Resolved crop of {dimensions}: {crop!r}")
    return crop


def crop_to_aspect_ratio(dimensions: Dimensions, aspect_ratio: float) -> Crop:
    """
    Crop the image to a width:height ratio, keeping as much of it as possible.

    :param dimensions: The running dimensions of the image.
    :param aspect_ratio: Target ratio of width over height, must be positive.
    :returns: The resolved `Crop`.
    :raises InvalidDimension: If the ratio is not a positive number.
    """
    if not _is_number(aspect_ratio) or aspect_ratio <= 0:
        raise InvalidDimension(f"Invalid dimension(s) for cropping: {aspect_ratio}.")

    if dimensions.aspect_ratio <= aspect_ratio:
        # width determines
        top, bottom = _split_upper_biased(
            dimensions.height - dimensions.width / aspect_ratio
        )
        crop = Crop(top=top, left=0, bottom=bottom, right=0)
    else:
        # height determines
        side = round_half_away((dimensions.width - dimensions.height * aspect_ratio) / 2)
        crop = Crop(top=0, left=side, bottom=0, right=side)
    return _checked_crop(dimensions, crop, aspect_ratio)


def crop_to_size(dimensions: Dimensions, width: int, height: int) -> Crop:
    """
    Crop the image to ``width`` x ``height`` pixels.

    The crop is always centered horizontally. Vertically it is centered for
    landscape and square images, and biased towards the top for portrait images.

    :param dimensions: The running dimensions of the image.
    :param width: Target width in pixels, must be positive.
    :param height: Target height in pixels, must be positive.
    :returns: The resolved `Crop`.
    :raises InvalidDimension: If either size is not a positive integer.
    """
    if not (_is_integer(width) and _is_integer(height)) or width <= 0 or height <= 0:
        raise InvalidDimension(f"Invalid dimension(s) for cropping: {width}, {height}.")

    side = round_half_away((dimensions.width - width) / 2)
    if dimensions.is_landscape:
        top = bottom = round_half_away((dimensions.height - height) / 2)
    else:
        top, bottom = _split_upper_biased(dimensions.height - height)
    crop = Crop(top=top, left=side, bottom=bottom, right=side)
    return _checked_crop(dimensions, crop, width, height)


def crop_by_offsets(
    dimensions: Dimensions, top: int, left: int, bottom: int, right: int
) -> Crop:
    """
    Crop explicit pixel offsets from each edge.

    Offsets are used verbatim; negative offsets enlarge the canvas.

    :raises InvalidDimension: If an offset is not an integer, or nothing would remain.
    """
    offsets = (top, left, bottom, right)
    if not all(map(_is_integer, offsets)):
        raise InvalidDimension(
            f"Invalid dimension(s) for cropping: {', '.join(map(str, offsets))}."
        )
    crop = Crop(top=int(top), left=int(left), bottom=int(bottom), right=int(right))
    return _checked_crop(dimensions, crop, *offsets)


def _checked_resize(dimensions: Dimensions, width: int, height: int, *arguments: object) -> Resize:
    if width <= 0 or height <= 0:
        raise InvalidDimension(
            f"Invalid dimension(s) for resizing: {', '.join(map(str, arguments))}. "
            f"Resizing {dimensions} would result in {width}x{height}."
        )
    resize = Resize(width=width, height=height)
    logger.debug(f"Resolved resize of {dimensions}: {resize!r}")
    return resize


def resize_by_scale(dimensions: Dimensions, scale: float) -> Resize:
    """
    Scale both sides of the image by the same factor.

    :param dimensions: The running dimensions of the image.
    :param scale: Positive scale factor, e.g. ``0.5`` halves the image.
    :returns: The resolved `Resize`.
    :raises InvalidDimension: If the factor is not positive or rounds a side to zero.
    """
    if not _is_number(scale) or scale <= 0:
        raise InvalidDimension(f"Invalid dimension(s) for resizing: {scale}.")
    return _checked_resize(
        dimensions,
        round_half_away(dimensions.width * scale),
        round_half_away(dimensions.height * scale),
        scale,
    )


def _bounded_side(exact: int, exact_source: int, bounded_source: int) -> int:
    return round_half_away(exact / exact_source * bounded_source)


def resize_to_dimensions(
    dimensions: Dimensions, width: int | Maximum, height: int | Maximum
) -> Resize:
    """
    Resize the image to the given width and height.

    One side may be a `Maximum`. That side is derived from the exact side to
    preserve the running aspect ratio, and if it exceeds the maximum it is
    clamped and the exact side is derived from it instead.

    Without a `Maximum`, a side given as ``0`` is derived from the other.

    :param dimensions: The running dimensions of the image.
    :param width: Target width, or a `Maximum` bounding it.
    :param height: Target height, or a `Maximum` bounding it.
    :returns: The resolved `Resize`.
    :raises InvalidDimension: For negative sizes, two zero sides, two maxima, or a
        maximum combined with a non-positive exact side.
    """
    arguments = (width, height)
    if not all(isinstance(side, Maximum) or _is_integer(side) for side in arguments):
        raise InvalidDimension(f"Invalid dimension(s) for resizing: {width}, {height}.")
    width, height = (
        side if isinstance(side, Maximum) else int(side) for side in arguments
    )
    match width, height:
        case Maximum(), Maximum():
            raise InvalidDimension(
                f"Invalid dimension(s) for resizing: {width}, {height}. "
                "Only one side can be bounded by a maximum."
            )
        case Maximum(value=max_width), int() if max_width > 0 and height > 0:
            resized_width = _bounded_side(height, dimensions.height, dimensions.width)
            resized_height = height
            if resized_width > max_width:
                resized_width = max_width
                resized_height = _bounded_side(max_width, dimensions.width, dimensions.height)
        case int(), Maximum(value=max_height) if max_height > 0 and width > 0:
            resized_width = width
            resized_height = _bounded_side(width, dimensions.width, dimensions.height)
            if resized_height > max_height:
                resized_height = max_height
                resized_width = _bounded_side(max_height, dimensions.height, dimensions.width)
        case int(), int() if width >= 0 and height >= 0 and (width or height):
            resized_width = width or _bounded_side(height, dimensions.height, dimensions.width)
            resized_height = height or _bounded_side(width, dimensions.width, dimensions.height)
        case _:
            raise InvalidDimension(f"Invalid dimension(s) for resizing: {width}, {height}.")
    return _checked_resize(dimensions, resized_width, resized_height, *arguments)


def watermark_offset(
    canvas: Dimensions,
    overlay: Dimensions,
    position: WatermarkPosition,
    margin: int = 0,
) -> tuple[int, int]:
    """
    Top-left pixel at which an overlay is placed on a canvas.

    :param canvas: Dimensions of the image being watermarked.
    :param overlay: Dimensions of the watermark.
    :param position: Where the watermark is anchored.
    :param margin: Distance between the watermark and the anchored edges; ignored when centered.
    :returns: The ``(x, y)`` offset, negative when the overlay exceeds the canvas.
    """
    free = canvas - overlay
    match position:
        case WatermarkPosition.CENTER:
            return free.width // 2, free.height // 2
        case WatermarkPosition.TOP_LEFT:
            return margin, margin
        case WatermarkPosition.TOP_RIGHT:
            return free.width - margin, margin
        case WatermarkPosition.BOTTOM_LEFT:
            return margin, free.height - margin
        case WatermarkPosition.BOTTOM_RIGHT:
            return free.width - margin, free.height - margin
