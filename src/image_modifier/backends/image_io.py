"""
Reading and writing image files with Pillow.

Shared by all backends: whatever a backend uses as its native handle, the
source is decoded and the result encoded here, so format selection and the
atomic write behave the same everywhere.
"""

import os
from pathlib import Path
from tempfile import mkstemp
from typing import Any

from loguru import logger
from PIL import Image, UnidentifiedImageError

from image_modifier.container_models import Dimensions
from image_modifier.exceptions import (
    BackendError,
    ExportError,
    ResourceNotFound,
    UnsupportedFormat,
)
from image_modifier.models import MimeType
from image_modifier.settings import Settings

_STORABLE_MODES: dict[MimeType, frozenset[str]] = {
    MimeType.JPEG: frozenset({"L", "RGB", "CMYK"}),
    MimeType.GIF: frozenset({"1", "L", "P", "RGB", "RGBA"}),
    MimeType.PNG: frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}),
}
_GREY_MODES = frozenset({"1", "LA", "La", "I", "I;16", "F"})


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise ResourceNotFound(f"Image file not found: {path}", path=path)


def read_header(path: Path) -> tuple[Dimensions, MimeType]:
    """
    Read the dimensions and format of an image without decoding its pixels.

    :param path: The image file.
    :returns: The image dimensions and mime type.
    :raises ResourceNotFound: If the file does not exist.
    :raises UnsupportedFormat: If the file is not an image in a supported format.
    """
    _require_file(path)
    try:
        with Image.open(path) as image:
            return Dimensions(*image.size), MimeType.from_pillow_format(image.format)
    except UnidentifiedImageError:
        raise UnsupportedFormat(f"File is not a supported image: {path}") from None


def open_image(path: Path) -> Image.Image:
    """
    Open and fully decode an image file.

    :raises ResourceNotFound: If the file does not exist.
    :raises BackendError: If the file cannot be decoded.
    """
    _require_file(path)
    try:
        with Image.open(path) as image:
            image.load()
            logger.debug(f"Loaded {image.format} image {path} ({image.mode}, {image.width}x{image.height})")
            return image
    except (UnidentifiedImageError, OSError) as error:
        raise BackendError(f"Failed to decode image {path}: {error}") from error


def prepare_for_format(image: Image.Image, mime_type: MimeType) -> Image.Image:
    """
    Convert the image to a mode the target format can store.

    Transparency is kept as RGBA when the format supports alpha; other modes
    (e.g. CMYK, YCbCr, LAB or HSV for PNG) become L for grey images, else RGB.
    """
    if image.mode in _STORABLE_MODES[mime_type]:
        return image
    if mime_type.supports_alpha and image.has_transparency_data:
        return image.convert("RGBA")
    return image.convert("L" if image.mode in _GREY_MODES else "RGB")


def _encoder_options(mime_type: MimeType, settings: Settings) -> dict[str, Any]:
    match mime_type:
        case MimeType.JPEG:
            return {"quality": settings.jpeg_quality}
        case MimeType.PNG:
            return {"optimize": settings.png_optimize}
        case _:
            return {}


def save_image(
    image: Image.Image, destination: Path, mime_type: MimeType, settings: Settings
) -> Path:
    """
    Encode an image and write it to ``destination`` atomically.

    The image is written to a temporary file next to the destination which then
    replaces it, so a failure never leaves a partial file at ``destination``.

    :param image: The image to write.
    :param destination: The file to (over)write.
    :param mime_type: Output format.
    :param settings: Encoder settings.
    :returns: The path of the written image.
    :raises ExportError: If encoding or writing fails.
    """
    temporary: Path | None = None
    try:
        descriptor, name = mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=".tmp"
        )
        temporary = Path(name)
        with os.fdopen(descriptor, "wb") as stream:
            prepare_for_format(image, mime_type).save(
                stream,
                format=mime_type.pillow_format,
                **_encoder_options(mime_type, settings),
            )
        os.replace(temporary, destination)
    except (OSError, ValueError) as error:
        if temporary is not None:
            temporary.unlink(missing_ok=True)
        raise ExportError(f"Failed to export image to {destination}: {error}") from error
    logger.debug(f"Wrote {mime_type} image to {destination}")
    return destination
