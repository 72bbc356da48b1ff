from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from image_modifier.exceptions import UnsupportedFormat


class MimeType(StrEnum):
    JPEG = "image/jpeg"
    GIF = "image/gif"
    PNG = "image/png"

    @classmethod
    def parse(cls, value: str | MimeType) -> MimeType:
        """
        Parse a mime type string, accepting the common JPEG aliases.

        :param value: A mime type such as ``"image/png"`` or ``"image/pjpeg"``.
        :returns: The matching `MimeType`.
        :raises UnsupportedFormat: If the mime type is not supported.
        """
        if isinstance(value, MimeType):
            return value
        normalized = value.strip().lower()
        if mime_type := _MIME_ALIASES.get(normalized):
            return mime_type
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedFormat(f"Unsupported image format: {value}.") from None

    @classmethod
    def from_pillow_format(cls, image_format: str | None) -> MimeType:
        for mime_type in cls:
            if mime_type.pillow_format == (image_format or "").upper():
                return mime_type
        raise UnsupportedFormat(f"Unsupported image format: {image_format}.")

    @classmethod
    def from_path(cls, path: Path) -> MimeType:
        """Guess the mime type from the file suffix."""
        suffix = path.suffix.lower().lstrip(".")
        for mime_type in cls:
            if suffix in mime_type.suffixes:
                return mime_type
        raise UnsupportedFormat(f"Unsupported image file extension: {path.suffix!r}.")

    @property
    def pillow_format(self) -> str:
        return self.value.removeprefix("image/").upper()

    @property
    def suffixes(self) -> tuple[str, ...]:
        match self:
            case MimeType.JPEG:
                return ("jpg", "jpeg", "jpe")
            case MimeType.GIF:
                return ("gif",)
            case MimeType.PNG:
                return ("png",)

    @property
    def supports_alpha(self) -> bool:
        return self is not MimeType.JPEG


_MIME_ALIASES: dict[str, MimeType] = {
    "image/pjpeg": MimeType.JPEG,
    "image/jpg": MimeType.JPEG,
}


class WatermarkPosition(StrEnum):
    CENTER = auto()
    TOP_LEFT = auto()
    TOP_RIGHT = auto()
    BOTTOM_LEFT = auto()
    BOTTOM_RIGHT = auto()


class ResampleFilter(StrEnum):
    NEAREST = auto()
    BILINEAR = auto()
    BICUBIC = auto()
    LANCZOS = auto()

    @property
    def spline_order(self) -> int:
        """Spline interpolation order used by scikit-image for this filter."""
        match self:
            case ResampleFilter.NEAREST:
                return 0
            case ResampleFilter.BILINEAR:
                return 1
            case ResampleFilter.BICUBIC | ResampleFilter.LANCZOS:
                return 3
