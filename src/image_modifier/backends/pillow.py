"""
Pillow backend.

The native handle is a :class:`PIL.Image.Image`. Every step returns a new image
object; the handle passed in is never modified in place.
"""

from pathlib import Path

from loguru import logger
from PIL import Image

from image_modifier.backends.image_io import open_image, save_image
from image_modifier.backends.registry import get_backend_registry
from image_modifier.computations import watermark_offset
from image_modifier.container_models import Dimensions
from image_modifier.models import MimeType, ResampleFilter
from image_modifier.settings import Settings, get_settings

_RESAMPLING: dict[ResampleFilter, Image.Resampling] = {
    ResampleFilter.NEAREST: Image.Resampling.NEAREST,
    ResampleFilter.BILINEAR: Image.Resampling.BILINEAR,
    ResampleFilter.BICUBIC: Image.Resampling.BICUBIC,
    ResampleFilter.LANCZOS: Image.Resampling.LANCZOS,
}


def _with_alpha(image: Image.Image) -> Image.Image:
    return image if image.mode == "RGBA" else image.convert("RGBA")


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


@get_backend_registry().register(name="pillow")
class PillowBackend:
    """Backend operating on Pillow images."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def load(self, source: Path) -> Image.Image:
        return open_image(source)

    def apply_crop(
        self, handle: Image.Image, top: int, left: int, bottom: int, right: int
    ) -> Image.Image:
        """
        Remove the given number of pixels from each edge.

        Negative offsets extend the canvas; the added area is transparent, or
        black for images without an alpha channel.
        """
        box = (left, top, handle.width - right, handle.height - bottom)
        logger.debug(f"Cropping {handle.width}x{handle.height} image to box {box}")
        return handle.crop(box)

    def apply_resize(self, handle: Image.Image, width: int, height: int) -> Image.Image:
        resample = _RESAMPLING[self.settings.resample]
        if handle.mode == "P":
            # palette indices cannot be interpolated
            handle = handle.convert("RGBA")
        return handle.resize((width, height), resample=resample)

    def apply_watermark(self, handle: Image.Image, source: Path) -> Image.Image:
        """Composite the watermark over the image at the configured position."""
        watermark = _with_alpha(open_image(source))
        offset = watermark_offset(
            Dimensions(*handle.size),
            Dimensions(*watermark.size),
            self.settings.watermark_position,
            self.settings.watermark_margin,
        )
        canvas = _with_alpha(handle)
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(watermark, offset)
        composite = Image.alpha_composite(canvas, layer)
        return composite if _has_alpha(handle) else composite.convert("RGB")

    def apply_greyscale(self, handle: Image.Image) -> Image.Image:
        if not _has_alpha(handle):
            return handle.convert("L")
        return _with_alpha(handle).convert("LA")

    def export(self, handle: Image.Image, destination: Path, mime_type: MimeType) -> Path:
        return save_image(handle, destination, mime_type, self.settings)
