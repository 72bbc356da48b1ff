"""
Array backend.

The native handle is an RGBA ``uint8`` numpy array of shape ``(H, W, 4)``.
Resampling and greyscale conversion are delegated to scikit-image; cropping
and watermarking are plain array operations. Pillow is only used to decode the
source and to encode the result.
"""

from pathlib import Path

import numpy as np
from loguru import logger
from numpy.typing import NDArray
from PIL.Image import fromarray
from skimage.color import rgb2gray
from skimage.transform import resize

from image_modifier.backends.image_io import open_image, save_image
from image_modifier.backends.registry import get_backend_registry
from image_modifier.computations import watermark_offset
from image_modifier.container_models import Dimensions
from image_modifier.models import MimeType
from image_modifier.settings import Settings, get_settings

type ImageRGBA = NDArray[np.uint8]  # Shape: (H, W, 4)


def _to_uint8(data: NDArray[np.floating]) -> ImageRGBA:
    return np.clip(np.rint(data), 0, 255).astype(np.uint8)


def _overlap(offset: int, length: int, bound: int) -> tuple[slice, slice]:
    """
    Slices of a span of ``length`` placed at ``offset`` that fall inside ``[0, bound)``.

    :returns: The slice on the placed span and the matching slice on the bounded axis.
    """
    start, stop = max(offset, 0), min(offset + length, bound)
    stop = max(start, stop)
    return slice(start - offset, stop - offset), slice(start, stop)


def read_rgba(source: Path) -> ImageRGBA:
    """Decode an image file into an RGBA array."""
    return np.array(open_image(source).convert("RGBA"), dtype=np.uint8)


@get_backend_registry().register(name="array")
class ArrayBackend:
    """Backend operating on RGBA numpy arrays."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def load(self, source: Path) -> ImageRGBA:
        return read_rgba(source)

    def apply_crop(
        self, handle: ImageRGBA, top: int, left: int, bottom: int, right: int
    ) -> ImageRGBA:
        """
        Remove the given number of pixels from each edge.

        Negative offsets extend the canvas with transparent pixels.
        """
        height, width = handle.shape[:2]
        canvas = np.zeros(
            (height - top - bottom, width - left - right, 4), dtype=np.uint8
        )
        source_y, canvas_y = _overlap(-top, height, canvas.shape[0])
        source_x, canvas_x = _overlap(-left, width, canvas.shape[1])
        canvas[canvas_y, canvas_x] = handle[source_y, source_x]
        return canvas

    def apply_resize(self, handle: ImageRGBA, width: int, height: int) -> ImageRGBA:
        order = self.settings.resample.spline_order
        downscaling = width < handle.shape[1] or height < handle.shape[0]
        resized = resize(
            image=handle,
            output_shape=(height, width),
            order=order,
            mode="edge",
            anti_aliasing=downscaling and order > 0,
            preserve_range=True,
        )
        logger.debug(f"Resized array from {handle.shape[1]}x{handle.shape[0]} to {width}x{height}")
        return _to_uint8(resized)

    def apply_watermark(self, handle: ImageRGBA, source: Path) -> ImageRGBA:
        """Blend the watermark over the image at the configured position ("over" operator)."""
        watermark = read_rgba(source)
        x, y = watermark_offset(
            Dimensions(handle.shape[1], handle.shape[0]),
            Dimensions(watermark.shape[1], watermark.shape[0]),
            self.settings.watermark_position,
            self.settings.watermark_margin,
        )
        mark_y, image_y = _overlap(y, watermark.shape[0], handle.shape[0])
        mark_x, image_x = _overlap(x, watermark.shape[1], handle.shape[1])

        base = handle[image_y, image_x].astype(np.float64) / 255
        mark = watermark[mark_y, mark_x].astype(np.float64) / 255
        mark_alpha, base_alpha = mark[..., 3:], base[..., 3:]
        alpha = mark_alpha + base_alpha * (1 - mark_alpha)
        colour = mark[..., :3] * mark_alpha + base[..., :3] * base_alpha * (1 - mark_alpha)
        colour = np.divide(colour, alpha, out=np.zeros_like(colour), where=alpha > 0)

        result = handle.copy()
        result[image_y, image_x] = _to_uint8(np.concatenate([colour, alpha], axis=-1) * 255)
        return result

    def apply_greyscale(self, handle: ImageRGBA) -> ImageRGBA:
        grey = _to_uint8(rgb2gray(handle[..., :3]) * 255)
        return np.dstack([grey, grey, grey, handle[..., 3]])

    def export(self, handle: ImageRGBA, destination: Path, mime_type: MimeType) -> Path:
        image = fromarray(np.ascontiguousarray(handle))
        if bool(np.all(handle[..., 3] == 255)):
            image = image.convert("RGB")
        return save_image(image, destination, mime_type, self.settings)
