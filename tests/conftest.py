import logging
from pathlib import Path

import numpy as np
import pytest
from loguru import logger
from PIL import Image

from image_modifier.container_models import Dimensions
from image_modifier.models import MimeType
from image_modifier.settings import Settings, get_settings


class PropagateHandler(logging.Handler):
    """Handler that propagates loguru records to standard logging."""

    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture
def caplog(caplog):
    """Fixture to enable caplog to capture loguru logs."""
    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read the settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingBackend:
    """
    Fake backend recording every call.

    The handle is the list of calls made so far, so the value reaching
    `export` shows the order in which the steps were chained.
    """

    def __init__(self, fail_on: str | None = None, error: Exception | None = None) -> None:
        self.calls: list[tuple] = []
        self.fail_on = fail_on
        self.error = error or RuntimeError(f"{fail_on} exploded")

    def _record(self, handle: list[tuple], *call) -> list[tuple]:
        self.calls.append(call)
        if call[0] == self.fail_on:
            raise self.error
        return [*handle, call]

    def load(self, source: Path) -> list[tuple]:
        return self._record([], "load", source)

    def apply_crop(self, handle, top, left, bottom, right):
        return self._record(handle, "crop", top, left, bottom, right)

    def apply_resize(self, handle, width, height):
        return self._record(handle, "resize", width, height)

    def apply_watermark(self, handle, source):
        return self._record(handle, "watermark", source)

    def apply_greyscale(self, handle):
        return self._record(handle, "greyscale")

    def export(self, handle, destination: Path, mime_type: MimeType) -> Path:
        self._record(handle, "export", destination, mime_type)
        self.exported = handle
        return destination


@pytest.fixture
def recording_backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def settings() -> Settings:
    return Settings(backend="pillow", resample="bilinear")


def _gradient(dimensions: Dimensions) -> np.ndarray:
    """RGB test image whose red channel follows x and green channel follows y."""
    y, x = np.mgrid[0 : dimensions.height, 0 : dimensions.width]
    red = (x * 255 // max(dimensions.width - 1, 1)).astype(np.uint8)
    green = (y * 255 // max(dimensions.height - 1, 1)).astype(np.uint8)
    blue = np.full_like(red, 64)
    return np.dstack([red, green, blue])


@pytest.fixture
def landscape_png(tmp_path: Path) -> Path:
    """Build a 120x80 PNG image."""
    path = tmp_path / "landscape.png"
    Image.fromarray(_gradient(Dimensions(120, 80))).save(path)
    return path


@pytest.fixture
def portrait_jpeg(tmp_path: Path) -> Path:
    """Build an 80x120 JPEG image."""
    path = tmp_path / "portrait.jpg"
    Image.fromarray(_gradient(Dimensions(80, 120))).save(path, quality=95)
    return path


@pytest.fixture
def transparent_png(tmp_path: Path) -> Path:
    """Build a 60x40 RGBA PNG image, left half opaque and right half transparent."""
    data = np.zeros((40, 60, 4), dtype=np.uint8)
    data[:, :, :3] = 200
    data[:, :30, 3] = 255
    path = tmp_path / "transparent.png"
    Image.fromarray(data).save(path)
    return path


@pytest.fixture
def watermark_png(tmp_path: Path) -> Path:
    """Build a 20x10 opaque red RGBA watermark."""
    data = np.zeros((10, 20, 4), dtype=np.uint8)
    data[..., 0] = 255
    data[..., 3] = 255
    path = tmp_path / "watermark.png"
    Image.fromarray(data).save(path)
    return path


@pytest.fixture
def cmyk_jpeg(tmp_path: Path) -> Path:
    """Build a 60x40 CMYK JPEG image."""
    path = tmp_path / "cmyk.jpg"
    Image.new("CMYK", (60, 40), (0, 128, 255, 0)).save(path)
    return path
