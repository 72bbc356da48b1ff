from pathlib import Path

import numpy as np
import pytest
from numpy.testing import assert_array_equal
from PIL import Image

from image_modifier.backends import ArrayBackend
from image_modifier.models import MimeType, ResampleFilter
from image_modifier.settings import Settings


@pytest.fixture
def backend(settings: Settings) -> ArrayBackend:
    return ArrayBackend(settings)


@pytest.fixture
def handle(landscape_png: Path, backend: ArrayBackend) -> np.ndarray:
    return backend.load(landscape_png)


def test_load_returns_rgba(handle: np.ndarray):
    assert handle.shape == (80, 120, 4)
    assert handle.dtype == np.uint8
    assert (handle[..., 3] == 255).all()


def test_crop_matches_slicing(backend: ArrayBackend, handle: np.ndarray):
    cropped = backend.apply_crop(handle, 10, 20, 30, 40)

    assert_array_equal(cropped, handle[10:50, 20:80])


def test_negative_crop_pads_with_transparency(backend: ArrayBackend, handle: np.ndarray):
    # Act
    cropped = backend.apply_crop(handle, -5, 10, 0, -3)

    # Assert
    assert cropped.shape == (85, 113, 4)
    assert (cropped[:5, :, 3] == 0).all()
    assert (cropped[:, -3:, 3] == 0).all()
    assert_array_equal(cropped[5:, :110], handle[:, 10:])


@pytest.mark.parametrize("resample", list(ResampleFilter))
def test_resize(handle: np.ndarray, resample: ResampleFilter):
    # Arrange
    backend = ArrayBackend(Settings(resample=resample))

    # Act
    resized = backend.apply_resize(handle, 30, 20)

    # Assert
    assert resized.shape == (20, 30, 4)
    assert resized.dtype == np.uint8
    assert (resized[..., 3] == 255).all()
    # blue is constant in the source
    assert (np.abs(resized[..., 2].astype(int) - 64) <= 1).all()


def test_nearest_upscale_repeats_pixels(backend: ArrayBackend):
    # Arrange
    handle = np.zeros((1, 2, 4), dtype=np.uint8)
    handle[0, 1] = (255, 255, 255, 255)
    backend = ArrayBackend(Settings(resample=ResampleFilter.NEAREST))

    # Act
    resized = backend.apply_resize(handle, 4, 2)

    # Assert
    assert_array_equal(resized[..., 0], [[0, 0, 255, 255], [0, 0, 255, 255]])


def test_greyscale(backend: ArrayBackend, handle: np.ndarray):
    grey = backend.apply_greyscale(handle)

    assert_array_equal(grey[..., 0], grey[..., 1])
    assert_array_equal(grey[..., 1], grey[..., 2])
    assert_array_equal(grey[..., 3], handle[..., 3])


def test_watermark_is_blended_at_center(
    backend: ArrayBackend, handle: np.ndarray, watermark_png: Path
):
    # Act
    marked = backend.apply_watermark(handle, watermark_png)

    # Assert
    assert_array_equal(marked[35:45, 50:70], np.broadcast_to([255, 0, 0, 255], (10, 20, 4)))
    assert_array_equal(marked[:35], handle[:35])
    assert_array_equal(marked[:, :50], handle[:, :50])


def test_watermark_larger_than_image_is_clipped(backend: ArrayBackend, watermark_png: Path):
    handle = np.zeros((4, 4, 4), dtype=np.uint8)

    marked = backend.apply_watermark(handle, watermark_png)

    assert_array_equal(marked, np.broadcast_to([255, 0, 0, 255], (4, 4, 4)))


def test_semi_transparent_watermark(backend: ArrayBackend, tmp_path: Path):
    # Arrange
    handle = np.full((2, 2, 4), 255, dtype=np.uint8)
    mark = np.zeros((2, 2, 4), dtype=np.uint8)
    mark[..., 3] = 128
    path = tmp_path / "half.png"
    Image.fromarray(mark).save(path)

    # Act
    marked = backend.apply_watermark(handle, path)

    # Assert
    assert (np.abs(marked[..., :3].astype(int) - 127) <= 1).all()
    assert (marked[..., 3] == 255).all()


@pytest.mark.parametrize(
    "alpha, mode",
    [
        pytest.param(255, "RGB", id="opaque"),
        pytest.param(0, "RGBA", id="transparent"),
    ],
)
def test_export_keeps_alpha_only_when_needed(
    backend: ArrayBackend, tmp_path: Path, alpha: int, mode: str
):
    handle = np.zeros((3, 3, 4), dtype=np.uint8)
    handle[..., 3] = alpha

    destination = backend.export(handle, tmp_path / "out.png", MimeType.PNG)

    with Image.open(destination) as image:
        assert image.mode == mode
