"""
Image modification pipeline.

A :class:`Pipeline` is bound to a source image of known dimensions and format.
Operations are validated and resolved against the *running* dimensions when
they are queued; no pixel is touched until :meth:`Pipeline.export`, which
replays the queue once, in order, against a backend.

High-level Design
-----------------

::

    Pipeline(source, width, height, mime_type)
        |
        |  crop_* / resize_* / watermark / greyscale
        v
    geometry resolver --(no-op?)--> skipped
        |
        v
    OperationQueue [Crop, Resize, Watermark, Greyscale, ...]
        |
        |  export(backend, destination, mime_type)
        v
    backend.load -> backend.apply_* (in queue order) -> backend.export

Example
-------

    pipeline = (
        Pipeline.from_file(Path("portrait.jpg"))
        .crop_to_aspect_ratio(4 / 3)
        .resize_to_dimensions(Maximum(640), 480)
        .greyscale()
    )
    pipeline.export(destination=Path("thumbnail.png"), mime_type="image/png")
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Any, Self, assert_never

from loguru import logger

from image_modifier.backends.image_io import read_header
from image_modifier.backends.protocol import BackendExecutor
from image_modifier.backends.registry import get_backend_registry
from image_modifier.computations import (
    crop_by_offsets,
    crop_to_aspect_ratio,
    crop_to_size,
    resize_by_scale,
    resize_to_dimensions,
)
from image_modifier.container_models import (
    Crop,
    Dimensions,
    Greyscale,
    Maximum,
    Operation,
    Resize,
    Watermark,
)
from image_modifier.exceptions import (
    InvalidArgumentCount,
    InvalidDimension,
    ResourceNotFound,
)
from image_modifier.models import MimeType
from image_modifier.queue import OperationQueue
from image_modifier.railway import railway_step, run_pipeline


def _apply_operation[H](backend: BackendExecutor[H], operation: Operation, handle: H) -> H:
    match operation:
        case Crop(top=top, left=left, bottom=bottom, right=right):
            return backend.apply_crop(handle, top, left, bottom, right)
        case Resize(width=width, height=height):
            return backend.apply_resize(handle, width, height)
        case Watermark(source=source):
            return backend.apply_watermark(handle, source)
        case Greyscale():
            return backend.apply_greyscale(handle)
        case _:
            assert_never(operation)


def _numeric_argument(token: Any, operation: str, parse: Callable[[str], Any] = int) -> Any:
    if not isinstance(token, str):
        return token
    try:
        return parse(token.strip())
    except ValueError:
        raise InvalidDimension(f"Invalid dimension(s) for {operation}: {token}.") from None


def _resize_argument(token: Any) -> int | Maximum:
    if (maximum := Maximum.parse(token)) is not None:
        return maximum
    return _numeric_argument(token, "resizing")


class Pipeline:
    """
    Queue of image operations bound to one source image.

    :param source: Path of the source image; also the default export destination.
    :param width: Width of the source image in pixels.
    :param height: Height of the source image in pixels.
    :param mime_type: Format of the source image; also the default export format.
    """

    def __init__(
        self, source: Path | str, width: int, height: int, mime_type: MimeType | str
    ) -> None:
        dimensions = Dimensions(width, height)
        if not dimensions.is_positive:
            raise InvalidDimension(f"Invalid source dimensions: {dimensions}.")
        self._source = Path(source)
        self._source_dimensions = dimensions
        self._mime_type = MimeType.parse(mime_type)
        self._queue = OperationQueue(dimensions)

    @classmethod
    def from_file(cls, source: Path | str) -> Self:
        """
        Create a pipeline for an image file, reading its size and format from the header.

        :raises ResourceNotFound: If the file does not exist.
        :raises UnsupportedFormat: If the file is not a jpeg, gif or png image.
        """
        source = Path(source)
        dimensions, mime_type = read_header(source)
        return cls(source, dimensions.width, dimensions.height, mime_type)

    @property
    def source(self) -> Path:
        return self._source

    @property
    def source_dimensions(self) -> Dimensions:
        return self._source_dimensions

    @property
    def dimensions(self) -> Dimensions:
        """Dimensions of the image after all queued operations."""
        return self._queue.dimensions

    @property
    def mime_type(self) -> MimeType:
        return self._mime_type

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(source={str(self._source)!r}, "
            f"source_dimensions={self._source_dimensions}, dimensions={self.dimensions}, "
            f"operations={len(self._queue)})"
        )

    def copy(self) -> Self:
        """Independent pipeline with the same source and queued operations."""
        clone = type(self).__new__(type(self))
        clone._source = self._source
        clone._source_dimensions = self._source_dimensions
        clone._mime_type = self._mime_type
        clone._queue = self._queue.copy()
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.copy()

    # Queuing

    def _enqueue_crop(self, resolve: Callable[[Dimensions], Crop]) -> Self:
        crop = resolve(self.dimensions)
        if crop.is_noop:
            logger.debug("Nothing to crop, crop is skipped")
            return self
        self._queue.enqueue(crop)
        return self

    def _enqueue_resize(self, resolve: Callable[[Dimensions], Resize]) -> Self:
        resize = resolve(self.dimensions)
        if resize.dimensions == self.dimensions:
            logger.debug(f"Image is already {self.dimensions}, resize is skipped")
            return self
        self._queue.enqueue(resize)
        return self

    def crop_to_aspect_ratio(self, aspect_ratio: float) -> Self:
        """
        Crop to a width:height ratio.

        Landscape overhang is removed evenly from left and right; portrait
        overhang is removed 1/3 from the top and 2/3 from the bottom.

        :raises InvalidDimension: If the ratio is not positive.
        """
        return self._enqueue_crop(partial(crop_to_aspect_ratio, aspect_ratio=aspect_ratio))

    def crop_to_size(self, width: int, height: int) -> Self:
        """
        Crop to ``width`` x ``height`` pixels, centered (top-biased for portrait images).

        :raises InvalidDimension: If either size is not positive.
        """
        return self._enqueue_crop(partial(crop_to_size, width=width, height=height))

    def crop_by_offsets(self, top: int, left: int, bottom: int, right: int) -> Self:
        """
        Remove the given number of pixels from each edge.

        :raises InvalidDimension: If nothing would remain of the image.
        """
        return self._enqueue_crop(
            partial(crop_by_offsets, top=top, left=left, bottom=bottom, right=right)
        )

    def crop(self, *args: Any) -> Self:
        """
        Crop, choosing the form by the number of arguments.

        - ``crop(aspect_ratio)``
        - ``crop(width, height)``
        - ``crop(top, left, bottom, right)``

        Numeric strings are accepted in place of numbers.

        :raises InvalidArgumentCount: For any other number of arguments.
        """
        match args:
            case (aspect_ratio,):
                return self.crop_to_aspect_ratio(_numeric_argument(aspect_ratio, "cropping", float))
            case (width, height):
                return self.crop_to_size(*(_numeric_argument(side, "cropping") for side in (width, height)))
            case (top, left, bottom, right):
                return self.crop_by_offsets(
                    *(_numeric_argument(offset, "cropping") for offset in (top, left, bottom, right))
                )
            case _:
                raise InvalidArgumentCount("cropping", len(args))

    def resize_by_scale(self, scale: float) -> Self:
        """
        Scale both sides by ``scale``.

        :raises InvalidDimension: If the factor is not positive.
        """
        return self._enqueue_resize(partial(resize_by_scale, scale=scale))

    def resize_to_dimensions(self, width: int | Maximum, height: int | Maximum) -> Self:
        """
        Resize to ``width`` x ``height``.

        Either side may be a `Maximum`, bounding that side while it follows the
        aspect ratio. Without a `Maximum`, a side of ``0`` follows the aspect ratio.

        :raises InvalidDimension: If the sizes do not describe a valid resize.
        """
        return self._enqueue_resize(
            partial(resize_to_dimensions, width=width, height=height)
        )

    def resize(self, *args: Any) -> Self:
        """
        Resize, choosing the form by the number of arguments.

        - ``resize(scale)``
        - ``resize(width, height)``, where either side may be ``"max_<N>"``

        Numeric strings are accepted in place of numbers.

        :raises InvalidArgumentCount: For any other number of arguments.
        """
        match args:
            case (scale,):
                return self.resize_by_scale(_numeric_argument(scale, "resizing", float))
            case (width, height):
                return self.resize_to_dimensions(
                    _resize_argument(width), _resize_argument(height)
                )
            case _:
                raise InvalidArgumentCount("resizing", len(args))

    def watermark(self, source: Path | str) -> Self:
        """
        Overlay the image at ``source``.

        :raises ResourceNotFound: If ``source`` is not an existing file.
        """
        path = Path(source)
        if not path.is_file():
            raise ResourceNotFound(f"Watermark file not found: {path}", path=path)
        self._queue.enqueue(Watermark(source=path.resolve()))
        return self

    def greyscale(self) -> Self:
        """Convert the image to shades of grey."""
        self._queue.enqueue(Greyscale())
        return self

    # Export

    def export[H](
        self,
        backend: BackendExecutor[H] | None = None,
        destination: Path | str | None = None,
        mime_type: MimeType | str | None = None,
    ) -> Path:
        """
        Apply the queued operations to the source image and write the result.

        The queue is replayed in insertion order. An empty queue re-encodes the
        source, which converts between formats. The queue is left untouched, so
        a failed export can be retried.

        :param backend: The backend executing the operations; defaults to the
            configured backend from the registry.
        :param destination: Output file; defaults to the source file.
        :param mime_type: Output format; defaults to the source format.
        :returns: The path of the written image.
        :raises UnsupportedFormat: If ``mime_type`` is not jpeg, gif or png.
        :raises ResourceNotFound: If the source or a watermark file is missing.
        :raises ExportError: If the image cannot be encoded or written.
        :raises UnknownBackendError: If no backend is given and the configured one is not registered.
        :raises BackendError: If any other step fails.
        """
        target_mime_type = self._mime_type if mime_type is None else MimeType.parse(mime_type)
        target = self._source if destination is None else Path(destination)
        backend = backend if backend is not None else get_backend_registry().create()
        operations = tuple(self._queue)

        logger.info(
            f"Exporting {self._source} with {len(operations)} operation(s) "
            f"to {target} ({target_mime_type})"
        )
        result = run_pipeline(
            self._source,
            railway_step("load source image", backend.load),
            *(
                railway_step(
                    f"apply {operation.kind} #{index}",
                    partial(_apply_operation, backend, operation),
                )
                for index, operation in enumerate(operations, start=1)
            ),
            railway_step(
                "export image",
                partial(backend.export, destination=target, mime_type=target_mime_type),
            ),
        )
        logger.info(f"Exported image to {result}")
        return result
