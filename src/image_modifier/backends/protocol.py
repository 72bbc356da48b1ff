from pathlib import Path
from typing import Protocol, runtime_checkable

from image_modifier.models import MimeType


@runtime_checkable
class BackendExecutor[H](Protocol):
    """
    Capability set a raster backend implements to execute a pipeline.

    ``H`` is the backend's native image handle. Every ``apply_*`` call consumes
    the handle produced by the previous step and returns a new one, so an
    export is a linear chain ``load -> apply_* ... -> export``.

    Methods raise on failure; the pipeline converts unexpected exceptions to
    :class:`~image_modifier.exceptions.BackendError`.
    """

    def load(self, source: Path) -> H: ...

    def apply_crop(self, handle: H, top: int, left: int, bottom: int, right: int) -> H: ...

    def apply_resize(self, handle: H, width: int, height: int) -> H: ...

    def apply_watermark(self, handle: H, source: Path) -> H: ...

    def apply_greyscale(self, handle: H) -> H: ...

    def export(self, handle: H, destination: Path, mime_type: MimeType) -> Path:
        """
        Encode the handle and write it to ``destination``.

        Implementations write atomically and raise
        :class:`~image_modifier.exceptions.ExportError` on failure, leaving no
        partial file behind.
        """
        ...
