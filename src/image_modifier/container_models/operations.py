"""
Queued operation records.

Operations form a closed tagged variant, discriminated by ``kind``::

    +-----------------------+   +-------------------+
    | Crop                  |   | Resize            |
    |-----------------------|   |-------------------|
    | top, left : int       |   | width  : int > 0  |
    | bottom, right : int   |   | height : int > 0  |
    +-----------------------+   +-------------------+
    +-----------------------+   +-------------------+
    | Watermark             |   | Greyscale         |
    |-----------------------|   |-------------------|
    | source : Path         |   |                   |
    +-----------------------+   +-------------------+

Records carry fully resolved parameters and are immutable, so they can be
shared between cloned pipelines. Only Crop and Resize change the geometry of
the image, see :meth:`resulting_dimensions`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from image_modifier.container_models.base import Dimensions


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def resulting_dimensions(self, dimensions: Dimensions) -> Dimensions:
        """Dimensions of the image after this operation is applied."""
        return dimensions


class Crop(_Operation):
    kind: Literal["crop"] = "crop"
    top: StrictInt
    left: StrictInt
    bottom: StrictInt
    right: StrictInt

    @property
    def is_noop(self) -> bool:
        return not (self.top or self.left or self.bottom or self.right)

    def resulting_dimensions(self, dimensions: Dimensions) -> Dimensions:
        return dimensions - Dimensions(
            self.left + self.right, self.top + self.bottom
        )


class Resize(_Operation):
    kind: Literal["resize"] = "resize"
    width: Annotated[StrictInt, Field(gt=0)]
    height: Annotated[StrictInt, Field(gt=0)]

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    def resulting_dimensions(self, dimensions: Dimensions) -> Dimensions:
        return self.dimensions


class Watermark(_Operation):
    kind: Literal["watermark"] = "watermark"
    source: Path


class Greyscale(_Operation):
    kind: Literal["greyscale"] = "greyscale"


type Operation = Annotated[
    Crop | Resize | Watermark | Greyscale, Field(discriminator="kind")
]
