"""Image modifier settings and configuration."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from image_modifier.models import ResampleFilter, WatermarkPosition


class Settings(BaseSettings):
    """
    Image modifier configuration settings.

    Settings can be configured via:

    1. Environment variables (e.g., IMAGE_MODIFIER_JPEG_QUALITY=90)
    2. .env file in the working directory
    3. Default values defined below

    All settings use the IMAGE_MODIFIER_ prefix for environment variables.

    .. rubric:: Examples

    Select the numpy backend and a sharper resampling filter::

        export IMAGE_MODIFIER_BACKEND=array
        export IMAGE_MODIFIER_RESAMPLE=bicubic
    """

    backend: Annotated[
        str,
        Field(
            default="pillow",
            description="Registry name of the backend used when export is called without one",
        ),
    ]

    # Encoding
    jpeg_quality: Annotated[
        int,
        Field(default=85, description="JPEG encoder quality", ge=1, le=95),
    ]
    png_optimize: Annotated[
        bool,
        Field(default=False, description="Let the PNG encoder search for the smallest output"),
    ]

    # Operations
    resample: Annotated[
        ResampleFilter,
        Field(default=ResampleFilter.LANCZOS, description="Filter used when resizing"),
    ]
    watermark_position: Annotated[
        WatermarkPosition,
        Field(
            default=WatermarkPosition.CENTER,
            description="Where the watermark is anchored on the image",
        ),
    ]
    watermark_margin: Annotated[
        int,
        Field(
            default=0,
            description="Distance in pixels between the watermark and the anchored edges",
            ge=0,
        ),
    ]

    log_level: Annotated[str, Field(default="WARNING", description="Minimum level of log records")]

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_MODIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
    )

    def log_config(self) -> None:
        """Log the active configuration."""
        logger.debug("Image modifier configuration:")
        logger.debug(f"  Backend: {self.backend}")
        logger.debug(f"  JPEG quality: {self.jpeg_quality}")
        logger.debug(f"  PNG optimize: {self.png_optimize}")
        logger.debug(f"  Resample filter: {self.resample}")
        logger.debug(f"  Watermark: {self.watermark_position}, margin {self.watermark_margin}px")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: The image modifier settings instance.
    """
    return Settings()  # type: ignore
