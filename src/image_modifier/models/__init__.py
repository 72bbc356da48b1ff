from .enums import MimeType, ResampleFilter, WatermarkPosition


__all__ = ["MimeType", "ResampleFilter", "WatermarkPosition"]
