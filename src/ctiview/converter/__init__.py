"""Converter module for ctiview.

デコード済みのCTI画像を標準的な画像形式に変換する機能を提供する。
"""

from ctiview.converter.base import BaseConverter, ConversionResult, ConversionStatus
from ctiview.converter.image import (
    CTIImageConverter,
    OutputFormat,
    QualityPreset,
    color_name,
    describe_header,
    raster_to_image,
)

__all__ = [
    "BaseConverter",
    "CTIImageConverter",
    "ConversionResult",
    "ConversionStatus",
    "OutputFormat",
    "QualityPreset",
    "color_name",
    "describe_header",
    "raster_to_image",
]
