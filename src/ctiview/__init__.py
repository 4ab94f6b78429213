"""ctiview - CTI tiled compressed image decoder."""

__version__ = "0.1.0"

from ctiview.codec.compression import CompressionId, CompressionKind  # noqa: E402
from ctiview.codec.header import ColorType, CTIHeader  # noqa: E402
from ctiview.decoder import CTIDecoder, DecodePhase, decode, read_info  # noqa: E402
from ctiview.errors import (  # noqa: E402
    CTIError,
    CTIIOError,
    DecompressionError,
    FormatError,
    IntegrityError,
    UnsupportedColorTypeError,
    UnsupportedCompressionError,
)

__all__ = [
    "CTIDecoder",
    "CTIError",
    "CTIHeader",
    "CTIIOError",
    "ColorType",
    "CompressionId",
    "CompressionKind",
    "DecodePhase",
    "DecompressionError",
    "FormatError",
    "IntegrityError",
    "UnsupportedColorTypeError",
    "UnsupportedCompressionError",
    "decode",
    "read_info",
]
