"""CTIフォーマットコーデックパッケージ

ヘッダー、タイルインデックス、タイル解凍、CRC検証、逆色変換、タイル合成を提供する。
"""

from ctiview.codec.compositor import RasterGeometry, blit_tile
from ctiview.codec.compression import CompressionId, CompressionKind, decompress_tile
from ctiview.codec.header import HEADER_SIZE, MAGIC, ColorType, CTIHeader, read_header
from ctiview.codec.integrity import crc32, verify_tile
from ctiview.codec.rct import apply_inverse_rct, inverse_rct_rgb8, inverse_rct_rgb16
from ctiview.codec.tile_index import RECORD_SIZE, TileIndexRecord, read_tile_index

__all__ = [
    "HEADER_SIZE",
    "MAGIC",
    "RECORD_SIZE",
    "ColorType",
    "CompressionId",
    "CompressionKind",
    "CTIHeader",
    "RasterGeometry",
    "TileIndexRecord",
    "apply_inverse_rct",
    "blit_tile",
    "crc32",
    "decompress_tile",
    "inverse_rct_rgb8",
    "inverse_rct_rgb16",
    "read_header",
    "read_tile_index",
    "verify_tile",
]
