"""タイル解凍モジュール

ヘッダーの圧縮方式IDに応じてタイルペイロードを解凍する。
実装済みの方式は None / Zstd / LZ4 のみで、それ以外は明示的にエラーとする。
"""

from dataclasses import dataclass
from enum import Enum

import lz4.block
import zstandard as zstd

from ctiview.errors import DecompressionError, UnsupportedCompressionError


class CompressionKind(Enum):
    """圧縮方式の種別

    値は表示名。UNKNOWNは未知のIDを表し、生の値はCompressionId側で保持する。
    """

    NONE = "None"
    RLE = "RLE"
    LZ77 = "LZ77"
    DELTA = "Delta"
    PREDICTIVE = "Predictive"
    ZSTD = "Zstd"
    LZ4 = "LZ4"
    UNKNOWN = "Unknown"


_KIND_BY_ID: dict[int, CompressionKind] = {
    0: CompressionKind.NONE,
    1: CompressionKind.RLE,
    2: CompressionKind.LZ77,
    3: CompressionKind.DELTA,
    4: CompressionKind.PREDICTIVE,
    10: CompressionKind.ZSTD,
    11: CompressionKind.LZ4,
}


@dataclass(frozen=True)
class CompressionId:
    """圧縮方式ID

    種別と、ヘッダーに格納されていた生のバイト値の組。

    Attributes:
        kind: 圧縮方式の種別
        raw: ヘッダー上の生の値
    """

    kind: CompressionKind
    raw: int

    @classmethod
    def from_byte(cls, value: int) -> "CompressionId":
        """ヘッダーのバイト値からCompressionIdを作成する"""
        return cls(kind=_KIND_BY_ID.get(value, CompressionKind.UNKNOWN), raw=value)

    @property
    def name(self) -> str:
        """表示名を返す（未知の場合は "Unknown"）"""
        return self.kind.value

    @property
    def is_supported(self) -> bool:
        """解凍が実装されている方式かを返す"""
        return self.kind in _DECOMPRESSORS

    def describe(self) -> str:
        """診断用の説明を返す

        未知の場合は "Unknown(99)" のように生の値を含める。
        """
        if self.kind == CompressionKind.UNKNOWN:
            return f"Unknown({self.raw})"
        return self.kind.value


def _decompress_none(data: bytes, original_size: int) -> bytes:
    # 長さの突き合わせは行わない
    return bytes(data)


def _decompress_zstd(data: bytes, original_size: int) -> bytes:
    # 解凍後サイズはoriginal_sizeを超えてはならない
    dctx = zstd.ZstdDecompressor()
    try:
        content_size = zstd.frame_content_size(data)
        if content_size > original_size:
            raise DecompressionError(
                f"zstdフレームの解凍後サイズ {content_size} が"
                f"original_size {original_size} を超えています"
            )
        if original_size == 0:
            with dctx.stream_reader(data) as reader:
                result = reader.read(1)
        else:
            result = dctx.decompress(data, max_output_size=original_size)
    except zstd.ZstdError as e:
        raise DecompressionError(f"zstd解凍に失敗しました: {e}") from e
    if len(result) > original_size:
        raise DecompressionError(
            f"zstd解凍後のサイズ {len(result)} がoriginal_size {original_size} を超えています"
        )
    return result


def _decompress_lz4(data: bytes, original_size: int) -> bytes:
    # 解凍後サイズはペイロード先頭の4バイトに格納されている
    try:
        return lz4.block.decompress(data)
    except (lz4.block.LZ4BlockError, ValueError) as e:
        raise DecompressionError(f"LZ4解凍に失敗しました: {e}") from e


_DECOMPRESSORS = {
    CompressionKind.NONE: _decompress_none,
    CompressionKind.ZSTD: _decompress_zstd,
    CompressionKind.LZ4: _decompress_lz4,
}


def decompress_tile(compression: CompressionId, data: bytes, original_size: int) -> bytes:
    """タイルペイロードを解凍する

    Args:
        compression: 圧縮方式
        data: 圧縮されたペイロード
        original_size: インデックスに記録された解凍後サイズ（Zstdのみ使用）

    Returns:
        解凍されたバイト列

    Raises:
        UnsupportedCompressionError: 未実装または未知の圧縮方式の場合
        DecompressionError: 圧縮データが不正な場合
    """
    decompressor = _DECOMPRESSORS.get(compression.kind)
    if decompressor is None:
        raise UnsupportedCompressionError(compression)
    return decompressor(data, original_size)
