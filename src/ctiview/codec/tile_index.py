"""タイルインデックス解析モジュール

ヘッダー直後に並ぶ固定長（20バイト）のタイルインデックスレコードを読み取る。
レコードは行優先順で、i番目のレコードはタイル座標 (i % tiles_x, i // tiles_x) に対応する。
"""

from dataclasses import dataclass
from typing import BinaryIO

from ctiview.codec.stream import read_u32, read_u64

RECORD_SIZE: int = 20
"""レコードサイズ: offset(8) + compressed_size(4) + original_size(4) + crc32(4)"""


@dataclass(frozen=True)
class TileIndexRecord:
    """タイルインデックスレコード

    Attributes:
        offset: 圧縮ペイロードのファイル先頭からの絶対オフセット
        compressed_size: 圧縮ペイロードのバイト数
        original_size: 解凍後の期待バイト数
        crc32: 解凍後データのCRC32
    """

    offset: int
    compressed_size: int
    original_size: int
    crc32: int


def read_tile_index(stream: BinaryIO, count: int) -> list[TileIndexRecord]:
    """タイルインデックスを読み取る

    Args:
        stream: ヘッダー直後に位置するストリーム
        count: レコード数（tiles_x × tiles_y）

    Returns:
        ファイル順のレコードのリスト

    Raises:
        CTIIOError: インデックスの途中でストリームが終端した場合
    """
    records: list[TileIndexRecord] = []
    for i in range(count):
        what = f"タイルインデックス[{i}]"
        records.append(
            TileIndexRecord(
                offset=read_u64(stream, what),
                compressed_size=read_u32(stream, what),
                original_size=read_u32(stream, what),
                crc32=read_u32(stream, what),
            )
        )
    return records


def tile_position(index: int, tiles_x: int) -> tuple[int, int]:
    """タイル番号からグリッド座標 (tx, ty) を求める"""
    return index % tiles_x, index // tiles_x
