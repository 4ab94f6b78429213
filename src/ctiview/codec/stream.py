"""バイナリストリーム読み取りユーティリティ

ヘッダー、タイルインデックス、タイルペイロードの読み取りで共有する
リトルエンディアン整数の読み取り関数を提供する。
"""

from typing import BinaryIO

from ctiview.errors import CTIIOError


def read_exact(stream: BinaryIO, size: int, what: str = "データ") -> bytes:
    """ストリームから指定バイト数を正確に読み取る

    Args:
        stream: 読み取り元のストリーム
        size: 読み取るバイト数
        what: エラーメッセージに含める読み取り対象の名前

    Returns:
        読み取ったバイト列

    Raises:
        CTIIOError: ストリームが途中で終端した場合
    """
    data = stream.read(size)
    if len(data) != size:
        raise CTIIOError(f"{what}が不完全です: {size}バイト必要ですが{len(data)}バイトしかありません")
    return data


def read_u8(stream: BinaryIO, what: str = "u8") -> int:
    """符号なし8ビット整数を読み取る"""
    return read_exact(stream, 1, what)[0]


def read_u16(stream: BinaryIO, what: str = "u16") -> int:
    """リトルエンディアンの符号なし16ビット整数を読み取る"""
    return int.from_bytes(read_exact(stream, 2, what), "little")


def read_u32(stream: BinaryIO, what: str = "u32") -> int:
    """リトルエンディアンの符号なし32ビット整数を読み取る"""
    return int.from_bytes(read_exact(stream, 4, what), "little")


def read_u64(stream: BinaryIO, what: str = "u64") -> int:
    """リトルエンディアンの符号なし64ビット整数を読み取る"""
    return int.from_bytes(read_exact(stream, 8, what), "little")
