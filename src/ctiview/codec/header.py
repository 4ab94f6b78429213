"""CTIヘッダー解析モジュール

ファイル先頭の固定長ヘッダー（64バイト）を読み取る。
マジックやカラータイプの検証は行わないため、不正なファイルに対しても
メタ情報の確認に利用できる。
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO

from ctiview.codec.compression import CompressionId
from ctiview.codec.stream import read_exact, read_u8, read_u16, read_u32
from ctiview.errors import UnsupportedColorTypeError

MAGIC: bytes = b"CTI1"
"""CTI形式のマジックバイト"""

HEADER_SIZE: int = 64
"""ヘッダーサイズ: マジック(4) + version(2) + flags(2) + u32×5(20) + u8×3(3) + 予約(33)"""

RESERVED_SIZE: int = 33
"""予約領域のサイズ（内容は0とは限らない）"""

FLAG_RCT: int = 0x0001
"""可逆色変換が適用されていることを示すフラグビット"""


class ColorType(IntEnum):
    """カラータイプ

    ピクセル形式を表す列挙型。値はヘッダーに格納されるIDと一致する。
    """

    L8 = 1
    L16 = 2
    RGB8 = 3
    RGBA8 = 4
    RGB16 = 5

    @property
    def bytes_per_pixel(self) -> int:
        """1ピクセルあたりのバイト数を返す"""
        return _BYTES_PER_PIXEL[self]

    @classmethod
    def from_id(cls, value: int) -> "ColorType":
        """ヘッダーのIDからカラータイプを取得する

        Args:
            value: カラータイプID

        Returns:
            対応するカラータイプ

        Raises:
            UnsupportedColorTypeError: 未知のIDの場合
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedColorTypeError(value) from e


_BYTES_PER_PIXEL: dict[ColorType, int] = {
    ColorType.L8: 1,
    ColorType.L16: 2,
    ColorType.RGB8: 3,
    ColorType.RGBA8: 4,
    ColorType.RGB16: 6,
}


@dataclass(frozen=True)
class CTIHeader:
    """CTIヘッダー情報

    CTIファイルのヘッダーから読み取った情報を保持する不変データクラス。
    color_type と compression は生の値のまま保持する。

    Attributes:
        magic: マジックバイト（4バイト）
        version: フォーマットバージョン
        flags: フラグビットマップ（bit0 = 可逆色変換）
        width: 画像の幅（ピクセル）
        height: 画像の高さ（ピクセル）
        tile_size: タイルの一辺の長さ（ピクセル）
        tiles_x: 横方向のタイル数
        tiles_y: 縦方向のタイル数
        color_type: カラータイプID
        compression: 圧縮方式ID
        quality: 品質値（デコードでは使用しない）
    """

    magic: bytes
    version: int
    flags: int
    width: int
    height: int
    tile_size: int
    tiles_x: int
    tiles_y: int
    color_type: int
    compression: int
    quality: int

    @property
    def tile_count(self) -> int:
        """タイルの総数を返す"""
        return self.tiles_x * self.tiles_y

    @property
    def has_rct(self) -> bool:
        """可逆色変換フラグが立っているかを返す"""
        return bool(self.flags & FLAG_RCT)

    @property
    def compression_id(self) -> CompressionId:
        """圧縮方式IDをCompressionIdとして返す"""
        return CompressionId.from_byte(self.compression)


def read_header(stream: BinaryIO) -> CTIHeader:
    """ストリームからヘッダーを読み取る

    予約領域まで読み進め、タイルデータには触れない。

    Args:
        stream: ファイル先頭に位置するストリーム

    Returns:
        読み取ったヘッダー情報

    Raises:
        CTIIOError: ヘッダーの途中でストリームが終端した場合
    """
    magic = read_exact(stream, 4, "マジック")
    version = read_u16(stream, "version")
    flags = read_u16(stream, "flags")
    width = read_u32(stream, "width")
    height = read_u32(stream, "height")
    tile_size = read_u32(stream, "tile_size")
    tiles_x = read_u32(stream, "tiles_x")
    tiles_y = read_u32(stream, "tiles_y")
    color_type = read_u8(stream, "color_type")
    compression = read_u8(stream, "compression")
    quality = read_u8(stream, "quality")
    # 予約領域は読み捨てる
    read_exact(stream, RESERVED_SIZE, "予約領域")

    return CTIHeader(
        magic=magic,
        version=version,
        flags=flags,
        width=width,
        height=height,
        tile_size=tile_size,
        tiles_x=tiles_x,
        tiles_y=tiles_y,
        color_type=color_type,
        compression=compression,
        quality=quality,
    )
