"""CTIデコードエラー定義

デコード処理で発生する例外の階層を定義する。
いずれの例外もデコード全体を中断させ、部分的な結果は返さない。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ctiview.codec.compression import CompressionId


class CTIError(Exception):
    """CTIデコードエラーの基底クラス"""

    pass


class CTIIOError(CTIError, OSError):
    """ファイルが開けない、またはストリームが途中で終端した場合のエラー"""

    pass


class FormatError(CTIError, ValueError):
    """マジック不一致やタイル長の不整合など、構造的に不正なデータのエラー"""

    pass


class DecompressionError(FormatError):
    """圧縮エンジンが返したエラーをラップする"""

    pass


class UnsupportedColorTypeError(CTIError, ValueError):
    """未知のカラータイプIDのエラー

    Attributes:
        color_type: ヘッダーに格納されていたカラータイプID
    """

    def __init__(self, color_type: int) -> None:
        self.color_type = color_type
        super().__init__(f"未対応のカラータイプです: {color_type}")


class UnsupportedCompressionError(CTIError, ValueError):
    """未実装または未知の圧縮方式のエラー

    Attributes:
        compression: 対象の圧縮方式（未知の場合も生の値を保持する）
    """

    def __init__(self, compression: CompressionId) -> None:
        self.compression = compression
        super().__init__(f"未対応の圧縮方式です: {compression.describe()}")


class IntegrityError(CTIError, ValueError):
    """タイルのCRC32不一致エラー

    Attributes:
        tile_index: 不一致が発生したタイル番号
        expected: インデックスに格納されていたCRC32
        actual: 解凍後のデータから計算したCRC32
    """

    def __init__(self, tile_index: int, expected: int, actual: int) -> None:
        self.tile_index = tile_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"CRC不一致: タイル {tile_index} "
            f"(期待値 0x{expected:08X}, 実際 0x{actual:08X})"
        )
