"""タイル整合性検証モジュール

解凍後のタイルデータに対するCRC32（反射型、多項式0xEDB88320）を計算し、
インデックスに記録された値と照合する。
"""

from ctiview.errors import IntegrityError

POLYNOMIAL: int = 0xEDB88320
"""反射型CRC32の生成多項式"""


def _build_table() -> tuple[int, ...]:
    table = []
    for i in range(256):
        c = i
        for _ in range(8):
            c = POLYNOMIAL ^ (c >> 1) if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


CRC32_TABLE: tuple[int, ...] = _build_table()
"""256エントリのルックアップテーブル"""


def crc32(data: bytes) -> int:
    """CRC32を計算する

    初期値0xFFFFFFFF、最終的にビット反転する標準CRC32。

    Args:
        data: 対象のバイト列

    Returns:
        32ビットのCRC値
    """
    crc = 0xFFFFFFFF
    table = CRC32_TABLE
    for byte in data:
        crc = (crc >> 8) ^ table[(crc ^ byte) & 0xFF]
    return crc ^ 0xFFFFFFFF


def verify_tile(tile_index: int, data: bytes, expected: int) -> None:
    """解凍後のタイルデータのCRC32を検証する

    Args:
        tile_index: タイル番号（エラーメッセージ用）
        data: 解凍後のタイルデータ
        expected: インデックスに記録されたCRC32

    Raises:
        IntegrityError: CRC32が一致しない場合
    """
    actual = crc32(data)
    if actual != expected:
        raise IntegrityError(tile_index, expected, actual)
