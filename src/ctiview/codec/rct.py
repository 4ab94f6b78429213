"""可逆色変換（RCT）の逆変換モジュール

解凍後のRGBタイルに対して、(Y, Cb, Cr) から (R, G, B) への逆変換をインプレースで行う。
Yは符号なし、Cb/Crはチャンネル幅の符号付き整数として解釈する。

    g = Y - ((Cb + Cr) >> 2)
    r = Cr + g
    b = Cb + g

結果はチャンネルの表現範囲にクランプする。
"""

import struct

from ctiview.codec.header import ColorType

_RGB16_PIXEL = struct.Struct("<Hhh")
_RGB16_OUT = struct.Struct("<HHH")


def _clamp(value: int, upper: int) -> int:
    if value < 0:
        return 0
    if value > upper:
        return upper
    return value


def inverse_rct_rgb8(buf: bytearray) -> None:
    """RGB8タイルに逆RCTを適用する

    Args:
        buf: 3バイト/ピクセルのタイルデータ（インプレースで書き換える）
    """
    for pos in range(0, len(buf) - len(buf) % 3, 3):
        y = buf[pos]
        cb = buf[pos + 1]
        cr = buf[pos + 2]
        # 符号付き8ビットとして解釈
        if cb >= 0x80:
            cb -= 0x100
        if cr >= 0x80:
            cr -= 0x100

        g = y - ((cb + cr) >> 2)
        r = cr + g
        b = cb + g

        buf[pos] = _clamp(r, 0xFF)
        buf[pos + 1] = _clamp(g, 0xFF)
        buf[pos + 2] = _clamp(b, 0xFF)


def inverse_rct_rgb16(buf: bytearray) -> None:
    """RGB16タイルに逆RCTを適用する

    各サンプルはリトルエンディアンの16ビット。

    Args:
        buf: 6バイト/ピクセルのタイルデータ（インプレースで書き換える）
    """
    for pos in range(0, len(buf) - len(buf) % 6, 6):
        y, cb, cr = _RGB16_PIXEL.unpack_from(buf, pos)

        g = y - ((cb + cr) >> 2)
        r = cr + g
        b = cb + g

        _RGB16_OUT.pack_into(buf, pos, _clamp(r, 0xFFFF), _clamp(g, 0xFFFF), _clamp(b, 0xFFFF))


def apply_inverse_rct(color_type: ColorType, buf: bytearray) -> bool:
    """カラータイプに応じて逆RCTを適用する

    Args:
        color_type: タイルのカラータイプ
        buf: タイルデータ（インプレースで書き換える）

    Returns:
        変換を適用した場合True（RGB8/RGB16以外は何もしない）
    """
    if color_type == ColorType.RGB8:
        inverse_rct_rgb8(buf)
        return True
    if color_type == ColorType.RGB16:
        inverse_rct_rgb16(buf)
        return True
    return False
