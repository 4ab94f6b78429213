"""タイル合成モジュール

解凍・検証済みのタイルを出力ラスターの対応する矩形にコピーする。
画像端のタイルは画像範囲にクリップされ、範囲外の行・列はコピーしない。
"""

from dataclasses import dataclass

from ctiview.errors import FormatError


@dataclass(frozen=True)
class RasterGeometry:
    """出力ラスターの形状

    Attributes:
        width: 画像の幅（ピクセル）
        height: 画像の高さ（ピクセル）
        tile_size: タイルの一辺の長さ（ピクセル）
        bpp: 1ピクセルあたりのバイト数
    """

    width: int
    height: int
    tile_size: int
    bpp: int

    @property
    def buffer_size(self) -> int:
        """出力バッファのバイト数を返す"""
        return self.width * self.height * self.bpp

    def tile_rect(self, tx: int, ty: int) -> tuple[int, int, int, int]:
        """タイルの出力先矩形を返す

        Returns:
            (x0, y0, 有効幅, 有効高さ)。画像外のタイルは幅または高さが0になる
        """
        x0 = tx * self.tile_size
        y0 = ty * self.tile_size
        eff_w = max(0, min(self.tile_size, self.width - x0))
        eff_h = max(0, min(self.tile_size, self.height - y0))
        return x0, y0, eff_w, eff_h


def _source_stride(tile_len: int, geometry: RasterGeometry, eff_w: int, eff_h: int) -> int:
    """タイルバッファの行ストライドを決定する

    タイル全体（tile_size × tile_size）が格納されている場合はtile_size単位、
    クリップ済みの矩形のみが格納されている場合は有効幅単位とする。

    Raises:
        FormatError: どちらの長さとも一致しない場合
    """
    bpp = geometry.bpp
    full_stride = geometry.tile_size * bpp
    if tile_len == full_stride * geometry.tile_size:
        return full_stride
    if tile_len == eff_w * eff_h * bpp:
        return eff_w * bpp
    raise FormatError(
        f"タイルデータ長が不正です: {tile_len}バイト "
        f"(期待値 {full_stride * geometry.tile_size} または {eff_w * eff_h * bpp})"
    )


def blit_tile(
    out: bytearray | memoryview,
    tile: bytes | bytearray,
    geometry: RasterGeometry,
    tx: int,
    ty: int,
) -> bool:
    """タイルを出力バッファにコピーする

    Args:
        out: 出力バッファ（width × height × bpp バイト）
        tile: 解凍済みのタイルデータ
        geometry: 出力ラスターの形状
        tx: タイルの列番号
        ty: タイルの行番号

    Returns:
        コピーした場合True、タイルが画像範囲外でスキップした場合False

    Raises:
        FormatError: タイルデータ長が形状と一致しない場合
    """
    x0, y0, eff_w, eff_h = geometry.tile_rect(tx, ty)
    if eff_w == 0 or eff_h == 0:
        return False

    bpp = geometry.bpp
    src_stride = _source_stride(len(tile), geometry, eff_w, eff_h)
    dst_stride = geometry.width * bpp
    row_len = eff_w * bpp

    for row in range(eff_h):
        src = row * src_stride
        dst = (y0 + row) * dst_stride + x0 * bpp
        out[dst : dst + row_len] = tile[src : src + row_len]
    return True
