"""テスト共通フィクスチャ

CTIファイルをメモリ上で組み立てるビルダーを提供する。
"""

from __future__ import annotations

import struct
import zlib
from collections.abc import Callable, Sequence
from pathlib import Path

import lz4.block
import pytest
import zstandard as zstd

HEADER_FORMAT = "<4sHHIIIIIBBB"
RESERVED = bytes(range(0xA0, 0xA0 + 33))


def pack_header(
    *,
    magic: bytes = b"CTI1",
    version: int = 1,
    flags: int = 0,
    width: int = 4,
    height: int = 4,
    tile_size: int = 4,
    tiles_x: int = 1,
    tiles_y: int = 1,
    color_type: int = 4,
    compression: int = 0,
    quality: int = 90,
    reserved: bytes = RESERVED,
) -> bytes:
    """64バイトのヘッダーを生成する（予約領域はあえて0以外で埋める）"""
    return (
        struct.pack(
            HEADER_FORMAT,
            magic,
            version,
            flags,
            width,
            height,
            tile_size,
            tiles_x,
            tiles_y,
            color_type,
            compression,
            quality,
        )
        + reserved
    )


def compress(compression: int, data: bytes) -> bytes:
    """テスト用にタイルを圧縮する"""
    if compression == 10:
        return zstd.ZstdCompressor().compress(data)
    if compression == 11:
        return lz4.block.compress(data, store_size=True)
    return data


def forward_rct_rgb8(pixels: bytes) -> bytes:
    """RGB8の順方向RCT（差分が符号付き8ビットに収まる値のみ対象）"""
    out = bytearray()
    for i in range(0, len(pixels), 3):
        r, g, b = pixels[i], pixels[i + 1], pixels[i + 2]
        cb = b - g
        cr = r - g
        y = g + ((cb + cr) >> 2)
        out += bytes([y & 0xFF, cb & 0xFF, cr & 0xFF])
    return bytes(out)


def forward_rct_rgb16(pixels: bytes) -> bytes:
    """RGB16の順方向RCT"""
    out = bytearray()
    for r, g, b in struct.iter_unpack("<HHH", pixels):
        cb = b - g
        cr = r - g
        y = g + ((cb + cr) >> 2)
        out += struct.pack("<Hhh", y, cb, cr)
    return bytes(out)


def build_cti(
    tiles: Sequence[bytes],
    *,
    checksums: Sequence[int] | None = None,
    original_sizes: Sequence[int] | None = None,
    **header_fields: int | bytes,
) -> bytes:
    """CTIファイル全体を組み立てる

    Args:
        tiles: 解凍後のタイルデータ（行優先順）
        checksums: CRC32の上書き（Noneの場合はzlib.crc32で計算）
        original_sizes: original_sizeの上書き
        **header_fields: pack_headerに渡すヘッダーフィールド

    Returns:
        CTIファイルのバイト列
    """
    compression = int(header_fields.get("compression", 0))
    header = pack_header(**header_fields)  # type: ignore[arg-type]
    payloads = [compress(compression, tile) for tile in tiles]

    offset = len(header) + 20 * len(tiles)
    index = bytearray()
    for i, (tile, payload) in enumerate(zip(tiles, payloads, strict=True)):
        crc = checksums[i] if checksums is not None else zlib.crc32(tile)
        size = original_sizes[i] if original_sizes is not None else len(tile)
        index += struct.pack("<QIII", offset, len(payload), size, crc)
        offset += len(payload)

    return header + bytes(index) + b"".join(payloads)


def split_tiles(
    raster: bytes, width: int, height: int, tile_size: int, bpp: int
) -> list[bytes]:
    """ラスターをtile_size × tile_sizeのタイル（端はゼロ埋め）に分割する"""
    tiles_x = (width + tile_size - 1) // tile_size
    tiles_y = (height + tile_size - 1) // tile_size
    tiles: list[bytes] = []
    for ty in range(tiles_y):
        for tx in range(tiles_x):
            tile = bytearray(tile_size * tile_size * bpp)
            for row in range(tile_size):
                y = ty * tile_size + row
                if y >= height:
                    break
                x0 = tx * tile_size
                w = min(tile_size, width - x0)
                src = (y * width + x0) * bpp
                tile[row * tile_size * bpp : row * tile_size * bpp + w * bpp] = raster[
                    src : src + w * bpp
                ]
            tiles.append(bytes(tile))
    return tiles


def gradient(width: int, height: int, bpp: int) -> bytes:
    """テスト用の決定的なラスターを生成する"""
    return bytes(
        (x * 7 + y * 13 + c * 31) & 0xFF
        for y in range(height)
        for x in range(width)
        for c in range(bpp)
    )


@pytest.fixture
def write_cti(tmp_path: Path) -> Callable[..., Path]:
    """CTIファイルを一時ディレクトリに書き出すファクトリ"""

    def _write(
        tiles: Sequence[bytes], name: str = "image.cti", **kwargs: object
    ) -> Path:
        path = tmp_path / name
        path.write_bytes(build_cti(tiles, **kwargs))  # type: ignore[arg-type]
        return path

    return _write
