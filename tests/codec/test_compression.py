"""タイル解凍のテスト"""

import re

import lz4.block
import pytest
import zstandard as zstd

from ctiview.codec.compression import CompressionId, CompressionKind, decompress_tile
from ctiview.errors import DecompressionError, FormatError, UnsupportedCompressionError

SAMPLE = bytes(range(256)) * 4


class TestCompressionId:
    """CompressionIdのテスト"""

    @pytest.mark.parametrize(
        "value, kind, description",
        [
            pytest.param(0, CompressionKind.NONE, "None", id="None"),
            pytest.param(1, CompressionKind.RLE, "RLE", id="RLE"),
            pytest.param(2, CompressionKind.LZ77, "LZ77", id="LZ77"),
            pytest.param(3, CompressionKind.DELTA, "Delta", id="Delta"),
            pytest.param(4, CompressionKind.PREDICTIVE, "Predictive", id="Predictive"),
            pytest.param(10, CompressionKind.ZSTD, "Zstd", id="Zstd"),
            pytest.param(11, CompressionKind.LZ4, "LZ4", id="LZ4"),
            pytest.param(99, CompressionKind.UNKNOWN, "Unknown(99)", id="未知の値"),
            pytest.param(5, CompressionKind.UNKNOWN, "Unknown(5)", id="予約外の小さな値"),
        ],
    )
    def test_from_byte(self, value: int, kind: CompressionKind, description: str) -> None:
        compression = CompressionId.from_byte(value)
        assert compression.kind == kind
        assert compression.raw == value
        assert compression.describe() == description

    def test_unknown_name(self) -> None:
        """未知の値のnameは生の値を含まない"""
        assert CompressionId.from_byte(200).name == "Unknown"

    @pytest.mark.parametrize(
        "value, expected",
        [(0, True), (10, True), (11, True), (1, False), (4, False), (99, False)],
    )
    def test_is_supported(self, value: int, expected: bool) -> None:
        assert CompressionId.from_byte(value).is_supported is expected


class TestDecompressTile:
    """decompress_tile()のテスト"""

    def test_none_returns_input(self) -> None:
        """Noneは入力をそのまま返し、original_sizeとの突き合わせはしない"""
        result = decompress_tile(CompressionId.from_byte(0), SAMPLE, 12345)
        assert result == SAMPLE

    def test_zstd(self) -> None:
        payload = zstd.ZstdCompressor().compress(SAMPLE)
        result = decompress_tile(CompressionId.from_byte(10), payload, len(SAMPLE))
        assert result == SAMPLE

    def test_zstd_without_content_size(self) -> None:
        """フレームに解凍後サイズがない場合はoriginal_sizeを上限として使う"""
        payload = zstd.ZstdCompressor(write_content_size=False).compress(SAMPLE)
        result = decompress_tile(CompressionId.from_byte(10), payload, len(SAMPLE))
        assert result == SAMPLE

    @pytest.mark.parametrize(
        "write_content_size",
        [
            pytest.param(True, id="異常系: フレームに解凍後サイズあり"),
            pytest.param(False, id="異常系: フレームに解凍後サイズなし"),
        ],
    )
    def test_zstd_larger_than_original_size(self, write_content_size: bool) -> None:
        """フレームの中身がoriginal_sizeより大きい場合はDecompressionError"""
        payload = zstd.ZstdCompressor(write_content_size=write_content_size).compress(SAMPLE)
        with pytest.raises(DecompressionError, match="zstd"):
            decompress_tile(CompressionId.from_byte(10), payload, 64)

    @pytest.mark.parametrize(
        "write_content_size",
        [
            pytest.param(True, id="正常系: フレームに解凍後サイズあり"),
            pytest.param(False, id="正常系: フレームに解凍後サイズなし"),
        ],
    )
    def test_zstd_empty_tile(self, write_content_size: bool) -> None:
        """original_sizeが0の空タイルは空のバイト列になる"""
        payload = zstd.ZstdCompressor(write_content_size=write_content_size).compress(b"")
        assert decompress_tile(CompressionId.from_byte(10), payload, 0) == b""

    def test_zstd_nonempty_with_zero_original_size(self) -> None:
        payload = zstd.ZstdCompressor(write_content_size=False).compress(SAMPLE)
        with pytest.raises(DecompressionError, match="original_size"):
            decompress_tile(CompressionId.from_byte(10), payload, 0)

    def test_zstd_corrupt(self) -> None:
        """不正なzstdデータはDecompressionErrorにラップされる"""
        with pytest.raises(DecompressionError, match="zstd") as exc_info:
            decompress_tile(CompressionId.from_byte(10), b"not a zstd frame", 64)
        assert isinstance(exc_info.value.__cause__, zstd.ZstdError)

    def test_lz4_uses_embedded_size(self) -> None:
        """LZ4はペイロード内の解凍後サイズを使い、original_sizeは無視する"""
        payload = lz4.block.compress(SAMPLE, store_size=True)
        result = decompress_tile(CompressionId.from_byte(11), payload, 0)
        assert result == SAMPLE

    def test_lz4_corrupt(self) -> None:
        with pytest.raises(DecompressionError, match="LZ4"):
            decompress_tile(CompressionId.from_byte(11), b"\x00\x01\x00\x00\xff\xff", 256)

    def test_decompression_error_is_format_error(self) -> None:
        with pytest.raises(FormatError):
            decompress_tile(CompressionId.from_byte(11), b"\x00\x01\x00\x00\xff\xff", 256)

    @pytest.mark.parametrize(
        "value, name",
        [
            pytest.param(1, "RLE", id="異常系: RLE"),
            pytest.param(2, "LZ77", id="異常系: LZ77"),
            pytest.param(3, "Delta", id="異常系: Delta"),
            pytest.param(4, "Predictive", id="異常系: Predictive"),
            pytest.param(99, "Unknown(99)", id="異常系: 未知の値"),
        ],
    )
    def test_unsupported(self, value: int, name: str) -> None:
        """未実装・未知の方式はUnsupportedCompressionError"""
        with pytest.raises(UnsupportedCompressionError, match=re.escape(name)) as exc_info:
            decompress_tile(CompressionId.from_byte(value), SAMPLE, len(SAMPLE))
        assert exc_info.value.compression.raw == value
