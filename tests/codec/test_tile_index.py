"""タイルインデックス解析のテスト"""

import io
import struct

import pytest

from ctiview.codec.tile_index import RECORD_SIZE, TileIndexRecord, read_tile_index, tile_position
from ctiview.errors import CTIIOError


def _record(offset: int, compressed: int, original: int, crc: int) -> bytes:
    return struct.pack("<QIII", offset, compressed, original, crc)


class TestReadTileIndex:
    """read_tile_index()のテスト"""

    def test_record_size(self) -> None:
        assert RECORD_SIZE == len(_record(0, 0, 0, 0)) == 20

    def test_reads_records_in_order(self) -> None:
        """レコードがファイル順に読み取られる"""
        data = _record(2**40, 10, 64, 0xDEADBEEF) + _record(84, 20, 48, 0x01020304)
        records = read_tile_index(io.BytesIO(data), 2)

        assert records == [
            TileIndexRecord(offset=2**40, compressed_size=10, original_size=64, crc32=0xDEADBEEF),
            TileIndexRecord(offset=84, compressed_size=20, original_size=48, crc32=0x01020304),
        ]

    def test_reads_exactly_count_records(self) -> None:
        """指定数だけ読み、後続データには触れない"""
        stream = io.BytesIO(_record(1, 2, 3, 4) + b"payload")
        assert len(read_tile_index(stream, 1)) == 1
        assert stream.read() == b"payload"

    def test_zero_records(self) -> None:
        assert read_tile_index(io.BytesIO(b""), 0) == []

    def test_truncated_index(self) -> None:
        """インデックスが不完全な場合はCTIIOError"""
        data = _record(1, 2, 3, 4) + _record(5, 6, 7, 8)[:12]
        with pytest.raises(CTIIOError, match="タイルインデックス\\[1\\]"):
            read_tile_index(io.BytesIO(data), 2)


class TestTilePosition:
    """tile_position()のテスト"""

    @pytest.mark.parametrize(
        "index, tiles_x, expected",
        [
            pytest.param(0, 3, (0, 0), id="先頭"),
            pytest.param(2, 3, (2, 0), id="1行目の末尾"),
            pytest.param(3, 3, (0, 1), id="2行目の先頭"),
            pytest.param(7, 3, (1, 2), id="3行目"),
        ],
    )
    def test_row_major(self, index: int, tiles_x: int, expected: tuple[int, int]) -> None:
        assert tile_position(index, tiles_x) == expected
