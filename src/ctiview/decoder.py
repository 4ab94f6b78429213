"""CTIデコーダーモジュール

ヘッダー解析、タイルインデックス解析、タイルごとの解凍・CRC検証・逆色変換・合成を
順に実行し、画像全体を1つのラスターバッファにデコードする。

デコードは全体成功か全体失敗のどちらかで、途中でエラーが発生した場合は
部分的なバッファを返さずに例外を送出する。
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from ctiview.codec.compositor import RasterGeometry, blit_tile
from ctiview.codec.compression import CompressionId, decompress_tile
from ctiview.codec.header import MAGIC, ColorType, CTIHeader, read_header
from ctiview.codec.integrity import verify_tile
from ctiview.codec.rct import apply_inverse_rct
from ctiview.codec.stream import read_exact
from ctiview.codec.tile_index import TileIndexRecord, read_tile_index, tile_position
from ctiview.errors import CTIIOError, FormatError, UnsupportedCompressionError

if TYPE_CHECKING:
    from ctiview.logger import DecodeLogger, ProgressDisplay


class DecodePhase(Enum):
    """デコードのフェーズ"""

    TILES = "tiles"


def _open(path: str | Path) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as e:
        raise CTIIOError(f"ファイルを開けません: {path}: {e}") from e


class CTIDecoder:
    """CTI画像デコーダー

    CTIファイルを読み込み、ヘッダーとインターリーブ形式のラスターバッファを返す。
    インスタンスは状態を持たず、各デコード呼び出しは互いに独立している。

    Attributes:
        workers: タイル処理の並列ワーカー数（1の場合は逐次処理）
    """

    def __init__(
        self,
        workers: int = 1,
        logger: DecodeLogger | None = None,
        progress: ProgressDisplay | None = None,
    ) -> None:
        """CTIDecoderを初期化する

        Args:
            workers: タイル処理の並列ワーカー数
            logger: ログ出力先（オプション）
            progress: 進捗表示（オプション）
        """
        if workers < 1:
            raise ValueError(f"workersは1以上である必要があります: {workers}")
        self.workers = workers
        self._logger = logger
        self._progress = progress

    def info(self, path: str | Path) -> CTIHeader:
        """ヘッダーのみを読み込む

        タイルインデックスやタイルデータは読まないため、
        タイル部分が欠損・破損したファイルでも成功する。

        Args:
            path: CTIファイルのパス

        Returns:
            ヘッダー情報

        Raises:
            CTIIOError: ファイルが開けない、またはヘッダーが不完全な場合
        """
        with _open(path) as f:
            return read_header(f)

    def decode_file(self, path: str | Path) -> tuple[CTIHeader, bytes]:
        """CTIファイル全体をデコードする

        Args:
            path: CTIファイルのパス

        Returns:
            (ヘッダー, ラスターバッファ) のタプル。
            バッファは width × height × bpp バイトの行優先インターリーブ形式

        Raises:
            CTIIOError: ファイルが開けない、または読み取り中に終端した場合
            FormatError: マジック不一致やタイル長の不整合の場合
            UnsupportedColorTypeError: 未知のカラータイプの場合
            UnsupportedCompressionError: 未実装または未知の圧縮方式の場合
            IntegrityError: タイルのCRC32が一致しない場合
        """
        if self._logger:
            self._logger.verbose(f"デコード開始: {path}")
        with _open(path) as f:
            return self.decode_stream(f)

    def decode_stream(self, stream: BinaryIO) -> tuple[CTIHeader, bytes]:
        """シーク可能なストリームからデコードする

        ヘッダー、インデックス、タイルの読み取りはすべて同じストリームを使う。

        Args:
            stream: 先頭に位置するシーク可能なバイナリストリーム

        Returns:
            (ヘッダー, ラスターバッファ) のタプル
        """
        header = read_header(stream)
        if header.magic != MAGIC:
            raise FormatError(f"マジックが一致しません: {header.magic!r}")

        color_type = ColorType.from_id(header.color_type)
        compression = header.compression_id
        if not compression.is_supported:
            raise UnsupportedCompressionError(compression)
        if header.tile_size == 0 and header.tile_count > 0:
            raise FormatError("tile_sizeが0です")

        records = read_tile_index(stream, header.tile_count)
        geometry = RasterGeometry(
            width=header.width,
            height=header.height,
            tile_size=header.tile_size,
            bpp=color_type.bytes_per_pixel,
        )
        use_rct = header.has_rct and color_type in (ColorType.RGB8, ColorType.RGB16)

        if self._logger:
            self._logger.debug(
                f"{header.width}x{header.height} {color_type.name} "
                f"{compression.describe()} tiles={header.tiles_x}x{header.tiles_y} "
                f"tile_size={header.tile_size} rct={use_rct}"
            )

        out = bytearray(geometry.buffer_size)
        if self._progress:
            self._progress.start(DecodePhase.TILES, len(records))

        try:
            if self.workers > 1 and len(records) > 1:
                self._decode_parallel(
                    stream, records, out, geometry, header, color_type, compression, use_rct
                )
            else:
                for i, record in enumerate(records):
                    payload = self._read_payload(stream, i, record)
                    self._process_tile(
                        i, record, payload, out, geometry, header, color_type, compression, use_rct
                    )
                    if self._progress:
                        self._progress.update(i + 1)
        except Exception as e:
            if self._progress:
                self._progress.finish(False, str(e))
            raise

        if self._progress:
            self._progress.finish(True)
        return header, bytes(out)

    def _read_payload(self, stream: BinaryIO, index: int, record: TileIndexRecord) -> bytes:
        """タイルの圧縮ペイロードを読み取る"""
        try:
            stream.seek(record.offset)
        except (OSError, OverflowError, ValueError) as e:
            raise CTIIOError(f"タイル {index} のオフセットにシークできません: {e}") from e
        return read_exact(stream, record.compressed_size, f"タイル {index} のペイロード")

    def _decode_parallel(
        self,
        stream: BinaryIO,
        records: list[TileIndexRecord],
        out: bytearray,
        geometry: RasterGeometry,
        header: CTIHeader,
        color_type: ColorType,
        compression: CompressionId,
        use_rct: bool,
    ) -> None:
        """タイルを並列に処理する

        ストリームの読み取りは先に逐次で済ませ、解凍以降をワーカーに分配する。
        各タイルの出力先矩形は互いに重ならないため、出力バッファはロック不要。
        """
        payloads = [self._read_payload(stream, i, r) for i, r in enumerate(records)]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [
                executor.submit(
                    self._process_tile,
                    i,
                    record,
                    payload,
                    out,
                    geometry,
                    header,
                    color_type,
                    compression,
                    use_rct,
                )
                for i, (record, payload) in enumerate(zip(records, payloads, strict=True))
            ]
            completed = 0
            for future in as_completed(futures):
                try:
                    future.result()
                except Exception:
                    for pending in futures:
                        pending.cancel()
                    raise
                completed += 1
                if self._progress:
                    self._progress.update(completed)

    def _process_tile(
        self,
        index: int,
        record: TileIndexRecord,
        payload: bytes,
        out: bytearray,
        geometry: RasterGeometry,
        header: CTIHeader,
        color_type: ColorType,
        compression: CompressionId,
        use_rct: bool,
    ) -> None:
        """1タイルを解凍・検証・逆変換して出力バッファに合成する"""
        tile: bytes | bytearray = decompress_tile(compression, payload, record.original_size)
        verify_tile(index, tile, record.crc32)

        if use_rct:
            tile = bytearray(tile)
            apply_inverse_rct(color_type, tile)

        position = tile_position(index, header.tiles_x)
        if not blit_tile(out, tile, geometry, *position):
            if self._logger:
                self._logger.warning(f"タイル {index} {position} は画像範囲外のためスキップしました")
            return

        if self._logger:
            self._logger.log_tile(index, position, record.compressed_size, len(tile))
            self._logger.debug(f"  offset={record.offset} crc32=0x{record.crc32:08X}")


def read_info(path: str | Path) -> CTIHeader:
    """CTIファイルのヘッダーのみを読み込む"""
    return CTIDecoder().info(path)


def decode(path: str | Path, workers: int = 1) -> tuple[CTIHeader, bytes]:
    """CTIファイル全体をデコードする"""
    return CTIDecoder(workers=workers).decode_file(path)
