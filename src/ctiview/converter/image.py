"""画像変換モジュール

デコード済みのCTIラスターをPIL.Imageに変換し、PNG/WebP形式で保存する機能を提供する。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from PIL import Image

from ctiview.codec.header import ColorType, CTIHeader
from ctiview.converter.base import BaseConverter, ConversionResult, ConversionStatus
from ctiview.decoder import CTIDecoder


class QualityPreset(Enum):
    """WebP変換時の品質プリセット"""

    HIGH = 95
    MEDIUM = 85
    LOW = 70


class OutputFormat(Enum):
    """画像出力形式"""

    PNG = "png"
    WEBP = "webp"


def color_name(color_type: int) -> str:
    """カラータイプIDの表示名を返す（未知の場合は "Unknown"）"""
    try:
        return ColorType(color_type).name
    except ValueError:
        return "Unknown"


def describe_header(header: CTIHeader) -> list[tuple[str, str]]:
    """ヘッダー情報を表示用の (項目, 値) のリストに変換する

    Args:
        header: CTIヘッダー

    Returns:
        表示用の行のリスト
    """
    return [
        ("Version", str(header.version)),
        ("Size", f"{header.width} x {header.height}"),
        ("Tiles", f"{header.tiles_x} x {header.tiles_y}  (tile={header.tile_size})"),
        ("ColorType", f"{header.color_type} ({color_name(header.color_type)})"),
        ("Compression", f"{header.compression} ({header.compression_id.describe()})"),
        ("Quality", str(header.quality)),
        ("Flags", f"0x{header.flags:04X}  (RCT:{str(header.has_rct).lower()})"),
    ]


def _high_bytes(raster: bytes) -> bytes:
    """リトルエンディアン16ビットサンプルの上位バイトのみを取り出す"""
    return raster[1::2]


def raster_to_image(header: CTIHeader, raster: bytes, *, keep_16bit: bool = True) -> Image.Image:
    """ラスターバッファからPIL Imageを作成する

    16ビットRGBはPILに対応するモードがないため、各サンプルの上位バイトで8ビットに落とす。
    16ビットグレースケールはkeep_16bitがTrueの場合 "I;16" モードのまま保持する。

    Args:
        header: デコードしたCTIヘッダー
        raster: デコード結果のラスターバッファ
        keep_16bit: L16を16ビットのまま保持するか

    Returns:
        作成されたPIL Imageオブジェクト

    Raises:
        UnsupportedColorTypeError: 未知のカラータイプの場合
    """
    color_type = ColorType.from_id(header.color_type)
    size = (header.width, header.height)

    if color_type == ColorType.L8:
        return Image.frombytes("L", size, raster)
    if color_type == ColorType.L16:
        if keep_16bit:
            return Image.frombytes("I;16", size, raster)
        return Image.frombytes("L", size, _high_bytes(raster))
    if color_type == ColorType.RGB8:
        return Image.frombytes("RGB", size, raster)
    if color_type == ColorType.RGBA8:
        return Image.frombytes("RGBA", size, raster)
    # RGB16
    return Image.frombytes("RGB", size, _high_bytes(raster))


class CTIImageConverter(BaseConverter):
    """CTI画像変換クラス

    CTI画像をデコードしてPNG/WebP形式で保存する。

    Attributes:
        output_format: 出力形式（PNGまたはWebP）
        quality: WebP出力時の品質値（0-100）
        lossless_alpha: アルファチャンネルをロスレスで保存するか
    """

    def __init__(
        self,
        output_format: OutputFormat = OutputFormat.PNG,
        quality: QualityPreset | int = QualityPreset.HIGH,
        lossless_alpha: bool = True,
        decoder: CTIDecoder | None = None,
    ) -> None:
        """CTIImageConverterを初期化する

        Args:
            output_format: 出力形式
            quality: WebP品質（プリセットまたは0-100の整数）
            lossless_alpha: アルファチャンネルをロスレスで保存するか（WebP時のみ使用）
            decoder: 使用するデコーダー（Noneの場合は逐次デコーダー）
        """
        self._output_format = output_format
        if isinstance(quality, QualityPreset):
            self._quality = quality.value
        else:
            self._quality = quality
        self._lossless_alpha = lossless_alpha
        self._decoder = decoder or CTIDecoder()

    @property
    def output_format(self) -> OutputFormat:
        """出力形式を返す"""
        return self._output_format

    @property
    def quality(self) -> int:
        """WebP品質値を返す"""
        return self._quality

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return (".cti",)

    def can_convert(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.supported_extensions

    def get_output_extension(self, source_path: Path) -> str | None:
        return f".{self._output_format.value}"

    def convert(self, source: Path, dest: Path) -> ConversionResult:
        """CTI画像をデコードして指定形式で保存する

        Args:
            source: 変換元CTIファイルのパス
            dest: 変換先ファイルのパス

        Returns:
            変換結果を表すConversionResultオブジェクト

        Raises:
            FileNotFoundError: 変換元ファイルが存在しない場合
            CTIError: デコードに失敗した場合
        """
        self._validate_source(source)
        bytes_before = self._get_file_size(source)

        header, raster = self._decoder.decode_file(source)
        keep_16bit = self._output_format == OutputFormat.PNG
        image = raster_to_image(header, raster, keep_16bit=keep_16bit)

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if self._output_format == OutputFormat.PNG:
                image.save(dest, "PNG")
            else:
                self._save_as_webp(image, dest)
        finally:
            image.close()

        return ConversionResult(
            source_path=source,
            dest_path=dest,
            status=ConversionStatus.SUCCESS,
            header=header,
            bytes_before=bytes_before,
            bytes_after=self._get_file_size(dest),
        )

    def _save_as_webp(self, image: Image.Image, dest: Path) -> None:
        """画像をWebP形式で保存する"""
        if image.mode == "RGBA":
            image.save(dest, "WEBP", quality=self._quality, lossless=self._lossless_alpha)
            return
        if image.mode != "RGB":
            image = image.convert("RGB")
        image.save(dest, "WEBP", quality=self._quality)
