"""Configuration module for ctiview."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class DecodeConfig:
    """デコード設定"""

    workers: int = 1


@dataclass(frozen=True)
class OutputConfig:
    """画像出力設定"""

    format: str = "png"
    quality: int | str = "high"
    lossless_alpha: bool = True


@dataclass(frozen=True)
class CTIViewConfig:
    """ルート設定"""

    decode: DecodeConfig = field(default_factory=DecodeConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(path: Path) -> CTIViewConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        CTIViewConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return CTIViewConfig(
        decode=_merge_decode_config(data.get("decode", {}), default.decode),
        output=_merge_output_config(data.get("output", {}), default.output),
    )


def get_default_config() -> CTIViewConfig:
    """デフォルト設定を取得する"""
    return CTIViewConfig()


def _merge_decode_config(data: dict[str, Any], default: DecodeConfig) -> DecodeConfig:
    """デコード設定をマージする"""
    if not isinstance(data, dict):
        return default
    workers = data.get("workers", default.workers)
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise ConfigError(f"decode.workersは1以上の整数である必要があります: {workers!r}")
    return DecodeConfig(workers=workers)


def _merge_output_config(data: dict[str, Any], default: OutputConfig) -> OutputConfig:
    """画像出力設定をマージする"""
    if not isinstance(data, dict):
        return default
    output_format = str(data.get("format", default.format)).lower()
    if output_format not in ("png", "webp"):
        raise ConfigError(f"output.formatはpngまたはwebpである必要があります: {output_format}")
    return OutputConfig(
        format=output_format,
        quality=data.get("quality", default.quality),
        lossless_alpha=data.get("lossless_alpha", default.lossless_alpha),
    )
