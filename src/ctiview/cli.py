"""CLI entry point for ctiview."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ctiview import __version__
from ctiview.config import ConfigError, CTIViewConfig, get_default_config, load_config
from ctiview.converter.image import (
    CTIImageConverter,
    OutputFormat,
    QualityPreset,
    describe_header,
)
from ctiview.decoder import CTIDecoder
from ctiview.errors import CTIError, IntegrityError
from ctiview.logger import DecodeLogger, LogConfig, VerboseLevel
from ctiview.types import ExitCode

app = typer.Typer(help="CTIタイル圧縮画像をデコード・検証するCLIツール")
console = Console()


def _exit_code_for(error: CTIError) -> ExitCode:
    """例外の種類に応じた終了コードを返す"""
    if isinstance(error, IntegrityError):
        return ExitCode.INTEGRITY_ERROR
    return ExitCode.ERROR


def _check_input(input_path: Path) -> None:
    if not input_path.exists():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)
    if input_path.is_dir():
        console.print(f"[red]Error: ファイルを指定してください: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)


def _resolve_quality(quality: int | str) -> QualityPreset | int:
    """品質指定（プリセット名または0-100の整数）を解決する"""
    if isinstance(quality, int):
        value = quality
    elif quality.isdigit():
        value = int(quality)
    else:
        try:
            return QualityPreset[quality.upper()]
        except KeyError:
            raise ValueError(f"不正な品質指定です: {quality}") from None
    if not 0 <= value <= 100:
        raise ValueError(f"品質は0-100の範囲で指定してください: {value}")
    return value


def _load(config_path: Path | None) -> CTIViewConfig:
    if config_path is None:
        return get_default_config()
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e


@app.command()
def info(
    input_path: Annotated[Path, typer.Argument(help="CTIファイルパス")],
) -> None:
    """ヘッダー情報を表示する"""
    _check_input(input_path)

    try:
        header = CTIDecoder().info(input_path)
    except CTIError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(_exit_code_for(e)) from e

    table = Table(title="CTI Info")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    for name, value in describe_header(header):
        table.add_row(name, value)

    console.print(table)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def decode(
    input_path: Annotated[Path, typer.Argument(help="CTIファイルパス")],
    output: Annotated[Path | None, typer.Option("-o", "--output", help="出力画像パス")] = None,
    output_format: Annotated[
        str | None, typer.Option("--format", help="出力形式（png/webp）")
    ] = None,
    quality: Annotated[str | None, typer.Option(help="WebP品質（high/medium/low/0-100）")] = None,
    workers: Annotated[int | None, typer.Option(min=1, help="並列ワーカー数")] = None,
    config: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """CTI画像をデコードしてPNG/WebPで保存する"""
    _check_input(input_path)
    settings = _load(config)

    format_name = (output_format or settings.output.format).lower()
    try:
        fmt = OutputFormat(format_name)
        preset = _resolve_quality(quality if quality is not None else settings.output.quality)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    log_config = LogConfig(
        verbose_level=VerboseLevel(min(verbose, VerboseLevel.DEBUG)),
        log_file=log_file,
    )
    with DecodeLogger(log_config) as logger:
        decoder = CTIDecoder(
            workers=workers or settings.decode.workers,
            logger=logger,
            progress=logger.create_progress(),
        )
        converter = CTIImageConverter(
            output_format=fmt,
            quality=preset,
            lossless_alpha=settings.output.lossless_alpha,
            decoder=decoder,
        )
        if not converter.can_convert(input_path):
            logger.warning(f"拡張子が .cti ではありません: {input_path.name}")
        if output is None:
            output = input_path.with_suffix(converter.get_output_extension(input_path) or "")

        try:
            result = converter.convert(input_path, output)
        except CTIError as e:
            logger.error(str(e))
            console.print(f"[red]デコード失敗: {e}[/red]")
            raise typer.Exit(_exit_code_for(e)) from e

        if result.header is not None:
            logger.log_summary(result.header, result.dest_path)

    console.print(
        f"[green]デコード完了: {output} "
        f"({result.bytes_before} -> {result.bytes_after} バイト, "
        f"x{result.compression_ratio:.2f})[/green]"
    )
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def verify(
    input_path: Annotated[Path, typer.Argument(help="CTIファイルパス")],
    workers: Annotated[int, typer.Option(min=1, help="並列ワーカー数")] = 1,
) -> None:
    """全タイルをデコードしてCRCを検証する"""
    _check_input(input_path)

    try:
        header, _ = CTIDecoder(workers=workers).decode_file(input_path)
    except CTIError as e:
        console.print(f"[red]NG: {e}[/red]")
        raise typer.Exit(_exit_code_for(e)) from e

    console.print(
        f"[green]OK: {header.width} x {header.height}, {header.tile_count} tiles[/green]"
    )
    raise typer.Exit(ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"ctiview {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """ctiview CLI - CTI画像のデコーダー"""
    pass
