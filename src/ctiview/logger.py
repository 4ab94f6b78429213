"""進捗表示およびログ出力のインターフェース定義

このモジュールは、CTIデコードの進捗表示とログ出力のためのインターフェースを定義する。
VerboseLevel (詳細ログレベル)に応じた出力制御を行い、
CLIでのタイルデコード進捗をユーザーにわかりやすく表示するために使用される。
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

if TYPE_CHECKING:
    from ctiview.codec.header import CTIHeader
    from ctiview.decoder import DecodePhase


class VerboseLevel(IntEnum):
    """詳細ログレベル

    ログ出力の詳細度を制御するための列挙型。
    QUIET: エラーのみ出力
    NORMAL: 進捗バーとサマリ出力
    VERBOSE: タイルごとの処理結果も出力（-vオプション）
    DEBUG: オフセットやCRCなどの詳細も出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


class ProgressDisplay(Protocol):
    """進捗表示のプロトコル

    デコードの各フェーズの進捗を表示するためのインターフェース。
    """

    def start(self, phase: DecodePhase, total: int) -> None:
        """フェーズ開始を表示する

        Args:
            phase: 開始するデコードフェーズ
            total: 処理対象の総数
        """
        ...

    def update(self, current: int, message: str = "") -> None:
        """進捗を更新する

        Args:
            current: 現在の進捗（処理済みタイル数）
            message: 追加の進捗メッセージ（オプション）
        """
        ...

    def finish(self, success: bool, message: str = "") -> None:
        """フェーズ終了を表示する

        Args:
            success: フェーズが成功したか
            message: 終了メッセージ（オプション）
        """
        ...


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
        use_color: カラー出力を使用するか
        use_emoji: emoji表示を使用するか
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None
    use_color: bool = True
    use_emoji: bool = True


class DecodeLogger:
    """デコードログ出力クラス

    VerboseLevelに応じてメッセージのフィルタリングを行い、
    進捗表示インスタンスの作成も担当する。

    使用例:
        >>> config = LogConfig(verbose_level=VerboseLevel.VERBOSE)
        >>> logger = DecodeLogger(config)
        >>> logger.info("デコードを開始します")
        >>> logger.verbose("タイル 0 を処理中")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        """ロガーを初期化する

        Args:
            config: ログ設定
        """
        self._config = config
        self._log_file: TextIO | None = None
        if config.log_file:
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115

    def __enter__(self) -> DecodeLogger:
        """コンテキストマネージャのエントリポイント"""
        return self

    def __exit__(self, *args: object) -> None:
        """コンテキストマネージャの終了処理"""
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        """ログ設定を取得する"""
        return self._config

    def _print(self, message: str, file: TextIO | None = None) -> None:
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._ANSI_ESCAPE_PATTERN.sub("", message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）"""
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）"""
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）"""
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に出力）"""
        self._print(f"エラー: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def warning(self, message: str) -> None:
        """警告メッセージを出力する（QUIET以上）"""
        if self._config.verbose_level > VerboseLevel.QUIET:
            self._print(f"警告: {message}")
        self._log_to_file("WARNING", message)

    def create_progress(self) -> ProgressDisplay:
        """進捗表示インスタンスを作成する

        Returns:
            進捗表示インスタンス
        """
        return ConsoleProgressDisplay(
            use_color=self._config.use_color,
            use_emoji=self._config.use_emoji,
        )

    def log_tile(
        self,
        index: int,
        position: tuple[int, int],
        compressed_size: int,
        decompressed_size: int,
    ) -> None:
        """タイルの処理結果をログする（VERBOSE以上）

        Args:
            index: タイル番号
            position: タイル座標 (tx, ty)
            compressed_size: 圧縮サイズ（バイト）
            decompressed_size: 解凍後サイズ（バイト）
        """
        tx, ty = position
        self.verbose(
            f"タイル {index} ({tx}, {ty}): {compressed_size} -> {decompressed_size} バイト"
        )

    def log_summary(self, header: CTIHeader, output_path: Path | None = None) -> None:
        """デコードサマリを出力する（NORMAL以上）

        Args:
            header: デコードした画像のヘッダー
            output_path: 出力ファイルパス（オプション）
        """
        emoji = "✅" if self._config.use_emoji else "[OK]"
        self.info(f"{emoji} Decode complete!")
        self.info(f"   Size: {header.width} x {header.height} ({header.tile_count} tiles)")
        if output_path is not None:
            self.info(f"   Output: {output_path}")


class ConsoleProgressDisplay:
    """コンソール進捗表示

    デコードの各フェーズの進捗をコンソールに表示するクラス。
    """

    PHASE_EMOJI: dict[str, str] = {
        "tiles": "\U0001f9e9",
    }

    PHASE_NAME: dict[str, str] = {
        "tiles": "Decoding tiles",
    }

    def __init__(self, use_color: bool = True, use_emoji: bool = True) -> None:
        """進捗表示を初期化する

        Args:
            use_color: カラー出力を使用するか
            use_emoji: 絵文字を使用するか
        """
        self._use_color = use_color
        self._use_emoji = use_emoji
        self._phase: DecodePhase | None = None
        self._total = 0
        self._current = 0

    def start(self, phase: DecodePhase, total: int) -> None:
        """フェーズ開始を表示する"""
        self._phase = phase
        self._total = total
        self._current = 0
        emoji = self.PHASE_EMOJI.get(phase.value, "") if self._use_emoji else ""
        name = self.PHASE_NAME.get(phase.value, str(phase))
        prefix = f"{emoji} " if emoji else ""
        print(f"{prefix}{name}...")

    def update(self, current: int, message: str = "") -> None:
        """進捗を更新する"""
        self._current = current
        if self._total > 0:
            percent = int((current / self._total) * 100)
            bar_width = 40
            filled = int(bar_width * current / self._total)
            bar = "█" * filled + "░" * (bar_width - filled)
            msg_part = f" {message}" if message else ""
            print(f"\r   [{bar}] {percent}%{msg_part}", end="", flush=True)

    def finish(self, success: bool, message: str = "") -> None:
        """フェーズ終了を表示する"""
        bar_width = 40
        full_bar = "█" * bar_width
        if success:
            mark = "✓" if self._use_emoji else "done"
            print(f"\r   [{full_bar}] 100% {mark}")
        else:
            mark = "✗" if self._use_emoji else "failed"
            msg_part = f": {message}" if message else ""
            print(f"\r   [{full_bar}] {mark}{msg_part}")
