"""共通型定義"""

from enum import IntEnum


class ExitCode(IntEnum):
    """CLIの終了コード"""

    SUCCESS = 0
    ERROR = 1
    INVALID_INPUT = 2
    INTEGRITY_ERROR = 3
