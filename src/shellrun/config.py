"""shellrun 环境变量配置管理。

环境变量:
    SHELLRUN_MAX_LINE_SIZE: 默认的输出行最大字节数
        - RunConfig.max_line_size 为 0 时使用
        - 默认 65536，小于 1 的值回退到默认值

    SHELLRUN_TERM_TIMEOUT: 清理子进程时 SIGTERM 后的等待秒数 (默认 2.0)

    SHELLRUN_KILL_TIMEOUT: SIGKILL 后的等待秒数 (默认 1.0)

    SHELLRUN_LOG_DEBUG: 日志调试模式
        - true/1/yes/on = DEBUG 级别，输出到日志文件
        - false/0/no = INFO 级别，输出到 stderr (默认)

    SHELLRUN_LOG_FILE: SHELLRUN_LOG_DEBUG 开启时的日志文件路径
        - 未设置 = 系统临时目录下带时间戳的文件
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = [
    "DEFAULT_MAX_LINE_SIZE",
    "DEFAULT_TERM_TIMEOUT",
    "DEFAULT_KILL_TIMEOUT",
    "Settings",
    "load_settings",
    "get_settings",
    "reload_settings",
]

# 与 asyncio StreamReader 默认的行上限一致
DEFAULT_MAX_LINE_SIZE = 64 * 1024

DEFAULT_TERM_TIMEOUT = 2.0  # SIGTERM 后等待的秒数
DEFAULT_KILL_TIMEOUT = 1.0  # SIGKILL 后等待的秒数


@dataclass
class Settings:
    """shellrun 全局配置。

    Attributes:
        max_line_size: RunConfig 未指定时使用的行上限
        term_timeout: 清理时 SIGTERM 后的等待时间（秒）
        kill_timeout: 清理时 SIGKILL 后的等待时间（秒）
        log_debug: 日志调试模式（DEBUG 级别输出到文件）
        log_file: 日志文件路径（log_debug=True 时设置）
    """

    max_line_size: int = DEFAULT_MAX_LINE_SIZE
    term_timeout: float = DEFAULT_TERM_TIMEOUT
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Settings(max_line_size={self.max_line_size}, "
            f"term_timeout={self.term_timeout}, "
            f"kill_timeout={self.kill_timeout}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_positive_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def _parse_timeout(value: str | None, default: float) -> float:
    """解析超时环境变量，限制在 0.1-60 秒范围。"""
    if not value:
        return default
    try:
        timeout = float(value)
    except ValueError:
        return default
    return max(0.1, min(timeout, 60.0))


def _generate_log_file_path() -> str:
    """生成临时目录下带时间戳的日志文件路径。"""
    log_dir = Path(tempfile.gettempdir()) / "shellrun"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"shellrun_debug_{timestamp}.log"
    return str(log_file.resolve())


def load_settings() -> Settings:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("SHELLRUN_LOG_DEBUG"), default=False)
    log_file = None
    if log_debug:
        log_file = os.environ.get("SHELLRUN_LOG_FILE") or _generate_log_file_path()

    return Settings(
        max_line_size=_parse_positive_int(
            os.environ.get("SHELLRUN_MAX_LINE_SIZE"), DEFAULT_MAX_LINE_SIZE
        ),
        term_timeout=_parse_timeout(
            os.environ.get("SHELLRUN_TERM_TIMEOUT"), DEFAULT_TERM_TIMEOUT
        ),
        kill_timeout=_parse_timeout(
            os.environ.get("SHELLRUN_KILL_TIMEOUT"), DEFAULT_KILL_TIMEOUT
        ),
        log_debug=log_debug,
        log_file=log_file,
    )


# 全局配置实例（延迟加载）
_settings: Settings | None = None


def get_settings() -> Settings:
    """获取全局配置实例。"""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> Settings:
    """重新加载配置（用于测试）。"""
    global _settings
    _settings = load_settings()
    return _settings
