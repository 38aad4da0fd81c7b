"""shellrun 命令行入口。

从命令行参数构建 RunConfig，执行并输出结果:

    shellrun [-C DIR] [-e KEY=VALUE]... [--max-line-size N] [--clean-env]
             [--dry-run] [COMMAND [ARGS...]]

未指定命令时运行演示命令 `echo 1234`。
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .commander import Commander
from .config import Settings, get_settings
from .errors import ExitError
from .runtime import ProcessRunner
from .types import RunConfig

__all__ = ["build_parser", "config_from_args", "configure_logging", "main"]

logger = logging.getLogger(__name__)

DEMO_ARGV = ("echo", "1234")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellrun",
        description="Run a command and print its captured stdout and stderr.",
    )
    parser.add_argument(
        "-C", "--working-dir", default="", metavar="DIR",
        help="Working directory for the command (default: current)",
    )
    parser.add_argument(
        "-e", "--env", action="append", default=[], metavar="KEY=VALUE",
        help="Environment variable for the command, may be repeated",
    )
    parser.add_argument(
        "--max-line-size", type=int, default=0, metavar="N",
        help="Maximum output line size in bytes (default: SHELLRUN_MAX_LINE_SIZE)",
    )
    parser.add_argument(
        "--clean-env", action="store_true",
        help="Do not inherit the current environment",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the command instead of running it",
    )
    parser.add_argument(
        "argv", nargs=argparse.REMAINDER, metavar="COMMAND [ARGS...]",
    )
    return parser


def _parse_env(items: Sequence[str], parser: argparse.ArgumentParser) -> dict[str, str]:
    env: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            parser.error(f"invalid --env value {item!r}, expected KEY=VALUE")
        if key in env:
            parser.error(f"duplicate --env key {key!r}")
        env[key] = value
    return env


def config_from_args(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> RunConfig:
    argv = list(args.argv)
    if argv and argv[0] == "--":
        argv = argv[1:]
    if not argv:
        argv = list(DEMO_ARGV)
    if args.max_line_size < 0:
        parser.error("--max-line-size must be >= 0")

    return RunConfig(
        command=argv[0],
        args=argv[1:],
        working_dir=args.working_dir,
        env=_parse_env(args.env, parser),
        max_line_size=args.max_line_size,
        inherit_env=not args.clean_env,
    )


def configure_logging(settings: Settings) -> None:
    """配置日志输出：默认输出到 stderr，调试模式输出到文件。"""
    handler: logging.Handler
    if settings.log_debug and settings.log_file:
        handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        log_level = logging.DEBUG
    else:
        handler = logging.StreamHandler(sys.stderr)
        log_level = logging.INFO
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # 配置 root logger（第三方库）为 WARNING，减少噪音
    logging.basicConfig(level=logging.WARNING, handlers=[handler])
    logging.getLogger("shellrun").setLevel(log_level)


def _exit_status(error: BaseException) -> int:
    if isinstance(error, ExitError) and error.returncode > 0:
        return error.returncode
    return 1


def main(
    argv: Sequence[str] | None = None,
    commander: Commander | None = None,
) -> int:
    """主入口点。

    Args:
        argv: 不含程序名的命令行参数（默认 sys.argv[1:]）
        commander: 执行用的 Commander（默认按配置创建 ProcessRunner）

    Returns:
        进程退出码
    """
    settings = get_settings()
    configure_logging(settings)

    parser = build_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args, parser)
    commander = commander or ProcessRunner.from_settings(settings)

    if args.dry_run:
        print(commander.describe(config))
        return 0

    logger.debug(f"Running: {commander.describe(config)}")
    result = commander.run(config)

    print(f"stdout: {result.stdout}")
    print(f"stderr: {result.stderr}")
    print(f"err: {result.error}")

    if result.error is not None:
        return _exit_status(result.error)
    return 0
