from __future__ import annotations

"""Command line entry point for grepub."""

import argparse
import tomllib
from pathlib import Path
from typing import Sequence

from loguru import logger
from rich.console import Console

from . import __version__
from .config import ColorMode, SearchConfig, Settings, load_settings, write_default_config
from .errors import PatternError
from .highlight import Highlighter
from .log import setup_logger
from .output import Reporter
from .runner import run_search

err_console = Console(stderr=True, highlight=False, soft_wrap=True)

# 退出码策略（稳定，README/DESIGN 中有说明）
EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_USAGE = 2  # 模式语法错误、参数/配置错误
EXIT_ARCHIVE = 3  # 至少一个 epub 打不开
EXIT_MANIFEST = 4  # 至少一个 epub 的包描述无法解析
EXIT_INTERRUPTED = 130


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grepub",
        description="grepub - 在 epub 电子书正文中按段落检索正则表达式",
        epilog="退出码: 0 有匹配, 1 无匹配, 2 模式/参数错误, 3 压缩包无法打开, 4 包描述无法解析",
    )
    parser.add_argument("pattern", nargs="?", help="正则表达式 (Python re 语法)")
    parser.add_argument("files", nargs="*", metavar="FILE", help="要检索的 epub 文件")
    parser.add_argument("-c", "--count", action="store_true", help="只输出命中段落总数")
    parser.add_argument("-q", "--quiet", action="store_true", help="不输出任何结果，仅以退出码表示是否命中")
    parser.add_argument("-i", "--ignore-case", action="store_true", default=None, help="忽略大小写")
    parser.add_argument("-w", "--word-regexp", action="store_true", default=None, help="只匹配完整单词")
    parser.add_argument(
        "-l",
        "--files-with-matches",
        action="store_true",
        help="只列出包含匹配的内容文档",
    )
    filename = parser.add_mutually_exclusive_group()
    filename.add_argument("-H", "--with-filename", dest="with_filename", action="store_true", default=None, help="每行前输出 epub 文件名")
    filename.add_argument("--no-filename", dest="with_filename", action="store_false", help="不输出 epub 文件名")
    parser.add_argument(
        "--color",
        "--colour",
        choices=[mode.value for mode in ColorMode],
        help="高亮模式 (默认 auto: 仅在终端中高亮)",
    )
    parser.add_argument("--config", help="配置文件路径 (toml)")
    parser.add_argument(
        "--init-config",
        nargs="?",
        const="",
        help="生成默认配置文件，可指定输出路径 (默认: ~/.config/grepub/config.toml)",
    )
    parser.add_argument("--force", action="store_true", help="配合 --init-config 覆盖已有配置文件")
    parser.set_defaults(with_filename=None)
    parser.add_argument("--debug", action="store_true", help="在 stderr 输出调试日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_search_config(args: argparse.Namespace, settings: Settings) -> SearchConfig:
    with_filename = args.with_filename
    if with_filename is None:
        with_filename = len(args.files) > 1
    return SearchConfig(
        pattern=args.pattern,
        ignore_case=bool(args.ignore_case if args.ignore_case is not None else settings.ignore_case),
        word_regexp=bool(args.word_regexp if args.word_regexp is not None else settings.word_regexp),
        count=args.count,
        quiet=args.quiet,
        color=ColorMode(args.color) if args.color else settings.color,
        files_with_matches=args.files_with_matches,
        with_filename=with_filename,
    )


def report_error(message: str) -> None:
    err_console.print(f"grepub: {message}", style="red", markup=False)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.init_config is not None:
        target = args.init_config or Path.home() / ".config" / "grepub" / "config.toml"
        try:
            path = write_default_config(target, overwrite=args.force)
        except FileExistsError as error:
            report_error(f"{error} (使用 --force 覆盖)")
            return EXIT_USAGE
        err_console.print(f"[green]默认配置已写入[/green] {path}")
        return EXIT_MATCH

    if args.pattern is None or not args.files:
        parser.error("需要 PATTERN 和至少一个 FILE")

    try:
        settings = load_settings(args.config)
    except (OSError, tomllib.TOMLDecodeError, ValueError) as error:
        report_error(f"配置错误: {error}")
        return EXIT_USAGE

    setup_logger(settings.log_level, settings.log_file, debug=args.debug)
    config = build_search_config(args, settings)
    highlighter = Highlighter(config.color)
    logger.debug(f"配置: {config}，高亮: {highlighter.enabled}")
    reporter = Reporter(config, highlighter)

    try:
        result = run_search(args.files, config, reporter, error_handler=report_error)
    except PatternError as error:
        report_error(str(error))
        return EXIT_USAGE

    logger.debug(
        f"统计 archives={result.total_archives()} matches={result.total_matches()} errors={result.total_errors()}"
    )
    # 有错误时错误优先；quiet 模式下只要命中就返回 0（同 grep）
    if reporter.found and config.quiet:
        return EXIT_MATCH
    if result.has_error("archive"):
        return EXIT_ARCHIVE
    if result.has_error("manifest"):
        return EXIT_MANIFEST
    return EXIT_MATCH if reporter.found else EXIT_NO_MATCH


def run() -> None:
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        err_console.print("\n[yellow]用户中断[/yellow]")
        raise SystemExit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    run()
