from __future__ import annotations

"""Configuration for grepub: the immutable per-run search config and the TOML settings file."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import os
import textwrap
import tomllib

__all__ = [
    "ColorMode",
    "SearchConfig",
    "Settings",
    "load_settings",
    "write_default_config",
    "DEFAULT_CONFIG_TOML",
]

DEFAULT_CONFIG_TOML = textwrap.dedent(
    """
    [search]
    ignore_case = false
    word_regexp = false

    [output]
    color = "auto"

    [log]
    level = "WARNING"
    # file = "~/.cache/grepub/grepub.log"
    """
)


class ColorMode(str, Enum):
    ALWAYS = "always"
    AUTO = "auto"
    NEVER = "never"


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """一次运行的检索配置，由 CLI 构建一次，之后只读。"""

    pattern: str
    ignore_case: bool = False
    word_regexp: bool = False
    count: bool = False
    quiet: bool = False
    color: ColorMode = ColorMode.AUTO
    files_with_matches: bool = False
    with_filename: bool = False


@dataclass(slots=True)
class Settings:
    """Defaults read from ``config.toml``; command line flags override them."""

    ignore_case: bool = False
    word_regexp: bool = False
    color: ColorMode = ColorMode.AUTO
    log_level: str = "WARNING"
    log_file: str | None = None


def load_settings(config_path: str | Path | None = None) -> Settings:
    """读取默认设置。

    显式给出的 ``config_path`` 必须存在；否则依次尝试 ``$GREPUB_CONFIG``、
    ``~/.config/grepub/config.toml``，都没有时使用内置的 ``DEFAULT_CONFIG_TOML``。
    """

    candidates: list[Path] = []
    if config_path:
        explicit = Path(config_path).expanduser()
        if not explicit.is_file():
            raise FileNotFoundError(f"配置文件不存在: {explicit}")
        candidates.append(explicit)

    env_path = os.environ.get("GREPUB_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser())

    candidates.append(Path.home() / ".config" / "grepub" / "config.toml")

    for candidate in candidates:
        if candidate.is_file():
            return _settings_from_toml(candidate.read_text(encoding="utf-8"))

    return _settings_from_toml(DEFAULT_CONFIG_TOML)


def _settings_from_toml(content: str) -> Settings:
    data = tomllib.loads(content)
    search = data.get("search", {})
    output = data.get("output", {})
    log = data.get("log", {})

    color = str(output.get("color", ColorMode.AUTO.value)).lower()
    try:
        color_mode = ColorMode(color)
    except ValueError:
        raise ValueError(f"无效的 color 配置: {color!r} (可选 always/auto/never)") from None

    log_file = log.get("file")
    return Settings(
        ignore_case=bool(search.get("ignore_case", False)),
        word_regexp=bool(search.get("word_regexp", False)),
        color=color_mode,
        log_level=str(log.get("level", "WARNING")).upper(),
        log_file=str(Path(log_file).expanduser()) if log_file else None,
    )


def write_default_config(target_path: str | Path, overwrite: bool = False) -> Path:
    """生成一份默认 config.toml，返回写入的绝对路径。已有文件默认不覆盖。"""
    target = Path(target_path).expanduser()
    if target.exists() and not overwrite:
        raise FileExistsError(f"配置文件已存在: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    return target.resolve()
