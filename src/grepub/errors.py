"""grepub 异常体系。

每个组件在边界处把底层库的异常（zipfile、xml、re ...）翻译成这里的类型，
调用方只需要关心 ``kind`` 和出错的路径。
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "GrepubError",
    "ArchiveErrorKind",
    "ArchiveError",
    "EntryErrorKind",
    "EntryError",
    "ManifestErrorKind",
    "ManifestError",
    "MarkupError",
    "PatternError",
]


class GrepubError(Exception):
    """Base class for every error raised by grepub."""


class ArchiveErrorKind(str, Enum):
    NOT_FOUND = "not-found"
    CORRUPT = "corrupt"
    UNREADABLE = "unreadable"


class ArchiveError(GrepubError):
    """压缩包本身无法打开。对单个文件致命，对整个运行不致命。"""

    def __init__(self, path: str, kind: ArchiveErrorKind, detail: str = ""):
        self.path = path
        self.kind = kind
        self.detail = detail
        message = f"{path}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class EntryErrorKind(str, Enum):
    MISSING = "missing"
    DECODE_FAILURE = "decode-failure"


class EntryError(GrepubError):
    """压缩包内的某个条目缺失或无法解压。"""

    def __init__(self, name: str, kind: EntryErrorKind, detail: str = ""):
        self.name = name
        self.kind = kind
        self.detail = detail
        message = f"{name}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ManifestErrorKind(str, Enum):
    MISSING_ROOT_FILE = "missing-root-file"
    MALFORMED_XML = "malformed-xml"
    DANGLING_REFERENCE = "dangling-reference"
    EMPTY_SPINE = "empty-spine"


class ManifestError(GrepubError):
    """container.xml / OPF 包描述文件有问题，整本书无法检索。"""

    def __init__(self, path: str, kind: ManifestErrorKind, detail: str = ""):
        self.path = path
        self.kind = kind
        self.detail = detail
        message = f"{path}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class MarkupError(GrepubError):
    """内容文档严格解析和宽松解析都失败。"""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: unparsable markup" + (f" ({detail})" if detail else ""))


class PatternError(GrepubError):
    """正则表达式语法错误，对整个运行致命。"""

    def __init__(self, pattern: str, detail: str):
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"invalid pattern {pattern!r}: {detail}")
