from __future__ import annotations
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..errors import ArchiveError, ArchiveErrorKind, EntryError, EntryErrorKind


class Container:
    """已打开的 epub 压缩包。

    条目按名字随机读取（阅读顺序是逻辑顺序，和物理存储顺序无关）。
    文件句柄在 ``close()`` 之前一直持有，通常通过 :func:`open_container` 使用。
    """

    def __init__(self, path: str, zf: zipfile.ZipFile):
        self.path = path
        self._zf = zf
        # zipfile 已经按规范位/编码把文件名处理成 str，这里不再二次猜测编码
        self._names = set(zf.namelist())

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def names(self) -> list[str]:
        return self._zf.namelist()

    def read_entry(self, name: str) -> bytes:
        if name not in self._names:
            raise EntryError(name, EntryErrorKind.MISSING)
        try:
            return self._zf.read(name)
        except (zipfile.BadZipFile, zlib.error, EOFError) as err:
            raise EntryError(name, EntryErrorKind.DECODE_FAILURE, str(err)) from err
        except (NotImplementedError, RuntimeError) as err:
            # 不支持的压缩方法 / 加密条目
            raise EntryError(name, EntryErrorKind.DECODE_FAILURE, str(err)) from err

    def close(self) -> None:
        self._zf.close()


@contextmanager
def open_container(path: str | Path) -> Iterator[Container]:
    """打开 epub 压缩包，退出上下文（包括提前退出）时保证关闭。"""
    p = Path(path)
    if not p.exists():
        raise ArchiveError(str(path), ArchiveErrorKind.NOT_FOUND)
    try:
        zf = zipfile.ZipFile(p)
    except zipfile.BadZipFile as err:
        raise ArchiveError(str(path), ArchiveErrorKind.CORRUPT, str(err)) from err
    except OSError as err:
        raise ArchiveError(str(path), ArchiveErrorKind.UNREADABLE, err.strerror or str(err)) from err

    container = Container(str(path), zf)
    logger.debug(f"打开压缩包: {path} ({len(container.names())} 个条目)")
    try:
        yield container
    finally:
        container.close()
