from __future__ import annotations
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from .archive import Container, open_container
from .config import SearchConfig
from .errors import ArchiveError, EntryError, ManifestError, MarkupError
from .extract import extract
from .manifest import resolve
from .matcher import Matcher
from .model import DocumentSummary, FileSummary, ScanResult
from .output import Reporter

ErrorHandler = Callable[[str], None]


def search_document(
    container: Container, document: str, matcher: Matcher, reporter: Reporter, config: SearchConfig
) -> DocumentSummary:
    summary = DocumentSummary(path=document)
    try:
        data = container.read_entry(document)
    except EntryError as err:
        summary.warning = str(err)
        logger.warning(f"{container.path}: 无法读取内容文档 {err}，按 0 段落处理")
        return summary

    try:
        for paragraph in extract(data, document):
            summary.paragraphs += 1
            matches = matcher.scan(paragraph)
            if not matches:
                continue
            summary.matched_paragraphs += 1
            reporter.paragraph(container.path, paragraph, matches)
            if config.files_with_matches:
                reporter.document(container.path, document)
                break
            if reporter.satisfied:
                break
    except MarkupError as err:
        summary.warning = str(err)
        logger.warning(f"{container.path}: {err}，按 0 段落处理")
    return summary


def search_container(path: str, matcher: Matcher, reporter: Reporter, config: SearchConfig) -> FileSummary:
    """按阅读顺序检索一个 epub。

    ArchiveError / ManifestError 原样抛出，由 :func:`run_search` 转换成单文件错误。
    """
    summary = FileSummary(archive=path)
    with open_container(path) as container:
        package = resolve(container)
        for entry in package.reading_order():
            document = package.entry_path(entry)
            summary.documents.append(search_document(container, document, matcher, reporter, config))
            if reporter.satisfied:
                logger.debug(f"{path}: quiet 模式已确认命中，提前结束")
                break
    return summary


def run_search(
    paths: Iterable[str | Path],
    config: SearchConfig,
    reporter: Reporter,
    error_handler: Optional[ErrorHandler] = None,
) -> ScanResult:
    """依次检索每个文件；单文件错误只记录并跳过，不影响后续文件。

    模式先编译：语法错误以 :class:`~grepub.errors.PatternError` 抛出，此时还没有打开任何文件。
    """
    matcher = Matcher.compile(config)
    result = ScanResult()
    for p in paths:
        path = str(p)
        try:
            summary = search_container(path, matcher, reporter, config)
        except ArchiveError as err:
            summary = FileSummary(archive=path, error=str(err), error_kind="archive")
        except ManifestError as err:
            summary = FileSummary(archive=path, error=str(err), error_kind="manifest")
        if summary.error:
            logger.debug(f"跳过 {path}: {summary.error}")
            if error_handler:
                error_handler(summary.error)
        result.summaries.append(summary)
        if reporter.satisfied:
            result.stopped_early = True
            break
    reporter.finish()
    return result
