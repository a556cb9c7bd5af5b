"""Plain-text extraction from epub content documents.

Parsing happens in two explicit stages: a strict XML parse first and, when
that fails, a forgiving HTML tokenizer (BeautifulSoup ``html.parser``) that
still recovers text from unbalanced tags and undeclared entities. Both stages
feed the same stream of ``(event, value)`` pairs into the paragraph builder.
"""

from __future__ import annotations

from typing import Iterator
from xml.etree.ElementTree import Element, ParseError

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import CData, NavigableString, PreformattedString, Tag
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET
from loguru import logger

from .errors import MarkupError
from .model import Paragraph

__all__ = ["extract", "normalize_whitespace", "BLOCK_TAGS"]

BLOCK_TAGS = frozenset(
    {
        "body", "div", "p", "h1", "h2", "h3", "h4", "h5", "h6",
        "li", "dt", "dd", "blockquote", "pre", "address",
        "td", "th", "caption", "figcaption",
        "section", "article", "aside", "header", "footer", "nav", "main",
    }
)
SKIP_TAGS = frozenset({"head", "script", "style", "template"})
BREAK_TAGS = frozenset({"br", "hr"})

START = "start"
END = "end"
TEXT = "text"

Events = Iterator[tuple[str, str]]


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def _local(name: str) -> str:
    # "{http://www.w3.org/1999/xhtml}p" / "html:p" -> "p"
    return name.rsplit("}", 1)[-1].rsplit(":", 1)[-1].lower()


def _tree_events(elem: Element) -> Events:
    if isinstance(elem.tag, str):
        name = _local(elem.tag)
        if name not in SKIP_TAGS:
            yield START, name
            if elem.text:
                yield TEXT, elem.text
            for child in elem:
                yield from _tree_events(child)
            yield END, name
    if elem.tail:
        yield TEXT, elem.tail


def _soup_events(node: Tag) -> Events:
    for child in node.children:
        if isinstance(child, Tag):
            name = _local(child.name)
            if name in SKIP_TAGS:
                continue
            yield START, name
            yield from _soup_events(child)
            yield END, name
        elif isinstance(child, NavigableString):
            # 注释、doctype、处理指令都不是正文
            if isinstance(child, PreformattedString) and not isinstance(child, CData):
                continue
            yield TEXT, str(child)


def _parse_strict(data: bytes) -> Element | None:
    try:
        return ET.fromstring(data)
    except (ParseError, DefusedXmlException) as err:
        logger.debug(f"严格 XML 解析失败: {err}")
        return None


def _parse_lenient(data: bytes) -> BeautifulSoup | None:
    try:
        return BeautifulSoup(data, "html.parser")
    except (ParserRejectedMarkup, ValueError) as err:
        logger.debug(f"宽松解析失败: {err}")
        return None


def _document_events(data: bytes, source: str) -> Events:
    root = _parse_strict(data)
    if root is not None:
        return _tree_events(root)
    soup = _parse_lenient(data)
    if soup is None:
        raise MarkupError(source, "strict and lenient parsing both failed")
    logger.warning(f"{source}: 不是合法的 XML，已改用宽松模式解析")
    return _soup_events(soup)


def _build_paragraphs(events: Events, source: str) -> Iterator[Paragraph]:
    depth = 0
    buffer: list[str] = []
    index = 0
    for event, value in events:
        if event == TEXT:
            # 不在任何块元素内的文本（如缺少 body 的片段）不属于任何段落，直接丢弃
            if depth:
                buffer.append(value)
            continue
        if value in BLOCK_TAGS:
            # 块元素的开始和结束都是段落边界，嵌套块各自成段，文本不重复
            text = normalize_whitespace("".join(buffer))
            buffer.clear()
            if text:
                yield Paragraph(source=source, index=index, text=text)
                index += 1
            depth += 1 if event == START else -1
        elif value in BREAK_TAGS and event == START and depth:
            buffer.append(" ")


def extract(data: bytes, source: str = "") -> Iterator[Paragraph]:
    """按文档顺序逐段产出 :class:`Paragraph`。

    惰性、单次遍历；需要重新提取时用同一份字节重新调用。

    Raises:
        MarkupError: 严格解析和宽松解析都失败（在第一次迭代时抛出）。
    """
    yield from _build_paragraphs(_document_events(data, source), source)
