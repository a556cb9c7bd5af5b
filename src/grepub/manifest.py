"""Resolve an epub's reading order from ``META-INF/container.xml`` and the OPF package document."""

from __future__ import annotations

import posixpath
from urllib.parse import unquote
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET
from loguru import logger

from .archive import Container
from .errors import EntryError, ManifestError, ManifestErrorKind
from .model import ManifestEntry, Package

CONTAINER_XML = "META-INF/container.xml"

TEXT_MEDIA_TYPES = frozenset(
    {
        "application/xhtml+xml",
        "text/html",
        "application/x-dtbook+xml",
        "text/x-oeb1-document",
    }
)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_xml(container: Container, name: str) -> Element:
    try:
        data = container.read_entry(name)
    except EntryError as err:
        raise ManifestError(container.path, ManifestErrorKind.MISSING_ROOT_FILE, str(err)) from err
    try:
        return ET.fromstring(data)
    except (ParseError, DefusedXmlException) as err:
        raise ManifestError(container.path, ManifestErrorKind.MALFORMED_XML, f"{name}: {err}") from err


def find_root_file(container: Container) -> str:
    """读取 container.xml 中第一个 rootfile 的 full-path。"""
    root = _parse_xml(container, CONTAINER_XML)
    rootfile = root.find(".//{*}rootfile")
    if rootfile is None:
        raise ManifestError(container.path, ManifestErrorKind.MISSING_ROOT_FILE, "container.xml 中没有 rootfile")
    full_path = rootfile.get("full-path")
    if not full_path:
        raise ManifestError(container.path, ManifestErrorKind.MISSING_ROOT_FILE, "rootfile 缺少 full-path 属性")
    return unquote(full_path)


def _href_to_path(href: str) -> str:
    href = unquote(href.split("#", 1)[0])
    return posixpath.normpath(href)


def resolve(container: Container) -> Package:
    """解析包描述，返回只包含文本文档的阅读顺序。

    Raises:
        ManifestError: rootfile 缺失、XML 损坏、spine 引用了不存在的 id、
            或过滤后阅读顺序为空。
    """
    root_path = find_root_file(container)
    opf = _parse_xml(container, root_path)

    entries: list[ManifestEntry] = []
    index_by_id: dict[str, int] = {}
    manifest = opf.find("{*}manifest")
    for item in manifest if manifest is not None else ():
        if _local(item.tag) != "item":
            continue
        item_id = item.get("id")
        href = item.get("href")
        if not item_id or not href:
            logger.debug(f"{container.path}: 忽略不完整的 manifest item {item.attrib}")
            continue
        media_type = (item.get("media-type") or "").strip().lower()
        index_by_id[item_id] = len(entries)
        entries.append(ManifestEntry(id=item_id, path=_href_to_path(href), media_type=media_type))

    spine_ids: list[str] = []
    spine = opf.find("{*}spine")
    if spine is not None:
        spine_ids = [ref.get("idref", "") for ref in spine if _local(ref.tag) == "itemref"]

    spine_indices: list[int] = []
    for idref in spine_ids:
        if idref not in index_by_id:
            raise ManifestError(
                container.path, ManifestErrorKind.DANGLING_REFERENCE, f"spine 引用了不存在的 id {idref!r}"
            )
        index = index_by_id[idref]
        if entries[index].media_type in TEXT_MEDIA_TYPES:
            spine_indices.append(index)
        else:
            logger.debug(f"{container.path}: 跳过非文本 spine 条目 {idref} ({entries[index].media_type})")

    if not spine_indices:
        raise ManifestError(container.path, ManifestErrorKind.EMPTY_SPINE, "阅读顺序中没有可检索的文本文档")

    package = Package(root_path=root_path, entries=tuple(entries), spine=tuple(spine_indices))
    logger.debug(
        f"{container.path}: rootfile={root_path} manifest={len(entries)} 文本文档={len(spine_indices)}"
    )
    return package
