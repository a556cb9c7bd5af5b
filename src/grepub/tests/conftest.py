"""测试用 epub 构造工具。"""

import zipfile
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path={root} media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Test Book</dc:title>
  </metadata>
  <manifest>
{items}
  </manifest>
  <spine toc="ncx">
{itemrefs}
  </spine>
</package>
"""

XHTML_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>{title}</title><style>p {{ color: red; }}</style></head>
<body>
{body}
</body>
</html>
"""


def build_xhtml(*paragraphs: str, title: str = "Chapter") -> str:
    body = "\n".join(f"<p>{escape(p)}</p>" for p in paragraphs)
    return XHTML_TEMPLATE.format(title=escape(title), body=body)


def build_opf(items: list[tuple[str, str, str]], spine: list[str]) -> str:
    item_lines = "\n".join(
        f"    <item id={quoteattr(i)} href={quoteattr(h)} media-type={quoteattr(m)}/>" for i, h, m in items
    )
    itemref_lines = "\n".join(f"    <itemref idref={quoteattr(i)}/>" for i in spine)
    return OPF_TEMPLATE.format(items=item_lines, itemrefs=itemref_lines)


@pytest.fixture
def xhtml():
    return build_xhtml


@pytest.fixture
def opf():
    return build_opf


@pytest.fixture
def write_epub(tmp_path: Path):
    """按给定条目原样写出 zip，条目顺序即物理存储顺序。"""

    def _write(entries: dict[str, str | bytes], name: str = "book.epub") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(zipfile.ZipInfo("mimetype"), "application/epub+zip")
            for entry, content in entries.items():
                zf.writestr(entry, content)
        return path

    return _write


@pytest.fixture
def make_epub(write_epub):
    """构造一本最小 epub。

    ``chapters`` 为 ``{文件名: xhtml}``，按 ``spine``（默认按字典顺序）组成阅读顺序；
    文件物理上按相反顺序写入压缩包。
    """

    def _make(
        chapters: dict[str, str],
        spine: list[str] | None = None,
        name: str = "book.epub",
        root: str = "OEBPS/content.opf",
        extra_items: list[tuple[str, str, str]] | None = None,
        extra_entries: dict[str, str | bytes] | None = None,
    ) -> Path:
        root_dir = root.rsplit("/", 1)[0] + "/" if "/" in root else ""
        items = [(Path(href).stem, href, "application/xhtml+xml") for href in chapters]
        items += list(extra_items or [])
        order = spine if spine is not None else [Path(href).stem for href in chapters]
        entries: dict[str, str | bytes] = {"META-INF/container.xml": CONTAINER_XML.format(root=quoteattr(root))}
        entries[root] = build_opf(items, order)
        for href, content in reversed(list(chapters.items())):
            entries[root_dir + href] = content
        entries.update(extra_entries or {})
        return write_epub(entries, name=name)

    return _make


@pytest.fixture
def book(make_epub, xhtml):
    """阅读顺序 [ch1, ch2]，ch1 包含 "The quick fox"。"""
    return make_epub(
        {
            "ch1.xhtml": xhtml("The quick fox", "jumps over"),
            "ch2.xhtml": xhtml("the lazy dog.", "Still waters run deep."),
        }
    )


@pytest.fixture
def container_xml():
    return lambda root: CONTAINER_XML.format(root=quoteattr(root))
