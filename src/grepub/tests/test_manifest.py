"""包描述解析测试"""

import pytest

from grepub.archive import open_container
from grepub.errors import ManifestError, ManifestErrorKind
from grepub.manifest import resolve


def _resolve(path):
    with open_container(path) as container:
        return resolve(container)


def _kind(path) -> ManifestErrorKind:
    with pytest.raises(ManifestError) as excinfo:
        _resolve(path)
    return excinfo.value.kind


class TestReadingOrder:
    def test_spine_order_is_preserved(self, make_epub, xhtml):
        path = make_epub(
            {"a.xhtml": xhtml("A"), "b.xhtml": xhtml("B"), "c.xhtml": xhtml("C")},
            spine=["c", "a", "b"],
        )
        package = _resolve(path)
        assert package.root_path == "OEBPS/content.opf"
        assert [e.id for e in package.reading_order()] == ["c", "a", "b"]
        assert [package.entry_path(e) for e in package.reading_order()] == [
            "OEBPS/c.xhtml",
            "OEBPS/a.xhtml",
            "OEBPS/b.xhtml",
        ]

    def test_non_text_items_are_filtered(self, make_epub, xhtml):
        path = make_epub(
            {"ch1.xhtml": xhtml("one")},
            spine=["cover", "ch1", "style"],
            extra_items=[
                ("cover", "images/cover.jpg", "image/jpeg"),
                ("style", "css/book.css", "text/css"),
                ("ncx", "toc.ncx", "application/x-dtbncx+xml"),
            ],
        )
        package = _resolve(path)
        assert [e.id for e in package.reading_order()] == ["ch1"]
        # 非文本资源仍然是合法的 manifest 条目
        assert {e.id for e in package.entries} == {"ch1", "cover", "style", "ncx"}

    def test_root_file_at_top_level(self, make_epub, xhtml):
        path = make_epub({"ch1.xhtml": xhtml("one")}, root="content.opf")
        package = _resolve(path)
        assert package.entry_path(package.reading_order()[0]) == "ch1.xhtml"

    def test_href_is_percent_decoded_and_normalized(self, write_epub, container_xml, opf, xhtml):
        path = write_epub(
            {
                "META-INF/container.xml": container_xml("OPS/pkg/content.opf"),
                "OPS/pkg/content.opf": opf(
                    [("ch", "../text/chapter%20one.xhtml#start", "application/xhtml+xml")], ["ch"]
                ),
                "OPS/text/chapter one.xhtml": xhtml("hello"),
            }
        )
        package = _resolve(path)
        assert package.entry_path(package.reading_order()[0]) == "OPS/text/chapter one.xhtml"


class TestManifestErrors:
    def test_missing_container_xml(self, write_epub, opf):
        path = write_epub({"OEBPS/content.opf": opf([], [])})
        assert _kind(path) is ManifestErrorKind.MISSING_ROOT_FILE

    def test_root_file_points_nowhere(self, write_epub, container_xml):
        path = write_epub({"META-INF/container.xml": container_xml("OEBPS/missing.opf")})
        assert _kind(path) is ManifestErrorKind.MISSING_ROOT_FILE

    def test_container_without_rootfile(self, write_epub):
        path = write_epub({"META-INF/container.xml": "<container><rootfiles/></container>"})
        assert _kind(path) is ManifestErrorKind.MISSING_ROOT_FILE

    def test_malformed_package_document(self, make_epub, xhtml):
        path = make_epub(
            {"ch1.xhtml": xhtml("one")},
            extra_entries={"OEBPS/content.opf": "<package><manifest></package>"},
        )
        assert _kind(path) is ManifestErrorKind.MALFORMED_XML

    def test_dangling_spine_reference(self, make_epub, xhtml):
        path = make_epub({"ch1.xhtml": xhtml("one")}, spine=["ch1", "ghost"])
        assert _kind(path) is ManifestErrorKind.DANGLING_REFERENCE

    def test_empty_spine_after_filtering(self, make_epub):
        path = make_epub(
            {},
            spine=["cover"],
            extra_items=[("cover", "cover.jpg", "image/jpeg")],
        )
        assert _kind(path) is ManifestErrorKind.EMPTY_SPINE
