from __future__ import annotations
from dataclasses import dataclass, field
import posixpath


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    id: str
    path: str  # 相对于包描述文件所在目录
    media_type: str


@dataclass(frozen=True, slots=True)
class Package:
    """解析后的包描述：manifest 条目数组 + 阅读顺序（数组下标）。"""

    root_path: str
    entries: tuple[ManifestEntry, ...]
    spine: tuple[int, ...]

    @property
    def root_dir(self) -> str:
        return posixpath.dirname(self.root_path)

    def reading_order(self) -> list[ManifestEntry]:
        return [self.entries[i] for i in self.spine]

    def entry_path(self, entry: ManifestEntry) -> str:
        """条目在压缩包内的完整路径。"""
        return posixpath.normpath(posixpath.join(self.root_dir, entry.path))


@dataclass(frozen=True, slots=True)
class Paragraph:
    source: str
    index: int
    text: str


@dataclass(frozen=True, slots=True)
class Match:
    paragraph: Paragraph
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.paragraph.text[self.start:self.end]


@dataclass
class DocumentSummary:
    path: str
    paragraphs: int = 0
    matched_paragraphs: int = 0
    warning: str | None = None


@dataclass
class FileSummary:
    archive: str
    documents: list[DocumentSummary] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None  # "archive" / "manifest"

    @property
    def match_count(self) -> int:
        return sum(d.matched_paragraphs for d in self.documents)


@dataclass
class ScanResult:
    summaries: list[FileSummary] = field(default_factory=list)
    stopped_early: bool = False

    def total_archives(self) -> int:
        return len(self.summaries)

    def total_matches(self) -> int:
        return sum(s.match_count for s in self.summaries)

    def total_errors(self) -> int:
        return sum(1 for s in self.summaries if s.error)

    def has_error(self, kind: str) -> bool:
        return any(s.error_kind == kind for s in self.summaries)

