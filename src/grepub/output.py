from __future__ import annotations
from .config import SearchConfig
from .highlight import Highlighter
from .model import Match, Paragraph


class Reporter:
    """把匹配结果写到 stdout。

    - 普通模式：整段输出，匹配片段高亮
    - ``files_with_matches``：每个命中的内容文档输出一次
    - ``count``：只累计命中段落数，结束时输出总数
    - ``quiet``：什么都不输出，只影响退出码
    """

    def __init__(self, config: SearchConfig, highlighter: Highlighter):
        self.config = config
        self.highlighter = highlighter
        self.matched_paragraphs = 0

    @property
    def found(self) -> bool:
        return self.matched_paragraphs > 0

    @property
    def satisfied(self) -> bool:
        """quiet 模式下找到一个匹配就足以决定退出码，可以提前结束。"""
        return self.config.quiet and self.found

    def _prefix(self, archive: str, document: str | None = None) -> str | None:
        if document is None:
            return archive if self.config.with_filename else None
        if self.config.with_filename:
            return f"{archive}:{document}"
        return document

    def paragraph(self, archive: str, paragraph: Paragraph, matches: list[Match]) -> None:
        if not matches:
            return
        self.matched_paragraphs += 1
        cfg = self.config
        if cfg.quiet or cfg.count or cfg.files_with_matches:
            return
        line = self.highlighter.render(paragraph.text, matches, prefix=self._prefix(archive))
        self.highlighter.print(line)

    def document(self, archive: str, document: str) -> None:
        """``files_with_matches`` 模式下，某个内容文档第一次命中时调用。"""
        if self.config.quiet:
            return
        self.highlighter.print(self._prefix(archive, document))

    def finish(self) -> None:
        cfg = self.config
        if cfg.count and not cfg.quiet and not cfg.files_with_matches:
            self.highlighter.print(str(self.matched_paragraphs))
