from __future__ import annotations
import re
from dataclasses import dataclass

from .config import SearchConfig
from .errors import PatternError
from .model import Match, Paragraph


def is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


@dataclass(frozen=True)
class Matcher:
    """编译后的检索模式。

    忽略大小写交给 ``re.IGNORECASE``：模式和输入走同一套大小写折叠规则，
    段落文本本身不做任何修改，返回的偏移直接对应原文。
    """

    regex: re.Pattern[str]
    word_regexp: bool = False

    @classmethod
    def compile(cls, config: SearchConfig) -> "Matcher":
        flags = re.IGNORECASE if config.ignore_case else 0
        try:
            regex = re.compile(config.pattern, flags)
        except re.error as err:
            raise PatternError(config.pattern, str(err)) from err
        return cls(regex=regex, word_regexp=config.word_regexp)

    def _on_word_boundary(self, text: str, start: int, end: int) -> bool:
        if start > 0 and is_word_char(text[start - 1]):
            return False
        if end < len(text) and is_word_char(text[end]):
            return False
        return True

    def _word_span_at(self, text: str, start: int) -> tuple[int, int] | None:
        r"""同一起点上，两端都落在单词边界的最长匹配（处理 `cat|category`、`\w+?` 这类模式）。"""
        if start > 0 and is_word_char(text[start - 1]):
            return None
        for end in range(len(text), start - 1, -1):
            if end < len(text) and is_word_char(text[end]):
                continue
            if self.regex.fullmatch(text, start, end):
                return start, end
        return None

    def scan(self, paragraph: Paragraph) -> list[Match]:
        """从左到右、互不重叠地查找全部匹配。"""
        text = paragraph.text
        matches: list[Match] = []
        pos = 0
        last_end = -1
        while pos <= len(text):
            m = self.regex.search(text, pos)
            if m is None:
                break
            start, end = m.span()
            if self.word_regexp and not self._on_word_boundary(text, start, end):
                span = self._word_span_at(text, start)
                if span is None:
                    # 该起点没有满足单词边界的匹配，从下一个字符重新找
                    pos = start + 1
                    continue
                start, end = span
            if start == end:
                # 紧跟在上一个匹配之后的空匹配不报告
                if start != last_end:
                    matches.append(Match(paragraph, start, end))
                pos = end + 1
                continue
            matches.append(Match(paragraph, start, end))
            last_end = end
            pos = end
        return matches
