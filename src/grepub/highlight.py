"""Terminal highlighting on top of rich.

``auto`` leaves terminal detection to rich's Console; ``always`` forces
ANSI output, ``never`` disables styling altogether.
"""

from __future__ import annotations

from typing import IO, Iterable

from rich.console import Console
from rich.text import Text

from .config import ColorMode
from .model import Match

MATCH_STYLE = "bold red"
FILENAME_STYLE = "magenta"
SEPARATOR_STYLE = "cyan"


def make_console(color: ColorMode, file: IO[str] | None = None) -> Console:
    if color is ColorMode.ALWAYS:
        return Console(file=file, force_terminal=True, color_system="standard", highlight=False, soft_wrap=True)
    if color is ColorMode.NEVER:
        return Console(file=file, color_system=None, highlight=False, soft_wrap=True)
    return Console(file=file, highlight=False, soft_wrap=True)


class Highlighter:
    def __init__(self, color: ColorMode, file: IO[str] | None = None):
        self.color = color
        self.console = make_console(color, file)

    @property
    def enabled(self) -> bool:
        return self.console.color_system is not None

    def render(self, text: str, matches: Iterable[Match], prefix: str | None = None) -> Text:
        line = Text()
        if prefix:
            line.append(prefix, style=FILENAME_STYLE)
            line.append(":", style=SEPARATOR_STYLE)
        offset = len(line)
        line.append(text)
        for m in matches:
            if m.end > m.start:
                line.stylize(MATCH_STYLE, offset + m.start, offset + m.end)
        return line

    def print(self, line: Text | str) -> None:
        self.console.print(line, markup=False, emoji=False)
