"""grepub: 在 epub 电子书正文中检索正则表达式。

流程：打开压缩包 -> 解析 container.xml / OPF 得到阅读顺序 -> 按段落提取正文
-> 逐段匹配 -> 高亮输出 / 计数 / 仅退出码。
"""

__version__ = "0.1.0"

__all__ = [
    "SearchConfig",
    "ColorMode",
    "Matcher",
    "resolve",
    "open_container",
    "run_search",
]

from .config import ColorMode, SearchConfig  # noqa: E402
from .matcher import Matcher  # noqa: E402
from .manifest import resolve  # noqa: E402
from .archive import open_container  # noqa: E402
from .runner import run_search  # noqa: E402
