"""
Markdown Decorator - Render moi file thanh heading + code block.

Bao gom Smart Markdown Delimiter de tranh broken markdown
khi file content chua backticks.
"""

import re
from pathlib import Path
from typing import Optional

from core.prompting.path_utils import format_path

_BACKTICK_RUN = re.compile(r"`+")


def _fence_for(content: str) -> str:
    """
    Tinh delimiter cho code block cua mot file.

    Khi content chua backticks (```), can nhieu backticks hon
    cho wrapper de tranh dong code block som.

    Returns:
        Chuoi backticks (toi thieu 3)
    """
    longest = 0
    if "`" in content:
        longest = max(len(m) for m in _BACKTICK_RUN.findall(content))
    return "`" * max(3, longest + 1)


class MarkdownDecorator:
    """
    Preset markdown.

    Format:
        ## File: path/to/file.py
        ```py
        content
        ```
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = root

    def before(self, path: Path) -> Optional[str]:
        return f"## File: {format_path(path, self.root)}"

    def after(self, path: Path) -> Optional[str]:
        # Dong trong giua cac block
        return ""

    def transform(self, path: Path, content: str) -> str:
        # Fence tinh theo tung file vi worker khong thay duoc cac file khac
        fence = _fence_for(content)
        language = path.suffix.lstrip(".")
        body = content if content.endswith("\n") else content + "\n"
        return f"{fence}{language}\n{body}{fence}\n"
