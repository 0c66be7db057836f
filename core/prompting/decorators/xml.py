"""
XML Decorator - Boc moi file trong the <file path="...">.

Output format:
    <file path="src/main.py">
    content (HTML-escaped)
    </file>
"""

import html
from pathlib import Path
from typing import Optional

from core.prompting.path_utils import format_path


class XmlDecorator:
    """Preset XML: toan bo wrapper nam trong transform, khong co before/after."""

    def __init__(self, root: Optional[Path] = None):
        self.root = root

    def before(self, path: Path) -> Optional[str]:
        return None

    def after(self, path: Path) -> Optional[str]:
        return None

    def transform(self, path: Path, content: str) -> str:
        escaped_path = html.escape(format_path(path, self.root))
        escaped_content = html.escape(content, quote=False)
        return f'<file path="{escaped_path}">\n{escaped_content}\n</file>'
