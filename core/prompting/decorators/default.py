"""
Default Decorator - Header kieu gitingest truoc moi file.

Format:
    ================================================
    FILE: path/to/file
    ================================================
    content

"""

from pathlib import Path
from typing import Optional

from core.prompting.path_utils import format_path

SEPARATOR = "=" * 48


class DefaultDecorator:
    """Preset mac dinh: header 3 dong, noi dung giu nguyen, 1 dong trong sau file."""

    def __init__(self, root: Optional[Path] = None):
        self.root = root

    def before(self, path: Path) -> Optional[str]:
        return f"{SEPARATOR}\nFILE: {format_path(path, self.root)}\n{SEPARATOR}\n"

    def after(self, path: Path) -> Optional[str]:
        # Chuoi rong -> worker them newline -> 1 dong trong giua cac file
        return ""

    def transform(self, path: Path, content: str) -> str:
        return content
