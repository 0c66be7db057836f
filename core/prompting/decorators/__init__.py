"""
Package core.prompting.decorators - Presets dau ra va prologue.

Modules:
- base: ContentDecorator / GlobalDecorator protocols
- default, markdown, xml: Cac preset cho tung file
- file_tree: Prologue dang danh sach hoac cay

Preset duoc chon MOT LAN luc khoi dong qua create_decorator()
roi truyen vao pipeline.
"""

from pathlib import Path
from typing import Optional

from config.output_format import Preset, PrologueMode
from core.prompting.decorators.base import ContentDecorator, GlobalDecorator
from core.prompting.decorators.default import DefaultDecorator
from core.prompting.decorators.file_tree import FileTreePrologue
from core.prompting.decorators.markdown import MarkdownDecorator
from core.prompting.decorators.xml import XmlDecorator

_PRESET_TO_DECORATOR = {
    Preset.DEFAULT: DefaultDecorator,
    Preset.MARKDOWN: MarkdownDecorator,
    Preset.XML: XmlDecorator,
}


def create_decorator(preset: Preset, root: Optional[Path] = None) -> ContentDecorator:
    """
    Tao ContentDecorator cho preset.

    Args:
        preset: Preset da chon
        root: Thu muc goc de hien thi path tuong doi

    Returns:
        ContentDecorator instance
    """
    return _PRESET_TO_DECORATOR[preset](root=root)


def create_prologue(mode: PrologueMode, root: Optional[Path] = None) -> Optional[GlobalDecorator]:
    """Tao prologue decorator, None neu mode = OFF."""
    if mode == PrologueMode.OFF:
        return None
    return FileTreePrologue(root=root, mode=mode)


__all__ = [
    "ContentDecorator",
    "GlobalDecorator",
    "DefaultDecorator",
    "MarkdownDecorator",
    "XmlDecorator",
    "FileTreePrologue",
    "create_decorator",
    "create_prologue",
]
