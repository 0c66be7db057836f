"""
Output Format Configuration - Registry cho cac preset dau ra va prologue mode.

Thiet ke extensible: Them preset moi chi can them entry vao PRESETS dict
va mot ContentDecorator tuong ung trong core/prompting/decorators.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class Preset(Enum):
    """
    Enum cac preset dau ra duoc ho tro.

    Moi preset tuong ung voi mot ContentDecorator.
    """

    DEFAULT = "default"
    MARKDOWN = "markdown"
    XML = "xml"


class PrologueMode(Enum):
    """Che do cua prologue (phan dau digest)."""

    OFF = "off"
    LIST = "list"
    TREE = "tree"


@dataclass(frozen=True)
class PresetConfig:
    """
    Cau hinh cho mot preset.

    Attributes:
        id: ID duy nhat (trung voi enum value)
        name: Ten hien thi
        description: Mo ta ngan 1 dong
    """

    id: str
    name: str
    description: str


# ============================================================================
# PRESET REGISTRY
# ============================================================================

PRESETS: Dict[Preset, PresetConfig] = {
    Preset.DEFAULT: PresetConfig(
        id="default",
        name="Default",
        description="Header ==== FILE: path ==== truoc moi file",
    ),
    Preset.MARKDOWN: PresetConfig(
        id="markdown",
        name="Markdown",
        description="Heading + code block co syntax highlighting",
    ),
    Preset.XML: PresetConfig(
        id="xml",
        name="XML",
        description="Moi file boc trong the <file path=...>",
    ),
}

DEFAULT_PRESET = Preset.DEFAULT
DEFAULT_PROLOGUE_MODE = PrologueMode.LIST


def parse_preset(value: str) -> Preset:
    """
    Chuyen string (tu CLI/settings) thanh Preset enum.

    Args:
        value: Ten preset, khong phan biet hoa thuong

    Returns:
        Preset tuong ung

    Raises:
        ValueError: Neu ten preset khong hop le
    """
    try:
        return Preset(value.strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in Preset)
        raise ValueError(f"Unknown preset '{value}' (expected one of: {valid})")


def parse_prologue_mode(value: str) -> PrologueMode:
    """Chuyen string thanh PrologueMode, raise ValueError neu khong hop le."""
    try:
        return PrologueMode(value.strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in PrologueMode)
        raise ValueError(f"Unknown prologue mode '{value}' (expected one of: {valid})")


def get_all_preset_ids() -> List[str]:
    """Danh sach preset IDs theo thu tu khai bao."""
    return [config.id for config in PRESETS.values()]
