"""
File Tree Prologue - Phan mo dau digest liet ke cac file duoc include.

Hai che do:
- LIST: danh sach phang "- path"
- TREE: cay thu muc ve bang box-drawing characters

Vi du TREE:
    File structure:
    ├── src/
    │   └── main.py
    └── README.md
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from config.output_format import PrologueMode
from core.prompting.path_utils import format_path, relative_to_root

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


@dataclass
class _TreeNode:
    """Node trong cay thu muc (children sort theo ten)."""

    children: dict[str, "_TreeNode"] = field(default_factory=dict)
    is_file: bool = False


def _build_tree(root: Optional[Path], files: Sequence[Path]) -> _TreeNode:
    root_node = _TreeNode()
    for file in files:
        current = root_node
        for part in relative_to_root(file, root).parts:
            current = current.children.setdefault(part, _TreeNode())
        current.is_file = True
    return root_node


def _render_tree(node: _TreeNode, prefix: str, lines: list[str]) -> None:
    names = sorted(node.children)
    for i, name in enumerate(names):
        child = node.children[name]
        is_last = i == len(names) - 1
        connector = LAST_BRANCH if is_last else BRANCH
        suffix = "" if child.is_file else "/"
        lines.append(f"{prefix}{connector}{name}{suffix}")

        if child.children:
            child_prefix = prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)
            _render_tree(child, child_prefix, lines)


class FileTreePrologue:
    """
    GlobalDecorator in danh sach hoac cay file o dau digest.

    Attributes:
        root: Thu muc goc, dung de rut gon path
        mode: PrologueMode (OFF, LIST, TREE)
    """

    def __init__(self, root: Optional[Path] = None, mode: PrologueMode = PrologueMode.LIST):
        self.root = root
        self.mode = mode

    def prologue(self, files: Sequence[Path]) -> Optional[str]:
        if self.mode == PrologueMode.OFF:
            return None

        if self.mode == PrologueMode.LIST:
            lines = ["Files included in this digest:"]
            lines.extend(f"- {format_path(file, self.root)}" for file in files)
        else:
            lines = ["File structure:"]
            _render_tree(_build_tree(self.root, files), "", lines)

        return "\n".join(lines) + "\n\n"
