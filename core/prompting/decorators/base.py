"""
Base Decorator Protocols - Interface chung cho tat ca presets va prologue.
"""

from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ContentDecorator(Protocol):
    """
    Protocol cho decorator cua tung file.

    Duoc goi dong thoi tu nhieu worker threads: implementation
    khong duoc giu mutable state (hoac phai tu lock).
    """

    def before(self, path: Path) -> Optional[str]:
        """Text dat truoc noi dung file (None = khong co)."""
        ...

    def after(self, path: Path) -> Optional[str]:
        """Text dat sau noi dung file (None = khong co)."""
        ...

    def transform(self, path: Path, content: str) -> str:
        """Bien doi noi dung file. Token duoc dem tren ket qua nay."""
        ...


@runtime_checkable
class GlobalDecorator(Protocol):
    """Protocol cho phan mo dau digest, chi goi 1 lan tren writer thread."""

    def prologue(self, files: Sequence[Path]) -> Optional[str]:
        """Text o dau digest, truoc moi block file (None = khong co)."""
        ...
