"""
Path Utilities - Single source of truth cho viec hien thi duong dan trong digest.

Digest luon dung forward slashes va khong co tien to "./",
de output giong nhau tren moi OS.
"""

from pathlib import Path, PurePath
from typing import Optional


def relative_to_root(path: Path, root: Optional[Path]) -> PurePath:
    """
    Tra ve path tuong doi voi root neu path nam trong root.

    Khong resolve symlink: so sanh tren duong dan nhu da truyen vao,
    fallback ve path goc neu khong nam trong root.
    """
    if root is None:
        return path
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def format_path(path: PurePath, root: Optional[Path] = None) -> str:
    """
    Format path de hien thi trong digest.

    - Tuong doi voi root (neu co)
    - Bo tien to "." (vd: ./src/main.py -> src/main.py)
    - Noi cac thanh phan bang "/"

    Args:
        path: Duong dan file
        root: Thu muc goc cua digest (optional)

    Returns:
        Path string dung trong output
    """
    if root is not None and isinstance(path, Path):
        path = relative_to_root(path, root)
    # PurePath tu bo cac thanh phan "." khi parse
    parts = list(path.parts)
    if path.anchor:
        anchor = path.anchor.replace("\\", "/")
        return anchor + "/".join(parts[1:])
    return "/".join(parts)
