"""
File Discovery - Tim danh sach file dua vao digest.

Duyet depth-first, entries sort theo ten de thu tu on dinh giua cac lan chay.
- Hidden files/folders (bat dau bang ".") bi bo qua
- Folders match ignore spec bi prune TRUOC KHI di vao
- .gitignore trong thu muc con ap dung cho cay con cua no
- Include/exclude globs match tren path tuong doi voi root; exclude thang include

Ket qua la danh sach CUOI CUNG: pipeline khong loc hay sort lai.
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence

import pathspec

from core.ignore_engine import (
    NestedSpec,
    build_pathspec,
    compile_patterns,
    match_nested,
    read_nested_gitignore,
)
from core.logging_config import log_debug, log_warning


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _is_ignored(
    relative: str,
    ignore_spec: pathspec.PathSpec,
    nested: Optional[List[NestedSpec]],
) -> bool:
    if nested:
        decision = match_nested(nested, relative)
        if decision is not None:
            return decision
    return ignore_spec.match_file(relative)


def _walk(
    directory: Path,
    root: Path,
    ignore_spec: pathspec.PathSpec,
    include_spec: Optional[pathspec.PathSpec],
    exclude_spec: Optional[pathspec.PathSpec],
    files: List[Path],
    nested: Optional[List[NestedSpec]] = None,
) -> None:
    """
    Duyet 1 thu muc.

    nested = None khi tat gitignore; .gitignore cua root da nam trong ignore_spec.
    """
    if nested is not None and directory != root:
        spec = read_nested_gitignore(directory)
        if spec is not None:
            nested = nested + [(directory.relative_to(root).as_posix(), spec)]

    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        log_warning(f"[Discovery] Cannot list {directory}: {e}")
        return

    for entry in entries:
        if _is_hidden(entry.name):
            continue

        path = Path(entry.path)
        relative = path.relative_to(root).as_posix()

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file()
        except OSError:
            continue

        if is_dir:
            if _is_ignored(relative + "/", ignore_spec, nested):
                continue
            _walk(path, root, ignore_spec, include_spec, exclude_spec, files, nested)
            continue

        if not is_file or _is_ignored(relative, ignore_spec, nested):
            continue
        if exclude_spec is not None and exclude_spec.match_file(relative):
            continue
        if include_spec is not None and not include_spec.match_file(relative):
            continue

        files.append(path)


def discover_files(
    root: Path,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    use_gitignore: bool = True,
    excluded_patterns: Optional[List[str]] = None,
) -> List[Path]:
    """
    Tim tat ca file can ingest duoi root.

    Args:
        root: Thu muc goc
        include: Glob patterns; rong = lay tat ca
        exclude: Glob patterns bi loai (uu tien hon include)
        use_gitignore: Co ton trong .gitignore khong
        excluded_patterns: Ignore patterns them tu settings

    Returns:
        List file paths (root / relative), theo thu tu duyet

    Raises:
        NotADirectoryError: Neu root khong phai thu muc
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    ignore_spec = build_pathspec(
        root,
        excluded_patterns=excluded_patterns,
        use_gitignore=use_gitignore,
    )
    include_spec = compile_patterns(include)
    exclude_spec = compile_patterns(exclude)

    files: List[Path] = []
    nested: Optional[List[NestedSpec]] = [] if use_gitignore else None
    _walk(root, root, ignore_spec, include_spec, exclude_spec, files, nested)

    log_debug(f"[Discovery] Found {len(files)} files under {root}")
    return files
