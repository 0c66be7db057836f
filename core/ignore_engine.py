"""
Ignore Engine - Single source of truth cho logic ignore/gitignore.

Cung cap:
- build_ignore_patterns(): Tap hop patterns tu VCS + user + gitignore
- build_pathspec(): Tao pathspec.PathSpec tu patterns
- compile_patterns(): PathSpec cho include/exclude globs cua user
- read_gitignore(): Doc .gitignore, .git/info/exclude, global gitignore
- read_nested_gitignore() / match_nested(): .gitignore trong cac thu muc con

Chi lo viec quyet dinh "file/folder nay co bi ignore khong".
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pathspec

from core.logging_config import log_debug

# === Cac VCS directories luon bi exclude ===
VCS_DIRS = [".git", ".hg", ".svn"]

# (thu muc chua .gitignore, tuong doi voi root; spec cua file do)
NestedSpec = Tuple[str, pathspec.PathSpec]


def build_ignore_patterns(
    root_path: Path,
    *,
    excluded_patterns: Optional[List[str]] = None,
    use_gitignore: bool = True,
) -> List[str]:
    """
    Tap hop tat ca ignore patterns tu nhieu nguon.

    Thu tu: VCS > User > Gitignore. Gitignore co the dung "!" de
    un-ignore pattern cua user (dung ngu nghia gitwildmatch).

    Args:
        root_path: Thu muc goc cua project
        excluded_patterns: Danh sach patterns tu settings (gitignore format)
        use_gitignore: Co doc .gitignore khong (default: True)

    Returns:
        List cac ignore patterns (gitignore format)
    """
    patterns: List[str] = []

    # 1. Luon exclude VCS directories
    patterns.extend(f"{vcs_dir}/" for vcs_dir in VCS_DIRS)

    # 2. User-defined patterns
    if excluded_patterns:
        patterns.extend(excluded_patterns)

    # 3. Gitignore patterns (.gitignore + .git/info/exclude + global)
    if use_gitignore:
        patterns.extend(read_gitignore(root_path))

    return patterns


def build_pathspec(
    root_path: Path,
    *,
    excluded_patterns: Optional[List[str]] = None,
    use_gitignore: bool = True,
) -> pathspec.PathSpec:
    """
    Tao pathspec.PathSpec tu tat ca ignore patterns.

    Returns:
        pathspec.PathSpec object de match files/folders (path tuong doi voi root)
    """
    patterns = build_ignore_patterns(
        root_path,
        excluded_patterns=excluded_patterns,
        use_gitignore=use_gitignore,
    )
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def compile_patterns(patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    """
    Compile include/exclude globs cua user thanh PathSpec.

    Dung ngu nghia gitwildmatch: "*.py" match moi .py o moi cap,
    "src/*.py" chi match trong src/, "utils.py" match theo ten file.

    Returns:
        PathSpec, hoac None neu khong co pattern nao
    """
    cleaned = [p.strip() for p in patterns if p and p.strip()]
    if not cleaned:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", cleaned)


def _read_pattern_file(path: Path) -> List[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []


def read_gitignore(root_path: Path) -> List[str]:
    """
    Doc .gitignore va .git/info/exclude va global gitignore.

    Sources (theo thu tu):
    1. Global gitignore (~/.config/git/ignore hoac ~/.gitignore_global)
    2. root_path/.git/info/exclude
    3. root_path/.gitignore

    Project .gitignore dung cuoi de co the override global bang "!".

    Args:
        root_path: Thu muc goc chua .gitignore

    Returns:
        List cac gitignore patterns (raw lines tu file)
    """
    patterns: List[str] = []

    home = Path.home()
    global_ignore_candidates = [
        home / ".config" / "git" / "ignore",
        home / ".gitignore_global",
    ]
    for candidate in global_ignore_candidates:
        if candidate.is_file():
            patterns.extend(_read_pattern_file(candidate))
            break  # Chi doc mot file

    exclude_path = root_path / ".git" / "info" / "exclude"
    if exclude_path.is_file():
        patterns.extend(_read_pattern_file(exclude_path))

    gitignore_path = root_path / ".gitignore"
    if gitignore_path.is_file():
        patterns.extend(_read_pattern_file(gitignore_path))

    log_debug(f"[Ignore] {len(patterns)} gitignore patterns for {root_path}")
    return patterns


def read_nested_gitignore(directory: Path) -> Optional[pathspec.PathSpec]:
    """
    Compile .gitignore cua mot thu muc con.

    Patterns trong file nay duoc match tren path tuong doi voi chinh
    thu muc do (giong git).

    Returns:
        PathSpec, hoac None neu thu muc khong co .gitignore
    """
    gitignore_path = directory / ".gitignore"
    if not gitignore_path.is_file():
        return None
    return pathspec.PathSpec.from_lines(
        "gitwildmatch", _read_pattern_file(gitignore_path)
    )


def match_nested(nested: Sequence[NestedSpec], relative: str) -> Optional[bool]:
    """
    Quyet dinh ignore theo cac .gitignore long nhau.

    nested xep tu nong den sau; .gitignore sau hon co tieng noi cuoi
    cung, ke ca khi no dung "!" de un-ignore.

    Args:
        nested: Cac spec cua thu muc to tien cua path
        relative: Path tuong doi voi root (thu muc co "/" o cuoi)

    Returns:
        True (ignore), False (un-ignore), None neu khong pattern nao match
    """
    decision: Optional[bool] = None
    for base, spec in nested:
        local = relative[len(base) + 1 :] if base else relative
        result = spec.check_file(local)
        if result.include is not None:
            decision = result.include
    return decision
