"""
Ingest Worker - Xu ly 1 FileTask thanh 1 ProcessedResult.

Pipeline cua moi file (chay doc lap, song song):
    classify -> doc full text -> before -> transform -> after -> ghep body
    -> dem token tren transformed content (khong tinh before/after)

Moi task LUON tra ve dung 1 ProcessedResult: skip va loi I/O
tro thanh placeholder trong body voi token_count = 0.
"""

from pathlib import Path
from typing import Optional

from core.ingestion.classifier import FileCategory, load_file
from core.ingestion.errors import FileReadError
from core.ingestion.types import FileTask, IngestOptions, ProcessedResult
from core.logging_config import log_debug, log_warning
from core.prompting.decorators.base import ContentDecorator
from core.prompting.path_utils import format_path
from core.tokenization.counter import TokenCounter


def _placeholder(path: Path, label: str, root: Optional[Path]) -> str:
    return f"*** {label} ({format_path(path, root)}) ***"


def skip_placeholder(
    path: Path,
    category: FileCategory,
    size: int,
    limit: int,
    root: Optional[Path] = None,
) -> str:
    """
    Tao placeholder cho file bi skip.

    Args:
        path: File bi skip
        category: Ly do skip (SKIP_BINARY hoac SKIP_TOO_LARGE)
        size: Kich thuoc file
        limit: Tran kich thuoc dang ap dung
        root: Goc hien thi path (optional)

    Returns:
        Placeholder text, vd: "*** Skipped: Binary file (assets/logo.png) ***"
    """
    if category == FileCategory.SKIP_BINARY:
        return _placeholder(path, "Skipped: Binary file", root)
    return _placeholder(
        path, f"Skipped: File too large ({size} bytes, limit {limit} bytes)", root
    )


def error_placeholder(error: FileReadError, root: Optional[Path] = None) -> str:
    """Placeholder cho loi I/O, vd: "*** Error: Could not open file (a.txt) ***"."""
    return _placeholder(error.path, f"Error: {error.kind.value}", root)


def render_body(
    path: Path,
    content: str,
    decorator: ContentDecorator,
) -> tuple[str, str]:
    """
    Ghep before + transform(content) + after thanh 1 block.

    Moi phan (neu khong None) duoc dam bao ket thuc bang dung 1 newline.

    Returns:
        Tuple (body, transformed_content)
    """
    transformed = decorator.transform(path, content)
    parts = [decorator.before(path), transformed, decorator.after(path)]

    body = "".join(
        part if part.endswith("\n") else part + "\n"
        for part in parts
        if part is not None
    )
    return body, transformed


def process_file(
    task: FileTask,
    decorator: ContentDecorator,
    tokenizer: Optional[TokenCounter] = None,
    options: IngestOptions = IngestOptions(),
) -> ProcessedResult:
    """
    Xu ly mot file thanh ProcessedResult.

    Khong raise cho loi cua rieng file (skip, I/O): chung duoc
    the hien bang placeholder. Loi tu decorator/tokenizer thi propagate.

    Args:
        task: FileTask can xu ly
        decorator: Preset cho tung file
        tokenizer: TokenCounter (None = khong dem token)
        options: Gioi han kich thuoc, prefix va goc hien thi path

    Returns:
        ProcessedResult voi cung index voi task
    """
    path = task.path

    try:
        loaded = load_file(path, options.max_file_size, options.prefix_size)
    except FileReadError as e:
        log_warning(f"[Ingest] {e}")
        body, _ = render_body(
            path, error_placeholder(e, options.display_root), decorator
        )
        return ProcessedResult(index=task.index, body=body, token_count=0)

    if loaded.category != FileCategory.PROCESS:
        log_debug(f"[Ingest] Skipping {path} ({loaded.category.value})")
        placeholder = skip_placeholder(
            path,
            loaded.category,
            loaded.size,
            options.max_file_size,
            options.display_root,
        )
        body, _ = render_body(path, placeholder, decorator)
        return ProcessedResult(index=task.index, body=body, token_count=0)

    body, transformed = render_body(path, loaded.content or "", decorator)
    token_count = tokenizer.count_tokens(transformed) if tokenizer is not None else 0
    return ProcessedResult(index=task.index, body=body, token_count=token_count)
