"""
DigestService - Ghep cac buoc tao digest thanh mot API don gian.

Flow:
    (clone neu input la URL) -> discover_files -> chon preset/prologue
    -> load tokenizer MOT LAN -> open_sink -> ingest -> DigestReport

Khong co state internal - moi call doc lap.
"""

import tempfile
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from config.ingest_settings import IngestSettings
from core.file_discovery import discover_files
from core.encoders import load_token_counter
from core.ingestion import IngestOptions, OutputDestination, ingest, open_sink
from core.ingestion.sinks import NullSink
from core.logging_config import log_info
from core.prompting.decorators import create_decorator, create_prologue
from core.utils.repo_manager import check_git_installed, clone_repo, is_remote_url


@dataclass
class DigestRequest:
    """
    Tham so cho mot lan tao digest.

    Attributes:
        input: Local path hoac remote git URL
        branch: Branch/tag khi clone (chi dung cho URL)
        include: Glob patterns can lay (rong = tat ca)
        exclude: Glob patterns bi loai
        destination: FILE, STDOUT hoac NULL (dry run)
        output_path: File dich khi destination = FILE
        settings: IngestSettings da merge voi CLI overrides
    """

    input: str = "."
    branch: Optional[str] = None
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    destination: OutputDestination = OutputDestination.FILE
    output_path: Optional[Path] = None
    settings: IngestSettings = field(default_factory=IngestSettings)


@dataclass
class DigestReport:
    """
    Ket qua cua mot lan tao digest.

    digest_chars chi co gia tri khi dry run (so ky tu digest le ra se ghi).
    """

    file_count: int = 0
    total_tokens: Optional[int] = None
    discovery_seconds: float = 0.0
    ingestion_seconds: float = 0.0
    total_seconds: float = 0.0
    output_path: Optional[Path] = None
    digest_chars: Optional[int] = None


def build_options(
    settings: IngestSettings, display_root: Optional[Path] = None
) -> IngestOptions:
    """Chuyen IngestSettings thanh IngestOptions cho pipeline."""
    return IngestOptions(
        display_root=display_root,
        max_workers=settings.get_max_workers(),
        channel_capacity=settings.channel_capacity,
        reorder_window=settings.get_reorder_window(),
        max_file_size=settings.max_file_size,
    )


def _without_output(files: List[Path], output_path: Path) -> List[Path]:
    target = output_path.resolve()
    return [f for f in files if f.resolve() != target]


def build_digest(
    request: DigestRequest,
    cancel_event: Optional[threading.Event] = None,
) -> DigestReport:
    """
    Tao digest cho request.

    Args:
        request: DigestRequest
        cancel_event: Set de huy giua chung (optional)

    Returns:
        DigestReport

    Raises:
        ValueError: Preset/prologue/options khong hop le
        NotADirectoryError: Input local khong phai thu muc
        RepoError: Clone that bai
        IngestError: Pipeline that bai
    """
    started = time.perf_counter()
    settings = request.settings

    # Validate truoc khi clone/discover
    preset = settings.get_preset()
    prologue_mode = settings.get_prologue_mode()
    build_options(settings)

    clone_dir: Optional[tempfile.TemporaryDirectory] = None
    try:
        if is_remote_url(request.input):
            check_git_installed()
            clone_dir = clone_repo(request.input, branch=request.branch)
            root = Path(clone_dir.name)
        else:
            root = Path(request.input)

        files = discover_files(
            root,
            include=request.include,
            exclude=request.exclude,
            use_gitignore=settings.use_gitignore,
            excluded_patterns=settings.excluded_patterns,
        )
        if request.destination == OutputDestination.FILE and request.output_path:
            # Digest cu nam trong root khong duoc tu nap vao chinh no
            files = _without_output(files, request.output_path)
        discovered = time.perf_counter()
        report = DigestReport(
            file_count=len(files),
            discovery_seconds=discovered - started,
        )

        if not files:
            log_info(f"[Digest] No files matched under {root}")
            report.total_seconds = time.perf_counter() - started
            return report

        decorator = create_decorator(preset, root=root)
        global_decorator = create_prologue(prologue_mode, root=root)
        tokenizer = (
            load_token_counter(settings.encoding_name) if settings.count_tokens else None
        )

        with open_sink(request.destination, request.output_path) as sink:
            metrics = ingest(
                files,
                sink,
                decorator,
                global_decorator=global_decorator,
                tokenizer=tokenizer,
                options=build_options(settings, display_root=root),
                cancel_event=cancel_event,
            )
            if isinstance(sink, NullSink):
                report.digest_chars = sink.chars_discarded

        finished = time.perf_counter()
        report.total_tokens = metrics.total_tokens
        report.ingestion_seconds = finished - discovered
        report.total_seconds = finished - started
        if request.destination == OutputDestination.FILE:
            report.output_path = request.output_path
        return report
    finally:
        if clone_dir is not None:
            clone_dir.cleanup()
