"""
Ingest Types - Cac kieu du lieu dung chung cho pipeline ingest.

Cung cap:
- FileTask: 1 file can xu ly, kem vi tri trong input
- ProcessedResult: Ket qua cua 1 worker (luon co, ke ca khi skip/loi)
- IngestMetrics: So lieu tong hop do writer tich luy
- IngestOptions: Tham so cua pipeline (channel, window, workers, limits)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config.ingest_settings import (
    BINARY_PREFIX_SIZE,
    CHANNEL_CAPACITY,
    MAX_FILE_SIZE,
    REORDER_WINDOW,
)


@dataclass(frozen=True, slots=True)
class FileTask:
    """
    Mot file can ingest.

    Attributes:
        index: Vi tri 0-based trong danh sach input (quyet dinh thu tu output)
        path: Duong dan file
    """

    index: int
    path: Path


@dataclass(frozen=True, slots=True)
class ProcessedResult:
    """
    Ket qua xu ly 1 file, san sang de ghi ra sink.

    Skip va loi cung la ProcessedResult (body la placeholder, token_count=0)
    de channel chi co mot kieu phan tu duy nhat.

    Attributes:
        index: Trung voi FileTask.index
        body: Block da format day du (before + content + after)
        token_count: So token cua transformed content
    """

    index: int
    body: str
    token_count: int = 0


@dataclass
class IngestMetrics:
    """
    So lieu tong hop cua mot lan ingest.

    Attributes:
        total_tokens: Tong token, None neu khong bat tokenizer
        files_written: So block da ghi ra sink
        peak_pending: Kich thuoc lon nhat cua reorder buffer
    """

    total_tokens: Optional[int] = None
    files_written: int = 0
    peak_pending: int = 0


@dataclass(frozen=True)
class IngestOptions:
    """
    Tham so cho pipeline coordinator.

    Attributes:
        max_workers: So worker threads (None = tu dong)
        channel_capacity: Suc chua channel worker -> writer
        reorder_window: So task toi da da dispatch ma chua ghi (None = khong gioi han)
        max_file_size: File lon hon gia tri nay bi skip
        prefix_size: So bytes dau file dung cho binary detection
        display_root: Goc de hien thi path trong placeholder (None = path nhu da truyen)
    """

    max_workers: Optional[int] = None
    channel_capacity: int = CHANNEL_CAPACITY
    reorder_window: Optional[int] = REORDER_WINDOW
    max_file_size: int = MAX_FILE_SIZE
    prefix_size: int = BINARY_PREFIX_SIZE
    display_root: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.channel_capacity < 1:
            raise ValueError("channel_capacity must be >= 1")
        if self.reorder_window is not None and self.reorder_window < 1:
            raise ValueError("reorder_window must be >= 1 or None")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1 or None")
        if self.max_file_size < 0:
            raise ValueError("max_file_size must be >= 0")
