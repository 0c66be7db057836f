"""
File Classifier - Quyet dinh xu ly hay skip mot file truoc khi doc.

Thu tu kiem tra:
1. Kich thuoc (chi dung metadata, khong doc file)
2. Binary sniff tren 1024 bytes dau
3. Seek ve dau file roi doc toan bo noi dung

Moi loi I/O duoc raise thanh FileReadError de worker doi thanh placeholder.
Khong retry.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from config.ingest_settings import BINARY_PREFIX_SIZE, MAX_FILE_SIZE
from core.binary_detection import looks_binary
from core.ingestion.errors import FileReadError, ReadErrorKind


class FileCategory(Enum):
    """Ket qua phan loai cua mot file."""

    PROCESS = "process"
    SKIP_TOO_LARGE = "too_large"
    SKIP_BINARY = "binary"


@dataclass(frozen=True, slots=True)
class LoadedFile:
    """
    Ket qua cua load_file().

    Attributes:
        category: Ket qua phan loai
        size: Kich thuoc file (bytes) theo metadata
        content: Noi dung text, chi co khi category == PROCESS
    """

    category: FileCategory
    size: int
    content: Optional[str] = None


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        raise FileReadError(ReadErrorKind.OPEN_FAILED, path, e) from e


def _sniff_prefix(handle: BinaryIO, path: Path, prefix_size: int) -> bytes:
    try:
        return handle.read(prefix_size)
    except OSError as e:
        raise FileReadError(ReadErrorKind.PREFIX_READ_FAILED, path, e) from e


def _inspect(
    path: Path,
    max_file_size: int,
    prefix_size: int,
    read_content: bool,
) -> LoadedFile:
    size = _file_size(path)
    if size > max_file_size:
        return LoadedFile(category=FileCategory.SKIP_TOO_LARGE, size=size)

    try:
        handle = open(path, "rb")
    except OSError as e:
        raise FileReadError(ReadErrorKind.OPEN_FAILED, path, e) from e

    with handle:
        prefix = _sniff_prefix(handle, path, prefix_size)
        if looks_binary(prefix):
            return LoadedFile(category=FileCategory.SKIP_BINARY, size=size)

        if not read_content:
            return LoadedFile(category=FileCategory.PROCESS, size=size)

        # Prefix da tieu thu bytes dau file -> phai quay ve offset 0
        try:
            handle.seek(0)
        except OSError as e:
            raise FileReadError(ReadErrorKind.SEEK_FAILED, path, e) from e

        try:
            raw = handle.read()
        except OSError as e:
            raise FileReadError(ReadErrorKind.FULL_READ_FAILED, path, e) from e

    return LoadedFile(
        category=FileCategory.PROCESS,
        size=size,
        content=raw.decode("utf-8", errors="replace"),
    )


def classify_file(
    path: Path,
    max_file_size: int = MAX_FILE_SIZE,
    prefix_size: int = BINARY_PREFIX_SIZE,
) -> FileCategory:
    """
    Phan loai file ma khong doc toan bo noi dung.

    Args:
        path: File can phan loai
        max_file_size: Tran kich thuoc (file bang dung tran van duoc xu ly)
        prefix_size: So bytes dau file dung de phat hien binary

    Returns:
        FileCategory

    Raises:
        FileReadError: Neu stat/open/doc prefix that bai
    """
    return _inspect(path, max_file_size, prefix_size, read_content=False).category


def load_file(
    path: Path,
    max_file_size: int = MAX_FILE_SIZE,
    prefix_size: int = BINARY_PREFIX_SIZE,
) -> LoadedFile:
    """
    Phan loai file va doc noi dung text neu file duoc xu ly.

    Decode UTF-8 voi errors="replace": byte sai encoding sau prefix
    khong lam hong ca file.

    Args:
        path: File can doc
        max_file_size: Tran kich thuoc
        prefix_size: So bytes dau file dung de phat hien binary

    Returns:
        LoadedFile voi content (neu PROCESS)

    Raises:
        FileReadError: Neu bat ky buoc I/O nao that bai
    """
    return _inspect(path, max_file_size, prefix_size, read_content=True)
