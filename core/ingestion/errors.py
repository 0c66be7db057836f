"""
Ingest Errors - Loi muc pipeline (fatal) va loi doc file (per-file).

Phan loai:
- FileReadError: Loi doc 1 file, worker chuyen thanh placeholder (recoverable)
- IngestError va subclasses: Loi lam hong ca digest, propagate len caller
"""

from enum import Enum
from pathlib import Path


class ReadErrorKind(Enum):
    """Cac buoc I/O co the that bai khi doc mot file."""

    OPEN_FAILED = "Could not open file"
    PREFIX_READ_FAILED = "Could not read file header"
    SEEK_FAILED = "Could not rewind file"
    FULL_READ_FAILED = "Could not read file"


class FileReadError(Exception):
    """
    Loi I/O khi doc mot file cu the.

    Chi ton tai ben trong worker: khong bao gio di qua channel.

    Attributes:
        kind: Buoc I/O bi loi
        path: File bi loi
        cause: OSError goc
    """

    def __init__(self, kind: ReadErrorKind, path: Path, cause: OSError):
        super().__init__(f"{kind.value}: {path}: {cause}")
        self.kind = kind
        self.path = path
        self.cause = cause


class IngestError(Exception):
    """Base error cho cac loi lam dung pipeline."""

    pass


class ResultLostError(IngestError):
    """Channel da dong nhung van con index chua duoc ghi."""

    def __init__(self, written: int, expected: int):
        super().__init__(
            f"Pipeline lost results: wrote {written} of {expected} files"
        )
        self.written = written
        self.expected = expected


class SinkWriteError(IngestError):
    """Khong ghi duoc ra output sink (disk full, broken pipe...)."""

    pass


class IngestCancelledError(IngestError):
    """Pipeline bi cancel truoc khi ghi het cac file."""

    pass
