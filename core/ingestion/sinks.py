"""
Output Sinks - Noi nhan digest (file, stdout, hoac bo di).

Sink chi duoc ghi boi writer thread, khong can lock.
NullSink dung cho dry run: van chay pipeline de co token estimate.
"""

import sys
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Protocol, TextIO


class OutputDestination(Enum):
    """Cac loai dich cua digest."""

    FILE = "file"
    STDOUT = "stdout"
    NULL = "null"


class OutputSink(Protocol):
    """Sink append-only cho digest."""

    def write(self, text: str) -> None: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class StreamSink:
    """Ghi ra mot text stream co san (stdout, StringIO). Khong dong stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def write(self, text: str) -> None:
        self.stream.write(text)

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        self.flush()


def _utf8_stream(stream: TextIO) -> TextIO:
    """Chuyen stream sang UTF-8 neu duoc (console Windows mac dinh cp1252)."""
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors="replace")
    return stream


class FileSink:
    """
    Ghi digest ra file (UTF-8, newline giu nguyen "\\n").

    File duoc tao (hoac ghi de) ngay khi khoi tao sink.
    """

    def __init__(self, path: Path):
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(path, "w", encoding="utf-8", newline="\n")

    def write(self, text: str) -> None:
        self._handle.write(text)

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class NullSink:
    """Bo di moi thu (dry run), chi dem so ky tu da nhan."""

    def __init__(self) -> None:
        self.chars_discarded = 0

    def write(self, text: str) -> None:
        self.chars_discarded += len(text)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


@contextmanager
def open_sink(
    destination: OutputDestination,
    path: Optional[Path] = None,
) -> Iterator[OutputSink]:
    """
    Mo sink theo destination va dong no khi ket thuc.

    Args:
        destination: FILE, STDOUT hoac NULL
        path: Bat buoc khi destination = FILE

    Yields:
        OutputSink
    """
    sink: OutputSink
    if destination == OutputDestination.FILE:
        if path is None:
            raise ValueError("A file destination requires an output path")
        sink = FileSink(path)
    elif destination == OutputDestination.STDOUT:
        sink = StreamSink(_utf8_stream(sys.stdout))
    else:
        sink = NullSink()

    try:
        yield sink
    finally:
        sink.close()
