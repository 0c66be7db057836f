"""
Reorder Writer - Consumer duy nhat cua channel, khoi phuc thu tu input.

Workers hoan thanh theo thu tu bat ky. Writer giu cac ket qua den som
trong reorder buffer (dict index -> result) va chi ghi ra sink khi
tat ca index nho hon da duoc ghi.

State machine:
    DRAINING -> nhan result, ghi cac doan lien tiep san sang
    FLUSHING -> channel da dong, kiem tra khong con result nao bi mat
    DONE     -> tra ve IngestMetrics

Neu sink loi giua chung (bat ky exception nao, vd: UnicodeEncodeError
tren console khong phai UTF-8), writer ghi nho loi va TIEP TUC rut
channel (bo di ket qua) cho den sentinel, de workers dang block tren
put() khong bao gio bi treo. Loi duoc raise sau cung.
"""

import queue
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from core.ingestion.errors import IngestError, ResultLostError, SinkWriteError
from core.ingestion.sinks import OutputSink
from core.ingestion.types import IngestMetrics, ProcessedResult
from core.logging_config import log_debug, log_error
from core.prompting.decorators.base import GlobalDecorator


class _ChannelClosed:
    """Sentinel type: coordinator dat vao channel sau khi moi worker xong."""

    def __repr__(self) -> str:
        return "CHANNEL_CLOSED"


CHANNEL_CLOSED = _ChannelClosed()


class WriterState(Enum):
    DRAINING = "draining"
    FLUSHING = "flushing"
    DONE = "done"


class ReorderWriter:
    """
    Reorder-and-write stage.

    Chi writer thread cham vao sink, reorder buffer va metrics.

    Attributes:
        state: WriterState hien tai
        next_index: Index nho nhat chua duoc ghi
        pending: Reorder buffer (index -> ProcessedResult)
        metrics: So lieu tich luy
    """

    def __init__(
        self,
        channel: "queue.Queue[object]",
        sink: OutputSink,
        total_files: int,
        files: Sequence[Path] = (),
        global_decorator: Optional[GlobalDecorator] = None,
        count_tokens: bool = False,
        window: Optional[threading.Semaphore] = None,
        abort_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            channel: Queue nhan ProcessedResult va CHANNEL_CLOSED
            sink: Noi ghi digest
            total_files: So result phai nhan duoc
            files: Danh sach file (cho prologue)
            global_decorator: Prologue, ghi truoc moi block
            count_tokens: Co tong hop token hay khong
            window: Semaphore reorder window, release 1 slot moi result da xu ly
            abort_event: Set khi sink loi de coordinator ngung dispatch
        """
        self.channel = channel
        self.sink = sink
        self.total_files = total_files
        self.files = files
        self.global_decorator = global_decorator
        self.window = window
        self.abort_event = abort_event

        self.state = WriterState.DRAINING
        self.next_index = 0
        self.pending: dict[int, ProcessedResult] = {}
        self.metrics = IngestMetrics(total_tokens=0 if count_tokens else None)
        self._error: Optional[IngestError] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> IngestMetrics:
        """
        Chay writer cho den khi channel dong.

        Returns:
            IngestMetrics

        Raises:
            SinkWriteError: Sink khong ghi duoc
            ResultLostError: Channel dong khi con index chua ghi
            IngestError: Prologue loi
        """
        self._write_prologue()

        while True:
            item = self.channel.get()
            if item is CHANNEL_CLOSED:
                break
            try:
                self._accept(item)
            except Exception as e:
                # Van rut channel den sentinel, loi raise o _finish
                error = IngestError(f"Writer failed: {e}")
                error.__cause__ = e
                self._fail(error)

        self.state = WriterState.FLUSHING
        return self._finish()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, error: IngestError) -> None:
        log_error(f"[Writer] {error}")
        self._error = error
        if self.abort_event is not None:
            self.abort_event.set()
        # Bo cac result dang cho, tra lai slot cua chung
        for _ in range(len(self.pending)):
            self._release_slot()
        self.pending.clear()

    def _release_slot(self) -> None:
        if self.window is not None:
            self.window.release()

    def _write_prologue(self) -> None:
        if self.global_decorator is None:
            return
        try:
            text = self.global_decorator.prologue(self.files)
        except Exception as e:
            error = IngestError(f"Prologue generation failed: {e}")
            error.__cause__ = e
            self._fail(error)
            return

        if text is None:
            return
        try:
            self.sink.write(text)
        except Exception as e:
            error = SinkWriteError(f"Failed to write prologue: {e}")
            error.__cause__ = e
            self._fail(error)

    def _accept(self, result: ProcessedResult) -> None:
        if self._error is not None:
            # Pipeline da hong: chi rut channel cho workers khong bi block
            self._release_slot()
            return

        if result.index < self.next_index or result.index in self.pending:
            self._fail(IngestError(f"Duplicate result for index {result.index}"))
            return

        self.pending[result.index] = result
        if len(self.pending) > self.metrics.peak_pending:
            self.metrics.peak_pending = len(self.pending)

        self._flush_ready()

    def _flush_ready(self) -> None:
        """Ghi moi result lien tiep bat dau tu next_index."""
        while self.next_index in self.pending:
            result = self.pending.pop(self.next_index)
            try:
                self.sink.write(result.body)
            except Exception as e:
                error = SinkWriteError(f"Failed to write file #{result.index}: {e}")
                error.__cause__ = e
                self._release_slot()
                self._fail(error)
                return

            if self.metrics.total_tokens is not None:
                self.metrics.total_tokens += result.token_count
            self.metrics.files_written += 1
            self.next_index += 1
            self._release_slot()

    def _finish(self) -> IngestMetrics:
        if self._error is not None:
            self.state = WriterState.DONE
            raise self._error

        if self.pending or self.next_index != self.total_files:
            self.state = WriterState.DONE
            raise ResultLostError(written=self.next_index, expected=self.total_files)

        try:
            self.sink.flush()
        except Exception as e:
            self.state = WriterState.DONE
            raise SinkWriteError(f"Failed to flush output: {e}") from e

        self.state = WriterState.DONE
        log_debug(
            f"[Writer] Wrote {self.metrics.files_written} files "
            f"(peak reorder buffer: {self.metrics.peak_pending})"
        )
        return self.metrics
