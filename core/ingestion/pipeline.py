"""
Ingest Pipeline - Coordinator cua fan-out/fan-in pipeline.

    files -> ThreadPoolExecutor (workers, hoan thanh khong theo thu tu)
          -> queue.Queue(maxsize=channel_capacity)   # backpressure
          -> ReorderWriter (1 thread, khoi phuc thu tu) -> sink

Dam bao:
- Channel chi dong (sentinel) SAU KHI moi worker da xong
- Writer luon duoc join, loi cua writer propagate len caller
- Reorder window (semaphore) gioi han so task da dispatch ma chua ghi,
  nen bo nho bi chiem boi ket qua cho ghi khong phu thuoc tong so file
"""

import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from core.ingestion.errors import IngestCancelledError, ResultLostError
from core.ingestion.sinks import OutputSink
from core.ingestion.types import FileTask, IngestMetrics, IngestOptions
from core.ingestion.worker import process_file
from core.ingestion.writer import CHANNEL_CLOSED, ReorderWriter
from core.logging_config import log_debug, log_info
from core.prompting.decorators.base import ContentDecorator, GlobalDecorator
from core.tokenization.counter import TokenCounter

# Chu ky kiem tra cancel/abort khi dispatcher dang cho slot
SLOT_POLL_INTERVAL = 0.05


def get_worker_count(num_tasks: int, max_workers: Optional[int] = None) -> int:
    """
    Tinh so luong workers.

    - Khong vuot qua max_workers (hoac so CPU cores neu khong chi dinh)
    - Khong nhieu hon so tasks
    - Toi thieu 1 worker

    Args:
        num_tasks: So luong files can xu ly
        max_workers: Gioi han tu caller (None = theo CPU)

    Returns:
        So luong workers
    """
    limit = max_workers if max_workers is not None else (os.cpu_count() or 4)
    return max(1, min(limit, num_tasks))


def _acquire_slot(
    window: Optional[threading.Semaphore],
    should_stop: Callable[[], bool],
) -> bool:
    """
    Cho 1 slot trong reorder window.

    Returns:
        True neu duoc dispatch tiep, False neu pipeline dang dung
    """
    if should_stop():
        return False
    if window is None:
        return True
    while not window.acquire(timeout=SLOT_POLL_INTERVAL):
        if should_stop():
            return False
    return True


def _put_until(
    channel: "queue.Queue[object]",
    item: object,
    writer_done: Callable[[], bool],
) -> bool:
    """
    Put item vao channel, bo cuoc neu writer thread da ket thuc.

    Returns:
        True neu da put, False neu khong con ai rut channel
    """
    while True:
        try:
            channel.put(item, timeout=SLOT_POLL_INTERVAL)
            return True
        except queue.Full:
            if writer_done():
                return False


def _first_worker_error(futures: List["Future[bool]"]) -> Optional[BaseException]:
    for future in futures:
        if future.done() and not future.cancelled():
            error = future.exception()
            if error is not None:
                return error
    return None


def ingest(
    files: Sequence[Path],
    sink: OutputSink,
    decorator: ContentDecorator,
    global_decorator: Optional[GlobalDecorator] = None,
    tokenizer: Optional[TokenCounter] = None,
    options: IngestOptions = IngestOptions(),
    cancel_event: Optional[threading.Event] = None,
) -> IngestMetrics:
    """
    Ingest danh sach file thanh mot digest theo dung thu tu input.

    Args:
        files: Danh sach file, thu tu nay la thu tu cua digest
        sink: Noi ghi digest (chi writer thread ghi)
        decorator: Preset cho tung file
        global_decorator: Prologue (optional)
        tokenizer: TokenCounter (None = khong dem token)
        options: Tham so pipeline
        cancel_event: Set de dung pipeline giua chung (optional)

    Returns:
        IngestMetrics (total_tokens = None neu khong co tokenizer)

    Raises:
        ResultLostError: Mot worker crash ma khong gui ket qua
        SinkWriteError: Khong ghi duoc ra sink
        IngestCancelledError: cancel_event duoc set truoc khi ghi xong
    """
    files = list(files)
    total = len(files)

    channel: "queue.Queue[object]" = queue.Queue(maxsize=options.channel_capacity)
    abort_event = threading.Event()
    window = (
        threading.Semaphore(options.reorder_window)
        if options.reorder_window is not None
        else None
    )

    writer_future: Optional["Future[IngestMetrics]"] = None
    writer = ReorderWriter(
        channel,
        sink,
        total_files=total,
        files=files,
        global_decorator=global_decorator,
        count_tokens=tokenizer is not None,
        window=window,
        abort_event=abort_event,
    )

    def writer_done() -> bool:
        return writer_future is not None and writer_future.done()

    def should_stop() -> bool:
        return writer_done() or abort_event.is_set() or (
            cancel_event is not None and cancel_event.is_set()
        )

    def run_task(task: FileTask) -> bool:
        """Worker function - xu ly 1 file roi day ket qua vao channel."""
        if should_stop():
            return False
        try:
            result = process_file(task, decorator, tokenizer, options)
        except Exception:
            # Khong gui gi: writer se phat hien index bi thieu
            abort_event.set()
            raise
        # Block khi channel day (backpressure)
        return _put_until(channel, result, writer_done)

    num_workers = get_worker_count(total, options.max_workers)
    log_info(f"[Ingest] Processing {total} files with {num_workers} workers")

    futures: List["Future[bool]"] = []
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="ingest-writer") as writer_pool:
        writer_future = writer_pool.submit(writer.run)

        try:
            with ThreadPoolExecutor(
                max_workers=num_workers, thread_name_prefix="ingest-worker"
            ) as pool:
                for index, path in enumerate(files):
                    if not _acquire_slot(window, should_stop):
                        log_debug(f"[Ingest] Dispatch stopped at file #{index}")
                        break
                    futures.append(pool.submit(run_task, FileTask(index=index, path=path)))
        finally:
            # Executor da join moi worker -> khong con ai put nua
            _put_until(channel, CHANNEL_CLOSED, writer_done)

        try:
            metrics = writer_future.result()
        except ResultLostError as e:
            worker_error = _first_worker_error(futures)
            if worker_error is not None:
                raise e from worker_error
            if cancel_event is not None and cancel_event.is_set():
                raise IngestCancelledError(
                    f"Ingest cancelled after {e.written} of {e.expected} files"
                ) from e
            raise

    log_info(
        f"[Ingest] Wrote {metrics.files_written} files"
        + (f", {metrics.total_tokens} tokens" if metrics.total_tokens is not None else "")
    )
    return metrics
