"""
Tests cho ingest() - pipeline song song co bao toan thu tu.

Kiem tra:
- Output giong het ban chay tuan tu, bat ke thu tu hoan thanh cua workers
- Moi file xuat hien dung 1 lan, skip/loi khong lam hong cac file khac
- Reorder buffer bi chan boi reorder window
- Cancel, worker crash va sink loi ket thuc ma khong treo
"""

import io
import random
import sys
import threading
import time
from pathlib import Path
from typing import List

import pytest

from core.ingestion import (
    IngestCancelledError,
    IngestOptions,
    ResultLostError,
    SinkWriteError,
    ingest,
)
from core.ingestion.pipeline import get_worker_count
from core.ingestion.sinks import NullSink, OutputDestination, StreamSink, open_sink
from core.ingestion.types import FileTask
from core.ingestion.worker import process_file
from core.prompting.decorators import (
    DefaultDecorator,
    FileTreePrologue,
    MarkdownDecorator,
)
from core.prompting.decorators.default import SEPARATOR


class _JitterDecorator(DefaultDecorator):
    """DefaultDecorator ngu ngau nhien trong transform de workers xong lon xon."""

    def __init__(self, root: Path, seed: int = 0, max_delay: float = 0.003):
        super().__init__(root=root)
        self._rng = random.Random(seed)
        self._lock = threading.Lock()
        self.max_delay = max_delay

    def transform(self, path: Path, content: str) -> str:
        with self._lock:
            delay = self._rng.uniform(0, self.max_delay)
        time.sleep(delay)
        return content


class _ExplodingDecorator(DefaultDecorator):
    """Transform raise cho mot file cu the (bug trong decorator)."""

    def __init__(self, root: Path, bad_name: str):
        super().__init__(root=root)
        self.bad_name = bad_name

    def transform(self, path: Path, content: str) -> str:
        if path.name == self.bad_name:
            raise RuntimeError("decorator bug")
        return content


class _FailingSink:
    def __init__(self, fail_at: int):
        self.fail_at = fail_at
        self.writes = 0

    def write(self, text: str) -> None:
        self.writes += 1
        if self.writes >= self.fail_at:
            raise OSError("disk full")

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


def _make_files(root: Path, count: int) -> List[Path]:
    files = []
    for i in range(count):
        f = root / f"file_{i:04d}.txt"
        f.write_text(f"content of file {i}\n" * (1 + i % 5))
        files.append(f)
    return files


def _sequential(files: List[Path], decorator) -> str:
    return "".join(
        process_file(FileTask(i, f), decorator).body for i, f in enumerate(files)
    )


def _run(files, decorator, **kwargs) -> str:
    out = io.StringIO()
    ingest(files, StreamSink(out), decorator, **kwargs)
    return out.getvalue()


class TestOrderPreservation:
    """Output theo thu tu input"""

    def test_matches_sequential_output_under_jitter(self, tmp_path: Path):
        files = _make_files(tmp_path, 120)
        expected = _sequential(files, DefaultDecorator(root=tmp_path))

        actual = _run(
            files,
            _JitterDecorator(tmp_path, seed=1),
            options=IngestOptions(max_workers=8),
        )

        assert actual == expected

    def test_input_order_not_alphabetical(self, tmp_path: Path):
        """Thu tu do caller quyet dinh, pipeline khong sort lai"""
        files = list(reversed(_make_files(tmp_path, 20)))
        output = _run(files, DefaultDecorator(root=tmp_path), options=IngestOptions(max_workers=4))

        positions = [output.index(f"FILE: {f.name}\n") for f in files]
        assert positions == sorted(positions)

    def test_worker_count_does_not_change_output(self, tmp_path: Path):
        files = _make_files(tmp_path, 40)
        decorator = MarkdownDecorator(root=tmp_path)

        outputs = {
            _run(files, decorator, options=IngestOptions(max_workers=n))
            for n in (1, 2, 16)
        }
        assert len(outputs) == 1

    def test_idempotent(self, tmp_path: Path):
        files = _make_files(tmp_path, 30)
        first = _run(files, _JitterDecorator(tmp_path, seed=2))
        second = _run(files, _JitterDecorator(tmp_path, seed=3))
        assert first == second

    def test_tiny_channel_and_window(self, tmp_path: Path):
        files = _make_files(tmp_path, 50)
        expected = _sequential(files, DefaultDecorator(root=tmp_path))

        actual = _run(
            files,
            _JitterDecorator(tmp_path, seed=4),
            options=IngestOptions(max_workers=4, channel_capacity=1, reorder_window=1),
        )
        assert actual == expected

    def test_unbounded_window(self, tmp_path: Path):
        files = _make_files(tmp_path, 30)
        expected = _sequential(files, DefaultDecorator(root=tmp_path))
        actual = _run(
            files,
            DefaultDecorator(root=tmp_path),
            options=IngestOptions(max_workers=4, reorder_window=None),
        )
        assert actual == expected


class TestCompleteness:
    """Moi file dung 1 block, skip/loi duoc co lap"""

    def test_example_scenario(self, sample_repo: Path, char_counter):
        files = [sample_repo / "a.txt", sample_repo / "b.bin", sample_repo / "c.txt"]
        out = io.StringIO()

        metrics = ingest(
            files,
            StreamSink(out),
            DefaultDecorator(root=sample_repo),
            tokenizer=char_counter,
        )

        text = out.getvalue()
        assert text.startswith(f"{SEPARATOR}\nFILE: a.txt\n{SEPARATOR}\nhello\n\n")
        assert text.endswith(f"{SEPARATOR}\nFILE: c.txt\n{SEPARATOR}\nworld\n\n")
        assert "*** Skipped: Binary file (" in text
        assert text.index("FILE: a.txt") < text.index("FILE: b.bin") < text.index("FILE: c.txt")
        assert metrics.files_written == 3
        assert metrics.total_tokens == len("hello") + len("world")

    def test_every_file_appears_once(self, tmp_path: Path):
        files = _make_files(tmp_path, 64)
        output = _run(files, _JitterDecorator(tmp_path), options=IngestOptions(max_workers=8))
        for f in files:
            assert output.count(f"FILE: {f.name}\n") == 1

    def test_unreadable_file_does_not_affect_others(self, tmp_path: Path):
        files = _make_files(tmp_path, 5)
        files.insert(2, tmp_path / "deleted.txt")

        output = _run(files, DefaultDecorator(root=tmp_path))

        assert "*** Error: Could not open file (" in output
        for f in files:
            assert f"FILE: {f.name}\n" in output
        assert "content of file 4" in output

    def test_empty_input_without_prologue(self):
        out = io.StringIO()
        metrics = ingest([], StreamSink(out), DefaultDecorator())
        assert out.getvalue() == ""
        assert metrics.files_written == 0

    def test_empty_input_with_prologue(self, char_counter):
        out = io.StringIO()
        metrics = ingest(
            [], StreamSink(out), DefaultDecorator(), FileTreePrologue(), tokenizer=char_counter
        )
        assert out.getvalue() == "Files included in this digest:\n\n"
        assert metrics.total_tokens == 0

    def test_prologue_before_blocks(self, sample_repo: Path):
        files = [sample_repo / "a.txt", sample_repo / "c.txt"]
        out = io.StringIO()
        ingest(
            files,
            StreamSink(out),
            DefaultDecorator(root=sample_repo),
            FileTreePrologue(root=sample_repo),
        )
        assert out.getvalue().startswith(
            f"Files included in this digest:\n- a.txt\n- c.txt\n\n{SEPARATOR}\nFILE: a.txt\n"
        )

    def test_token_total_is_sum_over_transformed(self, tmp_path: Path, char_counter):
        files = _make_files(tmp_path, 25)
        decorator = MarkdownDecorator(root=tmp_path)

        metrics = ingest(files, NullSink(), decorator, tokenizer=char_counter)

        expected = sum(
            len(decorator.transform(f, f.read_text(encoding="utf-8"))) for f in files
        )
        assert metrics.total_tokens == expected

    def test_no_tokenizer_gives_none(self, tmp_path: Path):
        files = _make_files(tmp_path, 3)
        sink = NullSink()
        metrics = ingest(files, sink, DefaultDecorator(root=tmp_path))
        assert metrics.total_tokens is None
        assert sink.chars_discarded == len(_sequential(files, DefaultDecorator(root=tmp_path)))


class TestBoundedMemory:
    """Reorder buffer khong vuot reorder window"""

    def test_peak_pending_within_window(self, tmp_path: Path):
        files = _make_files(tmp_path, 300)
        metrics = ingest(
            files,
            NullSink(),
            _JitterDecorator(tmp_path, seed=5, max_delay=0.002),
            options=IngestOptions(max_workers=8, channel_capacity=4, reorder_window=6),
        )
        assert metrics.files_written == 300
        assert 1 <= metrics.peak_pending <= 6


class TestFailures:
    """Cancel, crash va sink loi"""

    def test_cancel_before_start(self, tmp_path: Path):
        files = _make_files(tmp_path, 10)
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(IngestCancelledError):
            ingest(files, NullSink(), DefaultDecorator(root=tmp_path), cancel_event=cancel)

    def test_cancel_midway(self, tmp_path: Path):
        files = _make_files(tmp_path, 200)
        cancel = threading.Event()

        class _CancellingDecorator(DefaultDecorator):
            def transform(self, path: Path, content: str) -> str:
                if path.name == "file_0010.txt":
                    cancel.set()
                time.sleep(0.001)
                return content

        with pytest.raises(IngestCancelledError):
            ingest(
                files,
                NullSink(),
                _CancellingDecorator(root=tmp_path),
                options=IngestOptions(max_workers=2, reorder_window=4),
                cancel_event=cancel,
            )

    def test_worker_crash_is_reported(self, tmp_path: Path):
        files = _make_files(tmp_path, 30)

        with pytest.raises(ResultLostError) as exc_info:
            ingest(
                files,
                NullSink(),
                _ExplodingDecorator(tmp_path, "file_0005.txt"),
                options=IngestOptions(max_workers=4),
            )

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.written <= 5

    def test_sink_failure_terminates(self, tmp_path: Path):
        """Sink loi khong lam workers bi treo tren channel day"""
        files = _make_files(tmp_path, 200)

        with pytest.raises(SinkWriteError):
            ingest(
                files,
                _FailingSink(fail_at=3),
                DefaultDecorator(root=tmp_path),
                options=IngestOptions(max_workers=4, channel_capacity=2, reorder_window=8),
            )

    def test_unencodable_output_does_not_hang(self, tmp_path: Path):
        """Sink raise UnicodeEncodeError giua chung: ingest() van ket thuc"""
        files = []
        for i in range(200):
            f = tmp_path / f"cafe_{i:03d}.txt"
            f.write_text(f"caf\u00e9 {i}\n", encoding="utf-8")
            files.append(f)
        sink = StreamSink(io.TextIOWrapper(io.BytesIO(), encoding="ascii"))
        errors = []

        def run() -> None:
            try:
                ingest(
                    files,
                    sink,
                    DefaultDecorator(root=tmp_path),
                    options=IngestOptions(max_workers=4, channel_capacity=4, reorder_window=8),
                )
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        thread.join(timeout=10)

        assert not thread.is_alive()
        assert len(errors) == 1
        assert isinstance(errors[0], SinkWriteError)
        assert isinstance(errors[0].__cause__, UnicodeEncodeError)


class TestOpenSink:
    def test_stdout_is_written_as_utf8(self, monkeypatch):
        buffer = io.BytesIO()
        monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(buffer, encoding="ascii"))

        with open_sink(OutputDestination.STDOUT) as sink:
            sink.write("caf\u00e9\n")

        assert buffer.getvalue() == "caf\u00e9\n".encode("utf-8")

    def test_file_destination_requires_path(self):
        with pytest.raises(ValueError):
            with open_sink(OutputDestination.FILE):
                pass


class TestOptions:
    """Validate IngestOptions va get_worker_count"""

    def test_worker_count(self):
        assert get_worker_count(0, 8) == 1
        assert get_worker_count(3, 8) == 3
        assert get_worker_count(100, 8) == 8
        assert get_worker_count(100) >= 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"channel_capacity": 0},
            {"reorder_window": 0},
            {"max_workers": 0},
            {"max_file_size": -1},
        ],
    )
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValueError):
            IngestOptions(**kwargs)
