"""
Package core.ingestion - Pipeline ingest song song co bao toan thu tu.

Modules:
- types: FileTask, ProcessedResult, IngestMetrics, IngestOptions
- errors: FileReadError (per-file) va IngestError family (fatal)
- classifier: Size ceiling + binary sniff + doc noi dung
- worker: 1 FileTask -> 1 ProcessedResult
- writer: Reorder buffer + ghi ra sink
- sinks: File / stdout / null sinks
- pipeline: ingest() - coordinator
"""

from core.ingestion.errors import (
    IngestCancelledError,
    IngestError,
    ResultLostError,
    SinkWriteError,
)
from core.ingestion.pipeline import ingest
from core.ingestion.sinks import OutputDestination, open_sink
from core.ingestion.types import IngestMetrics, IngestOptions

__all__ = [
    "ingest",
    "open_sink",
    "OutputDestination",
    "IngestMetrics",
    "IngestOptions",
    "IngestError",
    "IngestCancelledError",
    "ResultLostError",
    "SinkWriteError",
]
